"""
Storage factory – pick the link backend from config
===================================================

Centralizes backend selection so the rest of the app never knows where
links live.

- Reads `LINKGATE_STORAGE_BACKEND` **at call time** when no backend is
  passed, so tests can flip it with monkeypatch.
- Imports the Postgres backend only when it is selected.

Backends
--------
- "memory":   in-process dict, lost on restart
- "postgres": DBStorage; requires dsn="..."
"""

import logging
import os
from typing import Optional

from linkgate.storage.storage import Storage

logger = logging.getLogger(__name__)


def get_storage(backend: Optional[str] = None, **kwargs):
    """
    Return a BaseStorage implementation.

    Parameters
    ----------
    backend : str, optional
        "memory" or "postgres". If omitted, reads LINKGATE_STORAGE_BACKEND
        (default "memory").
    kwargs : dict
        For postgres: dsn="..." (required) and connect_timeout=<seconds>.

    Raises
    ------
    ValueError
        Unknown backend, or postgres without a DSN.
    """
    be = (backend or os.getenv("LINKGATE_STORAGE_BACKEND", "memory")).strip().lower()
    logger.info("Selected storage backend: %r", be)

    if be == "memory":
        return Storage()

    if be == "postgres":
        dsn = kwargs.get("dsn")
        if not dsn:
            raise ValueError("dsn is required for postgres backend")
        from linkgate.storage.db_storage import DBStorage

        return DBStorage(dsn=dsn, connect_timeout=kwargs.get("connect_timeout", 5))

    raise ValueError(f"Unknown storage backend: {be!r}")
