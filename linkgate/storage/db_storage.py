"""
DBStorage – PostgreSQL-backed link storage for linkgate
=======================================================

Persists links in PostgreSQL and implements the same `BaseStorage` contract
as the in-memory `Storage`, so the backend can be switched from config
without touching the manager or API code.

Key Design Points
-----------------
- **Uniqueness**: `id` is the primary key. `save_link` uses
  `ON CONFLICT (id) DO NOTHING` and checks the rowcount; a zero rowcount
  means another request won the race and becomes `DuplicateLinkError`.
- **Connections**: `psycopg` 3, one short autocommit connection per call,
  bounded by `connect_timeout`. Swap `_conn()` for a pool if QPS grows.
- **Errors**: every `psycopg.Error` is logged and re-raised as `StoreError`;
  query text and DSN never leave this module.
- **Range**: ids are BIGINT. A decoded token above 2**63 - 1 cannot be
  stored, so lookups for it short-circuit to "absent".

Schema
------
    CREATE TABLE IF NOT EXISTS links (
        id       BIGINT PRIMARY KEY,
        link     TEXT   NOT NULL,
        validity BIGINT
    );

Example
-------
>>> storage = DBStorage(dsn="host=127.0.0.1 dbname=linkgate user=linkgate")
>>> storage.save_link(8, "https://example.com")
>>> storage.get_link(8).target
'https://example.com'
"""

import contextlib
import logging
from typing import Optional

import psycopg

from ..errors import DuplicateLinkError, StoreError
from ..models import Link
from .base import BaseStorage

logger = logging.getLogger(__name__)

MAX_BIGINT = 2**63 - 1

SCHEMA_SQL = """
CREATE TABLE IF NOT EXISTS links (
    id       BIGINT PRIMARY KEY,
    link     TEXT   NOT NULL,
    validity BIGINT
)
"""


class DBStorage(BaseStorage):
    """PostgreSQL implementation of the link storage contract.

    Parameters
    ----------
    dsn : str
        libpq connection string or URL.
    connect_timeout : int
        Seconds to wait for a connection before failing with StoreError.
    """

    def __init__(self, dsn: str, connect_timeout: int = 5) -> None:
        self.dsn = dsn
        self.connect_timeout = connect_timeout

    # ---- Internal helpers -------------------------------------------------

    @contextlib.contextmanager
    def _conn(self):
        """Open an autocommit connection; translate driver errors to StoreError."""
        con = None
        try:
            con = psycopg.connect(self.dsn, connect_timeout=self.connect_timeout)
            con.autocommit = True
            yield con
        except psycopg.Error as exc:
            logger.error("Link store query failed: %s", exc)
            raise StoreError("link store unavailable") from exc
        finally:
            if con is not None:
                con.close()

    # ---- Contract methods -------------------------------------------------

    def ensure_schema(self) -> None:
        with self._conn() as con, con.cursor() as cur:
            cur.execute(SCHEMA_SQL)
        logger.info("Link table ready")

    def get_link(self, link_id: int) -> Optional[Link]:
        """Return the row for link_id, or None if not found."""
        if link_id > MAX_BIGINT:
            return None
        with self._conn() as con, con.cursor() as cur:
            cur.execute("SELECT id, link, validity FROM links WHERE id = %s", (link_id,))
            row = cur.fetchone()
        if row is None:
            return None
        return Link(id=row[0], target=row[1], expiry=row[2])

    def save_link(self, link_id: int, target: str, expiry: Optional[int] = None) -> None:
        """Insert (id, link, validity).

        Raises
        ------
        DuplicateLinkError
            If the id already exists (rowcount 0 after ON CONFLICT DO NOTHING).
        StoreError
            On connection or query failure, or an id outside BIGINT range.
        """
        if link_id > MAX_BIGINT:
            raise StoreError(f"link id {link_id} out of range")
        with self._conn() as con, con.cursor() as cur:
            cur.execute(
                """
                INSERT INTO links (id, link, validity)
                VALUES (%s, %s, %s)
                ON CONFLICT (id) DO NOTHING
                """,
                (link_id, target, expiry),
            )
            inserted = cur.rowcount == 1
        if not inserted:
            raise DuplicateLinkError(f"link id {link_id} already exists")
        logger.debug("Inserted link id=%s", link_id)

    def delete_link(self, link_id: int) -> bool:
        """Delete by id. Returns True if a row was removed."""
        if link_id > MAX_BIGINT:
            return False
        with self._conn() as con, con.cursor() as cur:
            cur.execute("DELETE FROM links WHERE id = %s", (link_id,))
            return cur.rowcount == 1
