"""
Service state and hot reload for linkgate.

`ServiceState` bundles everything a request needs (config, storage, creator,
resolver) into one immutable object. `LinkService` owns the current state
and swaps it wholesale on reload, so a request that grabbed `service.state`
keeps a consistent view even if a reload lands mid-request.

Reload rules:
    - The new state is fully built before the swap; on any failure the old
      state stays active and the error propagates.
    - An in-memory store is carried over when the backend stays "memory",
      otherwise its links would vanish on every reload.
"""

import logging
import threading
from dataclasses import dataclass
from typing import Callable, Optional

from .config import AppConfig, load_config
from .manager.allocator import IdentifierAllocator
from .manager.creator import LinkCreator
from .manager.resolver import RedirectResolver
from .storage.base import BaseStorage
from .storage.storage import Storage
from .storage.storage_factory import get_storage

logger = logging.getLogger(__name__)

ConfigLoader = Callable[[], AppConfig]


@dataclass(frozen=True)
class ServiceState:
    config: AppConfig
    storage: BaseStorage
    creator: LinkCreator
    resolver: RedirectResolver


def build_storage(config: AppConfig) -> BaseStorage:
    backend = config.storage_backend
    if backend == "postgres":
        storage = get_storage(backend, dsn=config.DB.dsn(), connect_timeout=config.DB.connect_timeout)
    else:
        storage = get_storage(backend)
    storage.ensure_schema()
    return storage


def build_state(config: AppConfig, storage: Optional[BaseStorage] = None) -> ServiceState:
    """Wire storage, allocator, creator and resolver for one config."""
    storage = storage if storage is not None else build_storage(config)
    allocator = IdentifierAllocator(storage)
    return ServiceState(
        config=config,
        storage=storage,
        creator=LinkCreator(storage, allowed_keys=config.KEYS, allocator=allocator),
        resolver=RedirectResolver(storage),
    )


class LinkService:
    """Owns the active ServiceState and replaces it on reload."""

    def __init__(
        self,
        config: AppConfig,
        storage: Optional[BaseStorage] = None,
        loader: Optional[ConfigLoader] = None,
    ):
        """
        Args:
            config (AppConfig): Initial config.
            storage (Optional[BaseStorage]): Pre-built backend (tests inject one);
                built from config when omitted.
            loader (Optional[ConfigLoader]): Re-reads config on reload;
                defaults to load_config() on LINKGATE_CONFIG.
        """
        self._lock = threading.Lock()
        self._loader = loader or load_config
        self._state = build_state(config, storage)

    @property
    def state(self) -> ServiceState:
        with self._lock:
            return self._state

    def reload(self) -> ServiceState:
        """
        Re-read config and atomically swap in a freshly built state.

        Raises:
            ConfigError: Config could not be loaded.
            StoreError / ValueError: New storage could not be set up.
        """
        config = self._loader()
        current = self.state
        keep = None
        if config.storage_backend == "memory" and isinstance(current.storage, Storage):
            keep = current.storage
        new_state = build_state(config, keep)
        with self._lock:
            self._state = new_state
        logger.info(
            "Config reloaded: backend=%s keys=%d debug=%s",
            config.storage_backend,
            len(config.KEYS),
            config.DEBUG,
        )
        return new_state
