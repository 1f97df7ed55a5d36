"""
Runtime configuration for linkgate
==================================

Two layers:

Process settings (environment, read only here)
----------------------------------------------
- LINKGATE_CONFIG          : path of the JSON service config (default "config.json")
- LINKGATE_STORAGE_BACKEND : backend when the config does not name one ("memory")
- LINKGATE_NOT_FOUND_PAGE  : HTML document served with 404s (default "404.html")

Service config (JSON document, reloadable)
------------------------------------------
    {
        "DB": {"host": "127.0.0.1", "port": 5432, "user": "linkgate",
               "password": "secret", "database": "linkgate"},
        "KEYS": ["validKey"],
        "LISTEN": ["0.0.0.0", "8080"],
        "DEBUG": false,
        "STORAGE": "postgres",
        "HOME": "/_docs"
    }

Core components never read files; they receive an AppConfig (or pieces of
it) from the service layer.
"""

import json
import os
from typing import List, Optional, Tuple

from psycopg.conninfo import make_conninfo
from pydantic import BaseModel, ConfigDict, Field, ValidationError

from .errors import ConfigError


class _Settings:
    """Environment-backed settings, read at access time."""

    @property
    def CONFIG_PATH(self) -> str:
        return os.getenv("LINKGATE_CONFIG", "config.json")

    @property
    def STORAGE_BACKEND(self) -> str:
        return os.getenv("LINKGATE_STORAGE_BACKEND", "memory").strip().lower()

    @property
    def NOT_FOUND_PAGE(self) -> str:
        return os.getenv("LINKGATE_NOT_FOUND_PAGE", "404.html")


settings = _Settings()


class DBConfig(BaseModel):
    """PostgreSQL connection parameters."""

    model_config = ConfigDict(extra="ignore")

    host: str = "127.0.0.1"
    port: Optional[int] = None
    user: str = ""
    password: str = ""
    database: str = ""
    connect_timeout: int = Field(5, ge=1)
    url: Optional[str] = None  # full DSN; wins over the fields above

    def dsn(self) -> str:
        if self.url:
            return self.url
        params = {
            "host": self.host,
            "port": self.port,
            "user": self.user,
            "password": self.password,
            "dbname": self.database,
        }
        return make_conninfo(**{k: v for k, v in params.items() if v not in (None, "")})


class AppConfig(BaseModel):
    """Validated service config document."""

    model_config = ConfigDict(extra="ignore", frozen=True)

    DB: DBConfig = Field(default_factory=DBConfig)
    KEYS: List[str] = Field(default_factory=list)
    LISTEN: Tuple[str, int] = ("127.0.0.1", 8080)
    DEBUG: bool = False
    STORAGE: Optional[str] = None
    HOME: str = "/_docs"

    @property
    def storage_backend(self) -> str:
        return (self.STORAGE or settings.STORAGE_BACKEND).strip().lower()


def load_config(path: Optional[str] = None) -> AppConfig:
    """
    Read and validate the JSON service config.

    Args:
        path (Optional[str]): File to read; defaults to LINKGATE_CONFIG.

    Returns:
        AppConfig: Validated config.

    Raises:
        ConfigError: Missing/unreadable file, bad JSON, or schema mismatch.
    """
    path = path or settings.CONFIG_PATH
    try:
        with open(path, "r", encoding="utf-8") as f:
            data = json.load(f)
    except OSError as exc:
        raise ConfigError(f"cannot read config {path}: {exc}") from exc
    except json.JSONDecodeError as exc:
        raise ConfigError(f"invalid JSON in config {path}: {exc}") from exc

    try:
        return AppConfig.model_validate(data)
    except ValidationError as exc:
        raise ConfigError(f"invalid config {path}: {exc}") from exc
