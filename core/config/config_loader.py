"""
Thin wrapper delegating to :mod:`config_service`.

Exports the resolved database paths as module constants so that
repositories can import them the same way everywhere:

- APP_DB_PATH    : SQLite file backing the document store
- CACHE_DB_PATH  : SQLite key-value local cache
- LOG_DB_PATH    : SQLite log database
"""
from __future__ import annotations

from pathlib import Path
from threading import RLock

from .config_service import ConfigService, config_service

__all__ = [
    "ConfigLoader",
    "config_loader",
    "APP_DB_PATH",
    "CACHE_DB_PATH",
    "LOG_DB_PATH",
]


class ConfigLoader:
    """Singleton facade over :class:`ConfigService` returning ready-to-use paths."""
    _instance: "ConfigLoader | None" = None
    _lock = RLock()

    def __new__(cls) -> "ConfigLoader":
        with cls._lock:
            if cls._instance is None:
                cls._instance = super().__new__(cls)
                cls._instance._service = config_service
            return cls._instance

    @property
    def service(self) -> ConfigService:
        return self._service

    def get_app_db_path(self) -> Path:
        return self._service.database.app_data

    def get_cache_db_path(self) -> Path:
        return self._service.database.local_cache

    def get_logging_db_path(self) -> Path:
        return self._service.database.logging


config_loader: ConfigLoader = ConfigLoader()

APP_DB_PATH: Path = config_loader.get_app_db_path()
CACHE_DB_PATH: Path = config_loader.get_cache_db_path()
LOG_DB_PATH: Path = config_loader.get_logging_db_path()
