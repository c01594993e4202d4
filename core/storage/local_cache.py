"""
Local persistent cache – string-keyed, synchronous, survives restarts.

Mirrors the last known remote state (drafts, master data) for fast and
offline-tolerant reads. Values are stored as JSON.
"""
from __future__ import annotations

import json
import sqlite3
from pathlib import Path
from threading import RLock
from typing import Any, Dict, Optional, Protocol

from core.common.db_interface import SQLiteRepository
from core.common.errors import StoreUnavailable

CACHE_COLLECTION = "local_cache"


class LocalCache(Protocol):
    def get(self, key: str) -> Optional[Any]:
        ...

    def set(self, key: str, value: Any) -> None:
        ...


def _to_json(v: Any) -> str:
    return json.dumps(v, ensure_ascii=False)


def _from_json(txt: str) -> Any:
    try:
        return json.loads(txt)
    except ValueError:
        return None


class SQLiteLocalCache(SQLiteRepository):
    """Failures surface as StoreUnavailable (collection 'local_cache')."""

    def __init__(self, db_path: Path) -> None:
        super().__init__(db_path, check_same_thread=False)
        self._lock = RLock()
        with self._lock:
            self.conn.execute(
                "CREATE TABLE IF NOT EXISTS cache (key TEXT PRIMARY KEY, value TEXT NOT NULL)"
            )
            self.conn.commit()

    def get(self, key: str) -> Optional[Any]:
        try:
            with self._lock:
                row = self.conn.execute("SELECT value FROM cache WHERE key = ?", (key,)).fetchone()
        except sqlite3.Error as exc:
            raise StoreUnavailable("cache_get", CACHE_COLLECTION, key, cause=exc) from exc
        return _from_json(row["value"]) if row else None

    def set(self, key: str, value: Any) -> None:
        try:
            with self._lock, self.conn:
                self.conn.execute(
                    """
                    INSERT INTO cache (key, value) VALUES (?, ?)
                    ON CONFLICT(key) DO UPDATE SET value = excluded.value
                    """,
                    (key, _to_json(value)),
                )
        except sqlite3.Error as exc:
            raise StoreUnavailable("cache_set", CACHE_COLLECTION, key, cause=exc) from exc


class MemoryLocalCache:
    """Non-persistent cache for the ``memory`` storage backend."""

    def __init__(self) -> None:
        self._data: Dict[str, str] = {}

    def get(self, key: str) -> Optional[Any]:
        txt = self._data.get(key)
        return _from_json(txt) if txt is not None else None

    def set(self, key: str, value: Any) -> None:
        self._data[key] = _to_json(value)
