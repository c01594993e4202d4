"""
===============================================================================
MasterDataStore – read/replace of the single master data document
-------------------------------------------------------------------------------
get():
    remote document merged over the defaults. Never fails the caller:
      remote absent      -> built-in defaults
      remote read error  -> local cache copy, else defaults (logged)
    A replace() whose remote commit has not confirmed (or failed) wins over
    the remote copy for the rest of the session.

replace():
    Whole-document overwrite. The local cache is committed first, the
    remote write is fire-and-forget through RemoteSync; a remote failure is
    logged and reported to on_remote_error without rolling back.
===============================================================================
"""
from __future__ import annotations

import threading
from typing import Callable, Optional

from core.common.errors import StoreUnavailable
from core.logging.logic.logger import logger
from core.storage.document_store import DocumentStore
from core.storage.local_cache import LocalCache
from core.storage.remote_sync import InlineRemoteSync
from masterdata.models.master_data import MasterData

COLLECTION = "masterData"
DOC_ID = "general"
CACHE_KEY = "master_cache"

_FEATURE = "MasterData"


class MasterDataStore:
    def __init__(
        self,
        remote: DocumentStore,
        cache: Optional[LocalCache] = None,
        sync: Optional[InlineRemoteSync] = None,
        *,
        on_remote_error: Optional[Callable[[Exception], None]] = None,
    ) -> None:
        self._remote = remote
        self._cache = cache
        self._sync = sync or InlineRemoteSync()
        self.on_remote_error = on_remote_error
        self._lock = threading.RLock()
        self._pending: Optional[MasterData] = None

    # ------------------------------------------------------------------ #
    def get(self) -> MasterData:
        with self._lock:
            if self._pending is not None:
                return self._pending
        try:
            doc = self._remote.get_one(COLLECTION, DOC_ID)
        except StoreUnavailable as exc:
            logger.log(_FEATURE, "ReadFailed", level="WARNING", message=str(exc))
            return self.cached()

        if doc is None:
            return MasterData.defaults()
        data = MasterData.from_document(doc)
        self._write_cache(data)
        return data

    def cached(self) -> MasterData:
        """Last known copy from the local cache, or the defaults."""
        if self._cache is None:
            return MasterData.defaults()
        try:
            return MasterData.from_document(self._cache.get(CACHE_KEY))
        except StoreUnavailable as exc:
            logger.log(_FEATURE, "CacheReadFailed", level="WARNING", message=str(exc))
            return MasterData.defaults()

    def replace(self, data: MasterData) -> None:
        with self._lock:
            self._pending = data
            self._write_cache(data)
        logger.log(_FEATURE, "Replace")

        document = data.to_document()
        self._sync.dispatch(
            lambda: self._remote.set_one(COLLECTION, DOC_ID, document, merge=False),
            on_success=lambda: self._confirm(data),
            on_error=self._remote_failed,
        )

    # ------------------------------------------------------------------ #
    def _confirm(self, written: MasterData) -> None:
        with self._lock:
            if self._pending is written:
                self._pending = None

    def _remote_failed(self, exc: Exception) -> None:
        logger.log(_FEATURE, "ReplaceRemoteFailed", level="ERROR", reference_id=DOC_ID, message=str(exc))
        if self.on_remote_error is not None:
            self.on_remote_error(exc)

    def _write_cache(self, data: MasterData) -> None:
        if self._cache is None:
            return
        try:
            self._cache.set(CACHE_KEY, data.to_document())
        except StoreUnavailable as exc:
            logger.log(_FEATURE, "CacheWriteFailed", level="WARNING", message=str(exc))
