# core/common/app_context.py
"""
Runtime composition of SafetyFormsPy services.

IMPORTANT ARCHITECTURE RULE:
- ConfigService is the SINGLE source of truth for paths and options.
- Stores are built here and handed to the views; nothing else creates them
  and no module keeps them in a global.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Optional

from core.config.config_service import ConfigService, config_service
from core.storage.document_store import DocumentStore
from core.storage.local_cache import LocalCache, MemoryLocalCache, SQLiteLocalCache
from core.storage.memory_document_store import InMemoryDocumentStore
from core.storage.remote_sync import InlineRemoteSync, ThreadedRemoteSync
from core.storage.sqlite_document_store import SQLiteDocumentStore
from drafts.logic.draft_store import DraftStore
from employees.logic.employee_store import EmployeeStore
from imaging.logic.image_compressor import ImageCompressor
from masterdata.logic.admin_password import AdminPasswordVerifier
from masterdata.logic.master_data_store import MasterDataStore
from masterdata.logic.project_removal import ProjectRemovalService
from signature.models.capture_config import CaptureConfig


@dataclass
class AppContext:
    """Explicit service container (no GUI state)."""
    config: ConfigService
    document_store: DocumentStore
    cache: LocalCache
    sync: InlineRemoteSync
    drafts: DraftStore
    master_data: MasterDataStore
    employees: EmployeeStore
    images: ImageCompressor
    project_removal: ProjectRemovalService

    def capture_config(self, *, keep_open: bool = False) -> CaptureConfig:
        """Capture options from the [Signature] section."""
        s = self.config.signature
        return CaptureConfig(
            line_width=s.line_width,
            pen_only=s.pen_only,
            keep_open_on_save=keep_open,
            settle_delay=s.settle_delay,
            success_indicator=s.success_indicator,
        )

    def set_remote_error_handler(self, handler: Optional[Callable[[Exception], None]]) -> None:
        self.drafts.on_remote_error = handler
        self.master_data.on_remote_error = handler

    def close(self, timeout: float = 5.0) -> None:
        """Wait for outstanding remote writes, then release database handles."""
        self.sync.wait_idle(timeout)
        for res in (self.document_store, self.cache):
            close = getattr(res, "close", None)
            if callable(close):
                close()


def build_app_context(config: Optional[ConfigService] = None) -> AppContext:
    cfg = config or config_service

    if cfg.storage.backend == "memory":
        remote: DocumentStore = InMemoryDocumentStore()
        cache: LocalCache = MemoryLocalCache()
    elif cfg.storage.backend == "sqlite":
        remote = SQLiteDocumentStore(cfg.database.app_data)
        cache = SQLiteLocalCache(cfg.database.local_cache)
    else:
        raise ValueError(f"Unknown storage backend: {cfg.storage.backend!r}")

    sync = ThreadedRemoteSync() if cfg.storage.threaded_sync else InlineRemoteSync()

    drafts = DraftStore(remote, cache, sync)
    master = MasterDataStore(remote, cache, sync)
    removal = ProjectRemovalService(
        master, drafts, AdminPasswordVerifier(cfg.security.admin_password_hash)
    )
    return AppContext(
        config=cfg,
        document_store=remote,
        cache=cache,
        sync=sync,
        drafts=drafts,
        master_data=master,
        employees=EmployeeStore(remote),
        images=ImageCompressor(cfg.imaging.max_width, cfg.imaging.jpeg_quality),
        project_removal=removal,
    )
