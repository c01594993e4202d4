"""
===============================================================================
DraftStore – keyed persistence for in-progress report documents
-------------------------------------------------------------------------------
Purpose:
    Owns every draft: create/update by id, list, delete, and the
    project cascade used when a project is removed from master data.

Two-phase writes:
    1) local commit   - the in-memory map and the local cache mirror are
                        updated synchronously; the UI sees the change at once.
    2) remote commit  - handed to a RemoteSync (fire-and-forget). Failures
                        are logged and reported to on_remote_error; the local
                        state is NOT rolled back.

    Until the remote commit confirms, the write sits in a pending overlay
    that is laid over every remote listing, so list_all() reflects saves
    and deletes immediately. A failed write stays in the overlay for the
    rest of the session; nothing is replayed.

Concurrency:
    Last writer wins. There is no version check between sessions editing
    the same id.
===============================================================================
"""
from __future__ import annotations

import threading
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Mapping, Optional, Union

from core.common.errors import PartialBatchFailure, StoreUnavailable
from core.helpers.date_time_helper import now_millis
from core.logging.logic.logger import logger
from core.storage.document_store import BatchDeleteResult, DocumentStore
from core.storage.local_cache import LocalCache
from core.storage.remote_sync import InlineRemoteSync
from drafts.logic.payload_sanitizer import strip_heavy_images
from drafts.models.draft import Draft
from drafts.models.report_type import ReportType

COLLECTION = "drafts"
CACHE_KEY = "drafts_cache"

_FEATURE = "Drafts"


class _Deleted:
    """Pending-overlay marker for a delete that has not been confirmed."""

    def __repr__(self) -> str:
        return "<deleted>"


_DELETED = _Deleted()

_Pending = Union[Draft, _Deleted]


@dataclass
class CascadeResult:
    """Outcome of delete_by_project()."""
    project: str
    deleted: List[str] = field(default_factory=list)
    failed: List[str] = field(default_factory=list)

    @property
    def complete(self) -> bool:
        return not self.failed

    def failure(self) -> Optional[PartialBatchFailure]:
        if self.complete:
            return None
        return PartialBatchFailure(self.deleted, self.failed)


class DraftStore:
    """
    Parameters
    ----------
    remote : DocumentStore
        Remote document collection ("drafts").
    cache : LocalCache | None
        Local mirror of the last known draft list.
    sync : InlineRemoteSync | ThreadedRemoteSync
        Executes remote writes, in the order they were made.
    clock : Callable[[], int]
        Epoch milliseconds; lastModified is forced strictly increasing.
    on_remote_error : Callable[[Exception], None] | None
        UI alert hook for failed remote writes.
    """

    def __init__(
        self,
        remote: DocumentStore,
        cache: Optional[LocalCache] = None,
        sync: Optional[InlineRemoteSync] = None,
        *,
        clock: Callable[[], int] = now_millis,
        on_remote_error: Optional[Callable[[Exception], None]] = None,
    ) -> None:
        self._remote = remote
        self._cache = cache
        self._sync = sync or InlineRemoteSync()
        self._clock = clock
        self.on_remote_error = on_remote_error

        self._lock = threading.RLock()
        self._drafts: Dict[str, Draft] = {}
        self._pending: Dict[str, _Pending] = {}
        self._last_ts = 0

        self._load_cache()

    # ------------------------------------------------------------------ #
    #  Reads                                                             #
    # ------------------------------------------------------------------ #
    def list_all(self) -> List[Draft]:
        """
        All drafts, newest first.

        Raises StoreUnavailable when the remote collection cannot be read;
        list_cached() remains usable in that case.
        """
        try:
            docs = self._remote.get_all(COLLECTION, order_by="lastModified", descending=True)
        except StoreUnavailable as exc:
            logger.log(_FEATURE, "ListFailed", level="ERROR", message=str(exc))
            raise

        merged: Dict[str, Draft] = {}
        for doc in docs:
            draft = self._parse(doc)
            if draft is not None:
                merged[draft.id] = draft

        with self._lock:
            for doc_id, pending in self._pending.items():
                if pending is _DELETED:
                    merged.pop(doc_id, None)
                else:
                    merged[doc_id] = pending  # type: ignore[assignment]
            self._drafts = merged
            self._bump_clock(merged.values())
            self._write_cache()
            return self._sorted(merged.values())

    def list_cached(self) -> List[Draft]:
        """Local snapshot, newest first. Never touches the remote store."""
        with self._lock:
            return self._sorted(self._drafts.values())

    def get(self, draft_id: str) -> Optional[Draft]:
        with self._lock:
            pending = self._pending.get(draft_id)
            if pending is _DELETED:
                return None
            if isinstance(pending, Draft):
                return pending
        try:
            doc = self._remote.get_one(COLLECTION, draft_id)
        except StoreUnavailable as exc:
            logger.log(_FEATURE, "GetFailed", level="WARNING", reference_id=draft_id, message=str(exc))
            with self._lock:
                return self._drafts.get(draft_id)
        return self._parse(doc) if doc else None

    def find_by_type_and_project(self, report_type: ReportType | str, project: str) -> List[Draft]:
        """
        Drafts of one type for one project (e.g. the monthly safety plan a
        council report depends on). Empty list when none match.
        """
        report_type = ReportType(report_type)
        return [d for d in self.list_all() if d.type == report_type and d.project == project]

    # ------------------------------------------------------------------ #
    #  Writes                                                            #
    # ------------------------------------------------------------------ #
    def save(self, draft_id: Optional[str], report_type: ReportType | str,
             data: Mapping[str, Any]) -> str:
        """
        Create (draft_id=None) or merge-update a draft; returns the id.

        The caller never sets lastModified. Heavy photo fields are nulled
        before anything is persisted.
        """
        report_type = ReportType(report_type)
        with self._lock:
            doc_id = draft_id or self._remote.new_id(COLLECTION)
            draft = Draft(
                id=doc_id,
                type=report_type,
                data=strip_heavy_images(dict(data), report_type),
                last_modified=self._next_timestamp(),
            )
            self._drafts[doc_id] = draft
            self._pending[doc_id] = draft
            self._write_cache()

        logger.log(_FEATURE, "Save", reference_id=doc_id,
                   message=f"type={report_type.value} created={draft_id is None}")

        document = draft.to_document()
        self._sync.dispatch(
            lambda: self._remote.set_one(COLLECTION, doc_id, document, merge=True),
            on_success=lambda: self._confirm(doc_id, draft),
            on_error=lambda exc: self._remote_failed("Save", doc_id, exc),
        )
        return doc_id

    def delete(self, draft_id: str) -> None:
        """Remove one draft. Deleting an absent id is a no-op."""
        with self._lock:
            self._drafts.pop(draft_id, None)
            self._pending[draft_id] = _DELETED
            self._write_cache()

        logger.log(_FEATURE, "Delete", reference_id=draft_id)
        self._sync.dispatch(
            lambda: self._remote.delete_one(COLLECTION, draft_id),
            on_success=lambda: self._confirm(draft_id, _DELETED),
            on_error=lambda exc: self._remote_failed("Delete", draft_id, exc),
        )

    def delete_by_project(self, project: str) -> CascadeResult:
        """
        Delete every draft whose data.project equals *project*.

        Irreversible; callers gate it behind the admin password (see
        masterdata.logic.project_removal). Best effort: deletes that went
        through are kept even when others fail.
        """
        # remote writes still queued for these drafts would bring them back
        self._sync.wait_idle()
        try:
            candidates = self.list_all()
        except StoreUnavailable:
            logger.log(_FEATURE, "DeleteByProject", level="WARNING", message="remote listing failed; using local mirror")
            candidates = self.list_cached()

        ids = [d.id for d in candidates if d.project == project]
        with self._lock:
            for doc_id in ids:
                self._drafts.pop(doc_id, None)
                self._pending.pop(doc_id, None)
            self._write_cache()

        if not ids:
            logger.log(_FEATURE, "DeleteByProject", message=f"project={project!r} matched=0")
            return CascadeResult(project=project)

        try:
            batch = self._remote.delete_many(COLLECTION, ids)
        except StoreUnavailable as exc:
            logger.log(_FEATURE, "DeleteByProject", level="ERROR", message=str(exc))
            batch = BatchDeleteResult(deleted=[], failed=list(ids))

        result = CascadeResult(project=project, deleted=list(batch.deleted), failed=list(batch.failed))
        failure = result.failure()
        if failure is not None:
            with self._lock:
                for doc_id in result.failed:
                    self._pending[doc_id] = _DELETED
            logger.log(_FEATURE, "DeleteByProjectPartial", level="WARNING",
                       message=f"project={project!r} {failure} failed_ids={failure.failed_ids}")
        logger.log(_FEATURE, "DeleteByProject",
                   message=f"project={project!r} deleted={len(result.deleted)} failed={len(result.failed)}")
        return result

    # ------------------------------------------------------------------ #
    #  Remote callbacks                                                  #
    # ------------------------------------------------------------------ #
    def _confirm(self, doc_id: str, written: _Pending) -> None:
        with self._lock:
            # a newer local write may already have replaced the entry
            if self._pending.get(doc_id) is written:
                del self._pending[doc_id]

    def _remote_failed(self, action: str, doc_id: str, exc: Exception) -> None:
        logger.log(_FEATURE, f"{action}RemoteFailed", level="ERROR", reference_id=doc_id, message=str(exc))
        if self.on_remote_error is not None:
            self.on_remote_error(exc)

    # ------------------------------------------------------------------ #
    #  Internal helpers                                                  #
    # ------------------------------------------------------------------ #
    def _next_timestamp(self) -> int:
        ts = max(int(self._clock()), self._last_ts + 1)
        self._last_ts = ts
        return ts

    def _bump_clock(self, drafts) -> None:
        for d in drafts:
            if d.last_modified > self._last_ts:
                self._last_ts = d.last_modified

    @staticmethod
    def _sorted(drafts) -> List[Draft]:
        return sorted(drafts, key=lambda d: d.last_modified, reverse=True)

    @staticmethod
    def _parse(doc: Mapping[str, Any]) -> Optional[Draft]:
        try:
            return Draft.from_document(dict(doc))
        except (KeyError, ValueError, TypeError) as exc:
            logger.log(_FEATURE, "SkipMalformed", level="WARNING",
                       reference_id=str(doc.get("id")), message=str(exc))
            return None

    def _load_cache(self) -> None:
        if self._cache is None:
            return
        try:
            cached = self._cache.get(CACHE_KEY) or []
        except StoreUnavailable as exc:
            logger.log(_FEATURE, "CacheReadFailed", level="WARNING", message=str(exc))
            return
        for doc in cached:
            draft = self._parse(doc)
            if draft is not None:
                self._drafts[draft.id] = draft
        self._bump_clock(self._drafts.values())

    def _write_cache(self) -> None:
        if self._cache is None:
            return
        try:
            self._cache.set(CACHE_KEY, [d.to_document() for d in self._sorted(self._drafts.values())])
        except StoreUnavailable as exc:
            # the remote write still proceeds
            logger.log(_FEATURE, "CacheWriteFailed", level="WARNING", message=str(exc))
