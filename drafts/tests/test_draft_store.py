"""DraftStore: id stability, optimistic local state, cascade deletes."""
from __future__ import annotations

import time
from pathlib import Path
from typing import Iterable, List, Set

import pytest

from core.common.errors import StoreUnavailable
from core.storage.document_store import BatchDeleteResult
from core.storage.local_cache import SQLiteLocalCache
from core.storage.memory_document_store import InMemoryDocumentStore
from core.storage.remote_sync import InlineRemoteSync, ThreadedRemoteSync
from drafts.logic.draft_store import CACHE_KEY, COLLECTION, DraftStore
from drafts.models.report_type import ReportType


class FlakyStore(InMemoryDocumentStore):
    """In-memory store whose operations can be switched to fail."""

    def __init__(self) -> None:
        super().__init__()
        self.fail_reads = False
        self.fail_writes = False
        self.fail_delete_ids: Set[str] = set()

    def get_all(self, collection, *, order_by=None, descending=True):
        if self.fail_reads:
            raise StoreUnavailable("get_all", collection)
        return super().get_all(collection, order_by=order_by, descending=descending)

    def get_one(self, collection, doc_id):
        if self.fail_reads:
            raise StoreUnavailable("get_one", collection, doc_id)
        return super().get_one(collection, doc_id)

    def set_one(self, collection, doc_id, document, *, merge=False):
        if self.fail_writes:
            raise StoreUnavailable("set_one", collection, doc_id)
        super().set_one(collection, doc_id, document, merge=merge)

    def delete_one(self, collection, doc_id):
        if self.fail_writes:
            raise StoreUnavailable("delete_one", collection, doc_id)
        super().delete_one(collection, doc_id)

    def delete_many(self, collection, doc_ids: Iterable[str]) -> BatchDeleteResult:
        result = BatchDeleteResult()
        for doc_id in doc_ids:
            if doc_id in self.fail_delete_ids:
                result.failed.append(doc_id)
            else:
                super().delete_one(collection, doc_id)
                result.deleted.append(doc_id)
        return result


class FixedClock:
    def __init__(self, value: int = 1_000) -> None:
        self.value = value

    def __call__(self) -> int:
        return self.value


@pytest.fixture
def remote() -> FlakyStore:
    return FlakyStore()


@pytest.fixture
def cache(tmp_path: Path) -> SQLiteLocalCache:
    c = SQLiteLocalCache(tmp_path / "cache.db")
    yield c
    c.close()


@pytest.fixture
def errors() -> List[Exception]:
    return []


@pytest.fixture
def store(remote, cache, errors) -> DraftStore:
    return DraftStore(remote, cache, InlineRemoteSync(), clock=FixedClock(), on_remote_error=errors.append)


def test_save_then_update_keeps_one_document(store: DraftStore) -> None:
    draft_id = store.save(None, ReportType.SAFETY_TRAINING, {"project": "A", "v": 1})
    again = store.save(draft_id, ReportType.SAFETY_TRAINING, {"project": "A", "v": 2})
    assert again == draft_id

    drafts = store.list_all()
    assert len(drafts) == 1
    assert drafts[0].id == draft_id
    assert drafts[0].data == {"project": "A", "v": 2}


def test_save_with_unknown_id_creates_it(store: DraftStore, remote: FlakyStore) -> None:
    assert store.save("fixed-id", "SAFETY_PLAN", {"project": "A"}) == "fixed-id"
    assert remote.get_one(COLLECTION, "fixed-id")["type"] == "SAFETY_PLAN"


def test_last_modified_set_by_store_and_strictly_increasing(store: DraftStore) -> None:
    a = store.save(None, ReportType.SAFETY_PLAN, {"lastModified": 5})
    b = store.save(None, ReportType.SAFETY_PLAN, {})
    c = store.save(a, ReportType.SAFETY_PLAN, {})
    by_id = {d.id: d for d in store.list_all()}
    assert by_id[a].last_modified == by_id[c].last_modified
    assert by_id[b].last_modified > 1_000 - 1
    assert by_id[c].last_modified > by_id[b].last_modified
    assert [d.id for d in store.list_all()] == [a, b]


def test_list_orders_newest_first(remote, cache) -> None:
    clock = FixedClock(100)
    store = DraftStore(remote, cache, clock=clock)
    first = store.save(None, ReportType.DISASTER_COUNCIL, {})
    clock.value = 500
    second = store.save(None, ReportType.DISASTER_COUNCIL, {})
    clock.value = 300
    store.save(first, ReportType.DISASTER_COUNCIL, {"edited": True})
    assert [d.id for d in store.list_all()] == [first, second]


def test_photo_is_stripped_but_signatures_kept(store: DraftStore, remote: FlakyStore) -> None:
    draft_id = store.save(None, ReportType.SAFETY_TRAINING, {
        "photoUrl": "data:image/jpeg;base64,AAAA",
        "signatureDataUrl": "data:image/png;base64,BBBB",
    })
    stored = remote.get_one(COLLECTION, draft_id)["data"]
    assert "photoUrl" in stored and stored["photoUrl"] is None
    assert stored["signatureDataUrl"] == "data:image/png;base64,BBBB"
    assert store.list_cached()[0].data["photoUrl"] is None


def test_photo_kept_for_other_report_types(store: DraftStore, remote: FlakyStore) -> None:
    draft_id = store.save(None, ReportType.SAFETY_PLAN, {"photoUrl": "x"})
    assert remote.get_one(COLLECTION, draft_id)["data"]["photoUrl"] == "x"


def test_caller_payload_is_not_mutated(store: DraftStore) -> None:
    payload = {"photoUrl": "data:x", "nested": {"a": 1}}
    store.save(None, ReportType.SAFETY_TRAINING, payload)
    assert payload["photoUrl"] == "data:x"


def test_remote_failure_keeps_optimistic_state(store, remote, errors) -> None:
    remote.fail_writes = True
    draft_id = store.save(None, ReportType.SAFETY_TRAINING, {"project": "A"})
    assert len(errors) == 1
    assert isinstance(errors[0], StoreUnavailable)
    assert [d.id for d in store.list_cached()] == [draft_id]

    # remote never received it, the pending overlay still shows it
    remote.fail_writes = False
    assert remote.get_one(COLLECTION, draft_id) is None
    assert [d.id for d in store.list_all()] == [draft_id]


def test_list_failure_raises_store_unavailable(store, remote) -> None:
    store.save(None, ReportType.SAFETY_TRAINING, {})
    remote.fail_reads = True
    with pytest.raises(StoreUnavailable):
        store.list_all()
    assert len(store.list_cached()) == 1


def test_delete_is_idempotent(store: DraftStore) -> None:
    draft_id = store.save(None, ReportType.SAFETY_TRAINING, {})
    store.delete(draft_id)
    store.delete(draft_id)
    store.delete("never-existed")
    assert store.list_all() == []


def test_failed_delete_stays_hidden(store, remote, errors) -> None:
    draft_id = store.save(None, ReportType.SAFETY_TRAINING, {})
    remote.fail_writes = True
    store.delete(draft_id)
    assert len(errors) == 1
    remote.fail_writes = False
    assert remote.get_one(COLLECTION, draft_id) is not None
    assert store.list_all() == []
    assert store.get(draft_id) is None


def test_cascade_deletes_exactly_matching_project(store: DraftStore) -> None:
    for i in range(3):
        store.save(None, ReportType.SAFETY_TRAINING, {"project": "X", "i": i})
    store.save(None, ReportType.SAFETY_PLAN, {"project": "X"})
    keep = [
        store.save(None, ReportType.SAFETY_TRAINING, {"project": "Y"}),
        store.save(None, ReportType.SAFETY_PLAN, {"project": "X2"}),
        store.save(None, ReportType.NEWCOMER_SURVEY, {}),
    ]

    result = store.delete_by_project("X")
    assert result.complete
    assert len(result.deleted) == 4

    remaining = store.list_all()
    assert sorted(d.id for d in remaining) == sorted(keep)
    assert all(d.project != "X" for d in remaining)


def test_cascade_with_no_match(store: DraftStore) -> None:
    store.save(None, ReportType.SAFETY_TRAINING, {"project": "Y"})
    result = store.delete_by_project("X")
    assert result.deleted == [] and result.failed == []
    assert len(store.list_all()) == 1


def test_cascade_partial_failure_keeps_successful_deletes(store, remote) -> None:
    ids = [store.save(None, ReportType.SAFETY_TRAINING, {"project": "X"}) for _ in range(3)]
    remote.fail_delete_ids = {ids[1]}

    result = store.delete_by_project("X")
    assert not result.complete
    assert result.failed == [ids[1]]
    assert sorted(result.deleted) == sorted([ids[0], ids[2]])
    assert result.failure() is not None
    assert result.failure().failed_ids == [ids[1]]

    assert remote.get_one(COLLECTION, ids[0]) is None
    assert remote.get_one(COLLECTION, ids[1]) is not None
    assert store.list_all() == []


def test_cascade_falls_back_to_local_mirror(store, remote) -> None:
    store.save(None, ReportType.SAFETY_TRAINING, {"project": "X"})
    store.save(None, ReportType.SAFETY_TRAINING, {"project": "Y"})
    remote.fail_reads = True
    result = store.delete_by_project("X")
    assert len(result.deleted) == 1
    assert [d.project for d in store.list_cached()] == ["Y"]


def test_find_by_type_and_project(store: DraftStore) -> None:
    plan = store.save(None, ReportType.SAFETY_PLAN, {"project": "A"})
    store.save(None, ReportType.SAFETY_TRAINING, {"project": "A"})
    store.save(None, ReportType.SAFETY_PLAN, {"project": "B"})

    found = store.find_by_type_and_project(ReportType.SAFETY_PLAN, "A")
    assert [d.id for d in found] == [plan]
    assert store.find_by_type_and_project("SAFETY_PLAN", "none") == []


def test_cache_mirror_survives_restart(remote, cache) -> None:
    first = DraftStore(remote, cache, clock=FixedClock(2_000))
    draft_id = first.save(None, ReportType.SAFETY_PLAN, {"project": "A"})
    assert cache.get(CACHE_KEY)[0]["id"] == draft_id

    second = DraftStore(remote, cache, clock=FixedClock(10))
    assert [d.id for d in second.list_cached()] == [draft_id]
    # clock behind the cached timestamps still moves forward
    newer = second.save(None, ReportType.SAFETY_PLAN, {})
    assert second.list_cached()[0].id == newer


def test_get_reads_remote_then_mirror(store, remote) -> None:
    draft_id = store.save(None, ReportType.SAFETY_PLAN, {"project": "A"})
    assert store.get(draft_id).project == "A"
    remote.fail_reads = True
    assert store.get(draft_id).project == "A"
    assert store.get("missing") is None


def test_malformed_remote_documents_are_skipped(store, remote) -> None:
    remote.set_one(COLLECTION, "bad", {"type": "UNKNOWN", "data": {}, "lastModified": 1})
    good = store.save(None, ReportType.SAFETY_PLAN, {})
    assert [d.id for d in store.list_all()] == [good]


# ---------------------------------------------------------------------- #
#  Background remote writes                                              #
# ---------------------------------------------------------------------- #
class SlowWriteStore(InMemoryDocumentStore):
    """Remote whose set_one takes the next delay from a list (default 0)."""

    def __init__(self, delays=()) -> None:
        super().__init__()
        self.delays = list(delays)
        self.default_delay = 0.0

    def set_one(self, collection, doc_id, document, *, merge=False):
        time.sleep(self.delays.pop(0) if self.delays else self.default_delay)
        super().set_one(collection, doc_id, document, merge=merge)


def test_threaded_sequential_saves_keep_the_latest(cache) -> None:
    remote = SlowWriteStore(delays=[0.0, 0.3, 0.0])
    sync = ThreadedRemoteSync()
    store = DraftStore(remote, cache, sync)

    draft_id = store.save(None, ReportType.SAFETY_TRAINING, {"v": 0})
    store.save(draft_id, ReportType.SAFETY_TRAINING, {"v": 1})
    store.save(draft_id, ReportType.SAFETY_TRAINING, {"v": 2})
    assert sync.wait_idle(timeout=5)

    assert [d.data["v"] for d in store.list_all()] == [2]
    assert remote.get_one(COLLECTION, draft_id)["data"] == {"v": 2}


def test_threaded_cascade_waits_for_saves_in_flight(cache) -> None:
    remote = SlowWriteStore()
    remote.default_delay = 0.3
    sync = ThreadedRemoteSync()
    store = DraftStore(remote, cache, sync)

    store.save(None, ReportType.SAFETY_PLAN, {"project": "X"})
    keep = store.save(None, ReportType.SAFETY_PLAN, {"project": "Y"})
    result = store.delete_by_project("X")
    assert sync.wait_idle(timeout=5)

    assert result.complete
    assert len(result.deleted) == 1
    assert [d.id for d in store.list_all()] == [keep]
    assert [d["id"] for d in remote.get_all(COLLECTION)] == [keep]
