"""MasterDataStore fallbacks and ProjectRemovalService orchestration."""
from __future__ import annotations

import tempfile
import time
import unittest
from pathlib import Path

from core.common.errors import StoreUnavailable
from core.storage.local_cache import SQLiteLocalCache
from core.storage.memory_document_store import InMemoryDocumentStore
from core.storage.remote_sync import InlineRemoteSync, ThreadedRemoteSync
from drafts.logic.draft_store import DraftStore
from drafts.models.report_type import ReportType
from masterdata.logic.admin_password import AdminPasswordVerifier, hash_password
from masterdata.logic.master_data_store import COLLECTION, DOC_ID, MasterDataStore
from masterdata.logic.project_removal import ProjectRemovalService
from masterdata.models.master_data import MasterData, DEFAULT_VALUES


class BrokenStore(InMemoryDocumentStore):
    def __init__(self) -> None:
        super().__init__()
        self.fail = False

    def get_one(self, collection, doc_id):
        if self.fail:
            raise StoreUnavailable("get_one", collection, doc_id)
        return super().get_one(collection, doc_id)

    def set_one(self, collection, doc_id, document, *, merge=False):
        if self.fail:
            raise StoreUnavailable("set_one", collection, doc_id)
        super().set_one(collection, doc_id, document, merge=merge)


class TestMasterDataStore(unittest.TestCase):
    def setUp(self) -> None:
        self._tmp = tempfile.TemporaryDirectory()
        self.cache = SQLiteLocalCache(Path(self._tmp.name) / "cache.db")
        self.remote = BrokenStore()
        self.errors: list[Exception] = []
        self.store = MasterDataStore(self.remote, self.cache, InlineRemoteSync(),
                                     on_remote_error=self.errors.append)

    def tearDown(self) -> None:
        self.cache.close()
        self._tmp.cleanup()

    def test_empty_store_returns_defaults(self) -> None:
        data = self.store.get()
        self.assertEqual(data, MasterData.defaults())
        for key in ("projects", "workplaces", "jobTypes", "cautions"):
            self.assertIsInstance(data.items(key), list)

    def test_replace_then_get(self) -> None:
        updated = self.store.get().with_item_added("workplaces", "第1作業所")
        self.store.replace(updated)
        self.assertEqual(self.store.get().workplaces, ["第1作業所"])
        self.assertEqual(self.remote.get_one(COLLECTION, DOC_ID)["workplaces"], ["第1作業所"])

    def test_read_error_falls_back_to_cache_then_defaults(self) -> None:
        self.remote.fail = True
        self.assertEqual(self.store.get(), MasterData.defaults())

        self.remote.fail = False
        self.store.replace(MasterData.defaults().with_items("roles", ["職長"]))
        self.remote.fail = True
        self.assertEqual(self.store.get().roles, ["職長"])

    def test_remote_write_failure_keeps_local_state(self) -> None:
        self.remote.fail = True
        self.store.replace(MasterData.defaults().with_items("roles", ["職長"]))
        self.assertEqual(len(self.errors), 1)
        self.remote.fail = False
        self.assertIsNone(self.remote.get_one(COLLECTION, DOC_ID))
        self.assertEqual(self.store.get().roles, ["職長"])
        self.assertEqual(self.store.cached().roles, ["職長"])

    def test_partial_remote_document_is_completed(self) -> None:
        self.remote.set_one(COLLECTION, DOC_ID, {"projects": ["Only"]})
        data = self.store.get()
        self.assertEqual(data.projects, ["Only"])
        self.assertEqual(data.subcontractors, DEFAULT_VALUES["subcontractors"])


class SlowFirstWriteStore(InMemoryDocumentStore):
    """The first set_one is delayed; later ones go straight through."""

    def __init__(self, delay: float) -> None:
        super().__init__()
        self.delay = delay
        self.calls = 0

    def set_one(self, collection, doc_id, document, *, merge=False):
        self.calls += 1
        if self.calls == 1:
            time.sleep(self.delay)
        super().set_one(collection, doc_id, document, merge=merge)


class TestMasterDataThreadedSync(unittest.TestCase):
    def test_replace_order_is_kept_on_the_remote(self) -> None:
        remote = SlowFirstWriteStore(0.3)
        sync = ThreadedRemoteSync()
        store = MasterDataStore(remote, sync=sync)

        first = MasterData.defaults().with_items("roles", ["職長"])
        second = MasterData.defaults().with_items("roles", ["安全衛生責任者"])
        store.replace(first)
        store.replace(second)
        self.assertTrue(sync.wait_idle(timeout=5))

        self.assertEqual(remote.get_one(COLLECTION, DOC_ID)["roles"], ["安全衛生責任者"])
        self.assertEqual(store.get().roles, ["安全衛生責任者"])
        self.assertEqual(MasterDataStore(remote).get().roles, ["安全衛生責任者"])

    def test_project_removal_with_saves_in_flight(self) -> None:
        remote = SlowFirstWriteStore(0.3)
        sync = ThreadedRemoteSync()
        master = MasterDataStore(remote, sync=sync)
        drafts = DraftStore(remote, sync=sync)
        project = DEFAULT_VALUES["projects"][0]
        drafts.save(None, ReportType.SAFETY_TRAINING, {"project": project})

        svc = ProjectRemovalService(master, drafts, AdminPasswordVerifier())
        ok, _ = svc.remove_project(project, "4043")
        self.assertTrue(sync.wait_idle(timeout=5))

        self.assertTrue(ok)
        self.assertEqual(drafts.list_all(), [])
        self.assertNotIn(project, MasterDataStore(remote).get().projects)


class TestProjectRemoval(unittest.TestCase):
    def setUp(self) -> None:
        self.remote = InMemoryDocumentStore()
        self.master = MasterDataStore(self.remote)
        self.drafts = DraftStore(self.remote)
        self.project = DEFAULT_VALUES["projects"][0]
        self.other = DEFAULT_VALUES["projects"][1]
        for _ in range(2):
            self.drafts.save(None, ReportType.SAFETY_TRAINING, {"project": self.project})
        self.kept = self.drafts.save(None, ReportType.SAFETY_PLAN, {"project": self.other})

    def _service(self, verifier: AdminPasswordVerifier) -> ProjectRemovalService:
        return ProjectRemovalService(self.master, self.drafts, verifier)

    def test_wrong_password_touches_nothing(self) -> None:
        svc = self._service(AdminPasswordVerifier())
        ok, msg = svc.remove_project(self.project, "0000")
        self.assertFalse(ok)
        self.assertTrue(msg)
        self.assertEqual(len(self.drafts.list_all()), 3)
        self.assertIn(self.project, self.master.get().projects)

        ok, _ = svc.remove_project(self.project, None)
        self.assertFalse(ok)

    def test_default_secret_removes_project_and_drafts(self) -> None:
        svc = self._service(AdminPasswordVerifier())
        ok, _msg = svc.remove_project(self.project, "4043")
        self.assertTrue(ok)
        self.assertNotIn(self.project, self.master.get().projects)
        self.assertEqual([d.id for d in self.drafts.list_all()], [self.kept])
        self.assertEqual(len(svc.last_result.deleted), 2)

    def test_configured_hash_replaces_default_secret(self) -> None:
        svc = self._service(AdminPasswordVerifier(hash_password("s3cret", iterations=1_000)))
        ok, _ = svc.remove_project(self.project, "4043")
        self.assertFalse(ok)
        ok, _ = svc.remove_project(self.project, "s3cret")
        self.assertTrue(ok)

    def test_unknown_project_is_refused(self) -> None:
        svc = self._service(AdminPasswordVerifier())
        ok, _ = svc.remove_project("存在しない工事", "4043")
        self.assertFalse(ok)
        self.assertEqual(len(self.drafts.list_all()), 3)
