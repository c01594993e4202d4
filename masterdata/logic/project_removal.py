"""
===============================================================================
ProjectRemovalService – admin-gated project removal with draft cascade
-------------------------------------------------------------------------------
Flow:
    1) verify the admin secret      (wrong/missing -> refused, nothing touched)
    2) drafts.delete_by_project()   (best effort, irreversible)
    3) remove the name from master data projects and replace() the document

The two stores stay independent; this service is the only place that
couples a master data edit to the drafts cascade.
===============================================================================
"""
from __future__ import annotations

from typing import Optional, Tuple

from core.common.errors import ValidationSkipped
from core.logging.logic.logger import logger
from drafts.logic.draft_store import CascadeResult, DraftStore
from masterdata.logic.admin_password import AdminPasswordVerifier
from masterdata.logic.master_data_store import MasterDataStore

_FEATURE = "MasterData"


class ProjectRemovalService:
    def __init__(self, master_store: MasterDataStore, draft_store: DraftStore,
                 verifier: AdminPasswordVerifier) -> None:
        self._master = master_store
        self._drafts = draft_store
        self._verifier = verifier
        self.last_result: Optional[CascadeResult] = None

    def remove_project(self, name: str, password: Optional[str]) -> Tuple[bool, Optional[str]]:
        """
        Returns (ok, message). The message is meant for the status bar or a
        message box in both cases.
        """
        self.last_result = None
        if not self._verifier.verify(password):
            return self._refuse(name, "パスワードが違います。")

        master = self._master.get()
        if name not in master.projects:
            return self._refuse(name, f"「{name}」は登録されていません。")

        result = self._drafts.delete_by_project(name)
        self.last_result = result

        index = master.projects.index(name)
        self._master.replace(master.with_item_removed("projects", index))

        logger.log(_FEATURE, "ProjectRemoved", reference_id=name,
                   message=f"drafts deleted={len(result.deleted)} failed={len(result.failed)}")
        if result.complete:
            return True, f"「{name}」と関連データ {len(result.deleted)} 件を削除しました。"
        return True, (f"「{name}」を削除しました。関連データ {len(result.failed)} 件の削除に"
                      f"失敗しました（{len(result.deleted)} 件は削除済み）。")

    @staticmethod
    def _refuse(name: str, message: str) -> Tuple[bool, Optional[str]]:
        skipped = ValidationSkipped(message)
        logger.log(_FEATURE, "ProjectRemovalRefused", reference_id=name, message=skipped.reason)
        return False, message
