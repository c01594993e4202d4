"""
draft_list_view.py

Tkinter view over the saved drafts of one report type, grouped by project.

- Refresh reads the remote store; on StoreUnavailable the local mirror is
  shown and the error goes to the status bar.
- Signatures (single or roster) can be attached to the selected draft and
  are saved through DraftStore.save(). Site photos are not part of a draft;
  they are inserted on the printing PC.
"""
from __future__ import annotations

import tkinter as tk
from tkinter import messagebox, ttk
from typing import Callable, Dict, List, Optional

from core.common.app_context import AppContext
from core.common.errors import StoreUnavailable
from core.helpers.date_time_helper import millis_to_local_str
from drafts.logic.draft_grouping import group_by_project
from drafts.models.draft import Draft
from drafts.models.report_type import ReportType
from signature.gui.signature_capture_dialog import SignatureCaptureDialog
from signature.models.signature_artifact import SignatureArtifact


class DraftListView(tk.Frame):
    def __init__(self, parent: tk.Misc, *, ctx: AppContext,
                 set_status: Optional[Callable[[str], None]] = None) -> None:
        super().__init__(parent)
        self._ctx = ctx
        self._set_status = set_status or (lambda _msg: None)
        self._drafts: Dict[str, Draft] = {}

        self._build_ui()
        self.refresh()

    def _build_ui(self) -> None:
        bar = ttk.Frame(self)
        bar.pack(fill="x", padx=8, pady=6)
        ttk.Label(bar, text="書類:").pack(side="left")
        self.type_var = tk.StringVar(value=ReportType.SAFETY_TRAINING.value)
        cb = ttk.Combobox(bar, textvariable=self.type_var, state="readonly",
                          values=[t.value for t in ReportType], width=22)
        cb.pack(side="left", padx=(4, 12))
        cb.bind("<<ComboboxSelected>>", lambda _e: self._render())
        ttk.Button(bar, text="更新", command=self.refresh).pack(side="left")
        ttk.Button(bar, text="削除", command=self._delete_selected).pack(side="right")
        ttk.Button(bar, text="署名（連続）", command=lambda: self._capture(roster=True)).pack(side="right", padx=4)
        ttk.Button(bar, text="署名", command=lambda: self._capture(roster=False)).pack(side="right", padx=4)

        self.tree = ttk.Treeview(self, columns=("modified", "id"), show="tree headings")
        self.tree.heading("#0", text="工事名 / 書類")
        self.tree.heading("modified", text="最終更新")
        self.tree.heading("id", text="ID")
        self.tree.pack(fill="both", expand=True, padx=8, pady=(0, 8))

    # ------------------------------------------------------------------ #
    def refresh(self) -> None:
        try:
            drafts = self._ctx.drafts.list_all()
        except StoreUnavailable as exc:
            drafts = self._ctx.drafts.list_cached()
            self._set_status(f"読み込みに失敗しました（ローカルデータを表示）: {exc}")
        self._drafts = {d.id: d for d in drafts}
        self._render()

    def _render(self) -> None:
        self.tree.delete(*self.tree.get_children())
        groups = group_by_project(
            sorted(self._drafts.values(), key=lambda d: d.last_modified, reverse=True),
            self.type_var.get(),
        )
        for project, items in groups.items():
            parent = self.tree.insert("", "end", text=f"{project} ({len(items)})", open=True)
            for d in items:
                self.tree.insert(parent, "end", iid=d.id, text=d.type.label,
                                 values=(millis_to_local_str(d.last_modified), d.id))

    def _selected(self) -> Optional[Draft]:
        sel = self.tree.selection()
        return self._drafts.get(sel[0]) if sel else None

    # ------------------------------------------------------------------ #
    def _delete_selected(self) -> None:
        draft = self._selected()
        if draft is None:
            return
        if not messagebox.askyesno("確認", "この一時保存データを削除しますか？", parent=self):
            return
        self._ctx.drafts.delete(draft.id)
        self._set_status("削除しました")
        self.refresh()

    def _capture(self, *, roster: bool) -> None:
        draft = self._selected()
        if draft is None:
            return
        dlg = SignatureCaptureDialog(self, config=self._ctx.capture_config(keep_open=roster),
                                     title="署名")
        self.wait_window(dlg)
        if dlg.artifacts:
            self._save_signatures(draft, dlg.artifacts)

    def _save_signatures(self, draft: Draft, artifacts: List[SignatureArtifact]) -> None:
        data = dict(draft.data)
        signatures = list(data.get("signatures") or [])
        signatures.extend(a.data_url for a in artifacts)
        data["signatures"] = signatures
        self._ctx.drafts.save(draft.id, draft.type, data)
        self._set_status(f"署名 {len(artifacts)} 件を保存しました")
        self.refresh()
