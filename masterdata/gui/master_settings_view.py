"""
master_settings_view.py

Tkinter view for editing the master data pick-lists.

- Two tabs (basic / training lists); the left list shows each field with
  its item count, the right side edits the selected field.
- Every edit is a read-modify-write of the whole document via
  MasterDataStore.replace().
- Removing a project requires the admin password and cascades into the
  drafts of that project (ProjectRemovalService).
"""
from __future__ import annotations

import tkinter as tk
from tkinter import messagebox, ttk
from typing import Callable, Dict, Optional

from masterdata.gui.password_prompt_dialog import PasswordPromptDialog
from masterdata.logic.master_data_store import MasterDataStore
from masterdata.logic.project_removal import ProjectRemovalService
from masterdata.models.master_data import FIELD_GROUPS, GROUP_LABELS, LABELS, MasterData


class MasterSettingsView(tk.Frame):
    def __init__(
        self,
        parent: tk.Misc,
        *,
        store: MasterDataStore,
        removal: ProjectRemovalService,
        set_status: Optional[Callable[[str], None]] = None,
    ) -> None:
        super().__init__(parent)
        self._store = store
        self._removal = removal
        self._set_status = set_status or (lambda _msg: None)
        self._data: MasterData = store.get()
        self._key: Optional[str] = None
        self._field_lists: Dict[str, tk.Listbox] = {}

        self._build_ui()

    # ------------------------------------------------------------------ #
    #  Layout                                                            #
    # ------------------------------------------------------------------ #
    def _build_ui(self) -> None:
        self.columnconfigure(1, weight=1)
        self.rowconfigure(0, weight=1)

        nb = ttk.Notebook(self)
        nb.grid(row=0, column=0, sticky="nsw", padx=(8, 4), pady=8)
        for group, keys in FIELD_GROUPS.items():
            frame = ttk.Frame(nb)
            lb = tk.Listbox(frame, exportselection=False, width=28, height=16)
            lb.pack(fill="both", expand=True)
            lb.bind("<<ListboxSelect>>", lambda _e, g=group: self._on_field_selected(g))
            nb.add(frame, text=GROUP_LABELS[group])
            self._field_lists[group] = lb
        self._refresh_field_lists()

        right = ttk.Frame(self)
        right.grid(row=0, column=1, sticky="nsew", padx=(4, 8), pady=8)
        right.columnconfigure(0, weight=1)
        right.rowconfigure(1, weight=1)

        self.title_label = ttk.Label(right, text="項目を選択してください", font=("", 12, "bold"))
        self.title_label.grid(row=0, column=0, columnspan=2, sticky="w")

        self.items_list = tk.Listbox(right, exportselection=False)
        self.items_list.grid(row=1, column=0, columnspan=2, sticky="nsew", pady=4)

        self.new_item_var = tk.StringVar()
        entry = ttk.Entry(right, textvariable=self.new_item_var)
        entry.grid(row=2, column=0, sticky="ew", pady=(4, 0))
        entry.bind("<Return>", lambda _e: self._add_item())
        ttk.Button(right, text="追加", command=self._add_item).grid(row=2, column=1, padx=(6, 0), pady=(4, 0))
        ttk.Button(right, text="選択項目を削除", command=self._delete_selected)\
            .grid(row=3, column=0, columnspan=2, sticky="e", pady=(6, 0))

    def _refresh_field_lists(self) -> None:
        for group, lb in self._field_lists.items():
            sel = lb.curselection()
            lb.delete(0, "end")
            for key in FIELD_GROUPS[group]:
                lb.insert("end", f"{LABELS[key]}  ({len(self._data.items(key))} 件)")
            if sel:
                lb.selection_set(sel[0])

    def _refresh_items(self) -> None:
        self.items_list.delete(0, "end")
        if self._key is None:
            return
        for item in self._data.items(self._key):
            self.items_list.insert("end", item)

    # ------------------------------------------------------------------ #
    #  Handlers                                                          #
    # ------------------------------------------------------------------ #
    def _on_field_selected(self, group: str) -> None:
        sel = self._field_lists[group].curselection()
        if not sel:
            return
        self._key = FIELD_GROUPS[group][sel[0]]
        self.title_label.config(text=LABELS[self._key])
        self._refresh_items()

    def _add_item(self) -> None:
        if self._key is None:
            return
        try:
            updated = self._data.with_item_added(self._key, self.new_item_var.get())
        except ValueError as exc:
            messagebox.showwarning("入力エラー", str(exc), parent=self)
            return
        self._commit(updated)
        self.new_item_var.set("")

    def _delete_selected(self) -> None:
        sel = self.items_list.curselection()
        if self._key is None or not sel:
            return
        index = sel[0]
        item = self._data.items(self._key)[index]

        if self._key == "projects":
            self._delete_project(item)
            return

        if not messagebox.askyesno("確認", f"「{item}」を削除しますか？", parent=self):
            return
        self._commit(self._data.with_item_removed(self._key, index))

    def _delete_project(self, name: str) -> None:
        dlg = PasswordPromptDialog(
            self,
            message=f"「{name}」を削除すると、この工事に関連する一時保存データもすべて削除されます。"
                    "この操作は取り消せません。",
        )
        self.wait_window(dlg)
        if dlg.password is None:
            return
        ok, msg = self._removal.remove_project(name, dlg.password)
        if not ok:
            messagebox.showerror("エラー", msg or "", parent=self)
            return
        self._data = self._store.get()
        self._refresh_field_lists()
        self._refresh_items()
        self._set_status(msg or "")

    def _commit(self, updated: MasterData) -> None:
        self._store.replace(updated)
        self._data = updated
        self._refresh_field_lists()
        self._refresh_items()
        self._set_status("マスタを保存しました")
