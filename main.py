import tkinter as tk
from tkinter import Frame, Label, Button, X, LEFT, messagebox

from core.common.app_context import AppContext, build_app_context
from core.helpers.status_helper import set_status
from core.logging.gui.log_view import LogView
from core.logging.logic.logger import logger
from drafts.gui.draft_list_view import DraftListView
from masterdata.gui.master_settings_view import MasterSettingsView


class MainWindow(tk.Tk):
    def __init__(self, ctx: AppContext):
        super().__init__()
        self.ctx = ctx

        self.title(ctx.config.general.app_name)
        self.geometry("1100x750")
        self.active_view = None

        # Navigation bar (top)
        self.nav_frame = Frame(self, height=40, bg="#dddddd")
        self.nav_frame.pack(side="top", fill=X)
        for text, command in (
            ("一時保存データ", self.load_drafts_view),
            ("マスタ設定", self.load_master_view),
            ("ログ", self.load_logs_view),
        ):
            Button(self.nav_frame, text=text, command=command).pack(side=LEFT, padx=5, pady=5)

        # Display area (center)
        self.display_area = Frame(self, bg="white")
        self.display_area.pack(fill="both", expand=True)

        # Status bar (bottom)
        self.status_bar = Label(self, text="", anchor="w", bg="#eeeeee")
        self.status_bar.pack(side="bottom", fill=X)

        ctx.set_remote_error_handler(self._on_remote_error)
        self.protocol("WM_DELETE_WINDOW", self._on_close)
        self.load_drafts_view()

    def clear_display_area(self):
        """Removes all widgets from the display area."""
        for widget in self.display_area.winfo_children():
            widget.destroy()
        self.active_view = None

    def _show(self, view, status: str):
        self.active_view = view
        self.active_view.pack(fill="both", expand=True)
        self.set_status(status)

    def load_drafts_view(self):
        self.clear_display_area()
        self._show(DraftListView(self.display_area, ctx=self.ctx, set_status=self.set_status),
                   "一時保存データ")

    def load_master_view(self):
        self.clear_display_area()
        self._show(MasterSettingsView(self.display_area, store=self.ctx.master_data,
                                      removal=self.ctx.project_removal, set_status=self.set_status),
                   "マスタ設定")

    def load_logs_view(self):
        self.clear_display_area()
        self._show(LogView(self.display_area), "ログ")

    def set_status(self, message):
        """Shows a status message that clears itself after a few seconds."""
        set_status(lambda **kw: self.after(0, lambda: self.status_bar.config(**kw)), message)

    def _on_remote_error(self, exc: Exception):
        # remote writes may fail on a sync thread; hop back onto the Tk loop
        self.after(0, lambda: messagebox.showerror(
            "保存エラー",
            f"クラウドへの保存に失敗しました。インターネット接続を確認してください。\n\n{exc}",
            parent=self,
        ))

    def _on_close(self):
        self.ctx.close()
        logger.log("App", "Shutdown")
        self.destroy()


def main() -> None:
    ctx = build_app_context()
    logger.log("App", "Startup", message=f"backend={ctx.config.storage.backend}")
    app = MainWindow(ctx)
    app.mainloop()


if __name__ == "__main__":
    main()
