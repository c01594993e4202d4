"""
log_view.py

Tkinter view listing the application log (newest first) with feature and
level filters.
"""

import tkinter as tk
from tkinter import Frame, Label, Button, ttk

from core.logging.logic.logger import Logger, logger as default_logger

LEVELS = ["", "INFO", "WARNING", "ERROR"]


class LogView(tk.Frame):
    def __init__(self, parent, log: Logger = None, limit: int = 500):
        super().__init__(parent)
        self.log = log or default_logger
        self.limit = limit

        self._build_ui()
        self._load_filter_options()
        self._load_logs()

    def _build_ui(self):
        filter_frame = Frame(self)
        filter_frame.pack(fill="x", padx=5, pady=5)

        self.filter_feature_var = tk.StringVar()
        self.filter_level_var = tk.StringVar()

        Label(filter_frame, text="Feature:").pack(side="left")
        self.filter_feature_cb = ttk.Combobox(filter_frame, textvariable=self.filter_feature_var)
        self.filter_feature_cb.pack(side="left", padx=5)

        Label(filter_frame, text="Level:").pack(side="left")
        self.filter_level_cb = ttk.Combobox(filter_frame, textvariable=self.filter_level_var, values=LEVELS)
        self.filter_level_cb.pack(side="left", padx=5)

        Button(filter_frame, text="Apply filter", command=self._load_logs).pack(side="left", padx=10)

        cols = ("timestamp", "log_level", "feature", "event", "reference_id", "message")
        self.tree = ttk.Treeview(self, columns=cols, show="headings")
        for col, title in zip(cols, ("Time", "Level", "Feature", "Event", "Reference", "Message")):
            self.tree.heading(col, text=title)
        self.tree.pack(fill="both", expand=True, padx=5, pady=5)

    def _load_filter_options(self):
        features = sorted({e.feature for e in self.log.fetch_logs(self.limit)})
        self.filter_feature_cb['values'] = [""] + features

    def _load_logs(self):
        entries = self.log.query_logs(
            feature=self.filter_feature_var.get() or None,
            level=self.filter_level_var.get() or None,
            limit=self.limit,
        )

        for i in self.tree.get_children():
            self.tree.delete(i)

        for entry in entries:
            row = entry.as_dict()
            self.tree.insert("", "end", values=(
                row["timestamp"], row["log_level"], row["feature"],
                row["event"], row["reference_id"] or "", row["message"] or "",
            ))
