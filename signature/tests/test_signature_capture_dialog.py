"""SignatureCaptureDialog teardown (needs a display; skipped without one)."""
from __future__ import annotations

import tkinter as tk

import pytest

from signature.gui.signature_capture_dialog import SignatureCaptureDialog
from signature.models.capture_config import CaptureConfig


@pytest.fixture
def root():
    try:
        win = tk.Tk()
    except tk.TclError as exc:
        pytest.skip(f"no display: {exc}")
    win.withdraw()
    yield win
    win.destroy()


def _pending_after_ids(win: tk.Misc) -> set:
    return set(win.tk.splitlist(win.tk.call("after", "info")))


def test_closing_cancels_scheduled_callbacks(root) -> None:
    try:
        dlg = SignatureCaptureDialog(root, config=CaptureConfig(keep_open_on_save=True))
    except tk.TclError as exc:
        pytest.skip(f"dialog cannot be shown here: {exc}")

    refresh_id = dlg._after(60_000, dlg._refresh_buttons)
    scheduled = set(dlg._after_ids)
    assert refresh_id in _pending_after_ids(root)

    dlg._engine.cancel()

    assert not dlg.winfo_exists()
    assert not (scheduled & _pending_after_ids(root))
