# signature/gui/signature_capture_dialog.py
from __future__ import annotations
import tkinter as tk
from tkinter import ttk
from typing import Callable, List, Optional

from ..logic.capture_engine import SignatureCaptureEngine
from ..models.capture_config import CaptureConfig
from ..models.pointer_event import PointerEvent, SurfaceLayout, SurfaceRect
from ..models.signature_artifact import SignatureArtifact
from ..models.signature_enums import DeviceKind


class SignatureCaptureDialog(tk.Toplevel):
    """
    Modal signature capture hosting a SignatureCaptureEngine.

    - The Tk canvas shows what the user draws; the engine keeps the real
      backing raster (Pillow) and produces the cropped PNG.
    - Grey guide bands mark the zones that are cut off on export.
    - Save stays disabled until there is ink.
    - keep_open (rosters): every save hands the artifact to on_artifact and
      the surface is cleared for the next person; close ends the session.

    After the dialog closes, .artifacts holds everything that was saved.
    """
    CANVAS_W = 800
    CANVAS_H = 400
    GUIDE_FILL = "#e6e6e6"

    def __init__(
        self,
        parent: tk.Misc,
        *,
        config: Optional[CaptureConfig] = None,
        title: str = "Signature",
        on_artifact: Optional[Callable[[SignatureArtifact], None]] = None,
    ) -> None:
        super().__init__(parent)
        self.title(title)
        self.transient(parent)
        self.grab_set()

        self.artifacts: List[SignatureArtifact] = []
        self._on_artifact = on_artifact
        self._last_xy: Optional[tuple] = None
        self._after_ids: List[str] = []

        self._engine = SignatureCaptureEngine(
            self._measure,
            config or CaptureConfig(),
            on_save=self._handle_saved,
            on_cancel=self._handle_cancelled,
            scheduler=self._schedule,
        )

        self.columnconfigure(0, weight=1)
        self.rowconfigure(1, weight=1)

        # Toolbar
        bar = ttk.Frame(self)
        bar.grid(row=0, column=0, sticky="ew", padx=10, pady=(10, 4))
        self.pen_only_var = tk.BooleanVar(value=self._engine.pen_only)
        ttk.Checkbutton(bar, text="Stylus only", variable=self.pen_only_var,
                        command=self._toggle_pen_only).pack(side="left")
        ttk.Button(bar, text="Clear", command=self._clear).pack(side="left", padx=(12, 0))
        self.success_label = ttk.Label(bar, text="", foreground="#2e7d32")
        self.success_label.pack(side="left", padx=(12, 0))

        # Canvas
        self.canvas = tk.Canvas(
            self, width=self.CANVAS_W, height=self.CANVAS_H, bg="white",
            highlightthickness=1, highlightbackground="#888"
        )
        self.canvas.grid(row=1, column=0, sticky="nsew", padx=10, pady=4)
        self.canvas.bind("<ButtonPress-1>", self._on_down)
        self.canvas.bind("<B1-Motion>", self._on_move)
        self.canvas.bind("<ButtonRelease-1>", self._on_up)
        self.canvas.bind("<Configure>", self._on_resize)

        # Footer
        btns = ttk.Frame(self)
        btns.grid(row=2, column=0, sticky="e", padx=10, pady=(4, 10))
        ttk.Button(btns, text="Close", command=self._engine.cancel).pack(side="right", padx=(6, 0))
        self.save_btn = ttk.Button(btns, text="Save", command=self._save, state="disabled")
        self.save_btn.pack(side="right")

        self.protocol("WM_DELETE_WINDOW", self._engine.cancel)
        self._engine.open()
        self._draw_guides()

    # ------------------------------------------------------------------ #
    #  Engine collaborators                                              #
    # ------------------------------------------------------------------ #
    def _schedule(self, delay: float, callback: Callable[[], None]) -> str:
        return self._after(int(delay * 1000), callback)

    def _after(self, ms: int, callback: Callable[[], None]) -> str:
        after_id = self.after(ms, callback)
        self._after_ids.append(after_id)
        return after_id

    def _measure(self) -> SurfaceLayout:
        w = self.canvas.winfo_width()
        h = self.canvas.winfo_height()
        vw = self.winfo_width()
        vh = self.winfo_height()
        dpr = self.canvas.winfo_fpixels("1i") / 96.0
        # a Tk canvas cannot be turned, so a portrait window keeps the flat mapping
        return SurfaceLayout(
            container_width=w,
            container_height=h,
            device_pixel_ratio=dpr,
            viewport_width=vw,
            viewport_height=vh,
            rect=SurfaceRect(0, 0, w, h),
            rotatable=False,
        )

    def _event(self, e) -> PointerEvent:
        # Tk reports every pointing device as a mouse
        return PointerEvent(x=e.x, y=e.y, device_kind=DeviceKind.MOUSE)

    # ------------------------------------------------------------------ #
    #  Canvas handlers                                                   #
    # ------------------------------------------------------------------ #
    def _on_down(self, e):
        if self._engine.pointer_down(self._event(e)):
            self._last_xy = (e.x, e.y)

    def _on_move(self, e):
        if self._engine.pointer_move(self._event(e)) and self._last_xy:
            width = max(1, round(self._engine.config.line_width))
            self.canvas.create_line(
                *self._last_xy, e.x, e.y,
                fill="black", width=width, capstyle="round", tags=("ink",)
            )
            self._last_xy = (e.x, e.y)
            self._refresh_buttons()

    def _on_up(self, e):
        self._engine.pointer_up(self._event(e))
        self._last_xy = None

    def _on_resize(self, _e):
        self.canvas.delete("ink")
        self._draw_guides()
        self._engine.notify_resize()
        self._refresh_buttons()

    # ------------------------------------------------------------------ #
    #  Drawing helpers                                                   #
    # ------------------------------------------------------------------ #
    def _draw_guides(self) -> None:
        self.canvas.delete("guide")
        w = self.canvas.winfo_width() or self.CANVAS_W
        h = self.canvas.winfo_height() or self.CANVAS_H
        q = h / 4
        boxes = [(0, 0, w, q), (0, h - q, w, h)]
        for box in boxes:
            self.canvas.create_rectangle(*box, fill=self.GUIDE_FILL, outline="", tags=("guide",))
        self.canvas.tag_lower("guide")

    def _refresh_buttons(self) -> None:
        self.save_btn.configure(state="normal" if self._engine.save_enabled else "disabled")
        self.success_label.configure(text="Saved" if self._engine.save_success else "")

    # ------------------------------------------------------------------ #
    #  Actions                                                           #
    # ------------------------------------------------------------------ #
    def _toggle_pen_only(self):
        self._engine.pen_only = self.pen_only_var.get()

    def _clear(self):
        self._engine.clear()
        self.canvas.delete("ink")
        self._refresh_buttons()

    def _save(self):
        if self._engine.save() is None:
            return
        if self._engine.is_open:
            self.canvas.delete("ink")
            self._refresh_buttons()
            self._after(int(self._engine.config.success_indicator * 1000) + 50, self._refresh_buttons)

    def _handle_saved(self, artifact: SignatureArtifact) -> None:
        self.artifacts.append(artifact)
        if self._on_artifact is not None:
            self._on_artifact(artifact)
        if not self._engine.is_open:
            self.destroy()

    def _handle_cancelled(self) -> None:
        self.destroy()

    def destroy(self) -> None:
        # pending callbacks must not touch the widgets once they are gone
        for after_id in self._after_ids:
            self.after_cancel(after_id)
        self._after_ids.clear()
        super().destroy()
