"""
===============================================================================
SignatureCaptureEngine – free-hand signature capture (no UI)
-------------------------------------------------------------------------------
State machine:
    CLOSED --open()--> IDLE --pointer_down--> DRAWING --pointer_up/leave--> IDLE
    IDLE/DRAWING --save() (with ink)--> CLOSED, or IDLE again when the
                                        surface is kept open for rosters
    IDLE/DRAWING --cancel()--> CLOSED (ink discarded, no artifact)

Backing surface:
    A transparent RGBA Pillow image sized container * device pixel ratio.
    The host view is measured after a settle delay on open() and on every
    resize so that transitional zero sizes are never used. A size change
    reallocates the surface and drops any ink on it.

Export:
    Only the vertical middle band (25% .. 75% of the height) is exported;
    the top and bottom quarters are guide zones that never reach the PNG.
===============================================================================
"""
from __future__ import annotations

import io
from threading import RLock
from typing import Any, Callable, Optional, Tuple

from PIL import Image, ImageDraw

from core.common.errors import ValidationSkipped
from core.helpers.status_helper import schedule
from core.logging.logic.logger import logger
from signature.logic.coordinate_mapper import CoordinateMapper, accepts_input
from signature.models.capture_config import CaptureConfig
from signature.models.pointer_event import PointerEvent, SurfaceLayout
from signature.models.signature_artifact import SignatureArtifact
from signature.models.signature_enums import CaptureState

_FEATURE = "Signature"

Scheduler = Callable[[float, Callable[[], None]], Any]


def _hex_to_rgba(hexstr: str) -> Tuple[int, int, int, int]:
    """Convert hex color (#RRGGBB or #RGB) into an opaque RGBA tuple for PIL."""
    s = (hexstr or "#000000").strip()
    if not s.startswith("#"):
        s = "#" + s
    if len(s) == 4:
        r = int(s[1] * 2, 16); g = int(s[2] * 2, 16); b = int(s[3] * 2, 16)
    else:
        r = int(s[1:3], 16); g = int(s[3:5], 16); b = int(s[5:7], 16)
    return (r, g, b, 255)


def crop_band(height: int) -> Tuple[int, int]:
    """Return (top, band_height) of the exported middle band for a surface height."""
    return int(height * SignatureCaptureEngine.CROP_TOP), int(height * SignatureCaptureEngine.CROP_HEIGHT)


class SignatureCaptureEngine:
    CROP_TOP = 0.25
    CROP_HEIGHT = 0.5

    def __init__(
        self,
        measure: Callable[[], SurfaceLayout],
        config: Optional[CaptureConfig] = None,
        *,
        on_save: Optional[Callable[[SignatureArtifact], None]] = None,
        on_cancel: Optional[Callable[[], None]] = None,
        scheduler: Optional[Scheduler] = None,
    ) -> None:
        self._measure = measure
        self._cfg = config or CaptureConfig()
        self._on_save = on_save
        self._on_cancel = on_cancel
        self._schedule: Scheduler = scheduler or schedule
        self._lock = RLock()

        self._state = CaptureState.CLOSED
        self._pen_only = self._cfg.pen_only
        self._has_ink = False
        self._save_success = False
        self._success_token = 0

        self._surface: Optional[Image.Image] = None
        self._draw: Optional[ImageDraw.ImageDraw] = None
        self._mapper: Optional[CoordinateMapper] = None
        self._captured_pointer: Optional[int] = None
        self._last_point: Optional[Tuple[float, float]] = None

    # ------------------------------------------------------------------ #
    #  State                                                             #
    # ------------------------------------------------------------------ #
    @property
    def state(self) -> CaptureState:
        return self._state

    @property
    def config(self) -> CaptureConfig:
        return self._cfg

    @property
    def is_open(self) -> bool:
        return self._state != CaptureState.CLOSED

    @property
    def has_ink(self) -> bool:
        return self._has_ink

    @property
    def save_enabled(self) -> bool:
        return self.is_open and self._has_ink

    @property
    def save_success(self) -> bool:
        """Transient flag raised after a save in keep-open mode."""
        return self._save_success

    @property
    def pen_only(self) -> bool:
        return self._pen_only

    @pen_only.setter
    def pen_only(self, value: bool) -> None:
        self._pen_only = bool(value)

    @property
    def rotated(self) -> bool:
        return bool(self._mapper and self._mapper.rotated)

    @property
    def backing_size(self) -> Tuple[int, int]:
        if self._surface is None:
            return (0, 0)
        return self._surface.size

    @property
    def captured_pointer(self) -> Optional[int]:
        return self._captured_pointer

    def snapshot(self) -> Optional[Image.Image]:
        """Copy of the full backing surface (for previews)."""
        with self._lock:
            return self._surface.copy() if self._surface is not None else None

    # ------------------------------------------------------------------ #
    #  Open / layout                                                     #
    # ------------------------------------------------------------------ #
    def open(self) -> None:
        with self._lock:
            self._state = CaptureState.IDLE
            self._has_ink = False
            self._captured_pointer = None
            self._last_point = None
        self._schedule(self._cfg.settle_delay, self._remeasure)

    def notify_resize(self) -> None:
        """Viewport changed (rotation, window resize): re-measure after settling."""
        if self.is_open:
            self._schedule(self._cfg.settle_delay, self._remeasure)

    def _remeasure(self) -> None:
        with self._lock:
            if not self.is_open:
                return
            layout = self._measure()
            width, height = layout.backing_size
            if width <= 0 or height <= 0:
                return
            if self._surface is None or self._surface.size != (width, height):
                self._allocate(width, height)
            self._mapper = CoordinateMapper(
                rect=layout.rect,
                backing_width=width,
                backing_height=height,
                rotated=layout.is_rotated,
            )

    def _allocate(self, width: int, height: int) -> None:
        self._surface = Image.new("RGBA", (width, height), (0, 0, 0, 0))
        self._draw = ImageDraw.Draw(self._surface)
        self._has_ink = False
        self._last_point = None

    def _release_surface(self) -> None:
        self._surface = None
        self._draw = None
        self._mapper = None
        self._captured_pointer = None
        self._last_point = None
        self._has_ink = False

    # ------------------------------------------------------------------ #
    #  Pointer handling                                                  #
    # ------------------------------------------------------------------ #
    def pointer_down(self, event: PointerEvent) -> bool:
        with self._lock:
            if self._state != CaptureState.IDLE or self._mapper is None or self._draw is None:
                return False
            if not accepts_input(event, self._pen_only):
                return False
            pos = self._mapper.map_event(event)
            if pos is None:
                return False
            self._state = CaptureState.DRAWING
            self._captured_pointer = event.pointer_id
            self._last_point = pos
            return True

    def pointer_move(self, event: PointerEvent) -> bool:
        with self._lock:
            if self._state != CaptureState.DRAWING or self._mapper is None or self._draw is None:
                return False
            if event.pointer_id != self._captured_pointer:
                return False
            if not accepts_input(event, self._pen_only):
                return False
            pos = self._mapper.map_event(event)
            if pos is None:
                return False
            self._stroke_to(pos)
            self._has_ink = True
            return True

    def pointer_up(self, event: PointerEvent) -> bool:
        """End the current stroke; the partial stroke stays on the surface."""
        with self._lock:
            if self._state != CaptureState.DRAWING:
                return False
            if event.pointer_id != self._captured_pointer:
                return False
            self._state = CaptureState.IDLE
            self._captured_pointer = None
            self._last_point = None
            return True

    pointer_leave = pointer_up

    def _stroke_to(self, pos: Tuple[float, float]) -> None:
        assert self._draw is not None
        width = max(1, round(self._cfg.line_width))
        color = _hex_to_rgba(self._cfg.stroke_color)
        start = self._last_point or pos
        self._draw.line([start, pos], fill=color, width=width)
        # round caps/joins
        r = width / 2
        for (px, py) in (start, pos):
            self._draw.ellipse([px - r, py - r, px + r, py + r], fill=color)
        self._last_point = pos

    # ------------------------------------------------------------------ #
    #  Actions                                                           #
    # ------------------------------------------------------------------ #
    def clear(self) -> None:
        with self._lock:
            if not self.is_open:
                return
            if self._surface is not None:
                self._allocate(*self._surface.size)
            self._has_ink = False

    def save(self) -> Optional[SignatureArtifact]:
        """
        Export the middle band as PNG.

        Returns None (and logs the refusal) when the surface is closed or
        carries no ink.
        """
        with self._lock:
            if not self.save_enabled or self._surface is None:
                skipped = ValidationSkipped("signature save requested without ink")
                logger.log(_FEATURE, "SaveSkipped", message=skipped.reason)
                return None

            width, height = self._surface.size
            top, band = crop_band(height)
            cropped = self._surface.crop((0, top, width, top + band))
            buf = io.BytesIO()
            cropped.save(buf, format="PNG")
            artifact = SignatureArtifact(png_bytes=buf.getvalue(), width=width, height=band)

            keep_open = self._cfg.keep_open_on_save
            if keep_open:
                self._allocate(width, height)
                self._state = CaptureState.IDLE
                self._captured_pointer = None
                self._save_success = True
                self._success_token += 1
                token = self._success_token
            else:
                self._state = CaptureState.CLOSED
                self._release_surface()

        logger.log(_FEATURE, "Saved", message=f"{artifact.width}x{artifact.height}")
        if self._on_save is not None:
            self._on_save(artifact)
        if keep_open:
            self._schedule(self._cfg.success_indicator, lambda: self._clear_success(token))
        return artifact

    def _clear_success(self, token: int) -> None:
        with self._lock:
            if token == self._success_token:
                self._save_success = False

    def cancel(self) -> None:
        with self._lock:
            was_open = self.is_open
            self._state = CaptureState.CLOSED
            self._release_surface()
            self._save_success = False
        if was_open and self._on_cancel is not None:
            self._on_cancel()
