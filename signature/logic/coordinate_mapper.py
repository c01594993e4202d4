"""
===============================================================================
CoordinateMapper – viewport pointer position -> backing surface pixels
-------------------------------------------------------------------------------
Two presentation modes:
    - normal:  surface shown as laid out; both axes scale linearly.
    - rotated: surface turned 90 degrees (device held in portrait) so the
               user gets a landscape-shaped drawing area. Horizontal pointer
               travel then maps to the backing y axis (inverted) and vertical
               travel to the backing x axis.

Results are not clamped: points outside the surface are simply drawn off
surface. A zero-sized rectangle or backing surface means "not ready" and
yields None.
===============================================================================
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Tuple

from signature.models.pointer_event import PointerEvent, SurfaceRect
from signature.models.signature_enums import DeviceKind

Point = Tuple[float, float]


def map_to_surface(
    x: float,
    y: float,
    rect: SurfaceRect,
    backing_width: int,
    backing_height: int,
    is_rotated_layout: bool,
) -> Optional[Point]:
    if rect.width <= 0 or rect.height <= 0 or backing_width <= 0 or backing_height <= 0:
        return None

    nx = (x - rect.left) / rect.width
    ny = (y - rect.top) / rect.height

    if is_rotated_layout:
        return ny * backing_width, (1 - nx) * backing_height
    return nx * backing_width, ny * backing_height


def is_rotated_layout(viewport_width: float, viewport_height: float) -> bool:
    """Portrait viewports present the surface rotated."""
    return viewport_height > viewport_width


def accepts_input(event: PointerEvent, pen_only: bool) -> bool:
    """Pen-only filter: with pen_only set, only stylus input produces ink."""
    return not pen_only or event.device_kind == DeviceKind.PEN


@dataclass
class CoordinateMapper:
    """Holds the current surface geometry and maps events against it."""
    rect: SurfaceRect
    backing_width: int
    backing_height: int
    rotated: bool = False

    @property
    def ready(self) -> bool:
        return (self.rect.width > 0 and self.rect.height > 0
                and self.backing_width > 0 and self.backing_height > 0)

    def map_event(self, event: PointerEvent) -> Optional[Point]:
        return map_to_surface(event.x, event.y, self.rect,
                              self.backing_width, self.backing_height, self.rotated)
