from __future__ import annotations
from dataclasses import dataclass

from .signature_enums import DeviceKind


@dataclass(frozen=True)
class PointerEvent:
    """
    Capability-tagged pointer input in viewport coordinates.

    pointer_id identifies the contact for exclusive capture (one finger or
    pen tip per session).
    """
    x: float
    y: float
    device_kind: DeviceKind = DeviceKind.MOUSE
    pointer_id: int = 1


@dataclass(frozen=True)
class SurfaceRect:
    """Bounding rectangle of the capture surface in layout pixels (post rotation)."""
    left: float
    top: float
    width: float
    height: float


@dataclass(frozen=True)
class SurfaceLayout:
    """
    One measurement of the capture container, taken by the host view.

    container_width/height : layout size of the drawing container
    device_pixel_ratio     : backing pixels per layout pixel
    viewport_width/height  : used to detect portrait (rotated) presentation
    rect                   : where the surface currently sits in the viewport
    rotatable              : False when the host cannot present the surface
                             turned by 90 degrees; portrait then maps flat
    """
    container_width: float
    container_height: float
    device_pixel_ratio: float
    viewport_width: float
    viewport_height: float
    rect: SurfaceRect
    rotatable: bool = True

    @property
    def backing_size(self) -> tuple[int, int]:
        dpr = self.device_pixel_ratio or 1.0
        return int(self.container_width * dpr), int(self.container_height * dpr)

    @property
    def is_rotated(self) -> bool:
        return self.rotatable and self.viewport_height > self.viewport_width
