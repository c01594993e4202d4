from __future__ import annotations
from enum import Enum


class DeviceKind(str, Enum):
    """Input device that produced a pointer event."""
    PEN = "pen"
    TOUCH = "touch"
    MOUSE = "mouse"


class CaptureState(str, Enum):
    """Lifecycle of a capture session: CLOSED -> IDLE <-> DRAWING -> CLOSED."""
    CLOSED = "closed"
    IDLE = "idle"
    DRAWING = "drawing"
