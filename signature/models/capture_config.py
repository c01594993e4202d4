from __future__ import annotations
from dataclasses import dataclass


@dataclass
class CaptureConfig:
    """
    Options of one signature capture surface.

    keep_open_on_save is used for attendee rosters: after each save the
    ink is cleared and the surface stays open for the next person.
    """
    line_width: float = 3.5
    stroke_color: str = "#000000"
    pen_only: bool = False
    keep_open_on_save: bool = False

    # seconds
    settle_delay: float = 0.3
    success_indicator: float = 2.0
