"""Coordinate mapping from viewport positions into backing surface pixels."""
from __future__ import annotations

import pytest

from signature.logic.coordinate_mapper import (
    CoordinateMapper,
    accepts_input,
    is_rotated_layout,
    map_to_surface,
)
from signature.models.pointer_event import PointerEvent, SurfaceRect
from signature.models.signature_enums import DeviceKind

RECT = SurfaceRect(left=0, top=0, width=200, height=100)


def test_midpoint_maps_to_midpoint() -> None:
    assert map_to_surface(100, 50, RECT, 400, 200, False) == (200, 100)


def test_rotated_swaps_and_inverts_axes() -> None:
    x, y = map_to_surface(100, 25, RECT, 400, 200, True)
    assert x == pytest.approx((25 / 100) * 400)
    assert y == pytest.approx((1 - 100 / 200) * 200)


def test_rect_offset_is_subtracted() -> None:
    rect = SurfaceRect(left=10, top=20, width=200, height=100)
    assert map_to_surface(10, 20, rect, 400, 200, False) == (0, 0)
    assert map_to_surface(210, 120, rect, 400, 200, False) == (400, 200)


def test_points_outside_are_not_clamped() -> None:
    x, y = map_to_surface(-50, 150, RECT, 400, 200, False)
    assert x == -100
    assert y == 300


@pytest.mark.parametrize(
    "rect,bw,bh",
    [
        (SurfaceRect(0, 0, 0, 100), 400, 200),
        (SurfaceRect(0, 0, 200, 0), 400, 200),
        (RECT, 0, 200),
        (RECT, 400, 0),
    ],
)
def test_zero_sizes_mean_not_ready(rect, bw, bh) -> None:
    assert map_to_surface(10, 10, rect, bw, bh, False) is None
    mapper = CoordinateMapper(rect=rect, backing_width=bw, backing_height=bh)
    assert not mapper.ready
    assert mapper.map_event(PointerEvent(10, 10)) is None


def test_portrait_viewport_is_rotated() -> None:
    assert is_rotated_layout(390, 844)
    assert not is_rotated_layout(1024, 768)
    assert not is_rotated_layout(800, 800)


def test_pen_only_filter() -> None:
    pen = PointerEvent(1, 1, DeviceKind.PEN)
    touch = PointerEvent(1, 1, DeviceKind.TOUCH)
    mouse = PointerEvent(1, 1, DeviceKind.MOUSE)
    assert accepts_input(pen, pen_only=True)
    assert not accepts_input(touch, pen_only=True)
    assert not accepts_input(mouse, pen_only=True)
    assert all(accepts_input(e, pen_only=False) for e in (pen, touch, mouse))


def test_mapper_uses_rotation_flag() -> None:
    mapper = CoordinateMapper(rect=RECT, backing_width=400, backing_height=200, rotated=True)
    assert mapper.ready
    assert mapper.map_event(PointerEvent(100, 25)) == pytest.approx((100, 100))
