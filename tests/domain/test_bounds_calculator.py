from __future__ import annotations

import math

import pytest

from domain.models import ArcTo, PathGeometry, Point
from domain.services.bounds_calculator import (
    MAX_BULGE_PADDING,
    MIN_PADDING,
    base_padding,
    bulge_padding,
    calculate_bounds,
)
from domain.services.path_builder import build_curve, build_self_loop, build_straight
from tests.helpers.board_fixtures import STICKY_A


def test_base_padding_uses_minimum() -> None:
    # 6 * 4 + 8 + 10 = 42 stays under the floor.
    assert base_padding() == MIN_PADDING


def test_base_padding_grows_with_stroke() -> None:
    assert base_padding(stroke_width=10.0, handle_size=8.0) == pytest.approx(78.0)


def test_bulge_padding_is_clamped() -> None:
    start, end = Point(0, 0), Point(100, 0)
    assert bulge_padding(start, end, None) == 0.0
    assert bulge_padding(start, end, Point(50, 100)) == pytest.approx(35.0)
    assert bulge_padding(start, end, Point(50, 5000)) == MAX_BULGE_PADDING


def test_straight_container_wraps_endpoints_with_padding() -> None:
    container = calculate_bounds(build_straight(Point(170, 135), Point(300, 135)))

    assert container is not None
    assert container.padding == MIN_PADDING
    assert container.x == pytest.approx(120)
    assert container.y == pytest.approx(85)
    assert container.width == pytest.approx(230)
    assert container.height == pytest.approx(100)


@pytest.mark.parametrize(
    ("start", "control", "end"),
    [
        (Point(0, 0), Point(50, 400), Point(100, 0)),
        (Point(-300, 20), Point(10, -10), Point(80, 900)),
        (Point(5, 5), Point(1200, 1200), Point(10, 0)),
    ],
)
def test_container_contains_anchors_and_control_with_margin(
    start: Point, control: Point, end: Point
) -> None:
    container = calculate_bounds(build_curve(start, control, end))
    assert container is not None

    expected_padding = max(MIN_PADDING, bulge_padding(start, end, control))
    assert container.padding == pytest.approx(expected_padding)
    for point in (start, end, control):
        assert container.contains(point)
        assert point.x - container.x >= container.padding - 1e-9
        assert point.y - container.y >= container.padding - 1e-9
        assert container.x + container.width - point.x >= container.padding - 1e-9
        assert container.y + container.height - point.y >= container.padding - 1e-9


def test_self_loop_container_covers_the_loop_circle() -> None:
    geometry = build_self_loop(STICKY_A)
    container = calculate_bounds(geometry)
    assert container is not None

    _, arc = geometry.segments
    assert isinstance(arc, ArcTo)
    assert container.contains(geometry.start)
    assert container.contains(geometry.end)
    # The loop bulges below and to the right of the item.
    assert container.x + container.width > geometry.start.x + arc.radius
    assert container.y + container.height > geometry.end.y + arc.radius


def test_non_finite_geometry_has_no_container() -> None:
    geometry = PathGeometry(
        kind="straight",
        segments=(),
        start=Point(0, 0),
        end=Point(math.nan, 0),
    )
    assert calculate_bounds(geometry) is None
