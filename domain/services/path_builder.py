from __future__ import annotations

import math

from domain.geometry import clamp, unit_vector
from domain.models import (
    ArcTo,
    CubicTo,
    EndpointResolution,
    LineTo,
    MoveTo,
    PathGeometry,
    PathKind,
    Point,
    RectBounds,
)
from domain.services.anchor_resolver import resolve_anchor

# Curvature constants are empirical and awaiting design review.
SELF_LOOP_RADIUS_FACTOR = 0.5
SELF_LOOP_MIN_RADIUS = 40.0
SELF_LOOP_MAX_RADIUS = 300.0
SELF_LOOP_MARGIN_FACTOR = 0.15
SELF_LOOP_MIN_MARGIN = 12.0
SELF_LOOP_MAX_MARGIN = 48.0
# Fractions of width/height, measured from the centre toward the bottom-right.
SELF_LOOP_DEPARTURE_TARGET = (0.75, 0.25)
SELF_LOOP_RETURN_TARGET = (0.25, 0.75)
SELF_LOOP_MARKER_ANGLE = -90.0

CURVE_MIDPOINT_TOLERANCE = 1.0
CURVE_END_HANDLE_SCALE = 0.0
CURVE_MID_HANDLE_SCALE = 0.22
TANGENT_EPSILON = 1e-6

_DIAGONAL = math.sqrt(2) / 2


def select_path_kind(resolution: EndpointResolution) -> PathKind:
    if resolution.is_self_connection and resolution.control_point is None:
        return "self_loop"
    control = resolution.control_point
    if control is not None:
        chord_mid = resolution.origin.point.midpoint(resolution.destination.point)
        if control.distance_to(chord_mid) > CURVE_MIDPOINT_TOLERANCE:
            return "curved"
    return "straight"


def build_path(resolution: EndpointResolution) -> PathGeometry:
    kind = select_path_kind(resolution)
    if kind == "self_loop" and resolution.origin.bounds is not None:
        return build_self_loop(resolution.origin.bounds)
    if kind == "curved" and resolution.control_point is not None:
        return build_curve(
            resolution.origin.point, resolution.control_point, resolution.destination.point
        )
    return build_straight(
        resolution.origin.point, resolution.destination.point, resolution.control_point
    )


def self_loop_metrics(bounds: RectBounds) -> tuple[float, float, Point]:
    """Return ``(radius, margin, loop_center)`` for a loop on the given item."""
    average = (bounds.width + bounds.height) / 2
    radius = clamp(SELF_LOOP_RADIUS_FACTOR * average, SELF_LOOP_MIN_RADIUS, SELF_LOOP_MAX_RADIUS)
    margin = clamp(SELF_LOOP_MARGIN_FACTOR * average, SELF_LOOP_MIN_MARGIN, SELF_LOOP_MAX_MARGIN)
    offset = (radius + margin) * _DIAGONAL
    return radius, margin, Point(bounds.center_x + offset, bounds.center_y + offset)


def build_self_loop(bounds: RectBounds) -> PathGeometry:
    radius, _, loop_center = self_loop_metrics(bounds)
    start = resolve_anchor(bounds, _loop_target(bounds, SELF_LOOP_DEPARTURE_TARGET))
    end = resolve_anchor(bounds, _loop_target(bounds, SELF_LOOP_RETURN_TARGET))
    return PathGeometry(
        kind="self_loop",
        segments=(MoveTo(start), ArcTo(radius=radius, end=end, large_arc=True, sweep=True)),
        start=start,
        end=end,
        control_point=loop_center,
        marker_angle=SELF_LOOP_MARKER_ANGLE,
    )


def build_curve(start: Point, control: Point, end: Point) -> PathGeometry:
    dir1_x, dir1_y, length1 = unit_vector(control.x - start.x, control.y - start.y)
    dir2_x, dir2_y, length2 = unit_vector(end.x - control.x, end.y - control.y)

    tangent_x, tangent_y = dir1_x + dir2_x, dir1_y + dir2_y
    tangent_length = math.hypot(tangent_x, tangent_y)
    if tangent_length < TANGENT_EPSILON:
        # Segments point in opposite directions.
        tangent_x, tangent_y = dir1_x, dir1_y
    else:
        tangent_x, tangent_y = tangent_x / tangent_length, tangent_y / tangent_length

    first = CubicTo(
        control1=Point(
            start.x + dir1_x * length1 * CURVE_END_HANDLE_SCALE,
            start.y + dir1_y * length1 * CURVE_END_HANDLE_SCALE,
        ),
        control2=Point(
            control.x - tangent_x * length1 * CURVE_MID_HANDLE_SCALE,
            control.y - tangent_y * length1 * CURVE_MID_HANDLE_SCALE,
        ),
        end=control,
    )
    second = CubicTo(
        control1=Point(
            control.x + tangent_x * length2 * CURVE_MID_HANDLE_SCALE,
            control.y + tangent_y * length2 * CURVE_MID_HANDLE_SCALE,
        ),
        control2=Point(
            end.x - dir2_x * length2 * CURVE_END_HANDLE_SCALE,
            end.y - dir2_y * length2 * CURVE_END_HANDLE_SCALE,
        ),
        end=end,
    )
    return PathGeometry(
        kind="curved",
        segments=(MoveTo(start), first, second),
        start=start,
        end=end,
        control_point=control,
    )


def build_straight(start: Point, end: Point, control_point: Point | None = None) -> PathGeometry:
    return PathGeometry(
        kind="straight",
        segments=(MoveTo(start), LineTo(end)),
        start=start,
        end=end,
        control_point=control_point,
    )


def _loop_target(bounds: RectBounds, fractions: tuple[float, float]) -> Point:
    return Point(
        bounds.center_x + bounds.width * fractions[0],
        bounds.center_y + bounds.height * fractions[1],
    )
