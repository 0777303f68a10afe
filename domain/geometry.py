from __future__ import annotations

import math

from domain.models import Point


def is_finite_number(value: object) -> bool:
    return (
        isinstance(value, (int, float))
        and not isinstance(value, bool)
        and math.isfinite(value)
    )


def clamp(value: float, lower: float, upper: float) -> float:
    return min(max(value, lower), upper)


def unit_vector(dx: float, dy: float) -> tuple[float, float, float]:
    """Return ``(ux, uy, length)``; a zero vector keeps length 1 and direction (0, 0)."""
    length = math.hypot(dx, dy) or 1.0
    return dx / length, dy / length, length


def arc_center(
    start: Point,
    end: Point,
    radius: float,
    large_arc: bool,
    sweep: bool,
) -> tuple[Point, float]:
    """Centre and effective radius of an SVG-style circular arc between two points.

    Follows the endpoint-to-centre conversion used by SVG renderers: a radius
    too small to span the chord is scaled up until it does.
    """
    half_dx = (start.x - end.x) / 2
    half_dy = (start.y - end.y) / 2
    chord_sq = half_dx * half_dx + half_dy * half_dy
    if chord_sq == 0:
        return start, abs(radius)
    radius = abs(radius)
    if radius * radius < chord_sq:
        radius = math.sqrt(chord_sq)
    factor = math.sqrt(max(0.0, (radius * radius - chord_sq) / chord_sq))
    if large_arc == sweep:
        factor = -factor
    mid = start.midpoint(end)
    return Point(mid.x + factor * half_dy, mid.y - factor * half_dx), radius
