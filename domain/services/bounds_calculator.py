from __future__ import annotations

from domain.geometry import arc_center, clamp
from domain.models import ArcTo, ContainerRect, LineTo, MoveTo, PathGeometry, Point

STROKE_WIDTH = 4.0
MARKER_EXTENSION_FACTOR = 6.0
HANDLE_SIZE = 8.0
MIN_PADDING = 50.0
PADDING_SLACK = 10.0
BULGE_PADDING_FACTOR = 0.35
MAX_BULGE_PADDING = 200.0


def base_padding(stroke_width: float = STROKE_WIDTH, handle_size: float = HANDLE_SIZE) -> float:
    marker_extension = MARKER_EXTENSION_FACTOR * stroke_width
    return max(MIN_PADDING, marker_extension + handle_size + PADDING_SLACK)


def bulge_padding(start: Point, end: Point, control_point: Point | None) -> float:
    if control_point is None:
        return 0.0
    bulge = control_point.distance_to(start.midpoint(end))
    return clamp(bulge * BULGE_PADDING_FACTOR, 0.0, MAX_BULGE_PADDING)


def calculate_bounds(
    geometry: PathGeometry,
    stroke_width: float = STROKE_WIDTH,
    handle_size: float = HANDLE_SIZE,
) -> ContainerRect | None:
    points = [geometry.start, geometry.end]
    if geometry.control_point is not None:
        points.append(geometry.control_point)
    if geometry.kind == "self_loop":
        points.extend(_arc_extremes(geometry))
    if not all(point.is_finite() for point in points):
        return None

    min_x = min(point.x for point in points)
    min_y = min(point.y for point in points)
    max_x = max(point.x for point in points)
    max_y = max(point.y for point in points)

    padding = max(
        base_padding(stroke_width, handle_size),
        bulge_padding(geometry.start, geometry.end, geometry.control_point),
    )
    return ContainerRect(
        x=min_x - padding,
        y=min_y - padding,
        width=max_x - min_x + padding * 2,
        height=max_y - min_y + padding * 2,
        padding=padding,
    )


def _arc_extremes(geometry: PathGeometry) -> list[Point]:
    extremes: list[Point] = []
    current = geometry.start
    for segment in geometry.segments:
        if isinstance(segment, ArcTo):
            center, radius = arc_center(
                current, segment.end, segment.radius, segment.large_arc, segment.sweep
            )
            extremes.extend(
                [
                    Point(center.x - radius, center.y - radius),
                    Point(center.x + radius, center.y + radius),
                ]
            )
            current = segment.end
        elif isinstance(segment, (MoveTo, LineTo)):
            current = segment.point
        else:
            current = segment.end
    return extremes
