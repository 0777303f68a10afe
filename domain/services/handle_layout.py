from __future__ import annotations

from domain.models import (
    CURVE_HANDLE_FILL,
    DEFAULT_CONNECTOR_COLOR,
    HANDLE_STROKE,
    SELECTION_COLOR,
    ContainerRect,
    EndpointResolution,
    Handle,
    HandleRole,
    PathGeometry,
    Point,
)
from domain.services.bounds_calculator import HANDLE_SIZE


def curve_handle_position(geometry: PathGeometry) -> Point:
    if geometry.control_point is not None:
        return geometry.control_point
    return geometry.start.midpoint(geometry.end)


def layout_handles(
    resolution: EndpointResolution,
    geometry: PathGeometry,
    container: ContainerRect,
    board_origin: Point,
    selected: bool,
    handle_size: float = HANDLE_SIZE,
    selection_color: str = SELECTION_COLOR,
    curve_fill: str = CURVE_HANDLE_FILL,
    endpoint_fill: str = DEFAULT_CONNECTOR_COLOR,
) -> tuple[Handle, ...]:
    if selected:
        endpoint_fill = selection_color
    placements: list[tuple[HandleRole, Point, str]] = []
    if resolution.origin.is_free:
        placements.append(("origin", geometry.start, endpoint_fill))
    if resolution.destination.is_free:
        placements.append(("destination", geometry.end, endpoint_fill))
    placements.append(("curve", curve_handle_position(geometry), curve_fill))

    return tuple(
        Handle(
            role=role,
            board_position=Point(position.x + board_origin.x, position.y + board_origin.y),
            local_position=container.to_local(position),
            radius=handle_size / 2,
            fill=fill,
            stroke=HANDLE_STROKE,
            visible=selected,
        )
        for role, position, fill in placements
    )
