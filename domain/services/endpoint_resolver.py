from __future__ import annotations

from collections.abc import Mapping

from domain.models import (
    Connector,
    ConnectorEndpoint,
    EndpointResolution,
    Point,
    RectBounds,
    ResolvedEndpoint,
)
from domain.ports.bounds import BoundsResolver
from domain.services.anchor_resolver import resolve_anchor
from domain.services.diagnostics import DiagnosticReporter, UnrenderableConnectorError

FALLBACK_FREE_POINT = Point(0.0, 0.0)


def resolve_endpoints(
    connector: Connector,
    resolve_bounds: BoundsResolver,
    board_origin: Point,
    reporter: DiagnosticReporter | None = None,
) -> EndpointResolution:
    if not (_has_reference(connector.origin) or _has_reference(connector.destination)):
        raise UnrenderableConnectorError("endpoints", "Connector has no renderable endpoints")

    # A vanished item leaves its endpoint free at the stored point or FALLBACK_FREE_POINT.
    origin_bounds = _lookup_bounds(
        connector, "origin", connector.origin, resolve_bounds, board_origin, reporter
    )
    destination_bounds = _lookup_bounds(
        connector, "destination", connector.destination, resolve_bounds, board_origin, reporter
    )

    control_point: Point | None = None
    if connector.curve_control_point is not None:
        control_point = _to_relative(
            connector.curve_control_point, board_origin, "curve_control_point"
        )

    origin_free = (
        _free_point(connector.origin, board_origin, "origin") if origin_bounds is None else None
    )
    destination_free = (
        _free_point(connector.destination, board_origin, "destination")
        if destination_bounds is None
        else None
    )

    if origin_bounds is not None:
        target = control_point or (
            destination_bounds.center if destination_bounds is not None else destination_free
        )
        origin_point = resolve_anchor(origin_bounds, target)
    else:
        origin_point = origin_free

    if destination_bounds is not None:
        target = control_point or (
            origin_bounds.center if origin_bounds is not None else origin_free
        )
        destination_point = resolve_anchor(destination_bounds, target)
    else:
        destination_point = destination_free

    is_same_item = connector.is_same_item
    is_self_connection = (
        is_same_item
        and origin_bounds is not None
        and destination_bounds is not None
        and control_point is None
    )
    return EndpointResolution(
        origin=ResolvedEndpoint(point=origin_point, bounds=origin_bounds),
        destination=ResolvedEndpoint(point=destination_point, bounds=destination_bounds),
        control_point=control_point,
        is_same_item=is_same_item,
        is_self_connection=is_self_connection,
    )


def _has_reference(endpoint: ConnectorEndpoint) -> bool:
    return endpoint.item is not None or endpoint.point is not None


def _lookup_bounds(
    connector: Connector,
    side: str,
    endpoint: ConnectorEndpoint,
    resolve_bounds: BoundsResolver,
    board_origin: Point,
    reporter: DiagnosticReporter | None,
) -> RectBounds | None:
    if endpoint.item is None:
        return None
    raw = resolve_bounds(endpoint.item.item_id, endpoint.item.item_type, board_origin)
    if raw is None:
        if reporter is not None:
            reporter.report(
                connector.id,
                "endpoints",
                f"{side} item not found, treating endpoint as free",
                item_id=endpoint.item.item_id,
                item_type=endpoint.item.item_type,
            )
        return None
    bounds = RectBounds.from_mapping(raw) if isinstance(raw, Mapping) else raw
    if not isinstance(bounds, RectBounds) or not bounds.is_finite():
        raise UnrenderableConnectorError(
            "endpoints",
            f"Invalid {side} item bounds",
            item_id=endpoint.item.item_id,
            item_type=endpoint.item.item_type,
        )
    return bounds


def _free_point(endpoint: ConnectorEndpoint, board_origin: Point, side: str) -> Point:
    point = endpoint.point if endpoint.point is not None else FALLBACK_FREE_POINT
    return _to_relative(point, board_origin, f"{side}_point")


def _to_relative(point: Point, board_origin: Point, name: str) -> Point:
    if not point.is_finite():
        raise UnrenderableConnectorError("endpoints", f"Invalid {name}", x=point.x, y=point.y)
    return Point(point.x - board_origin.x, point.y - board_origin.y)
