from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any

from pydantic import ValidationError

from domain.geometry import is_finite_number
from domain.models import (
    CURVE_HANDLE_FILL,
    DEFAULT_CONNECTOR_COLOR,
    SELECTION_COLOR,
    BoardSnapshot,
    Connector,
    Point,
    RenderPlan,
    RenderResult,
    RenderSkip,
)
from domain.ports.bounds import BoundsProvider, BoundsResolver, as_bounds_resolver
from domain.services.bounds_calculator import HANDLE_SIZE, STROKE_WIDTH, calculate_bounds
from domain.services.diagnostics import (
    DiagnosticHook,
    DiagnosticReporter,
    UnrenderableConnectorError,
)
from domain.services.endpoint_resolver import resolve_endpoints
from domain.services.handle_layout import layout_handles
from domain.services.marker_catalog import MarkerCatalog
from domain.services.path_builder import build_path


@dataclass(frozen=True)
class RenderConfig:
    stroke_width: float = STROKE_WIDTH
    handle_size: float = HANDLE_SIZE
    selection_color: str = SELECTION_COLOR
    curve_handle_fill: str = CURVE_HANDLE_FILL
    endpoint_handle_fill: str = DEFAULT_CONNECTOR_COLOR


class ConnectorRenderEngine:
    """Turns connector snapshots into draw-ready render plans.

    One engine owns one marker catalog, so each board should get its own engine.
    """

    def __init__(
        self,
        config: RenderConfig | None = None,
        marker_catalog: MarkerCatalog | None = None,
        diagnostic_hook: DiagnosticHook | None = None,
    ) -> None:
        self.config = config or RenderConfig()
        self.marker_catalog = marker_catalog or MarkerCatalog(self.config.selection_color)
        self.reporter = DiagnosticReporter(diagnostic_hook)

    def compute_render_plan(
        self,
        connector: Connector | Mapping[str, Any],
        board_origin: Point | Mapping[str, Any],
        is_selected: bool,
        resolve_bounds: BoundsProvider | BoundsResolver,
    ) -> RenderResult:
        resolver = as_bounds_resolver(resolve_bounds)

        if isinstance(connector, Mapping):
            raw_id = connector.get("id")
            try:
                connector = Connector.model_validate(connector)
            except ValidationError as exc:
                connector_id = str(raw_id) if raw_id is not None else None
                errors = exc.errors(include_url=False, include_context=False, include_input=False)
                return self._skip(
                    connector_id, "connector", "Malformed connector record", errors=errors
                )
        elif not isinstance(connector, Connector):
            msg = f"connector must be a Connector or a mapping, got {type(connector).__name__}"
            raise TypeError(msg)

        origin = _coerce_origin(board_origin)
        if origin is None:
            return self._skip(connector.id, "board_origin", "Invalid board origin")

        try:
            return self._build_plan(connector, origin, bool(is_selected), resolver)
        except UnrenderableConnectorError as exc:
            return self._skip(connector.id, exc.stage, exc.message, **exc.details)

    def render_board(
        self,
        snapshot: BoardSnapshot,
        provider: BoundsProvider | BoundsResolver,
    ) -> list[RenderResult]:
        self.marker_catalog.retain(set(snapshot.connectors))
        return [
            self.compute_render_plan(
                connector,
                snapshot.origin,
                snapshot.is_selected(connector_id),
                provider,
            )
            for connector_id, connector in snapshot.connectors.items()
        ]

    def _build_plan(
        self,
        connector: Connector,
        board_origin: Point,
        selected: bool,
        resolver: BoundsResolver,
    ) -> RenderPlan:
        resolution = resolve_endpoints(connector, resolver, board_origin, self.reporter)
        geometry = build_path(resolution)
        container = calculate_bounds(geometry, self.config.stroke_width, self.config.handle_size)
        if container is None:
            raise UnrenderableConnectorError("bounds", "Path geometry is not finite")

        handles = layout_handles(
            resolution,
            geometry,
            container,
            board_origin,
            selected,
            handle_size=self.config.handle_size,
            selection_color=self.config.selection_color,
            curve_fill=self.config.curve_handle_fill,
            endpoint_fill=self.config.endpoint_handle_fill,
        )
        marker = self.marker_catalog.marker_for(
            connector.id, connector.arrow_head, selected, connector.color
        )
        return RenderPlan(
            connector_id=connector.id,
            container=container,
            path_kind=geometry.kind,
            segments=geometry.translate(-container.x, -container.y),
            marker=marker,
            handles=handles,
            start=geometry.start,
            end=geometry.end,
            stroke_color=self.config.selection_color if selected else connector.color,
            stroke_width=self.config.stroke_width,
            selected=selected,
            is_self_connection=resolution.is_self_connection,
            marker_angle=geometry.marker_angle,
            z_index=connector.z_index,
        )

    def _skip(
        self,
        connector_id: str | None,
        stage: str,
        message: str,
        **details: Any,
    ) -> RenderSkip:
        self.reporter.report(connector_id, stage, message, **details)
        return RenderSkip(connector_id=connector_id, reason=message, details=details)


def compute_render_plan(
    connector: Connector | Mapping[str, Any],
    board_origin: Point | Mapping[str, Any],
    is_selected: bool,
    resolve_bounds: BoundsProvider | BoundsResolver,
    engine: ConnectorRenderEngine | None = None,
) -> RenderResult:
    engine = engine or ConnectorRenderEngine()
    return engine.compute_render_plan(connector, board_origin, is_selected, resolve_bounds)


def _coerce_origin(board_origin: object) -> Point | None:
    if isinstance(board_origin, Point):
        x, y = board_origin.x, board_origin.y
    elif isinstance(board_origin, Mapping):
        x, y = board_origin.get("x"), board_origin.get("y")
    else:
        return None
    if not (is_finite_number(x) and is_finite_number(y)):
        return None
    return Point(float(x), float(y))
