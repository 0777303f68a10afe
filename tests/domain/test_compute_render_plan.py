from __future__ import annotations

import math
from typing import Any

import pytest

from domain.models import (
    ArcTo,
    BoardSnapshot,
    Connector,
    LineTo,
    MoveTo,
    Point,
    RectBounds,
    RenderPlan,
    RenderSkip,
)
from domain.services.compute_render_plan import (
    ConnectorRenderEngine,
    RenderConfig,
    compute_render_plan,
)
from domain.services.diagnostics import Diagnostic
from tests.helpers.board_fixtures import STICKY_A, STICKY_B, connector_payload, static_resolver


@pytest.fixture
def resolver() -> Any:
    return static_resolver({"a": STICKY_A, "b": STICKY_B})


def _plan(result: RenderPlan | RenderSkip) -> RenderPlan:
    assert isinstance(result, RenderPlan), result
    return result


def test_straight_connector_between_items(resolver: Any) -> None:
    plan = _plan(compute_render_plan(connector_payload(), Point(0, 0), False, resolver))

    assert plan.path_kind == "straight"
    assert (plan.start.x, plan.start.y) == pytest.approx((170, 135))
    assert (plan.end.x, plan.end.y) == pytest.approx((300, 135))
    move, line = plan.segments
    assert isinstance(move, MoveTo) and isinstance(line, LineTo)
    assert move.point == plan.container.to_local(plan.start)
    assert line.point == plan.container.to_local(plan.end)
    assert [handle.role for handle in plan.handles] == ["curve"]
    assert plan.marker_id == "arrowhead-c1-filled-unselected"
    assert plan.stroke_color == "#000000"


def test_free_destination_is_not_snapped(resolver: Any) -> None:
    payload = {
        "id": "c1",
        "originItemId": "a",
        "originItemType": "sticky",
        "destinationPoint": {"x": 400, "y": 400},
    }
    plan = _plan(compute_render_plan(payload, Point(0, 0), False, resolver))

    assert plan.end == Point(400, 400)
    assert [handle.role for handle in plan.handles] == ["destination", "curve"]


def test_self_connection_draws_a_loop(resolver: Any) -> None:
    plan = _plan(
        compute_render_plan(connector_payload(destinationItemId="a"), Point(0, 0), False, resolver)
    )

    assert plan.is_self_connection
    assert plan.path_kind == "self_loop"
    assert any(isinstance(segment, ArcTo) for segment in plan.segments)
    assert not any(isinstance(segment, LineTo) for segment in plan.segments)
    assert plan.marker_angle == -90


def test_curved_connector_with_control_point(resolver: Any) -> None:
    payload = connector_payload(curveControlPoint={"x": 235, "y": 0}, arrowHead="hollow")
    plan = _plan(compute_render_plan(payload, Point(0, 0), True, resolver))

    assert plan.path_kind == "curved"
    assert len(plan.segments) == 3
    assert plan.selected
    assert plan.stroke_color == "#4646d8"
    assert plan.marker.kind == "hollow"
    assert plan.handle("curve") is not None
    assert plan.handle("curve").board_position == Point(235, 0)
    assert plan.container.contains(Point(235, 0))


def test_identical_inputs_produce_identical_plans(resolver: Any) -> None:
    engine = ConnectorRenderEngine()
    payload = connector_payload(curveControlPoint={"x": 200, "y": 300})

    first = engine.compute_render_plan(payload, Point(3, 4), True, resolver)
    second = engine.compute_render_plan(payload, Point(3, 4), True, resolver)

    assert first == second
    assert _plan(first).to_dict() == _plan(second).to_dict()


def test_board_origin_shifts_item_space(resolver: Any) -> None:
    calls: list[tuple[str, str, Point]] = []
    recording = static_resolver({"a": STICKY_A, "b": STICKY_B}, calls)
    compute_render_plan(connector_payload(), {"x": 10, "y": 20}, False, recording)

    assert {call[2] for call in calls} == {Point(10.0, 20.0)}


def test_missing_resolver_is_fatal() -> None:
    with pytest.raises(TypeError):
        compute_render_plan(connector_payload(), Point(0, 0), False, None)  # type: ignore[arg-type]


def test_wrong_connector_type_is_fatal(resolver: Any) -> None:
    with pytest.raises(TypeError):
        compute_render_plan(42, Point(0, 0), False, resolver)  # type: ignore[arg-type]


def test_vanished_items_still_render_with_drag_handles() -> None:
    diagnostics: list[Diagnostic] = []
    engine = ConnectorRenderEngine(diagnostic_hook=diagnostics.append)
    plan = _plan(
        engine.compute_render_plan(connector_payload(), Point(10, 20), False, static_resolver({}))
    )

    assert plan.start == Point(-10, -20)
    assert plan.end == Point(-10, -20)
    assert [handle.role for handle in plan.handles] == ["origin", "destination", "curve"]
    assert plan.handle("origin").board_position == Point(0, 0)
    assert all("treating endpoint as free" in d.message for d in diagnostics)


def test_no_renderable_endpoints_is_skipped() -> None:
    diagnostics: list[Diagnostic] = []
    engine = ConnectorRenderEngine(diagnostic_hook=diagnostics.append)
    result = engine.compute_render_plan(
        {"id": "c1", "arrowHead": "line"}, Point(0, 0), False, static_resolver({})
    )

    assert isinstance(result, RenderSkip)
    assert result.connector_id == "c1"
    assert result.to_dict()["status"] == "skipped"
    stages = [diagnostic.stage for diagnostic in diagnostics]
    assert stages[-1] == "endpoints"
    assert "no renderable endpoints" in diagnostics[-1].message


def test_malformed_record_is_skipped(resolver: Any) -> None:
    diagnostics: list[Diagnostic] = []
    engine = ConnectorRenderEngine(diagnostic_hook=diagnostics.append)
    result = engine.compute_render_plan(
        {"id": "c9", "curveControlPoint": {"x": "left"}}, Point(0, 0), False, resolver
    )

    assert isinstance(result, RenderSkip)
    assert result.connector_id == "c9"
    assert diagnostics[0].stage == "connector"


def test_invalid_origin_is_skipped(resolver: Any) -> None:
    result = compute_render_plan(connector_payload(), {"x": math.nan, "y": 0}, False, resolver)
    assert isinstance(result, RenderSkip)
    assert result.reason == "Invalid board origin"


def test_non_finite_bounds_are_skipped() -> None:
    broken = {"a": RectBounds(math.inf, 0, 10, 10), "b": STICKY_B}
    result = compute_render_plan(connector_payload(), Point(0, 0), False, static_resolver(broken))
    assert isinstance(result, RenderSkip)


def test_bounds_provider_object_is_accepted() -> None:
    class Provider:
        def resolve_bounds(self, item_id: str, item_type: str, board_origin: Point) -> Any:
            return {"a": STICKY_A, "b": STICKY_B}.get(item_id)

    result = compute_render_plan(connector_payload(), Point(0, 0), False, Provider())
    assert isinstance(result, RenderPlan)


def test_custom_render_config_flows_into_plan(resolver: Any) -> None:
    engine = ConnectorRenderEngine(
        RenderConfig(stroke_width=6.0, handle_size=12.0, selection_color="#ff00ff")
    )
    plan = _plan(
        engine.compute_render_plan(
            Connector.model_validate(connector_payload()), Point(0, 0), True, resolver
        )
    )

    assert plan.stroke_width == 6.0
    assert plan.stroke_color == "#ff00ff"
    assert plan.marker.fill == "#ff00ff"
    assert plan.handles[0].radius == 6.0


def test_render_board_prunes_markers_of_removed_connectors(demo_board: BoardSnapshot) -> None:
    engine = ConnectorRenderEngine()
    engine.marker_catalog.marker_for("gone", "filled", False, "#000000")

    results = engine.render_board(demo_board, static_resolver({}))

    assert len(results) == len(demo_board.connectors)
    assert engine.marker_catalog.keys_for("gone") == set()


def test_render_board_skips_only_malformed_records() -> None:
    diagnostics: list[Diagnostic] = []
    snapshot = BoardSnapshot.model_validate(
        {
            "connectors": {
                "good": {"originPoint": {"x": 0, "y": 0}, "destinationPoint": {"x": 50, "y": 0}},
                "bad": {"curveControlPoint": {"x": "left"}},
            }
        }
    )
    engine = ConnectorRenderEngine(diagnostic_hook=diagnostics.append)

    results = engine.render_board(snapshot, static_resolver({}))

    assert [type(result) for result in results] == [RenderPlan, RenderSkip]
    assert results[1].connector_id == "bad"
    assert results[1].reason == "Malformed connector record"
    assert [diagnostic.connector_id for diagnostic in diagnostics] == ["bad"]
