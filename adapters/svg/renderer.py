from __future__ import annotations

from collections.abc import Iterable, Sequence

import svg

from domain.models import (
    ArcTo,
    CubicTo,
    Handle,
    LineTo,
    MarkerShape,
    MoveTo,
    PathSegment,
    RenderPlan,
)

HANDLE_STROKE_WIDTH = 2


def path_commands(segments: Iterable[PathSegment]) -> list[svg.PathData]:
    commands: list[svg.PathData] = []
    for segment in segments:
        if isinstance(segment, MoveTo):
            commands.append(svg.MoveTo(segment.point.x, segment.point.y))
        elif isinstance(segment, LineTo):
            commands.append(svg.LineTo(segment.point.x, segment.point.y))
        elif isinstance(segment, CubicTo):
            commands.append(
                svg.CubicBezier(
                    segment.control1.x,
                    segment.control1.y,
                    segment.control2.x,
                    segment.control2.y,
                    segment.end.x,
                    segment.end.y,
                )
            )
        elif isinstance(segment, ArcTo):
            commands.append(
                svg.Arc(
                    segment.radius,
                    segment.radius,
                    0,
                    segment.large_arc,
                    segment.sweep,
                    segment.end.x,
                    segment.end.y,
                )
            )
    return commands


def marker_element(marker: MarkerShape, angle: float | None) -> svg.Marker:
    elements: list[svg.Element] = []
    if not marker.is_empty:
        first, *rest = marker.points
        d: list[svg.PathData] = [svg.MoveTo(first.x, first.y)]
        d.extend(svg.LineTo(point.x, point.y) for point in rest)
        if marker.closed:
            d.append(svg.Z())
        elements.append(
            svg.Path(
                d=d,
                class_=["marker-path"],
                stroke=marker.stroke,
                stroke_width=marker.stroke_width,
                fill=marker.fill,
            )
        )
    return svg.Marker(
        id=marker.marker_id,
        markerWidth=marker.width,
        markerHeight=marker.height,
        refX=marker.ref.x,
        refY=marker.ref.y,
        orient="auto" if angle is None else angle,
        markerUnits=marker.units,
        elements=elements,
    )


def handle_element(handle: Handle) -> svg.Circle:
    return svg.Circle(
        cx=handle.local_position.x,
        cy=handle.local_position.y,
        r=handle.radius,
        fill=handle.fill,
        stroke=handle.stroke,
        stroke_width=HANDLE_STROKE_WIDTH,
        class_=_handle_classes(handle),
    )


def plan_group(plan: RenderPlan) -> svg.G:
    path_kwargs = {
        "d": path_commands(plan.segments),
        "class_": ["connector-path"],
        "fill": "none",
        "stroke": plan.stroke_color,
        "stroke_width": plan.stroke_width,
    }
    if not plan.marker.is_empty:
        path_kwargs["marker_end"] = f"url(#{plan.marker_id})"

    elements: list[svg.Element] = [
        svg.Defs(elements=[marker_element(plan.marker, plan.marker_angle)]),
        svg.Path(**path_kwargs),
    ]
    elements.extend(handle_element(handle) for handle in plan.handles)

    classes = ["connector-container", f"connector-{plan.connector_id}"]
    if plan.selected:
        classes.append("selected")
    return svg.G(
        class_=classes,
        transform=[svg.Translate(plan.container.x, plan.container.y)],
        elements=elements,
    )


def render_plan_to_svg(plan: RenderPlan) -> str:
    root = svg.SVG(
        width=plan.container.width,
        height=plan.container.height,
        viewBox=svg.ViewBoxSpec(
            plan.container.x, plan.container.y, plan.container.width, plan.container.height
        ),
        elements=[plan_group(plan)],
    )
    return str(root)


def render_board_svg(plans: Sequence[RenderPlan], margin: float = 0.0) -> str:
    ordered = sorted(
        plans, key=lambda plan: (plan.z_index is None, plan.z_index or 0, plan.connector_id)
    )
    if ordered:
        min_x = min(plan.container.x for plan in ordered) - margin
        min_y = min(plan.container.y for plan in ordered) - margin
        max_x = max(plan.container.x + plan.container.width for plan in ordered) + margin
        max_y = max(plan.container.y + plan.container.height for plan in ordered) + margin
    else:
        min_x = min_y = 0.0
        max_x = max_y = 1.0
    root = svg.SVG(
        width=max_x - min_x,
        height=max_y - min_y,
        viewBox=svg.ViewBoxSpec(min_x, min_y, max_x - min_x, max_y - min_y),
        elements=[plan_group(plan) for plan in ordered],
    )
    return str(root)


def _handle_classes(handle: Handle) -> list[str]:
    role_class = "curve-control-handle" if handle.role == "curve" else f"{handle.role}-handle"
    classes = ["connector-handle", role_class]
    if not handle.visible:
        classes.append("connector-handle-hidden")
    return classes
