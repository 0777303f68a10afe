from __future__ import annotations

from adapters.board.item_bounds import SnapshotBoundsProvider
from app.config import AppSettings
from domain.models import BoardSnapshot, RenderResult
from domain.services.compute_render_plan import ConnectorRenderEngine
from domain.services.diagnostics import DiagnosticHook


def build_engine(
    settings: AppSettings, diagnostic_hook: DiagnosticHook | None = None
) -> ConnectorRenderEngine:
    return ConnectorRenderEngine(
        config=settings.render.to_render_config(),
        diagnostic_hook=diagnostic_hook,
    )


def build_bounds_provider(
    settings: AppSettings, snapshot: BoardSnapshot
) -> SnapshotBoundsProvider:
    return SnapshotBoundsProvider(snapshot, sticky_base_size=settings.render.sticky_base_size)


def render_snapshot(
    settings: AppSettings,
    snapshot: BoardSnapshot,
    diagnostic_hook: DiagnosticHook | None = None,
) -> list[RenderResult]:
    engine = build_engine(settings, diagnostic_hook)
    return engine.render_board(snapshot, build_bounds_provider(settings, snapshot))
