from __future__ import annotations

import logging
from typing import Any

from fastapi import Body, FastAPI, HTTPException
from fastapi.responses import ORJSONResponse, Response
from pydantic import ValidationError

from adapters.filesystem.render_plan_repository import render_results_payload
from adapters.svg.renderer import render_board_svg
from app.config import AppSettings, load_settings
from app.wiring import render_snapshot
from domain.models import BoardSnapshot, RenderPlan
from domain.services.diagnostics import Diagnostic

logger = logging.getLogger(__name__)


def create_app(settings: AppSettings) -> FastAPI:
    app = FastAPI(title=settings.title, default_response_class=ORJSONResponse)
    app.state.settings = settings

    def parse_snapshot(payload: dict[str, Any]) -> BoardSnapshot:
        try:
            return BoardSnapshot.model_validate(payload)
        except ValidationError as exc:
            raise HTTPException(
                status_code=422,
                detail=exc.errors(include_url=False, include_context=False),
            ) from exc

    @app.get("/health")
    def health() -> ORJSONResponse:
        return ORJSONResponse({"status": "ok", "title": settings.title})

    @app.post("/api/render-plans")
    def render_plans(payload: dict[str, Any] = Body(...)) -> ORJSONResponse:
        snapshot = parse_snapshot(payload)
        diagnostics: list[Diagnostic] = []
        results = render_snapshot(settings, snapshot, diagnostics.append)
        body = render_results_payload(results)
        body["diagnostics"] = [
            {
                "connectorId": diagnostic.connector_id,
                "stage": diagnostic.stage,
                "message": diagnostic.message,
            }
            for diagnostic in diagnostics
        ]
        logger.info(
            "Rendered %s connectors (%s skipped)", len(results), len(body["skipped"])
        )
        return ORJSONResponse(body)

    @app.post("/api/render-plans/svg")
    def render_plans_svg(
        payload: dict[str, Any] = Body(...), margin: float = 0.0
    ) -> Response:
        snapshot = parse_snapshot(payload)
        results = render_snapshot(settings, snapshot)
        drawable = [result for result in results if isinstance(result, RenderPlan)]
        return Response(
            content=render_board_svg(drawable, margin=margin), media_type="image/svg+xml"
        )

    return app


app = create_app(load_settings())
