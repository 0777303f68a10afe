from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Any

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Diagnostic:
    connector_id: str | None
    stage: str
    message: str
    details: dict[str, Any] = field(default_factory=dict)


DiagnosticHook = Callable[[Diagnostic], None]


class UnrenderableConnectorError(ValueError):
    """Raised inside the engine when a connector has to be left out of the frame."""

    def __init__(self, stage: str, message: str, **details: Any) -> None:
        super().__init__(message)
        self.stage = stage
        self.message = message
        self.details = details


class DiagnosticReporter:
    def __init__(self, hook: DiagnosticHook | None = None) -> None:
        self.hook = hook

    def report(
        self,
        connector_id: str | None,
        stage: str,
        message: str,
        **details: Any,
    ) -> Diagnostic:
        diagnostic = Diagnostic(
            connector_id=connector_id,
            stage=stage,
            message=message,
            details=details,
        )
        logger.warning(
            "Connector %s degraded at %s: %s %s",
            connector_id,
            stage,
            message,
            details or "",
        )
        if self.hook is not None:
            self.hook(diagnostic)
        return diagnostic
