from __future__ import annotations

import logging
import math

from domain.geometry import is_finite_number
from domain.models import Point, RectBounds

logger = logging.getLogger(__name__)


def resolve_edge_point(
    center_x: float,
    center_y: float,
    target_x: float,
    target_y: float,
    width: float,
    height: float,
) -> Point:
    """Point where the ray from the rectangle centre toward the target leaves its boundary."""
    values = (center_x, center_y, target_x, target_y, width, height)
    if not all(is_finite_number(value) for value in values):
        logger.debug(
            "Invalid edge point inputs, falling back to centre: %s",
            dict(zip(("center_x", "center_y", "target_x", "target_y", "width", "height"), values)),
        )
        return _center_fallback(center_x, center_y)

    half_width = abs(width) / 2
    half_height = abs(height) / 2
    dx = target_x - center_x
    dy = target_y - center_y

    scale_x = half_width / abs(dx) if dx != 0 else math.inf
    scale_y = half_height / abs(dy) if dy != 0 else math.inf
    scale = min(scale_x, scale_y)
    if math.isinf(scale):
        # Target sits on the centre: the ray has no direction.
        return Point(center_x, center_y)

    x = center_x + dx * scale
    y = center_y + dy * scale
    if not (math.isfinite(x) and math.isfinite(y)):
        return Point(center_x, center_y)
    return Point(x, y)


def resolve_anchor(bounds: RectBounds, target: Point) -> Point:
    return resolve_edge_point(
        bounds.center_x,
        bounds.center_y,
        target.x,
        target.y,
        bounds.width,
        bounds.height,
    )


def _center_fallback(center_x: object, center_y: object) -> Point:
    return Point(
        float(center_x) if is_finite_number(center_x) else 0.0,
        float(center_y) if is_finite_number(center_y) else 0.0,
    )
