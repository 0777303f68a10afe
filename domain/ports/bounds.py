from __future__ import annotations

from collections.abc import Callable
from typing import Protocol

from domain.models import BoardItem, Point, RectBounds

BoundsResolver = Callable[[str, str, Point], "RectBounds | None"]


class BoundsProvider(Protocol):
    def resolve_bounds(
        self, item_id: str, item_type: str, board_origin: Point
    ) -> RectBounds | None: ...


class ItemBoundsStrategy(Protocol):
    def bounds_for(self, item: BoardItem, board_origin: Point) -> RectBounds | None: ...


def as_bounds_resolver(provider: BoundsProvider | BoundsResolver | None) -> BoundsResolver:
    resolve = getattr(provider, "resolve_bounds", None)
    if callable(resolve):
        return resolve
    if callable(provider):
        return provider
    msg = "resolve_bounds must be a BoundsProvider or a callable"
    raise TypeError(msg)
