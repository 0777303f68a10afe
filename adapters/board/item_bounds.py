from __future__ import annotations

from collections.abc import Mapping

from domain.geometry import is_finite_number
from domain.models import (
    IMAGE_ITEM_TYPE,
    STICKY_BASE_SIZE,
    STICKY_ITEM_TYPE,
    BoardItem,
    BoardSnapshot,
    Point,
    RectBounds,
)
from domain.ports.bounds import BoundsProvider, ItemBoundsStrategy


class StickyBoundsProvider(ItemBoundsStrategy):
    def __init__(self, base_size: float = STICKY_BASE_SIZE) -> None:
        self.base_size = base_size

    def bounds_for(self, item: BoardItem, board_origin: Point) -> RectBounds | None:
        multiplier_x = item.size.width if item.size and item.size.width else 1.0
        multiplier_y = item.size.height if item.size and item.size.height else 1.0
        width = self.base_size * multiplier_x
        height = self.base_size * multiplier_y
        return _centered(item.location, board_origin, width, height)


class ImageBoundsProvider(ItemBoundsStrategy):
    def bounds_for(self, item: BoardItem, board_origin: Point) -> RectBounds | None:
        if not (is_finite_number(item.width) and is_finite_number(item.height)):
            return None
        return _centered(item.location, board_origin, float(item.width), float(item.height))


class SnapshotBoundsProvider(BoundsProvider):
    """Resolves item bounds from a board snapshot, dispatching on item type."""

    def __init__(
        self,
        snapshot: BoardSnapshot,
        strategies: Mapping[str, ItemBoundsStrategy] | None = None,
        sticky_base_size: float = STICKY_BASE_SIZE,
    ) -> None:
        self.snapshot = snapshot
        self.strategies: dict[str, ItemBoundsStrategy] = {
            STICKY_ITEM_TYPE: StickyBoundsProvider(sticky_base_size),
            IMAGE_ITEM_TYPE: ImageBoundsProvider(),
        }
        if strategies:
            self.strategies.update(strategies)

    def resolve_bounds(
        self, item_id: str, item_type: str, board_origin: Point
    ) -> RectBounds | None:
        strategy = self.strategies.get(item_type)
        if strategy is None:
            return None
        item = self.snapshot.find_item(item_type, item_id)
        if item is None:
            return None
        return strategy.bounds_for(item, board_origin)


def _centered(location: Point, board_origin: Point, width: float, height: float) -> RectBounds:
    return RectBounds(
        center_x=location.x - board_origin.x + width / 2,
        center_y=location.y - board_origin.y + height / 2,
        width=width,
        height=height,
    )
