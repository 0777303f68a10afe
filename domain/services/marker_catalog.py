from __future__ import annotations

from typing import cast

from domain.models import (
    ARROW_HEAD_TYPES,
    DEFAULT_ARROW_HEAD,
    SELECTION_COLOR,
    ArrowHead,
    MarkerShape,
    Point,
)

MarkerKey = tuple[str, str, bool]

CHEVRON_POINTS = (Point(0.0, 2.0), Point(6.0, 5.0), Point(0.0, 8.0))
HOLLOW_FILL = "white"


def marker_id_for(connector_id: str, arrow_head: str, selected: bool) -> str:
    state = "selected" if selected else "unselected"
    return f"arrowhead-{connector_id}-{arrow_head}-{state}"


def build_marker_shape(marker_id: str, arrow_head: ArrowHead, color: str) -> MarkerShape:
    if arrow_head == "none":
        return MarkerShape(
            marker_id=marker_id, kind="none", points=(), closed=False, stroke=color, fill="none"
        )
    if arrow_head == "line":
        return MarkerShape(
            marker_id=marker_id,
            kind="line",
            points=CHEVRON_POINTS,
            closed=False,
            stroke=color,
            fill="none",
        )
    if arrow_head == "hollow":
        return MarkerShape(
            marker_id=marker_id,
            kind="hollow",
            points=CHEVRON_POINTS,
            closed=True,
            stroke=color,
            fill=HOLLOW_FILL,
        )
    return MarkerShape(
        marker_id=marker_id,
        kind="filled",
        points=CHEVRON_POINTS,
        closed=True,
        stroke=color,
        fill=color,
    )


class MarkerCatalog:
    """Arrowhead marker shapes cached per connector and purged when the key moves on."""

    def __init__(self, selection_color: str = SELECTION_COLOR) -> None:
        self.selection_color = selection_color
        self._entries: dict[MarkerKey, MarkerShape] = {}
        self._keys_by_connector: dict[str, set[MarkerKey]] = {}

    def marker_for(
        self,
        connector_id: str,
        arrow_head: str,
        selected: bool,
        color: str,
    ) -> MarkerShape:
        kind = cast(
            ArrowHead, arrow_head if arrow_head in ARROW_HEAD_TYPES else DEFAULT_ARROW_HEAD
        )
        key: MarkerKey = (connector_id, kind, selected)
        self._purge_stale(connector_id, key)

        stroke = self.selection_color if selected else color
        shape = self._entries.get(key)
        if shape is None or shape.stroke != stroke:
            shape = build_marker_shape(marker_id_for(connector_id, kind, selected), kind, stroke)
            self._entries[key] = shape
            self._keys_by_connector.setdefault(connector_id, set()).add(key)
        return shape

    def forget(self, connector_id: str) -> int:
        keys = self._keys_by_connector.pop(connector_id, set())
        for key in keys:
            self._entries.pop(key, None)
        return len(keys)

    def retain(self, connector_ids: set[str]) -> int:
        stale = [
            connector_id
            for connector_id in self._keys_by_connector
            if connector_id not in connector_ids
        ]
        return sum(self.forget(connector_id) for connector_id in stale)

    def clear(self) -> None:
        self._entries.clear()
        self._keys_by_connector.clear()

    def keys_for(self, connector_id: str) -> set[MarkerKey]:
        return set(self._keys_by_connector.get(connector_id, set()))

    def __contains__(self, key: object) -> bool:
        return key in self._entries

    def __len__(self) -> int:
        return len(self._entries)

    def _purge_stale(self, connector_id: str, current: MarkerKey) -> None:
        keys = self._keys_by_connector.get(connector_id)
        if not keys:
            return
        for key in [key for key in keys if key != current]:
            keys.discard(key)
            self._entries.pop(key, None)
