from __future__ import annotations

import math
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Annotated, Any, ClassVar, Dict, List, Literal, Optional, Tuple, Union

from pydantic import BaseModel, ConfigDict, Field, PrivateAttr, field_validator, model_validator

ArrowHead = Literal["none", "line", "hollow", "filled"]
PathKind = Literal["straight", "curved", "self_loop"]
HandleRole = Literal["origin", "destination", "curve"]

ARROW_HEAD_TYPES: Tuple[str, ...] = ("none", "line", "hollow", "filled")
DEFAULT_ARROW_HEAD: ArrowHead = "filled"
DEFAULT_CONNECTOR_COLOR = "#000000"
SELECTION_COLOR = "#4646d8"
CURVE_HANDLE_FILL = "rgba(70, 70, 216, 0.6)"
HANDLE_STROKE = "white"

STICKY_ITEM_TYPE = "sticky"
IMAGE_ITEM_TYPE = "image"
STICKY_BASE_SIZE = 70.0


@dataclass(frozen=True)
class Point:
    x: float
    y: float

    def is_finite(self) -> bool:
        return _is_finite(self.x) and _is_finite(self.y)

    def translate(self, dx: float, dy: float) -> Point:
        return Point(self.x + dx, self.y + dy)

    def distance_to(self, other: Point) -> float:
        return math.hypot(self.x - other.x, self.y - other.y)

    def midpoint(self, other: Point) -> Point:
        return Point((self.x + other.x) / 2, (self.y + other.y) / 2)

    def to_dict(self) -> Dict[str, float]:
        return {"x": self.x, "y": self.y}


@dataclass(frozen=True)
class Size:
    width: float
    height: float


@dataclass(frozen=True)
class RectBounds:
    center_x: float
    center_y: float
    width: float
    height: float

    @property
    def center(self) -> Point:
        return Point(self.center_x, self.center_y)

    def is_finite(self) -> bool:
        return all(
            _is_finite(value) for value in (self.center_x, self.center_y, self.width, self.height)
        )

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> RectBounds:
        return cls(
            center_x=data.get("centerX", data.get("center_x")),
            center_y=data.get("centerY", data.get("center_y")),
            width=data.get("width"),
            height=data.get("height"),
        )

    def to_dict(self) -> Dict[str, float]:
        return {
            "centerX": self.center_x,
            "centerY": self.center_y,
            "width": self.width,
            "height": self.height,
        }


class ItemRef(BaseModel):
    model_config = ConfigDict(frozen=True)

    item_id: str = Field(..., min_length=1)
    item_type: str = Field(..., min_length=1)

    @field_validator("item_id", "item_type", mode="before")
    @classmethod
    def coerce_to_str(cls, value: object) -> str:
        # Board stores mix numeric and string ids.
        return str(value) if value is not None else ""


class ConnectorEndpoint(BaseModel):
    item: Optional[ItemRef] = None
    point: Optional[Point] = None


class Connector(BaseModel):
    id: str = Field(..., min_length=1)
    origin: ConnectorEndpoint = Field(default_factory=ConnectorEndpoint)
    destination: ConnectorEndpoint = Field(default_factory=ConnectorEndpoint)
    curve_control_point: Optional[Point] = None
    arrow_head: ArrowHead = DEFAULT_ARROW_HEAD
    color: str = DEFAULT_CONNECTOR_COLOR
    z_index: Optional[int] = None

    @model_validator(mode="before")
    @classmethod
    def normalize_store_format(cls, data: Any) -> Any:
        if not isinstance(data, Mapping):
            return data
        normalized: Dict[str, Any] = dict(data)
        for store_key, field_name in _CONNECTOR_KEY_ALIASES.items():
            if store_key in normalized:
                value = normalized.pop(store_key)
                normalized.setdefault(field_name, value)
        if "id" in normalized and normalized["id"] is not None:
            normalized["id"] = str(normalized["id"])
        for side in ("origin", "destination"):
            flat = _flat_endpoint(normalized, side)
            if flat is not None and not isinstance(normalized.get(side), Mapping):
                normalized[side] = flat
            elif flat is not None:
                merged = dict(flat)
                merged.update({k: v for k, v in normalized[side].items() if v is not None})
                normalized[side] = merged
        return normalized

    @field_validator("arrow_head", mode="before")
    @classmethod
    def normalize_arrow_head(cls, value: object) -> str:
        if isinstance(value, str) and value in ARROW_HEAD_TYPES:
            return value
        return DEFAULT_ARROW_HEAD

    @field_validator("color", mode="before")
    @classmethod
    def normalize_color(cls, value: object) -> str:
        text = str(value or "").strip()
        return text or DEFAULT_CONNECTOR_COLOR

    @property
    def is_same_item(self) -> bool:
        origin_item = self.origin.item
        destination_item = self.destination.item
        return origin_item is not None and origin_item == destination_item

    def to_store_dict(self) -> Dict[str, Any]:
        payload: Dict[str, Any] = {
            "id": self.id,
            "arrowHead": self.arrow_head,
            "color": self.color,
        }
        for side, endpoint in (("origin", self.origin), ("destination", self.destination)):
            if endpoint.item is not None:
                payload[f"{side}ItemId"] = endpoint.item.item_id
                payload[f"{side}ItemType"] = endpoint.item.item_type
            if endpoint.point is not None:
                payload[f"{side}Point"] = endpoint.point.to_dict()
        if self.curve_control_point is not None:
            payload["curveControlPoint"] = self.curve_control_point.to_dict()
        if self.z_index is not None:
            payload["zIndex"] = self.z_index
        return payload


_CONNECTOR_KEY_ALIASES = {
    "curveControlPoint": "curve_control_point",
    "arrowHead": "arrow_head",
    "zIndex": "z_index",
}

_LEGACY_ENDPOINT_KEYS = (
    ("{side}ItemId", "{side}ItemType", None),
    ("{side}Id", None, STICKY_ITEM_TYPE),
    ("{side}ImageId", None, IMAGE_ITEM_TYPE),
)


def _flat_endpoint(data: Mapping[str, Any], side: str) -> Optional[Dict[str, Any]]:
    endpoint: Dict[str, Any] = {}
    for id_key, type_key, fixed_type in _LEGACY_ENDPOINT_KEYS:
        item_id = data.get(id_key.format(side=side))
        if item_id is None or item_id == "":
            continue
        item_type = data.get(type_key.format(side=side)) if type_key else fixed_type
        if not item_type:
            continue
        endpoint["item"] = {"item_id": item_id, "item_type": item_type}
        break
    point = data.get(f"{side}Point")
    if point is not None:
        endpoint["point"] = point
    return endpoint or None


class BoardItem(BaseModel):
    id: str = Field(..., min_length=1)
    type: str = Field(..., min_length=1)
    location: Point
    size: Optional[Size] = None
    width: Optional[float] = None
    height: Optional[float] = None

    @field_validator("id", mode="before")
    @classmethod
    def coerce_id(cls, value: object) -> str:
        return str(value) if value is not None else ""

    @field_validator("size", mode="before")
    @classmethod
    def normalize_size(cls, value: object) -> object:
        # Sticky stores keep the size multiplier as {"x": .., "y": ..}.
        if isinstance(value, Mapping) and "x" in value and "width" not in value:
            return {"width": value.get("x") or 1, "height": value.get("y") or 1}
        return value


# Records that fail validation stay raw so they are skipped one by one at render time.
ConnectorRecord = Annotated[
    Union[Connector, Dict[str, Any]], Field(union_mode="left_to_right")
]


class BoardSnapshot(BaseModel):
    origin: Point = Point(0.0, 0.0)
    items: List[BoardItem] = Field(default_factory=list)
    connectors: Dict[str, ConnectorRecord] = Field(default_factory=dict)
    selected_connector_ids: List[str] = Field(default_factory=list)

    _item_index: Dict[Tuple[str, str], BoardItem] = PrivateAttr(default_factory=dict)

    @model_validator(mode="before")
    @classmethod
    def normalize_store_format(cls, data: Any) -> Any:
        if not isinstance(data, Mapping):
            return data
        normalized: Dict[str, Any] = dict(data)
        items = list(normalized.get("items") or [])
        for store_key, item_type in (("stickies", STICKY_ITEM_TYPE), ("images", IMAGE_ITEM_TYPE)):
            stored = normalized.pop(store_key, None)
            if not isinstance(stored, Mapping):
                continue
            for item_id, item in stored.items():
                if isinstance(item, Mapping):
                    items.append({"id": item_id, "type": item_type, **item})
        normalized["items"] = items
        connectors = normalized.get("connectors")
        if isinstance(connectors, Mapping):
            normalized["connectors"] = {
                str(connector_id): (
                    {"id": connector_id, **connector}
                    if isinstance(connector, Mapping) and "id" not in connector
                    else connector
                )
                for connector_id, connector in connectors.items()
            }
        elif isinstance(connectors, list):
            normalized["connectors"] = {
                str(connector.get("id")): connector
                for connector in connectors
                if isinstance(connector, Mapping)
            }
        if "selectedConnectorIds" in normalized:
            normalized.setdefault(
                "selected_connector_ids", normalized.pop("selectedConnectorIds")
            )
        return normalized

    @field_validator("selected_connector_ids", mode="before")
    @classmethod
    def coerce_selected_ids(cls, value: object) -> List[str]:
        if value is None:
            return []
        if isinstance(value, (list, tuple, set)):
            return [str(item) for item in value]
        return [str(value)]

    def model_post_init(self, __context: Any) -> None:
        self._item_index = {(item.type, item.id): item for item in self.items}

    def find_item(self, item_type: str, item_id: str) -> Optional[BoardItem]:
        return self._item_index.get((item_type, str(item_id)))

    def is_selected(self, connector_id: str) -> bool:
        return connector_id in self.selected_connector_ids


@dataclass(frozen=True)
class ResolvedEndpoint:
    point: Point
    bounds: Optional[RectBounds] = None

    @property
    def is_free(self) -> bool:
        return self.bounds is None


@dataclass(frozen=True)
class EndpointResolution:
    origin: ResolvedEndpoint
    destination: ResolvedEndpoint
    control_point: Optional[Point]
    is_same_item: bool
    is_self_connection: bool


@dataclass(frozen=True)
class MoveTo:
    command: ClassVar[str] = "move"
    point: Point

    def translate(self, dx: float, dy: float) -> MoveTo:
        return MoveTo(self.point.translate(dx, dy))

    def to_dict(self) -> Dict[str, Any]:
        return {"type": self.command, "point": self.point.to_dict()}


@dataclass(frozen=True)
class LineTo:
    command: ClassVar[str] = "line"
    point: Point

    def translate(self, dx: float, dy: float) -> LineTo:
        return LineTo(self.point.translate(dx, dy))

    def to_dict(self) -> Dict[str, Any]:
        return {"type": self.command, "point": self.point.to_dict()}


@dataclass(frozen=True)
class CubicTo:
    command: ClassVar[str] = "cubic"
    control1: Point
    control2: Point
    end: Point

    def translate(self, dx: float, dy: float) -> CubicTo:
        return CubicTo(
            self.control1.translate(dx, dy),
            self.control2.translate(dx, dy),
            self.end.translate(dx, dy),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "type": self.command,
            "control1": self.control1.to_dict(),
            "control2": self.control2.to_dict(),
            "end": self.end.to_dict(),
        }


@dataclass(frozen=True)
class ArcTo:
    command: ClassVar[str] = "arc"
    radius: float
    end: Point
    large_arc: bool = True
    sweep: bool = True

    def translate(self, dx: float, dy: float) -> ArcTo:
        return ArcTo(self.radius, self.end.translate(dx, dy), self.large_arc, self.sweep)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "type": self.command,
            "radius": self.radius,
            "end": self.end.to_dict(),
            "largeArc": self.large_arc,
            "sweep": self.sweep,
        }


PathSegment = Union[MoveTo, LineTo, CubicTo, ArcTo]


@dataclass(frozen=True)
class PathGeometry:
    kind: PathKind
    segments: Tuple[PathSegment, ...]
    start: Point
    end: Point
    control_point: Optional[Point] = None
    marker_angle: Optional[float] = None

    def translate(self, dx: float, dy: float) -> Tuple[PathSegment, ...]:
        return tuple(segment.translate(dx, dy) for segment in self.segments)


@dataclass(frozen=True)
class ContainerRect:
    x: float
    y: float
    width: float
    height: float
    padding: float

    def to_local(self, point: Point) -> Point:
        return Point(point.x - self.x, point.y - self.y)

    def contains(self, point: Point) -> bool:
        return (
            self.x <= point.x <= self.x + self.width and self.y <= point.y <= self.y + self.height
        )

    def to_dict(self) -> Dict[str, float]:
        return {
            "x": self.x,
            "y": self.y,
            "width": self.width,
            "height": self.height,
            "padding": self.padding,
        }


@dataclass(frozen=True)
class Handle:
    role: HandleRole
    board_position: Point
    local_position: Point
    radius: float
    fill: str
    stroke: str = HANDLE_STROKE
    visible: bool = False

    def to_dict(self) -> Dict[str, Any]:
        return {
            "role": self.role,
            "boardPosition": self.board_position.to_dict(),
            "localPosition": self.local_position.to_dict(),
            "radius": self.radius,
            "fill": self.fill,
            "stroke": self.stroke,
            "visible": self.visible,
        }


@dataclass(frozen=True)
class MarkerShape:
    marker_id: str
    kind: ArrowHead
    points: Tuple[Point, ...]
    closed: bool
    stroke: str
    fill: str
    stroke_width: float = 1.5
    width: float = 10.0
    height: float = 10.0
    ref: Point = Point(6.0, 5.0)
    units: str = "strokeWidth"

    @property
    def is_empty(self) -> bool:
        return not self.points

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.marker_id,
            "kind": self.kind,
            "points": [point.to_dict() for point in self.points],
            "closed": self.closed,
            "stroke": self.stroke,
            "fill": self.fill,
            "strokeWidth": self.stroke_width,
            "width": self.width,
            "height": self.height,
            "ref": self.ref.to_dict(),
            "units": self.units,
        }


@dataclass(frozen=True)
class RenderPlan:
    connector_id: str
    container: ContainerRect
    path_kind: PathKind
    segments: Tuple[PathSegment, ...]
    marker: MarkerShape
    handles: Tuple[Handle, ...]
    start: Point
    end: Point
    stroke_color: str
    stroke_width: float
    selected: bool = False
    is_self_connection: bool = False
    marker_angle: Optional[float] = None
    z_index: Optional[int] = None

    @property
    def marker_id(self) -> str:
        return self.marker.marker_id

    def handle(self, role: HandleRole) -> Optional[Handle]:
        return next((handle for handle in self.handles if handle.role == role), None)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "status": "ok",
            "connectorId": self.connector_id,
            "container": self.container.to_dict(),
            "pathKind": self.path_kind,
            "segments": [segment.to_dict() for segment in self.segments],
            "markerId": self.marker_id,
            "marker": self.marker.to_dict(),
            "markerAngle": self.marker_angle,
            "handles": [handle.to_dict() for handle in self.handles],
            "start": self.start.to_dict(),
            "end": self.end.to_dict(),
            "strokeColor": self.stroke_color,
            "strokeWidth": self.stroke_width,
            "selected": self.selected,
            "isSelfConnection": self.is_self_connection,
            "zIndex": self.z_index,
        }


@dataclass(frozen=True)
class RenderSkip:
    connector_id: Optional[str]
    reason: str
    details: Dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        return {"status": "skipped", "connectorId": self.connector_id, "reason": self.reason}


RenderResult = Union[RenderPlan, RenderSkip]


def _is_finite(value: object) -> bool:
    return (
        isinstance(value, (int, float))
        and not isinstance(value, bool)
        and math.isfinite(value)
    )
