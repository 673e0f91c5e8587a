"""Data contracts for EONET wildfire events.

Geometries are a tagged variant keyed on ``type``: ``Point``, ``Polygon`` and
``MultiPolygon`` carry precisely typed coordinates, anything else (including a
known type with no coordinates) lands in ``OtherGeometry`` with the raw
coordinates kept as-is. The observation ``date`` may be absent.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Annotated, Any, List, Literal, Optional, Tuple, Union

from pydantic import (
    AliasChoices,
    BaseModel,
    ConfigDict,
    Discriminator,
    Field,
    Tag,
    TypeAdapter,
)

# GeoJSON order: (lon, lat[, elevation])
Position = Annotated[Tuple[float, ...], Field(min_length=2)]
LinearRing = List[Position]

KNOWN_GEOMETRY_TYPES = ("Point", "Polygon", "MultiPolygon")


def parse_timestamp(value: str | None) -> datetime | None:
    """Parse an EONET ISO-8601 timestamp into an aware UTC datetime."""
    if not value:
        return None
    text = value.strip()
    if text.endswith("Z"):
        text = text[:-1] + "+00:00"
    try:
        dt = datetime.fromisoformat(text)
    except ValueError:
        return None
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return dt


class _GeometryBase(BaseModel):
    model_config = ConfigDict(frozen=True, extra="ignore")

    date: Optional[str] = None

    @property
    def observed_at(self) -> datetime | None:
        return parse_timestamp(self.date)


class PointGeometry(_GeometryBase):
    type: Literal["Point"] = "Point"
    coordinates: Position


class PolygonGeometry(_GeometryBase):
    type: Literal["Polygon"] = "Polygon"
    coordinates: List[LinearRing]


class MultiPolygonGeometry(_GeometryBase):
    type: Literal["MultiPolygon"] = "MultiPolygon"
    coordinates: List[List[LinearRing]]


class OtherGeometry(_GeometryBase):
    type: Optional[str] = None
    coordinates: Any = None


def _geometry_tag(value: Any) -> str:
    if isinstance(value, dict):
        kind = value.get("type")
        coordinates = value.get("coordinates")
    else:
        kind = getattr(value, "type", None)
        coordinates = getattr(value, "coordinates", None)
    # a known type without coordinates falls back to Other
    if kind in KNOWN_GEOMETRY_TYPES and coordinates is not None:
        return kind
    return "Other"


Geometry = Annotated[
    Union[
        Annotated[PointGeometry, Tag("Point")],
        Annotated[PolygonGeometry, Tag("Polygon")],
        Annotated[MultiPolygonGeometry, Tag("MultiPolygon")],
        Annotated[OtherGeometry, Tag("Other")],
    ],
    Discriminator(_geometry_tag),
]

geometry_adapter: TypeAdapter[Geometry] = TypeAdapter(Geometry)


class Category(BaseModel):
    model_config = ConfigDict(frozen=True, extra="ignore")

    id: str
    title: str


class Source(BaseModel):
    model_config = ConfigDict(frozen=True, extra="ignore")

    id: Optional[str] = None
    url: Optional[str] = None


class Event(BaseModel):
    """A single EONET event. Instances are never mutated; use ``with_geometries``."""

    model_config = ConfigDict(frozen=True, extra="ignore", populate_by_name=True)

    id: str
    title: str
    description: Optional[str] = None
    link: Optional[str] = None
    categories: List[Category] = Field(default_factory=list)
    sources: List[Source] = Field(default_factory=list)
    geometries: List[Geometry] = Field(
        default_factory=list,
        validation_alias=AliasChoices("geometries", "geometry"),
    )
    closed: Optional[str] = None

    @property
    def is_open(self) -> bool:
        return self.closed is None

    @property
    def missing_geometry(self) -> bool:
        return not self.geometries

    @property
    def latest_geometry(self) -> Geometry | None:
        """Last geometry in the sequence, i.e. the most recent observation."""
        return self.geometries[-1] if self.geometries else None

    def with_geometries(self, geometries: List[Geometry]) -> "Event":
        return self.model_copy(update={"geometries": list(geometries)})


events_adapter: TypeAdapter[List[Event]] = TypeAdapter(List[Event])


def dump_events(events: List[Event]) -> list[dict[str, Any]]:
    """JSON-ready dicts, using the canonical ``geometries`` field name."""
    return events_adapter.dump_python(events, mode="json")
