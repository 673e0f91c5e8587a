"""Normalize geometry variants into map-ready positions.

Everything that needs "where is this event" goes through ``position_of`` and
``rings_of`` so the per-type coordinate handling lives in exactly one place.
Outputs are in (lat, lon) order, the reverse of GeoJSON.
"""

from __future__ import annotations

from typing import Any, List, Optional, Sequence, Tuple

from eonet.models import (
    Event,
    Geometry,
    MultiPolygonGeometry,
    OtherGeometry,
    PointGeometry,
    PolygonGeometry,
)

LatLon = Tuple[float, float]


def _to_latlon(position: Sequence[Any]) -> Optional[LatLon]:
    if len(position) < 2:
        return None
    try:
        lon, lat = float(position[0]), float(position[1])
    except (TypeError, ValueError):
        return None
    return (lat, lon)


def _centroid(ring: Sequence[LatLon]) -> Optional[LatLon]:
    """Vertex average of a ring; good enough to drop a marker on."""
    if not ring:
        return None
    lat = sum(p[0] for p in ring) / len(ring)
    lon = sum(p[1] for p in ring) / len(ring)
    return (lat, lon)


def _ring_latlons(ring: Sequence[Sequence[Any]]) -> List[LatLon]:
    points = (_to_latlon(p) for p in ring if isinstance(p, (list, tuple)))
    return [p for p in points if p is not None]


def rings_of(geometry: Geometry | None) -> List[List[LatLon]]:
    """Polygon rings as lat/lon lists.

    MultiPolygons contribute the rings of their first polygon only.
    """
    if isinstance(geometry, PolygonGeometry):
        rings = geometry.coordinates
    elif isinstance(geometry, MultiPolygonGeometry):
        rings = geometry.coordinates[0] if geometry.coordinates else []
    else:
        return []
    return [r for r in (_ring_latlons(ring) for ring in rings) if r]


def position_of(geometry: Geometry | None) -> Optional[LatLon]:
    """Single representative position for any geometry variant."""
    if geometry is None:
        return None
    if isinstance(geometry, PointGeometry):
        return _to_latlon(geometry.coordinates)
    if isinstance(geometry, (PolygonGeometry, MultiPolygonGeometry)):
        rings = rings_of(geometry)
        return _centroid(rings[0]) if rings else None
    if isinstance(geometry, OtherGeometry):
        coords = geometry.coordinates
        if isinstance(coords, (list, tuple)) and coords and not isinstance(coords[0], (list, tuple)):
            return _to_latlon(coords)
        return None
    raise TypeError(f"Unsupported geometry variant: {type(geometry).__name__}")


def event_position(event: Event) -> Optional[LatLon]:
    """Current position of ``event``, taken from its latest geometry."""
    return position_of(event.latest_geometry)
