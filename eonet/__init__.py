"""Wildfire event loading from NASA EONET."""

from eonet.errors import (
    EonetError,
    EonetProtocolError,
    EonetRateLimitError,
    EonetUnavailableError,
)
from eonet.filters import filter_events
from eonet.geometry import event_position, position_of, rings_of
from eonet.loader import (
    CancellationToken,
    EventLoader,
    LoaderState,
    LoadResult,
    loader_from_settings,
    merge_geometries,
)
from eonet.models import Event, Geometry

__all__ = [
    "CancellationToken",
    "EonetError",
    "EonetProtocolError",
    "EonetRateLimitError",
    "EonetUnavailableError",
    "Event",
    "EventLoader",
    "Geometry",
    "LoadResult",
    "LoaderState",
    "event_position",
    "filter_events",
    "loader_from_settings",
    "merge_geometries",
    "position_of",
    "rings_of",
]
