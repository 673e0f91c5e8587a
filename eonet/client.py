"""Async client for the two EONET endpoints the loader needs.

Endpoint contract:
  GET {base}/events?status=open|closed|all&category=wildfires&limit=N
      -> {"events": [Event, ...]}
  GET {base}/events/{id}/geojson
      -> FeatureCollection, {"geometries": [...]}, or {"geometry": {...}}
"""

from __future__ import annotations

import logging
from typing import Any, Dict, Iterable, List, Mapping, Optional
from urllib.parse import quote

import httpx
from pydantic import ValidationError

from eonet.errors import (
    EonetError,
    EonetProtocolError,
    EonetRateLimitError,
    EonetUnavailableError,
)
from eonet.logging_utils import log_event
from eonet.models import Event, Geometry, geometry_adapter

LOGGER = logging.getLogger(__name__)

EONET_BASE_URL = "https://eonet.gsfc.nasa.gov/api/v3"
WILDFIRES_CATEGORY = "wildfires"
DEFAULT_TIMEOUT_SECONDS = 10.0
VALID_STATUSES = ("open", "closed", "all")

JsonDict = Dict[str, Any]


def _snippet(response: httpx.Response, limit: int = 300) -> str:
    try:
        return response.text[:limit]
    except UnicodeDecodeError:
        return response.content[:limit].decode("utf-8", errors="ignore")


def _feature_geometry(feature: Mapping[str, Any]) -> Optional[JsonDict]:
    geometry = feature.get("geometry")
    if not isinstance(geometry, dict):
        geometry = {}
    properties = feature.get("properties")
    if not isinstance(properties, dict):
        properties = {}
    kind = geometry.get("type")
    coordinates = geometry.get("coordinates")
    if kind is None and coordinates is None:
        return None
    return {"date": properties.get("date"), "type": kind, "coordinates": coordinates}


def _validate_geometries(raw: Iterable[Any], log_tag: str, event_id: Optional[str] = None) -> List[Geometry]:
    geometries: List[Geometry] = []
    for item in raw:
        try:
            geometries.append(geometry_adapter.validate_python(item))
        except ValidationError as exc:
            log_event(
                LOGGER,
                log_tag,
                "Dropping geometry that failed validation",
                level="warning",
                event_id=event_id,
                error_count=exc.error_count(),
                geometry_type=item.get("type") if isinstance(item, dict) else None,
            )
    return geometries


def parse_detail_payload(payload: Any) -> List[Geometry]:
    """Flatten any accepted detail response shape into a geometry list.

    Entries that cannot be validated as a geometry are dropped; an
    unrecognised payload yields an empty list.
    """
    if not isinstance(payload, dict):
        return []

    raw: List[Any]
    if isinstance(payload.get("features"), list):
        raw = [
            g
            for g in (_feature_geometry(f) for f in payload["features"] if isinstance(f, dict))
            if g is not None
        ]
    elif isinstance(payload.get("geometries"), list):
        raw = payload["geometries"]
    elif isinstance(payload.get("geometry"), dict):
        raw = [payload["geometry"]]
    else:
        return []

    return _validate_geometries(raw, "eonet.detail")


def parse_event_list(items: List[Any]) -> List[Event]:
    """Validate list-endpoint events one at a time.

    Invalid geometries are dropped from their event, which may leave it with an
    empty sequence and make it a backfill candidate. An event that is invalid
    apart from its geometry is dropped on its own.
    """
    events: List[Event] = []
    for item in items:
        if not isinstance(item, dict):
            log_event(LOGGER, "eonet.list", "Dropping non-object event entry", level="warning")
            continue
        event_id = item.get("id")
        raw_geometries = item.get("geometries", item.get("geometry"))
        fields = {k: v for k, v in item.items() if k not in ("geometries", "geometry")}
        fields["geometries"] = _validate_geometries(
            raw_geometries if isinstance(raw_geometries, list) else [],
            "eonet.list",
            event_id=event_id if isinstance(event_id, str) else None,
        )
        try:
            events.append(Event.model_validate(fields))
        except ValidationError as exc:
            log_event(
                LOGGER,
                "eonet.list",
                "Dropping event that failed validation",
                level="warning",
                event_id=event_id if isinstance(event_id, str) else None,
                error_count=exc.error_count(),
            )
    return events


class EonetClient:
    """Thin wrapper over one ``httpx.AsyncClient``; use as ``async with``."""

    def __init__(
        self,
        base_url: str = EONET_BASE_URL,
        timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS,
        *,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.timeout_seconds = timeout_seconds
        self._transport = transport
        self._http: Optional[httpx.AsyncClient] = None

    async def __aenter__(self) -> "EonetClient":
        self._http = httpx.AsyncClient(
            base_url=self.base_url,
            timeout=self.timeout_seconds,
            transport=self._transport,
            headers={"Accept": "application/json"},
        )
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        if self._http is not None:
            await self._http.aclose()
            self._http = None

    async def _get_json(self, path: str, params: Optional[Mapping[str, Any]] = None) -> Any:
        if self._http is None:
            raise RuntimeError("EonetClient must be used as an async context manager")
        url = f"{self.base_url}{path}"
        try:
            resp = await self._http.get(path, params=dict(params or {}))
        except httpx.TimeoutException as exc:
            raise EonetUnavailableError(message=f"Request timed out: {exc}", url=url) from exc
        except httpx.TransportError as exc:
            raise EonetUnavailableError(message=str(exc) or type(exc).__name__, url=url) from exc

        if resp.status_code == 429:
            raise EonetRateLimitError(
                message="Rate limited by EONET",
                status_code=429,
                url=str(resp.url),
                response_text=_snippet(resp),
                retry_after=resp.headers.get("retry-after"),
            )
        if resp.status_code != 200:
            raise EonetError(
                message="Non-200 response from EONET",
                status_code=resp.status_code,
                url=str(resp.url),
                response_text=_snippet(resp),
            )

        try:
            return resp.json()
        except ValueError as exc:
            raise EonetProtocolError(
                message="EONET returned non-JSON response",
                status_code=resp.status_code,
                url=str(resp.url),
                response_text=_snippet(resp),
            ) from exc

    async def list_events(self, status: str = "open", limit: int = 50) -> List[Event]:
        """Fetch the wildfire event summary list."""
        if status not in VALID_STATUSES:
            raise ValueError(f"status must be one of {VALID_STATUSES}, got {status!r}")
        params = {"status": status, "category": WILDFIRES_CATEGORY, "limit": limit}
        log_event(LOGGER, "eonet.list", "Requesting event list", level="debug", **params)

        data = await self._get_json("/events", params)
        if not isinstance(data, dict) or not isinstance(data.get("events"), list):
            raise EonetProtocolError(
                message="Unexpected EONET response (missing 'events')",
                url=f"{self.base_url}/events",
                response_text=str(data)[:500],
            )
        events = parse_event_list(data["events"])
        log_event(
            LOGGER,
            "eonet.list",
            "Fetched event list",
            count=len(events),
            dropped=len(data["events"]) - len(events),
            status=status,
        )
        return events

    async def event_geometries(self, event_id: str) -> List[Geometry]:
        """Fetch and normalize the geometry history of one event."""
        data = await self._get_json(f"/events/{quote(event_id, safe='')}/geojson")
        return parse_detail_payload(data)
