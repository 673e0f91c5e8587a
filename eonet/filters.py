"""Sidebar filtering and ordering of loaded events."""

from __future__ import annotations

from datetime import date, datetime, time, timezone
from typing import Iterable, List, Optional, Union

from eonet.models import Event

DateLike = Union[date, str, None]

STATUS_FILTERS = ("open", "closed", "all")
_EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)


def _as_date(value: DateLike) -> Optional[date]:
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    return date.fromisoformat(value.strip())


def latest_observed_at(event: Event) -> Optional[datetime]:
    geometry = event.latest_geometry
    return geometry.observed_at if geometry is not None else None


def matches_status(event: Event, status: str) -> bool:
    if status == "open":
        return event.closed is None
    if status == "closed":
        return event.closed is not None
    return True


def filter_events(
    events: Optional[Iterable[Event]],
    status: str = "all",
    date_from: DateLike = None,
    date_to: DateLike = None,
    search: str = "",
) -> List[Event]:
    """Apply the sidebar filters and sort newest first.

    Date bounds are inclusive, in UTC, and checked against the latest
    geometry date; ``date_to`` covers the whole day. Events without a usable
    geometry date are never excluded by the date bounds and sort last.
    """
    if status not in STATUS_FILTERS:
        raise ValueError(f"status must be one of {STATUS_FILTERS}, got {status!r}")
    if events is None:
        return []

    start = _as_date(date_from)
    end = _as_date(date_to)
    lower = datetime.combine(start, time.min, tzinfo=timezone.utc) if start else None
    upper = datetime.combine(end, time.max, tzinfo=timezone.utc) if end else None
    needle = (search or "").strip().lower()

    kept: List[Event] = []
    for event in events:
        if not matches_status(event, status):
            continue
        observed = latest_observed_at(event)
        if observed is not None:
            if lower is not None and observed < lower:
                continue
            if upper is not None and observed > upper:
                continue
        if needle and needle not in event.title.lower():
            continue
        kept.append(event)

    return sorted(kept, key=lambda e: latest_observed_at(e) or _EPOCH, reverse=True)
