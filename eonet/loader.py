"""Event loader: list fetch, retry/backoff, geometry backfill, merge, cache.

One ``load`` cycle:

1. publish ``loading=True`` and any unexpired cached snapshot
2. fetch the wildfire list, retrying 429s and transient failures
3. backfill geometry for up to ``limit_detail_fetch`` events that have none,
   one request at a time with a throttle gap between requests
4. merge the backfilled geometries into the list (order preserved)
5. publish the merged list and write it to the cache

A 429 during backfill stops the cycle without publishing or caching anything.
A list-stage failure sets ``error`` but leaves previously published events in
place.
"""

from __future__ import annotations

import asyncio
import logging
import random
from dataclasses import dataclass, replace
from typing import (
    AsyncContextManager,
    Awaitable,
    Callable,
    Dict,
    List,
    Mapping,
    Optional,
    Protocol,
    Sequence,
)

from eonet.cache import DEFAULT_CACHE_KEY, FileStore, KeyValueStore, SnapshotCache
from eonet.client import EonetClient
from eonet.config import EonetSettings
from eonet.errors import (
    RATE_LIMIT_MESSAGE,
    EonetProtocolError,
    EonetRateLimitError,
    LoadCancelled,
)
from eonet.logging_utils import log_event
from eonet.models import Event, Geometry
from eonet.retry import (
    RetryPolicy,
    backoff_delay_ms,
    detail_delay_ms,
    rate_limit_delay_ms,
)

LOGGER = logging.getLogger(__name__)

DEFAULT_LIMIT = 50
DEFAULT_LIMIT_DETAIL_FETCH = 10


class EventsApi(Protocol):
    async def list_events(self, status: str = "open", limit: int = 50) -> List[Event]:
        ...

    async def event_geometries(self, event_id: str) -> List[Geometry]:
        ...


ClientFactory = Callable[[], AsyncContextManager[EventsApi]]
Sleep = Callable[[float], Awaitable[None]]
StateListener = Callable[["LoaderState"], None]


class CancellationToken:
    """Set by the consumer on teardown; checked by the loader after every await."""

    def __init__(self) -> None:
        self._cancelled = False

    def cancel(self) -> None:
        self._cancelled = True

    @property
    def cancelled(self) -> bool:
        return self._cancelled

    def raise_if_cancelled(self) -> None:
        if self._cancelled:
            raise LoadCancelled(message="Load cancelled")


@dataclass(frozen=True)
class LoaderState:
    events: Optional[List[Event]] = None
    loading: bool = False
    error: Optional[Exception] = None

    @property
    def has_data(self) -> bool:
        return self.events is not None


@dataclass(frozen=True)
class LoadResult:
    data: Optional[List[Event]] = None
    error: Optional[Exception] = None
    cancelled: bool = False

    @property
    def ok(self) -> bool:
        return self.data is not None


def split_missing(events: Sequence[Event]) -> tuple[List[Event], List[Event]]:
    """Partition into (events without geometry, events with geometry)."""
    missing = [e for e in events if e.missing_geometry]
    present = [e for e in events if not e.missing_geometry]
    return missing, present


def merge_geometries(
    events: Sequence[Event],
    backfill: Mapping[str, List[Geometry]],
) -> List[Event]:
    """Fill in geometry for events that had none and have a backfill entry.

    Every other event is passed through as the same object.
    """
    return [
        e.with_geometries(backfill[e.id]) if e.missing_geometry and e.id in backfill else e
        for e in events
    ]


class EventLoader:
    """Reactive loader for the wildfire event list.

    ``state`` always holds the latest published ``LoaderState``; listeners
    registered with ``subscribe`` are called with every new state.
    """

    def __init__(
        self,
        client_factory: ClientFactory,
        *,
        status: str = "open",
        limit: int = DEFAULT_LIMIT,
        limit_detail_fetch: int = DEFAULT_LIMIT_DETAIL_FETCH,
        cache: Optional[SnapshotCache] = None,
        cache_key: str = DEFAULT_CACHE_KEY,
        policy: Optional[RetryPolicy] = None,
        sleep: Sleep = asyncio.sleep,
        rng: Optional[random.Random] = None,
    ) -> None:
        self.client_factory = client_factory
        self.status = status
        self.limit = limit
        self.limit_detail_fetch = limit_detail_fetch
        self.cache = cache
        self.cache_key = cache_key
        self.policy = policy or RetryPolicy()
        self._sleep = sleep
        self._rng = rng or random.Random()
        self._state = LoaderState()
        self._listeners: List[StateListener] = []
        self._generation = 0

    # -- observable state ----------------------------------------------------

    @property
    def state(self) -> LoaderState:
        return self._state

    @property
    def events(self) -> Optional[List[Event]]:
        return self._state.events

    @property
    def loading(self) -> bool:
        return self._state.loading

    @property
    def error(self) -> Optional[Exception]:
        return self._state.error

    def subscribe(self, listener: StateListener) -> Callable[[], None]:
        """Register ``listener``; returns a callable that unregisters it."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _publish(self, generation: int, token: CancellationToken, **changes: object) -> None:
        if token.cancelled or generation != self._generation:
            return
        self._state = replace(self._state, **changes)
        for listener in list(self._listeners):
            listener(self._state)

    # -- suspension points ---------------------------------------------------

    async def _pause(self, delay_ms: float, token: CancellationToken) -> None:
        await self._sleep(delay_ms / 1000.0)
        token.raise_if_cancelled()

    # -- pipeline ------------------------------------------------------------

    async def _fetch_list(self, client: EventsApi, token: CancellationToken) -> List[Event]:
        last_error: Optional[Exception] = None
        attempts = self.policy.attempts
        for attempt in range(attempts):
            try:
                events = await client.list_events(status=self.status, limit=self.limit)
                token.raise_if_cancelled()
                return events
            except (LoadCancelled, EonetProtocolError, ValueError):
                raise
            except EonetRateLimitError as exc:
                last_error = exc
                delay = rate_limit_delay_ms(self.policy, attempt, exc.retry_after, self._rng)
                reason = "rate_limited"
            except Exception as exc:  # noqa: BLE001
                last_error = exc
                delay = backoff_delay_ms(self.policy, attempt, self._rng)
                reason = "transient"

            token.raise_if_cancelled()
            if attempt == attempts - 1:
                break
            log_event(
                LOGGER,
                "eonet.retry",
                "List fetch failed; backing off",
                level="warning",
                attempt=attempt + 1,
                attempts=attempts,
                reason=reason,
                wait_ms=round(delay),
                error=str(last_error),
            )
            await self._pause(delay, token)

        log_event(
            LOGGER,
            "eonet.retry",
            "Exhausted list fetch attempts",
            level="error",
            attempts=attempts,
            error=str(last_error),
        )
        if last_error is None:
            raise RuntimeError("List fetch made no attempts")
        raise last_error

    async def _backfill(
        self,
        client: EventsApi,
        missing: Sequence[Event],
        token: CancellationToken,
    ) -> Dict[str, List[Geometry]]:
        """Sequential detail lookups; raises ``EonetRateLimitError`` on the first 429."""
        to_fetch = list(missing[: max(self.limit_detail_fetch, 0)])
        found: Dict[str, List[Geometry]] = {}
        for index, event in enumerate(to_fetch):
            if index:
                await self._pause(detail_delay_ms(self.policy, self._rng), token)
            try:
                geometries = await client.event_geometries(event.id)
            except EonetRateLimitError as exc:
                log_event(
                    LOGGER,
                    "eonet.detail",
                    "Rate limited during geometry backfill; aborting",
                    level="warning",
                    event_id=event.id,
                    fetched=index,
                    scheduled=len(to_fetch),
                )
                raise EonetRateLimitError(
                    message=RATE_LIMIT_MESSAGE,
                    status_code=429,
                    url=exc.url,
                    retry_after=exc.retry_after,
                ) from exc
            except Exception as exc:  # noqa: BLE001
                token.raise_if_cancelled()
                log_event(
                    LOGGER,
                    "eonet.detail",
                    "Geometry backfill failed for event",
                    level="info",
                    event_id=event.id,
                    error=str(exc),
                )
                continue
            token.raise_if_cancelled()
            if geometries:
                found[event.id] = geometries
        return found

    async def load(self, force: bool = False, token: Optional[CancellationToken] = None) -> LoadResult:
        """Run one load cycle. ``force`` is accepted for API symmetry with ``refetch``."""
        token = token or CancellationToken()
        self._generation += 1
        generation = self._generation

        self._publish(generation, token, loading=True, error=None)

        if self.cache is not None:
            cached = self.cache.read(self.cache_key)
            if cached is not None:
                self._publish(generation, token, events=cached.data)

        try:
            async with self.client_factory() as client:
                token.raise_if_cancelled()
                events = await self._fetch_list(client, token)
                missing, _ = split_missing(events)
                backfill = await self._backfill(client, missing, token)
        except LoadCancelled:
            log_event(LOGGER, "eonet.load", "Load cancelled", level="debug", generation=generation)
            return LoadResult(cancelled=True)
        except Exception as exc:  # noqa: BLE001
            return self._fail(generation, token, exc)

        merged = merge_geometries(events, backfill)
        self._publish(generation, token, events=merged, loading=False, error=None)
        if token.cancelled or generation != self._generation:
            return LoadResult(data=merged, cancelled=token.cancelled)
        if self.cache is not None:
            self.cache.write(self.cache_key, merged)

        log_event(
            LOGGER,
            "eonet.load",
            "Loaded wildfire events",
            generation=generation,
            forced=force,
            total=len(merged),
            with_geometry=sum(1 for e in merged if not e.missing_geometry),
            backfilled=len(backfill),
            missing_before=len(missing),
        )
        return LoadResult(data=merged)

    def _fail(self, generation: int, token: CancellationToken, exc: Exception) -> LoadResult:
        log_event(
            LOGGER,
            "eonet.load",
            "Load failed",
            level="error",
            generation=generation,
            error=str(exc),
            stale_events=len(self._state.events) if self._state.events is not None else None,
        )
        self._publish(generation, token, error=exc, loading=False)
        return LoadResult(error=exc)

    async def refetch(self, token: Optional[CancellationToken] = None) -> LoadResult:
        return await self.load(force=True, token=token)


def loader_from_settings(
    config: EonetSettings,
    *,
    store: Optional[KeyValueStore] = None,
    status: Optional[str] = None,
    limit: Optional[int] = None,
    limit_detail_fetch: Optional[int] = None,
) -> EventLoader:
    """Wire an ``EventLoader`` to the real EONET client and a file-backed cache."""

    def client_factory() -> EonetClient:
        return EonetClient(config.base_url, config.request_timeout_seconds)

    if store is None:
        store = FileStore(config.cache_dir)
    cache = SnapshotCache(store, ttl_ms=config.cache_ttl_ms)
    return EventLoader(
        client_factory,
        status=status or config.status,
        limit=limit if limit is not None else config.limit,
        limit_detail_fetch=limit_detail_fetch if limit_detail_fetch is not None else config.limit_detail_fetch,
        cache=cache,
        cache_key=config.cache_key,
        policy=config.retry_policy(),
    )
