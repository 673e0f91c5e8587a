"""Snapshot cache for loaded event lists.

A ``KeyValueStore`` holds raw strings; ``SnapshotCache`` encodes
``{"timestamp": epoch_ms, "data": [...events]}`` on top of it and enforces the
TTL on read. Neither ``read`` nor ``write`` ever raises: codec and storage
failures are logged and treated as a miss / a skipped write.
"""

from __future__ import annotations

import json
import logging
import os
import re
import tempfile
import time
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Dict, List, Optional, Protocol

from pydantic import ValidationError

from eonet.logging_utils import log_event
from eonet.models import Event, dump_events, events_adapter

LOGGER = logging.getLogger(__name__)

DEFAULT_CACHE_KEY = "eonet_events_cache"
DEFAULT_CACHE_TTL_MS = 10 * 60 * 1000

_UNSAFE_KEY_CHARS = re.compile(r"[^A-Za-z0-9._-]")


def now_ms() -> int:
    return int(time.time() * 1000)


class KeyValueStore(Protocol):
    """Process-local string store with no expiry of its own."""

    def get(self, key: str) -> Optional[str]:
        ...

    def set(self, key: str, value: str) -> None:
        ...


class MemoryStore:
    """Dict-backed store, used by tests and one-shot CLI runs."""

    def __init__(self) -> None:
        self._items: Dict[str, str] = {}

    def get(self, key: str) -> Optional[str]:
        return self._items.get(key)

    def set(self, key: str, value: str) -> None:
        self._items[key] = value

    def __contains__(self, key: object) -> bool:
        return key in self._items


class FileStore:
    """One JSON file per key under ``directory``.

    Writes go to a temp file in the same directory and are moved into place
    with ``os.replace`` so readers never observe a partial entry.
    """

    def __init__(self, directory: Path | str) -> None:
        self.directory = Path(directory)

    def path_for(self, key: str) -> Path:
        return self.directory / f"{_UNSAFE_KEY_CHARS.sub('_', key)}.json"

    def get(self, key: str) -> Optional[str]:
        path = self.path_for(key)
        try:
            return path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return None

    def set(self, key: str, value: str) -> None:
        self.directory.mkdir(parents=True, exist_ok=True)
        target = self.path_for(key)
        fd, tmp_name = tempfile.mkstemp(dir=self.directory, prefix=f".{target.stem}.", suffix=".tmp")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as fh:
                fh.write(value)
            os.replace(tmp_name, target)
        except BaseException:
            Path(tmp_name).unlink(missing_ok=True)
            raise


@dataclass(frozen=True)
class CacheEntry:
    timestamp: int
    data: List[Event]


class SnapshotCache:
    """TTL-checked snapshot codec over a ``KeyValueStore``."""

    def __init__(
        self,
        store: KeyValueStore,
        ttl_ms: int = DEFAULT_CACHE_TTL_MS,
        clock: Callable[[], int] = now_ms,
    ) -> None:
        self.store = store
        self.ttl_ms = ttl_ms
        self.clock = clock

    def read(self, key: str) -> Optional[CacheEntry]:
        try:
            raw = self.store.get(key)
        except OSError as exc:
            log_event(LOGGER, "eonet.cache", "Cache read failed", level="warning", key=key, error=str(exc))
            return None
        if not raw:
            return None

        try:
            parsed = json.loads(raw)
        except ValueError:
            log_event(LOGGER, "eonet.cache", "Ignoring malformed cache entry", level="warning", key=key)
            return None
        if not isinstance(parsed, dict):
            return None
        timestamp = parsed.get("timestamp")
        data = parsed.get("data")
        if not isinstance(timestamp, (int, float)) or isinstance(timestamp, bool) or data is None:
            return None

        age_ms = self.clock() - timestamp
        if age_ms > self.ttl_ms:
            log_event(LOGGER, "eonet.cache", "Cache entry expired", level="debug", key=key, age_ms=age_ms)
            return None

        try:
            events = events_adapter.validate_python(data)
        except ValidationError as exc:
            log_event(
                LOGGER,
                "eonet.cache",
                "Cached events failed validation",
                level="warning",
                key=key,
                error_count=exc.error_count(),
            )
            return None
        return CacheEntry(timestamp=int(timestamp), data=events)

    def write(self, key: str, data: List[Event]) -> bool:
        """Store ``data`` stamped with the current time. Returns ``False`` on failure."""
        try:
            payload = json.dumps({"timestamp": self.clock(), "data": dump_events(data)})
            self.store.set(key, payload)
        except (OSError, TypeError, ValueError) as exc:
            log_event(LOGGER, "eonet.cache", "Cache write failed", level="warning", key=key, error=str(exc))
            return False
        log_event(LOGGER, "eonet.cache", "Cache updated", level="debug", key=key, count=len(data))
        return True
