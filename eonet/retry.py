"""Backoff arithmetic for EONET requests.

Kept free of I/O so the loader can inject its own sleep and randomness.
"""

from __future__ import annotations

import math
import random
from dataclasses import dataclass
from datetime import datetime, timezone
from email.utils import parsedate_to_datetime
from typing import Optional

DEFAULT_RETRY = 3


@dataclass(frozen=True)
class RetryPolicy:
    """Tunable retry/backoff/throttle constants, all in milliseconds."""

    attempts: int = DEFAULT_RETRY
    backoff_base_ms: int = 500
    backoff_jitter_ms: int = 400
    rate_limit_base_ms: int = 1000
    rate_limit_jitter_ms: int = 500
    min_retry_after_ms: int = 1000
    detail_delay_min_ms: int = 150
    detail_delay_jitter_ms: int = 200

    def __post_init__(self) -> None:
        if self.attempts < 1:
            raise ValueError("attempts must be >= 1")


def _jitter(rng: random.Random, upper_ms: int) -> int:
    if upper_ms <= 0:
        return 0
    return rng.randrange(upper_ms)


def parse_retry_after(value: Optional[str], now: datetime, min_ms: int) -> Optional[float]:
    """Milliseconds to wait according to a ``Retry-After`` header value.

    Numeric values are seconds. Anything else is tried as an HTTP date and
    turned into an offset from ``now``, never less than ``min_ms``. Returns
    ``None`` when the header is absent or unparseable.
    """
    if value is None:
        return None
    text = value.strip()
    if not text:
        return None
    try:
        seconds = float(text)
    except ValueError:
        pass
    else:
        return max(0.0, seconds * 1000.0) if math.isfinite(seconds) else None
    try:
        then = parsedate_to_datetime(text)
    except (TypeError, ValueError, IndexError):
        return None
    if then is None:
        return None
    if then.tzinfo is None:
        then = then.replace(tzinfo=timezone.utc)
    return max(float(min_ms), (then - now).total_seconds() * 1000.0)


def rate_limit_delay_ms(
    policy: RetryPolicy,
    attempt: int,
    retry_after: Optional[str],
    rng: random.Random,
    now: Optional[datetime] = None,
) -> float:
    """Wait before retrying after a 429 on zero-based ``attempt``."""
    now = now or datetime.now(timezone.utc)
    wait_ms = parse_retry_after(retry_after, now, policy.min_retry_after_ms)
    if wait_ms is None:
        wait_ms = policy.rate_limit_base_ms * (2**attempt)
    return wait_ms + _jitter(rng, policy.rate_limit_jitter_ms)


def backoff_delay_ms(policy: RetryPolicy, attempt: int, rng: random.Random) -> float:
    """Wait before retrying after a transient failure on zero-based ``attempt``."""
    return policy.backoff_base_ms * (2**attempt) + _jitter(rng, policy.backoff_jitter_ms)


def detail_delay_ms(policy: RetryPolicy, rng: random.Random) -> float:
    """Throttle gap between consecutive geometry-detail requests."""
    return policy.detail_delay_min_ms + _jitter(rng, policy.detail_delay_jitter_ms)
