"""Error taxonomy for talking to EONET."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

RATE_LIMIT_MESSAGE = "Rate limited by EONET (429). Try again later."


@dataclass
class EonetError(Exception):
    message: str
    status_code: Optional[int] = None
    url: Optional[str] = None
    response_text: Optional[str] = None

    def __str__(self) -> str:
        parts = [self.message]
        if self.status_code is not None:
            parts.append(f"(status={self.status_code})")
        if self.url:
            parts.append(f"url={self.url}")
        return " ".join(parts)


class EonetUnavailableError(EonetError):
    """EONET is unreachable or the request timed out."""


class EonetProtocolError(EonetError):
    """The response did not have the shape we expect. Never retried."""


@dataclass
class EonetRateLimitError(EonetError):
    """HTTP 429 from EONET."""

    retry_after: Optional[str] = None


class LoadCancelled(EonetError):
    """Raised at a suspension point once the load's token has been cancelled."""
