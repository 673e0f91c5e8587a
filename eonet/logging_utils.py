"""Structured log helpers shared by the loader, client and cache."""

from __future__ import annotations

import json
import logging
from typing import Any, Mapping


def _encode_context(context: Mapping[str, Any]) -> str:
    try:
        return json.dumps(context, default=str, sort_keys=True)
    except TypeError:
        safe_ctx = {k: str(v) for k, v in context.items()}
        return json.dumps(safe_ctx, sort_keys=True)


def log_event(
    logger: logging.Logger,
    event: str,
    message: str,
    *,
    level: str = "info",
    **fields: Any,
) -> None:
    """Emit ``message`` tagged with ``event`` plus a JSON context suffix.

    Example:
        log_event(LOGGER, "eonet.retry", "Backing off", attempt=1, wait_ms=1200)

    ``None`` fields are dropped. The context is also attached as ``extra`` so
    handlers with structured formatters can pick the fields up directly.
    """

    context = {k: v for k, v in fields.items() if v is not None}
    payload = f"[{event}] {message}"
    if context:
        payload = f"{payload} | {_encode_context(context)}"

    log_fn = getattr(logger, level, logger.info)
    log_fn(payload, extra={"event": event, **context})
