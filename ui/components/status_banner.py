"""Status banner: distinguishes a failed refresh over cached data from no data at all."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

import streamlit as st

from eonet.errors import EonetRateLimitError
from eonet.loader import LoaderState


@dataclass(frozen=True)
class Banner:
    level: str  # "warning" or "error"
    title: str
    detail: str


def banner_for(state: LoaderState) -> Optional[Banner]:
    """Pick the banner for ``state``; ``None`` when there is nothing to report."""
    if state.error is None:
        return None
    detail = f"Error: {state.error}"
    if isinstance(state.error, EonetRateLimitError):
        detail = f"{detail}. NASA EONET is throttling requests."
    if state.has_data:
        return Banner(
            level="warning",
            title="Unable to update from NASA right now. Showing cached data.",
            detail=detail,
        )
    return Banner(
        level="error",
        title="No wildfire data available. Try refreshing in a few minutes.",
        detail=detail,
    )


def render_status_banner(state: LoaderState) -> None:
    banner = banner_for(state)
    if banner is None:
        return
    show = st.warning if banner.level == "warning" else st.error
    show(f"**{banner.title}**\n\n{banner.detail}")
