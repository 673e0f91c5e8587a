"""Centralized state manager for the Streamlit UI.

Wraps ``st.session_state`` with typed dataclasses so components never touch
raw keys. The ``EventLoader`` lives here too, one per browser session, so the
sidebar Refresh button and the initial load share its state.

Usage
-----
    from ui.state import app_state

    app_state.initialize()
    events = app_state.loader_state.events
    ...
    app_state.sync_to_url()
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass
from datetime import date

import streamlit as st

from eonet.config import settings as eonet_settings
from eonet.loader import EventLoader, LoaderState, LoadResult, loader_from_settings
from eonet.models import Event
from ui.config.constants import STATUS_OPTIONS

# ---------------------------------------------------------------------------
# State dataclasses
# ---------------------------------------------------------------------------


@dataclass
class FilterState:
    status: str = "open"
    date_from: date | None = None
    date_to: date | None = None
    search: str = ""


@dataclass
class SelectionState:
    selected_event_id: str | None = None

    def selected(self, events: list[Event] | None) -> Event | None:
        """Resolve the selected id against the current event list."""
        if not events or self.selected_event_id is None:
            return None
        for event in events:
            if event.id == self.selected_event_id:
                return event
        return None


def _parse_date(value: str | None) -> date | None:
    if not value:
        return None
    try:
        return date.fromisoformat(value)
    except ValueError:
        return None


# ---------------------------------------------------------------------------
# Main state manager
# ---------------------------------------------------------------------------


class AppState:
    """Typed façade over ``st.session_state``."""

    def __init__(self) -> None:
        self.filters = FilterState()
        self.selection = SelectionState()

    # -- lifecycle -----------------------------------------------------------

    def initialize(self) -> None:
        """Restore state (or bootstrap from the URL on first run)."""
        if "_state_initialized" not in st.session_state:
            self._load_from_url()
            self._persist()
            st.session_state._state_initialized = True
        else:
            self._restore()

    # -- loader --------------------------------------------------------------

    @property
    def loader(self) -> EventLoader:
        if "event_loader" not in st.session_state:
            st.session_state.event_loader = loader_from_settings(eonet_settings)
        return st.session_state.event_loader

    @property
    def loader_state(self) -> LoaderState:
        return self.loader.state

    def ensure_loaded(self) -> None:
        """Run the initial load once per session."""
        if not st.session_state.get("_initial_load_done"):
            st.session_state._initial_load_done = True
            self.run_load(force=False)

    def run_load(self, force: bool = True) -> LoadResult:
        return asyncio.run(self.loader.load(force=force))

    # -- widget sync ---------------------------------------------------------

    def sync_widgets_before_render(self) -> None:
        """Seed widget keys from canonical state (call *before* widgets render)."""
        s = st.session_state
        f = self.filters
        if "status_filter" not in s:
            s.status_filter = f.status
        if "date_from_input" not in s:
            s.date_from_input = f.date_from
        if "date_to_input" not in s:
            s.date_to_input = f.date_to
        if "search_input" not in s:
            s.search_input = f.search

    def read_widgets(self) -> None:
        """Pull filter widget values into canonical state after they render."""
        s = st.session_state
        f = self.filters
        f.status = s.get("status_filter", f.status)
        f.date_from = s.get("date_from_input", f.date_from)
        f.date_to = s.get("date_to_input", f.date_to)
        f.search = s.get("search_input", f.search) or ""
        self._persist()

    def select(self, event_id: str | None) -> None:
        self.selection.selected_event_id = event_id
        self._persist()

    # -- URL sync ------------------------------------------------------------

    def sync_to_url(self) -> None:
        """Write current filter state to URL query parameters."""
        f = self.filters
        st.query_params["status"] = f.status
        for key, value in (("from", f.date_from), ("to", f.date_to)):
            if value is not None:
                st.query_params[key] = value.isoformat()
            elif key in st.query_params:
                del st.query_params[key]
        if f.search:
            st.query_params["q"] = f.search
        elif "q" in st.query_params:
            del st.query_params["q"]

    # -- persistence ---------------------------------------------------------

    def _persist(self) -> None:
        s = st.session_state
        s.filter_status = self.filters.status
        s.filter_date_from = self.filters.date_from
        s.filter_date_to = self.filters.date_to
        s.filter_search = self.filters.search
        s.selected_event_id = self.selection.selected_event_id

    def _restore(self) -> None:
        s = st.session_state
        self.filters = FilterState(
            status=s.get("filter_status", "open"),
            date_from=s.get("filter_date_from"),
            date_to=s.get("filter_date_to"),
            search=s.get("filter_search", ""),
        )
        self.selection = SelectionState(selected_event_id=s.get("selected_event_id"))

    def _load_from_url(self) -> None:
        params = st.query_params
        f = self.filters
        status = params.get("status")
        if status in STATUS_OPTIONS:
            f.status = status
        f.date_from = _parse_date(params.get("from"))
        f.date_to = _parse_date(params.get("to"))
        f.search = params.get("q", "")


app_state = AppState()
