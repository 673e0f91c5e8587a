"""Sidebar component: status/date/search filters and the filtered event list."""

from __future__ import annotations

from typing import List, Optional

import streamlit as st

from eonet.filters import filter_events
from eonet.models import Event
from ui.config.constants import STATUS_LABELS, STATUS_OPTIONS
from ui.state import app_state


def event_label(event: Event) -> str:
    latest = event.latest_geometry
    when = latest.date[:10] if latest is not None and latest.date else "no date"
    return f"{event.title} ({when})"


def render_filters() -> None:
    app_state.sync_widgets_before_render()
    st.selectbox(
        "Status",
        options=STATUS_OPTIONS,
        format_func=lambda s: STATUS_LABELS[s],
        key="status_filter",
    )
    col_from, col_to = st.columns(2)
    with col_from:
        st.date_input("From", key="date_from_input")
    with col_to:
        st.date_input("To", key="date_to_input")
    st.text_input("Search", placeholder="Title...", key="search_input")
    app_state.read_widgets()


def render_sidebar(events: Optional[List[Event]], loading: bool) -> List[Event]:
    """Render controls and the event list; return the filtered events."""
    st.header("Events")
    st.caption(f"{len(events)} total" if events is not None else "---")

    if st.button("Refresh", type="primary", disabled=loading):
        with st.spinner("Refreshing from NASA EONET..."):
            app_state.run_load(force=True)
        events = app_state.loader_state.events

    st.divider()
    render_filters()

    f = app_state.filters
    filtered = filter_events(events, f.status, f.date_from, f.date_to, f.search)
    st.caption(f"Showing **{len(filtered)}** results")

    if loading:
        st.caption("Loading...")
    elif not filtered:
        st.caption("No results")

    for event in filtered:
        if st.button(event_label(event), key=f"select_{event.id}", use_container_width=True):
            app_state.select(event.id)
        source_url = next((s.url for s in event.sources if s.url), None)
        if source_url:
            st.caption(source_url)

    return filtered
