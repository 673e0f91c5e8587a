"""Main Streamlit application for the wildfire event tracker."""

import logging

import streamlit as st

from ui.components.event_details import render_event_details
from ui.components.legend import render_legend
from ui.components.map_view import render_map_view
from ui.components.sidebar import render_sidebar
from ui.components.status_banner import render_status_banner
from ui.config.constants import PAGE_CAPTION, PAGE_TITLE
from ui.state import app_state


def main() -> None:
    """Main application entry point."""
    st.set_page_config(page_title=PAGE_TITLE, layout="wide")
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s %(message)s",
    )

    app_state.initialize()
    app_state.ensure_loaded()

    st.title(PAGE_TITLE)
    st.caption(PAGE_CAPTION)

    loader_state = app_state.loader_state
    with st.sidebar:
        filtered = render_sidebar(loader_state.events, loader_state.loading)

    # Refresh may have run inside the sidebar
    loader_state = app_state.loader_state
    render_status_banner(loader_state)

    selected = app_state.selection.selected(loader_state.events)
    render_map_view(filtered, selected)

    count = len(loader_state.events) if loader_state.events is not None else 0
    st.caption(f"{count} wildfire events")
    render_event_details(selected)
    render_legend()

    app_state.sync_to_url()


if __name__ == "__main__":
    main()
