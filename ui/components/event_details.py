"""Details panel for the selected event."""

from typing import Optional

import streamlit as st

from eonet.geometry import event_position
from eonet.models import Event


def render_event_details(event: Optional[Event]) -> None:
    st.divider()
    if event is None:
        st.caption("Select an event in the sidebar to see its details.")
        return

    st.subheader(event.title)
    latest = event.latest_geometry
    if latest is not None:
        st.write(f"**Last observed:** {latest.date or 'unknown'} ({latest.type or 'unknown type'})")
    position = event_position(event)
    if position is not None:
        st.write(f"**Position:** {position[0]:.4f}, {position[1]:.4f}")
    st.write(f"**Status:** {'open' if event.is_open else f'closed {event.closed}'}")
    if event.description:
        st.write(event.description)
    for source in event.sources:
        if source.url:
            st.markdown(f"- [{source.id or source.url}]({source.url})")
