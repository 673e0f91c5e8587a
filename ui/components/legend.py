"""Legend component for map markers."""

import streamlit as st


def render_legend() -> None:
    with st.expander("Map Legend", expanded=False):
        st.markdown("- 🔴 **Open wildfire** - latest reported position")
        st.markdown("- ⚪ **Closed wildfire** - shown when status is Closed or All")
        st.markdown("- 🟧 **Perimeter** - latest reported polygon, where EONET has one")
        st.caption("Events without any geometry are listed in the sidebar but not drawn.")
