"""EMS Dispatch Allocation Platform — Streamlit entry point."""

import logging
import streamlit as st
import sys
import os

# Add project root to path for imports
sys.path.insert(0, os.path.dirname(os.path.abspath(__file__)))

from components.sidebar import render_sidebar
from data.session_store import initialize_session_state, get_rule_config
from tabs import (
    tab_dashboard,
    tab_facilities,
    tab_allocation,
    tab_bookings,
    tab_fleet,
)


def main():
    st.set_page_config(
        page_title="EMS Dispatch",
        page_icon="🚑",
        layout="wide",
        initial_sidebar_state="expanded",
    )

    initialize_session_state()
    logging.basicConfig(level=get_rule_config().get("log_level", "INFO"))
    sidebar_state = render_sidebar()

    tab1, tab2, tab3, tab4, tab5 = st.tabs([
        "📊 Overview",
        "🏥 Facilities",
        "🚑 Allocation",
        "📋 Bookings",
        "🗺️ Fleet",
    ])

    with tab1:
        tab_dashboard.render(sidebar_state)
    with tab2:
        tab_facilities.render(sidebar_state)
    with tab3:
        tab_allocation.render(sidebar_state)
    with tab4:
        tab_bookings.render(sidebar_state)
    with tab5:
        tab_fleet.render(sidebar_state)


if __name__ == "__main__":
    main()
