"""Tab 5: Fleet — ambulance status and last known positions."""

import streamlit as st
import pandas as pd

from data.session_store import get_fleet
from components.charts import fleet_map
from components.metrics_cards import render_metric_row
from config.defaults import AMBULANCE_STATUSES, LOW_BATTERY_THRESHOLD


def render(sidebar_state):
    """Render the Fleet tab."""
    st.header("Ambulance Fleet")

    fleet = get_fleet()
    if not fleet:
        st.info("No fleet data available.")
        return

    render_metric_row([
        {"label": status, "value": str(sum(1 for a in fleet if a.status == status))}
        for status in AMBULANCE_STATUSES
    ])

    st.plotly_chart(fleet_map(fleet), use_container_width=True)

    low_battery = [a for a in fleet if a.battery_level < LOW_BATTERY_THRESHOLD]
    for a in low_battery:
        st.warning(f"{a.call_sign}: battery at {a.battery_level}%")

    st.dataframe(pd.DataFrame([{
        "Call Sign": a.call_sign,
        "District": a.district,
        "Status": a.status,
        "Battery %": a.battery_level,
        "Last Maintenance": a.last_maintenance,
        "Crew": ", ".join(a.crew),
        "Contact": a.contact,
    } for a in fleet]), use_container_width=True, hide_index=True)
