"""Tab 1: Overview — snapshot health, distributions and dispatch alerts."""

import streamlit as st
import pandas as pd

from data.session_store import (
    get_facilities, get_fleet, get_pending_bookings, get_last_result,
    is_data_loaded, is_result_current,
)
from engine.analytics import compute_facility_analytics, compute_coverage
from components.metrics_cards import render_metric_row, render_alert_card
from components.charts import priority_donut, status_bar, population_by_district_bar


def render(sidebar_state):
    """Render the Overview tab."""
    st.header("Dispatch Overview")

    fleet = get_fleet()
    pending = get_pending_bookings()
    available_units = sum(1 for a in fleet if a.is_available)

    if not is_data_loaded():
        render_metric_row([
            {"label": "Fleet Available", "value": f"{available_units} / {len(fleet)}"},
            {"label": "Pending Bookings", "value": str(len(pending))},
        ])
        st.info("No facilities loaded. Please upload data in the Facilities tab.")
        return

    records = get_facilities()
    analytics = compute_facility_analytics(records)
    prio = analytics["priority_distribution"]

    render_metric_row([
        {"label": "Facilities", "value": str(analytics["total_facilities"])},
        {"label": "Critical Facilities", "value": str(prio["Critical"]),
         "delta": "needs service" if prio["Critical"] else "None",
         "delta_color": "inverse" if prio["Critical"] else "normal"},
        {"label": "Population Served", "value": f"{analytics['total_population_served']:,}"},
        {"label": "Budget", "value": str(sidebar_state.available_ambulances),
         "delta": f"{available_units} of {len(fleet)} units free", "delta_color": "off"},
        {"label": "Pending Bookings", "value": str(len(pending))},
    ])

    st.divider()

    col1, col2 = st.columns(2)
    with col1:
        st.plotly_chart(priority_donut(prio), use_container_width=True)
    with col2:
        st.plotly_chart(status_bar(analytics["operational_status_distribution"]), use_container_width=True)

    st.plotly_chart(population_by_district_bar(analytics["population_by_district"]), use_container_width=True)

    st.divider()
    st.subheader("Dispatch Alerts")

    alerts = []
    if sidebar_state.available_ambulances < prio["Critical"]:
        alerts.append((
            f"{prio['Critical']} Critical facilities but only {sidebar_state.available_ambulances} "
            "ambulances available. Some Critical facilities will go unserved.",
            "error",
        ))

    result = get_last_result()
    if result is not None and is_result_current():
        coverage = compute_coverage(records, result.allocated_ids)
        if coverage["critical_served"] < coverage["critical_total"]:
            alerts.append((
                f"Last allocation covered {coverage['critical_served']} of {coverage['critical_total']} Critical facilities.",
                "warning",
            ))
    elif result is not None:
        alerts.append(("Facility data changed since the last allocation run.", "info"))

    grounded_critical = [r for r in records if r.priority_tier == "Critical" and r.operational_status == "Grounded"]
    if grounded_critical:
        alerts.append((
            f"Critical and Grounded: {', '.join(r.facility_name for r in grounded_critical)}",
            "warning",
        ))

    if not alerts:
        st.success("No dispatch alerts — Critical demand is within the available budget.")
    for message, level in alerts:
        render_alert_card(message, level)

    if grounded_critical:
        st.dataframe(pd.DataFrame([{
            "Facility": r.facility_name,
            "District": r.district,
            "Population Served": r.population_served,
            "Road Condition": r.road_condition,
        } for r in grounded_critical]), use_container_width=True, hide_index=True)
