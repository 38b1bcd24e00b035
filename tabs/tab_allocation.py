"""Tab 3: Allocation — rank facilities and recommend where ambulances go."""

import streamlit as st
import pandas as pd

from data.session_store import (
    get_facilities, get_rule_config, get_last_result, set_last_result,
    is_data_loaded, is_result_current, add_dispatch_entry, get_dispatch_log,
)
from engine.allocation_engine import rank_facilities
from engine.analytics import compute_coverage
from components.allocation_panel import run_allocation, render_allocation_result
from components.metrics_cards import render_coverage_row
from components.tables import render_queue_table
from components.charts import allocation_queue_bar


def _queue_rows(records, allocated_ids):
    allocated = set(allocated_ids)
    return [{
        "Rank": rank,
        "Facility": r.facility_name,
        "Facility ID": r.facility_id,
        "Priority Tier": r.priority_tier,
        "Operational Status": r.operational_status,
        "Population Served": r.population_served,
        "Road Condition": r.road_condition,
        "Allocated": "Yes" if r.facility_id in allocated else "No",
    } for rank, r in enumerate(rank_facilities(records), start=1)]


def render(sidebar_state):
    """Render the Allocation tab."""
    st.header("Ambulance Allocation")

    with st.expander("How are facilities ranked?", expanded=False):
        st.markdown("""
Facilities are ranked, then served one ambulance each until the budget runs out:

1. **Priority tier** — Critical, High, Medium, Low
2. **Operational status** — Operational, Partially Operational, Grounded
3. **Population served** — larger first
4. **Road condition** — Good, Moderate, Poor
5. **Upload order** — earlier first

The language model strategy receives the same snapshot and budget but its choice is best effort.
        """)

    if not is_data_loaded():
        st.info("No facilities loaded. Please upload data in the Facilities tab.")
        return

    records = get_facilities()
    config = get_rule_config()

    if st.button("Run Allocation", type="primary", key="btn_run_allocation"):
        result = run_allocation(records, sidebar_state.available_ambulances, config)
        if result is not None:
            set_last_result(result)
            add_dispatch_entry(
                "allocate", "all", result.strategy,
                detail=f"{len(result.allocated_ids)} of {len(records)} facilities: {', '.join(result.allocated_ids)}",
            )

    result = get_last_result()
    if result is None:
        st.info("Run an allocation to see recommendations.")
        return
    if not is_result_current():
        st.warning("Facility data has changed since the last run. Re-run the allocation.")
        return

    coverage = compute_coverage(records, result.allocated_ids)
    render_coverage_row(coverage, sidebar_state.available_ambulances)

    st.divider()
    labels = {r.facility_id: r.facility_name for r in records}
    render_allocation_result(result, labels)

    st.divider()
    st.subheader("Service Queue")
    queue = _queue_rows(records, result.allocated_ids)
    if result.strategy != "deterministic":
        st.caption("Queue shows the deterministic ranking; highlighted rows are the language model's picks.")
    st.plotly_chart(allocation_queue_bar(queue), use_container_width=True)
    render_queue_table(pd.DataFrame(queue))

    log = get_dispatch_log()
    if log:
        st.divider()
        st.subheader("Dispatch Log")
        st.dataframe(pd.DataFrame([{
            "Time": e.timestamp.strftime("%H:%M:%S"),
            "Action": e.action,
            "Target": e.target_id,
            "Strategy": e.strategy,
            "Detail": e.detail,
        } for e in reversed(log)]), use_container_width=True, hide_index=True)
