"""Tab 4: Bookings — pending patient requests, smart and manual ambulance allocation."""

import streamlit as st
import pandas as pd

from data.loader import booking_to_record
from data.session_store import (
    get_bookings, get_pending_bookings, get_rule_config, get_available_ambulances,
    mark_bookings_allocated, mark_booking_completed, reset_bookings, add_dispatch_entry,
)
from components.allocation_panel import run_allocation, render_allocation_result
from components.metrics_cards import render_metric_row
from components.tables import render_booking_table


def render(sidebar_state):
    """Render the Bookings tab."""
    st.header("Bookings")

    bookings = get_bookings()
    pending = get_pending_bookings()
    render_metric_row([
        {"label": "Pending", "value": str(len(pending))},
        {"label": "Allocated", "value": str(sum(1 for b in bookings if b.status == "Allocated"))},
        {"label": "Completed", "value": str(sum(1 for b in bookings if b.status == "Completed"))},
        {"label": "Ambulances Available", "value": str(get_available_ambulances())},
    ])

    render_booking_table(pd.DataFrame([{
        "ID": b.booking_id,
        "Patient": b.patient_name,
        "Location": b.location,
        "Symptoms": b.symptoms,
        "Priority": b.priority,
        "Status": b.status,
        "Requested": b.timestamp,
    } for b in bookings]))

    st.divider()
    st.subheader("Smart Allocation")
    st.caption("Ranks pending bookings with the strategy selected in the sidebar.")

    if st.button("Run Smart Allocation", type="primary", key="btn_smart_alloc", disabled=not pending):
        config = get_rule_config()
        result = run_allocation([booking_to_record(b) for b in pending], get_available_ambulances(), config)
        if result is not None:
            labels = {b.booking_id: f"{b.patient_name} - {b.priority} Priority" for b in pending}
            render_allocation_result(result, labels)
            applied = mark_bookings_allocated(result.allocated_ids)
            for booking_id in applied:
                add_dispatch_entry("allocate", booking_id, result.strategy, detail="smart allocation")
            if applied:
                st.success(f"{len(applied)} booking(s) marked as Allocated.")

    st.divider()
    st.subheader("Manual Dispatch")
    col1, col2, col3 = st.columns(3)
    with col1:
        if pending:
            choice = st.selectbox("Pending booking", [b.booking_id for b in pending],
                                  format_func=lambda i: next(f"{b.patient_name} ({b.priority})" for b in pending if b.booking_id == i),
                                  key="manual_booking")
            if st.button("Allocate Ambulance", key="btn_manual_alloc", disabled=get_available_ambulances() <= 0):
                if mark_bookings_allocated([choice]):
                    add_dispatch_entry("manual_allocate", choice, "manual")
                    st.rerun()
        else:
            st.caption("No pending bookings.")
    with col2:
        allocated = [b for b in bookings if b.status == "Allocated"]
        if allocated:
            done = st.selectbox("Allocated booking", [b.booking_id for b in allocated], key="complete_booking")
            if st.button("Mark Completed", key="btn_complete"):
                if mark_booking_completed(done):
                    add_dispatch_entry("complete", done, "manual")
                    st.rerun()
    with col3:
        if st.button("Reset Bookings", key="btn_reset_bookings"):
            reset_bookings()
            add_dispatch_entry("reset", "all", "manual", detail="demo bookings restored")
            st.rerun()
