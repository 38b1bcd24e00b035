"""Tab 2: Facilities — upload, validate, analyse and export the facility snapshot."""

import json
from datetime import date

import streamlit as st

from data.loader import (
    load_facility_upload, parse_facility_json, parse_facilities_df, facilities_to_df,
    export_facilities_csv, export_facilities_excel, dataframe_to_excel,
)
from data.sample_data import (
    generate_facilities_df, generate_random_facilities_df, generate_template_df, generate_demo_payload,
)
from data.session_store import (
    get_facilities, set_facilities, set_available_ambulances, set_last_result,
    add_dispatch_entry, get_rule_config, is_data_loaded,
)
from engine.analytics import compute_facility_analytics
from engine.errors import InvalidInputError
from components.metrics_cards import render_metric_row
from components.tables import render_facility_table


def _store(records, available, source: str, warnings=()):
    """Replace the snapshot; any earlier recommendation no longer applies."""
    for w in warnings:
        st.warning(w)
    set_facilities(records)
    set_last_result(None)
    if available is not None:
        set_available_ambulances(available)
    add_dispatch_entry(
        "upload", "all", get_rule_config().get("allocation_strategy", ""),
        detail=f"{len(records)} facilities from {source}",
    )
    suffix = f" and {available} ambulances" if available is not None else ""
    st.success(f"Successfully loaded and analyzed {len(records)} facilities{suffix}")


def _render_analytics(records):
    analytics = compute_facility_analytics(records)
    prio = analytics["priority_distribution"]
    status = analytics["operational_status_distribution"]
    render_metric_row([
        {"label": "Total Facilities", "value": str(analytics["total_facilities"])},
        {"label": "Critical", "value": str(prio["Critical"])},
        {"label": "High", "value": str(prio["High"])},
        {"label": "Grounded", "value": str(status["Grounded"])},
        {"label": "Ambulances Deployed", "value": f"{analytics['total_ambulances_deployed']:,}"},
    ])


def render(sidebar_state):
    """Render the Facilities tab."""
    st.header("Facilities")

    st.subheader("Load Facility Data")
    mode = st.radio("Source", ["Upload file", "Paste JSON", "Demo data"], horizontal=True, key="facility_source")

    if mode == "Upload file":
        st.caption(
            "Upload `.json`/`.txt` (`{\"facilities\": [...], \"availableAmbulances\": n}`) "
            "or `.csv`/`.xlsx` with the template columns. Excel files use the first sheet."
        )
        uploaded = st.file_uploader("Facility file", type=["json", "txt", "csv", "xlsx", "xls"], key="upload_facilities")
        if st.button("Upload & Validate", type="primary", key="btn_upload_facilities"):
            if uploaded:
                try:
                    records, available, warnings = load_facility_upload(uploaded)
                    _store(records, available, uploaded.name, warnings)
                except InvalidInputError as e:
                    st.error(e.message)
                    if e.details:
                        st.caption(e.details)
                except ValueError as e:
                    st.error(f"Error loading file: {e}")
            else:
                st.warning("Please select a file")

    elif mode == "Paste JSON":
        raw = st.text_area("JSON data", height=200, key="facility_json",
                           placeholder=json.dumps(generate_demo_payload(), indent=2))
        if st.button("Load JSON", type="primary", key="btn_load_json"):
            if not raw.strip():
                st.error("Please enter JSON data")
            else:
                try:
                    records, available = parse_facility_json(json.loads(raw))
                    _store(records, available, "pasted JSON")
                except InvalidInputError as e:
                    st.error(f"{e.message}: {e.details}" if e.details else e.message)
                except ValueError as e:
                    st.error(f"Failed to parse JSON data: {e}")

    else:
        col1, col2 = st.columns(2)
        with col1:
            if st.button("Load Demo Facilities", key="btn_demo"):
                _store(parse_facilities_df(generate_facilities_df()), None, "demo data")
        with col2:
            count = st.number_input("Synthetic facilities", min_value=1, max_value=500, value=25, key="synthetic_count")
            if st.button("Generate Synthetic Snapshot", key="btn_synthetic"):
                _store(parse_facilities_df(generate_random_facilities_df(int(count))), None, "synthetic data")

    st.download_button(
        "Download Template (.xlsx)",
        data=dataframe_to_excel(generate_template_df(), "Template"),
        file_name="facility_template.xlsx",
        mime="application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
        key="dl_template",
    )

    if not is_data_loaded():
        return

    st.divider()
    records = get_facilities()
    _render_analytics(records)
    render_facility_table(facilities_to_df(records), title="Current Snapshot")

    stamp = date.today().isoformat()
    col1, col2 = st.columns(2)
    with col1:
        st.download_button(
            "Export CSV", data=export_facilities_csv(records),
            file_name=f"facilities_{stamp}.csv", mime="text/csv", key="dl_csv",
        )
    with col2:
        st.download_button(
            "Export Excel", data=export_facilities_excel(records),
            file_name=f"facilities_{stamp}.xlsx",
            mime="application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
            key="dl_xlsx",
        )
