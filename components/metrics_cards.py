"""KPI metric cards for the dispatch dashboard."""

import streamlit as st


def render_metric_row(metrics: list[dict]):
    """Render a row of metric cards.

    Each metric dict should have: label, value, and optionally delta, delta_color, help.
    """
    cols = st.columns(len(metrics))
    for col, m in zip(cols, metrics):
        with col:
            st.metric(
                label=m["label"],
                value=m["value"],
                delta=m.get("delta"),
                delta_color=m.get("delta_color", "normal"),
                help=m.get("help"),
            )


def render_coverage_row(coverage: dict, available_ambulances: int):
    """Cards summarising what an allocation achieved."""
    unserved = coverage["facilities_unserved"]
    render_metric_row([
        {"label": "Ambulances Available", "value": str(available_ambulances)},
        {"label": "Facilities Served", "value": str(coverage["facilities_served"]),
         "delta": f"{unserved} unserved" if unserved else "All served",
         "delta_color": "inverse" if unserved else "normal"},
        {"label": "Critical Covered", "value": f"{coverage['critical_served']} / {coverage['critical_total']}"},
        {"label": "Population Covered", "value": f"{coverage['population_served']:,}",
         "delta": f"{coverage['population_coverage_pct']:.0%} of total", "delta_color": "off"},
    ])


def render_alert_card(message: str, level: str = "warning"):
    """Render an alert card with appropriate styling."""
    if level == "error":
        st.error(message, icon="🔴")
    elif level == "warning":
        st.warning(message, icon="🟡")
    else:
        st.info(message, icon="🔵")
