"""Global sidebar controls for strategy and ambulance budget."""

import streamlit as st
from dataclasses import dataclass
from data.session_store import (
    get_rule_config, set_rule_config, get_available_ambulances, set_available_ambulances,
    is_data_loaded, get_facilities, get_pending_bookings,
)
from config.defaults import ALLOCATION_STRATEGIES, ALLOCATION_STRATEGY

STRATEGY_LABELS = {
    "deterministic": "Deterministic ranking",
    "language_model": "Language model (OpenAI)",
}


@dataclass
class SidebarState:
    strategy: str
    available_ambulances: int


def render_sidebar() -> SidebarState:
    """Render the global sidebar controls and return current state."""
    config = get_rule_config()

    with st.sidebar:
        st.title("EMS Dispatch")
        st.divider()

        current = config.get("allocation_strategy", ALLOCATION_STRATEGY)
        strategy = st.selectbox(
            "Allocation Strategy",
            options=ALLOCATION_STRATEGIES,
            format_func=lambda s: STRATEGY_LABELS.get(s, s),
            index=ALLOCATION_STRATEGIES.index(current) if current in ALLOCATION_STRATEGIES else 0,
            key="sidebar_strategy",
        )

        fallback = config.get("llm_fallback_to_deterministic", False)
        if strategy == "language_model":
            fallback = st.checkbox(
                "Fall back to deterministic ranking",
                value=fallback,
                key="sidebar_fallback",
                help="Serve the deterministic result when the language model is unavailable.",
            )
            if not config.get("openai_api_key"):
                st.caption("OPENAI_API_KEY is not set — language model requests will fail.")

        if strategy != current or fallback != config.get("llm_fallback_to_deterministic", False):
            set_rule_config({**config, "allocation_strategy": strategy, "llm_fallback_to_deterministic": fallback})

        ambulances = st.number_input(
            "Available Ambulances",
            min_value=0,
            value=get_available_ambulances(),
            step=1,
        )
        if ambulances != get_available_ambulances():
            set_available_ambulances(ambulances)

        st.divider()

        if is_data_loaded():
            st.success(f"{len(get_facilities())} facilities loaded")
        else:
            st.warning("No facilities loaded — go to Facilities tab")
        st.caption(f"Pending bookings: {len(get_pending_bookings())}")

    return SidebarState(
        strategy=strategy,
        available_ambulances=int(ambulances),
    )
