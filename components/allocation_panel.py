"""Run a strategy from the dashboard and render its result."""

import logging
from typing import List, Optional

import streamlit as st

from models.facility import FacilityRecord
from models.allocation import AllocationResult
from engine.strategies import get_strategy
from engine.errors import InvalidInputError, UpstreamUnavailableError

logger = logging.getLogger(__name__)


def run_allocation(
    records: List[FacilityRecord],
    available_ambulances: int,
    rule_config: dict,
) -> Optional[AllocationResult]:
    """Allocate with the configured strategy. Errors are shown, never partially applied."""
    try:
        strategy = get_strategy(rule_config)
        with st.spinner(f"Running {strategy.name.replace('_', ' ')} allocation..."):
            return strategy.allocate(records, available_ambulances)
    except InvalidInputError as e:
        st.error(f"{e.message}: {e.details}" if e.details else e.message)
    except UpstreamUnavailableError as e:
        st.error(
            f"Language model allocation unavailable — {e.message}"
            + (f" ({e.details})" if e.details else "")
            + ". Retry, or switch to deterministic ranking in the sidebar."
        )
    except ValueError as e:
        st.error(str(e))
    except Exception:
        logger.exception("Allocation failed")
        st.error("Failed to process allocation request.")
    return None


def render_allocation_result(result: AllocationResult, labels: Optional[dict] = None):
    """Allocated ids (with display labels when given) and the reasoning narrative."""
    labels = labels or {}
    if result.used_fallback:
        st.warning("Language model was unavailable; showing the deterministic ranking instead.")

    if result.allocated_ids:
        st.success(f"{len(result.allocated_ids)} ambulance(s) recommended ({result.strategy.replace('_', ' ')})")
        for position, target_id in enumerate(result.allocated_ids, start=1):
            st.markdown(f"**{position}.** {labels.get(target_id, target_id)} `({target_id})`")
    else:
        st.info("No allocations recommended.")

    with st.expander("Reasoning", expanded=not result.allocated_ids):
        st.text(result.narrative)
