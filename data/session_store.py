"""Typed wrapper around st.session_state for dashboard data."""

import streamlit as st
from typing import List, Optional
from datetime import datetime
from models.facility import FacilityRecord, Booking
from models.ambulance import Ambulance
from models.allocation import AllocationResult
from models.audit import DispatchLogEntry
from config.settings import load_rule_config
from data.sample_data import generate_bookings, generate_fleet, default_ambulance_count


def initialize_session_state():
    """Initialize all session state keys with defaults."""
    fleet = generate_fleet()
    defaults = {
        "facilities": [],
        "bookings": generate_bookings(),
        "fleet": fleet,
        "available_ambulances": default_ambulance_count(fleet),
        "last_result": None,
        "last_result_facility_ids": [],
        "dispatch_log": [],
        "data_loaded": False,
        "rule_config": load_rule_config(),
    }
    for key, default in defaults.items():
        if key not in st.session_state:
            st.session_state[key] = default


# --- Getters ---

def get_facilities() -> List[FacilityRecord]:
    return st.session_state.get("facilities", [])


def get_bookings() -> List[Booking]:
    return st.session_state.get("bookings", [])


def get_pending_bookings() -> List[Booking]:
    return [b for b in get_bookings() if b.status == "Pending"]


def get_fleet() -> List[Ambulance]:
    return st.session_state.get("fleet", [])


def get_available_ambulances() -> int:
    return st.session_state.get("available_ambulances", 0)


def get_last_result() -> Optional[AllocationResult]:
    return st.session_state.get("last_result")


def get_dispatch_log() -> List[DispatchLogEntry]:
    return st.session_state.get("dispatch_log", [])


def get_rule_config() -> dict:
    return st.session_state.get("rule_config", {})


def is_data_loaded() -> bool:
    return st.session_state.get("data_loaded", False)


def is_result_current() -> bool:
    """True while the stored result still matches the loaded facility snapshot."""
    ids = [f.facility_id for f in get_facilities()]
    return get_last_result() is not None and st.session_state.get("last_result_facility_ids") == ids


# --- Setters ---

def set_facilities(facilities: List[FacilityRecord]):
    st.session_state["facilities"] = facilities
    st.session_state["data_loaded"] = bool(facilities)


def set_available_ambulances(count: int):
    st.session_state["available_ambulances"] = max(0, int(count))


def set_last_result(result: Optional[AllocationResult]):
    st.session_state["last_result"] = result
    st.session_state["last_result_facility_ids"] = [f.facility_id for f in get_facilities()]


def set_rule_config(config: dict):
    st.session_state["rule_config"] = config


# --- Bookings ---

def mark_bookings_allocated(booking_ids: List[str]) -> List[str]:
    """Flip pending bookings to Allocated and spend one ambulance each. Returns the ids applied."""
    wanted = set(booking_ids)
    applied = []
    now = datetime.now().isoformat(timespec="seconds")
    for booking in get_bookings():
        if booking.booking_id in wanted and booking.status == "Pending" and get_available_ambulances() > 0:
            booking.status = "Allocated"
            booking.allocated_at = now
            set_available_ambulances(get_available_ambulances() - 1)
            applied.append(booking.booking_id)
    return applied


def mark_booking_completed(booking_id: str) -> bool:
    for booking in get_bookings():
        if booking.booking_id == booking_id and booking.status == "Allocated":
            booking.status = "Completed"
            set_available_ambulances(get_available_ambulances() + 1)
            return True
    return False


def reset_bookings():
    st.session_state["bookings"] = generate_bookings()
    st.session_state["available_ambulances"] = default_ambulance_count(get_fleet())


# --- Dispatch log ---

def add_dispatch_entry(action: str, target_id: str, strategy: str, detail: str = ""):
    entry = DispatchLogEntry(
        timestamp=datetime.now(),
        action=action,
        target_id=target_id,
        strategy=strategy,
        detail=detail,
    )
    st.session_state["dispatch_log"].append(entry)
