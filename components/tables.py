"""Styled dataframe display helpers."""

import streamlit as st
import pandas as pd
from typing import Optional

from config.defaults import PRIORITY_COLORS, STATUS_COLORS


def _badge(color: str) -> str:
    return f"background-color: {color}; color: white; font-weight: bold"


def render_facility_table(df: pd.DataFrame, title: Optional[str] = None, height: Optional[int] = None):
    """Facility table with colour-coded priority tier and operational status."""
    if title:
        st.subheader(title)

    def color_priority(val):
        return _badge(PRIORITY_COLORS[val]) if val in PRIORITY_COLORS else ""

    def color_status(val):
        return _badge(STATUS_COLORS[val]) if val in STATUS_COLORS else ""

    styled = df.style
    if "Priority Tier" in df.columns:
        styled = styled.map(color_priority, subset=["Priority Tier"])
    if "Operational Status" in df.columns:
        styled = styled.map(color_status, subset=["Operational Status"])
    st.dataframe(styled, height=height, use_container_width=True, hide_index=True)


def render_queue_table(df: pd.DataFrame, allocated_column: str = "Allocated"):
    """Ranked service queue; allocated rows highlighted."""
    def highlight(row):
        if row.get(allocated_column) == "Yes":
            return ["background-color: #d4edda; color: #155724"] * len(row)
        return [""] * len(row)

    if allocated_column in df.columns:
        st.dataframe(df.style.apply(highlight, axis=1), use_container_width=True, hide_index=True)
    else:
        st.dataframe(df, use_container_width=True, hide_index=True)


def render_booking_table(df: pd.DataFrame, status_column: str = "Status"):
    """Bookings with the lifecycle status colour-coded."""
    colors = {"Pending": "#FF9800", "Allocated": "#2196F3", "Completed": "#4CAF50"}

    def color_status(val):
        return _badge(colors[val]) if val in colors else ""

    if status_column in df.columns:
        st.dataframe(df.style.map(color_status, subset=[status_column]), use_container_width=True, hide_index=True)
    else:
        st.dataframe(df, use_container_width=True, hide_index=True)
