"""Plotly chart builders for the EMS dispatch dashboard."""

import plotly.express as px
import plotly.graph_objects as go
import pandas as pd
from typing import Dict, List

from models.ambulance import Ambulance
from config.defaults import PRIORITY_COLORS, STATUS_COLORS


def priority_donut(distribution: Dict[str, int], title: str = "Facilities by Priority Tier") -> go.Figure:
    """Donut chart of facility counts per priority tier."""
    labels = list(distribution.keys())
    fig = go.Figure(data=[go.Pie(
        labels=labels,
        values=[distribution[k] for k in labels],
        hole=0.6,
        marker_colors=[PRIORITY_COLORS.get(k, "#9E9E9E") for k in labels],
        textinfo="value+label",
        sort=False,
    )])
    total = sum(distribution.values())
    fig.update_layout(
        title=title,
        height=350,
        showlegend=True,
        annotations=[dict(text=f"{total}", x=0.5, y=0.5, font_size=18, showarrow=False)],
    )
    return fig


def status_bar(distribution: Dict[str, int], title: str = "Operational Status") -> go.Figure:
    """Bar chart of facility counts per operational status."""
    df = pd.DataFrame({"status": list(distribution.keys()), "count": list(distribution.values())})
    fig = px.bar(
        df, x="status", y="count",
        color="status",
        color_discrete_map=STATUS_COLORS,
        labels={"status": "", "count": "Facilities"},
        title=title,
    )
    fig.update_layout(showlegend=False, height=350)
    return fig


def population_by_district_bar(population_by_district: Dict[str, int]) -> go.Figure:
    """Horizontal bar chart of population served per district."""
    df = pd.DataFrame({
        "district": list(population_by_district.keys()),
        "population": list(population_by_district.values()),
    }).sort_values("population")
    fig = px.bar(
        df, x="population", y="district",
        orientation="h",
        title="Population Served by District",
        labels={"population": "Population", "district": ""},
        color_discrete_sequence=["#4A90D9"],
    )
    fig.update_layout(height=max(300, len(df) * 40), yaxis_type="category")
    return fig


def allocation_queue_bar(queue: List[dict]) -> go.Figure:
    """Ranked facilities by population, coloured by whether they received an ambulance."""
    df = pd.DataFrame(queue)
    fig = px.bar(
        df, x="Facility", y="Population Served",
        color="Allocated",
        color_discrete_map={"Yes": "#4CAF50", "No": "#B0BEC5"},
        hover_data=["Rank", "Priority Tier", "Operational Status", "Road Condition"],
        title="Service Queue (ranked left to right)",
    )
    fig.update_layout(height=400, xaxis={"categoryorder": "array", "categoryarray": df["Facility"].tolist()})
    return fig


def fleet_map(fleet: List[Ambulance]) -> go.Figure:
    """Static map of ambulance positions coloured by status."""
    df = pd.DataFrame([{
        "Call Sign": a.call_sign,
        "District": a.district,
        "Status": a.status,
        "Battery": a.battery_level,
        "lat": a.latitude,
        "lon": a.longitude,
    } for a in fleet])
    fig = px.scatter_geo(
        df, lat="lat", lon="lon",
        color="Status",
        hover_name="Call Sign",
        hover_data={"District": True, "Battery": True, "lat": False, "lon": False},
        color_discrete_map={"Available": "#4CAF50", "En Route": "#2196F3", "Maintenance": "#E8734A"},
        title="Fleet Positions",
    )
    fig.update_traces(marker={"size": 14})
    fig.update_geos(fitbounds="locations", showcountries=True, showsubunits=True)
    fig.update_layout(height=450, margin={"l": 0, "r": 0, "t": 40, "b": 0})
    return fig
