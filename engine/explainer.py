"""Generates the human-readable narrative for an ambulance allocation."""

from typing import List

from models.facility import FacilityRecord

NARRATIVE_TITLE = "Ambulance Allocation System"


def explain_start(available_ambulances: int, facility_count: int) -> List[str]:
    """Header lines: starting budget and any surplus beyond one per facility."""
    lines = [
        NARRATIVE_TITLE,
        "",
        f"Starting with {available_ambulances} ambulances available for allocation.",
    ]
    if available_ambulances > facility_count:
        lines.append(
            f"Only {facility_count} facilities submitted and each receives at most one ambulance; "
            f"{available_ambulances - facility_count} will be held in reserve."
        )
    lines.append("")
    lines.append("Allocation process:")
    return lines


def explain_assignment(facility: FacilityRecord, remaining: int) -> List[str]:
    """Lines recording one assignment and the budget left after it."""
    return [
        f"- Allocated 1 ambulance to {facility.facility_name} (ID: {facility.facility_id}):",
        f"  * Priority: {facility.priority_tier}",
        f"  * Status: {facility.operational_status}",
        f"  * Population: {facility.population_served}",
        f"  * Road Condition: {facility.road_condition}",
        f"  * Remaining ambulances: {remaining}",
        "",
    ]


def explain_no_budget() -> List[str]:
    return ["- No ambulances available; no facility could be served.", ""]


def explain_completion(allocated_count: int, unserved_count: int) -> List[str]:
    lines = [f"Allocation complete. {allocated_count} facilities received ambulances."]
    if unserved_count:
        lines.append(f"{unserved_count} facilities remain unserved until more ambulances are available.")
    return lines


def explain_empty(available_ambulances: int) -> List[str]:
    """Narrative for a request that carried no facilities."""
    return [
        NARRATIVE_TITLE,
        "",
        f"Starting with {available_ambulances} ambulances available for allocation.",
        "",
        "No facilities to serve: 0 facilities required service.",
        "",
        "Allocation complete. 0 facilities received ambulances.",
    ]
