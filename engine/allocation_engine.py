"""Rule-based ambulance allocation — the core dispatch engine."""

import logging
from typing import List, Sequence, Tuple

from models.facility import FacilityRecord
from models.allocation import AllocationResult
from engine.errors import InvalidInputError
from engine.explainer import (
    explain_start, explain_assignment, explain_no_budget,
    explain_completion, explain_empty,
)
from config.defaults import (
    PRIORITY_ORDER, OPERATIONAL_ORDER, ROAD_ORDER,
    PRIORITY_TIERS, OPERATIONAL_STATUSES, ROAD_CONDITIONS,
)

logger = logging.getLogger(__name__)

STRATEGY_NAME = "deterministic"

# Attribute -> wire name, so errors point at the field the caller sent
FIELD_LABELS = {
    "facility_id": "facilityId",
    "facility_name": "facilityName",
    "district": "district",
    "ambulances_deployed": "ambulancesDeployed",
    "operational_status": "operationalStatus",
    "population_served": "populationServed",
    "road_condition": "roadCondition",
    "priority_tier": "priorityTier",
}

_TEXT_FIELDS = ("facility_id", "facility_name", "district")
_COUNT_FIELDS = ("ambulances_deployed", "population_served")
_ENUM_FIELDS = {
    "priority_tier": PRIORITY_TIERS,
    "operational_status": OPERATIONAL_STATUSES,
    "road_condition": ROAD_CONDITIONS,
}


def _record_label(record, index: int) -> str:
    facility_id = getattr(record, "facility_id", None)
    if isinstance(facility_id, str) and facility_id.strip():
        return f"record {index} (ID: {facility_id})"
    return f"record {index}"


def validate_available_ambulances(available_ambulances) -> int:
    """Return the budget as an int or raise InvalidInputError."""
    if isinstance(available_ambulances, bool) or not isinstance(available_ambulances, int):
        raise InvalidInputError(
            "Invalid request format: availableAmbulances must be a number",
            f"got {available_ambulances!r}",
        )
    if available_ambulances < 0:
        raise InvalidInputError(
            "Invalid request format: availableAmbulances cannot be negative",
            f"got {available_ambulances}",
        )
    return available_ambulances


def validate_record(record, index: int) -> None:
    """Check one record's required fields, counts and enum values."""
    label = _record_label(record, index)
    if not isinstance(record, FacilityRecord):
        raise InvalidInputError(
            "Invalid facility record",
            f"{label} is a {type(record).__name__}, not a facility record",
        )

    for attr in _TEXT_FIELDS:
        value = getattr(record, attr)
        if not isinstance(value, str) or not value.strip():
            raise InvalidInputError(
                "Missing required fields in facility data",
                f"{label}: '{FIELD_LABELS[attr]}' is required",
            )

    for attr in _COUNT_FIELDS:
        value = getattr(record, attr)
        if isinstance(value, bool) or not isinstance(value, int):
            raise InvalidInputError(
                "Invalid facility record",
                f"{label}: '{FIELD_LABELS[attr]}' must be a whole number, got {value!r}",
            )
        if value < 0:
            raise InvalidInputError(
                "Invalid facility record",
                f"{label}: '{FIELD_LABELS[attr]}' cannot be negative, got {value}",
            )

    for attr, allowed in _ENUM_FIELDS.items():
        value = getattr(record, attr)
        if value not in allowed:
            raise InvalidInputError(
                "Invalid facility record",
                f"{label}: '{FIELD_LABELS[attr]}' has invalid value {value!r}; "
                f"expected one of {', '.join(allowed)}",
            )


def validate_allocation_request(records: Sequence[FacilityRecord], available_ambulances) -> int:
    """Fail fast on any invalid input. Returns the validated budget."""
    budget = validate_available_ambulances(available_ambulances)
    if isinstance(records, (str, bytes, dict)) or not isinstance(records, Sequence):
        raise InvalidInputError(
            "Invalid request format: facilities must be an array",
            f"got {type(records).__name__}",
        )

    seen = {}
    for index, record in enumerate(records):
        validate_record(record, index)
        if record.facility_id in seen:
            raise InvalidInputError(
                "Duplicate facility IDs",
                f"'{record.facility_id}' appears at records {seen[record.facility_id]} and {index}",
            )
        seen[record.facility_id] = index
    return budget


def rank_key(record: FacilityRecord, index: int) -> Tuple[int, int, int, int, int]:
    """Sort key: tier, status, population (desc), road, then input order."""
    return (
        PRIORITY_ORDER[record.priority_tier],
        OPERATIONAL_ORDER[record.operational_status],
        -record.population_served,
        ROAD_ORDER[record.road_condition],
        index,
    )


def rank_facilities(records: Sequence[FacilityRecord]) -> List[FacilityRecord]:
    """Full service queue, most-needy first. Assumes records are already validated."""
    indexed = sorted(enumerate(records), key=lambda pair: rank_key(pair[1], pair[0]))
    return [record for _, record in indexed]


def allocate(records: Sequence[FacilityRecord], available_ambulances: int) -> AllocationResult:
    """Assign at most one ambulance per facility, highest-ranked facilities first."""
    budget = validate_allocation_request(records, available_ambulances)
    logger.info("Allocating %d ambulances across %d facilities", budget, len(records))

    if not records:
        return AllocationResult(
            allocated_ids=[],
            narrative_lines=explain_empty(budget),
            strategy=STRATEGY_NAME,
        )

    # Step 1: Header, noting any budget beyond one-per-facility
    narrative = explain_start(budget, len(records))

    # Step 2: Rank
    ranked = rank_facilities(records)

    # Step 3: Greedy walk, one ambulance per facility
    remaining = budget
    allocated_ids = []
    for facility in ranked:
        if remaining <= 0:
            break
        remaining -= 1
        allocated_ids.append(facility.facility_id)
        narrative.extend(explain_assignment(facility, remaining))

    if not allocated_ids:
        narrative.extend(explain_no_budget())

    narrative.extend(explain_completion(len(allocated_ids), len(records) - len(allocated_ids)))
    logger.debug("Allocated facilities: %s", allocated_ids)

    return AllocationResult(
        allocated_ids=allocated_ids,
        narrative_lines=narrative,
        strategy=STRATEGY_NAME,
    )
