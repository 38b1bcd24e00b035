"""Tests for the allocation engine."""

import sys
import os
sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

import pytest

from models.facility import FacilityRecord
from engine.allocation_engine import (
    allocate,
    rank_facilities,
    rank_key,
    validate_allocation_request,
    validate_available_ambulances,
)
from engine.errors import InvalidInputError


def make_facility(fid="F1", tier="High", status="Operational", pop=10000, road="Good", name=None, deployed=0):
    return FacilityRecord(
        facility_id=fid,
        facility_name=name or f"Facility {fid}",
        district="Amathole",
        ambulances_deployed=deployed,
        operational_status=status,
        population_served=pop,
        road_condition=road,
        priority_tier=tier,
    )


class TestRanking:
    def test_critical_outranks_high_regardless_of_population(self):
        records = [
            make_facility("F1", "Critical", "Operational", 50000, "Poor"),
            make_facility("F2", "High", "Operational", 200000, "Moderate"),
        ]
        assert allocate(records, 1).allocated_ids == ["F1"]

    def test_operational_beats_grounded_within_tier(self):
        records = [
            make_facility("F1", "High", "Grounded", 10000, "Good"),
            make_facility("F2", "High", "Operational", 10000, "Good"),
        ]
        assert allocate(records, 1).allocated_ids == ["F2"]

    def test_higher_population_wins_within_tier_and_status(self):
        records = [
            make_facility("F1", "Medium", "Operational", 5000, "Good"),
            make_facility("F2", "Medium", "Operational", 9000, "Good"),
        ]
        assert allocate(records, 1).allocated_ids == ["F2"]

    def test_better_road_breaks_population_tie(self):
        records = [
            make_facility("F1", "Low", "Operational", 9000, "Poor"),
            make_facility("F2", "Low", "Operational", 9000, "Moderate"),
            make_facility("F3", "Low", "Operational", 9000, "Good"),
        ]
        assert [r.facility_id for r in rank_facilities(records)] == ["F3", "F2", "F1"]

    def test_identical_keys_fall_back_to_input_order(self):
        records = [make_facility(fid) for fid in ("F1", "F2", "F3")]
        assert allocate(records, 2).allocated_ids == ["F1", "F2"]

    def test_partially_operational_sits_between(self):
        records = [
            make_facility("G", "High", "Grounded"),
            make_facility("P", "High", "Partially Operational"),
            make_facility("O", "High", "Operational"),
        ]
        assert [r.facility_id for r in rank_facilities(records)] == ["O", "P", "G"]

    def test_all_four_tiers_ordered(self):
        records = [
            make_facility("L", "Low"),
            make_facility("M", "Medium"),
            make_facility("H", "High"),
            make_facility("C", "Critical"),
        ]
        assert [r.facility_id for r in rank_facilities(records)] == ["C", "H", "M", "L"]

    def test_deployed_count_does_not_affect_rank(self):
        records = [
            make_facility("F1", deployed=12),
            make_facility("F2", deployed=0),
        ]
        assert allocate(records, 1).allocated_ids == ["F1"]

    def test_rank_key_shape(self):
        key = rank_key(make_facility("F1", "Critical", "Grounded", 700, "Poor"), 4)
        assert key == (0, 2, -700, 2, 4)


class TestAllocate:
    def test_allocation_follows_rank_order(self):
        records = [
            make_facility("F1", "Low"),
            make_facility("F2", "Critical"),
            make_facility("F3", "Medium"),
        ]
        result = allocate(records, 2)
        assert result.allocated_ids == ["F2", "F3"]
        assert result.strategy == "deterministic"
        assert result.used_fallback is False

    def test_never_exceeds_budget(self):
        records = [make_facility(f"F{i}") for i in range(10)]
        for budget in range(0, 12):
            assert len(allocate(records, budget).allocated_ids) == min(budget, 10)

    def test_one_ambulance_per_facility(self):
        records = [make_facility("F1"), make_facility("F2")]
        result = allocate(records, 5)
        assert sorted(result.allocated_ids) == ["F1", "F2"]
        assert len(set(result.allocated_ids)) == len(result.allocated_ids)

    def test_larger_budget_extends_smaller_allocation(self):
        records = [
            make_facility("F1", "Medium", pop=3000),
            make_facility("F2", "Critical", "Grounded"),
            make_facility("F3", "High", pop=90000),
            make_facility("F4", "High", "Partially Operational"),
            make_facility("F5", "Low"),
        ]
        previous = []
        for budget in range(0, 6):
            current = allocate(records, budget).allocated_ids
            assert current[:len(previous)] == previous
            previous = current

    def test_deterministic_across_calls(self):
        records = [make_facility(f"F{i}", tier, pop=1000 * i) for i, tier in
                   enumerate(["Low", "High", "Critical", "High", "Medium", "Critical"])]
        first = allocate(records, 3)
        second = allocate(records, 3)
        assert first.allocated_ids == second.allocated_ids
        assert first.narrative == second.narrative

    def test_does_not_mutate_input(self):
        records = [make_facility("F1", "Low"), make_facility("F2", "Critical")]
        snapshot = list(records)
        allocate(records, 1)
        assert records == snapshot

    def test_zero_budget_allocates_nothing(self):
        result = allocate([make_facility("F1")], 0)
        assert result.allocated_ids == []
        assert "Allocation complete. 0 facilities received ambulances." in result.narrative_lines
        assert "- No ambulances available; no facility could be served." in result.narrative_lines

    def test_empty_records(self):
        result = allocate([], 5)
        assert result.allocated_ids == []
        assert "No facilities to serve" in result.narrative
        assert "Starting with 5 ambulances available for allocation." in result.narrative_lines

    def test_accepts_tuple_of_records(self):
        records = (make_facility("F1"), make_facility("F2", "Critical"))
        assert allocate(records, 1).allocated_ids == ["F2"]


class TestNarrative:
    def test_header_and_completion(self):
        result = allocate([make_facility("F1"), make_facility("F2")], 1)
        lines = result.narrative_lines
        assert lines[0] == "Ambulance Allocation System"
        assert "Starting with 1 ambulances available for allocation." in lines
        assert "Allocation process:" in lines
        assert "Allocation complete. 1 facilities received ambulances." in lines
        assert "1 facilities remain unserved until more ambulances are available." in lines

    def test_assignment_block(self):
        record = make_facility("EC001", "Critical", "Grounded", 50000, "Poor", name="Alice Hospital")
        lines = allocate([record], 1).narrative_lines
        start = lines.index("- Allocated 1 ambulance to Alice Hospital (ID: EC001):")
        assert lines[start + 1:start + 6] == [
            "  * Priority: Critical",
            "  * Status: Grounded",
            "  * Population: 50000",
            "  * Road Condition: Poor",
            "  * Remaining ambulances: 0",
        ]

    def test_remaining_counts_down_from_full_budget(self):
        records = [make_facility("F1"), make_facility("F2")]
        result = allocate(records, 4)
        remaining = [line for line in result.narrative_lines if "Remaining ambulances" in line]
        assert remaining == ["  * Remaining ambulances: 3", "  * Remaining ambulances: 2"]
        assert any("2 will be held in reserve" in line for line in result.narrative_lines)

    def test_narrative_joins_lines(self):
        result = allocate([make_facility("F1")], 1)
        assert result.narrative == "\n".join(result.narrative_lines)

    def test_to_response_shape(self):
        body = allocate([make_facility("F1")], 1).to_response()
        assert body["allocations"] == ["F1"]
        assert body["strategy"] == "deterministic"
        assert body["usedFallback"] is False
        assert body["reasoning"].startswith("Ambulance Allocation System")


class TestValidation:
    def test_negative_budget_rejected(self):
        with pytest.raises(InvalidInputError) as exc:
            allocate([make_facility("F1")], -1)
        assert "cannot be negative" in exc.value.message

    @pytest.mark.parametrize("value", [None, "3", 2.5, True])
    def test_non_integer_budget_rejected(self, value):
        with pytest.raises(InvalidInputError):
            validate_available_ambulances(value)

    def test_budget_returned(self):
        assert validate_allocation_request([make_facility("F1")], 3) == 3

    def test_duplicate_ids_rejected(self):
        with pytest.raises(InvalidInputError) as exc:
            allocate([make_facility("F1"), make_facility("F1")], 1)
        assert exc.value.message == "Duplicate facility IDs"

    def test_blank_id_rejected(self):
        with pytest.raises(InvalidInputError) as exc:
            allocate([make_facility("  ")], 1)
        assert exc.value.message == "Missing required fields in facility data"
        assert "facilityId" in exc.value.details

    def test_unknown_tier_rejected(self):
        with pytest.raises(InvalidInputError) as exc:
            allocate([make_facility("F1", tier="Urgent")], 1)
        assert "priorityTier" in exc.value.details

    def test_unknown_status_rejected(self):
        with pytest.raises(InvalidInputError):
            allocate([make_facility("F1", status="Closed")], 1)

    def test_negative_population_rejected(self):
        with pytest.raises(InvalidInputError) as exc:
            allocate([make_facility("F1", pop=-5)], 1)
        assert "populationServed" in exc.value.details

    def test_non_record_rejected(self):
        with pytest.raises(InvalidInputError):
            allocate([{"facilityId": "F1"}], 1)

    def test_non_sequence_rejected(self):
        with pytest.raises(InvalidInputError) as exc:
            allocate({"F1": make_facility("F1")}, 1)
        assert "must be an array" in exc.value.message

    def test_invalid_record_fails_before_allocation(self):
        records = [make_facility("F1", "Critical"), make_facility("F2", tier="Unknown")]
        with pytest.raises(InvalidInputError):
            allocate(records, 1)

    def test_error_response_body(self):
        with pytest.raises(InvalidInputError) as exc:
            allocate([make_facility("F1"), make_facility("F1")], 1)
        body = exc.value.to_response()
        assert body["error"] == "Duplicate facility IDs"
        assert "F1" in body["details"]
