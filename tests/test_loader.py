"""Tests for payload normalization and file loading."""

import sys
import os
sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

import io
import json

import pandas as pd
import pytest

from data.loader import (
    export_facilities_csv,
    export_facilities_excel,
    facilities_to_df,
    load_facility_upload,
    normalize_booking,
    normalize_facility,
    parse_allocation_payload,
    parse_available_ambulances,
    parse_facilities_df,
    parse_facility_json,
)
from data.sample_data import generate_facilities_df, generate_demo_payload
from engine.errors import InvalidInputError


def raw_facility(**overrides):
    raw = {
        "facilityId": "EC001",
        "facilityName": "Alice Hospital",
        "district": "Amathole",
        "ambulancesDeployed": 1,
        "operationalStatus": "Grounded",
        "populationServed": 50000,
        "roadCondition": "Poor",
        "priorityTier": "Critical",
    }
    raw.update(overrides)
    return raw


def upload(content, filename):
    if isinstance(content, str):
        content = content.encode("utf-8")
    return load_facility_upload(io.BytesIO(content), filename=filename)


class TestNormalizeFacility:
    def test_wire_fields(self):
        record = normalize_facility(raw_facility(), 0)
        assert record.facility_id == "EC001"
        assert record.priority_tier == "Critical"
        assert record.to_dict() == raw_facility()

    def test_id_alias(self):
        raw = raw_facility()
        raw["id"] = raw.pop("facilityId")
        assert normalize_facility(raw, 0).facility_id == "EC001"

    def test_enum_spellings_canonicalized(self):
        record = normalize_facility(raw_facility(
            operationalStatus="partially_operational", roadCondition="GOOD", priorityTier="high",
        ), 0)
        assert record.operational_status == "Partially Operational"
        assert record.road_condition == "Good"
        assert record.priority_tier == "High"

    def test_numeric_strings_accepted(self):
        record = normalize_facility(raw_facility(populationServed="2500", ambulancesDeployed=3.0), 0)
        assert record.population_served == 2500
        assert record.ambulances_deployed == 3

    def test_missing_field(self):
        raw = raw_facility()
        del raw["district"]
        with pytest.raises(InvalidInputError) as exc:
            normalize_facility(raw, 2)
        assert exc.value.message == "Missing required fields in facility data"
        assert "facility 2 (ID: EC001)" in exc.value.details

    def test_blank_name(self):
        with pytest.raises(InvalidInputError):
            normalize_facility(raw_facility(facilityName="   "), 0)

    def test_invalid_tier(self):
        with pytest.raises(InvalidInputError) as exc:
            normalize_facility(raw_facility(priorityTier="Urgent"), 0)
        assert "priorityTier" in exc.value.details

    @pytest.mark.parametrize("value", ["many", 12.5, True, [1]])
    def test_invalid_population(self, value):
        with pytest.raises(InvalidInputError):
            normalize_facility(raw_facility(populationServed=value), 0)

    def test_not_an_object(self):
        with pytest.raises(InvalidInputError):
            normalize_facility("EC001", 0)


class TestNormalizeBooking:
    def test_pending_booking_uses_defaults(self):
        record = normalize_booking({
            "id": "1", "patientName": "John Doe", "location": "123 Emergency St",
            "symptoms": "Chest pain", "priority": "Critical", "status": "Pending",
        }, 0)
        assert record.facility_id == "1"
        assert record.facility_name == "John Doe"
        assert record.district == "123 Emergency St"
        assert record.priority_tier == "Critical"
        assert record.operational_status == "Operational"
        assert record.population_served == 1000
        assert record.road_condition == "Moderate"
        assert record.ambulances_deployed == 0

    def test_all_four_tiers_kept(self):
        tiers = [
            normalize_booking({"id": str(i), "patientName": "P", "location": "L", "priority": tier}, i).priority_tier
            for i, tier in enumerate(["Critical", "High", "Medium", "Low"])
        ]
        assert tiers == ["Critical", "High", "Medium", "Low"]

    def test_operational_status_honoured(self):
        record = normalize_booking({
            "id": "2", "patientName": "P", "location": "L", "priority": "High", "status": "Grounded",
        }, 0)
        assert record.operational_status == "Grounded"

    @pytest.mark.parametrize("status", ["Allocated", "completed"])
    def test_served_booking_rejected(self, status):
        with pytest.raises(InvalidInputError) as exc:
            normalize_booking({
                "id": "3", "patientName": "P", "location": "L", "priority": "Low", "status": status,
            }, 0)
        assert exc.value.message == "Booking already served"

    def test_unknown_status_rejected(self):
        with pytest.raises(InvalidInputError):
            normalize_booking({
                "id": "3", "patientName": "P", "location": "L", "priority": "Low", "status": "Lost",
            }, 0)


class TestParseAllocationPayload:
    def test_facilities_payload(self):
        records, available = parse_allocation_payload({"facilities": [raw_facility()], "availableAmbulances": 2})
        assert [r.facility_id for r in records] == ["EC001"]
        assert available == 2

    def test_bookings_payload(self):
        records, available = parse_allocation_payload({
            "bookings": [{"id": "7", "patientName": "P", "location": "L", "priority": "Medium"}],
            "availableAmbulances": "1",
        })
        assert records[0].facility_id == "7"
        assert available == 1

    def test_facilities_preferred_over_bookings(self):
        records, _ = parse_allocation_payload({
            "facilities": [raw_facility()],
            "bookings": [{"id": "7", "patientName": "P", "location": "L", "priority": "Medium"}],
            "availableAmbulances": 1,
        })
        assert records[0].facility_id == "EC001"

    def test_demo_payload_is_valid(self):
        records, available = parse_allocation_payload(generate_demo_payload())
        assert len(records) == 2
        assert available == 3

    def test_missing_collection(self):
        with pytest.raises(InvalidInputError) as exc:
            parse_allocation_payload({"availableAmbulances": 1})
        assert "must be an array" in exc.value.message

    def test_collection_not_a_list(self):
        with pytest.raises(InvalidInputError):
            parse_allocation_payload({"facilities": "EC001", "availableAmbulances": 1})

    def test_body_not_object(self):
        with pytest.raises(InvalidInputError):
            parse_allocation_payload([raw_facility()])

    def test_missing_budget(self):
        with pytest.raises(InvalidInputError) as exc:
            parse_allocation_payload({"facilities": []})
        assert "availableAmbulances" in exc.value.message


class TestParseAvailableAmbulances:
    @pytest.mark.parametrize("value,expected", [(3, 3), (3.0, 3), ("4", 4), (" 0 ", 0), (-1, -1)])
    def test_accepted(self, value, expected):
        assert parse_available_ambulances(value) == expected

    @pytest.mark.parametrize("value", [None, True, "three", 2.5, [], ""])
    def test_rejected(self, value):
        with pytest.raises(InvalidInputError):
            parse_available_ambulances(value)

    def test_large_integer_kept_exact(self):
        big = 10 ** 400
        assert parse_available_ambulances(big) == big
        assert parse_available_ambulances(str(big)) == big

    @pytest.mark.parametrize("value", ["1e400", float("inf"), float("nan")])
    def test_out_of_range_rejected(self, value):
        with pytest.raises(InvalidInputError):
            parse_available_ambulances(value)


class TestParseFacilityJson:
    def test_object_with_budget(self):
        records, available = parse_facility_json({"facilities": [raw_facility()], "availableAmbulances": 4})
        assert len(records) == 1
        assert available == 4

    def test_bare_list(self):
        records, available = parse_facility_json([raw_facility()])
        assert len(records) == 1
        assert available is None

    def test_missing_facilities(self):
        with pytest.raises(InvalidInputError):
            parse_facility_json({"availableAmbulances": 4})

    def test_negative_budget_rejected(self):
        with pytest.raises(InvalidInputError) as exc:
            parse_facility_json({"facilities": [raw_facility()], "availableAmbulances": -1})
        assert "cannot be negative" in exc.value.message

    def test_duplicate_ids_rejected(self):
        with pytest.raises(InvalidInputError) as exc:
            parse_facility_json([raw_facility(), raw_facility()])
        assert exc.value.message == "Duplicate facility IDs"


class TestDataFrames:
    def test_parse_demo_snapshot(self):
        records = parse_facilities_df(generate_facilities_df())
        assert len(records) == 8
        assert records[0].facility_id == "EC001"
        assert records[2].operational_status == "Partially Operational"

    def test_round_trip_through_dataframe(self):
        records = parse_facilities_df(generate_facilities_df())
        assert parse_facilities_df(facilities_to_df(records)) == records

    def test_missing_deployed_column_defaults_to_zero(self):
        df = generate_facilities_df().drop(columns=["Ambulances Deployed"])
        assert all(r.ambulances_deployed == 0 for r in parse_facilities_df(df))


class TestLoadFacilityUpload:
    def test_json_upload(self):
        content = json.dumps({"facilities": [raw_facility()], "availableAmbulances": 2})
        records, available, warnings = upload(content, "snapshot.json")
        assert records[0].facility_id == "EC001"
        assert available == 2
        assert warnings == []

    def test_txt_upload_treated_as_json(self):
        records, _, _ = upload(json.dumps([raw_facility()]), "snapshot.txt")
        assert len(records) == 1

    def test_bad_json(self):
        with pytest.raises(ValueError, match="Failed to parse JSON data"):
            upload("{not json", "snapshot.json")

    def test_csv_upload(self):
        content = export_facilities_csv(parse_facilities_df(generate_facilities_df()))
        records, available, warnings = upload(content, "facilities.csv")
        assert len(records) == 8
        assert available is None
        assert warnings == []

    def test_csv_numeric_ids_kept_as_text(self):
        content = (
            "Facility ID,Facility Name,District,Ambulances Deployed,Operational Status,"
            "Population Served,Road Condition,Priority Tier\n"
            "101,Clinic A,Amathole,2,Operational,1200,Good,High\n"
        )
        records, _, _ = upload(content, "facilities.csv")
        assert records[0].facility_id == "101"

    def test_csv_without_deployed_column_warns(self):
        content = (
            "Facility ID,Facility Name,District,Operational Status,"
            "Population Served,Road Condition,Priority Tier\n"
            "F1,Clinic A,Amathole,Operational,1200,Good,High\n"
        )
        records, _, warnings = upload(content, "facilities.csv")
        assert records[0].ambulances_deployed == 0
        assert len(warnings) == 1

    def test_invalid_csv_reports_all_errors(self):
        content = (
            "Facility ID,Facility Name,District,Ambulances Deployed,Operational Status,"
            "Population Served,Road Condition,Priority Tier\n"
            "F1,Clinic A,Amathole,2,Closed,1200,Good,High\n"
            "F2,Clinic B,Amathole,2,Operational,-5,Good,Urgent\n"
        )
        with pytest.raises(InvalidInputError) as exc:
            upload(content, "facilities.csv")
        assert exc.value.message == "Invalid facility file"
        assert "Operational Status" in exc.value.details
        assert "Priority Tier" in exc.value.details
        assert "cannot be negative" in exc.value.details

    def test_excel_upload(self):
        content = export_facilities_excel(parse_facilities_df(generate_facilities_df()))
        records, _, _ = upload(content, "facilities.xlsx")
        assert [r.facility_id for r in records][:2] == ["EC001", "EC002"]

    def test_corrupt_excel(self):
        with pytest.raises(ValueError, match="Failed to read Excel file"):
            upload(b"not a workbook", "facilities.xlsx")

    def test_empty_csv(self):
        with pytest.raises(ValueError, match="Failed to read CSV file"):
            upload(b"", "facilities.csv")

    def test_json_upload_with_negative_budget(self):
        content = json.dumps({"facilities": [raw_facility()], "availableAmbulances": -3})
        with pytest.raises(InvalidInputError):
            upload(content, "snapshot.json")

    def test_unsupported_extension(self):
        with pytest.raises(ValueError, match="Unsupported file format"):
            upload("a,b", "facilities.pdf")


class TestExports:
    def test_csv_has_upload_columns(self):
        records = parse_facilities_df(generate_facilities_df())
        df = pd.read_csv(io.BytesIO(export_facilities_csv(records)))
        assert list(df.columns)[0] == "Facility ID"
        assert len(df) == 8
