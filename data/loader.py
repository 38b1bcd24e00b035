"""Request and file parsing — JSON payloads, CSV/XLSX sheets into FacilityRecord lists."""

import io
import json
import zipfile
from typing import List, Optional, Sequence, Tuple

import pandas as pd
from openpyxl.utils.exceptions import InvalidFileException

from models.facility import FacilityRecord, Booking
from engine.allocation_engine import validate_allocation_request
from engine.errors import InvalidInputError
from data.validator import canonical_value, cell_text, validate_facilities_df
from config.defaults import (
    PRIORITY_TIERS, OPERATIONAL_STATUSES, ROAD_CONDITIONS, FACILITY_COLUMNS,
    BOOKING_DEFAULT_STATUS, BOOKING_DEFAULT_POPULATION, BOOKING_DEFAULT_ROAD,
    BOOKING_DEFAULT_DEPLOYED, BOOKING_SERVED_STATUSES, BOOKING_STATUSES,
    TABULAR_EXTENSIONS, JSON_EXTENSIONS,
)

# Accepted spellings per field, first match wins
FACILITY_FIELD_ALIASES = {
    "facility_id": ("facilityId", "id"),
    "facility_name": ("facilityName", "name"),
    "district": ("district",),
    "ambulances_deployed": ("ambulancesDeployed", "ambulancesAlreadyDeployed"),
    "operational_status": ("operationalStatus",),
    "population_served": ("populationServed",),
    "road_condition": ("roadCondition",),
    "priority_tier": ("priorityTier",),
}

_MISSING = object()


def _pick(raw: dict, keys: Sequence[str]):
    for key in keys:
        value = raw.get(key)
        if value is not None:
            return value
    return _MISSING


def _label(raw: dict, index: int, shape: str) -> str:
    raw_id = _pick(raw, ("facilityId", "id"))
    if raw_id is _MISSING:
        return f"{shape} {index}"
    return f"{shape} {index} (ID: {raw_id})"


def _text(value, field_name: str, label: str) -> str:
    if value is _MISSING:
        raise InvalidInputError("Missing required fields in facility data", f"{label}: '{field_name}' is required")
    if isinstance(value, bool) or not isinstance(value, (str, int, float)):
        raise InvalidInputError("Invalid facility record", f"{label}: '{field_name}' must be text, got {value!r}")
    text = cell_text(value)
    if not text:
        raise InvalidInputError("Missing required fields in facility data", f"{label}: '{field_name}' is required")
    return text


def _count(value, field_name: str, label: str) -> int:
    """Whole number from an int, an integral float or a numeric string."""
    if value is _MISSING:
        raise InvalidInputError("Missing required fields in facility data", f"{label}: '{field_name}' is required")
    if isinstance(value, bool):
        raise InvalidInputError("Invalid facility record", f"{label}: '{field_name}' must be a number, got {value!r}")
    if isinstance(value, str):
        try:
            value = float(value.strip())
        except ValueError:
            raise InvalidInputError(
                "Invalid facility record", f"{label}: '{field_name}' must be a number, got {value!r}"
            )
    if isinstance(value, float):
        if not value.is_integer():
            raise InvalidInputError(
                "Invalid facility record", f"{label}: '{field_name}' must be a whole number, got {value!r}"
            )
        value = int(value)
    if not isinstance(value, int):
        raise InvalidInputError("Invalid facility record", f"{label}: '{field_name}' must be a number, got {value!r}")
    return value


def _enum(value, choices: Sequence[str], field_name: str, label: str) -> str:
    if value is _MISSING:
        raise InvalidInputError("Missing required fields in facility data", f"{label}: '{field_name}' is required")
    canonical = canonical_value(value, choices)
    if canonical is None:
        raise InvalidInputError(
            "Invalid facility record",
            f"{label}: '{field_name}' has invalid value {value!r}; expected one of {', '.join(choices)}",
        )
    return canonical


def normalize_facility(raw: dict, index: int) -> FacilityRecord:
    """Facility-shaped JSON object into a FacilityRecord."""
    if not isinstance(raw, dict):
        raise InvalidInputError("Invalid facility record", f"facility {index} must be an object")
    label = _label(raw, index, "facility")
    a = FACILITY_FIELD_ALIASES
    return FacilityRecord(
        facility_id=_text(_pick(raw, a["facility_id"]), "facilityId", label),
        facility_name=_text(_pick(raw, a["facility_name"]), "facilityName", label),
        district=_text(_pick(raw, a["district"]), "district", label),
        ambulances_deployed=_count(_pick(raw, a["ambulances_deployed"]), "ambulancesDeployed", label),
        operational_status=_enum(_pick(raw, a["operational_status"]), OPERATIONAL_STATUSES, "operationalStatus", label),
        population_served=_count(_pick(raw, a["population_served"]), "populationServed", label),
        road_condition=_enum(_pick(raw, a["road_condition"]), ROAD_CONDITIONS, "roadCondition", label),
        priority_tier=_enum(_pick(raw, a["priority_tier"]), PRIORITY_TIERS, "priorityTier", label),
    )


def booking_to_record(booking: Booking) -> FacilityRecord:
    """Rank a booking as a facility. Booking lifecycle statuses carry no operational meaning."""
    status = canonical_value(booking.status, OPERATIONAL_STATUSES) or BOOKING_DEFAULT_STATUS
    return FacilityRecord(
        facility_id=booking.booking_id,
        facility_name=booking.patient_name,
        district=booking.location,
        ambulances_deployed=BOOKING_DEFAULT_DEPLOYED,
        operational_status=status,
        population_served=BOOKING_DEFAULT_POPULATION,
        road_condition=BOOKING_DEFAULT_ROAD,
        priority_tier=booking.priority,
    )


def normalize_booking(raw: dict, index: int) -> FacilityRecord:
    """Booking-shaped JSON object into a FacilityRecord.

    ``priority`` keeps all four tiers. ``status`` is read as an operational
    status when it names one; Pending maps to the booking default, while
    Allocated and Completed bookings are rejected as already served.
    """
    if not isinstance(raw, dict):
        raise InvalidInputError("Invalid booking record", f"booking {index} must be an object")
    label = _label(raw, index, "booking")

    status = raw.get("status") or "Pending"
    served = canonical_value(status, BOOKING_SERVED_STATUSES)
    if served:
        raise InvalidInputError("Booking already served", f"{label}: status is {served}")
    if canonical_value(status, BOOKING_STATUSES) is None:
        status = _enum(status, OPERATIONAL_STATUSES, "status", label)

    booking = Booking(
        booking_id=_text(_pick(raw, ("id",)), "id", label),
        patient_name=_text(_pick(raw, ("patientName", "name")), "patientName", label),
        location=_text(_pick(raw, ("location", "district")), "location", label),
        symptoms=str(raw.get("symptoms") or ""),
        timestamp=str(raw.get("timestamp") or ""),
        priority=_enum(_pick(raw, ("priority", "priorityTier")), PRIORITY_TIERS, "priority", label),
        status=status,
    )
    return booking_to_record(booking)


def parse_available_ambulances(value) -> int:
    """Ambulance count from a JSON number or numeric string. Sign is checked by the engine."""
    if value is None or isinstance(value, bool):
        raise InvalidInputError(
            "Invalid request format: availableAmbulances must be a number", f"got {value!r}"
        )
    if isinstance(value, int):
        return value
    if isinstance(value, str):
        try:
            return int(value.strip())
        except ValueError:
            pass
    try:
        number = float(value.strip()) if isinstance(value, str) else float(value)
    except (TypeError, ValueError, OverflowError):
        raise InvalidInputError(
            "Invalid request format: availableAmbulances must be a number", f"got {value!r}"
        )
    if not number.is_integer():
        raise InvalidInputError(
            "Invalid request format: availableAmbulances must be a whole number", f"got {value!r}"
        )
    return int(number)


def parse_allocation_payload(payload) -> Tuple[List[FacilityRecord], int]:
    """Normalize ``{facilities|bookings, availableAmbulances}`` into records and a budget."""
    if not isinstance(payload, dict):
        raise InvalidInputError("Invalid request format: body must be a JSON object")

    if payload.get("facilities") is not None:
        items, normalize, key = payload["facilities"], normalize_facility, "facilities"
    elif payload.get("bookings") is not None:
        items, normalize, key = payload["bookings"], normalize_booking, "bookings"
    else:
        raise InvalidInputError("Invalid request format: facilities must be an array", "no 'facilities' or 'bookings' field")

    if not isinstance(items, list):
        raise InvalidInputError(f"Invalid request format: {key} must be an array", f"got {type(items).__name__}")

    available = parse_available_ambulances(payload.get("availableAmbulances"))
    records = [normalize(item, i) for i, item in enumerate(items)]
    return records, available


def parse_facility_json(payload) -> Tuple[List[FacilityRecord], Optional[int]]:
    """JSON upload: ``{"facilities": [...], "availableAmbulances": n}`` or a bare list.

    The snapshot is checked the same way an allocation request is, so negative
    counts and duplicate ids are rejected at load time.
    """
    if isinstance(payload, list):
        items, available = payload, None
    elif isinstance(payload, dict) and isinstance(payload.get("facilities"), list):
        items, available = payload["facilities"], payload.get("availableAmbulances")
        if available is not None:
            available = parse_available_ambulances(available)
    else:
        raise InvalidInputError("Invalid data format: 'facilities' should be an array")
    records = [normalize_facility(item, i) for i, item in enumerate(items)]
    check_facility_snapshot(records, available)
    return records, available


def check_facility_snapshot(records: List[FacilityRecord], available: Optional[int]) -> None:
    """Reject a loaded snapshot the allocation engine would refuse."""
    validate_allocation_request(records, available if available is not None else 0)


def parse_facilities_df(df: pd.DataFrame) -> List[FacilityRecord]:
    """Convert a validated facilities DataFrame into FacilityRecord objects."""
    has_deployed = "Ambulances Deployed" in df.columns
    records = []
    for _, row in df.iterrows():
        deployed = 0
        if has_deployed and pd.notna(row["Ambulances Deployed"]):
            deployed = int(float(row["Ambulances Deployed"]))
        records.append(FacilityRecord(
            facility_id=cell_text(row["Facility ID"]),
            facility_name=cell_text(row["Facility Name"]),
            district=cell_text(row["District"]),
            ambulances_deployed=deployed,
            operational_status=canonical_value(str(row["Operational Status"]), OPERATIONAL_STATUSES),
            population_served=int(float(row["Population Served"])),
            road_condition=canonical_value(str(row["Road Condition"]), ROAD_CONDITIONS),
            priority_tier=canonical_value(str(row["Priority Tier"]), PRIORITY_TIERS),
        ))
    return records


def _extension(name: str) -> str:
    name = name.lower()
    return name[name.rfind("."):] if "." in name else ""


def load_file(uploaded_file, filename: Optional[str] = None) -> pd.DataFrame:
    """Load an uploaded file (CSV or XLSX) into a DataFrame. XLSX reads the first sheet."""
    name = (filename or uploaded_file.name).lower()
    if name.endswith(".csv"):
        try:
            return pd.read_csv(uploaded_file)
        except (pd.errors.EmptyDataError, pd.errors.ParserError, UnicodeDecodeError) as e:
            raise ValueError(f"Failed to read CSV file: {e}") from e
    elif name.endswith(".xlsx") or name.endswith(".xls"):
        try:
            return pd.read_excel(uploaded_file, sheet_name=0, engine="openpyxl")
        except (zipfile.BadZipFile, InvalidFileException, KeyError) as e:
            raise ValueError(f"Failed to read Excel file: {e}") from e
    else:
        raise ValueError(f"Unsupported file format: {name}. Use CSV or XLSX.")


def load_json_file(uploaded_file):
    """Parse an uploaded .json/.txt file."""
    content = uploaded_file.read()
    try:
        return json.loads(content)
    except ValueError as e:
        raise ValueError(f"Failed to parse JSON data: {e}")


def load_facility_upload(uploaded_file, filename: Optional[str] = None) -> Tuple[List[FacilityRecord], Optional[int], List[str]]:
    """Any supported upload into (records, ambulance count if given, warnings).

    Tabular files go through ``validate_facilities_df`` and raise
    InvalidInputError with every problem found; JSON stops at the first bad record.
    """
    name = filename or uploaded_file.name
    ext = _extension(name)
    if ext in JSON_EXTENSIONS:
        records, available = parse_facility_json(load_json_file(uploaded_file))
        return records, available, []
    if ext in TABULAR_EXTENSIONS:
        df = load_file(uploaded_file, filename=name)
        result = validate_facilities_df(df)
        if not result.is_valid:
            raise InvalidInputError("Invalid facility file", " ".join(result.errors))
        records = parse_facilities_df(df)
        check_facility_snapshot(records, None)
        return records, None, result.warnings
    raise ValueError(
        f"Unsupported file format: {name}. Please upload .json, .txt, .csv, .xlsx, or .xls files"
    )


def facilities_to_df(records: List[FacilityRecord]) -> pd.DataFrame:
    rows = [{
        "Facility ID": r.facility_id,
        "Facility Name": r.facility_name,
        "District": r.district,
        "Ambulances Deployed": r.ambulances_deployed,
        "Operational Status": r.operational_status,
        "Population Served": r.population_served,
        "Road Condition": r.road_condition,
        "Priority Tier": r.priority_tier,
    } for r in records]
    return pd.DataFrame(rows, columns=FACILITY_COLUMNS)


def export_facilities_csv(records: List[FacilityRecord]) -> bytes:
    return facilities_to_df(records).to_csv(index=False).encode("utf-8")


def export_facilities_excel(records: List[FacilityRecord], sheet_name: str = "Facilities") -> bytes:
    return dataframe_to_excel(facilities_to_df(records), sheet_name)


def dataframe_to_excel(df: pd.DataFrame, sheet_name: str) -> bytes:
    buffer = io.BytesIO()
    with pd.ExcelWriter(buffer, engine="openpyxl") as writer:
        df.to_excel(writer, sheet_name=sheet_name, index=False)
    return buffer.getvalue()
