"""Schema validation for uploaded facility files."""

import re
from dataclasses import dataclass, field
from typing import Iterable, List, Optional

import pandas as pd

from config.defaults import FACILITY_COLUMNS, PRIORITY_TIERS, OPERATIONAL_STATUSES, ROAD_CONDITIONS


@dataclass
class ValidationResult:
    is_valid: bool = True
    errors: List[str] = field(default_factory=list)
    warnings: List[str] = field(default_factory=list)


FACILITY_REQUIRED_COLUMNS = [c for c in FACILITY_COLUMNS if c != "Ambulances Deployed"]

COUNT_COLUMNS = ["Population Served", "Ambulances Deployed"]

ENUM_COLUMNS = {
    "Operational Status": OPERATIONAL_STATUSES,
    "Priority Tier": PRIORITY_TIERS,
    "Road Condition": ROAD_CONDITIONS,
}

FILE_LABEL = "Facilities"

# Rows listed per error before truncating
MAX_ROWS_REPORTED = 10


def _fold(value: str) -> str:
    return re.sub(r"[\s_\-]+", "", value).lower()


def canonical_value(value, choices: Iterable[str]) -> Optional[str]:
    """Map a loosely written enum value onto its canonical spelling.

    Case, spaces, hyphens and underscores are ignored, so "PartiallyOperational",
    "partially_operational" and "Partially Operational" all match. Returns None
    when nothing matches.
    """
    if not isinstance(value, str):
        return None
    folded = _fold(value)
    for choice in choices:
        if _fold(choice) == folded:
            return choice
    return None


def _rows(mask: pd.Series) -> str:
    rows = [str(i + 1) for i, flagged in enumerate(mask.tolist()) if flagged]
    if len(rows) > MAX_ROWS_REPORTED:
        return ", ".join(rows[:MAX_ROWS_REPORTED]) + f" (+{len(rows) - MAX_ROWS_REPORTED} more)"
    return ", ".join(rows)


def _is_blank(series: pd.Series) -> pd.Series:
    return series.isna() | series.astype(str).str.strip().eq("")


def _check_required_columns(df: pd.DataFrame, required: List[str], file_label: str) -> ValidationResult:
    result = ValidationResult()
    missing = [col for col in required if col not in df.columns]
    if missing:
        result.is_valid = False
        result.errors.append(f"{file_label}: Missing required columns: {', '.join(missing)}")
    if df.empty:
        result.is_valid = False
        result.errors.append(f"{file_label}: File contains no data rows.")
    return result


def validate_facilities_df(df: pd.DataFrame) -> ValidationResult:
    """Check a facility sheet before it is parsed into records."""
    result = _check_required_columns(df, FACILITY_REQUIRED_COLUMNS, FILE_LABEL)
    if not result.is_valid:
        return result

    if "Ambulances Deployed" not in df.columns:
        result.warnings.append(f"{FILE_LABEL}: 'Ambulances Deployed' column not found; assuming 0 for every facility.")

    # Blank required cells
    for col in FACILITY_REQUIRED_COLUMNS:
        blank = _is_blank(df[col])
        if blank.any():
            result.is_valid = False
            result.errors.append(f"{FILE_LABEL}: Missing '{col}' in row(s) {_rows(blank)}.")

    # Counts must be non-negative whole numbers
    for col in COUNT_COLUMNS:
        if col not in df.columns:
            continue
        present = ~_is_blank(df[col])
        numbers = pd.to_numeric(df[col], errors="coerce")
        not_numeric = present & numbers.isna()
        if not_numeric.any():
            result.is_valid = False
            result.errors.append(f"{FILE_LABEL}: '{col}' must be a number in row(s) {_rows(not_numeric)}.")
        negative = numbers < 0
        if negative.any():
            result.is_valid = False
            result.errors.append(f"{FILE_LABEL}: '{col}' cannot be negative (row(s) {_rows(negative)}).")
        fractional = numbers.notna() & (numbers % 1 != 0)
        if fractional.any():
            result.is_valid = False
            result.errors.append(f"{FILE_LABEL}: '{col}' must be a whole number in row(s) {_rows(fractional)}.")

    # Enumerated values
    for col, choices in ENUM_COLUMNS.items():
        present = ~_is_blank(df[col])
        unknown = present & df[col].map(lambda v: canonical_value(str(v), choices) is None).astype(bool)
        if unknown.any():
            result.is_valid = False
            bad = sorted({str(v) for v in df.loc[unknown, col]})
            result.errors.append(
                f"{FILE_LABEL}: Invalid '{col}' value(s) {bad} in row(s) {_rows(unknown)}. "
                f"Expected one of: {', '.join(choices)}."
            )

    # Duplicate IDs
    ids = df["Facility ID"].map(cell_text)
    dupes = ids.duplicated(keep=False) & ids.ne("")
    if dupes.any():
        result.is_valid = False
        result.errors.append(f"{FILE_LABEL}: Duplicate Facility IDs: {sorted(ids[dupes].unique().tolist())}")

    return result


def cell_text(value) -> str:
    """Spreadsheet cell as text; whole floats (Excel's 101.0) lose the trailing .0."""
    if value is None or (isinstance(value, float) and pd.isna(value)):
        return ""
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value).strip()
