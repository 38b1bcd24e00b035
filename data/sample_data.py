"""Demo datasets for the EMS dispatch dashboard (Eastern Cape facilities, bookings, fleet)."""

import os
import random
from datetime import datetime, timedelta
from typing import List

import pandas as pd

from models.facility import Booking
from models.ambulance import Ambulance
from data.loader import parse_facilities_df, dataframe_to_excel
from config.defaults import FACILITY_COLUMNS, DEFAULT_AVAILABLE_AMBULANCES


DEMO_FACILITIES = [
    {"Facility ID": "EC001", "Facility Name": "Alice Hospital",          "District": "Amathole",    "Ambulances Deployed": 1, "Operational Status": "Grounded",              "Population Served": 50000,  "Road Condition": "Poor",     "Priority Tier": "Critical"},
    {"Facility ID": "EC002", "Facility Name": "OR Tambo MOU",            "District": "OR Tambo",    "Ambulances Deployed": 7, "Operational Status": "Operational",           "Population Served": 200000, "Road Condition": "Moderate", "Priority Tier": "High"},
    {"Facility ID": "EC003", "Facility Name": "Mthatha Regional",        "District": "OR Tambo",    "Ambulances Deployed": 4, "Operational Status": "Partially Operational", "Population Served": 320000, "Road Condition": "Moderate", "Priority Tier": "Critical"},
    {"Facility ID": "EC004", "Facility Name": "Frere Hospital",          "District": "Buffalo City", "Ambulances Deployed": 9, "Operational Status": "Operational",          "Population Served": 410000, "Road Condition": "Good",     "Priority Tier": "High"},
    {"Facility ID": "EC005", "Facility Name": "Mount Ayliff Clinic",     "District": "Alfred Nzo",  "Ambulances Deployed": 0, "Operational Status": "Grounded",              "Population Served": 35000,  "Road Condition": "Poor",     "Priority Tier": "Medium"},
    {"Facility ID": "EC006", "Facility Name": "Queenstown Frontier",     "District": "Chris Hani",  "Ambulances Deployed": 3, "Operational Status": "Operational",           "Population Served": 150000, "Road Condition": "Good",     "Priority Tier": "Medium"},
    {"Facility ID": "EC007", "Facility Name": "Aliwal North CHC",        "District": "Joe Gqabi",   "Ambulances Deployed": 2, "Operational Status": "Partially Operational", "Population Served": 60000,  "Road Condition": "Moderate", "Priority Tier": "Low"},
    {"Facility ID": "EC008", "Facility Name": "Livingstone Hospital",    "District": "Nelson Mandela Bay", "Ambulances Deployed": 11, "Operational Status": "Operational",   "Population Served": 520000, "Road Condition": "Good",     "Priority Tier": "Low"},
]

DEMO_BOOKINGS = [
    ("1", "John Doe",     "123 Emergency St, City",  "Severe chest pain, difficulty breathing", "Critical"),
    ("2", "Jane Smith",   "456 Medical Ave, Town",   "Broken arm, conscious but in pain",       "Medium"),
    ("3", "Sipho Dlamini", "12 Nelson Rd, Mthatha",   "Unconscious after fall",                  "High"),
    ("4", "Ayesha Patel", "8 Oxford St, East London", "High fever, dehydration",                  "Low"),
]

DEMO_FLEET = [
    (1, "EC-AMB-001", "OR Tambo District",   -31.5892, 28.7845, "Available",   85, "2024-03-15", ["Dr. Sarah Smith", "John Doe"],        "+27 123 456 789"),
    (2, "EC-AMB-002", "Alfred Nzo District", -30.7433, 29.0379, "En Route",    65, "2024-03-10", ["Dr. Michael Brown", "Jane Wilson"],   "+27 123 456 790"),
    (3, "EC-AMB-003", "Chris Hani District", -31.9046, 27.5768, "Available",   92, "2024-03-18", ["Dr. Emily Johnson", "Robert Clark"],  "+27 123 456 791"),
    (4, "EC-AMB-004", "Joe Gqabi District",  -30.9858, 26.8764, "Maintenance", 30, "2024-03-01", ["Dr. David Wilson", "Mary Thompson"],  "+27 123 456 792"),
]


def generate_facilities_df() -> pd.DataFrame:
    """Demo facility snapshot: eight Eastern Cape facilities across all tiers and statuses."""
    return pd.DataFrame(DEMO_FACILITIES, columns=FACILITY_COLUMNS)


def generate_random_facilities_df(count: int = 25, seed: int = 42) -> pd.DataFrame:
    """Larger synthetic snapshot for exercising the dashboard."""
    rng = random.Random(seed)
    districts = ["Amathole", "OR Tambo", "Buffalo City", "Alfred Nzo", "Chris Hani", "Joe Gqabi", "Sarah Baartman"]
    rows = []
    for i in range(1, count + 1):
        district = rng.choice(districts)
        rows.append({
            "Facility ID": f"EC{100 + i:03d}",
            "Facility Name": f"{district} Facility {i}",
            "District": district,
            "Ambulances Deployed": rng.randint(0, 8),
            "Operational Status": rng.choice(["Operational", "Operational", "Partially Operational", "Grounded"]),
            "Population Served": rng.randrange(5000, 400000, 500),
            "Road Condition": rng.choice(["Good", "Moderate", "Poor"]),
            "Priority Tier": rng.choice(["Critical", "High", "High", "Medium", "Medium", "Low"]),
        })
    return pd.DataFrame(rows, columns=FACILITY_COLUMNS)


def generate_template_df() -> pd.DataFrame:
    """Single example row showing the expected upload columns."""
    return pd.DataFrame(DEMO_FACILITIES[:1], columns=FACILITY_COLUMNS)


def generate_demo_payload() -> dict:
    """Demo request body in the JSON upload / API format."""
    records = parse_facilities_df(generate_facilities_df())
    return {
        "facilities": [r.to_dict() for r in records[:2]],
        "availableAmbulances": 3,
    }


def generate_bookings(now: datetime = None) -> List[Booking]:
    """Pending bookings, a few minutes apart."""
    now = now or datetime.now()
    return [
        Booking(
            booking_id=booking_id,
            patient_name=name,
            location=location,
            symptoms=symptoms,
            timestamp=(now - timedelta(minutes=5 * i)).isoformat(timespec="seconds"),
            priority=priority,
        )
        for i, (booking_id, name, location, symptoms, priority) in enumerate(DEMO_BOOKINGS)
    ]


def generate_fleet() -> List[Ambulance]:
    return [
        Ambulance(
            ambulance_id=ambulance_id,
            call_sign=call_sign,
            district=district,
            latitude=lat,
            longitude=lng,
            status=status,
            battery_level=battery,
            last_maintenance=last_maintenance,
            crew=list(crew),
            contact=contact,
        )
        for ambulance_id, call_sign, district, lat, lng, status, battery, last_maintenance, crew, contact in DEMO_FLEET
    ]


def default_ambulance_count(fleet: List[Ambulance]) -> int:
    """Available units in the fleet, or the configured default when there is no fleet."""
    if not fleet:
        return DEFAULT_AVAILABLE_AMBULANCES
    return sum(1 for a in fleet if a.is_available)


def generate_sample_files(output_dir: str):
    """Write the demo snapshot and the upload template as CSV and XLSX."""
    os.makedirs(output_dir, exist_ok=True)
    generate_facilities_df().to_csv(os.path.join(output_dir, "facilities.csv"), index=False)
    with open(os.path.join(output_dir, "facilities.xlsx"), "wb") as f:
        f.write(dataframe_to_excel(generate_facilities_df(), "Facilities"))
    with open(os.path.join(output_dir, "facility_template.xlsx"), "wb") as f:
        f.write(dataframe_to_excel(generate_template_df(), "Template"))


if __name__ == "__main__":
    out = os.path.join(os.path.dirname(__file__), "..", "sample_files")
    generate_sample_files(out)
    print("Sample CSV and Excel files generated in sample_files/")
