"""Default configuration constants for the EMS Dispatch Allocation Platform."""

# Allocation strategy: "deterministic" (rank + greedy) or "language_model" (external LLM)
ALLOCATION_STRATEGY = "deterministic"
ALLOCATION_STRATEGIES = ["deterministic", "language_model"]

# Serve the deterministic result when the language model is unavailable
LLM_FALLBACK_TO_DETERMINISTIC = False

# Language model call
OPENAI_MODEL = "gpt-4-turbo"
LLM_TIMEOUT_SECONDS = 30.0
LLM_MAX_RETRIES = 2
LLM_TEMPERATURE = 0.2

# Ambulances assumed available when the caller gives no count
DEFAULT_AVAILABLE_AMBULANCES = 5

# Canonical enum values (display / wire form)
PRIORITY_TIERS = ("Critical", "High", "Medium", "Low")
OPERATIONAL_STATUSES = ("Operational", "Partially Operational", "Grounded")
ROAD_CONDITIONS = ("Good", "Moderate", "Poor")

# Ranking order, lower is served first
PRIORITY_ORDER = {"Critical": 0, "High": 1, "Medium": 2, "Low": 3}
OPERATIONAL_ORDER = {"Operational": 0, "Partially Operational": 1, "Grounded": 2}
ROAD_ORDER = {"Good": 0, "Moderate": 1, "Poor": 2}

# Booking lifecycle
BOOKING_STATUSES = ("Pending", "Allocated", "Completed")
BOOKING_SERVED_STATUSES = ("Allocated", "Completed")

# Values sent for bookings, which carry no facility attributes
BOOKING_DEFAULT_STATUS = "Operational"
BOOKING_DEFAULT_POPULATION = 1000
BOOKING_DEFAULT_ROAD = "Moderate"
BOOKING_DEFAULT_DEPLOYED = 0

# Fleet
AMBULANCE_STATUSES = ("Available", "En Route", "Maintenance")
LOW_BATTERY_THRESHOLD = 40

# Tabular upload columns
FACILITY_COLUMNS = [
    "Facility ID",
    "Facility Name",
    "District",
    "Ambulances Deployed",
    "Operational Status",
    "Population Served",
    "Road Condition",
    "Priority Tier",
]

# Upload formats
TABULAR_EXTENSIONS = (".csv", ".xlsx", ".xls")
JSON_EXTENSIONS = (".json", ".txt")

# Logging
LOG_LEVEL = "INFO"

# HTTP API
API_HOST = "127.0.0.1"
API_PORT = 8000

# Dashboard colours per tier / status
PRIORITY_COLORS = {
    "Critical": "#B71C1C",
    "High": "#E8734A",
    "Medium": "#F5C542",
    "Low": "#4CAF50",
}
STATUS_COLORS = {
    "Operational": "#4CAF50",
    "Partially Operational": "#F5C542",
    "Grounded": "#B71C1C",
}
