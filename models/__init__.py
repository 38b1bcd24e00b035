from models.facility import FacilityRecord, Booking
from models.ambulance import Ambulance
from models.allocation import AllocationResult
from models.audit import DispatchLogEntry
