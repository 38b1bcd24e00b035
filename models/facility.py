from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class FacilityRecord:
    facility_id: str
    facility_name: str
    district: str
    ambulances_deployed: int      # Informational only, not ranked on
    operational_status: str       # "Operational", "Partially Operational", "Grounded"
    population_served: int
    road_condition: str           # "Good", "Moderate", "Poor"
    priority_tier: str            # "Critical", "High", "Medium", "Low"

    def to_dict(self) -> dict:
        """Wire form used by the API and the JSON upload format."""
        return {
            "facilityId": self.facility_id,
            "facilityName": self.facility_name,
            "district": self.district,
            "ambulancesDeployed": self.ambulances_deployed,
            "operationalStatus": self.operational_status,
            "populationServed": self.population_served,
            "roadCondition": self.road_condition,
            "priorityTier": self.priority_tier,
        }


@dataclass
class Booking:
    booking_id: str
    patient_name: str
    location: str
    symptoms: str
    timestamp: str
    priority: str                 # Same four tiers as FacilityRecord.priority_tier
    status: str = "Pending"       # "Pending", "Allocated", "Completed"
    allocated_at: Optional[str] = None

    def to_dict(self) -> dict:
        return {
            "id": self.booking_id,
            "patientName": self.patient_name,
            "location": self.location,
            "symptoms": self.symptoms,
            "timestamp": self.timestamp,
            "priority": self.priority,
            "status": self.status,
        }
