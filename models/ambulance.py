from dataclasses import dataclass, field
from typing import List


@dataclass
class Ambulance:
    ambulance_id: int
    call_sign: str
    district: str
    latitude: float
    longitude: float
    status: str                   # "Available", "En Route", "Maintenance"
    battery_level: int            # Percent
    last_maintenance: str         # ISO date
    crew: List[str] = field(default_factory=list)
    contact: str = ""

    @property
    def is_available(self) -> bool:
        return self.status == "Available"
