from dataclasses import dataclass
from datetime import datetime


@dataclass
class DispatchLogEntry:
    timestamp: datetime
    action: str              # "allocate", "manual_allocate", "complete", "upload", "reset"
    target_id: str           # Facility or booking id, "all" for bulk actions
    strategy: str
    detail: str = ""
