"""Request and response bodies for the allocation API."""

from typing import Any, Dict, List, Optional

from pydantic import BaseModel


class AllocationRequest(BaseModel):
    """Either ``facilities`` or ``bookings``; field contents are checked by the loader."""

    facilities: Optional[List[Dict[str, Any]]] = None
    bookings: Optional[List[Dict[str, Any]]] = None
    availableAmbulances: Any = None


class AllocationResponse(BaseModel):
    allocations: List[str]
    reasoning: str
    strategy: str
    usedFallback: bool = False


class FacilityAnalytics(BaseModel):
    total_facilities: int
    priority_distribution: Dict[str, int]
    operational_status_distribution: Dict[str, int]
    total_population_served: int
    total_ambulances_deployed: int
    population_by_district: Dict[str, int]


class UploadResponse(BaseModel):
    facilities: List[Dict[str, Any]]
    availableAmbulances: Optional[int] = None
    analytics: FacilityAnalytics
    warnings: List[str] = []


class ErrorResponse(BaseModel):
    error: str
    details: Optional[str] = None
