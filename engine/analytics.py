"""Summary statistics over a facility snapshot, shown after upload."""

from typing import Dict, List

from models.facility import FacilityRecord
from config.defaults import PRIORITY_TIERS, OPERATIONAL_STATUSES


def compute_facility_analytics(records: List[FacilityRecord]) -> dict:
    """Counts per tier and status (zero-filled), totals, and population by district.

    Returns dict with: total_facilities, priority_distribution,
    operational_status_distribution, total_population_served,
    total_ambulances_deployed, population_by_district
    """
    priority_distribution = {tier: 0 for tier in PRIORITY_TIERS}
    status_distribution = {status: 0 for status in OPERATIONAL_STATUSES}
    population_by_district: Dict[str, int] = {}

    for r in records:
        priority_distribution[r.priority_tier] = priority_distribution.get(r.priority_tier, 0) + 1
        status_distribution[r.operational_status] = status_distribution.get(r.operational_status, 0) + 1
        population_by_district[r.district] = population_by_district.get(r.district, 0) + r.population_served

    return {
        "total_facilities": len(records),
        "priority_distribution": priority_distribution,
        "operational_status_distribution": status_distribution,
        "total_population_served": sum(r.population_served for r in records),
        "total_ambulances_deployed": sum(r.ambulances_deployed for r in records),
        "population_by_district": dict(sorted(population_by_district.items())),
    }


def compute_coverage(records: List[FacilityRecord], allocated_ids: List[str]) -> dict:
    """Population and critical-tier coverage achieved by an allocation."""
    allocated = set(allocated_ids)
    served = [r for r in records if r.facility_id in allocated]
    total_population = sum(r.population_served for r in records)
    served_population = sum(r.population_served for r in served)
    critical_total = sum(1 for r in records if r.priority_tier == "Critical")
    critical_served = sum(1 for r in served if r.priority_tier == "Critical")

    return {
        "facilities_served": len(served),
        "facilities_unserved": len(records) - len(served),
        "population_served": served_population,
        "population_coverage_pct": served_population / total_population if total_population else 0.0,
        "critical_served": critical_served,
        "critical_total": critical_total,
    }
