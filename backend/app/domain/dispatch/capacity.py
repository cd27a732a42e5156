"""
Truck capacity lookup.

Capacity is never stored on a trip: it comes from the assigned truck's
type. It is a soft ceiling, reported to the caller and never enforced.
"""

from typing import Dict, Optional

from backend.app.models.fleet_enums import TruckType
from backend.app.schemas.trip import CapacityReport


TRUCK_CAPACITY: Dict[TruckType, int] = {
    TruckType.SEVEN_CAR: 7,
    TruckType.EIGHT_CAR: 8,
    TruckType.NINE_CAR: 9,
    TruckType.FLATBED: 4,
    TruckType.ENCLOSED: 6,
}


def capacity_for(truck_type: Optional[TruckType]) -> Optional[int]:
    """Max vehicle count for a truck type, None when the trip has no truck."""
    if truck_type is None:
        return None
    return TRUCK_CAPACITY[truck_type]


def build_capacity_report(trip_id: int, truck_type: Optional[TruckType], utilization: int) -> CapacityReport:
    capacity = capacity_for(truck_type)
    return CapacityReport(
        trip_id=trip_id,
        capacity=capacity,
        utilization=utilization,
        warning=capacity is not None and utilization > capacity,
    )
