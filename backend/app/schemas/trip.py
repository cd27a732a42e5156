"""
Trip schemas.

Schemas for trip creation, status transitions and capacity reporting.
"""

from pydantic import BaseModel, Field, computed_field
from typing import Any, Dict, Optional
from datetime import date, datetime
from decimal import Decimal

from backend.app.core.exceptions import DomainValidationError
from backend.app.models.trip_enums import TripStatus
from backend.app.schemas.order import OrderResponse


class TripCreate(BaseModel):
    """Schema for creating a trip with its truck and driver already chosen."""
    truck_id: Optional[int] = None
    driver_id: Optional[int] = None
    trip_number: Optional[str] = Field(None, max_length=50)
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    carrier_pay: Decimal = Field(default=Decimal("0"), ge=0)
    notes: Optional[str] = None


class TripUpdate(BaseModel):
    """Schema for editing a trip. Only provided fields are written."""
    truck_id: Optional[int] = None
    driver_id: Optional[int] = None
    trip_number: Optional[str] = Field(None, max_length=50)
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    carrier_pay: Optional[Decimal] = Field(None, ge=0)
    notes: Optional[str] = None

    def changes(self) -> Dict[str, Any]:
        """
        Fields the caller sent.

        Raises:
            DomainValidationError: If a field backed by a NOT NULL column is sent as null
        """
        changes = self.model_dump(exclude_unset=True)
        if "carrier_pay" in changes and changes["carrier_pay"] is None:
            raise DomainValidationError("carrier_pay cannot be null", field="carrier_pay")
        return changes


class TripTransitionRequest(BaseModel):
    """Precondition: the status the caller last saw. Makes retries fail cleanly."""
    expected_status: TripStatus


class CapacityReport(BaseModel):
    """Capacity utilization of a trip. warning is set when over capacity."""
    trip_id: int
    capacity: Optional[int]  # None when no truck is assigned
    utilization: int
    warning: bool

    @computed_field
    @property
    def remaining(self) -> Optional[int]:
        if self.capacity is None:
            return None
        return self.capacity - self.utilization


class TripResponse(BaseModel):
    """Schema for trip response."""
    id: int
    trip_number: Optional[str]
    truck_id: Optional[int]
    driver_id: Optional[int]
    status: TripStatus
    start_date: Optional[date]
    end_date: Optional[date]
    notes: Optional[str]
    carrier_pay: Decimal
    total_revenue: Decimal
    total_broker_fees: Decimal
    total_local_fees: Decimal
    driver_pay: Decimal
    total_expenses: Decimal
    net_profit: Decimal
    total_miles: Decimal
    order_count: int
    origin_summary: Optional[str]
    destination_summary: Optional[str]
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True


class TripTransitionResponse(BaseModel):
    """Trip after a transition plus the orders the cascade moved."""
    trip: TripResponse
    cascaded_order_ids: list[int] = []
    local_drives_created: int = 0


class AssignmentResponse(BaseModel):
    """Result of assigning an order: the order plus the trip's capacity report."""
    order: OrderResponse
    capacity: CapacityReport
