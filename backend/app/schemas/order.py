"""
Order Pydantic schemas.

Defines request and response models for orders and their transitions.
"""

from pydantic import BaseModel, Field
from datetime import datetime, date
from decimal import Decimal
from typing import Optional

from backend.app.domain.financials.trip_calculations import order_margin
from backend.app.models.order_enums import OrderStatus


class OrderCreate(BaseModel):
    """Schema for creating a new order. Orders start NEW with no trip."""
    order_number: Optional[str] = Field(None, max_length=50)
    broker_id: Optional[int] = None
    driver_id: Optional[int] = None

    vehicle_year: Optional[int] = Field(None, ge=1900, le=2100)
    vehicle_make: Optional[str] = Field(None, max_length=100)
    vehicle_model: Optional[str] = Field(None, max_length=100)
    vehicle_vin: Optional[str] = Field(None, max_length=17)

    pickup_location: Optional[str] = Field(None, max_length=500)
    pickup_city: Optional[str] = Field(None, max_length=100)
    pickup_state: Optional[str] = Field(None, min_length=2, max_length=2)
    pickup_zip: Optional[str] = Field(None, max_length=10)
    pickup_contact_name: Optional[str] = Field(None, max_length=200)
    pickup_contact_phone: Optional[str] = Field(None, max_length=50)
    pickup_date: Optional[date] = None

    delivery_location: Optional[str] = Field(None, max_length=500)
    delivery_city: Optional[str] = Field(None, max_length=100)
    delivery_state: Optional[str] = Field(None, min_length=2, max_length=2)
    delivery_zip: Optional[str] = Field(None, max_length=10)
    delivery_contact_name: Optional[str] = Field(None, max_length=200)
    delivery_contact_phone: Optional[str] = Field(None, max_length=50)
    delivery_date: Optional[date] = None

    revenue: Decimal = Field(default=Decimal("0"), ge=0)
    carrier_pay: Decimal = Field(default=Decimal("0"), ge=0)
    broker_fee: Decimal = Field(default=Decimal("0"), ge=0)
    local_fee: Decimal = Field(default=Decimal("0"), ge=0)
    driver_pay_rate_override: Optional[Decimal] = Field(None, ge=0)
    distance_miles: Optional[Decimal] = Field(None, ge=0)


class OrderTransitionRequest(BaseModel):
    """
    Precondition: the status the caller last saw.

    Required so a retried request fails instead of moving the order twice.
    """
    expected_status: OrderStatus


class OrderCancelRequest(BaseModel):
    """Cancellation request. Emptiness of the reason is checked by the engine."""
    reason: str = ""


class OrderAssignRequest(BaseModel):
    trip_id: int


class OrderResponse(BaseModel):
    """Schema for order response."""
    id: int
    order_number: Optional[str]
    status: OrderStatus
    cancelled_reason: Optional[str]
    broker_id: Optional[int]
    driver_id: Optional[int]
    trip_id: Optional[int]
    pickup_city: Optional[str]
    pickup_state: Optional[str]
    pickup_date: Optional[date]
    actual_pickup_date: Optional[datetime]
    delivery_city: Optional[str]
    delivery_state: Optional[str]
    delivery_date: Optional[date]
    actual_delivery_date: Optional[datetime]
    revenue: Decimal
    carrier_pay: Decimal
    broker_fee: Decimal
    local_fee: Decimal
    distance_miles: Optional[Decimal]
    margin: Decimal
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True

    @classmethod
    def from_order(cls, order) -> "OrderResponse":
        data = {name: getattr(order, name) for name in cls.model_fields if name != "margin"}
        return cls(**data, margin=order_margin(order.revenue, order.carrier_pay, order.broker_fee))
