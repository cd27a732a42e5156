"""
Order database model.

An order is one vehicle-transport job with a pickup leg, a delivery leg
and its pricing. Orders exist independently of trips; assignment sets the
trip back-reference.
"""

from sqlalchemy import Column, Integer, String, Numeric, ForeignKey, DateTime, Date, Enum, Text
from sqlalchemy.sql import func
from backend.app.db.session import Base
from backend.app.models.order_enums import OrderStatus


class Order(Base):
    """
    Order model.

    actual_pickup_date / actual_delivery_date are stamped by status
    transitions only. trip_id is null while the order is NEW or CANCELLED.
    """
    __tablename__ = "orders"

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    order_number = Column(String(50), unique=True, nullable=True, index=True)

    # Status
    status = Column(Enum(OrderStatus), default=OrderStatus.NEW, nullable=False, index=True)
    cancelled_reason = Column(Text, nullable=True)

    # Associations
    broker_id = Column(Integer, nullable=True, index=True)
    driver_id = Column(Integer, ForeignKey('drivers.id'), nullable=True, index=True)
    trip_id = Column(Integer, ForeignKey('trips.id'), nullable=True, index=True)

    # Vehicle
    vehicle_year = Column(Integer, nullable=True)
    vehicle_make = Column(String(100), nullable=True)
    vehicle_model = Column(String(100), nullable=True)
    vehicle_vin = Column(String(17), nullable=True)

    # Pickup leg
    pickup_location = Column(String(500), nullable=True)
    pickup_city = Column(String(100), nullable=True)
    pickup_state = Column(String(2), nullable=True)
    pickup_zip = Column(String(10), nullable=True)
    pickup_contact_name = Column(String(200), nullable=True)
    pickup_contact_phone = Column(String(50), nullable=True)
    pickup_date = Column(Date, nullable=True)
    actual_pickup_date = Column(DateTime(timezone=True), nullable=True)

    # Delivery leg
    delivery_location = Column(String(500), nullable=True)
    delivery_city = Column(String(100), nullable=True)
    delivery_state = Column(String(2), nullable=True)
    delivery_zip = Column(String(10), nullable=True)
    delivery_contact_name = Column(String(200), nullable=True)
    delivery_contact_phone = Column(String(50), nullable=True)
    delivery_date = Column(Date, nullable=True)
    actual_delivery_date = Column(DateTime(timezone=True), nullable=True)

    # Pricing
    revenue = Column(Numeric(12, 2), default=0, nullable=False)
    carrier_pay = Column(Numeric(12, 2), default=0, nullable=False)
    broker_fee = Column(Numeric(12, 2), default=0, nullable=False)
    local_fee = Column(Numeric(12, 2), default=0, nullable=False)
    driver_pay_rate_override = Column(Numeric(12, 2), nullable=True)
    distance_miles = Column(Numeric(10, 1), nullable=True)

    # Timestamps
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False)

    def __repr__(self):
        return f"<Order(id={self.id}, trip_id={self.trip_id}, status='{self.status.value}')>"
