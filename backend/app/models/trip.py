"""
Trip database model.

A trip combines one truck, one driver and zero or more orders over a
date range. The financial columns are rollups rewritten on every order or
expense change.
"""

from sqlalchemy import Column, Integer, String, Numeric, ForeignKey, DateTime, Date, Enum, Text, JSON
from sqlalchemy.sql import func
from backend.app.db.session import Base
from backend.app.models.trip_enums import TripStatus


class Trip(Base):
    """
    Trip model.

    route_sequence holds the saved stop list as
    [{"order_id": int, "stop_type": "pickup" | "delivery"}, ...] and may be
    stale relative to the currently assigned orders.
    """
    __tablename__ = "trips"

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    trip_number = Column(String(50), unique=True, nullable=True, index=True)  # null while draft

    # Assignment
    truck_id = Column(Integer, ForeignKey('trucks.id'), nullable=True, index=True)
    driver_id = Column(Integer, ForeignKey('drivers.id'), nullable=True, index=True)

    # Status
    status = Column(Enum(TripStatus), default=TripStatus.PLANNED, nullable=False, index=True)

    # Schedule
    start_date = Column(Date, nullable=True, index=True)
    end_date = Column(Date, nullable=True)
    notes = Column(Text, nullable=True)

    # Financial rollups
    carrier_pay = Column(Numeric(12, 2), default=0, nullable=False)  # directly editable
    total_revenue = Column(Numeric(12, 2), default=0, nullable=False)
    total_broker_fees = Column(Numeric(12, 2), default=0, nullable=False)
    total_local_fees = Column(Numeric(12, 2), default=0, nullable=False)
    driver_pay = Column(Numeric(12, 2), default=0, nullable=False)
    total_expenses = Column(Numeric(12, 2), default=0, nullable=False)
    net_profit = Column(Numeric(12, 2), default=0, nullable=False)
    total_miles = Column(Numeric(10, 1), default=0, nullable=False)
    order_count = Column(Integer, default=0, nullable=False)

    # Route summary
    origin_summary = Column(String(200), nullable=True)
    destination_summary = Column(String(200), nullable=True)
    route_sequence = Column(JSON, nullable=True)

    # Timestamps
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False)

    def __repr__(self):
        return f"<Trip(id={self.id}, truck_id={self.truck_id}, status='{self.status.value}')>"
