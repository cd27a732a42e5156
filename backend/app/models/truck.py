"""
Truck database model.

A truck's type determines how many vehicles it can haul on one trip.
"""

from sqlalchemy import Column, Integer, String, Boolean, DateTime, Enum
from sqlalchemy.sql import func
from backend.app.db.session import Base
from backend.app.models.fleet_enums import TruckType


class Truck(Base):
    """Truck model."""
    __tablename__ = "trucks"

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)

    # Identification
    unit_number = Column(String(50), unique=True, nullable=False, index=True)
    vin = Column(String(17), nullable=True)

    # Capacity is looked up from the type, never stored
    truck_type = Column(Enum(TruckType), nullable=False)

    is_active = Column(Boolean, default=True, nullable=False, index=True)

    # Timestamps
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False)

    def __repr__(self):
        return f"<Truck(id={self.id}, unit='{self.unit_number}', type='{self.truck_type.value}')>"
