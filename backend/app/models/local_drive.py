"""
Local Drive database model.

A short terminal-to-customer delivery created when a trip reaches the
terminal with orders bound for a local state.
"""

from sqlalchemy import Column, Integer, String, Numeric, ForeignKey, DateTime, Enum, Text
from sqlalchemy.sql import func
from backend.app.db.session import Base
from backend.app.models.trip_enums import LocalDriveStatus


class LocalDrive(Base):
    """Local Drive model. At most one per order."""
    __tablename__ = "local_drives"

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    order_id = Column(Integer, ForeignKey('orders.id'), nullable=False, unique=True, index=True)

    status = Column(Enum(LocalDriveStatus), default=LocalDriveStatus.PENDING, nullable=False, index=True)

    pickup_location = Column(String(500), nullable=True)
    delivery_location = Column(String(500), nullable=True)
    delivery_city = Column(String(100), nullable=True)
    delivery_state = Column(String(2), nullable=True)

    revenue = Column(Numeric(12, 2), default=0, nullable=False)
    notes = Column(Text, nullable=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)

    def __repr__(self):
        return f"<LocalDrive(id={self.id}, order_id={self.order_id}, status='{self.status.value}')>"
