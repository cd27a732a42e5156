"""
Driver database model.

Drivers carry the pay model used to derive a trip's driver pay.
"""

from sqlalchemy import Column, Integer, String, Numeric, DateTime, Enum, Boolean
from sqlalchemy.sql import func
from backend.app.db.session import Base
from backend.app.models.fleet_enums import DriverType, DriverPayType


class Driver(Base):
    """Driver model."""
    __tablename__ = "drivers"

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)

    first_name = Column(String(100), nullable=False)
    last_name = Column(String(100), nullable=False)

    # Pay model
    driver_type = Column(Enum(DriverType), default=DriverType.COMPANY, nullable=False)
    pay_type = Column(Enum(DriverPayType), default=DriverPayType.PERCENTAGE_OF_CARRIER_PAY, nullable=False)
    pay_rate = Column(Numeric(12, 2), default=0, nullable=False)  # percent, $/mile or $/car depending on pay_type

    is_active = Column(Boolean, default=True, nullable=False, index=True)

    # Timestamps
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False)

    def __repr__(self):
        return f"<Driver(id={self.id}, name='{self.first_name} {self.last_name}', pay_type='{self.pay_type.value}')>"
