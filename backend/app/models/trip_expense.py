"""
Trip Expense database model.

A trip-scoped cost line item. Every insert, update or delete must be
followed by a trip financial recompute.
"""

from sqlalchemy import Column, Integer, String, Numeric, ForeignKey, DateTime, Date, Enum, Text
from sqlalchemy.sql import func
from backend.app.db.session import Base
from backend.app.models.trip_enums import ExpenseCategory


class TripExpense(Base):
    """Trip Expense model."""
    __tablename__ = "trip_expenses"

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    trip_id = Column(Integer, ForeignKey('trips.id'), nullable=False, index=True)

    category = Column(Enum(ExpenseCategory), nullable=False, index=True)
    custom_label = Column(String(100), nullable=True)  # required for MISC
    amount = Column(Numeric(12, 2), nullable=False)
    expense_date = Column(Date, nullable=True)
    notes = Column(Text, nullable=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False)

    def __repr__(self):
        return f"<TripExpense(id={self.id}, trip_id={self.trip_id}, category='{self.category.value}', amount={self.amount})>"
