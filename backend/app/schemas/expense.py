"""
Trip expense schemas.
"""

from pydantic import BaseModel, Field
from datetime import date, datetime
from decimal import Decimal
from typing import Any, Dict, Optional

from backend.app.core.exceptions import DomainValidationError
from backend.app.models.trip_enums import ExpenseCategory


class TripExpenseCreate(BaseModel):
    """Schema for adding an expense to a trip."""
    category: ExpenseCategory
    custom_label: Optional[str] = Field(None, max_length=100)
    amount: Decimal
    expense_date: Optional[date] = None
    notes: Optional[str] = None


class TripExpenseUpdate(BaseModel):
    """Schema for editing an expense. Only provided fields are written."""
    category: Optional[ExpenseCategory] = None
    custom_label: Optional[str] = Field(None, max_length=100)
    amount: Optional[Decimal] = None
    expense_date: Optional[date] = None
    notes: Optional[str] = None

    def changes(self) -> Dict[str, Any]:
        """Fields the caller sent. category and amount may be left out but not nulled."""
        changes = self.model_dump(exclude_unset=True)
        for name in ("category", "amount"):
            if name in changes and changes[name] is None:
                raise DomainValidationError(f"{name} cannot be null", field=name)
        return changes


class TripExpenseResponse(BaseModel):
    """Schema for expense response."""
    id: int
    trip_id: int
    category: ExpenseCategory
    custom_label: Optional[str]
    amount: Decimal
    expense_date: Optional[date]
    notes: Optional[str]
    created_at: datetime

    class Config:
        from_attributes = True
