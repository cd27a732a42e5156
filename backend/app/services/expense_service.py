"""
Trip Expense Service.

Every expense write is followed by a financial recompute of its trip in
the same unit of work.
"""

import logging
from decimal import Decimal
from typing import Optional

from sqlalchemy.ext.asyncio import AsyncSession

from backend.app.core.exceptions import DomainValidationError, ResourceNotFoundError
from backend.app.models.trip_enums import ExpenseCategory
from backend.app.models.trip_expense import TripExpense
from backend.app.schemas.expense import TripExpenseCreate, TripExpenseUpdate
from backend.app.services.assignment_service import AssignmentService
from backend.app.services.audit import AuditAction, log_event
from backend.app.services.events import EventPublisher
from backend.app.services.trip_financials import recompute_trip_financials
from backend.app.services.unit_of_work import UnitOfWork

logger = logging.getLogger(__name__)


def validate_expense(category: ExpenseCategory, amount: Optional[Decimal], custom_label: Optional[str]) -> None:
    """
    Raises:
        DomainValidationError: Non-positive amount, or MISC without a label
    """
    if amount is None or amount <= 0:
        raise DomainValidationError("Expense amount must be greater than zero", field="amount")
    if category == ExpenseCategory.MISC and not (custom_label or "").strip():
        raise DomainValidationError("Misc expenses require a custom label", field="custom_label")


class ExpenseService:

    @staticmethod
    async def get_expense(db: AsyncSession, trip_id: int, expense_id: int) -> TripExpense:
        expense = await db.get(TripExpense, expense_id)
        if expense is None or expense.trip_id != trip_id:
            raise ResourceNotFoundError("TripExpense", expense_id)
        return expense

    @staticmethod
    async def create_expense(
        db: AsyncSession,
        trip_id: int,
        data: TripExpenseCreate,
        publisher: Optional[EventPublisher] = None,
        actor: Optional[str] = None
    ) -> TripExpense:
        validate_expense(data.category, data.amount, data.custom_label)

        async with UnitOfWork(db, publisher) as uow:
            await AssignmentService.get_trip(db, trip_id)

            expense = TripExpense(trip_id=trip_id, **data.model_dump())
            db.add(expense)
            await db.flush()
            await recompute_trip_financials(db, trip_id)

            await log_event(
                db, AuditAction.EXPENSE_SAVED, "trip_expense", expense.id, actor=actor,
                metadata={"trip_id": trip_id, "category": data.category.value, "amount": str(data.amount)}
            )
            uow.trip_changed(trip_id)

        await db.refresh(expense)
        return expense

    @staticmethod
    async def update_expense(
        db: AsyncSession,
        trip_id: int,
        expense_id: int,
        data: TripExpenseUpdate,
        publisher: Optional[EventPublisher] = None,
        actor: Optional[str] = None
    ) -> TripExpense:
        changes = data.changes()
        async with UnitOfWork(db, publisher) as uow:
            expense = await ExpenseService.get_expense(db, trip_id, expense_id)
            validate_expense(
                changes.get("category", expense.category),
                changes.get("amount", expense.amount),
                changes.get("custom_label", expense.custom_label),
            )

            for name, value in changes.items():
                setattr(expense, name, value)
            await recompute_trip_financials(db, trip_id)

            await log_event(
                db, AuditAction.EXPENSE_SAVED, "trip_expense", expense_id, actor=actor,
                metadata={"trip_id": trip_id, "fields": sorted(changes)}
            )
            uow.trip_changed(trip_id)

        await db.refresh(expense)
        return expense

    @staticmethod
    async def delete_expense(
        db: AsyncSession,
        trip_id: int,
        expense_id: int,
        publisher: Optional[EventPublisher] = None,
        actor: Optional[str] = None
    ) -> None:
        async with UnitOfWork(db, publisher) as uow:
            expense = await ExpenseService.get_expense(db, trip_id, expense_id)
            await db.delete(expense)
            await recompute_trip_financials(db, trip_id)

            await log_event(
                db, AuditAction.EXPENSE_DELETED, "trip_expense", expense_id, actor=actor,
                metadata={"trip_id": trip_id}
            )
            uow.trip_changed(trip_id)

        logger.info("Expense %s deleted from trip %s", expense_id, trip_id)
