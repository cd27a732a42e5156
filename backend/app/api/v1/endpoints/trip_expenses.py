"""
Trip Expense API Endpoints.
"""

from fastapi import APIRouter, Depends, status, Path, Response
from sqlalchemy.ext.asyncio import AsyncSession

from backend.app.db.session import get_db
from backend.app.schemas.expense import TripExpenseCreate, TripExpenseUpdate, TripExpenseResponse
from backend.app.services.events import EventPublisher, get_event_publisher
from backend.app.services.expense_service import ExpenseService

router = APIRouter(prefix="/trips/{trip_id}/expenses", tags=["Trips - Expenses"])


@router.post("", response_model=TripExpenseResponse, status_code=status.HTTP_201_CREATED)
async def create_expense(
    expense_data: TripExpenseCreate,
    trip_id: int = Path(..., description="Trip ID"),
    db: AsyncSession = Depends(get_db),
    publisher: EventPublisher = Depends(get_event_publisher)
):
    return await ExpenseService.create_expense(db, trip_id, expense_data, publisher)


@router.patch("/{expense_id}", response_model=TripExpenseResponse)
async def update_expense(
    expense_data: TripExpenseUpdate,
    trip_id: int = Path(..., description="Trip ID"),
    expense_id: int = Path(..., description="Expense ID"),
    db: AsyncSession = Depends(get_db),
    publisher: EventPublisher = Depends(get_event_publisher)
):
    return await ExpenseService.update_expense(db, trip_id, expense_id, expense_data, publisher)


@router.delete("/{expense_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_expense(
    trip_id: int = Path(..., description="Trip ID"),
    expense_id: int = Path(..., description="Expense ID"),
    db: AsyncSession = Depends(get_db),
    publisher: EventPublisher = Depends(get_event_publisher)
):
    await ExpenseService.delete_expense(db, trip_id, expense_id, publisher)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
