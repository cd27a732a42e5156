"""
Order API Endpoints.

Order creation, lifecycle transitions and trip assignment.
"""

from fastapi import APIRouter, Depends, status, Path
from sqlalchemy.ext.asyncio import AsyncSession

from backend.app.db.session import get_db
from backend.app.schemas.order import (
    OrderCreate, OrderResponse, OrderTransitionRequest, OrderCancelRequest, OrderAssignRequest
)
from backend.app.schemas.trip import AssignmentResponse
from backend.app.services.assignment_service import AssignmentService
from backend.app.services.events import EventPublisher, get_event_publisher
from backend.app.services.order_service import OrderService

router = APIRouter(prefix="/orders", tags=["Orders"])


@router.post("", response_model=OrderResponse, status_code=status.HTTP_201_CREATED)
async def create_order(
    order_data: OrderCreate,
    db: AsyncSession = Depends(get_db),
    publisher: EventPublisher = Depends(get_event_publisher)
):
    """Create a NEW order, not yet on any trip."""
    order = await OrderService.create_order(db, order_data, publisher)
    return OrderResponse.from_order(order)


@router.get("/{order_id}", response_model=OrderResponse)
async def get_order(
    order_id: int = Path(..., description="Order ID"),
    db: AsyncSession = Depends(get_db)
):
    order = await OrderService.get_order(db, order_id)
    return OrderResponse.from_order(order)


@router.post("/{order_id}/advance", response_model=OrderResponse)
async def advance_order(
    request: OrderTransitionRequest,
    order_id: int = Path(..., description="Order ID"),
    db: AsyncSession = Depends(get_db),
    publisher: EventPublisher = Depends(get_event_publisher)
):
    """
    Move an order one status forward.

    expected_status is required: a retry of an advance that already
    landed fails with 409 instead of advancing twice.
    """
    order = await OrderService.advance_order(db, order_id, request.expected_status, publisher)
    return OrderResponse.from_order(order)


@router.post("/{order_id}/rollback", response_model=OrderResponse)
async def rollback_order(
    request: OrderTransitionRequest,
    order_id: int = Path(..., description="Order ID"),
    db: AsyncSession = Depends(get_db),
    publisher: EventPublisher = Depends(get_event_publisher)
):
    order = await OrderService.rollback_order(db, order_id, request.expected_status, publisher)
    return OrderResponse.from_order(order)


@router.post("/{order_id}/cancel", response_model=OrderResponse)
async def cancel_order(
    request: OrderCancelRequest,
    order_id: int = Path(..., description="Order ID"),
    db: AsyncSession = Depends(get_db),
    publisher: EventPublisher = Depends(get_event_publisher)
):
    order = await OrderService.cancel_order(db, order_id, request.reason, publisher)
    return OrderResponse.from_order(order)


@router.post("/{order_id}/assign", response_model=AssignmentResponse)
async def assign_order(
    request: OrderAssignRequest,
    order_id: int = Path(..., description="Order ID"),
    db: AsyncSession = Depends(get_db),
    publisher: EventPublisher = Depends(get_event_publisher)
):
    """
    Assign an order to a trip.

    Over-capacity assignments succeed; check capacity.warning.
    """
    order, report = await AssignmentService.assign(db, order_id, request.trip_id, publisher)
    return AssignmentResponse(order=OrderResponse.from_order(order), capacity=report)


@router.post("/{order_id}/unassign", response_model=OrderResponse)
async def unassign_order(
    order_id: int = Path(..., description="Order ID"),
    db: AsyncSession = Depends(get_db),
    publisher: EventPublisher = Depends(get_event_publisher)
):
    order = await AssignmentService.unassign(db, order_id, publisher)
    return OrderResponse.from_order(order)
