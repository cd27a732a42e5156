"""
Trip API Endpoints.

Trip CRUD, status transitions with order cascade, capacity and the
per-trip financial view.
"""

from fastapi import APIRouter, Depends, status, Path, Response
from sqlalchemy.ext.asyncio import AsyncSession

from backend.app.db.session import get_db
from backend.app.schemas.financials import TripFinancials
from backend.app.schemas.trip import (
    TripCreate, TripUpdate, TripResponse, TripTransitionRequest, TripTransitionResponse, CapacityReport
)
from backend.app.services.assignment_service import AssignmentService
from backend.app.services.cascade_coordinator import CascadeCoordinator, TripTransitionResult
from backend.app.services.events import EventPublisher, get_event_publisher
from backend.app.services.trip_financials import get_trip_financials
from backend.app.services.trip_service import TripService

router = APIRouter(prefix="/trips", tags=["Trips"])


def _transition_response(result: TripTransitionResult) -> TripTransitionResponse:
    return TripTransitionResponse(
        trip=TripResponse.model_validate(result.trip),
        cascaded_order_ids=result.cascaded_order_ids,
        local_drives_created=result.local_drives_created,
    )


@router.post("", response_model=TripResponse, status_code=status.HTTP_201_CREATED)
async def create_trip(
    trip_data: TripCreate,
    db: AsyncSession = Depends(get_db),
    publisher: EventPublisher = Depends(get_event_publisher)
):
    return await TripService.create_trip(db, trip_data, publisher)


@router.get("/{trip_id}", response_model=TripResponse)
async def get_trip(
    trip_id: int = Path(..., description="Trip ID"),
    db: AsyncSession = Depends(get_db)
):
    return await AssignmentService.get_trip(db, trip_id)


@router.patch("/{trip_id}", response_model=TripResponse)
async def update_trip(
    trip_data: TripUpdate,
    trip_id: int = Path(..., description="Trip ID"),
    db: AsyncSession = Depends(get_db),
    publisher: EventPublisher = Depends(get_event_publisher)
):
    return await TripService.update_trip(db, trip_id, trip_data, publisher)


@router.delete("/{trip_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_trip(
    trip_id: int = Path(..., description="Trip ID"),
    db: AsyncSession = Depends(get_db),
    publisher: EventPublisher = Depends(get_event_publisher)
):
    """Delete a trip. Its orders go back to NEW."""
    await TripService.delete_trip(db, trip_id, publisher)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.post("/{trip_id}/advance", response_model=TripTransitionResponse)
async def advance_trip(
    request: TripTransitionRequest,
    trip_id: int = Path(..., description="Trip ID"),
    db: AsyncSession = Depends(get_db),
    publisher: EventPublisher = Depends(get_event_publisher)
):
    """
    Move a trip one status forward.

    Starting a trip picks up its assigned orders and completing it
    delivers them. Returns 409 with blocking_order_ids if any order is
    out of step.
    """
    result = await CascadeCoordinator.advance_trip(db, trip_id, request.expected_status, publisher)
    return _transition_response(result)


@router.post("/{trip_id}/rollback", response_model=TripTransitionResponse)
async def rollback_trip(
    request: TripTransitionRequest,
    trip_id: int = Path(..., description="Trip ID"),
    db: AsyncSession = Depends(get_db),
    publisher: EventPublisher = Depends(get_event_publisher)
):
    result = await CascadeCoordinator.rollback_trip(db, trip_id, request.expected_status, publisher)
    return _transition_response(result)


@router.get("/{trip_id}/capacity", response_model=CapacityReport)
async def get_capacity(
    trip_id: int = Path(..., description="Trip ID"),
    db: AsyncSession = Depends(get_db)
):
    return await AssignmentService.capacity_report(db, trip_id)


@router.get("/{trip_id}/financials", response_model=TripFinancials)
async def get_financials(
    trip_id: int = Path(..., description="Trip ID"),
    db: AsyncSession = Depends(get_db)
):
    return await get_trip_financials(db, trip_id)
