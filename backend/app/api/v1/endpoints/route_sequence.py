"""
Route Sequence API Endpoints.

Pickup/delivery visiting order of a trip.
"""

from fastapi import APIRouter, Depends, Path
from sqlalchemy.ext.asyncio import AsyncSession

from backend.app.db.session import get_db
from backend.app.schemas.route import (
    RouteSequenceView, RouteSequenceSave, RouteStopMove, RouteSequenceSaveResponse
)
from backend.app.services.events import EventPublisher, get_event_publisher
from backend.app.services.route_service import RouteService

router = APIRouter(prefix="/trips/{trip_id}/route", tags=["Trips - Route"])


@router.get("", response_model=RouteSequenceView)
async def get_route(
    trip_id: int = Path(..., description="Trip ID"),
    db: AsyncSession = Depends(get_db)
):
    """Saved sequence (flagged stale if the orders changed) or the default."""
    return await RouteService.get_sequence(db, trip_id)


@router.put("", response_model=RouteSequenceSaveResponse)
async def save_route(
    sequence: RouteSequenceSave,
    trip_id: int = Path(..., description="Trip ID"),
    db: AsyncSession = Depends(get_db),
    publisher: EventPublisher = Depends(get_event_publisher)
):
    """Replace the saved sequence. Ordering problems come back as warnings."""
    return await RouteService.save_sequence(db, trip_id, sequence.stops, publisher)


@router.post("/move", response_model=RouteSequenceView)
async def move_stop(
    move: RouteStopMove,
    trip_id: int = Path(..., description="Trip ID"),
    db: AsyncSession = Depends(get_db)
):
    return await RouteService.move_stop(db, trip_id, move.stops, move.from_index, move.to_index)


@router.post("/reset", response_model=RouteSequenceSaveResponse)
async def reset_route(
    trip_id: int = Path(..., description="Trip ID"),
    db: AsyncSession = Depends(get_db),
    publisher: EventPublisher = Depends(get_event_publisher)
):
    return await RouteService.reset_sequence(db, trip_id, publisher)
