"""
Route Sequence Service.

Loads, reconciles and saves a trip's stop sequence. The ordering logic
itself lives in domain/dispatch/route_sequencer.py.
"""

import logging
from typing import List, Optional

from sqlalchemy.ext.asyncio import AsyncSession

from backend.app.domain.dispatch import route_sequencer
from backend.app.schemas.route import RouteSequenceSaveResponse, RouteSequenceView, RouteStop
from backend.app.services.assignment_service import AssignmentService
from backend.app.services.audit import AuditAction, log_event
from backend.app.services.events import EventPublisher
from backend.app.services.trip_financials import list_assigned_orders
from backend.app.services.unit_of_work import UnitOfWork

logger = logging.getLogger(__name__)


class RouteService:

    @staticmethod
    async def get_sequence(db: AsyncSession, trip_id: int) -> RouteSequenceView:
        """
        The saved sequence if there is one, otherwise the default.

        A saved sequence is returned as saved even when the assigned orders
        have changed since; is_stale tells the caller to rebuild it.
        """
        trip = await AssignmentService.get_trip(db, trip_id)
        orders = await list_assigned_orders(db, trip_id)
        saved = route_sequencer.parse_sequence(trip.route_sequence)

        if saved:
            stops = saved
            stale = route_sequencer.is_stale(saved, [o.id for o in orders])
        else:
            stops = route_sequencer.build_default_sequence(orders)
            stale = False

        return RouteSequenceView(
            trip_id=trip_id,
            stops=stops,
            is_saved=bool(saved),
            is_stale=stale,
            warnings=route_sequencer.validate_sequence(stops),
        )

    @staticmethod
    async def save_sequence(
        db: AsyncSession,
        trip_id: int,
        stops: List[RouteStop],
        publisher: Optional[EventPublisher] = None,
        actor: Optional[str] = None
    ) -> RouteSequenceSaveResponse:
        """Replace the trip's saved sequence. Ordering warnings never block the save."""
        warnings = route_sequencer.validate_sequence(stops)

        async with UnitOfWork(db, publisher) as uow:
            trip = await AssignmentService.get_trip(db, trip_id)
            trip.route_sequence = route_sequencer.serialize_sequence(stops)
            await db.flush()

            await log_event(
                db, AuditAction.ROUTE_SEQUENCE_SAVED, "trip", trip_id, actor=actor,
                metadata={"stops": len(stops), "warnings": len(warnings)}
            )
            uow.trip_changed(trip_id)

        if warnings:
            logger.info("Trip %s route saved with %d warnings", trip_id, len(warnings))
        return RouteSequenceSaveResponse(trip_id=trip_id, stops=list(stops), warnings=warnings)

    @staticmethod
    async def move_stop(
        db: AsyncSession,
        trip_id: int,
        stops: List[RouteStop],
        from_index: int,
        to_index: int
    ) -> RouteSequenceView:
        """Reorder without saving; the caller saves when the operator accepts."""
        await AssignmentService.get_trip(db, trip_id)
        orders = await list_assigned_orders(db, trip_id)
        moved = route_sequencer.move_stop(stops, from_index, to_index)
        return RouteSequenceView(
            trip_id=trip_id,
            stops=moved,
            is_saved=False,
            is_stale=route_sequencer.is_stale(moved, [o.id for o in orders]),
            warnings=route_sequencer.validate_sequence(moved),
        )

    @staticmethod
    async def reset_sequence(
        db: AsyncSession,
        trip_id: int,
        publisher: Optional[EventPublisher] = None,
        actor: Optional[str] = None
    ) -> RouteSequenceSaveResponse:
        """Rebuild the default sequence from the assigned orders and save it."""
        await AssignmentService.get_trip(db, trip_id)
        orders = await list_assigned_orders(db, trip_id)
        stops = route_sequencer.build_default_sequence(orders)
        return await RouteService.save_sequence(db, trip_id, stops, publisher, actor)
