"""
Trip Service.

Trip create, edit and delete. Status transitions go through the
CascadeCoordinator.
"""

import logging
from typing import Optional

from sqlalchemy import delete, update
from sqlalchemy.ext.asyncio import AsyncSession

from backend.app.core.exceptions import ResourceNotFoundError
from backend.app.models.driver import Driver
from backend.app.models.order import Order
from backend.app.models.trip import Trip
from backend.app.models.trip_expense import TripExpense
from backend.app.models.truck import Truck
from backend.app.schemas.trip import TripCreate, TripUpdate
from backend.app.services.assignment_service import AssignmentService, unassigned_values
from backend.app.services.audit import AuditAction, log_event
from backend.app.services.concurrency import flush_unique
from backend.app.services.events import EventPublisher
from backend.app.services.trip_financials import list_assigned_orders, recompute_trip_financials
from backend.app.services.unit_of_work import UnitOfWork

logger = logging.getLogger(__name__)


class TripService:

    @staticmethod
    async def _check_references(db: AsyncSession, truck_id: Optional[int], driver_id: Optional[int]) -> None:
        if truck_id is not None and await db.get(Truck, truck_id) is None:
            raise ResourceNotFoundError("Truck", truck_id)
        if driver_id is not None and await db.get(Driver, driver_id) is None:
            raise ResourceNotFoundError("Driver", driver_id)

    @staticmethod
    async def create_trip(
        db: AsyncSession,
        data: TripCreate,
        publisher: Optional[EventPublisher] = None,
        actor: Optional[str] = None
    ) -> Trip:
        """Create a PLANNED trip with its truck and driver."""
        async with UnitOfWork(db, publisher) as uow:
            await TripService._check_references(db, data.truck_id, data.driver_id)

            trip = Trip(**data.model_dump())
            db.add(trip)
            await flush_unique(db, "trip", "trip_number", data.trip_number)
            await recompute_trip_financials(db, trip.id)

            await log_event(db, AuditAction.TRIP_CREATED, "trip", trip.id, actor=actor)
            uow.trip_changed(trip.id)

        await db.refresh(trip)
        logger.info("Trip %s created", trip.id)
        return trip

    @staticmethod
    async def update_trip(
        db: AsyncSession,
        trip_id: int,
        data: TripUpdate,
        publisher: Optional[EventPublisher] = None,
        actor: Optional[str] = None
    ) -> Trip:
        """
        Edit trip fields. Carrier pay, truck and driver edits flow into
        the financial rollups.
        """
        changes = data.changes()
        async with UnitOfWork(db, publisher) as uow:
            trip = await AssignmentService.get_trip(db, trip_id)
            await TripService._check_references(db, changes.get("truck_id"), changes.get("driver_id"))

            for name, value in changes.items():
                setattr(trip, name, value)
            await flush_unique(db, "trip", "trip_number", trip.trip_number)
            await recompute_trip_financials(db, trip_id)

            await log_event(
                db, AuditAction.TRIP_UPDATED, "trip", trip_id, actor=actor,
                metadata={"fields": sorted(changes)}
            )
            uow.trip_changed(trip_id)

        await db.refresh(trip)
        return trip

    @staticmethod
    async def delete_trip(
        db: AsyncSession,
        trip_id: int,
        publisher: Optional[EventPublisher] = None,
        actor: Optional[str] = None
    ) -> None:
        """Release every order back to NEW, then delete the trip and its expenses."""
        async with UnitOfWork(db, publisher) as uow:
            trip = await AssignmentService.get_trip(db, trip_id)
            orders = await list_assigned_orders(db, trip_id)

            await db.execute(
                update(Order)
                .where(Order.trip_id == trip_id)
                .values(**unassigned_values())
                .execution_options(synchronize_session=False)
            )
            await db.execute(delete(TripExpense).where(TripExpense.trip_id == trip_id))
            await db.delete(trip)
            await db.flush()

            await log_event(
                db, AuditAction.TRIP_DELETED, "trip", trip_id, actor=actor,
                metadata={"released_order_ids": [o.id for o in orders]}
            )
            for order in orders:
                uow.order_changed(order.id)
            uow.trip_changed(trip_id)

        logger.info("Trip %s deleted, %d orders released", trip_id, len(orders))
