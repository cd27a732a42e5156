"""
Cascade Coordinator.

Applies a trip transition together with its effect on the trip's orders
in one unit of work. If any order blocks the cascade, nothing is written.
"""

import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import List, Optional, Sequence

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from backend.app.core.config import settings
from backend.app.core.exceptions import CascadeFailureError
from backend.app.domain.dispatch.cascade_rules import (
    LOCAL_DRIVE_TRANSITION,
    cascade_for,
    cascade_values,
    needs_local_drive,
    plan_order_cascade,
)
from backend.app.domain.dispatch.status_engine import StatusChange, plan_trip_advance, plan_trip_rollback
from backend.app.models.local_drive import LocalDrive
from backend.app.models.order import Order
from backend.app.models.trip import Trip
from backend.app.models.trip_enums import LocalDriveStatus, TripStatus
from backend.app.services.assignment_service import AssignmentService
from backend.app.services.audit import AuditAction, log_event
from backend.app.services.concurrency import compare_and_swap_status
from backend.app.services.events import EventPublisher
from backend.app.services.trip_financials import list_assigned_orders
from backend.app.services.unit_of_work import UnitOfWork

logger = logging.getLogger(__name__)


@dataclass
class TripTransitionResult:
    trip: Trip
    cascaded_order_ids: List[int] = field(default_factory=list)
    local_drives_created: int = 0


class CascadeCoordinator:

    @staticmethod
    async def advance_trip(
        db: AsyncSession,
        trip_id: int,
        expected_status: Optional[TripStatus] = None,
        publisher: Optional[EventPublisher] = None,
        actor: Optional[str] = None
    ) -> TripTransitionResult:
        """
        Move a trip one step forward and cascade to its orders.

        Raises:
            ResourceNotFoundError: Unknown trip
            IllegalTransitionError: Trip is completed, or expected_status is stale
            CascadeFailureError: Orders block the transition
            ConcurrentModificationError: Trip or an order changed during the request
        """
        async with UnitOfWork(db, publisher) as uow:
            trip = await AssignmentService.get_trip(db, trip_id)
            change = plan_trip_advance(trip.status, expected_status)
            result = await CascadeCoordinator._apply(db, uow, trip, change, AuditAction.TRIP_ADVANCED, actor)

        await db.refresh(result.trip)
        return result

    @staticmethod
    async def rollback_trip(
        db: AsyncSession,
        trip_id: int,
        expected_status: Optional[TripStatus] = None,
        publisher: Optional[EventPublisher] = None,
        actor: Optional[str] = None
    ) -> TripTransitionResult:
        """Move a trip one step back. Orders are left as they are."""
        async with UnitOfWork(db, publisher) as uow:
            trip = await AssignmentService.get_trip(db, trip_id)
            change = plan_trip_rollback(trip.status, expected_status)
            result = await CascadeCoordinator._apply(db, uow, trip, change, AuditAction.TRIP_ROLLED_BACK, actor)

        await db.refresh(result.trip)
        return result

    @staticmethod
    async def _apply(
        db: AsyncSession,
        uow: UnitOfWork,
        trip: Trip,
        change: StatusChange,
        action: str,
        actor: Optional[str]
    ) -> TripTransitionResult:
        orders = await list_assigned_orders(db, trip.id)
        try:
            to_move = plan_order_cascade(trip.id, change, orders)
        except CascadeFailureError as exc:
            logger.warning(
                "Trip %s %s -> %s blocked by orders %s",
                trip.id, change.from_status.value, change.to_status.value, exc.blocking_order_ids
            )
            raise

        await compare_and_swap_status(db, Trip, trip.id, change.from_status, change.values)

        cascaded = []
        cascade = cascade_for(change)
        if cascade is not None:
            values = cascade_values(cascade, datetime.now(timezone.utc))
            for order in to_move:
                await compare_and_swap_status(db, Order, order.id, cascade.source, values, Order.trip_id == trip.id)
                cascaded.append(order.id)
                uow.order_changed(order.id)

        created = 0
        if (change.from_status, change.to_status) == LOCAL_DRIVE_TRANSITION:
            created = await CascadeCoordinator._create_local_drives(db, orders)

        await log_event(
            db, action, "trip", trip.id, actor=actor,
            metadata={
                "from": change.from_status.value,
                "to": change.to_status.value,
                "cascaded_order_ids": cascaded,
                "local_drives_created": created,
            }
        )
        uow.trip_changed(trip.id)

        logger.info(
            "Trip %s %s -> %s (%d orders cascaded)",
            trip.id, change.from_status.value, change.to_status.value, len(cascaded)
        )
        return TripTransitionResult(trip=trip, cascaded_order_ids=cascaded, local_drives_created=created)

    @staticmethod
    async def _create_local_drives(db: AsyncSession, orders: Sequence[Order]) -> int:
        """One pending local drive per qualifying order that has none yet."""
        qualifying = [o for o in orders if needs_local_drive(o, settings.local_delivery_states)]
        if not qualifying:
            return 0

        result = await db.execute(
            select(LocalDrive.order_id).where(LocalDrive.order_id.in_([o.id for o in qualifying]))
        )
        existing = set(result.scalars().all())

        drives = [
            LocalDrive(
                order_id=order.id,
                status=LocalDriveStatus.PENDING,
                pickup_location="Terminal",
                delivery_location=order.delivery_location,
                delivery_city=order.delivery_city,
                delivery_state=order.delivery_state,
                revenue=order.broker_fee,
                notes=f"Created at terminal arrival. Delivery to {order.delivery_city}, {order.delivery_state}",
            )
            for order in qualifying
            if order.id not in existing
        ]
        if drives:
            db.add_all(drives)
            await db.flush()
        return len(drives)
