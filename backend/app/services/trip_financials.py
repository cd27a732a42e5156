"""
Trip financial recompute.

Rewrites a trip's persisted rollups from its assigned orders, driver pay
model and expenses. Called inside the unit of work of every change that
moves one of those inputs.
"""

import logging
from typing import List, Tuple

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from backend.app.core.exceptions import ResourceNotFoundError
from backend.app.domain.financials.trip_calculations import (
    DriverPayConfig,
    OrderFinancials,
    calculate_trip_financials,
    summarize_states,
)
from backend.app.models.driver import Driver
from backend.app.models.order import Order
from backend.app.models.trip import Trip
from backend.app.models.trip_expense import TripExpense
from backend.app.schemas.financials import TripFinancials

logger = logging.getLogger(__name__)


async def list_assigned_orders(db: AsyncSession, trip_id: int) -> List[Order]:
    """Orders referencing the trip, oldest first, refreshed from the database."""
    result = await db.execute(
        select(Order)
        .where(Order.trip_id == trip_id)
        .order_by(Order.created_at, Order.id)
        .execution_options(populate_existing=True)
    )
    return list(result.scalars().all())


async def _calculate(db: AsyncSession, trip: Trip) -> Tuple[TripFinancials, List[Order]]:
    orders = await list_assigned_orders(db, trip.id)
    driver = await db.get(Driver, trip.driver_id) if trip.driver_id else None

    result = await db.execute(select(TripExpense.amount).where(TripExpense.trip_id == trip.id))
    expense_amounts = result.scalars().all()

    financials = calculate_trip_financials(
        [OrderFinancials.from_order(o) for o in orders],
        DriverPayConfig.from_driver(driver),
        expense_amounts,
        trip.carrier_pay,
    )
    return financials, orders


async def recompute_trip_financials(db: AsyncSession, trip_id: int) -> Trip:
    """
    Recompute and write the rollups of one trip.

    Flushes first so pending edits to the trip or its expenses are part
    of the calculation, and flushes the result; the caller commits.

    Raises:
        ResourceNotFoundError: If the trip does not exist
    """
    await db.flush()
    trip = await db.get(Trip, trip_id, populate_existing=True)
    if trip is None:
        raise ResourceNotFoundError("Trip", trip_id)

    financials, orders = await _calculate(db, trip)

    trip.total_revenue = financials.revenue
    trip.total_broker_fees = financials.broker_fees
    trip.total_local_fees = financials.local_fees
    trip.driver_pay = financials.driver_pay
    trip.total_expenses = financials.expenses
    trip.net_profit = financials.net_profit
    trip.total_miles = financials.total_miles
    trip.order_count = financials.order_count
    trip.origin_summary = summarize_states([o.pickup_state for o in orders])
    trip.destination_summary = summarize_states([o.delivery_state for o in orders])

    await db.flush()
    logger.debug("Recomputed trip %s: revenue=%s net_profit=%s", trip_id, financials.revenue, financials.net_profit)
    return trip


async def get_trip_financials(db: AsyncSession, trip_id: int) -> TripFinancials:
    """Live per-trip financial view, including per-mile metrics."""
    trip = await db.get(Trip, trip_id)
    if trip is None:
        raise ResourceNotFoundError("Trip", trip_id)
    financials, _ = await _calculate(db, trip)
    return financials
