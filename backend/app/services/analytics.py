"""
Analytics Service.

Supplies pre-summed period aggregates to the financial engine and builds
the KPI and P&L reports. READ-ONLY.
"""

from datetime import date
from decimal import Decimal
from typing import Dict, Mapping, Optional

from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, func, and_

from backend.app.core.exceptions import DomainValidationError
from backend.app.domain.financials.kpi_calculations import (
    calculate_expense_breakdown,
    calculate_kpis,
    expense_totals,
    format_kpis,
)
from backend.app.domain.financials.money import to_decimal
from backend.app.domain.financials.pnl_calculations import calculate_pnl, calculate_unit_metrics
from backend.app.models.order import Order
from backend.app.models.trip import Trip
from backend.app.models.trip_enums import TripStatus
from backend.app.models.trip_expense import TripExpense
from backend.app.schemas.financials import KPIAggregates, KPIReport, PnLReport


def _in_period(start: date, end: date):
    return and_(Trip.start_date >= start, Trip.start_date <= end)


class AnalyticsService:

    @staticmethod
    async def load_aggregates(db: AsyncSession, start: date, end: date) -> KPIAggregates:
        """
        Sum the persisted rollups of trips starting within [start, end].
        """
        if end < start:
            raise DomainValidationError("Period end is before its start", field="end")

        period = _in_period(start, end)

        # 1. Trip rollups
        totals_query = select(
            func.coalesce(func.sum(Trip.total_revenue), 0).label("revenue"),
            func.coalesce(func.sum(Trip.total_broker_fees), 0).label("broker_fees"),
            func.coalesce(func.sum(Trip.total_local_fees), 0).label("local_fees"),
            func.coalesce(func.sum(Trip.driver_pay), 0).label("driver_pay"),
            func.coalesce(func.sum(Trip.total_expenses), 0).label("expenses"),
            func.coalesce(func.sum(Trip.carrier_pay), 0).label("carrier_pay"),
            func.coalesce(func.sum(Trip.total_miles), 0).label("miles"),
            func.count(func.distinct(Trip.truck_id)).label("trucks"),
        ).where(period)
        totals = (await db.execute(totals_query)).one()

        # 2. Completed trips
        completed = (await db.execute(
            select(func.count(Trip.id)).where(period, Trip.status == TripStatus.COMPLETED)
        )).scalar() or 0

        # 3. Orders on those trips
        orders = (await db.execute(
            select(func.count(Order.id)).join(Trip, Order.trip_id == Trip.id).where(period)
        )).scalar() or 0

        # 4. Trip expenses by category
        by_category_query = select(
            TripExpense.category,
            func.coalesce(func.sum(TripExpense.amount), 0).label("amount"),
        ).join(Trip, TripExpense.trip_id == Trip.id)\
         .where(period)\
         .group_by(TripExpense.category)

        expenses_by_category: Dict[str, Decimal] = {}
        for row in await db.execute(by_category_query):
            expenses_by_category[row.category.value] = to_decimal(row.amount)

        return KPIAggregates(
            total_revenue=to_decimal(totals.revenue),
            total_broker_fees=to_decimal(totals.broker_fees),
            total_local_fees=to_decimal(totals.local_fees),
            total_driver_pay=to_decimal(totals.driver_pay),
            total_trip_expenses=to_decimal(totals.expenses),
            total_carrier_pay=to_decimal(totals.carrier_pay),
            total_miles=to_decimal(totals.miles),
            order_count=orders,
            truck_count=totals.trucks,
            completed_trip_count=completed,
            expenses_by_category=expenses_by_category,
        )

    @staticmethod
    async def get_kpi_report(db: AsyncSession, start: date, end: date) -> KPIReport:
        aggregates = await AnalyticsService.load_aggregates(db, start, end)
        kpis = calculate_kpis(aggregates)
        return KPIReport(
            period_start=start,
            period_end=end,
            aggregates=aggregates,
            kpis=kpis,
            expense_breakdown=calculate_expense_breakdown(expense_totals(aggregates)),
            formatted=format_kpis(kpis),
        )

    @staticmethod
    async def get_pnl_report(
        db: AsyncSession,
        start: date,
        end: date,
        fixed_expenses_by_category: Optional[Mapping[str, Decimal]] = None
    ) -> PnLReport:
        aggregates = await AnalyticsService.load_aggregates(db, start, end)
        statement = calculate_pnl(aggregates, fixed_expenses_by_category)
        return PnLReport(
            period_start=start,
            period_end=end,
            statement=statement,
            unit_metrics=calculate_unit_metrics(aggregates, statement),
        )
