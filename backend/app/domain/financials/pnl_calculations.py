"""
P&L calculation engine.

Revenue waterfall, operating expenses and bottom line for a period,
plus per-truck, per-trip and per-mile unit economics.
"""

from decimal import Decimal
from typing import Mapping, Optional

from backend.app.domain.financials.money import ZERO, percentage, safe_ratio, to_decimal
from backend.app.models.trip_enums import ExpenseCategory
from backend.app.schemas.financials import KPIAggregates, PnLStatement, UnitMetrics


def calculate_pnl(
    aggregates: KPIAggregates,
    fixed_expenses_by_category: Optional[Mapping[str, Decimal]] = None,
) -> PnLStatement:
    revenue = to_decimal(aggregates.total_revenue)
    broker_fees = to_decimal(aggregates.total_broker_fees)
    local_fees = to_decimal(aggregates.total_local_fees)
    driver_pay = to_decimal(aggregates.total_driver_pay)
    carrier_pay = to_decimal(aggregates.total_carrier_pay)

    clean_gross = revenue - broker_fees - local_fees
    truck_gross = clean_gross - driver_pay

    fixed_by_category = {k: to_decimal(v) for k, v in (fixed_expenses_by_category or {}).items()}
    fixed_costs = sum(fixed_by_category.values(), ZERO)

    direct_by_category = {
        category.value: to_decimal(aggregates.expenses_by_category.get(category.value))
        for category in ExpenseCategory
    }
    direct_trip_costs = sum(direct_by_category.values(), ZERO)

    total_operating_expenses = fixed_costs + direct_trip_costs + carrier_pay
    net_profit_before_tax = truck_gross - total_operating_expenses

    # Break-even: revenue at which truck gross covers the fixed costs
    margin_ratio = safe_ratio(truck_gross, revenue)
    break_even = fixed_costs / margin_ratio if margin_ratio is not None and margin_ratio > 0 else None

    return PnLStatement(
        revenue=revenue,
        broker_fees=broker_fees,
        local_fees=local_fees,
        clean_gross=clean_gross,
        driver_pay=driver_pay,
        truck_gross=truck_gross,
        gross_profit_margin=percentage(truck_gross, revenue),
        fixed_costs=fixed_costs,
        fixed_costs_by_category=fixed_by_category,
        direct_trip_costs=direct_trip_costs,
        direct_costs_by_category=direct_by_category,
        carrier_pay=carrier_pay,
        total_operating_expenses=total_operating_expenses,
        net_profit_before_tax=net_profit_before_tax,
        net_margin=percentage(net_profit_before_tax, revenue),
        break_even_revenue=break_even,
    )


def calculate_unit_metrics(aggregates: KPIAggregates, pnl: PnLStatement) -> UnitMetrics:
    trucks = aggregates.truck_count
    trips = aggregates.completed_trip_count
    cars = aggregates.order_count
    miles = to_decimal(aggregates.total_miles)
    fuel = pnl.direct_costs_by_category.get(ExpenseCategory.FUEL.value, ZERO)

    return UnitMetrics(
        revenue_per_truck=safe_ratio(pnl.revenue, trucks),
        truck_gross_per_truck=safe_ratio(pnl.truck_gross, trucks),
        fixed_cost_per_truck=safe_ratio(pnl.fixed_costs, trucks),
        net_profit_per_truck=safe_ratio(pnl.net_profit_before_tax, trucks),
        revenue_per_trip=safe_ratio(pnl.revenue, trips),
        truck_gross_per_trip=safe_ratio(pnl.truck_gross, trips),
        appc=safe_ratio(pnl.revenue, cars),
        overhead_per_trip=safe_ratio(pnl.fixed_costs, trips),
        direct_cost_per_trip=safe_ratio(pnl.direct_trip_costs, trips),
        net_profit_per_trip=safe_ratio(pnl.net_profit_before_tax, trips),
        rpm=safe_ratio(pnl.revenue, miles),
        truck_gross_per_mile=safe_ratio(pnl.truck_gross, miles),
        fixed_cost_per_mile=safe_ratio(pnl.fixed_costs, miles),
        fuel_cost_per_mile=safe_ratio(fuel, miles),
        net_profit_per_mile=safe_ratio(pnl.net_profit_before_tax, miles),
        trucks_in_service=trucks,
        trip_count=trips,
        cars_hauled=cars,
        total_miles=miles,
    )
