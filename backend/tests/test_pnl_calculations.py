"""
Unit tests for the P&L statement and unit metrics.
"""

from decimal import Decimal

from backend.app.domain.financials.money import round_to
from backend.app.domain.financials.pnl_calculations import calculate_pnl, calculate_unit_metrics
from backend.app.schemas.financials import KPIAggregates

AGGREGATES = KPIAggregates(
    total_revenue=Decimal("10000"),
    total_broker_fees=Decimal("1000"),
    total_local_fees=Decimal("200"),
    total_driver_pay=Decimal("2500"),
    total_trip_expenses=Decimal("800"),
    total_carrier_pay=Decimal("1500"),
    total_miles=Decimal("2000"),
    order_count=8,
    truck_count=2,
    completed_trip_count=4,
    expenses_by_category={"fuel": Decimal("600"), "tolls": Decimal("200")},
)


def test_revenue_waterfall_and_bottom_line():
    pnl = calculate_pnl(AGGREGATES, {"insurance": Decimal("1000")})

    assert pnl.clean_gross == Decimal("8800")
    assert pnl.truck_gross == Decimal("6300")
    assert pnl.gross_profit_margin == Decimal("63")
    assert pnl.direct_trip_costs == Decimal("800")
    assert pnl.direct_costs_by_category["repairs"] == Decimal("0")
    assert pnl.total_operating_expenses == Decimal("3300")
    assert pnl.net_profit_before_tax == Decimal("3000")
    assert pnl.net_margin == Decimal("30")
    assert round_to(pnl.break_even_revenue) == Decimal("1587.30")


def test_unit_metrics():
    pnl = calculate_pnl(AGGREGATES, {"insurance": Decimal("1000")})
    units = calculate_unit_metrics(AGGREGATES, pnl)

    assert units.revenue_per_truck == Decimal("5000")
    assert units.net_profit_per_truck == Decimal("1500")
    assert units.revenue_per_trip == Decimal("2500")
    assert units.overhead_per_trip == Decimal("250")
    assert units.appc == Decimal("1250")
    assert units.fuel_cost_per_mile == Decimal("0.3")
    assert units.cars_hauled == 8


def test_no_revenue_no_margins():
    pnl = calculate_pnl(KPIAggregates(), {"rent": Decimal("500")})
    units = calculate_unit_metrics(KPIAggregates(), pnl)

    assert pnl.gross_profit_margin is None
    assert pnl.net_margin is None
    assert pnl.break_even_revenue is None
    assert pnl.net_profit_before_tax == Decimal("-500")
    assert units.rpm is None
    assert units.revenue_per_truck is None
