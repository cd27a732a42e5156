"""
Financial schemas.

Inputs and outputs of the pure financial calculations. Metrics typed
Optional are None when their denominator is zero; None is rendered as
"N/A" by format_metric().
"""

from pydantic import BaseModel, Field
from datetime import date
from decimal import Decimal
from typing import Dict, List, Optional


class KPIAggregates(BaseModel):
    """Period totals pre-summed by the storage layer."""
    total_revenue: Decimal = Decimal("0")
    total_broker_fees: Decimal = Decimal("0")
    total_local_fees: Decimal = Decimal("0")
    total_driver_pay: Decimal = Decimal("0")
    total_trip_expenses: Decimal = Decimal("0")
    total_carrier_pay: Decimal = Decimal("0")
    total_miles: Decimal = Decimal("0")
    order_count: int = 0
    truck_count: int = 0
    completed_trip_count: int = 0
    expenses_by_category: Dict[str, Decimal] = Field(default_factory=dict)


class KPIResult(BaseModel):
    """Derived period KPIs."""
    net_profit: Decimal
    total_expenses: Decimal
    clean_gross: Decimal
    truck_gross: Decimal

    # Percentages
    operating_ratio: Optional[Decimal]
    gross_margin: Optional[Decimal]
    truck_gross_margin: Optional[Decimal]

    # Per-mile / per-order
    rpm: Optional[Decimal]
    cpm: Optional[Decimal]
    ppm: Optional[Decimal]
    appo: Optional[Decimal]

    # Fleet
    revenue_per_truck: Optional[Decimal]
    profit_per_truck: Optional[Decimal]
    miles_per_truck: Optional[Decimal]


class ExpenseBreakdownItem(BaseModel):
    category: str
    label: str
    amount: Decimal
    percentage: Decimal  # one decimal place


class TripFinancials(BaseModel):
    """Per-trip financial summary."""
    revenue: Decimal
    broker_fees: Decimal
    local_fees: Decimal
    carrier_pay: Decimal
    driver_pay: Decimal
    expenses: Decimal
    net_profit: Decimal
    clean_gross: Decimal
    truck_gross: Decimal
    total_miles: Decimal
    order_count: int
    rpm: Optional[Decimal]
    cpm: Optional[Decimal]
    ppm: Optional[Decimal]
    appc: Optional[Decimal]


class PnLStatement(BaseModel):
    """Profit and loss statement for a period."""
    revenue: Decimal
    broker_fees: Decimal
    local_fees: Decimal
    clean_gross: Decimal
    driver_pay: Decimal
    truck_gross: Decimal
    gross_profit_margin: Optional[Decimal]

    fixed_costs: Decimal
    fixed_costs_by_category: Dict[str, Decimal]
    direct_trip_costs: Decimal
    direct_costs_by_category: Dict[str, Decimal]
    carrier_pay: Decimal
    total_operating_expenses: Decimal

    net_profit_before_tax: Decimal
    net_margin: Optional[Decimal]
    break_even_revenue: Optional[Decimal]


class UnitMetrics(BaseModel):
    """Per-truck, per-trip and per-mile unit economics."""
    revenue_per_truck: Optional[Decimal]
    truck_gross_per_truck: Optional[Decimal]
    fixed_cost_per_truck: Optional[Decimal]
    net_profit_per_truck: Optional[Decimal]

    revenue_per_trip: Optional[Decimal]
    truck_gross_per_trip: Optional[Decimal]
    appc: Optional[Decimal]
    overhead_per_trip: Optional[Decimal]
    direct_cost_per_trip: Optional[Decimal]
    net_profit_per_trip: Optional[Decimal]

    rpm: Optional[Decimal]
    truck_gross_per_mile: Optional[Decimal]
    fixed_cost_per_mile: Optional[Decimal]
    fuel_cost_per_mile: Optional[Decimal]
    net_profit_per_mile: Optional[Decimal]

    trucks_in_service: int
    trip_count: int
    cars_hauled: int
    total_miles: Decimal


class KPIReport(BaseModel):
    """KPI endpoint response."""
    period_start: date
    period_end: date
    aggregates: KPIAggregates
    kpis: KPIResult
    expense_breakdown: List[ExpenseBreakdownItem]
    formatted: Dict[str, str] = Field(default_factory=dict)  # display strings, "N/A" for unavailable metrics


class PnLReport(BaseModel):
    """P&L endpoint response."""
    period_start: date
    period_end: date
    statement: PnLStatement
    unit_metrics: UnitMetrics
