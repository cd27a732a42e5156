"""
KPI calculation engine.

Pure functions over a KPIAggregates record the storage layer has already
summed for a period. Nothing here queries the database.
"""

from decimal import Decimal
from typing import Dict, List, Mapping

from backend.app.domain.financials.money import ZERO, format_metric, percentage, round_to, safe_ratio, to_decimal
from backend.app.models.trip_enums import ExpenseCategory
from backend.app.schemas.financials import ExpenseBreakdownItem, KPIAggregates, KPIResult


# Fixed display order; ties in amount keep this order after sorting
EXPENSE_BREAKDOWN_LABELS: Dict[str, str] = {
    "driver_pay": "Driver Pay",
    "broker_fees": "Broker Fees",
    "carrier_pay": "Carrier Pay",
    ExpenseCategory.FUEL.value: "Fuel",
    ExpenseCategory.TOLLS.value: "Tolls",
    ExpenseCategory.REPAIRS.value: "Repairs",
    ExpenseCategory.LODGING.value: "Lodging",
    ExpenseCategory.MISC.value: "Misc",
}


def calculate_kpis(aggregates: KPIAggregates) -> KPIResult:
    """
    Derive the period KPIs.

    net_profit leaves carrier_pay out while total_expenses includes it, so
    a carrier-hauled load shows up in the operating ratio and cost per mile
    without being counted against the fleet's own profit.
    """
    revenue = to_decimal(aggregates.total_revenue)
    broker_fees = to_decimal(aggregates.total_broker_fees)
    local_fees = to_decimal(aggregates.total_local_fees)
    driver_pay = to_decimal(aggregates.total_driver_pay)
    trip_expenses = to_decimal(aggregates.total_trip_expenses)
    carrier_pay = to_decimal(aggregates.total_carrier_pay)
    miles = to_decimal(aggregates.total_miles)
    trucks = aggregates.truck_count

    net_profit = revenue - broker_fees - local_fees - driver_pay - trip_expenses
    total_expenses = broker_fees + local_fees + driver_pay + trip_expenses + carrier_pay
    clean_gross = revenue - broker_fees - local_fees
    truck_gross = clean_gross - driver_pay

    return KPIResult(
        net_profit=net_profit,
        total_expenses=total_expenses,
        clean_gross=clean_gross,
        truck_gross=truck_gross,
        operating_ratio=percentage(total_expenses, revenue),
        gross_margin=percentage(net_profit, revenue),
        truck_gross_margin=percentage(truck_gross, revenue),
        rpm=safe_ratio(revenue, miles),
        cpm=safe_ratio(total_expenses, miles),
        ppm=safe_ratio(net_profit, miles),
        appo=safe_ratio(revenue, aggregates.order_count),
        revenue_per_truck=safe_ratio(revenue, trucks),
        profit_per_truck=safe_ratio(net_profit, trucks),
        miles_per_truck=safe_ratio(miles, trucks) if miles > 0 else None,
    )


def expense_totals(aggregates: KPIAggregates) -> Dict[str, Decimal]:
    """Per-category cost totals in breakdown order."""
    by_category = {k: to_decimal(v) for k, v in aggregates.expenses_by_category.items()}
    totals = {
        "driver_pay": to_decimal(aggregates.total_driver_pay),
        "broker_fees": to_decimal(aggregates.total_broker_fees),
        "carrier_pay": to_decimal(aggregates.total_carrier_pay),
    }
    for category in ExpenseCategory:
        totals[category.value] = by_category.get(category.value, ZERO)
    return totals


def calculate_expense_breakdown(amounts: Mapping[str, Decimal]) -> List[ExpenseBreakdownItem]:
    """
    Share of each cost bucket in the total.

    Zero buckets are dropped, the rest sorted by amount descending.
    Percentages are rounded half-up to one decimal.
    """
    amounts = {k: to_decimal(amounts.get(k)) for k in EXPENSE_BREAKDOWN_LABELS}
    total = sum(amounts.values(), ZERO)

    items = []
    for category, label in EXPENSE_BREAKDOWN_LABELS.items():
        amount = amounts[category]
        if amount <= 0:
            continue
        share = percentage(amount, total)
        items.append(
            ExpenseBreakdownItem(
                category=category,
                label=label,
                amount=amount,
                percentage=round_to(share, 1) if share is not None else ZERO,
            )
        )

    return sorted(items, key=lambda item: item.amount, reverse=True)


PERCENT_KPIS = ("operating_ratio", "gross_margin", "truck_gross_margin")


def format_kpis(kpis: KPIResult) -> Dict[str, str]:
    """Display strings for every KPI; percentages get one decimal and a % sign."""
    formatted = {}
    for name, value in kpis.model_dump().items():
        if name in PERCENT_KPIS:
            formatted[name] = format_metric(value, 1, "%")
        else:
            formatted[name] = format_metric(value)
    return formatted
