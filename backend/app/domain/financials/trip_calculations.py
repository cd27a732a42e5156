"""
Trip financial calculations.

Pure functions: no side effects, no database calls. The service layer
feeds them the trip's orders, driver and expenses and persists the
rollups they return.
"""

from dataclasses import dataclass
from decimal import Decimal
from typing import Optional, Sequence

from backend.app.domain.financials.money import ZERO, HUNDRED, safe_ratio, to_decimal
from backend.app.models.fleet_enums import DriverPayType
from backend.app.schemas.financials import TripFinancials


@dataclass(frozen=True)
class OrderFinancials:
    """Financial fields of one order on the trip."""
    revenue: Decimal
    broker_fee: Decimal = ZERO
    local_fee: Decimal = ZERO
    distance_miles: Optional[Decimal] = None
    driver_pay_rate_override: Optional[Decimal] = None

    @property
    def clean_gross(self) -> Decimal:
        return self.revenue - self.broker_fee - self.local_fee

    @classmethod
    def from_order(cls, order) -> "OrderFinancials":
        return cls(
            revenue=to_decimal(order.revenue),
            broker_fee=to_decimal(order.broker_fee),
            local_fee=to_decimal(order.local_fee),
            distance_miles=None if order.distance_miles is None else to_decimal(order.distance_miles),
            driver_pay_rate_override=(
                None if order.driver_pay_rate_override is None else to_decimal(order.driver_pay_rate_override)
            ),
        )


@dataclass(frozen=True)
class DriverPayConfig:
    pay_type: DriverPayType
    pay_rate: Decimal

    @classmethod
    def from_driver(cls, driver) -> Optional["DriverPayConfig"]:
        if driver is None:
            return None
        return cls(pay_type=driver.pay_type, pay_rate=to_decimal(driver.pay_rate))


def order_margin(revenue, carrier_pay, broker_fee) -> Decimal:
    """What the brokerage keeps on one order."""
    return to_decimal(revenue) - to_decimal(carrier_pay) - to_decimal(broker_fee)


def total_miles(orders: Sequence[OrderFinancials]) -> Decimal:
    return sum((o.distance_miles or ZERO for o in orders), ZERO)


def calculate_driver_pay(orders: Sequence[OrderFinancials], driver: Optional[DriverPayConfig]) -> Decimal:
    """
    Driver pay for the trip's orders.

    Percentage models work per order on clean gross, and an order's
    driver_pay_rate_override beats the driver's own rate.
    """
    if driver is None:
        return ZERO

    if driver.pay_type == DriverPayType.PERCENTAGE_OF_CARRIER_PAY:
        return sum(
            (o.clean_gross * _rate_for(o, driver) / HUNDRED for o in orders),
            ZERO,
        )

    if driver.pay_type == DriverPayType.DISPATCH_FEE_PERCENT:
        return sum(
            (o.clean_gross - o.clean_gross * _rate_for(o, driver) / HUNDRED for o in orders),
            ZERO,
        )

    if driver.pay_type == DriverPayType.PER_CAR:
        return driver.pay_rate * len(orders)

    if driver.pay_type == DriverPayType.PER_MILE:
        return total_miles(orders) * driver.pay_rate

    return ZERO


def _rate_for(order: OrderFinancials, driver: DriverPayConfig) -> Decimal:
    if order.driver_pay_rate_override is not None:
        return order.driver_pay_rate_override
    return driver.pay_rate


def calculate_trip_financials(
    orders: Sequence[OrderFinancials],
    driver: Optional[DriverPayConfig],
    expense_amounts: Sequence[Decimal],
    carrier_pay: Decimal,
) -> TripFinancials:
    """Roll a trip's orders, driver pay model, expenses and carrier pay into one summary."""
    carrier_pay = to_decimal(carrier_pay)
    revenue = sum((o.revenue for o in orders), ZERO)
    broker_fees = sum((o.broker_fee for o in orders), ZERO)
    local_fees = sum((o.local_fee for o in orders), ZERO)
    expenses = sum((to_decimal(a) for a in expense_amounts), ZERO)
    driver_pay = calculate_driver_pay(orders, driver)

    net_profit = revenue - broker_fees - local_fees - driver_pay - expenses - carrier_pay
    clean_gross = revenue - broker_fees - local_fees
    miles = total_miles(orders)
    total_costs = broker_fees + local_fees + driver_pay + expenses + carrier_pay

    return TripFinancials(
        revenue=revenue,
        broker_fees=broker_fees,
        local_fees=local_fees,
        carrier_pay=carrier_pay,
        driver_pay=driver_pay,
        expenses=expenses,
        net_profit=net_profit,
        clean_gross=clean_gross,
        truck_gross=clean_gross - driver_pay,
        total_miles=miles,
        order_count=len(orders),
        rpm=safe_ratio(revenue, miles),
        cpm=safe_ratio(total_costs, miles),
        ppm=safe_ratio(net_profit, miles),
        appc=safe_ratio(revenue, len(orders)),
    )


def summarize_states(states: Sequence[Optional[str]]) -> Optional[str]:
    """Distinct states in first-seen order, comma separated."""
    distinct = []
    for state in states:
        if state and state not in distinct:
            distinct.append(state)
    return ", ".join(distinct) if distinct else None
