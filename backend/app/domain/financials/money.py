"""
Decimal helpers shared by the financial calculations.

A metric whose denominator is zero is not available and is returned as
None, never as NaN or infinity.
"""

from decimal import Decimal, ROUND_HALF_UP
from typing import Optional

ZERO = Decimal("0")
HUNDRED = Decimal("100")
NOT_AVAILABLE = "N/A"


def to_decimal(value) -> Decimal:
    if value is None:
        return ZERO
    if isinstance(value, Decimal):
        return value
    return Decimal(str(value))


def safe_ratio(numerator: Decimal, denominator) -> Optional[Decimal]:
    denominator = to_decimal(denominator)
    if denominator == 0:
        return None
    return to_decimal(numerator) / denominator


def percentage(numerator: Decimal, denominator) -> Optional[Decimal]:
    ratio = safe_ratio(numerator, denominator)
    return None if ratio is None else ratio * HUNDRED


def round_to(value: Decimal, places: int = 2) -> Decimal:
    return value.quantize(Decimal(1).scaleb(-places), rounding=ROUND_HALF_UP)


def format_metric(value: Optional[Decimal], places: int = 2, suffix: str = "") -> str:
    """Display form of a metric: rounded value, or "N/A"."""
    if value is None:
        return NOT_AVAILABLE
    return f"{round_to(value, places)}{suffix}"
