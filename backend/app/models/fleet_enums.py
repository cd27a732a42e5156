"""
Fleet enumerations: trucks and drivers.
"""

import enum


class TruckType(str, enum.Enum):
    """Truck type enumeration. Capacity is derived from the type."""
    SEVEN_CAR = "7_car"
    EIGHT_CAR = "8_car"
    NINE_CAR = "9_car"
    FLATBED = "flatbed"
    ENCLOSED = "enclosed"


class DriverType(str, enum.Enum):
    """Driver employment type."""
    COMPANY = "company"
    OWNER_OPERATOR = "owner_operator"


class DriverPayType(str, enum.Enum):
    """
    Driver pay model.

    PERCENTAGE_OF_CARRIER_PAY: rate % of each order's clean gross
    DISPATCH_FEE_PERCENT: driver keeps clean gross minus a rate % dispatch fee
    PER_MILE: rate × total miles
    PER_CAR: rate × number of orders
    """
    PERCENTAGE_OF_CARRIER_PAY = "percentage_of_carrier_pay"
    DISPATCH_FEE_PERCENT = "dispatch_fee_percent"
    PER_MILE = "per_mile"
    PER_CAR = "per_car"
