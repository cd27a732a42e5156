"""
Trip-related enumerations.
"""

import enum


class TripStatus(str, enum.Enum):
    """Trip status enumeration (linear, no cancellation)."""
    PLANNED = "planned"  # Truck and driver chosen, orders being loaded onto the plan
    IN_PROGRESS = "in_progress"  # Truck has left, vehicles picked up
    AT_TERMINAL = "at_terminal"  # Arrived at the terminal, local hand-offs pending
    COMPLETED = "completed"  # All vehicles delivered


class RouteStopType(str, enum.Enum):
    """Route stop type enumeration."""
    PICKUP = "pickup"
    DELIVERY = "delivery"


class ExpenseCategory(str, enum.Enum):
    """Trip expense category enumeration."""
    FUEL = "fuel"
    TOLLS = "tolls"
    REPAIRS = "repairs"
    LODGING = "lodging"
    MISC = "misc"  # Requires a custom label


class LocalDriveStatus(str, enum.Enum):
    """Local drive status enumeration."""
    PENDING = "pending"
    ASSIGNED = "assigned"
    COMPLETED = "completed"
