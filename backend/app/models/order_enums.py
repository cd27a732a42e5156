"""
Order-related enumerations.
"""

import enum


class OrderStatus(str, enum.Enum):
    """
    Order status enumeration.

    Status flow:
        NEW → ASSIGNED → PICKED_UP → DELIVERED → INVOICED → PAID
        NEW, ASSIGNED and PICKED_UP can also move to CANCELLED
    """
    NEW = "new"
    ASSIGNED = "assigned"
    PICKED_UP = "picked_up"
    DELIVERED = "delivered"
    INVOICED = "invoiced"
    PAID = "paid"
    CANCELLED = "cancelled"
