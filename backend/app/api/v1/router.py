"""
API v1 Router.

Aggregates all v1 API endpoints.
"""

from fastapi import APIRouter
from backend.app.api.v1.endpoints import (
    orders, trips, route_sequence, trip_expenses, financials
)

router = APIRouter()

# Orders: lifecycle and assignment
router.include_router(orders.router)

# Trips: lifecycle with order cascade, capacity, per-trip financials
router.include_router(trips.router)
router.include_router(route_sequence.router)
router.include_router(trip_expenses.router)

# Period reporting
router.include_router(financials.router)
