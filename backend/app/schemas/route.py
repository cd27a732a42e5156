"""
Route sequence schemas.

A route stop is a value object: one pickup or one delivery of an assigned
order. A trip's full sequence holds exactly one of each per order.
"""

from pydantic import BaseModel, ConfigDict, Field
from typing import List

from backend.app.models.trip_enums import RouteStopType


class RouteStop(BaseModel):
    """One stop in a trip's visiting order."""
    model_config = ConfigDict(frozen=True)

    order_id: int
    stop_type: RouteStopType


class RouteSequenceView(BaseModel):
    """
    Sequence shown for a trip.

    is_saved is False when no sequence was ever saved and the default was
    built. is_stale is True when the saved sequence covers a different set
    of orders than the ones currently assigned.
    """
    trip_id: int
    stops: List[RouteStop]
    is_saved: bool
    is_stale: bool
    warnings: List[str] = []


class RouteSequenceSave(BaseModel):
    """Full replacement of a trip's sequence."""
    stops: List[RouteStop]


class RouteStopMove(BaseModel):
    """Move the stop at from_index so it ends up at to_index."""
    stops: List[RouteStop]
    from_index: int = Field(..., ge=0)
    to_index: int = Field(..., ge=0)


class RouteSequenceSaveResponse(BaseModel):
    """Saved sequence plus non-blocking ordering warnings."""
    trip_id: int
    stops: List[RouteStop]
    warnings: List[str]
