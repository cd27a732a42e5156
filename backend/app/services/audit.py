"""
Audit logging service for dispatch state changes.

Audit rows are flushed, not committed: they belong to the caller's unit
of work and disappear with it on rollback.
"""

from typing import Optional, Dict, Any
from sqlalchemy.ext.asyncio import AsyncSession

from backend.app.models.audit_log import AuditLog


# Audit event constants
class AuditAction:
    """Standardized audit action constants."""
    # Order lifecycle
    ORDER_CREATED = "ORDER_CREATED"
    ORDER_ADVANCED = "ORDER_ADVANCED"
    ORDER_ROLLED_BACK = "ORDER_ROLLED_BACK"
    ORDER_CANCELLED = "ORDER_CANCELLED"

    # Assignment
    ORDER_ASSIGNED = "ORDER_ASSIGNED"
    ORDER_UNASSIGNED = "ORDER_UNASSIGNED"

    # Trip lifecycle
    TRIP_CREATED = "TRIP_CREATED"
    TRIP_UPDATED = "TRIP_UPDATED"
    TRIP_ADVANCED = "TRIP_ADVANCED"
    TRIP_ROLLED_BACK = "TRIP_ROLLED_BACK"
    TRIP_DELETED = "TRIP_DELETED"

    # Route and expenses
    ROUTE_SEQUENCE_SAVED = "ROUTE_SEQUENCE_SAVED"
    EXPENSE_SAVED = "EXPENSE_SAVED"
    EXPENSE_DELETED = "EXPENSE_DELETED"


async def log_event(
    db: AsyncSession,
    action: str,
    entity_type: str,
    entity_id: int,
    actor: Optional[str] = None,
    metadata: Optional[Dict[str, Any]] = None
) -> AuditLog:
    """
    Record a dispatch event in the audit log.

    Args:
        db: Database session
        action: Action being performed (use AuditAction constants)
        entity_type: "order", "trip" or "trip_expense"
        entity_id: ID of the changed entity
        actor: Who made the change, None for system actions
        metadata: Additional context as JSON

    Returns:
        Flushed AuditLog instance
    """
    audit_log = AuditLog(
        action=action,
        entity_type=entity_type,
        entity_id=entity_id,
        actor=actor,
        meta_data=metadata
    )

    db.add(audit_log)
    await db.flush()

    return audit_log
