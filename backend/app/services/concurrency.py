"""
Compare-and-swap status writes.

A status write only lands if the row still holds the status the change
was planned from. Anything else means another caller got there first.
"""

import logging
from enum import Enum
from typing import Any, Dict, Type

from sqlalchemy import update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from backend.app.core.exceptions import ConcurrentModificationError, InvalidStateError

logger = logging.getLogger(__name__)


async def compare_and_swap_status(
    db: AsyncSession,
    model: Type,
    entity_id: int,
    expected_status: Enum,
    values: Dict[str, Any],
    *criteria,
) -> None:
    """
    UPDATE model SET values WHERE id = entity_id AND status = expected_status.

    Extra criteria narrow the precondition further (e.g. trip_id IS NULL).
    Loaded instances are not synchronized; callers refresh what they return.

    Raises:
        ConcurrentModificationError: If no row matched
    """
    stmt = (
        update(model)
        .where(model.id == entity_id, model.status == expected_status, *criteria)
        .values(**values)
        .execution_options(synchronize_session=False)
    )
    result = await db.execute(stmt)

    if result.rowcount == 0:
        entity = model.__name__.lower()
        logger.warning(
            "Concurrent modification on %s id=%s (expected status %s)",
            entity, entity_id, expected_status.value
        )
        raise ConcurrentModificationError(entity, entity_id, expected_status.value)


async def flush_unique(db: AsyncSession, entity: str, field: str, value: Any) -> None:
    """
    Flush pending writes, reporting a unique-column clash on field.

    Call after reference checks, so the only integrity violation left is
    the duplicate value.

    Raises:
        InvalidStateError: If another row already holds value
    """
    try:
        await db.flush()
    except IntegrityError:
        logger.warning("Duplicate %s %s=%r", entity, field, value)
        raise InvalidStateError(
            f"{entity.capitalize()} {field} '{value}' is already in use",
            details={field: value}
        )
