"""
Capacity ledger writes for tourist experiences.

The remaining-capacity check and the decrement happen in one conditional
UPDATE so that two concurrent bookings of the same experience cannot both
read the same remaining value and oversell it:

    UPDATE experiences
    SET remaining_capacity = remaining_capacity - :n
    WHERE id = :id AND remaining_capacity >= :n
    RETURNING remaining_capacity

No returned row means either the experience does not exist or it cannot take
:n more participants; a follow-up read tells the two apart.
"""

import structlog
from sqlalchemy import update
from sqlalchemy.engine import Connection

from booking_service.db.readers.experiences import get_remaining_capacity
from booking_service.errors import CapacityExhausted, NotFoundError, ValidationError
from booking_service.metrics import capacity_rejections, db_operations
from booking_service.models.experiences import Experience

logger = structlog.get_logger(__name__)


def reserve_capacity(conn: Connection, experience_id: int, count: int) -> int:
    """
    Atomically take `count` places from an experience's remaining capacity.

    Args:
        conn: Connection inside the purchase transaction
        experience_id: Experience to book
        count: Number of participants

    Returns:
        int: Remaining capacity after the decrement

    Raises:
        ValidationError: If count is below 1
        NotFoundError: If the experience does not exist
        CapacityExhausted: If fewer than `count` places remain (nothing is written)
    """
    if count < 1:
        raise ValidationError("Party size must be at least 1")

    stmt = (
        update(Experience)
        .where(Experience.id == experience_id)
        .where(Experience.remaining_capacity >= count)
        .values(remaining_capacity=Experience.remaining_capacity - count)
        .returning(Experience.remaining_capacity)
    )

    row = conn.execute(stmt).fetchone()
    db_operations.labels(operation="update", table="experiences").inc()

    if row is not None:
        logger.info(
            "capacity_reserved",
            experience_id=experience_id,
            reserved=count,
            remaining=row[0],
        )
        return int(row[0])

    remaining = get_remaining_capacity(conn, experience_id)
    if remaining is None:
        raise NotFoundError(f"Experience {experience_id} not found")

    capacity_rejections.inc()
    logger.warning(
        "capacity_exhausted",
        experience_id=experience_id,
        requested=count,
        remaining=remaining,
    )
    raise CapacityExhausted(experience_id, count)
