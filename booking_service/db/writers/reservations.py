import json
from typing import Any

import structlog
from sqlalchemy import delete, insert, update
from sqlalchemy.engine import Connection

from booking_service.config import DEBUG
from booking_service.metrics import db_operations
from booking_service.models.payments import Payment
from booking_service.models.reservations import Reservation
from booking_service.utils.datetime import utc_now

logger = structlog.get_logger(__name__)


def insert_reservation(conn: Connection, data: dict[str, Any]) -> int:
    """
    Insert a reservation row and return its store-generated id.

    Args:
        conn: Connection inside an open transaction
        data: Reservation columns (requester_id, lodging_id or experience_id,
            start_date, end_date, party_size, state, total_price)

    Returns:
        int: New reservation id
    """
    now = utc_now()
    row = {**data, "created_at": now, "updated_at": now}

    if DEBUG:
        logger.debug("reservation_insert_sample", row=json.dumps(row, default=str))

    result = conn.execute(insert(Reservation).values(row))
    db_operations.labels(operation="insert", table="reservations").inc()

    return int(result.inserted_primary_key[0])


def update_reservation(conn: Connection, reservation_id: int, data: dict[str, Any]) -> None:
    """
    Update editable fields of an existing reservation.

    Args:
        conn (Connection): SQLAlchemy DB connection.
        reservation_id (int): Reservation ID.
        data (dict): Fields to update (only non-None values)
    """
    stmt = (
        update(Reservation)
        .where(Reservation.id == reservation_id)
        .values(**data, updated_at=utc_now())
    )

    conn.execute(stmt)
    db_operations.labels(operation="update", table="reservations").inc()


def delete_reservation(conn: Connection, reservation_id: int) -> None:
    """
    Permanently delete a reservation and its payment.

    The payment row is removed explicitly so the delete does not depend on
    the dialect enforcing ON DELETE CASCADE.

    Args:
        conn (Connection): SQLAlchemy DB connection.
        reservation_id (int): Reservation ID.
    """
    conn.execute(delete(Payment).where(Payment.reservation_id == reservation_id))
    conn.execute(delete(Reservation).where(Reservation.id == reservation_id))
    db_operations.labels(operation="delete", table="reservations").inc()
