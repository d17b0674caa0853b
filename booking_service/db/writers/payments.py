from datetime import datetime
from typing import Any

from sqlalchemy import insert, update
from sqlalchemy.engine import Connection

from booking_service.metrics import db_operations
from booking_service.models.payments import Payment


def insert_payment(conn: Connection, data: dict[str, Any]) -> int:
    """
    Insert the payment row of a reservation and return its id.

    Args:
        conn: Connection inside the same transaction as the reservation insert
        data: Payment columns (reservation_id, amount, method, state,
            external_reference, paid_at)

    Returns:
        int: New payment id
    """
    result = conn.execute(insert(Payment).values(data))
    db_operations.labels(operation="insert", table="payments").inc()

    return int(result.inserted_primary_key[0])


def mark_payment_completed(conn: Connection, reservation_id: int, paid_at: datetime) -> None:
    """
    Mark the payment of a reservation as completed.

    Args:
        conn (Connection): SQLAlchemy DB connection.
        reservation_id (int): Owning reservation ID.
        paid_at (datetime): Settlement timestamp.
    """
    stmt = (
        update(Payment)
        .where(Payment.reservation_id == reservation_id)
        .values(state="completed", paid_at=paid_at)
    )

    conn.execute(stmt)
    db_operations.labels(operation="update", table="payments").inc()
