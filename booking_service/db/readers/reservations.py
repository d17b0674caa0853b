from typing import Any, Optional

from sqlalchemy import select
from sqlalchemy.engine import Connection

from booking_service.models.payments import Payment
from booking_service.models.reservations import Reservation

PAYMENT_COLUMNS = (
    Payment.id.label("payment_id"),
    Payment.amount.label("payment_amount"),
    Payment.method.label("payment_method"),
    Payment.external_reference.label("payment_external_reference"),
    Payment.state.label("payment_state"),
    Payment.paid_at.label("payment_paid_at"),
)


def _with_payment(row: Any) -> dict[str, Any]:
    """Fold the payment_* columns of a joined row into a nested payment dict."""
    record = dict(row)
    payment = {
        key.removeprefix("payment_"): record.pop(key)
        for key in list(record)
        if key.startswith("payment_")
    }
    record["payment"] = {"id": payment.pop("id"), **payment} if payment["id"] else None
    return record


def _reservation_query() -> Any:
    return select(Reservation.__table__, *PAYMENT_COLUMNS).outerjoin(
        Payment, Payment.reservation_id == Reservation.id
    )


def get_reservation(conn: Connection, reservation_id: int) -> Optional[dict[str, Any]]:
    """
    Fetch a reservation together with its payment, if any.

    Args:
        conn (Connection): An active SQLAlchemy database connection.
        reservation_id (int): Reservation ID.

    Returns:
        Optional[dict]: Reservation columns plus a nested "payment" dict, or None
    """
    row = (
        conn.execute(_reservation_query().where(Reservation.id == reservation_id))
        .mappings()
        .fetchone()
    )
    return _with_payment(row) if row else None


def list_reservations(conn: Connection) -> list[dict[str, Any]]:
    """
    Fetch all reservations with their payments, newest first.

    Args:
        conn (Connection): An active SQLAlchemy database connection.

    Returns:
        list[dict]: Reservation records ordered by id descending
    """
    rows = conn.execute(_reservation_query().order_by(Reservation.id.desc())).mappings()
    return [_with_payment(row) for row in rows]


def get_reservation_for_update(conn: Connection, reservation_id: int) -> Optional[dict[str, Any]]:
    """
    Fetch the reservation columns needed by state guards, locking the row.

    The row lock (SELECT ... FOR UPDATE) keeps a concurrent cancel/update from
    slipping in between the guard and the write. Dialects without row locks
    (SQLite) ignore it.

    Args:
        conn (Connection): Connection inside an open transaction.
        reservation_id (int): Reservation ID.

    Returns:
        Optional[dict]: id, state, start_date, end_date, or None if not found
    """
    row = (
        conn.execute(
            select(
                Reservation.id,
                Reservation.state,
                Reservation.start_date,
                Reservation.end_date,
            )
            .where(Reservation.id == reservation_id)
            .with_for_update()
        )
        .mappings()
        .fetchone()
    )
    return dict(row) if row else None
