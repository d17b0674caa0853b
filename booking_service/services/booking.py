"""
Booking orchestrator.

Materializes a booking as one store transaction: reservation insert, payment
insert and, for tourist experiences, the capacity decrement. If any step fails
the transaction rolls back, so a payment never exists without its reservation
and a reservation never survives a failed payment write. The confirmation
notification job is returned to the caller, which enqueues it only after the
client response has been sent.

Also hosts the administrative lifecycle operations (create, update, cancel,
confirm, delete) guarded by the reservation state machine.
"""

from __future__ import annotations

import time
from contextlib import contextmanager
from dataclasses import dataclass, field
from datetime import date, datetime
from decimal import Decimal
from enum import Enum
from typing import Any, Iterator, Optional, cast

import structlog
from sqlalchemy.engine import Connection, Engine
from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from booking_service.db.readers.experiences import get_remaining_capacity, lodging_exists
from booking_service.db.readers.reservations import (
    get_reservation,
    get_reservation_for_update,
    list_reservations,
)
from booking_service.db.writers.capacity import reserve_capacity
from booking_service.db.writers.payments import insert_payment, mark_payment_completed
from booking_service.db.writers.reservations import (
    delete_reservation,
    insert_reservation,
    update_reservation,
)
from booking_service.errors import (
    BookingError,
    NotFoundError,
    ProcessorDeclined,
    StoreWriteFailure,
    ValidationError,
)
from booking_service.metrics import purchase_duration, purchases_total, state_transitions
from booking_service.normalizers.payments import PaymentMethod, normalize_payment_method
from booking_service.services.notifications import NotificationJob, NotificationKind
from booking_service.services.state_machine import (
    PaymentState,
    ReservationState,
    assert_can_cancel,
    assert_can_confirm,
    assert_can_delete,
    editable_changes,
    initial_state,
    parse_state,
)
from booking_service.utils.datetime import utc_now

logger = structlog.get_logger(__name__)

APPROVED_PROCESSOR_STATUSES = frozenset({"approved", "accredited"})


class BookingKind(str, Enum):
    LODGING = "lodging"
    EXPERIENCE = "experience"


@dataclass(frozen=True)
class ProcessorResult:
    """Outcome reported by an external payment processor before purchase."""

    status: str
    transaction_id: Optional[str] = None

    @property
    def approved(self) -> bool:
        return self.status.strip().lower() in APPROVED_PROCESSOR_STATUSES


@dataclass(frozen=True)
class PurchaseRequest:
    requester_id: Optional[int]
    booking_kind: Optional[str]
    target_id: Optional[int]
    start_date: Optional[date]
    party_size: Optional[int]
    amount: Optional[Decimal]
    payer_email: Optional[str]
    end_date: Optional[date] = None
    payer_name: str = ""
    payment_method: Optional[str] = None
    payment_state: Optional[str] = None
    paid_at: Optional[datetime] = None
    reservation_code: Optional[str] = None
    target_snapshot: dict[str, Any] = field(default_factory=dict)
    processor_result: Optional[ProcessorResult] = None


@dataclass(frozen=True)
class PurchaseResult:
    reservation_id: int
    payment_id: int
    booking_kind: BookingKind
    reservation_state: ReservationState
    payment_state: PaymentState
    notification: NotificationJob

    def to_dict(self) -> dict[str, Any]:
        return {
            "reservation_id": self.reservation_id,
            "payment_id": self.payment_id,
            "booking_kind": self.booking_kind.value,
            "reservation_state": self.reservation_state.value,
            "payment_state": self.payment_state.value,
            "reservation_code": self.notification.payload.get("reservation_code"),
            "start_date": self.notification.payload.get("start_date"),
            "end_date": self.notification.payload.get("end_date"),
            "party_size": self.notification.payload.get("party_size"),
            "total": self.notification.payload.get("total"),
        }


@contextmanager
def store_transaction(engine: Engine, operation: str, **context: Any) -> Iterator[Connection]:
    """
    Open a transaction and translate store failures into StoreWriteFailure.

    Booking errors raised inside the block propagate unchanged; in both cases
    the transaction is rolled back.

    Args:
        engine: SQLAlchemy engine
        operation: Operation name used in log events
        **context: Extra key/values for the failure log event
    """
    try:
        with engine.begin() as conn:
            yield conn
    except BookingError:
        raise
    except IntegrityError as e:
        logger.error(f"{operation}_constraint_violation", error=str(e.orig), **context)
        raise StoreWriteFailure(f"{operation} violated a store constraint") from e
    except SQLAlchemyError as e:
        logger.exception(f"{operation}_store_failure", error=str(e), **context)
        raise StoreWriteFailure(f"{operation} failed in the store") from e


# =============================================================================
# Validation
# =============================================================================


def _require(value: Any, name: str) -> None:
    if value is None or value == "":
        raise ValidationError(f"Missing required field: {name}")


def _validate_dates(start: date, end: Optional[date], end_required: bool) -> None:
    if end_required and end is None:
        raise ValidationError("Missing required field: end_date")
    if end is not None and start >= end:
        raise ValidationError("end_date must be after start_date")


def _validate_party_size(party_size: int) -> None:
    if party_size < 1:
        raise ValidationError("Party size must be at least 1")


def _validate_amount(amount: Decimal, name: str) -> None:
    if amount < 0:
        raise ValidationError(f"{name} cannot be negative")


def _parse_kind(value: Any) -> BookingKind:
    try:
        return BookingKind(value)
    except ValueError:
        raise ValidationError(
            f"Invalid booking_kind '{value}'. Allowed: lodging, experience"
        ) from None


def _parse_payment_state(value: Optional[str]) -> PaymentState:
    if value is None:
        return PaymentState.PENDING
    try:
        return PaymentState(value)
    except ValueError:
        raise ValidationError(
            f"Invalid payment state '{value}'. Allowed: pending, completed, failed"
        ) from None


def validate_purchase(request: PurchaseRequest) -> BookingKind:
    """
    Check shape and business rules of a purchase before anything is written.

    Args:
        request: Purchase request

    Returns:
        BookingKind: Parsed booking kind

    Raises:
        ValidationError: On any missing or invalid field
    """
    for name in ("requester_id", "booking_kind", "target_id", "start_date", "party_size"):
        _require(getattr(request, name), name)
    _require(request.amount, "amount")
    _require(request.payer_email, "payer_email")

    kind = _parse_kind(request.booking_kind)

    _validate_dates(
        cast(date, request.start_date), request.end_date, end_required=kind is BookingKind.LODGING
    )
    _validate_party_size(cast(int, request.party_size))
    _validate_amount(cast(Decimal, request.amount), "amount")
    return kind


def _target_columns(kind: BookingKind, target_id: int) -> dict[str, Optional[int]]:
    if kind is BookingKind.LODGING:
        return {"lodging_id": target_id, "experience_id": None}
    return {"lodging_id": None, "experience_id": target_id}


def _ensure_target_exists(conn: Connection, kind: BookingKind, target_id: int) -> None:
    """Raise NotFoundError before any insert can trip the target foreign key."""
    if kind is BookingKind.LODGING:
        if not lodging_exists(conn, target_id):
            raise NotFoundError(f"Lodging {target_id} not found")
    elif get_remaining_capacity(conn, target_id) is None:
        raise NotFoundError(f"Experience {target_id} not found")


def _claim_target(conn: Connection, kind: BookingKind, target_id: int, party_size: int) -> None:
    """Check the target exists and, for experiences, take capacity."""
    _ensure_target_exists(conn, kind, target_id)
    if kind is BookingKind.EXPERIENCE:
        reserve_capacity(conn, target_id, party_size)


# =============================================================================
# Purchase
# =============================================================================


def purchase(request: PurchaseRequest, engine: Engine) -> PurchaseResult:
    """
    Create a reservation and its payment as one booking.

    Steps, in order: validate; reject declined processor results; insert the
    reservation; insert the payment; for experiences, reserve capacity; commit.
    Capacity is checked before commit, so an exhausted experience leaves
    nothing behind.

    Args:
        request: Purchase request
        engine: SQLAlchemy engine

    Returns:
        PurchaseResult: Ids, states and the notification job to enqueue

    Raises:
        ValidationError: Invalid input (nothing written)
        ProcessorDeclined: External processor did not approve (nothing written)
        NotFoundError: Lodging or experience does not exist (rolled back)
        CapacityExhausted: Not enough places left (rolled back)
        StoreWriteFailure: A store write failed (rolled back)
    """
    kind_label = str(request.booking_kind or "unknown")
    started = time.perf_counter()

    try:
        result = _purchase(request, engine)
    except BookingError as e:
        purchases_total.labels(booking_kind=kind_label, outcome=e.kind.value).inc()
        logger.warning(
            "purchase_rejected",
            booking_kind=kind_label,
            requester_id=request.requester_id,
            target_id=request.target_id,
            error_kind=e.kind.value,
            error=e.message,
        )
        raise

    elapsed = time.perf_counter() - started
    purchase_duration.labels(booking_kind=kind_label).observe(elapsed)
    purchases_total.labels(booking_kind=kind_label, outcome="success").inc()
    logger.info(
        "purchase_completed",
        booking_kind=kind_label,
        reservation_id=result.reservation_id,
        payment_id=result.payment_id,
        reservation_state=result.reservation_state.value,
        elapsed_ms=round(elapsed * 1000, 1),
    )
    return result


def _purchase(request: PurchaseRequest, engine: Engine) -> PurchaseResult:
    kind = validate_purchase(request)
    target_id = cast(int, request.target_id)
    party_size = cast(int, request.party_size)
    start_date = cast(date, request.start_date)
    amount = cast(Decimal, request.amount)

    processor = request.processor_result
    if processor is not None and not processor.approved:
        raise ProcessorDeclined(f"Payment not approved by processor (status={processor.status})")

    settled = processor is not None
    reservation_state = initial_state(settled_by_processor=settled)

    if settled:
        method = PaymentMethod.EXTERNAL_PROCESSOR
        payment_state = PaymentState.COMPLETED
        paid_at: Optional[datetime] = request.paid_at or utc_now()
    else:
        method = normalize_payment_method(request.payment_method)
        payment_state = _parse_payment_state(request.payment_state)
        paid_at = request.paid_at or (utc_now() if payment_state is PaymentState.COMPLETED else None)

    with store_transaction(
        engine, "purchase", requester_id=request.requester_id, target_id=target_id
    ) as conn:
        _ensure_target_exists(conn, kind, target_id)

        reservation_id = insert_reservation(
            conn,
            {
                "requester_id": request.requester_id,
                **_target_columns(kind, target_id),
                "start_date": start_date,
                "end_date": request.end_date,
                "party_size": party_size,
                "state": reservation_state.value,
                "total_price": amount,
            },
        )
        logger.debug("reservation_inserted", reservation_id=reservation_id)

        try:
            payment_id = insert_payment(
                conn,
                {
                    "reservation_id": reservation_id,
                    "amount": amount,
                    "method": method.value,
                    "external_reference": processor.transaction_id if processor else None,
                    "state": payment_state.value,
                    "paid_at": paid_at,
                },
            )
        except SQLAlchemyError:
            logger.error("payment_insert_failed_rolling_back", reservation_id=reservation_id)
            raise

        if kind is BookingKind.EXPERIENCE:
            reserve_capacity(conn, target_id, party_size)

    job = NotificationJob(
        recipient_email=str(request.payer_email),
        recipient_name=request.payer_name,
        kind=(
            NotificationKind.EXPERIENCE_CONFIRMATION
            if kind is BookingKind.EXPERIENCE
            else NotificationKind.LODGING_CONFIRMATION
        ),
        payload={
            "reservation_code": request.reservation_code or f"R-{reservation_id}",
            "reservation_id": reservation_id,
            "payment_id": payment_id,
            "start_date": start_date.isoformat(),
            "end_date": request.end_date.isoformat() if request.end_date else None,
            "party_size": party_size,
            "total": str(amount),
            "target_name": request.target_snapshot.get("name"),
            "target_location": request.target_snapshot.get("location"),
            "meeting_point": request.target_snapshot.get("meeting_point"),
            "time": request.target_snapshot.get("time"),
        },
    )

    return PurchaseResult(
        reservation_id=reservation_id,
        payment_id=payment_id,
        booking_kind=kind,
        reservation_state=reservation_state,
        payment_state=payment_state,
        notification=job,
    )


# =============================================================================
# Lifecycle operations
# =============================================================================


def list_bookings(engine: Engine) -> list[dict[str, Any]]:
    """Return all reservations with their payments, newest first."""
    with engine.connect() as conn:
        return list_reservations(conn)


def get_booking(engine: Engine, reservation_id: int) -> dict[str, Any]:
    """
    Return one reservation with its payment.

    Raises:
        NotFoundError: If the reservation does not exist
    """
    with engine.connect() as conn:
        record = get_reservation(conn, reservation_id)
    if record is None:
        raise NotFoundError(f"Reservation {reservation_id} not found")
    return record


def create_booking(engine: Engine, data: dict[str, Any]) -> dict[str, Any]:
    """
    Create a reservation directly, without a payment.

    Args:
        engine: SQLAlchemy engine
        data: requester_id, lodging_id or experience_id, start_date, end_date,
            party_size, total_price and an optional state (default pending)

    Returns:
        dict: Stored reservation

    Raises:
        ValidationError: Invalid input (nothing written)
        NotFoundError: Target does not exist
        CapacityExhausted: Experience cannot take the party
        StoreWriteFailure: Store write failed
    """
    for name in ("requester_id", "start_date", "party_size", "total_price"):
        _require(data.get(name), name)

    lodging_id = data.get("lodging_id")
    experience_id = data.get("experience_id")
    if (lodging_id is None) == (experience_id is None):
        raise ValidationError("Exactly one of lodging_id or experience_id is required")

    kind = BookingKind.LODGING if lodging_id is not None else BookingKind.EXPERIENCE
    target_id = int(lodging_id if lodging_id is not None else experience_id)

    _validate_dates(data["start_date"], data.get("end_date"), end_required=kind is BookingKind.LODGING)
    _validate_party_size(data["party_size"])
    _validate_amount(Decimal(str(data["total_price"])), "total_price")
    state = parse_state(data["state"]) if data.get("state") else ReservationState.PENDING

    with store_transaction(engine, "create_booking", requester_id=data["requester_id"]) as conn:
        _claim_target(conn, kind, target_id, data["party_size"])
        reservation_id = insert_reservation(
            conn,
            {
                "requester_id": data["requester_id"],
                **_target_columns(kind, target_id),
                "start_date": data["start_date"],
                "end_date": data.get("end_date"),
                "party_size": data["party_size"],
                "state": state.value,
                "total_price": data["total_price"],
            },
        )
        record = get_reservation(conn, reservation_id)

    logger.info("booking_created", reservation_id=reservation_id, state=state.value)
    return cast(dict[str, Any], record)


def _load_for_update(conn: Connection, reservation_id: int) -> dict[str, Any]:
    current = get_reservation_for_update(conn, reservation_id)
    if current is None:
        raise NotFoundError(f"Reservation {reservation_id} not found")
    return current


def update_booking(engine: Engine, reservation_id: int, fields: dict[str, Any]) -> dict[str, Any]:
    """
    Update the editable fields of a reservation.

    Only start_date, end_date, party_size and state can change. Field checks
    run before the store is touched; the date order is then checked against
    the stored values.

    Raises:
        ValidationError: No editable field, invalid state, party size or date order
        NotFoundError: If the reservation does not exist
        StoreWriteFailure: Store write failed
    """
    changes = editable_changes(fields)

    with store_transaction(engine, "update_booking", reservation_id=reservation_id) as conn:
        current = _load_for_update(conn, reservation_id)

        start = changes.get("start_date", current["start_date"])
        end = changes.get("end_date", current["end_date"])
        if end is not None and start >= end:
            raise ValidationError("end_date must be after start_date")

        update_reservation(conn, reservation_id, changes)
        record = get_reservation(conn, reservation_id)

    if "state" in changes:
        state_transitions.labels(operation="update", to_state=changes["state"]).inc()
    logger.info("booking_updated", reservation_id=reservation_id, fields=sorted(changes))
    return cast(dict[str, Any], record)


def cancel_booking(
    engine: Engine, reservation_id: int, reason: Optional[str] = None
) -> dict[str, Any]:
    """
    Cancel a pending or confirmed reservation.

    Args:
        engine: SQLAlchemy engine
        reservation_id: Reservation to cancel
        reason: Optional free text kept for audit

    Raises:
        NotFoundError: If the reservation does not exist
        StateGuardError: If it is already cancelled or completed
    """
    with store_transaction(engine, "cancel_booking", reservation_id=reservation_id) as conn:
        current = _load_for_update(conn, reservation_id)
        assert_can_cancel(current["state"])

        update_reservation(
            conn,
            reservation_id,
            {"state": ReservationState.CANCELLED.value, "cancellation_reason": reason},
        )
        record = get_reservation(conn, reservation_id)

    state_transitions.labels(operation="cancel", to_state=ReservationState.CANCELLED.value).inc()
    logger.info(
        "booking_cancelled",
        reservation_id=reservation_id,
        previous_state=current["state"],
        reason=reason or "unspecified",
    )
    return cast(dict[str, Any], record)


def confirm_booking(engine: Engine, reservation_id: int) -> dict[str, Any]:
    """
    Confirm a pending reservation and settle its payment.

    Raises:
        NotFoundError: If the reservation does not exist
        StateGuardError: If it is not pending
    """
    with store_transaction(engine, "confirm_booking", reservation_id=reservation_id) as conn:
        current = _load_for_update(conn, reservation_id)
        assert_can_confirm(current["state"])

        update_reservation(conn, reservation_id, {"state": ReservationState.CONFIRMED.value})
        mark_payment_completed(conn, reservation_id, utc_now())
        record = get_reservation(conn, reservation_id)

    state_transitions.labels(operation="confirm", to_state=ReservationState.CONFIRMED.value).inc()
    logger.info("booking_confirmed", reservation_id=reservation_id)
    return cast(dict[str, Any], record)


def delete_booking(engine: Engine, reservation_id: int) -> int:
    """
    Permanently delete a pending or cancelled reservation and its payment.

    Returns:
        int: Deleted reservation id

    Raises:
        NotFoundError: If the reservation does not exist
        StateGuardError: If it is confirmed or completed
    """
    with store_transaction(engine, "delete_booking", reservation_id=reservation_id) as conn:
        current = _load_for_update(conn, reservation_id)
        assert_can_delete(current["state"])
        delete_reservation(conn, reservation_id)

    logger.info("booking_deleted", reservation_id=reservation_id, state=current["state"])
    return reservation_id
