"""
Reservation state machine.

Reservations start as pending (or confirmed when the payment was already
settled by an external processor) and end as cancelled or completed. The
guards here are pure: they inspect the current state and raise before the
store is touched.
"""

from __future__ import annotations

from enum import Enum
from typing import Any

from booking_service.errors import StateGuardError, ValidationError


class ReservationState(str, Enum):
    PENDING = "pending"
    CONFIRMED = "confirmed"
    CANCELLED = "cancelled"
    COMPLETED = "completed"


class PaymentState(str, Enum):
    PENDING = "pending"
    COMPLETED = "completed"
    FAILED = "failed"


TERMINAL_STATES = frozenset({ReservationState.CANCELLED, ReservationState.COMPLETED})
DELETABLE_STATES = frozenset({ReservationState.PENDING, ReservationState.CANCELLED})
EDITABLE_FIELDS = ("start_date", "end_date", "party_size", "state")


def parse_state(value: Any) -> ReservationState:
    """
    Parse one of the four reservation states.

    Args:
        value: Raw state value from a request

    Returns:
        ReservationState: Parsed state

    Raises:
        ValidationError: If value is not one of the enumerated states
    """
    try:
        return ReservationState(value)
    except ValueError:
        allowed = ", ".join(state.value for state in ReservationState)
        raise ValidationError(f"Invalid state '{value}'. Allowed states: {allowed}") from None


def initial_state(settled_by_processor: bool) -> ReservationState:
    """Confirmed when a processor already settled the payment, pending otherwise."""
    return ReservationState.CONFIRMED if settled_by_processor else ReservationState.PENDING


def assert_can_cancel(current: str) -> None:
    """
    Guard the pending|confirmed -> cancelled transition.

    Raises:
        StateGuardError: If the reservation is already cancelled or completed
    """
    state = ReservationState(current)
    if state is ReservationState.CANCELLED:
        raise StateGuardError("Reservation is already cancelled")
    if state is ReservationState.COMPLETED:
        raise StateGuardError("Cannot cancel a completed reservation")


def assert_can_confirm(current: str) -> None:
    """
    Guard the explicit pending -> confirmed step.

    Raises:
        StateGuardError: If the reservation is not pending
    """
    state = ReservationState(current)
    if state is not ReservationState.PENDING:
        raise StateGuardError(f"Only pending reservations can be confirmed (current: {state.value})")


def assert_can_delete(current: str) -> None:
    """
    Guard hard deletion of a reservation.

    Raises:
        StateGuardError: If the reservation is confirmed or completed
    """
    if ReservationState(current) not in DELETABLE_STATES:
        raise StateGuardError(
            "Cannot delete a confirmed or completed reservation. Cancel it first."
        )


def editable_changes(fields: dict[str, Any]) -> dict[str, Any]:
    """
    Keep only supplied editable fields and validate them.

    Requester, target and total price are immutable after creation and are
    ignored here.

    Args:
        fields: Partial update payload

    Returns:
        dict: Editable fields with non-None values, state normalised to its value

    Raises:
        ValidationError: If no editable field is supplied, the state is not one
            of the four values, or party_size is below 1
    """
    changes = {k: v for k, v in fields.items() if k in EDITABLE_FIELDS and v is not None}

    if not changes:
        raise ValidationError(
            "At least one field is required: start_date, end_date, party_size, state"
        )

    if "state" in changes:
        changes["state"] = parse_state(changes["state"]).value

    if "party_size" in changes and changes["party_size"] < 1:
        raise ValidationError("Party size must be at least 1")

    return changes
