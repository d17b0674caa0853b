"""Booking error kinds raised by services and mapped to HTTP by the routes."""

from __future__ import annotations

from enum import Enum


class ErrorKind(Enum):
    """Machine-readable booking error kinds."""

    VALIDATION = "validation"
    NOT_FOUND = "not_found"
    STATE_GUARD = "state_guard"
    STORE_WRITE_FAILURE = "store_write_failure"
    CAPACITY_EXHAUSTED = "capacity_exhausted"
    PROCESSOR_DECLINED = "processor_declined"
    NOTIFICATION_DELIVERY_FAILURE = "notification_delivery_failure"


class BookingError(Exception):
    """Base booking error with a kind and a user-safe message."""

    kind: ErrorKind = ErrorKind.VALIDATION

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message

    def __str__(self) -> str:
        return f"{self.kind.value}: {self.message}"

    def to_dict(self) -> dict[str, str]:
        return {"kind": self.kind.value, "message": self.message}


class ValidationError(BookingError):
    """Malformed or missing input. Raised before any store mutation."""

    kind = ErrorKind.VALIDATION


class NotFoundError(BookingError):
    """Referenced reservation or experience does not exist."""

    kind = ErrorKind.NOT_FOUND


class StateGuardError(BookingError):
    """Operation not permitted in the reservation's current state."""

    kind = ErrorKind.STATE_GUARD


class StoreWriteFailure(BookingError):
    """Underlying persistence call failed."""

    kind = ErrorKind.STORE_WRITE_FAILURE


class CapacityExhausted(BookingError):
    """Requested party size exceeds the experience's remaining capacity."""

    kind = ErrorKind.CAPACITY_EXHAUSTED

    def __init__(self, experience_id: int, requested: int) -> None:
        super().__init__(
            f"Experience {experience_id} cannot take {requested} more participant(s)"
        )
        self.experience_id = experience_id
        self.requested = requested


class ProcessorDeclined(BookingError):
    """The external payment processor did not approve the payment."""

    kind = ErrorKind.PROCESSOR_DECLINED


class NotificationDeliveryFailure(BookingError):
    """A confirmation could not be delivered. Logged only, never surfaced."""

    kind = ErrorKind.NOTIFICATION_DELIVERY_FAILURE
