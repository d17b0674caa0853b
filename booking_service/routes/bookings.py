from typing import Any, Optional

import structlog
from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.engine import Engine

from booking_service.dependencies import get_db_engine
from booking_service.errors import BookingError
from booking_service.routes._booking_helpers import envelope, to_http_exception
from booking_service.schemas.bookings import (
    BookingCancelPayload,
    BookingCreatePayload,
    BookingUpdatePayload,
)
from booking_service.services.booking import (
    cancel_booking,
    confirm_booking,
    create_booking,
    delete_booking,
    get_booking,
    list_bookings,
    update_booking,
)

logger = structlog.get_logger(__name__)
router = APIRouter()


@router.get("/bookings", status_code=status.HTTP_200_OK)
def list_bookings_endpoint(engine: Engine = Depends(get_db_engine)) -> dict[str, Any]:
    """
    List all reservations with their payments, newest first.

    Returns:
        dict: Success envelope with the reservations
    """
    try:
        return envelope(list_bookings(engine))
    except BookingError as e:
        raise to_http_exception(e)
    except Exception as e:
        logger.exception("list_bookings_failed", error=str(e))
        raise HTTPException(status_code=500, detail="Internal server error")


@router.get("/bookings/{reservation_id}", status_code=status.HTTP_200_OK)
def get_booking_endpoint(
    reservation_id: int, engine: Engine = Depends(get_db_engine)
) -> dict[str, Any]:
    """
    Fetch one reservation with its payment.

    Args:
        reservation_id: Reservation ID

    Returns:
        dict: Success envelope with the reservation
    """
    try:
        return envelope(get_booking(engine, reservation_id))
    except BookingError as e:
        raise to_http_exception(e)
    except Exception as e:
        logger.exception("get_booking_failed", reservation_id=reservation_id, error=str(e))
        raise HTTPException(status_code=500, detail="Internal server error")


@router.post("/bookings", status_code=status.HTTP_201_CREATED)
def create_booking_endpoint(
    payload: BookingCreatePayload, engine: Engine = Depends(get_db_engine)
) -> dict[str, Any]:
    """
    Create a reservation directly (administrative path, no payment).

    Args:
        payload: Requester, target, dates, party size, price and optional state

    Returns:
        dict: Success envelope with the stored reservation
    """
    try:
        record = create_booking(engine, payload.model_dump())
        return envelope(record, message="Reservation created")
    except BookingError as e:
        raise to_http_exception(e)
    except Exception as e:
        logger.exception("create_booking_failed", error=str(e))
        raise HTTPException(status_code=500, detail="Internal server error")


@router.put("/bookings/{reservation_id}", status_code=status.HTTP_200_OK)
def update_booking_endpoint(
    reservation_id: int,
    payload: BookingUpdatePayload,
    engine: Engine = Depends(get_db_engine),
) -> dict[str, Any]:
    """
    Update dates, party size or state of a reservation.

    Args:
        reservation_id: Reservation ID
        payload: Fields to update (at least one)

    Returns:
        dict: Success envelope with the updated reservation
    """
    try:
        record = update_booking(engine, reservation_id, payload.changes())
        return envelope(record, message="Reservation updated")
    except BookingError as e:
        raise to_http_exception(e)
    except Exception as e:
        logger.exception("update_booking_failed", reservation_id=reservation_id, error=str(e))
        raise HTTPException(status_code=500, detail="Internal server error")


@router.patch("/bookings/{reservation_id}/cancel", status_code=status.HTTP_200_OK)
def cancel_booking_endpoint(
    reservation_id: int,
    payload: Optional[BookingCancelPayload] = None,
    engine: Engine = Depends(get_db_engine),
) -> dict[str, Any]:
    """
    Cancel a pending or confirmed reservation.

    Args:
        reservation_id: Reservation ID
        payload: Optional cancellation reason

    Returns:
        dict: Success envelope with the cancelled reservation
    """
    reason = payload.reason if payload else None
    try:
        record = cancel_booking(engine, reservation_id, reason)
        return envelope(record, message="Reservation cancelled")
    except BookingError as e:
        raise to_http_exception(e)
    except Exception as e:
        logger.exception("cancel_booking_failed", reservation_id=reservation_id, error=str(e))
        raise HTTPException(status_code=500, detail="Internal server error")


@router.post("/bookings/{reservation_id}/confirm", status_code=status.HTTP_200_OK)
def confirm_booking_endpoint(
    reservation_id: int, engine: Engine = Depends(get_db_engine)
) -> dict[str, Any]:
    """
    Confirm a pending reservation and mark its payment completed.
    """
    try:
        record = confirm_booking(engine, reservation_id)
        return envelope(record, message="Reservation confirmed")
    except BookingError as e:
        raise to_http_exception(e)
    except Exception as e:
        logger.exception("confirm_booking_failed", reservation_id=reservation_id, error=str(e))
        raise HTTPException(status_code=500, detail="Internal server error")


@router.delete("/bookings/{reservation_id}", status_code=status.HTTP_200_OK)
def delete_booking_endpoint(
    reservation_id: int, engine: Engine = Depends(get_db_engine)
) -> dict[str, Any]:
    """
    Permanently delete a pending or cancelled reservation.

    Confirmed and completed reservations must be cancelled first.
    """
    try:
        deleted_id = delete_booking(engine, reservation_id)
        return envelope({"id": deleted_id}, message="Reservation deleted")
    except BookingError as e:
        raise to_http_exception(e)
    except Exception as e:
        logger.exception("delete_booking_failed", reservation_id=reservation_id, error=str(e))
        raise HTTPException(status_code=500, detail="Internal server error")
