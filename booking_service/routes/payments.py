from typing import Any

import structlog
from fastapi import APIRouter, BackgroundTasks, Depends, HTTPException, status
from sqlalchemy.engine import Engine

from booking_service.dependencies import get_db_engine, get_notification_queue
from booking_service.errors import BookingError
from booking_service.routes._booking_helpers import (
    envelope,
    to_http_exception,
    to_purchase_request,
)
from booking_service.schemas.payments import ProcessorPurchasePayload, PurchasePayload
from booking_service.services.booking import purchase
from booking_service.services.notification_queue import NotificationQueue

logger = structlog.get_logger(__name__)
router = APIRouter()


def _purchase_and_schedule(
    payload: PurchasePayload,
    background_tasks: BackgroundTasks,
    engine: Engine,
    notification_queue: NotificationQueue,
) -> dict[str, Any]:
    try:
        result = purchase(to_purchase_request(payload), engine)
    except BookingError as e:
        raise to_http_exception(e)
    except Exception as e:
        logger.exception("purchase_failed", error=str(e))
        raise HTTPException(status_code=500, detail="Internal server error")

    # Runs after the response has been sent
    background_tasks.add_task(notification_queue.enqueue, result.notification)

    return envelope(result.to_dict(), message="Purchase completed")


@router.post("/payments/purchase", status_code=status.HTTP_201_CREATED)
def purchase_endpoint(
    payload: PurchasePayload,
    background_tasks: BackgroundTasks,
    engine: Engine = Depends(get_db_engine),
    notification_queue: NotificationQueue = Depends(get_notification_queue),
) -> dict[str, Any]:
    """
    Book a lodging or experience and record its payment.

    The reservation and payment are written in one transaction. The
    confirmation email is queued after the response.

    Args:
        payload: Booking, payment and payer data
        background_tasks: FastAPI background task runner

    Returns:
        dict: Success envelope with reservation_id, payment_id and booking_kind
    """
    return _purchase_and_schedule(payload, background_tasks, engine, notification_queue)


@router.post("/payments/processor", status_code=status.HTTP_201_CREATED)
def processor_purchase_endpoint(
    payload: ProcessorPurchasePayload,
    background_tasks: BackgroundTasks,
    engine: Engine = Depends(get_db_engine),
    notification_queue: NotificationQueue = Depends(get_notification_queue),
) -> dict[str, Any]:
    """
    Book after an external payment processor has handled the payment.

    A non-approved processor status is rejected with 402 and nothing is
    written. An approved one creates a confirmed reservation with a completed
    payment.
    """
    return _purchase_and_schedule(payload, background_tasks, engine, notification_queue)


@router.get("/payments/email-status/{reservation_id}", status_code=status.HTTP_200_OK)
def email_status(
    reservation_id: int,
    notification_queue: NotificationQueue = Depends(get_notification_queue),
) -> dict[str, Any]:
    """
    Report the confirmation queue state for a reservation.

    Delivery is fire-and-forget, so only the queue depth and worker state are
    known here, not whether this reservation's email was sent.
    """
    return envelope(
        {
            "reservation_id": reservation_id,
            "pending": notification_queue.pending(),
            "worker_running": notification_queue.is_running(),
        }
    )
