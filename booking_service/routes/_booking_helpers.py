"""
Internal helper functions for booking and payment route handlers.

Maps booking errors to HTTP responses and builds the success envelope, so the
handlers stay focused on calling the booking service.
"""

from __future__ import annotations

from typing import Any

from fastapi import HTTPException, status
from fastapi.encoders import jsonable_encoder

from booking_service.errors import BookingError, ErrorKind
from booking_service.schemas.payments import ProcessorPurchasePayload, PurchasePayload
from booking_service.services.booking import ProcessorResult, PurchaseRequest

STATUS_BY_KIND = {
    ErrorKind.VALIDATION: status.HTTP_400_BAD_REQUEST,
    ErrorKind.NOT_FOUND: status.HTTP_404_NOT_FOUND,
    ErrorKind.STATE_GUARD: status.HTTP_400_BAD_REQUEST,
    ErrorKind.STORE_WRITE_FAILURE: status.HTTP_500_INTERNAL_SERVER_ERROR,
    ErrorKind.CAPACITY_EXHAUSTED: status.HTTP_409_CONFLICT,
    ErrorKind.PROCESSOR_DECLINED: status.HTTP_402_PAYMENT_REQUIRED,
    ErrorKind.NOTIFICATION_DELIVERY_FAILURE: status.HTTP_502_BAD_GATEWAY,
}


def to_http_exception(error: BookingError) -> HTTPException:
    """
    Convert a booking error into an HTTPException.

    Args:
        error: Booking error raised by the service layer

    Returns:
        HTTPException: Status from the error kind, detail {"kind", "message"}
    """
    return HTTPException(
        status_code=STATUS_BY_KIND.get(error.kind, status.HTTP_500_INTERNAL_SERVER_ERROR),
        detail=error.to_dict(),
    )


def envelope(data: Any, message: str | None = None) -> dict[str, Any]:
    """Wrap a payload in the success envelope."""
    body: dict[str, Any] = {"success": True, "data": jsonable_encoder(data)}
    if message:
        body["message"] = message
    return body


def to_purchase_request(payload: PurchasePayload) -> PurchaseRequest:
    """
    Build the service request from the HTTP payload.

    A ProcessorPurchasePayload carries the processor outcome; a plain
    PurchasePayload does not.
    """
    processor = None
    if isinstance(payload, ProcessorPurchasePayload):
        processor = ProcessorResult(
            status=payload.processor.status,
            transaction_id=payload.processor.transaction_id,
        )

    return PurchaseRequest(
        requester_id=payload.requester_id,
        booking_kind=payload.booking_kind,
        target_id=payload.target_id,
        start_date=payload.start_date,
        end_date=payload.end_date,
        party_size=payload.party_size,
        amount=payload.amount,
        payer_email=payload.payer.email,
        payer_name=payload.payer.name,
        payment_method=payload.payment_method,
        payment_state=payload.payment_state,
        paid_at=payload.paid_at,
        reservation_code=payload.reservation_code,
        target_snapshot=payload.target.model_dump(exclude_none=True),
        processor_result=processor,
    )
