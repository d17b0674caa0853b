"""
Unit tests for booking route helpers.
"""

from __future__ import annotations

from datetime import date
from decimal import Decimal

import pytest

from booking_service.errors import (
    CapacityExhausted,
    NotFoundError,
    ProcessorDeclined,
    StateGuardError,
    StoreWriteFailure,
    ValidationError,
)
from booking_service.routes._booking_helpers import (
    envelope,
    to_http_exception,
    to_purchase_request,
)
from booking_service.schemas.payments import ProcessorPurchasePayload, PurchasePayload


@pytest.mark.unit
@pytest.mark.parametrize(
    ("error", "status_code"),
    [
        (ValidationError("bad"), 400),
        (NotFoundError("missing"), 404),
        (StateGuardError("no"), 400),
        (StoreWriteFailure("db"), 500),
        (CapacityExhausted(1, 5), 409),
        (ProcessorDeclined("declined"), 402),
    ],
)
def test_error_kinds_map_to_status_codes(error: Exception, status_code: int) -> None:
    exc = to_http_exception(error)  # type: ignore[arg-type]

    assert exc.status_code == status_code
    assert exc.detail["kind"] == error.kind.value  # type: ignore[attr-defined]


@pytest.mark.unit
def test_envelope_encodes_dates_and_decimals() -> None:
    body = envelope({"start_date": date(2025, 6, 1), "total": Decimal("400.00")}, "ok")

    assert body == {
        "success": True,
        "data": {"start_date": "2025-06-01", "total": 400.0},
        "message": "ok",
    }


@pytest.mark.unit
def test_direct_purchase_payload_has_no_processor_result() -> None:
    payload = PurchasePayload(
        requester_id=1,
        booking_kind="lodging",
        target_id=2,
        payer={"email": "ana@example.com", "name": "Ana"},
        target={"name": "Casa Azul"},
    )

    request = to_purchase_request(payload)

    assert request.processor_result is None
    assert request.payer_email == "ana@example.com"
    assert request.target_snapshot == {"name": "Casa Azul"}


@pytest.mark.unit
def test_processor_payload_carries_processor_result() -> None:
    payload = ProcessorPurchasePayload(
        requester_id=1,
        booking_kind="experience",
        target_id=2,
        processor={"status": "approved", "transaction_id": "tx-9"},
    )

    request = to_purchase_request(payload)

    assert request.processor_result is not None
    assert request.processor_result.approved
    assert request.processor_result.transaction_id == "tx-9"
