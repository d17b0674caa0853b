"""
Unit tests for purchase checks that run before the store is touched.
"""

from __future__ import annotations

from dataclasses import replace
from datetime import date
from decimal import Decimal
from unittest.mock import Mock

import pytest
from sqlalchemy.engine import Engine

from booking_service.errors import ProcessorDeclined, ValidationError
from booking_service.services.booking import (
    BookingKind,
    ProcessorResult,
    PurchaseRequest,
    purchase,
    update_booking,
    validate_purchase,
)


@pytest.fixture
def lodging_request() -> PurchaseRequest:
    return PurchaseRequest(
        requester_id=10,
        booking_kind="lodging",
        target_id=1,
        start_date=date(2025, 6, 1),
        end_date=date(2025, 6, 5),
        party_size=2,
        amount=Decimal("400.00"),
        payer_email="ana@example.com",
    )


@pytest.mark.unit
def test_valid_lodging_request(lodging_request: PurchaseRequest) -> None:
    assert validate_purchase(lodging_request) is BookingKind.LODGING


@pytest.mark.unit
def test_experience_request_needs_no_end_date(lodging_request: PurchaseRequest) -> None:
    request = replace(lodging_request, booking_kind="experience", end_date=None)

    assert validate_purchase(request) is BookingKind.EXPERIENCE


@pytest.mark.unit
@pytest.mark.parametrize(
    ("changes", "message"),
    [
        ({"requester_id": None}, "requester_id"),
        ({"target_id": None}, "target_id"),
        ({"start_date": None}, "start_date"),
        ({"party_size": None}, "party_size"),
        ({"payer_email": ""}, "payer_email"),
        ({"amount": None}, "amount"),
        ({"end_date": None}, "end_date"),
        ({"end_date": date(2025, 6, 1)}, "after start_date"),
        ({"end_date": date(2025, 5, 30)}, "after start_date"),
        ({"party_size": 0}, "at least 1"),
        ({"amount": Decimal("-1")}, "negative"),
        ({"booking_kind": "cruise"}, "booking_kind"),
    ],
)
def test_invalid_requests_are_rejected(
    lodging_request: PurchaseRequest, changes: dict, message: str
) -> None:
    with pytest.raises(ValidationError, match=message):
        validate_purchase(replace(lodging_request, **changes))


@pytest.mark.unit
def test_validation_error_writes_nothing(lodging_request: PurchaseRequest) -> None:
    engine = Mock(spec=Engine)

    with pytest.raises(ValidationError):
        purchase(replace(lodging_request, party_size=0), engine)

    engine.begin.assert_not_called()


@pytest.mark.unit
def test_declined_processor_result_writes_nothing(lodging_request: PurchaseRequest) -> None:
    engine = Mock(spec=Engine)
    request = replace(
        lodging_request, processor_result=ProcessorResult(status="rejected", transaction_id="tx-1")
    )

    with pytest.raises(ProcessorDeclined, match="rejected"):
        purchase(request, engine)

    engine.begin.assert_not_called()


@pytest.mark.unit
@pytest.mark.parametrize("status", ["approved", "APPROVED", "accredited"])
def test_processor_approval_statuses(status: str) -> None:
    assert ProcessorResult(status=status).approved


@pytest.mark.unit
def test_update_without_editable_fields_never_opens_a_transaction() -> None:
    engine = Mock(spec=Engine)

    with pytest.raises(ValidationError):
        update_booking(engine, 1, {"requester_id": 3})

    engine.begin.assert_not_called()
