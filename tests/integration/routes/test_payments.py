"""
Integration tests for /payments endpoints.
"""

from __future__ import annotations

from typing import Any

import pytest
from fastapi.testclient import TestClient

from booking_service.services.notification_queue import NotificationQueue
from booking_service.services.notifications import NotificationKind


def _lodging_payload(**overrides: Any) -> dict[str, Any]:
    payload: dict[str, Any] = {
        "requester_id": 10,
        "booking_kind": "lodging",
        "target_id": 1,
        "start_date": "2025-06-01",
        "end_date": "2025-06-05",
        "party_size": 2,
        "amount": 400.0,
        "payment_method": "tarjeta",
        "payer": {"email": "ana@example.com", "name": "Ana"},
        "target": {"name": "Casa Azul", "location": "Oaxaca"},
    }
    payload.update(overrides)
    return payload


@pytest.mark.integration
def test_purchase_creates_booking_and_queues_confirmation(
    client: TestClient, notification_queue: NotificationQueue
) -> None:
    response = client.post("/payments/purchase", json=_lodging_payload())

    assert response.status_code == 201
    body = response.json()
    assert body["success"] is True
    data = body["data"]
    assert data["booking_kind"] == "lodging"
    assert data["reservation_state"] == "pending"
    assert data["payment_state"] == "pending"
    assert data["reservation_code"] == f"R-{data['reservation_id']}"

    assert notification_queue.pending() == 1
    job = notification_queue._queue.get_nowait()
    assert job.kind is NotificationKind.LODGING_CONFIRMATION
    assert job.recipient_email == "ana@example.com"
    assert job.payload["reservation_id"] == data["reservation_id"]


@pytest.mark.integration
def test_purchase_is_readable_through_bookings(client: TestClient) -> None:
    reservation_id = client.post("/payments/purchase", json=_lodging_payload()).json()["data"][
        "reservation_id"
    ]

    record = client.get(f"/bookings/{reservation_id}").json()["data"]

    assert record["start_date"] == "2025-06-01"
    assert record["end_date"] == "2025-06-05"
    assert record["party_size"] == 2
    assert record["total_price"] == 400.0
    assert record["payment"]["amount"] == 400.0
    assert record["payment"]["method"] == "card"


@pytest.mark.integration
def test_invalid_purchase_returns_400_and_queues_nothing(
    client: TestClient, notification_queue: NotificationQueue
) -> None:
    response = client.post(
        "/payments/purchase", json=_lodging_payload(payer={"email": None, "name": "Ana"})
    )

    assert response.status_code == 400
    assert response.json()["detail"]["kind"] == "validation"
    assert notification_queue.pending() == 0


@pytest.mark.integration
def test_experience_over_capacity_returns_409(
    client: TestClient, notification_queue: NotificationQueue
) -> None:
    response = client.post(
        "/payments/purchase",
        json=_lodging_payload(booking_kind="experience", end_date=None, party_size=10),
    )

    assert response.status_code == 409
    assert response.json()["detail"]["kind"] == "capacity_exhausted"
    assert notification_queue.pending() == 0
    assert client.get("/bookings").json()["data"] == []


@pytest.mark.integration
def test_unknown_lodging_returns_404(client: TestClient) -> None:
    response = client.post("/payments/purchase", json=_lodging_payload(target_id=999))

    assert response.status_code == 404


@pytest.mark.integration
def test_unknown_experience_returns_404(
    client: TestClient, notification_queue: NotificationQueue
) -> None:
    response = client.post(
        "/payments/purchase",
        json=_lodging_payload(booking_kind="experience", target_id=999, end_date=None),
    )

    assert response.status_code == 404
    assert response.json()["detail"]["kind"] == "not_found"
    assert notification_queue.pending() == 0
    assert client.get("/bookings").json()["data"] == []


@pytest.mark.integration
def test_declined_processor_returns_402(
    client: TestClient, notification_queue: NotificationQueue
) -> None:
    response = client.post(
        "/payments/processor",
        json=_lodging_payload(processor={"status": "rejected", "transaction_id": "tx-1"}),
    )

    assert response.status_code == 402
    assert response.json()["detail"]["kind"] == "processor_declined"
    assert notification_queue.pending() == 0
    assert client.get("/bookings").json()["data"] == []


@pytest.mark.integration
def test_approved_processor_purchase_is_confirmed(client: TestClient) -> None:
    response = client.post(
        "/payments/processor",
        json=_lodging_payload(processor={"status": "approved", "transaction_id": "tx-7"}),
    )

    assert response.status_code == 201
    data = response.json()["data"]
    assert data["reservation_state"] == "confirmed"
    assert data["payment_state"] == "completed"

    record = client.get(f"/bookings/{data['reservation_id']}").json()["data"]
    assert record["payment"]["external_reference"] == "tx-7"


@pytest.mark.integration
def test_processor_endpoint_requires_processor_result(client: TestClient) -> None:
    response = client.post("/payments/processor", json=_lodging_payload())

    assert response.status_code == 422


@pytest.mark.integration
def test_email_status_reports_queue_depth(
    client: TestClient, notification_queue: NotificationQueue
) -> None:
    client.post("/payments/purchase", json=_lodging_payload())

    response = client.get("/payments/email-status/1")

    assert response.status_code == 200
    assert response.json()["data"] == {
        "reservation_id": 1,
        "pending": 1,
        "worker_running": False,
    }
