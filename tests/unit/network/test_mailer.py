"""
Unit tests for the mail API dispatcher.
"""

from __future__ import annotations

from typing import Any
from unittest.mock import Mock, patch

import pytest
import requests

from booking_service.errors import NotificationDeliveryFailure
from booking_service.network import mailer
from booking_service.network.mailer import LoggingDispatcher, MailDispatcher, build_dispatcher
from booking_service.services.notifications import NotificationJob, NotificationKind


@pytest.fixture
def job() -> NotificationJob:
    return NotificationJob(
        recipient_email="ana@example.com",
        recipient_name="Ana",
        kind=NotificationKind.LODGING_CONFIRMATION,
        payload={
            "reservation_id": 7,
            "payment_id": 9,
            "start_date": "2025-06-01",
            "end_date": "2025-06-05",
            "party_size": 2,
            "total": "400.00",
        },
    )


@pytest.mark.unit
@patch("booking_service.network.mailer.requests.post")
def test_deliver_posts_rendered_message(mock_post: Any, job: NotificationJob) -> None:
    mock_post.return_value.content = b'{"id": "msg-1"}'
    mock_post.return_value.json.return_value = {"id": "msg-1"}

    dispatcher = MailDispatcher(
        "https://mail.example.com/send", api_key="key", sender="noreply@example.com", timeout=3
    )
    message_id = dispatcher.deliver(job)

    assert message_id == "msg-1"
    mock_post.assert_called_once()
    args, kwargs = mock_post.call_args
    assert args[0] == "https://mail.example.com/send"
    assert kwargs["json"]["to"] == "ana@example.com"
    assert kwargs["json"]["from"] == "noreply@example.com"
    assert kwargs["json"]["subject"] == "Confirmación de Reserva R-7"
    assert kwargs["headers"]["Authorization"] == "Bearer key"
    assert kwargs["timeout"] == 3


@pytest.mark.unit
@patch("booking_service.network.mailer.requests.post")
def test_deliver_without_api_key_sends_no_auth_header(
    mock_post: Any, job: NotificationJob
) -> None:
    mock_post.return_value.content = b""

    assert MailDispatcher("https://mail.example.com/send").deliver(job) is None
    assert "Authorization" not in mock_post.call_args.kwargs["headers"]


@pytest.mark.unit
@patch("booking_service.network.mailer.requests.post")
def test_deliver_raises_on_http_error(mock_post: Any, job: NotificationJob) -> None:
    mock_post.return_value.raise_for_status.side_effect = requests.HTTPError(
        response=Mock(status_code=500)
    )

    with pytest.raises(NotificationDeliveryFailure, match="status=500"):
        MailDispatcher("https://mail.example.com/send").deliver(job)


@pytest.mark.unit
@patch("booking_service.network.mailer.requests.post")
def test_deliver_raises_on_transport_error(mock_post: Any, job: NotificationJob) -> None:
    mock_post.side_effect = requests.ConnectionError("refused")

    with pytest.raises(NotificationDeliveryFailure, match="unreachable"):
        MailDispatcher("https://mail.example.com/send").deliver(job)


@pytest.mark.unit
@patch("booking_service.network.mailer.requests.post")
def test_logging_dispatcher_never_sends(mock_post: Any, job: NotificationJob) -> None:
    assert LoggingDispatcher().deliver(job) is None
    mock_post.assert_not_called()


@pytest.mark.unit
def test_build_dispatcher_uses_logging_in_dry_run() -> None:
    with patch.object(mailer, "DRY_RUN", True), patch.object(
        mailer, "MAIL_API_URL", "https://mail.example.com/send"
    ):
        assert isinstance(build_dispatcher(), LoggingDispatcher)


@pytest.mark.unit
def test_build_dispatcher_uses_logging_without_api_url() -> None:
    with patch.object(mailer, "DRY_RUN", False), patch.object(mailer, "MAIL_API_URL", None):
        assert isinstance(build_dispatcher(), LoggingDispatcher)


@pytest.mark.unit
def test_build_dispatcher_uses_mail_api_when_configured() -> None:
    with patch.object(mailer, "DRY_RUN", False), patch.object(
        mailer, "MAIL_API_URL", "https://mail.example.com/send"
    ):
        dispatcher = build_dispatcher()

    assert isinstance(dispatcher, MailDispatcher)
    assert dispatcher.api_url == "https://mail.example.com/send"
