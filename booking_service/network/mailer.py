"""
Delivery of confirmation emails through a transactional mail HTTP API.
"""

from __future__ import annotations

from typing import Any, Optional, Protocol

import requests
import structlog

from booking_service.config import (
    DRY_RUN,
    MAIL_API_KEY,
    MAIL_API_URL,
    MAIL_SENDER,
    MAIL_TIMEOUT_SECONDS,
)
from booking_service.errors import NotificationDeliveryFailure
from booking_service.services.notifications import NotificationJob, render_message

logger = structlog.get_logger(__name__)


class Dispatcher(Protocol):
    def deliver(self, job: NotificationJob) -> Optional[str]: ...


class MailDispatcher:
    """
    Sends rendered confirmations to a mail API endpoint.

    The API receives a JSON body with from/to/subject/text/html and answers
    with an optional message id.

    Example:
        >>> dispatcher = MailDispatcher("https://mail.example.com/v1/send", "key")
        >>> dispatcher.deliver(job)
        'msg-123'
    """

    def __init__(
        self,
        api_url: str,
        api_key: Optional[str] = None,
        sender: str = MAIL_SENDER,
        timeout: float = MAIL_TIMEOUT_SECONDS,
    ) -> None:
        self.api_url = api_url
        self.api_key = api_key
        self.sender = sender
        self.timeout = timeout

    def deliver(self, job: NotificationJob) -> Optional[str]:
        """
        Render and send one confirmation email.

        Args:
            job: Notification job to deliver

        Returns:
            Optional[str]: Message id reported by the mail API, if any

        Raises:
            NotificationDeliveryFailure: On transport errors or non-2xx responses
        """
        message = render_message(job)
        headers = {"Content-Type": "application/json"}
        if self.api_key:
            headers["Authorization"] = f"Bearer {self.api_key}"

        payload = {
            "from": self.sender,
            "to": message.to,
            "subject": message.subject,
            "text": message.text,
            "html": message.html,
        }

        try:
            response = requests.post(
                self.api_url, json=payload, headers=headers, timeout=self.timeout
            )
            response.raise_for_status()
        except requests.HTTPError as e:
            status = e.response.status_code if e.response is not None else "N/A"
            raise NotificationDeliveryFailure(
                f"Mail API rejected message to {message.to} (status={status})"
            ) from e
        except requests.RequestException as e:
            raise NotificationDeliveryFailure(
                f"Mail API unreachable for {message.to}: {e}"
            ) from e

        message_id: Optional[str] = None
        if response.content:
            try:
                body: dict[str, Any] = response.json()
                message_id = body.get("id") or body.get("messageId")
            except ValueError:
                logger.debug("mail_api_non_json_response", status=response.status_code)

        logger.info("email_sent", to=message.to, kind=job.kind.value, message_id=message_id)
        return message_id


class LoggingDispatcher:
    """Renders messages and logs them instead of sending (DRY_RUN or no mail API)."""

    def deliver(self, job: NotificationJob) -> Optional[str]:
        message = render_message(job)
        logger.info(
            "[DRY RUN] email_not_sent",
            to=message.to,
            subject=message.subject,
            kind=job.kind.value,
        )
        return None


def build_dispatcher() -> Dispatcher:
    """Pick the dispatcher for the current configuration."""
    if DRY_RUN or not MAIL_API_URL:
        return LoggingDispatcher()
    return MailDispatcher(MAIL_API_URL, MAIL_API_KEY)
