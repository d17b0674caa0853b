"""
Unit tests for the in-process notification queue.
"""

from __future__ import annotations

from unittest.mock import Mock

import pytest

from booking_service.errors import NotificationDeliveryFailure
from booking_service.services.notification_queue import NotificationQueue
from booking_service.services.notifications import NotificationJob, NotificationKind


def _job(reservation_id: int) -> NotificationJob:
    return NotificationJob(
        recipient_email=f"guest{reservation_id}@example.com",
        recipient_name="Guest",
        kind=NotificationKind.LODGING_CONFIRMATION,
        payload={"reservation_id": reservation_id},
    )


@pytest.mark.unit
def test_jobs_are_delivered_in_fifo_order() -> None:
    dispatcher = Mock()
    queue = NotificationQueue(dispatcher, maxsize=10)
    for reservation_id in (1, 2, 3):
        assert queue.enqueue(_job(reservation_id))

    queue.start()
    queue.join()
    queue.stop()

    delivered = [c.args[0].payload["reservation_id"] for c in dispatcher.deliver.call_args_list]
    assert delivered == [1, 2, 3]
    assert queue.pending() == 0


@pytest.mark.unit
def test_failed_delivery_is_discarded_and_worker_continues() -> None:
    dispatcher = Mock()
    dispatcher.deliver.side_effect = [
        NotificationDeliveryFailure("mail API down"),
        RuntimeError("template bug"),
        "msg-3",
    ]
    queue = NotificationQueue(dispatcher, maxsize=10)
    queue.start()

    for reservation_id in (1, 2, 3):
        queue.enqueue(_job(reservation_id))
    queue.join()

    assert dispatcher.deliver.call_count == 3
    assert queue.pending() == 0
    assert queue.is_running()
    queue.stop()


@pytest.mark.unit
def test_enqueue_drops_job_when_queue_is_full() -> None:
    queue = NotificationQueue(Mock(), maxsize=1)

    assert queue.enqueue(_job(1)) is True
    assert queue.enqueue(_job(2)) is False
    assert queue.pending() == 1


@pytest.mark.unit
def test_start_and_stop_are_idempotent() -> None:
    queue = NotificationQueue(Mock(), maxsize=10)

    queue.start()
    queue.start()
    assert queue.is_running()

    queue.stop()
    queue.stop()
    assert not queue.is_running()


@pytest.mark.unit
def test_stop_drains_jobs_already_queued() -> None:
    dispatcher = Mock()
    queue = NotificationQueue(dispatcher, maxsize=10)
    queue.start()
    queue.enqueue(_job(1))
    queue.enqueue(_job(2))

    queue.stop()

    assert dispatcher.deliver.call_count == 2
