"""
In-process notification queue.

Purchases hand confirmation jobs to this queue after the client response has
been sent. A single daemon thread drains it in FIFO order and calls the
dispatcher; a failed delivery is logged and the job is discarded (no retry,
no persistence).

The queue is bounded. enqueue() never blocks the request path: when the queue
is full the job is dropped and counted.
"""

from __future__ import annotations

import queue
import threading
from typing import Optional

import structlog

from booking_service.config import NOTIFICATION_QUEUE_MAXSIZE
from booking_service.metrics import (
    notification_queue_depth,
    notifications_dropped,
    notifications_total,
)
from booking_service.network.mailer import Dispatcher, build_dispatcher
from booking_service.services.notifications import NotificationJob

logger = structlog.get_logger(__name__)

_STOP = object()


class NotificationQueue:
    """
    Bounded FIFO of notification jobs with one consumer thread.

    Example:
        >>> notification_queue = NotificationQueue(LoggingDispatcher(), maxsize=100)
        >>> notification_queue.start()
        >>> notification_queue.enqueue(job)
        True
        >>> notification_queue.stop()
    """

    def __init__(self, dispatcher: Dispatcher, maxsize: int = NOTIFICATION_QUEUE_MAXSIZE):
        self.dispatcher = dispatcher
        self._queue: queue.Queue[object] = queue.Queue(maxsize=maxsize)
        self._worker: Optional[threading.Thread] = None
        self._lock = threading.Lock()

    def start(self) -> None:
        """Start the consumer thread if it is not already running."""
        with self._lock:
            if self._worker is not None and self._worker.is_alive():
                return
            self._worker = threading.Thread(
                target=self._run, name="notification-worker", daemon=True
            )
            self._worker.start()
        logger.info("notification_worker_started")

    def stop(self, timeout: float = 5.0) -> None:
        """
        Stop the consumer after it drains the jobs already queued.

        Args:
            timeout: Seconds to wait for the worker to finish
        """
        with self._lock:
            worker = self._worker
            self._worker = None
        if worker is None:
            return
        # Blocking put: the sentinel must land even when the queue is full.
        self._queue.put(_STOP)
        worker.join(timeout)
        logger.info("notification_worker_stopped", pending=self.pending())

    def is_running(self) -> bool:
        worker = self._worker
        return worker is not None and worker.is_alive()

    def enqueue(self, job: NotificationJob) -> bool:
        """
        Append a job to the tail of the queue without blocking.

        Args:
            job: Notification job to deliver

        Returns:
            bool: True if queued, False if dropped because the queue is full
        """
        try:
            self._queue.put_nowait(job)
        except queue.Full:
            notifications_dropped.inc()
            logger.warning(
                "notification_dropped_queue_full",
                kind=job.kind.value,
                to=job.recipient_email,
                reservation_id=job.payload.get("reservation_id"),
            )
            return False

        notification_queue_depth.set(self.pending())
        logger.debug("notification_enqueued", kind=job.kind.value, pending=self.pending())
        return True

    def pending(self) -> int:
        """Number of jobs waiting for the worker."""
        return self._queue.qsize()

    def join(self) -> None:
        """Block until every queued job has been processed."""
        self._queue.join()

    def _run(self) -> None:
        while True:
            item = self._queue.get()
            try:
                if item is _STOP:
                    return
                self._process(item)  # type: ignore[arg-type]
            finally:
                self._queue.task_done()
                notification_queue_depth.set(self.pending())

    def _process(self, job: NotificationJob) -> None:
        try:
            self.dispatcher.deliver(job)
        except Exception as e:
            notifications_total.labels(kind=job.kind.value, status="failed").inc()
            logger.error(
                "notification_delivery_failed",
                kind=job.kind.value,
                to=job.recipient_email,
                reservation_id=job.payload.get("reservation_id"),
                error=str(e),
            )
            return

        notifications_total.labels(kind=job.kind.value, status="sent").inc()
        logger.info(
            "notification_delivered",
            kind=job.kind.value,
            to=job.recipient_email,
            reservation_id=job.payload.get("reservation_id"),
        )


# Global queue instance, started and stopped with the application.
notification_queue = NotificationQueue(build_dispatcher())
