"""
Health and readiness check endpoints for container probes.
"""

from __future__ import annotations

import structlog
from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse
from sqlalchemy.engine import Engine

from booking_service.db.engine import check_engine_health
from booking_service.dependencies import get_db_engine, get_notification_queue
from booking_service.services.notification_queue import NotificationQueue

logger = structlog.get_logger(__name__)

router = APIRouter()


@router.get("/health")
def health_check(
    notification_queue: NotificationQueue = Depends(get_notification_queue),
) -> JSONResponse:
    """
    Liveness probe endpoint.

    Returns 200 while the process is running, along with the notification
    queue depth. It never checks the database; that is what /ready is for.

    Example:
        >>> GET /health
        {"status": "ok", "notifications": {"pending": 0, "worker_running": true}}
    """
    return JSONResponse(
        content={
            "status": "ok",
            "notifications": {
                "pending": notification_queue.pending(),
                "worker_running": notification_queue.is_running(),
            },
        }
    )


@router.get("/ready")
def readiness_check(
    engine: Engine = Depends(get_db_engine),
    notification_queue: NotificationQueue = Depends(get_notification_queue),
) -> JSONResponse:
    """
    Readiness probe endpoint.

    Returns 200 if the database answers and the notification worker is alive,
    503 otherwise.

    Example:
        >>> GET /ready
        {"status": "ready", "checks": {"database": "ok", "notification_worker": "ok"}}
    """
    checks = {
        "database": "ok" if check_engine_health(engine) else "failed",
        "notification_worker": "ok" if notification_queue.is_running() else "failed",
    }

    if all(value == "ok" for value in checks.values()):
        return JSONResponse(content={"status": "ready", "checks": checks})

    logger.error("readiness_check_failed", checks=checks)
    return JSONResponse(status_code=503, content={"status": "not ready", "checks": checks})
