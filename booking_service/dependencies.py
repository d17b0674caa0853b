"""
FastAPI dependency injection providers.

Route handlers receive the database engine and the notification queue through
Depends(...), so tests can swap them with app.dependency_overrides.
"""

from __future__ import annotations

from typing import Generator

from sqlalchemy.engine import Engine

from booking_service.db.engine import engine
from booking_service.services.notification_queue import NotificationQueue, notification_queue


def get_db_engine() -> Generator[Engine, None, None]:
    """
    Provide database engine for dependency injection.

    Yields:
        Engine: SQLAlchemy database engine

    Testing Example:
        >>> test_engine = create_engine("sqlite://", poolclass=StaticPool)
        >>> app.dependency_overrides[get_db_engine] = lambda: test_engine
    """
    yield engine


def get_notification_queue() -> NotificationQueue:
    """
    Provide the process-wide notification queue.

    Returns:
        NotificationQueue: Queue started at application startup
    """
    return notification_queue
