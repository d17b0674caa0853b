"""
Shared fixtures for store-backed and HTTP integration tests.
"""

from __future__ import annotations

from datetime import date
from decimal import Decimal
from typing import Any, Generator
from unittest.mock import Mock

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine, event, insert
from sqlalchemy.engine import Engine
from sqlalchemy.pool import StaticPool

from booking_service.dependencies import get_db_engine, get_notification_queue
from booking_service.main import app
from booking_service.models.base import Base
from booking_service.models.experiences import Experience
from booking_service.models.lodgings import Lodging
from booking_service.models.payments import Payment  # noqa: F401
from booking_service.models.reservations import Reservation  # noqa: F401
from booking_service.services.notification_queue import NotificationQueue

LODGING_ID = 1
EXPERIENCE_ID = 1
EXPERIENCE_CAPACITY = 4


@pytest.fixture
def db_engine() -> Generator[Engine, None, None]:
    """In-memory SQLite engine with all tables, one shared connection.

    Foreign keys are enforced like on PostgreSQL.
    """
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )

    @event.listens_for(engine, "connect")
    def _enable_foreign_keys(dbapi_connection: Any, connection_record: Any) -> None:
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()

    Base.metadata.create_all(engine)

    with engine.begin() as conn:
        conn.execute(
            insert(Lodging).values(
                id=LODGING_ID,
                name="Casa Azul",
                location="Oaxaca",
                price_per_night=Decimal("100.00"),
            )
        )
        conn.execute(
            insert(Experience).values(
                id=EXPERIENCE_ID,
                title="Tour Monte Albán",
                capacity=EXPERIENCE_CAPACITY,
                remaining_capacity=EXPERIENCE_CAPACITY,
                price=Decimal("50.00"),
                experience_date=date(2025, 7, 10),
            )
        )

    yield engine

    engine.dispose()


@pytest.fixture
def notification_queue() -> NotificationQueue:
    """A queue whose worker is never started, so enqueued jobs stay visible."""
    return NotificationQueue(Mock(), maxsize=10)


@pytest.fixture
def client(
    db_engine: Engine, notification_queue: NotificationQueue
) -> Generator[TestClient, None, None]:
    """FastAPI test client wired to the test engine and queue."""
    app.dependency_overrides[get_db_engine] = lambda: db_engine
    app.dependency_overrides[get_notification_queue] = lambda: notification_queue

    yield TestClient(app)

    app.dependency_overrides.clear()
