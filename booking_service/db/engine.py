"""
SQLAlchemy engine singleton with production-ready connection pooling.

Server databases (PostgreSQL) get a sized connection pool tuned for concurrent
purchase requests. SQLite URLs, used for local runs and tests, fall back to
SQLAlchemy's default pool for the dialect since they do not accept sizing
arguments.
"""

from typing import Any

from sqlalchemy import create_engine, text
from sqlalchemy.engine import Engine

from booking_service.config import DATABASE_URL

if not DATABASE_URL:
    raise RuntimeError("DATABASE_URL is not set.")


def build_engine(url: str) -> Engine:
    """
    Create an engine for the given URL with pool settings suited to its dialect.

    Args:
        url: SQLAlchemy database URL

    Returns:
        Engine: Configured SQLAlchemy engine
    """
    options: dict[str, Any] = {"future": True, "echo": False}

    if url.startswith("sqlite"):
        options["connect_args"] = {"check_same_thread": False}
    else:
        options.update(
            pool_size=10,  # Number of connections to maintain in the pool
            max_overflow=20,  # Additional connections when pool is exhausted
            pool_pre_ping=True,  # Verify connections before using
            pool_recycle=3600,  # Recycle connections after 1 hour
        )

    return create_engine(url, **options)


engine: Engine = build_engine(DATABASE_URL)


def check_engine_health(target: Engine | None = None) -> bool:
    """
    Check if database engine is healthy and connections are working.

    Used by the /ready endpoint to verify database connectivity before
    allowing traffic to the service.

    Args:
        target: Engine to probe (defaults to the module singleton)

    Returns:
        bool: True if database is reachable and healthy, False otherwise
    """
    try:
        with (target or engine).connect() as conn:
            conn.execute(text("SELECT 1"))
        return True
    except Exception:
        return False
