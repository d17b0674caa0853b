from sqlalchemy.orm import DeclarativeBase

from booking_service.config import SCHEMA


class Base(DeclarativeBase):
    """
    Base class for all SQLAlchemy ORM models.

    All models in this application inherit from this base class to provide
    consistent table metadata and ORM functionality across the database schema.
    """

    pass


def qualified(table_column: str) -> str:
    """
    Prefix a "table.column" foreign key target with the configured schema.

    Args:
        table_column: Target such as "reservations.id"

    Returns:
        str: "schema.table.column" when DB_SCHEMA is set, otherwise unchanged
    """
    return f"{SCHEMA}.{table_column}" if SCHEMA else table_column
