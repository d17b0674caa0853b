from typing import Optional

from sqlalchemy import select
from sqlalchemy.engine import Connection

from booking_service.models.experiences import Experience
from booking_service.models.lodgings import Lodging


def get_remaining_capacity(conn: Connection, experience_id: int) -> Optional[int]:
    """
    Get the remaining capacity of an experience.

    Args:
        conn (Connection): An active SQLAlchemy database connection.
        experience_id (int): Experience ID.

    Returns:
        Optional[int]: Remaining capacity, or None if the experience does not exist
    """
    row = conn.execute(
        select(Experience.remaining_capacity).where(Experience.id == experience_id)
    ).fetchone()
    return row[0] if row else None


def lodging_exists(conn: Connection, lodging_id: int) -> bool:
    """
    Check if a lodging exists.

    Args:
        conn (Connection): An active SQLAlchemy database connection.
        lodging_id (int): Lodging ID.

    Returns:
        bool: True if the lodging exists, False otherwise.
    """
    return conn.execute(select(Lodging.id).where(Lodging.id == lodging_id)).fetchone() is not None
