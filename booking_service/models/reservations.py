# models/reservations.py

from sqlalchemy import (
    CheckConstraint,
    Column,
    Date,
    DateTime,
    ForeignKey,
    Integer,
    Numeric,
    String,
    Text,
)
from sqlalchemy.sql import func

from booking_service.config import SCHEMA
from booking_service.models.base import Base, qualified


class Reservation(Base):
    """
    ORM model for reservations (bookings).

    A reservation links a requester to exactly one lodging or one tourist
    experience. Lodging reservations span start_date..end_date; experience
    reservations may carry a single start_date with end_date left NULL.
    The state column follows the reservation state machine (pending,
    confirmed, cancelled, completed).
    """

    __tablename__ = "reservations"
    __table_args__ = (
        CheckConstraint("party_size >= 1", name="ck_reservations_party_size"),
        CheckConstraint(
            "(lodging_id IS NULL) <> (experience_id IS NULL)",
            name="ck_reservations_single_target",
        ),
        CheckConstraint(
            "end_date IS NULL OR start_date < end_date",
            name="ck_reservations_date_order",
        ),
        {"schema": SCHEMA},
    )

    id = Column(Integer, primary_key=True, autoincrement=True)
    requester_id = Column(Integer, nullable=False, index=True)
    lodging_id = Column(
        Integer, ForeignKey(qualified("lodgings.id")), nullable=True, index=True
    )
    experience_id = Column(
        Integer, ForeignKey(qualified("experiences.id")), nullable=True, index=True
    )
    start_date = Column(Date, nullable=False)
    end_date = Column(Date, nullable=True)
    party_size = Column(Integer, nullable=False)
    state = Column(String(16), nullable=False, server_default="pending")
    total_price = Column(Numeric(10, 2), nullable=False)
    cancellation_reason = Column(Text, nullable=True)  # Audit only
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(
        DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False
    )
