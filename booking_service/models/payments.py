from sqlalchemy import CheckConstraint, Column, DateTime, ForeignKey, Integer, Numeric, String

from booking_service.config import SCHEMA
from booking_service.models.base import Base, qualified


class Payment(Base):
    """
    ORM model for the settlement of a reservation.

    Each payment belongs to exactly one reservation and is removed with it
    (ON DELETE CASCADE). external_reference holds the processor's transaction
    id when the payment was settled by an external processor.
    """

    __tablename__ = "payments"
    __table_args__ = (
        CheckConstraint("amount >= 0", name="ck_payments_amount"),
        {"schema": SCHEMA},
    )

    id = Column(Integer, primary_key=True, autoincrement=True)
    reservation_id = Column(
        Integer,
        ForeignKey(qualified("reservations.id"), ondelete="CASCADE"),
        nullable=False,
        unique=True,
    )
    amount = Column(Numeric(10, 2), nullable=False)
    method = Column(String(32), nullable=False)
    external_reference = Column(String(128), nullable=True)
    state = Column(String(16), nullable=False, server_default="pending")
    paid_at = Column(DateTime(timezone=True), nullable=True)
