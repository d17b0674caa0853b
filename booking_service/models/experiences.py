from sqlalchemy import CheckConstraint, Column, Date, Integer, Numeric, String

from booking_service.config import SCHEMA
from booking_service.models.base import Base


class Experience(Base):
    """
    ORM model for tourist experiences, limited to what bookings need.

    remaining_capacity is the capacity ledger: it starts at capacity when the
    experience is created and only ever decreases as bookings are taken.
    """

    __tablename__ = "experiences"
    __table_args__ = (
        CheckConstraint("remaining_capacity >= 0", name="ck_experiences_remaining_capacity"),
        {"schema": SCHEMA},
    )

    id = Column(Integer, primary_key=True, autoincrement=True)
    title = Column(String(255), nullable=False)
    capacity = Column(Integer, nullable=False)
    remaining_capacity = Column(Integer, nullable=False)
    price = Column(Numeric(10, 2), nullable=False)
    experience_date = Column(Date, nullable=True)
