from sqlalchemy import Column, Integer, Numeric, String

from booking_service.config import SCHEMA
from booking_service.models.base import Base


class Lodging(Base):
    """ORM model for hospitality listings referenced by lodging reservations."""

    __tablename__ = "lodgings"
    __table_args__ = {"schema": SCHEMA}

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String(255), nullable=False)
    location = Column(String(255), nullable=True)
    price_per_night = Column(Numeric(10, 2), nullable=False)
