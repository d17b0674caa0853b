from datetime import date
from decimal import Decimal
from typing import Any, Optional

from pydantic import BaseModel, Field


class BookingCreatePayload(BaseModel):
    """
    Schema for creating a reservation directly. Exactly one of lodging_id or
    experience_id must be set; that rule is checked by the booking service.
    """

    requester_id: Optional[int] = Field(None, description="User making the reservation")
    lodging_id: Optional[int] = Field(None, description="Lodging being booked")
    experience_id: Optional[int] = Field(None, description="Tourist experience being booked")
    start_date: Optional[date] = Field(None, description="Check-in or experience date")
    end_date: Optional[date] = Field(None, description="Check-out date (lodgings)")
    party_size: Optional[int] = Field(None, description="Number of people")
    total_price: Optional[Decimal] = Field(None, description="Total price")
    state: Optional[str] = Field(None, description="Initial state, defaults to pending")


class BookingUpdatePayload(BaseModel):
    """
    Schema for updating a reservation. All fields are optional, but at least
    one must be supplied.
    """

    start_date: Optional[date] = None
    end_date: Optional[date] = None
    party_size: Optional[int] = None
    state: Optional[str] = Field(None, description="pending, confirmed, cancelled or completed")

    def changes(self) -> dict[str, Any]:
        return self.model_dump(exclude_none=True)


class BookingCancelPayload(BaseModel):
    reason: Optional[str] = Field(None, description="Cancellation reason kept for audit")
