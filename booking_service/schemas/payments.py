from datetime import date, datetime
from decimal import Decimal
from typing import Optional

from pydantic import BaseModel, Field


class PayerPayload(BaseModel):
    email: Optional[str] = Field(None, description="Where the confirmation is sent")
    name: str = Field("", description="Name used in the greeting")


class TargetSnapshot(BaseModel):
    """Display data for the booked lodging or experience, copied into the email."""

    name: Optional[str] = None
    location: Optional[str] = None
    meeting_point: Optional[str] = None
    time: Optional[str] = None


class PurchasePayload(BaseModel):
    """
    Schema for a purchase: one reservation plus its payment.
    """

    requester_id: Optional[int] = Field(None, description="User making the purchase")
    booking_kind: Optional[str] = Field(None, description="lodging or experience")
    target_id: Optional[int] = Field(None, description="Lodging or experience ID")
    start_date: Optional[date] = None
    end_date: Optional[date] = Field(None, description="Required for lodgings")
    party_size: Optional[int] = None
    amount: Optional[Decimal] = Field(None, description="Amount paid")
    payment_method: Optional[str] = Field(None, description="card, wallet, cash, ...")
    payment_state: Optional[str] = Field(None, description="pending, completed or failed")
    paid_at: Optional[datetime] = None
    reservation_code: Optional[str] = Field(None, description="Code shown to the guest")
    payer: PayerPayload = Field(default_factory=PayerPayload)
    target: TargetSnapshot = Field(default_factory=TargetSnapshot)


class ProcessorPayload(BaseModel):
    status: str = Field(..., description="Processor status, e.g. approved or rejected")
    transaction_id: Optional[str] = Field(None, description="Processor transaction reference")


class ProcessorPurchasePayload(PurchasePayload):
    """
    Purchase whose payment was already handled by an external processor.
    """

    processor: ProcessorPayload
