from datetime import datetime
from pydantic import BaseModel, Field

from ..models.booking import BookingStatus, PaymentStatus
from .common import Pagination
from .slot import Slot


class BookingCreate(BaseModel):
    slot_id: int
    notes: str | None = Field(default=None, max_length=500)


class BookingStatusUpdate(BaseModel):
    status: BookingStatus


class Booking(BaseModel):
    id: int
    user_id: int
    slot_id: int
    status: BookingStatus
    total_price: float
    payment_status: PaymentStatus
    refund_amount: float | None = None
    notes: str | None = None
    created_at: datetime
    updated_at: datetime
    cancelled_at: datetime | None = None
    slot: Slot | None = None

    class Config:
        from_attributes = True


class BookingList(BaseModel):
    bookings: list[Booking]
    pagination: Pagination


class RefundInfo(BaseModel):
    eligible: bool
    percentage: int
    amount: float
    reason: str

    class Config:
        from_attributes = True
