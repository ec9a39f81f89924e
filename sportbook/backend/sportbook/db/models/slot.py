import datetime as dt
from enum import Enum as PyEnum
from sqlalchemy import Date, DateTime, Enum, ForeignKey, Index, Integer, String, func
from sqlalchemy.orm import Mapped, mapped_column, relationship
from ..session import Base
from .booking import ACTIVE_BOOKING_STATUSES


class SlotStatus(str, PyEnum):
    available = "available"
    booked = "booked"
    blocked = "blocked"


class Slot(Base):
    __tablename__ = "slots"
    __table_args__ = (
        Index("ix_slots_venue_date", "venue_id", "date"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    venue_id: Mapped[int] = mapped_column(ForeignKey("venues.id", ondelete="CASCADE"), index=True)
    date: Mapped[dt.date] = mapped_column(Date, index=True, nullable=False)
    # wall-clock "HH:MM" on ``date``; end <= start only for bulk day-rollover slots
    start_time: Mapped[str] = mapped_column(String(5), nullable=False)
    end_time: Mapped[str] = mapped_column(String(5), nullable=False)
    status: Mapped[SlotStatus] = mapped_column(Enum(SlotStatus), default=SlotStatus.available)
    created_at: Mapped[dt.datetime] = mapped_column(DateTime(timezone=True), server_default=func.now())
    updated_at: Mapped[dt.datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), onupdate=func.now()
    )

    venue = relationship("Venue", back_populates="slots")
    bookings = relationship("Booking", back_populates="slot", cascade="all, delete-orphan")

    @property
    def is_booked(self) -> bool:
        return any(booking.status in ACTIVE_BOOKING_STATUSES for booking in self.bookings)
