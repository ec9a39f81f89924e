from datetime import date as Date, datetime
from pydantic import BaseModel, Field, model_validator

from ...core.constants import MAX_SLOT_MINUTES, MIN_SLOT_MINUTES, TIME_PATTERN
from ...services.pricing import interval_minutes
from ..models.slot import SlotStatus
from .common import Pagination


def _check_duration(start_time: str, end_time: str) -> None:
    start, end = interval_minutes(start_time, end_time)
    if not MIN_SLOT_MINUTES <= end - start <= MAX_SLOT_MINUTES:
        raise ValueError(
            f"Slot duration must be between {MIN_SLOT_MINUTES} minutes and {MAX_SLOT_MINUTES // 60} hours"
        )


class SlotCreate(BaseModel):
    venue_id: int
    date: Date
    start_time: str = Field(pattern=TIME_PATTERN)
    end_time: str = Field(pattern=TIME_PATTERN)
    status: SlotStatus = SlotStatus.available

    @model_validator(mode="after")
    def check_interval(self) -> "SlotCreate":
        if self.end_time <= self.start_time:
            raise ValueError("End time must be after start time")
        _check_duration(self.start_time, self.end_time)
        return self


class SlotTemplate(BaseModel):
    start_time: str = Field(pattern=TIME_PATTERN)
    end_time: str = Field(pattern=TIME_PATTERN)


class SlotBulkCreate(BaseModel):
    venue_id: int
    dates: list[Date] = Field(min_length=1)
    time_slots: list[SlotTemplate] = Field(min_length=1)
    status: SlotStatus = SlotStatus.available


class SlotUpdate(BaseModel):
    date: Date | None = None
    start_time: str | None = Field(default=None, pattern=TIME_PATTERN)
    end_time: str | None = Field(default=None, pattern=TIME_PATTERN)
    status: SlotStatus | None = None

    @model_validator(mode="after")
    def check_interval(self) -> "SlotUpdate":
        if self.start_time and self.end_time:
            if self.end_time <= self.start_time:
                raise ValueError("End time must be after start time")
            _check_duration(self.start_time, self.end_time)
        return self


class Slot(BaseModel):
    id: int
    venue_id: int
    date: Date
    start_time: str
    end_time: str
    status: SlotStatus
    is_booked: bool = False
    created_at: datetime

    class Config:
        from_attributes = True


class SlotList(BaseModel):
    slots: list[Slot]
    pagination: Pagination


class BulkSlotResult(BaseModel):
    created_count: int
    slots: list[Slot]


class SlotAvailability(BaseModel):
    available: bool
    reason: str | None = None
    slot: Slot | None = None
