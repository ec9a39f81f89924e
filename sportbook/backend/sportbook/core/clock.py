from datetime import date, datetime, time, timezone, tzinfo
from typing import Callable
from zoneinfo import ZoneInfo

from ..config import get_settings

Clock = Callable[[], datetime]


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def venue_timezone() -> tzinfo:
    return ZoneInfo(get_settings().timezone)


def local_datetime(day: date, wall_clock: time, tz: tzinfo) -> datetime:
    """Anchor a wall-clock time on a calendar day in the venue zone."""
    return datetime.combine(day, wall_clock, tzinfo=tz)
