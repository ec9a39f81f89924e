"""Time arithmetic, pricing and refund math for slots.

Slot times are wall-clock ``"HH:MM"`` strings scoped to a calendar day, so all
interval math runs on minutes since midnight. Money is kept as ``Decimal`` and
rounded half-up to cents.
"""

from dataclasses import dataclass
from datetime import datetime, time
from decimal import ROUND_HALF_UP, Decimal

from ..core.constants import (
    CENTS,
    FULL_REFUND_HOURS,
    FULL_REFUND_PERCENT,
    MINUTES_PER_DAY,
    NO_REFUND_PERCENT,
    PARTIAL_REFUND_HOURS,
    PARTIAL_REFUND_PERCENT,
)
from ..core.errors import InvalidIntervalError


@dataclass(frozen=True, slots=True)
class RefundInfo:
    eligible: bool
    percentage: int
    amount: Decimal
    reason: str


def parse_wall_clock(value: str) -> time:
    try:
        hours, minutes = value.split(":")
        return time(int(hours), int(minutes))
    except (AttributeError, TypeError, ValueError) as exc:
        raise InvalidIntervalError(f"Invalid time '{value}', expected HH:MM") from exc


def to_minutes(value: str) -> int:
    parsed = parse_wall_clock(value)
    return parsed.hour * 60 + parsed.minute


def interval_minutes(start: str, end: str, *, allow_rollover: bool = False) -> tuple[int, int]:
    """Return ``(start, end)`` in minutes since midnight of the slot's day.

    With ``allow_rollover`` an end at or before the start is read as the next
    day, otherwise it is rejected.
    """
    start_min = to_minutes(start)
    end_min = to_minutes(end)
    if end_min <= start_min:
        if not allow_rollover:
            raise InvalidIntervalError("End time must be after start time")
        end_min += MINUTES_PER_DAY
    return start_min, end_min


def compute_duration_hours(start: str, end: str, *, allow_rollover: bool = False) -> float:
    start_min, end_min = interval_minutes(start, end, allow_rollover=allow_rollover)
    return (end_min - start_min) / 60


def to_money(value: Decimal | float | int | str) -> Decimal:
    if not isinstance(value, Decimal):
        value = Decimal(str(value))
    return value.quantize(CENTS, rounding=ROUND_HALF_UP)


def compute_price(duration_hours: float, price_per_hour: Decimal | float) -> Decimal:
    return to_money(Decimal(str(duration_hours)) * Decimal(str(price_per_hour)))


def refund_percentage(hours_until_start: float) -> int:
    if hours_until_start > FULL_REFUND_HOURS:
        return FULL_REFUND_PERCENT
    if hours_until_start >= PARTIAL_REFUND_HOURS:
        return PARTIAL_REFUND_PERCENT
    return NO_REFUND_PERCENT


def compute_refund(slot_start: datetime, total_price: Decimal | float, now: datetime) -> RefundInfo:
    hours_until_start = (slot_start - now).total_seconds() / 3600
    percentage = refund_percentage(hours_until_start)
    if percentage == FULL_REFUND_PERCENT:
        reason = f"Cancelled more than {FULL_REFUND_HOURS} hours before start"
    elif percentage == PARTIAL_REFUND_PERCENT:
        reason = f"Cancelled {PARTIAL_REFUND_HOURS}-{FULL_REFUND_HOURS} hours before start"
    else:
        reason = f"Cancelled less than {PARTIAL_REFUND_HOURS} hours before start"
    amount = to_money(Decimal(str(total_price)) * percentage / 100)
    return RefundInfo(
        eligible=percentage > NO_REFUND_PERCENT,
        percentage=percentage,
        amount=amount,
        reason=reason,
    )
