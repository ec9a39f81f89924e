from datetime import date

from sqlalchemy import select
from sqlalchemy.orm import Session

from ..db import models
from .pricing import interval_minutes

Interval = tuple[int, int]


def intervals_overlap(a: Interval, b: Interval) -> bool:
    """Half-open ``[start, end)`` intersection; touching boundaries do not overlap."""
    a_start, a_end = a
    b_start, b_end = b
    if a_start < b_end and a_end > b_start:
        return True
    # containment catches zero-length intervals sitting on the other's edge
    return (a_start <= b_start and a_end >= b_end) or (b_start <= a_start and b_end >= a_end)


def slot_interval(slot: models.Slot) -> Interval:
    return interval_minutes(slot.start_time, slot.end_time, allow_rollover=True)


def find_overlapping_slot(
    db: Session,
    venue_id: int,
    day: date,
    candidate: Interval,
    exclude_slot_id: int | None = None,
) -> models.Slot | None:
    stmt = select(models.Slot).where(
        models.Slot.venue_id == venue_id,
        models.Slot.date == day,
    )
    if exclude_slot_id is not None:
        stmt = stmt.where(models.Slot.id != exclude_slot_id)
    for existing in db.execute(stmt).scalars():
        if intervals_overlap(candidate, slot_interval(existing)):
            return existing
    return None


def has_overlap(
    db: Session,
    venue_id: int,
    day: date,
    start_time: str,
    end_time: str,
    exclude_slot_id: int | None = None,
    *,
    allow_rollover: bool = False,
) -> bool:
    candidate = interval_minutes(start_time, end_time, allow_rollover=allow_rollover)
    return find_overlapping_slot(db, venue_id, day, candidate, exclude_slot_id) is not None
