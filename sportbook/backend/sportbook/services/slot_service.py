import logging
from dataclasses import dataclass
from datetime import date
from typing import Any, Iterable, Mapping

from sqlalchemy import exists, select
from sqlalchemy.orm import Session, selectinload

from ..core.constants import MAX_SLOT_MINUTES, MIN_SLOT_MINUTES
from ..core.context import RequestContext
from ..core.errors import (
    BadRequestError,
    ConflictError,
    ForbiddenError,
    InvalidIntervalError,
    NotFoundError,
)
from ..db import models
from ..db.session import atomic
from . import overlap
from .pagination import Page, paginate
from .pricing import interval_minutes, to_minutes

logger = logging.getLogger(__name__)

_TIME_FIELDS = ("date", "start_time", "end_time")


@dataclass(slots=True)
class BulkSlotResult:
    created_count: int
    created_slots: list[models.Slot]


@dataclass(frozen=True, slots=True)
class SlotTemplate:
    start_time: str
    end_time: str


def _require_admin(ctx: RequestContext, action: str) -> None:
    if not ctx.is_admin:
        raise ForbiddenError(f"Only admin can {action} slots")


def _rolls_over(slot: models.Slot) -> bool:
    return to_minutes(slot.end_time) <= to_minutes(slot.start_time)


def _check_duration(start_time: str, end_time: str, *, allow_rollover: bool = False) -> None:
    start, end = interval_minutes(start_time, end_time, allow_rollover=allow_rollover)
    if not MIN_SLOT_MINUTES <= end - start <= MAX_SLOT_MINUTES:
        raise InvalidIntervalError(
            f"Slot duration must be between {MIN_SLOT_MINUTES} minutes and {MAX_SLOT_MINUTES // 60} hours"
        )


def _has_booking_in(db: Session, slot_id: int, statuses: Iterable[models.BookingStatus]) -> bool:
    return bool(
        db.scalar(
            select(
                exists().where(
                    models.Booking.slot_id == slot_id,
                    models.Booking.status.in_(list(statuses)),
                )
            )
        )
    )


class SlotService:
    """Admin-side slot management that keeps each venue's day free of overlaps."""

    def __init__(self, db: Session) -> None:
        self.db = db

    def _get_venue(self, venue_id: int) -> models.Venue:
        venue = self.db.get(models.Venue, venue_id)
        if not venue:
            raise NotFoundError("Venue not found")
        return venue

    def get_slot(self, slot_id: int) -> models.Slot:
        slot = self.db.get(models.Slot, slot_id)
        if not slot:
            raise NotFoundError("Slot not found")
        return slot

    def list_slots(
        self,
        *,
        venue_id: int | None = None,
        day: date | None = None,
        start_date: date | None = None,
        end_date: date | None = None,
        status: models.SlotStatus | None = None,
        page: int = 1,
        limit: int = 50,
    ) -> Page[models.Slot]:
        if start_date and end_date and end_date < start_date:
            raise BadRequestError("End date must be after or equal to start date")
        stmt = select(models.Slot).options(
            selectinload(models.Slot.venue), selectinload(models.Slot.bookings)
        )
        if venue_id:
            stmt = stmt.where(models.Slot.venue_id == venue_id)
        if status:
            stmt = stmt.where(models.Slot.status == status)
        if day:
            stmt = stmt.where(models.Slot.date == day)
        else:
            if start_date:
                stmt = stmt.where(models.Slot.date >= start_date)
            if end_date:
                stmt = stmt.where(models.Slot.date <= end_date)
        stmt = stmt.order_by(models.Slot.date, models.Slot.start_time, models.Slot.id)
        return paginate(self.db, stmt, page, limit)

    def create_slot(
        self,
        ctx: RequestContext,
        venue_id: int,
        day: date,
        start_time: str,
        end_time: str,
        status: models.SlotStatus = models.SlotStatus.available,
    ) -> models.Slot:
        self._get_venue(venue_id)
        _require_admin(ctx, "create")
        if status == models.SlotStatus.booked:
            raise BadRequestError("A new slot cannot start as booked")
        interval_minutes(start_time, end_time)
        with atomic(self.db):
            if overlap.has_overlap(self.db, venue_id, day, start_time, end_time):
                raise ConflictError("Time slot overlaps with existing slot")
            slot = models.Slot(
                venue_id=venue_id,
                date=day,
                start_time=start_time,
                end_time=end_time,
                status=status,
            )
            self.db.add(slot)
        self.db.refresh(slot)
        logger.info(
            "Slot created",
            extra={"slot_id": slot.id, "venue_id": venue_id, "date": day.isoformat()},
        )
        return slot

    def create_bulk_slots(
        self,
        ctx: RequestContext,
        venue_id: int,
        dates: Iterable[date],
        templates: Iterable[SlotTemplate],
        status: models.SlotStatus = models.SlotStatus.available,
    ) -> BulkSlotResult:
        """Create every ``date x template`` slot that fits.

        An end time at or before the start rolls over to the next day.
        Combinations that overlap an existing (or just created) slot are
        skipped rather than failing the batch.
        """
        self._get_venue(venue_id)
        _require_admin(ctx, "create")
        if status == models.SlotStatus.booked:
            raise BadRequestError("A new slot cannot start as booked")
        templates = list(templates)
        created: list[models.Slot] = []
        skipped = 0
        with atomic(self.db):
            for day in dates:
                for template in templates:
                    candidate = interval_minutes(
                        template.start_time, template.end_time, allow_rollover=True
                    )
                    if overlap.find_overlapping_slot(self.db, venue_id, day, candidate):
                        skipped += 1
                        continue
                    slot = models.Slot(
                        venue_id=venue_id,
                        date=day,
                        start_time=template.start_time,
                        end_time=template.end_time,
                        status=status,
                    )
                    self.db.add(slot)
                    # later combinations must see this one
                    self.db.flush()
                    created.append(slot)
        logger.info(
            "Bulk slots created",
            extra={"venue_id": venue_id, "created_count": len(created), "skipped_count": skipped},
        )
        return BulkSlotResult(created_count=len(created), created_slots=created)

    def update_slot(
        self, ctx: RequestContext, slot_id: int, patch: Mapping[str, Any]
    ) -> models.Slot:
        slot = self.get_slot(slot_id)
        _require_admin(ctx, "update")
        changes = {key: value for key, value in patch.items() if value is not None}
        with atomic(self.db):
            locked = self._lock(slot.id)
            has_active = _has_booking_in(self.db, locked.id, models.ACTIVE_BOOKING_STATUSES)
            time_changed = any(
                key in changes and changes[key] != getattr(locked, key) for key in _TIME_FIELDS
            )
            if time_changed:
                if has_active:
                    raise BadRequestError("Cannot modify time of a booked slot")
                day = changes.get("date", locked.date)
                start_time = changes.get("start_time", locked.start_time)
                end_time = changes.get("end_time", locked.end_time)
                # a slot created past midnight keeps its rollover form
                rollover = _rolls_over(locked)
                if "start_time" in changes or "end_time" in changes:
                    _check_duration(start_time, end_time, allow_rollover=rollover)
                if overlap.has_overlap(
                    self.db,
                    locked.venue_id,
                    day,
                    start_time,
                    end_time,
                    exclude_slot_id=locked.id,
                    allow_rollover=rollover,
                ):
                    raise ConflictError("Time slot overlaps with existing slot")
            new_status = changes.get("status")
            if new_status is not None and new_status != locked.status:
                if new_status == models.SlotStatus.booked:
                    raise BadRequestError("Slots become booked only through a booking")
                if has_active:
                    raise BadRequestError("Cannot change status of a booked slot")
            for key in (*_TIME_FIELDS, "status"):
                if key in changes:
                    setattr(locked, key, changes[key])
        self.db.refresh(locked)
        logger.info("Slot updated", extra={"slot_id": slot_id, "fields": sorted(changes)})
        return locked

    def delete_slot(self, ctx: RequestContext, slot_id: int) -> None:
        slot = self.get_slot(slot_id)
        _require_admin(ctx, "delete")
        with atomic(self.db):
            locked = self._lock(slot.id)
            # completed bookings keep the slot as history for reviews
            if _has_booking_in(
                self.db,
                locked.id,
                (*models.ACTIVE_BOOKING_STATUSES, models.BookingStatus.completed),
            ):
                raise BadRequestError("Cannot delete a booked slot")
            self.db.delete(locked)
        logger.info("Slot deleted", extra={"slot_id": slot_id})

    def _lock(self, slot_id: int) -> models.Slot:
        return self.db.execute(
            select(models.Slot).where(models.Slot.id == slot_id).with_for_update()
            .execution_options(populate_existing=True)
        ).scalar_one()
