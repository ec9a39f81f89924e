import logging
from dataclasses import dataclass
from datetime import date, datetime, tzinfo

from sqlalchemy import exists, select, update
from sqlalchemy.exc import DBAPIError
from sqlalchemy.orm import Session, selectinload

from ..core.clock import Clock, local_datetime, utc_now, venue_timezone
from ..core.context import RequestContext
from ..core.errors import BadRequestError, ConflictError, ForbiddenError, NotFoundError
from ..db import models
from ..db.session import atomic, is_contention_error
from .pagination import Page, paginate
from .pricing import RefundInfo, compute_duration_hours, compute_price, compute_refund, parse_wall_clock

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class SlotAvailability:
    available: bool
    reason: str | None = None
    slot: models.Slot | None = None


class BookingService:
    """Reservation lifecycle: availability, atomic booking, cancellation with refunds.

    The clock and venue timezone are injected so callers (and tests) decide
    what "now" means for past-slot and refund-window checks.
    """

    def __init__(self, db: Session, *, clock: Clock = utc_now, tz: tzinfo | None = None) -> None:
        self.db = db
        self.clock = clock
        self.tz = tz or venue_timezone()

    def slot_start(self, slot: models.Slot) -> datetime:
        return local_datetime(slot.date, parse_wall_clock(slot.start_time), self.tz)

    def check_availability(self, slot_id: int) -> SlotAvailability:
        slot = self.db.get(models.Slot, slot_id)
        if not slot:
            return SlotAvailability(False, "Slot not found")
        if slot.status != models.SlotStatus.available:
            return SlotAvailability(False, f"Slot is {slot.status.value}", slot)
        if self._has_active_booking(slot.id):
            return SlotAvailability(False, "Slot already has an active booking", slot)
        if self.slot_start(slot) <= self.clock():
            return SlotAvailability(False, "Cannot book a past slot", slot)
        return SlotAvailability(True, slot=slot)

    def create_booking(
        self, ctx: RequestContext, slot_id: int, notes: str | None = None
    ) -> models.Booking:
        availability = self.check_availability(slot_id)
        if availability.slot is None:
            raise NotFoundError("Slot not found")
        if not availability.available:
            raise ConflictError(availability.reason or "Slot is not available")
        try:
            with atomic(self.db):
                slot = self._lock_slot(slot_id)
                claimed = self.db.execute(
                    update(models.Slot)
                    .where(
                        models.Slot.id == slot.id,
                        models.Slot.status == models.SlotStatus.available,
                    )
                    .values(status=models.SlotStatus.booked)
                    .execution_options(synchronize_session=False)
                )
                if claimed.rowcount != 1:
                    raise ConflictError("Slot is no longer available")
                self.db.refresh(slot)
                duration = compute_duration_hours(slot.start_time, slot.end_time, allow_rollover=True)
                booking = models.Booking(
                    user_id=ctx.user_id,
                    slot_id=slot.id,
                    status=models.BookingStatus.pending,
                    payment_status=models.PaymentStatus.pending,
                    total_price=compute_price(duration, slot.venue.price_per_hour),
                    notes=notes,
                )
                self.db.add(booking)
                self.db.flush()
                self._audit(
                    ctx,
                    "booking.created",
                    {"booking_id": booking.id, "slot_id": slot.id, "total_price": str(booking.total_price)},
                )
        except DBAPIError as exc:
            self.db.rollback()
            if not is_contention_error(exc):
                raise
            logger.warning(
                "Booking lost slot race",
                extra={"slot_id": slot_id, "user_id": ctx.user_id},
            )
            raise ConflictError("Slot was just booked by someone else") from exc
        self.db.refresh(booking)
        logger.info(
            "Booking created",
            extra={"booking_id": booking.id, "slot_id": slot_id, "user_id": ctx.user_id},
        )
        return booking

    def get_booking(self, booking_id: int, ctx: RequestContext) -> models.Booking:
        booking = self.db.get(models.Booking, booking_id)
        if not booking:
            raise NotFoundError("Booking not found")
        if not ctx.can_act_for(booking.user_id):
            raise ForbiddenError("You can only access your own bookings")
        return booking

    def list_bookings(
        self,
        ctx: RequestContext,
        *,
        user_id: int | None = None,
        venue_id: int | None = None,
        slot_id: int | None = None,
        status: models.BookingStatus | None = None,
        start_date: date | None = None,
        end_date: date | None = None,
        page: int = 1,
        limit: int = 20,
    ) -> Page[models.Booking]:
        if not ctx.is_admin:
            user_id = ctx.user_id
        stmt = (
            select(models.Booking)
            .join(models.Booking.slot)
            .options(selectinload(models.Booking.slot).selectinload(models.Slot.venue))
        )
        if user_id:
            stmt = stmt.where(models.Booking.user_id == user_id)
        if venue_id:
            stmt = stmt.where(models.Slot.venue_id == venue_id)
        if slot_id:
            stmt = stmt.where(models.Booking.slot_id == slot_id)
        if status:
            stmt = stmt.where(models.Booking.status == status)
        if start_date:
            stmt = stmt.where(models.Slot.date >= start_date)
        if end_date:
            stmt = stmt.where(models.Slot.date <= end_date)
        stmt = stmt.order_by(models.Booking.created_at.desc(), models.Booking.id.desc())
        return paginate(self.db, stmt, page, limit)

    def refund_preview(self, booking_id: int, ctx: RequestContext) -> RefundInfo:
        booking = self.get_booking(booking_id, ctx)
        self._ensure_cancellable(booking)
        return compute_refund(self.slot_start(booking.slot), booking.total_price, self.clock())

    def cancel_booking(self, booking_id: int, ctx: RequestContext) -> models.Booking:
        booking = self.db.get(models.Booking, booking_id)
        if not booking:
            raise NotFoundError("Booking not found")
        if not ctx.can_act_for(booking.user_id):
            raise ForbiddenError("You can only cancel your own bookings")
        self._ensure_cancellable(booking)
        with atomic(self.db):
            locked = self._lock_booking(booking.id)
            # a concurrent cancel may have landed since the first read
            self._ensure_cancellable(locked)
            now = self.clock()
            refund = compute_refund(self.slot_start(locked.slot), locked.total_price, now)
            locked.slot.status = models.SlotStatus.available
            locked.status = models.BookingStatus.cancelled
            locked.refund_amount = refund.amount
            locked.cancelled_at = now
            if refund.amount > 0:
                locked.payment_status = models.PaymentStatus.refunded
            self._audit(
                ctx,
                "booking.cancelled",
                {
                    "booking_id": locked.id,
                    "refund_percentage": refund.percentage,
                    "refund_amount": str(refund.amount),
                },
            )
        self.db.refresh(locked)
        logger.info(
            "Booking cancelled",
            extra={
                "booking_id": locked.id,
                "refund_percentage": refund.percentage,
                "refund_amount": str(refund.amount),
            },
        )
        return locked

    def update_booking_status(
        self, ctx: RequestContext, booking_id: int, status: models.BookingStatus
    ) -> models.Booking:
        """Admin overwrite of a booking status.

        Any target status is accepted. The slot follows the booking so that a
        booked slot always has exactly one active booking behind it.
        """
        if not ctx.is_admin:
            raise ForbiddenError("Only admin can update booking status")
        booking = self.db.get(models.Booking, booking_id)
        if not booking:
            raise NotFoundError("Booking not found")
        previous = booking.status
        try:
            with atomic(self.db):
                locked = self._lock_booking(booking.id)
                was_active = locked.status in models.ACTIVE_BOOKING_STATUSES
                becomes_active = status in models.ACTIVE_BOOKING_STATUSES
                if was_active and status == models.BookingStatus.cancelled:
                    locked.slot.status = models.SlotStatus.available
                elif becomes_active and not was_active:
                    if locked.slot.status != models.SlotStatus.available:
                        raise ConflictError("Slot is no longer available")
                    locked.slot.status = models.SlotStatus.booked
                locked.status = status
                if status == models.BookingStatus.confirmed:
                    locked.payment_status = models.PaymentStatus.paid
                self.db.flush()
                self._audit(
                    ctx,
                    "booking.status_updated",
                    {"booking_id": locked.id, "from": previous.value, "to": status.value},
                )
        except DBAPIError as exc:
            self.db.rollback()
            if not is_contention_error(exc):
                raise
            raise ConflictError("Slot already has an active booking") from exc
        self.db.refresh(locked)
        logger.info(
            "Booking status overwritten",
            extra={"booking_id": booking_id, "from": previous.value, "to": status.value},
        )
        return locked

    def _ensure_cancellable(self, booking: models.Booking) -> None:
        if booking.status == models.BookingStatus.cancelled:
            raise BadRequestError("Booking is already cancelled")
        if booking.status == models.BookingStatus.completed:
            raise BadRequestError("Cannot cancel a completed booking")

    def _has_active_booking(self, slot_id: int) -> bool:
        return bool(
            self.db.scalar(
                select(
                    exists().where(
                        models.Booking.slot_id == slot_id,
                        models.Booking.status.in_(models.ACTIVE_BOOKING_STATUSES),
                    )
                )
            )
        )

    def _lock_slot(self, slot_id: int) -> models.Slot:
        return self.db.execute(
            select(models.Slot).where(models.Slot.id == slot_id).with_for_update()
            .execution_options(populate_existing=True)
        ).scalar_one()

    def _lock_booking(self, booking_id: int) -> models.Booking:
        return self.db.execute(
            select(models.Booking).where(models.Booking.id == booking_id).with_for_update()
            .execution_options(populate_existing=True)
        ).scalar_one()

    def _audit(self, ctx: RequestContext, action: str, payload: dict) -> None:
        actor = models.ActorType.admin if ctx.is_admin else models.ActorType.user
        self.db.add(
            models.AuditLog(actor_type=actor, actor_id=ctx.user_id, action=action, payload=payload)
        )
