import logging
from datetime import date

import pytest
from sportbook.core.errors import (
    BadRequestError,
    ConflictError,
    ForbiddenError,
    InvalidIntervalError,
    NotFoundError,
)
from sportbook.db import models
from sportbook.services.slot_service import SlotService, SlotTemplate

from factories import SLOT_DAY, create_admin, create_booking, create_slot, create_user, create_venue, ctx_for


@pytest.fixture()
def admin_ctx(db_session):
    return ctx_for(create_admin(db_session))


def test_create_slot_defaults_to_available(db_session, admin_ctx):
    venue = create_venue(db_session)

    slot = SlotService(db_session).create_slot(admin_ctx, venue.id, SLOT_DAY, "10:00", "11:30")

    assert slot.id is not None
    assert slot.status == models.SlotStatus.available


def test_create_slot_requires_admin(db_session):
    venue = create_venue(db_session)
    user_ctx = ctx_for(create_user(db_session))

    with pytest.raises(ForbiddenError):
        SlotService(db_session).create_slot(user_ctx, venue.id, SLOT_DAY, "10:00", "11:00")


def test_create_slot_unknown_venue(db_session, admin_ctx):
    with pytest.raises(NotFoundError):
        SlotService(db_session).create_slot(admin_ctx, 999, SLOT_DAY, "10:00", "11:00")


def test_create_slot_rejects_overlap(db_session, admin_ctx):
    venue = create_venue(db_session)
    service = SlotService(db_session)
    service.create_slot(admin_ctx, venue.id, SLOT_DAY, "10:00", "12:00")

    with pytest.raises(ConflictError):
        service.create_slot(admin_ctx, venue.id, SLOT_DAY, "11:00", "13:00")

    adjacent = service.create_slot(admin_ctx, venue.id, SLOT_DAY, "12:00", "13:00")
    assert adjacent.start_time == "12:00"


def test_bulk_creation_skips_conflicting_combination(db_session, admin_ctx):
    venue = create_venue(db_session)
    existing = create_slot(db_session, venue, day=date(2030, 6, 3), start="09:00", end="10:00")
    templates = [
        SlotTemplate("09:00", "10:00"),
        SlotTemplate("10:00", "11:00"),
        SlotTemplate("11:00", "12:00"),
    ]

    result = SlotService(db_session).create_bulk_slots(
        admin_ctx, venue.id, [date(2030, 6, 3), date(2030, 6, 4)], templates
    )

    assert result.created_count == 5
    created = {(slot.date, slot.start_time) for slot in result.created_slots}
    assert (existing.date, "09:00") not in created
    assert (date(2030, 6, 4), "09:00") in created
    assert db_session.query(models.Slot).count() == 6


def test_bulk_creation_rolls_over_midnight_and_skips_duplicates_in_batch(db_session, admin_ctx):
    venue = create_venue(db_session)
    templates = [SlotTemplate("23:00", "01:00"), SlotTemplate("23:30", "00:30")]

    result = SlotService(db_session).create_bulk_slots(admin_ctx, venue.id, [SLOT_DAY], templates)

    assert result.created_count == 1
    assert result.created_slots[0].end_time == "01:00"


def test_bulk_creation_logs_counts_at_info_level(db_session, admin_ctx, caplog):
    caplog.set_level(logging.INFO)
    venue = create_venue(db_session)
    create_slot(db_session, venue, start="09:00", end="10:00")
    templates = [SlotTemplate("09:00", "10:00"), SlotTemplate("10:00", "11:00")]

    result = SlotService(db_session).create_bulk_slots(admin_ctx, venue.id, [SLOT_DAY], templates)

    assert result.created_count == 1
    record = next(r for r in caplog.records if r.getMessage() == "Bulk slots created")
    assert record.created_count == 1
    assert record.skipped_count == 1


def test_update_slot_enforces_duration_bounds_on_single_field(db_session, admin_ctx):
    venue = create_venue(db_session)
    slot = create_slot(db_session, venue, start="10:00", end="12:00")
    service = SlotService(db_session)

    with pytest.raises(InvalidIntervalError):
        service.update_slot(admin_ctx, slot.id, {"end_time": "10:05"})
    with pytest.raises(InvalidIntervalError):
        service.update_slot(admin_ctx, slot.id, {"start_time": "02:00"})

    db_session.refresh(slot)
    assert (slot.start_time, slot.end_time) == ("10:00", "12:00")


def test_update_slot_keeps_rollover_form_of_overnight_slot(db_session, admin_ctx):
    venue = create_venue(db_session)
    service = SlotService(db_session)
    result = service.create_bulk_slots(admin_ctx, venue.id, [SLOT_DAY], [SlotTemplate("23:00", "01:00")])
    overnight = result.created_slots[0]

    moved = service.update_slot(admin_ctx, overnight.id, {"start_time": "22:30"})

    assert (moved.start_time, moved.end_time) == ("22:30", "01:00")

    with pytest.raises(InvalidIntervalError):
        service.update_slot(admin_ctx, overnight.id, {"end_time": "08:00"})


def test_update_slot_time_blocked_by_active_booking(db_session, admin_ctx):
    venue = create_venue(db_session)
    slot = create_slot(db_session, venue)
    create_booking(db_session, create_user(db_session), slot)

    with pytest.raises(BadRequestError):
        SlotService(db_session).update_slot(admin_ctx, slot.id, {"start_time": "09:00"})


def test_update_slot_revalidates_overlap_excluding_itself(db_session, admin_ctx):
    venue = create_venue(db_session)
    slot = create_slot(db_session, venue, start="10:00", end="11:00")
    create_slot(db_session, venue, start="12:00", end="13:00")
    service = SlotService(db_session)

    moved = service.update_slot(admin_ctx, slot.id, {"start_time": "10:30", "end_time": "11:30"})
    assert (moved.start_time, moved.end_time) == ("10:30", "11:30")

    with pytest.raises(ConflictError):
        service.update_slot(admin_ctx, slot.id, {"end_time": "12:30"})


def test_update_slot_can_block_free_slot(db_session, admin_ctx):
    venue = create_venue(db_session)
    slot = create_slot(db_session, venue)

    updated = SlotService(db_session).update_slot(
        admin_ctx, slot.id, {"status": models.SlotStatus.blocked}
    )

    assert updated.status == models.SlotStatus.blocked


def test_update_slot_never_marks_booked_by_hand(db_session, admin_ctx):
    venue = create_venue(db_session)
    slot = create_slot(db_session, venue)

    with pytest.raises(BadRequestError):
        SlotService(db_session).update_slot(admin_ctx, slot.id, {"status": models.SlotStatus.booked})


def test_delete_slot(db_session, admin_ctx):
    venue = create_venue(db_session)
    slot = create_slot(db_session, venue)

    SlotService(db_session).delete_slot(admin_ctx, slot.id)

    assert db_session.get(models.Slot, slot.id) is None


def test_delete_slot_with_active_booking_fails(db_session, admin_ctx):
    venue = create_venue(db_session)
    slot = create_slot(db_session, venue)
    create_booking(db_session, create_user(db_session), slot, status=models.BookingStatus.confirmed)

    with pytest.raises(BadRequestError):
        SlotService(db_session).delete_slot(admin_ctx, slot.id)


def test_delete_slot_with_only_cancelled_bookings(db_session, admin_ctx):
    venue = create_venue(db_session)
    slot = create_slot(db_session, venue)
    create_booking(db_session, create_user(db_session), slot, status=models.BookingStatus.cancelled)

    SlotService(db_session).delete_slot(admin_ctx, slot.id)

    assert db_session.query(models.Booking).count() == 0


def test_list_slots_filters_and_orders(db_session):
    venue = create_venue(db_session)
    create_slot(db_session, venue, start="14:00", end="15:00")
    create_slot(db_session, venue, start="09:00", end="10:00")
    create_slot(db_session, venue, day=date(2030, 6, 5), start="08:00", end="09:00")

    page = SlotService(db_session).list_slots(venue_id=venue.id, day=SLOT_DAY)

    assert page.total == 2
    assert [slot.start_time for slot in page.items] == ["09:00", "14:00"]
    assert all(not slot.is_booked for slot in page.items)
