import itertools

import pytest
from sportbook.services import overlap

from factories import SLOT_DAY, create_slot, create_venue


INTERVALS = [(600, 720), (660, 780), (720, 780), (540, 600), (630, 690), (480, 840), (600, 600)]


@pytest.mark.parametrize("a, b", list(itertools.product(INTERVALS, repeat=2)))
def test_overlap_is_symmetric(a, b):
    assert overlap.intervals_overlap(a, b) == overlap.intervals_overlap(b, a)


def test_touching_boundaries_do_not_overlap():
    assert not overlap.intervals_overlap((600, 720), (720, 780))
    assert not overlap.intervals_overlap((540, 600), (600, 720))


def test_partial_and_full_containment_overlap():
    assert overlap.intervals_overlap((600, 720), (660, 780))
    assert overlap.intervals_overlap((600, 720), (630, 690))
    assert overlap.intervals_overlap((630, 690), (600, 720))
    assert overlap.intervals_overlap((600, 720), (600, 720))


def test_has_overlap_scopes_to_venue_and_day(db_session):
    venue = create_venue(db_session)
    other = create_venue(db_session, name="Side Court")
    slot = create_slot(db_session, venue, start="10:00", end="12:00")

    assert overlap.has_overlap(db_session, venue.id, SLOT_DAY, "11:00", "13:00")
    assert not overlap.has_overlap(db_session, venue.id, SLOT_DAY, "12:00", "13:00")
    assert not overlap.has_overlap(db_session, other.id, SLOT_DAY, "11:00", "13:00")
    assert not overlap.has_overlap(
        db_session, venue.id, SLOT_DAY, "11:00", "13:00", exclude_slot_id=slot.id
    )


def test_rolled_over_slot_blocks_late_evening(db_session):
    venue = create_venue(db_session)
    create_slot(db_session, venue, start="23:00", end="01:00")

    assert overlap.has_overlap(db_session, venue.id, SLOT_DAY, "22:00", "23:30")
    assert not overlap.has_overlap(db_session, venue.id, SLOT_DAY, "21:00", "23:00")
