from decimal import Decimal

import pytest
from sportbook.core.errors import ForbiddenError, NotFoundError
from sportbook.db import models
from sportbook.services.venue_service import VenueService

from factories import create_admin, create_booking, create_slot, create_user, create_venue, ctx_for


def test_list_filters_by_type_price_and_search(db_session):
    create_venue(db_session, name="Central Arena", price="40.00")
    create_venue(db_session, name="Riverside Courts", price="25.00", type=models.VenueType.tennis)
    create_venue(
        db_session,
        name="Night Hall",
        price="60.00",
        address="5 Riverside Ave",
        type=models.VenueType.basketball,
    )
    service = VenueService(db_session)

    tennis = service.list_venues(type=models.VenueType.tennis)
    cheap = service.list_venues(price_max=Decimal("40"))
    river = service.list_venues(search="riverside", sort_by="name", order="asc")

    assert [item.venue.name for item in tennis.items] == ["Riverside Courts"]
    assert {item.venue.name for item in cheap.items} == {"Central Arena", "Riverside Courts"}
    assert [item.venue.name for item in river.items] == ["Night Hall", "Riverside Courts"]


def test_list_hides_inactive_and_paginates(db_session):
    for index in range(5):
        create_venue(db_session, name=f"Venue {index}", price=f"{10 + index}.00")
    create_venue(db_session, name="Closed", is_active=False)

    page = VenueService(db_session).list_venues(sort_by="price_per_hour", order="asc", page=2, limit=2)

    assert page.total == 5
    assert page.total_pages == 3
    assert [item.venue.name for item in page.items] == ["Venue 2", "Venue 3"]


def test_listing_carries_rating_aggregate(db_session):
    venue = create_venue(db_session)
    for index, rating in enumerate([5, 4]):
        user = create_user(db_session, email=f"r{index}@example.com")
        slot = create_slot(db_session, venue, start=f"1{index}:00", end=f"1{index}:30")
        create_booking(db_session, user, slot, status=models.BookingStatus.completed)
        db_session.add(models.Review(user_id=user.id, venue_id=venue.id, rating=rating))
    db_session.commit()

    [item] = VenueService(db_session).list_venues().items
    detail = VenueService(db_session).get_venue(venue.id)

    assert item.average_rating == 4.5
    assert item.reviews_count == 2
    assert len(detail.recent_reviews) == 2


def test_admin_crud_and_soft_delete(db_session):
    admin_ctx = ctx_for(create_admin(db_session))
    service = VenueService(db_session)

    venue = service.create_venue(
        admin_ctx,
        {
            "name": "New Court",
            "type": models.VenueType.volleyball,
            "address": "9 Beach Rd",
            "price_per_hour": 30.5,
            "amenities": ["showers"],
        },
    )
    assert venue.price_per_hour == Decimal("30.50")

    updated = service.update_venue(admin_ctx, venue.id, {"name": "Beach Court"})
    assert updated.name == "Beach Court"

    service.delete_venue(admin_ctx, venue.id)
    assert service.list_venues().total == 0
    assert service.get_venue(venue.id).venue.is_active is False


def test_venue_mutations_require_admin(db_session):
    venue = create_venue(db_session)
    user_ctx = ctx_for(create_user(db_session))

    with pytest.raises(ForbiddenError):
        VenueService(db_session).update_venue(user_ctx, venue.id, {"name": "Mine"})


def test_unknown_venue(db_session):
    with pytest.raises(NotFoundError):
        VenueService(db_session).get_venue(404)
