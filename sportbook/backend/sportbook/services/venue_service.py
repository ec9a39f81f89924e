import logging
from dataclasses import dataclass, field
from decimal import Decimal
from typing import Any, Mapping

from sqlalchemy import or_, select
from sqlalchemy.orm import Session, selectinload

from ..core.constants import RECENT_REVIEWS_LIMIT
from ..core.context import RequestContext
from ..core.errors import BadRequestError, ForbiddenError, NotFoundError
from ..db import models
from ..db.session import atomic
from .pagination import Page, order_by, paginate
from .pricing import to_money
from .review_service import RatingSummary, rating_summaries

logger = logging.getLogger(__name__)

VENUE_SORT_FIELDS = {
    "created_at": models.Venue.created_at,
    "price_per_hour": models.Venue.price_per_hour,
    "name": models.Venue.name,
}

_UPDATABLE_FIELDS = (
    "name",
    "type",
    "address",
    "description",
    "price_per_hour",
    "image_url",
    "amenities",
    "is_active",
)


@dataclass(slots=True)
class VenueSummary:
    venue: models.Venue
    average_rating: float
    reviews_count: int


@dataclass(slots=True)
class VenueDetail(VenueSummary):
    recent_reviews: list[models.Review] = field(default_factory=list)


def _venue_fields(data: Mapping[str, Any]) -> dict[str, Any]:
    fields = {
        key: value for key, value in data.items() if key in _UPDATABLE_FIELDS and value is not None
    }
    if "price_per_hour" in fields:
        fields["price_per_hour"] = to_money(fields["price_per_hour"])
    return fields


def _require_admin(ctx: RequestContext, action: str) -> None:
    if not ctx.is_admin:
        raise ForbiddenError(f"Only admin can {action} venues")


class VenueService:
    def __init__(self, db: Session) -> None:
        self.db = db

    def list_venues(
        self,
        *,
        type: models.VenueType | None = None,
        price_min: Decimal | float | None = None,
        price_max: Decimal | float | None = None,
        search: str | None = None,
        sort_by: str = "created_at",
        order: str = "desc",
        page: int = 1,
        limit: int = 20,
    ) -> Page[VenueSummary]:
        if sort_by not in VENUE_SORT_FIELDS:
            raise BadRequestError(f"sort_by must be one of {', '.join(VENUE_SORT_FIELDS)}")
        if price_min is not None and price_max is not None and price_min > price_max:
            raise BadRequestError("price_min must not exceed price_max")
        stmt = select(models.Venue).where(models.Venue.is_active.is_(True))
        if type:
            stmt = stmt.where(models.Venue.type == type)
        if price_min is not None:
            stmt = stmt.where(models.Venue.price_per_hour >= price_min)
        if price_max is not None:
            stmt = stmt.where(models.Venue.price_per_hour <= price_max)
        if search:
            pattern = f"%{search.strip()}%"
            stmt = stmt.where(
                or_(models.Venue.name.ilike(pattern), models.Venue.address.ilike(pattern))
            )
        stmt = stmt.order_by(order_by(VENUE_SORT_FIELDS[sort_by], order), models.Venue.id)
        result = paginate(self.db, stmt, page, limit)
        ratings = rating_summaries(self.db, [venue.id for venue in result.items])
        return Page(
            items=[self._summary(venue, ratings[venue.id]) for venue in result.items],
            total=result.total,
            page=result.page,
            limit=result.limit,
        )

    def get_venue(self, venue_id: int) -> VenueDetail:
        venue = self._get(venue_id)
        recent = (
            self.db.execute(
                select(models.Review)
                .where(models.Review.venue_id == venue.id)
                .options(selectinload(models.Review.user))
                .order_by(models.Review.created_at.desc(), models.Review.id.desc())
                .limit(RECENT_REVIEWS_LIMIT)
            )
            .scalars()
            .all()
        )
        rating = rating_summaries(self.db, [venue.id])[venue.id]
        return VenueDetail(
            venue=venue,
            average_rating=rating.average,
            reviews_count=rating.count,
            recent_reviews=list(recent),
        )

    def create_venue(self, ctx: RequestContext, data: Mapping[str, Any]) -> models.Venue:
        _require_admin(ctx, "create")
        venue = models.Venue(**_venue_fields(data))
        with atomic(self.db):
            self.db.add(venue)
        self.db.refresh(venue)
        logger.info("Venue created", extra={"venue_id": venue.id, "venue_type": venue.type.value})
        return venue

    def update_venue(
        self, ctx: RequestContext, venue_id: int, patch: Mapping[str, Any]
    ) -> models.Venue:
        _require_admin(ctx, "update")
        venue = self._get(venue_id)
        changes = _venue_fields(patch)
        with atomic(self.db):
            for key, value in changes.items():
                setattr(venue, key, value)
        self.db.refresh(venue)
        logger.info("Venue updated", extra={"venue_id": venue.id, "fields": sorted(changes)})
        return venue

    def delete_venue(self, ctx: RequestContext, venue_id: int) -> None:
        """Soft delete: the venue leaves public listings but keeps its history."""
        _require_admin(ctx, "delete")
        venue = self._get(venue_id)
        with atomic(self.db):
            venue.is_active = False
        logger.info("Venue deactivated", extra={"venue_id": venue_id})

    def _get(self, venue_id: int) -> models.Venue:
        venue = self.db.get(models.Venue, venue_id)
        if not venue:
            raise NotFoundError("Venue not found")
        return venue

    @staticmethod
    def _summary(venue: models.Venue, rating: RatingSummary) -> VenueSummary:
        return VenueSummary(venue=venue, average_rating=rating.average, reviews_count=rating.count)
