import logging
from dataclasses import dataclass, field
from typing import Iterable

from sqlalchemy import exists, func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session, selectinload

from ..core.context import RequestContext
from ..core.errors import BadRequestError, ConflictError, ForbiddenError, NotFoundError
from ..db import models
from ..db.session import atomic
from .pagination import Page, order_by, paginate

logger = logging.getLogger(__name__)

REVIEW_SORT_FIELDS = {
    "created_at": models.Review.created_at,
    "rating": models.Review.rating,
}


@dataclass(slots=True)
class RatingSummary:
    average: float
    count: int


@dataclass(slots=True)
class ReviewStats:
    total_reviews: int
    average_rating: float
    rating_distribution: dict[int, int] = field(default_factory=dict)


def _round_rating(value) -> float:
    return round(float(value or 0), 1)


def rating_summaries(db: Session, venue_ids: Iterable[int]) -> dict[int, RatingSummary]:
    """Average rating (one decimal) and review count per venue in one query."""
    venue_ids = list(venue_ids)
    if not venue_ids:
        return {}
    rows = db.execute(
        select(models.Review.venue_id, func.avg(models.Review.rating), func.count(models.Review.id))
        .where(models.Review.venue_id.in_(venue_ids))
        .group_by(models.Review.venue_id)
    ).all()
    summaries = {venue_id: RatingSummary(0.0, 0) for venue_id in venue_ids}
    for venue_id, average, count in rows:
        summaries[venue_id] = RatingSummary(_round_rating(average), int(count))
    return summaries


class ReviewService:
    def __init__(self, db: Session) -> None:
        self.db = db

    def _get_venue(self, venue_id: int) -> models.Venue:
        venue = self.db.get(models.Venue, venue_id)
        if not venue:
            raise NotFoundError("Venue not found")
        return venue

    def get_review(self, review_id: int) -> models.Review:
        review = self.db.get(models.Review, review_id)
        if not review:
            raise NotFoundError("Review not found")
        return review

    def list_reviews(
        self,
        *,
        venue_id: int | None = None,
        user_id: int | None = None,
        rating: int | None = None,
        sort_by: str = "created_at",
        order: str = "desc",
        page: int = 1,
        limit: int = 20,
    ) -> Page[models.Review]:
        if sort_by not in REVIEW_SORT_FIELDS:
            raise BadRequestError(f"sort_by must be one of {', '.join(REVIEW_SORT_FIELDS)}")
        stmt = select(models.Review).options(
            selectinload(models.Review.user), selectinload(models.Review.venue)
        )
        if venue_id:
            stmt = stmt.where(models.Review.venue_id == venue_id)
        if user_id:
            stmt = stmt.where(models.Review.user_id == user_id)
        if rating:
            stmt = stmt.where(models.Review.rating == rating)
        stmt = stmt.order_by(order_by(REVIEW_SORT_FIELDS[sort_by], order), models.Review.id.desc())
        result = paginate(self.db, stmt, page, limit)
        if venue_id and result.total:
            result.extra["average_rating"] = rating_summaries(self.db, [venue_id])[venue_id].average
        return result

    def review_stats(self, venue_id: int) -> ReviewStats:
        self._get_venue(venue_id)
        distribution = {score: 0 for score in range(1, 6)}
        rows = self.db.execute(
            select(models.Review.rating, func.count(models.Review.id))
            .where(models.Review.venue_id == venue_id)
            .group_by(models.Review.rating)
        ).all()
        for score, count in rows:
            distribution[score] = int(count)
        total = sum(distribution.values())
        average = sum(score * count for score, count in distribution.items()) / total if total else 0
        return ReviewStats(
            total_reviews=total,
            average_rating=_round_rating(average),
            rating_distribution=distribution,
        )

    def create_review(
        self, ctx: RequestContext, venue_id: int, rating: int, comment: str | None = None
    ) -> models.Review:
        """Only users who completed a booking at the venue may review it, once."""
        self._get_venue(venue_id)
        existing = self.db.scalar(
            select(models.Review.id).where(
                models.Review.user_id == ctx.user_id,
                models.Review.venue_id == venue_id,
            )
        )
        if existing:
            raise ConflictError("You have already reviewed this venue")
        if not self._has_completed_booking(ctx.user_id, venue_id):
            raise ForbiddenError("You can only review venues where you have completed a booking")
        review = models.Review(
            user_id=ctx.user_id,
            venue_id=venue_id,
            rating=rating,
            comment=comment,
        )
        try:
            with atomic(self.db):
                self.db.add(review)
        except IntegrityError as exc:
            self.db.rollback()
            raise ConflictError("You have already reviewed this venue") from exc
        self.db.refresh(review)
        logger.info(
            "Review created",
            extra={"review_id": review.id, "venue_id": venue_id, "user_id": ctx.user_id},
        )
        return review

    def update_review(
        self,
        review_id: int,
        ctx: RequestContext,
        rating: int | None = None,
        comment: str | None = None,
    ) -> models.Review:
        review = self.get_review(review_id)
        if not ctx.can_act_for(review.user_id):
            raise ForbiddenError("You can only update your own reviews")
        if rating is None and comment is None:
            raise BadRequestError("At least one field must be provided")
        with atomic(self.db):
            if rating is not None:
                review.rating = rating
            if comment is not None:
                review.comment = comment
        self.db.refresh(review)
        logger.info("Review updated", extra={"review_id": review.id})
        return review

    def delete_review(self, review_id: int, ctx: RequestContext) -> None:
        review = self.get_review(review_id)
        if not ctx.can_act_for(review.user_id):
            raise ForbiddenError("You can only delete your own reviews")
        with atomic(self.db):
            self.db.delete(review)
        logger.info("Review deleted", extra={"review_id": review_id, "by_admin": ctx.is_admin})

    def _has_completed_booking(self, user_id: int, venue_id: int) -> bool:
        return bool(
            self.db.scalar(
                select(
                    exists()
                    .where(
                        models.Booking.user_id == user_id,
                        models.Booking.status == models.BookingStatus.completed,
                        models.Booking.slot_id == models.Slot.id,
                        models.Slot.venue_id == venue_id,
                    )
                )
            )
        )
