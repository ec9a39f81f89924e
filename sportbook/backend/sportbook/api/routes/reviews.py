from fastapi import APIRouter, Depends, Query, status
from ...api import deps
from ...core.constants import DEFAULT_PAGE_SIZE, MAX_PAGE_SIZE
from ...core.context import RequestContext
from ...db import schemas
from ...services.review_service import ReviewService

router = APIRouter(prefix="/reviews", tags=["reviews"])


@router.get("", response_model=schemas.ReviewList)
def list_reviews(
    venue_id: int | None = None,
    user_id: int | None = None,
    rating: int | None = Query(default=None, ge=1, le=5),
    sort_by: str = "created_at",
    order: str = "desc",
    page: int = Query(default=1, ge=1),
    limit: int = Query(default=DEFAULT_PAGE_SIZE, ge=1, le=MAX_PAGE_SIZE),
    service: ReviewService = Depends(deps.get_review_service),
):
    result = service.list_reviews(
        venue_id=venue_id,
        user_id=user_id,
        rating=rating,
        sort_by=sort_by,
        order=order,
        page=page,
        limit=limit,
    )
    return schemas.ReviewList(
        reviews=[schemas.Review.model_validate(review) for review in result.items],
        pagination=schemas.Pagination.from_page(result),
        average_rating=result.extra.get("average_rating"),
    )


@router.get("/stats/{venue_id}", response_model=schemas.ReviewStats)
def review_stats(venue_id: int, service: ReviewService = Depends(deps.get_review_service)):
    return service.review_stats(venue_id)


@router.get("/{review_id}", response_model=schemas.Review)
def get_review(review_id: int, service: ReviewService = Depends(deps.get_review_service)):
    return service.get_review(review_id)


@router.post("", response_model=schemas.Review, status_code=status.HTTP_201_CREATED)
def create_review(
    payload: schemas.ReviewCreate,
    ctx: RequestContext = Depends(deps.get_request_context),
    service: ReviewService = Depends(deps.get_review_service),
):
    return service.create_review(ctx, payload.venue_id, payload.rating, payload.comment)


@router.patch("/{review_id}", response_model=schemas.Review)
def update_review(
    review_id: int,
    payload: schemas.ReviewUpdate,
    ctx: RequestContext = Depends(deps.get_request_context),
    service: ReviewService = Depends(deps.get_review_service),
):
    return service.update_review(review_id, ctx, payload.rating, payload.comment)


@router.delete("/{review_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_review(
    review_id: int,
    ctx: RequestContext = Depends(deps.get_request_context),
    service: ReviewService = Depends(deps.get_review_service),
):
    service.delete_review(review_id, ctx)
