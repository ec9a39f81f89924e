from decimal import Decimal
from fastapi import APIRouter, Depends, Query, status
from ...api import deps
from ...core.constants import DEFAULT_PAGE_SIZE, MAX_PAGE_SIZE
from ...core.context import RequestContext
from ...db import models, schemas
from ...services.venue_service import VenueService, VenueSummary

router = APIRouter(prefix="/venues", tags=["venues"])


def _list_item(summary: VenueSummary) -> schemas.VenueListItem:
    return schemas.VenueListItem(
        **schemas.Venue.model_validate(summary.venue).model_dump(),
        average_rating=summary.average_rating,
        reviews_count=summary.reviews_count,
    )


@router.get("", response_model=schemas.VenueList)
def list_venues(
    type: models.VenueType | None = None,
    price_min: Decimal | None = Query(default=None, ge=0),
    price_max: Decimal | None = Query(default=None, ge=0),
    search: str | None = None,
    sort_by: str = "created_at",
    order: str = "desc",
    page: int = Query(default=1, ge=1),
    limit: int = Query(default=DEFAULT_PAGE_SIZE, ge=1, le=MAX_PAGE_SIZE),
    service: VenueService = Depends(deps.get_venue_service),
):
    result = service.list_venues(
        type=type,
        price_min=price_min,
        price_max=price_max,
        search=search,
        sort_by=sort_by,
        order=order,
        page=page,
        limit=limit,
    )
    return schemas.VenueList(
        venues=[_list_item(summary) for summary in result.items],
        pagination=schemas.Pagination.from_page(result),
    )


@router.get("/{venue_id}", response_model=schemas.VenueDetail)
def get_venue(venue_id: int, service: VenueService = Depends(deps.get_venue_service)):
    detail = service.get_venue(venue_id)
    return schemas.VenueDetail(
        **_list_item(detail).model_dump(),
        recent_reviews=[schemas.Review.model_validate(review) for review in detail.recent_reviews],
    )


@router.post("", response_model=schemas.Venue, status_code=status.HTTP_201_CREATED)
def create_venue(
    payload: schemas.VenueCreate,
    ctx: RequestContext = Depends(deps.get_request_context),
    service: VenueService = Depends(deps.get_venue_service),
):
    return service.create_venue(ctx, payload.model_dump())


@router.patch("/{venue_id}", response_model=schemas.Venue)
def update_venue(
    venue_id: int,
    payload: schemas.VenueUpdate,
    ctx: RequestContext = Depends(deps.get_request_context),
    service: VenueService = Depends(deps.get_venue_service),
):
    return service.update_venue(ctx, venue_id, payload.model_dump(exclude_unset=True))


@router.delete("/{venue_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_venue(
    venue_id: int,
    ctx: RequestContext = Depends(deps.get_request_context),
    service: VenueService = Depends(deps.get_venue_service),
):
    service.delete_venue(ctx, venue_id)
