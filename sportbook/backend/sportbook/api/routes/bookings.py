from datetime import date
from fastapi import APIRouter, Depends, Query, status
from ...api import deps
from ...core.constants import DEFAULT_PAGE_SIZE, MAX_PAGE_SIZE
from ...core.context import RequestContext
from ...db import models, schemas
from ...services.booking_service import BookingService

router = APIRouter(prefix="/bookings", tags=["bookings"])


@router.get("", response_model=schemas.BookingList)
def list_bookings(
    user_id: int | None = None,
    venue_id: int | None = None,
    slot_id: int | None = None,
    booking_status: models.BookingStatus | None = Query(default=None, alias="status"),
    start_date: date | None = None,
    end_date: date | None = None,
    page: int = Query(default=1, ge=1),
    limit: int = Query(default=DEFAULT_PAGE_SIZE, ge=1, le=MAX_PAGE_SIZE),
    ctx: RequestContext = Depends(deps.get_request_context),
    service: BookingService = Depends(deps.get_booking_service),
):
    result = service.list_bookings(
        ctx,
        user_id=user_id,
        venue_id=venue_id,
        slot_id=slot_id,
        status=booking_status,
        start_date=start_date,
        end_date=end_date,
        page=page,
        limit=limit,
    )
    return schemas.BookingList(
        bookings=[schemas.Booking.model_validate(booking) for booking in result.items],
        pagination=schemas.Pagination.from_page(result),
    )


@router.get("/{booking_id}", response_model=schemas.Booking)
def get_booking(
    booking_id: int,
    ctx: RequestContext = Depends(deps.get_request_context),
    service: BookingService = Depends(deps.get_booking_service),
):
    return service.get_booking(booking_id, ctx)


@router.post("", response_model=schemas.Booking, status_code=status.HTTP_201_CREATED)
def create_booking(
    payload: schemas.BookingCreate,
    ctx: RequestContext = Depends(deps.get_request_context),
    service: BookingService = Depends(deps.get_booking_service),
):
    return service.create_booking(ctx, payload.slot_id, payload.notes)


@router.get("/{booking_id}/refund", response_model=schemas.RefundInfo)
def refund_preview(
    booking_id: int,
    ctx: RequestContext = Depends(deps.get_request_context),
    service: BookingService = Depends(deps.get_booking_service),
):
    return service.refund_preview(booking_id, ctx)


@router.post("/{booking_id}/cancel", response_model=schemas.Booking)
def cancel_booking(
    booking_id: int,
    ctx: RequestContext = Depends(deps.get_request_context),
    service: BookingService = Depends(deps.get_booking_service),
):
    return service.cancel_booking(booking_id, ctx)


@router.patch("/{booking_id}/status", response_model=schemas.Booking)
def update_booking_status(
    booking_id: int,
    payload: schemas.BookingStatusUpdate,
    ctx: RequestContext = Depends(deps.get_request_context),
    service: BookingService = Depends(deps.get_booking_service),
):
    return service.update_booking_status(ctx, booking_id, payload.status)
