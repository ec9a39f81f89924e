from datetime import date
from fastapi import APIRouter, Depends, Query, status
from ...api import deps
from ...core.constants import DEFAULT_SLOT_PAGE_SIZE, MAX_PAGE_SIZE
from ...core.context import RequestContext
from ...db import models, schemas
from ...services.booking_service import BookingService
from ...services.slot_service import SlotService, SlotTemplate

router = APIRouter(prefix="/slots", tags=["slots"])


@router.get("", response_model=schemas.SlotList)
def list_slots(
    venue_id: int | None = None,
    day: date | None = Query(default=None, alias="date"),
    start_date: date | None = None,
    end_date: date | None = None,
    slot_status: models.SlotStatus | None = Query(default=None, alias="status"),
    page: int = Query(default=1, ge=1),
    limit: int = Query(default=DEFAULT_SLOT_PAGE_SIZE, ge=1, le=MAX_PAGE_SIZE),
    service: SlotService = Depends(deps.get_slot_service),
):
    result = service.list_slots(
        venue_id=venue_id,
        day=day,
        start_date=start_date,
        end_date=end_date,
        status=slot_status,
        page=page,
        limit=limit,
    )
    return schemas.SlotList(
        slots=[schemas.Slot.model_validate(slot) for slot in result.items],
        pagination=schemas.Pagination.from_page(result),
    )


@router.get("/{slot_id}", response_model=schemas.Slot)
def get_slot(slot_id: int, service: SlotService = Depends(deps.get_slot_service)):
    return service.get_slot(slot_id)


@router.get("/{slot_id}/availability", response_model=schemas.SlotAvailability)
def check_availability(
    slot_id: int,
    service: BookingService = Depends(deps.get_booking_service),
):
    result = service.check_availability(slot_id)
    return schemas.SlotAvailability(
        available=result.available,
        reason=result.reason,
        slot=schemas.Slot.model_validate(result.slot) if result.slot else None,
    )


@router.post("", response_model=schemas.Slot, status_code=status.HTTP_201_CREATED)
def create_slot(
    payload: schemas.SlotCreate,
    ctx: RequestContext = Depends(deps.get_request_context),
    service: SlotService = Depends(deps.get_slot_service),
):
    return service.create_slot(
        ctx,
        payload.venue_id,
        payload.date,
        payload.start_time,
        payload.end_time,
        payload.status,
    )


@router.post("/bulk", response_model=schemas.BulkSlotResult, status_code=status.HTTP_201_CREATED)
def create_bulk_slots(
    payload: schemas.SlotBulkCreate,
    ctx: RequestContext = Depends(deps.get_request_context),
    service: SlotService = Depends(deps.get_slot_service),
):
    result = service.create_bulk_slots(
        ctx,
        payload.venue_id,
        payload.dates,
        [SlotTemplate(t.start_time, t.end_time) for t in payload.time_slots],
        payload.status,
    )
    return schemas.BulkSlotResult(
        created_count=result.created_count,
        slots=[schemas.Slot.model_validate(slot) for slot in result.created_slots],
    )


@router.patch("/{slot_id}", response_model=schemas.Slot)
def update_slot(
    slot_id: int,
    payload: schemas.SlotUpdate,
    ctx: RequestContext = Depends(deps.get_request_context),
    service: SlotService = Depends(deps.get_slot_service),
):
    return service.update_slot(ctx, slot_id, payload.model_dump(exclude_unset=True))


@router.delete("/{slot_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_slot(
    slot_id: int,
    ctx: RequestContext = Depends(deps.get_request_context),
    service: SlotService = Depends(deps.get_slot_service),
):
    service.delete_slot(ctx, slot_id)
