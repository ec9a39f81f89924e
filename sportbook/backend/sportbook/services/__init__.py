from . import (
    admin,
    booking_service,
    overlap,
    pagination,
    pricing,
    review_service,
    slot_service,
    user_service,
    venue_service,
)
__all__ = [
    "admin",
    "booking_service",
    "overlap",
    "pagination",
    "pricing",
    "review_service",
    "slot_service",
    "user_service",
    "venue_service",
]
