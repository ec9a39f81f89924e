from . import (
    auth,
    venues,
    slots,
    bookings,
    reviews,
    misc,
)

__all__ = [
    "auth",
    "venues",
    "slots",
    "bookings",
    "reviews",
    "misc",
]
