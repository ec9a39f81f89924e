"""Common application-wide constants."""

from decimal import Decimal

# Refund brackets applied when a booking is cancelled, keyed by hours until slot start.
FULL_REFUND_HOURS = 24
PARTIAL_REFUND_HOURS = 12
FULL_REFUND_PERCENT = 100
PARTIAL_REFUND_PERCENT = 50
NO_REFUND_PERCENT = 0

# Single-slot duration bounds in minutes
MIN_SLOT_MINUTES = 30
MAX_SLOT_MINUTES = 8 * 60

MINUTES_PER_DAY = 24 * 60
CENTS = Decimal("0.01")

DEFAULT_PAGE_SIZE = 20
DEFAULT_SLOT_PAGE_SIZE = 50
MAX_PAGE_SIZE = 100
RECENT_REVIEWS_LIMIT = 10

TIME_PATTERN = r"^([01][0-9]|2[0-3]):[0-5][0-9]$"


__all__ = [
    "FULL_REFUND_HOURS",
    "PARTIAL_REFUND_HOURS",
    "FULL_REFUND_PERCENT",
    "PARTIAL_REFUND_PERCENT",
    "NO_REFUND_PERCENT",
    "MIN_SLOT_MINUTES",
    "MAX_SLOT_MINUTES",
    "MINUTES_PER_DAY",
    "CENTS",
    "DEFAULT_PAGE_SIZE",
    "DEFAULT_SLOT_PAGE_SIZE",
    "MAX_PAGE_SIZE",
    "RECENT_REVIEWS_LIMIT",
    "TIME_PATTERN",
]
