from .user import User, UserRole
from .venue import Venue, VenueType
from .slot import Slot, SlotStatus
from .booking import (
    ACTIVE_BOOKING_STATUSES,
    Booking,
    BookingStatus,
    PaymentStatus,
)
from .review import Review
from .audit_log import AuditLog, ActorType
