from .common import Pagination
from .user import Token, User, UserBrief, UserCreate
from .review import Review, ReviewCreate, ReviewList, ReviewStats, ReviewUpdate
from .venue import Venue, VenueCreate, VenueDetail, VenueList, VenueListItem, VenueUpdate
from .slot import (
    BulkSlotResult,
    Slot,
    SlotAvailability,
    SlotBulkCreate,
    SlotCreate,
    SlotList,
    SlotTemplate,
    SlotUpdate,
)
from .booking import Booking, BookingCreate, BookingList, BookingStatusUpdate, RefundInfo
