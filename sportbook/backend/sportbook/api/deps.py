from typing import Annotated
from fastapi import Depends
from fastapi.security import OAuth2PasswordBearer
from sqlalchemy.orm import Session

from ..core.clock import Clock, utc_now
from ..core.context import RequestContext
from ..core.errors import UnauthorizedError
from ..core.security import decode_access_token
from ..db.models import User
from ..db.session import get_db
from ..services.booking_service import BookingService
from ..services.review_service import ReviewService
from ..services.slot_service import SlotService
from ..services.user_service import context_for
from ..services.venue_service import VenueService


oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/api/v1/auth/login")


def get_current_user(
    token: Annotated[str, Depends(oauth2_scheme)],
    db: Annotated[Session, Depends(get_db)],
) -> User:
    payload = decode_access_token(token)
    try:
        user_id = int(payload["sub"])
    except (TypeError, ValueError) as exc:
        raise UnauthorizedError("Could not validate credentials") from exc
    user = db.get(User, user_id)
    if user is None:
        raise UnauthorizedError("Could not validate credentials")
    return user


def get_request_context(user: Annotated[User, Depends(get_current_user)]) -> RequestContext:
    return context_for(user)


def get_clock() -> Clock:
    return utc_now


def get_venue_service(db: Annotated[Session, Depends(get_db)]) -> VenueService:
    return VenueService(db)


def get_slot_service(db: Annotated[Session, Depends(get_db)]) -> SlotService:
    return SlotService(db)


def get_booking_service(
    db: Annotated[Session, Depends(get_db)],
    clock: Annotated[Clock, Depends(get_clock)],
) -> BookingService:
    return BookingService(db, clock=clock)


def get_review_service(db: Annotated[Session, Depends(get_db)]) -> ReviewService:
    return ReviewService(db)
