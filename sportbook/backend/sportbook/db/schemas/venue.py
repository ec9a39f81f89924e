from datetime import datetime
from pydantic import BaseModel, Field

from ..models.venue import VenueType
from .common import Pagination
from .review import Review


class VenueBase(BaseModel):
    name: str = Field(min_length=1, max_length=255)
    type: VenueType
    address: str = Field(min_length=1, max_length=500)
    description: str | None = None
    price_per_hour: float = Field(gt=0)
    image_url: str | None = Field(default=None, max_length=500)
    amenities: list[str] = Field(default_factory=list)


class VenueCreate(VenueBase):
    pass


class VenueUpdate(BaseModel):
    name: str | None = Field(default=None, min_length=1, max_length=255)
    type: VenueType | None = None
    address: str | None = Field(default=None, min_length=1, max_length=500)
    description: str | None = None
    price_per_hour: float | None = Field(default=None, gt=0)
    image_url: str | None = Field(default=None, max_length=500)
    amenities: list[str] | None = None
    is_active: bool | None = None


class Venue(VenueBase):
    id: int
    is_active: bool
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True


class VenueListItem(Venue):
    average_rating: float = 0
    reviews_count: int = 0


class VenueDetail(VenueListItem):
    recent_reviews: list[Review] = Field(default_factory=list)


class VenueList(BaseModel):
    venues: list[VenueListItem]
    pagination: Pagination
