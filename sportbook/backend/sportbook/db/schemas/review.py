from datetime import datetime
from pydantic import BaseModel, Field

from .common import Pagination
from .user import UserBrief


class ReviewCreate(BaseModel):
    venue_id: int
    rating: int = Field(ge=1, le=5)
    comment: str | None = Field(default=None, min_length=10, max_length=1000)


class ReviewUpdate(BaseModel):
    rating: int | None = Field(default=None, ge=1, le=5)
    comment: str | None = Field(default=None, min_length=10, max_length=1000)


class Review(BaseModel):
    id: int
    user_id: int
    venue_id: int
    rating: int
    comment: str | None = None
    created_at: datetime
    updated_at: datetime
    user: UserBrief | None = None

    class Config:
        from_attributes = True


class ReviewList(BaseModel):
    reviews: list[Review]
    pagination: Pagination
    average_rating: float | None = None


class ReviewStats(BaseModel):
    total_reviews: int
    average_rating: float
    rating_distribution: dict[int, int]

    class Config:
        from_attributes = True
