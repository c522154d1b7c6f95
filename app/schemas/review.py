# app/schemas/review.py
from pydantic import BaseModel, Field, conint, constr
from typing import List, Optional
from datetime import datetime

from app.core import config


class ReviewCreate(BaseModel):
    customer_id: int = Field(..., gt=0)
    provider_id: int = Field(..., gt=0)
    booking_id: int = Field(..., gt=0)
    service_id: Optional[int] = None
    rating: conint(strict=True, ge=config.RATING_MIN, le=config.RATING_MAX) = Field(..., description="Rating 1-5")
    comment: constr(strip_whitespace=True, min_length=1, max_length=config.REVIEW_COMMENT_MAX_LENGTH)


class ReviewResponse(BaseModel):
    id: int
    booking_id: int
    customer_id: int
    provider_id: int
    service_id: Optional[int]
    rating: int
    comment: str
    created_at: datetime
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class ReviewListResponse(BaseModel):
    reviews: List[ReviewResponse]
    total: int
    page: int
    limit: int
    has_more: bool
