# app/schemas/user.py
from pydantic import BaseModel, EmailStr, Field
from typing import List, Literal, Optional

from app.schemas.booking import BookingResponse
from app.schemas.review import ReviewResponse


class UserCreate(BaseModel):
    email: EmailStr
    name: str = Field(..., min_length=1)
    phone: Optional[str] = None
    address: Optional[str] = None
    role: Literal["customer", "admin"] = "customer"


class UserResponse(BaseModel):
    id: int
    email: EmailStr
    name: str
    role: str
    is_active: bool

    class Config:
        from_attributes = True


class CustomerDashboardResponse(BaseModel):
    customer_id: int
    total_bookings: int
    completed_bookings: int
    pending_bookings: int
    cancelled_bookings: int
    total_reviews: int
    avg_rating: float
    recent_bookings: List[BookingResponse]
    recent_reviews: List[ReviewResponse]
