# app/schemas/booking.py
from pydantic import BaseModel, Field
from datetime import datetime
from typing import List, Literal, Optional

BookingStatus = Literal["pending", "confirmed", "in-progress", "completed", "cancelled", "no-show"]
PaymentStatus = Literal["pending", "partial", "completed", "refunded"]
PaymentMethod = Literal["cash", "online", "wallet"]
CancelledBy = Literal["user", "provider", "admin"]


# --- CREATE ---
class BookingCreate(BaseModel):
    customer_id: int
    provider_id: int
    service_id: int
    sub_service_name: Optional[str] = None
    booking_date: datetime
    address: str = Field(..., min_length=1)
    description: str = Field(..., min_length=1)
    payment_method: PaymentMethod = "cash"
    estimated_price: float = Field(..., ge=0)


# --- TRANSITIONS ---
class BookingComplete(BaseModel):
    final_price: Optional[float] = Field(default=None, ge=0)


class BookingCancel(BaseModel):
    reason: str = Field(..., min_length=1)
    cancelled_by: CancelledBy


class PaymentUpdate(BaseModel):
    payment_status: Optional[PaymentStatus] = None
    payment_method: Optional[PaymentMethod] = None


# --- RESPONSE ---
class BookingResponse(BaseModel):
    id: int
    customer_id: int
    provider_id: int
    service_id: int
    sub_service_name: Optional[str]
    sub_service_price: Optional[float]
    sub_service_price_unit: Optional[str]
    booking_date: datetime
    address: str
    description: str
    status: BookingStatus
    payment_status: PaymentStatus
    payment_method: PaymentMethod
    estimated_price: float
    final_price: Optional[float]
    service_start_time: Optional[datetime]
    service_end_time: Optional[datetime]
    total_hours: Optional[float]
    cancellation_reason: Optional[str]
    cancelled_by: Optional[CancelledBy]
    is_reviewed: bool
    review_id: Optional[int]
    created_at: datetime
    updated_at: Optional[datetime]

    class Config:
        from_attributes = True


class BookingListResponse(BaseModel):
    bookings: List[BookingResponse]
    total: int
    page: int
    limit: int
    has_more: bool
