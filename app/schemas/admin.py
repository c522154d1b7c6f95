# app/schemas/admin.py
from pydantic import BaseModel
from typing import Optional


class DashboardAdminResponse(BaseModel):
    total_users: int
    total_providers: int
    total_services: int
    total_bookings: int
    completed_bookings: int
    total_reviews: int
    average_rating: float

    class Config:
        from_attributes = True


class RatingRecalculationResponse(BaseModel):
    provider_id: int
    previous_rating: Optional[float]
    previous_total_reviews: int
    rating: float
    total_reviews: int
