# app/schemas/provider.py
from pydantic import BaseModel, EmailStr, Field
from typing import List, Literal, Optional


class ProviderCreate(BaseModel):
    email: EmailStr
    name: str = Field(..., min_length=1)
    phone: str
    address: Optional[str] = None
    profession_id: Optional[int] = None
    experience: int = Field(0, ge=0)


class ProviderResponse(BaseModel):
    id: int
    email: EmailStr
    name: str
    phone: Optional[str]
    profession_id: Optional[int]
    experience: Optional[int]
    provider_status: Optional[Literal["active", "inactive", "suspended", "pending"]]
    is_verified: bool
    rating: float
    total_reviews: int
    total_bookings: int
    completed_bookings: int
    completion_rate: float

    class Config:
        from_attributes = True


class ProviderListResponse(BaseModel):
    providers: List[ProviderResponse]
    total: int
    page: int
    limit: int
    has_more: bool


class ProviderStatsResponse(BaseModel):
    provider_id: int
    total_bookings: int
    completed_bookings: int
    rating: float
    total_reviews: int
    revenue: float


class RevenueMonth(BaseModel):
    name: str
    year: int
    month: int
    total: float
