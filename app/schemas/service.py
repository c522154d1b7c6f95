# app/schemas/service.py

from pydantic import BaseModel, Field
from typing import List, Literal, Optional
from datetime import datetime


class SubServiceCreate(BaseModel):
    name: str = Field(..., min_length=1)
    price: float = Field(..., ge=0)
    price_unit: Literal["hour", "day", "job"] = "hour"


class SubServiceResponse(BaseModel):
    id: int
    name: str
    price: float
    price_unit: str

    class Config:
        from_attributes = True


# Admin creates service
class ServiceCreate(BaseModel):
    name: str = Field(..., min_length=1)
    description: Optional[str] = None
    is_active: Optional[bool] = True
    sub_services: List[SubServiceCreate] = []


# What API returns
class ServiceResponse(BaseModel):
    id: int

    name: str
    description: Optional[str]
    is_active: bool
    sub_services: List[SubServiceResponse] = []

    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True
