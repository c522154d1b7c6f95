# app/api/routes/providers.py
from typing import List, Literal

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from app.db.base import get_db
from app.schemas.provider import (
    ProviderCreate,
    ProviderResponse,
    ProviderListResponse,
    ProviderStatsResponse,
    RevenueMonth,
)
from app.schemas.review import ReviewListResponse
from app.services import provider_service, review_service

router = APIRouter(prefix="/providers", tags=["providers"])


@router.post("/", response_model=ProviderResponse, status_code=201)
def register_provider(provider: ProviderCreate, db: Session = Depends(get_db)):
    return provider_service.create_provider(db, provider)


@router.get("/", response_model=ProviderListResponse)
def list_providers(
    sort: Literal["rating", "reviews", "newest"] = Query("rating"),
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    db: Session = Depends(get_db),
):
    result = provider_service.list_providers(db, sort, page, limit)
    return ProviderListResponse(providers=result.pop("items"), **result)


@router.get("/{provider_id}", response_model=ProviderResponse)
def get_provider(provider_id: int, db: Session = Depends(get_db)):
    return provider_service.get_provider(db, provider_id)


@router.get("/{provider_id}/stats", response_model=ProviderStatsResponse)
def provider_stats(provider_id: int, db: Session = Depends(get_db)):
    return provider_service.get_provider_stats(db, provider_id)


@router.get("/{provider_id}/reviews", response_model=ReviewListResponse)
def provider_reviews(
    provider_id: int,
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    db: Session = Depends(get_db),
):
    provider_service.get_provider(db, provider_id)
    result = review_service.list_provider_reviews(db, provider_id, page, limit)
    return ReviewListResponse(reviews=result.pop("items"), **result)


@router.get("/{provider_id}/revenue", response_model=List[RevenueMonth])
def provider_revenue(
    provider_id: int,
    months: int = Query(6, ge=1, le=24),
    db: Session = Depends(get_db),
):
    return provider_service.get_revenue_data(db, provider_id, months)
