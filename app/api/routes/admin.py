# app/api/routes/admin.py
from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session
from sqlalchemy import func
from typing import Optional

from app.db.base import get_db
from app.db.models.user import User
from app.db.models.service import Service
from app.db.models.booking import Booking
from app.db.models.review import Review
from app.schemas.admin import DashboardAdminResponse, RatingRecalculationResponse
from app.schemas.booking import BookingListResponse
from app.schemas.review import ReviewListResponse
from app.services import booking_service, review_service

router = APIRouter(prefix="/admin", tags=["admin"])


# -------------------------
# 1. Review listing
# -------------------------
@router.get("/reviews", response_model=ReviewListResponse)
def list_reviews(
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    search: str = Query(""),
    min_rating: Optional[int] = Query(None, ge=1, le=5),
    db: Session = Depends(get_db),
):
    result = review_service.list_reviews(db, page, limit, search=search, min_rating=min_rating)
    return ReviewListResponse(reviews=result.pop("items"), **result)


# -------------------------
# 2. Booking listing
# -------------------------
@router.get("/bookings", response_model=BookingListResponse)
def list_bookings(
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    search: str = Query(""),
    status: Optional[str] = Query(None),
    db: Session = Depends(get_db),
):
    result = booking_service.list_bookings(db, page, limit, search=search, status=status)
    return BookingListResponse(bookings=result.pop("items"), **result)


# -------------------------
# 3. Platform stats
# -------------------------
@router.get("/stats", response_model=DashboardAdminResponse)
def admin_stats(db: Session = Depends(get_db)):
    total_users = db.query(func.count(User.id)).scalar() or 0
    total_providers = db.query(func.count(User.id)).filter(User.role == "provider").scalar() or 0
    total_services = db.query(func.count(Service.id)).scalar() or 0
    total_bookings = db.query(func.count(Booking.id)).scalar() or 0
    completed = db.query(func.count(Booking.id)).filter(Booking.status == "completed").scalar() or 0
    total_reviews, avg_rating = db.query(func.count(Review.id), func.avg(Review.rating)).one()

    return DashboardAdminResponse(
        total_users=int(total_users),
        total_providers=int(total_providers),
        total_services=int(total_services),
        total_bookings=int(total_bookings),
        completed_bookings=int(completed),
        total_reviews=int(total_reviews or 0),
        average_rating=float(avg_rating) if avg_rating is not None else 0.0,
    )


# --------------------------------------------------
# 4. Rebuild a provider's rating from stored reviews
# --------------------------------------------------
@router.post("/providers/{provider_id}/recalculate-rating", response_model=RatingRecalculationResponse)
def recalculate_rating(provider_id: int, db: Session = Depends(get_db)):
    provider = db.query(User).filter(User.id == provider_id).first()
    previous = (provider.rating, provider.total_reviews) if provider else (None, 0)

    provider = review_service.recalculate_provider_rating(db, provider_id)
    return RatingRecalculationResponse(
        provider_id=provider.id,
        previous_rating=previous[0],
        previous_total_reviews=previous[1] or 0,
        rating=provider.rating,
        total_reviews=provider.total_reviews,
    )
