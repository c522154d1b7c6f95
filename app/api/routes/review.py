# app/api/routes/review.py
from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from app.db.base import get_db
from app.schemas.review import ReviewCreate, ReviewResponse
from app.services import review_service

router = APIRouter(prefix="/reviews", tags=["reviews"])


# Create review (customer, completed booking only)
@router.post("/", response_model=ReviewResponse, status_code=status.HTTP_201_CREATED)
def create_review(review_in: ReviewCreate, db: Session = Depends(get_db)):
    return review_service.create_review(
        db,
        customer_id=review_in.customer_id,
        provider_id=review_in.provider_id,
        booking_id=review_in.booking_id,
        service_id=review_in.service_id,
        rating=review_in.rating,
        comment=review_in.comment,
    )


@router.get("/{review_id}", response_model=ReviewResponse)
def get_review(review_id: int, db: Session = Depends(get_db)):
    return review_service.get_review(db, review_id)
