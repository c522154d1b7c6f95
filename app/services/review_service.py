# app/services/review_service.py
"""Review creation and provider rating aggregation.

A review is written in one unit of work together with its two side effects:
the provider's running average (`rating`, `total_reviews`) and the booking's
reviewed marker (`is_reviewed`, `review_id`). Anything that fails after the
review row is flushed rolls the whole thing back.
"""

import logging

from pydantic import ValidationError as PydanticValidationError
from sqlalchemy import func, or_, select, update
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from app.core.exceptions import (
    BookingNotFoundError,
    BookingNotReviewableError,
    DuplicateReviewError,
    ProviderNotFoundError,
    ReviewNotFoundError,
    ServiceError,
    ServiceNotFoundError,
    StorageError,
    ValidationError,
)
from app.db.models.booking import Booking
from app.db.models.review import Review
from app.db.models.service import Service
from app.db.models.user import User
from app.schemas.review import ReviewCreate
from app.services.pagination import paginate

logger = logging.getLogger(__name__)


def validate_review_input(**fields) -> ReviewCreate:
    try:
        return ReviewCreate(**fields)
    except PydanticValidationError as e:
        errors = [
            {"field": ".".join(str(p) for p in err["loc"]), "message": err["msg"]}
            for err in e.errors()
        ]
        raise ValidationError("Invalid review input", errors=errors) from e


def _apply_rating(db: Session, provider_id: int, rating: int) -> None:
    """Fold one rating into the provider's running average.

    Single UPDATE so concurrent writers cannot lose an increment; SET
    expressions see the row's pre-update values.
    """
    old_rating = func.coalesce(User.rating, 0.0)
    old_total = func.coalesce(User.total_reviews, 0)
    stmt = (
        update(User)
        .where(User.id == provider_id, User.role == "provider")
        .values(
            rating=(old_rating * old_total + rating) / (old_total + 1),
            total_reviews=old_total + 1,
        )
        .execution_options(synchronize_session=False)
    )
    result = db.execute(stmt)
    if result.rowcount == 0:
        raise ProviderNotFoundError(f"Provider {provider_id} not found")


def _load_reviewable_booking(db: Session, data: ReviewCreate) -> Booking:
    booking = db.execute(
        select(Booking).where(Booking.id == data.booking_id).with_for_update()
    ).scalar_one_or_none()
    if booking is None:
        raise BookingNotFoundError(f"Booking {data.booking_id} not found")

    if booking.customer_id != data.customer_id:
        raise BookingNotReviewableError("Booking does not belong to this customer")
    if booking.provider_id != data.provider_id:
        raise BookingNotReviewableError("Booking was not served by this provider")

    if booking.is_reviewed or _review_exists(db, booking.id):
        raise DuplicateReviewError("Review for this booking already exists")

    if booking.status != "completed":
        raise BookingNotReviewableError("Can only review completed bookings")

    if data.service_id is not None:
        if not db.query(Service.id).filter(Service.id == data.service_id).first():
            raise ServiceNotFoundError(f"Service {data.service_id} not found")
        if data.service_id != booking.service_id:
            raise ValidationError(
                "Review service does not match the booked service",
                errors=[{"field": "service_id", "message": "Does not match booking"}],
            )

    return booking


def _review_exists(db: Session, booking_id: int) -> bool:
    return db.query(Review.id).filter(Review.booking_id == booking_id).first() is not None


def create_review(
    db: Session,
    *,
    customer_id,
    provider_id,
    booking_id,
    rating,
    comment,
    service_id=None,
) -> Review:
    """Create a review and update the provider aggregate and booking marker.

    Raises:
        ValidationError: rating/comment out of bounds or ids missing,
            or service_id differs from the booked service.
        BookingNotFoundError: booking does not exist.
        BookingNotReviewableError: booking not completed or not owned by
            the given customer/provider.
        DuplicateReviewError: booking already reviewed.
        ServiceNotFoundError: service_id names no service.
        ProviderNotFoundError: provider row missing; nothing is persisted.
        StorageError: any other database failure; nothing is persisted.
    """
    data = validate_review_input(
        customer_id=customer_id,
        provider_id=provider_id,
        booking_id=booking_id,
        service_id=service_id,
        rating=rating,
        comment=comment,
    )

    try:
        booking = _load_reviewable_booking(db, data)

        review = Review(
            booking_id=booking.id,
            customer_id=data.customer_id,
            provider_id=data.provider_id,
            service_id=data.service_id if data.service_id is not None else booking.service_id,
            rating=data.rating,
            comment=data.comment,
        )
        db.add(review)
        try:
            db.flush()
        except IntegrityError as e:
            db.rollback()
            # only the unique(booking_id) race is a duplicate
            if _review_exists(db, data.booking_id):
                raise DuplicateReviewError("Review for this booking already exists") from e
            logger.error(f"Integrity error creating review for booking {data.booking_id}: {e}", exc_info=True)
            raise StorageError("Failed to create review") from e

        _apply_rating(db, data.provider_id, data.rating)

        booking.is_reviewed = True
        booking.review_id = review.id

        db.commit()
    except ServiceError as e:
        db.rollback()
        logger.warning(f"Review for booking {data.booking_id} rejected: {e.message}")
        raise
    except SQLAlchemyError as e:
        db.rollback()
        logger.error(f"Failed to create review for booking {data.booking_id}: {e}", exc_info=True)
        raise StorageError("Failed to create review") from e

    db.refresh(review)
    logger.info(
        f"Review {review.id} created for booking {booking.id} "
        f"(provider {data.provider_id}, rating {data.rating})"
    )
    return review


def recalculate_provider_rating(db: Session, provider_id: int) -> User:
    """Rebuild a provider's aggregate from the reviews table."""
    provider = db.query(User).filter(User.id == provider_id, User.role == "provider").first()
    if not provider:
        raise ProviderNotFoundError(f"Provider {provider_id} not found")

    count, total = db.query(
        func.count(Review.id), func.coalesce(func.sum(Review.rating), 0)
    ).filter(Review.provider_id == provider_id).one()

    if count:
        provider.rating = float(total) / count
    else:
        provider.rating = 0.0
    provider.total_reviews = count
    try:
        db.commit()
    except SQLAlchemyError as e:
        db.rollback()
        raise StorageError("Failed to recalculate provider rating") from e
    db.refresh(provider)
    logger.info(f"Provider {provider_id} rating recalculated: {provider.rating} over {count} reviews")
    return provider


def get_review(db: Session, review_id: int) -> Review:
    review = db.query(Review).filter(Review.id == review_id).first()
    if not review:
        raise ReviewNotFoundError(f"Review {review_id} not found")
    return review


def list_provider_reviews(db: Session, provider_id: int, page: int = 1, limit: int = None):
    q = db.query(Review).filter(Review.provider_id == provider_id)
    return paginate(q.order_by(Review.created_at.desc(), Review.id.desc()), page, limit)


def list_reviews(db: Session, page: int = 1, limit: int = None, search: str = "", min_rating=None):
    # admin listing: comment / customer / provider name search, rating floor
    q = db.query(Review)
    if min_rating is not None:
        q = q.filter(Review.rating >= min_rating)
    if search:
        pattern = f"%{search}%"
        matching_users = select(User.id).where(User.name.ilike(pattern))
        q = q.filter(
            or_(
                Review.comment.ilike(pattern),
                Review.customer_id.in_(matching_users),
                Review.provider_id.in_(matching_users),
            )
        )
    return paginate(q.order_by(Review.created_at.desc(), Review.id.desc()), page, limit)
