# app/services/provider_service.py
import calendar
import logging
from datetime import datetime

from sqlalchemy import func
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.core.exceptions import DuplicateUserError, ProviderNotFoundError, ServiceNotFoundError, UserNotFoundError
from app.db.models.booking import Booking
from app.db.models.review import Review
from app.db.models.service import Service
from app.db.models.user import User
from app.schemas.provider import ProviderCreate
from app.schemas.user import UserCreate
from app.services.pagination import paginate

logger = logging.getLogger(__name__)

PROVIDER_SORTS = {
    "rating": (User.rating.desc(), User.total_reviews.desc()),
    "reviews": (User.total_reviews.desc(),),
    "newest": (User.created_at.desc(),),
}


def _save_user(db: Session, user: User) -> User:
    db.add(user)
    try:
        db.commit()
    except IntegrityError as e:
        db.rollback()
        raise DuplicateUserError(f"Email {user.email} already registered") from e
    db.refresh(user)
    return user


def create_user(db: Session, data: UserCreate) -> User:
    user = _save_user(db, User(
        email=data.email.lower(),
        name=data.name,
        phone=data.phone,
        address=data.address,
        role=data.role,
    ))
    logger.info(f"User {user.id} registered as {user.role}")
    return user


def get_user(db: Session, user_id: int) -> User:
    user = db.query(User).filter(User.id == user_id).first()
    if not user:
        raise UserNotFoundError(f"User {user_id} not found")
    return user


def create_provider(db: Session, data: ProviderCreate) -> User:
    if data.profession_id is not None:
        if not db.query(Service.id).filter(Service.id == data.profession_id).first():
            raise ServiceNotFoundError(f"Service {data.profession_id} not found")

    provider = _save_user(db, User(
        email=data.email.lower(),
        name=data.name,
        phone=data.phone,
        address=data.address,
        role="provider",
        profession_id=data.profession_id,
        experience=data.experience,
        provider_status="pending",
        is_verified=False,
        rating=0.0,
        total_reviews=0,
    ))
    logger.info(f"Provider {provider.id} registered")
    return provider


def get_provider(db: Session, provider_id: int) -> User:
    provider = db.query(User).filter(User.id == provider_id, User.role == "provider").first()
    if not provider:
        raise ProviderNotFoundError(f"Provider {provider_id} not found")
    return provider


def list_providers(db: Session, sort: str = "rating", page: int = 1, limit: int = None):
    q = db.query(User).filter(User.role == "provider")
    order = PROVIDER_SORTS.get(sort, PROVIDER_SORTS["rating"])
    return paginate(q.order_by(*order, User.id), page, limit)


def get_provider_stats(db: Session, provider_id: int) -> dict:
    provider = get_provider(db, provider_id)

    # revenue counts the final price when set, else the estimate
    revenue = db.query(
        func.coalesce(func.sum(func.coalesce(Booking.final_price, Booking.estimated_price)), 0)
    ).filter(Booking.provider_id == provider_id, Booking.status == "completed").scalar()

    return {
        "provider_id": provider.id,
        "total_bookings": provider.total_bookings or 0,
        "completed_bookings": provider.completed_bookings or 0,
        "rating": provider.rating or 0.0,
        "total_reviews": provider.total_reviews or 0,
        "revenue": float(revenue or 0.0),
    }


def _month_window(now: datetime, months: int):
    """(year, month) pairs for the last `months` calendar months, oldest first."""
    index = now.year * 12 + now.month - 1
    return [divmod(i, 12) for i in range(index - months + 1, index + 1)]


def get_revenue_data(db: Session, provider_id: int, months: int = 6, now: datetime = None) -> list:
    """Monthly revenue from completed bookings, current month last.

    Bookings are bucketed by the month they were created in.
    """
    get_provider(db, provider_id)
    now = now or datetime.utcnow()
    window = [(year, month0 + 1) for year, month0 in _month_window(now, months)]
    start = datetime(window[0][0], window[0][1], 1)

    rows = db.query(
        Booking.created_at, func.coalesce(Booking.final_price, Booking.estimated_price)
    ).filter(
        Booking.provider_id == provider_id,
        Booking.status == "completed",
        Booking.created_at >= start,
    ).all()

    totals = {key: 0.0 for key in window}
    for created_at, amount in rows:
        key = (created_at.year, created_at.month)
        if key in totals:
            totals[key] += float(amount or 0.0)

    return [
        {"name": calendar.month_abbr[month], "year": year, "month": month, "total": totals[(year, month)]}
        for year, month in window
    ]


def get_customer_dashboard(db: Session, customer_id: int, recent: int = 5) -> dict:
    customer = db.query(User).filter(User.id == customer_id, User.role == "customer").first()
    if not customer:
        raise UserNotFoundError(f"Customer {customer_id} not found")

    by_status = dict(
        db.query(Booking.status, func.count(Booking.id))
        .filter(Booking.customer_id == customer_id)
        .group_by(Booking.status)
        .all()
    )
    total_reviews, avg_rating = db.query(
        func.count(Review.id), func.avg(Review.rating)
    ).filter(Review.customer_id == customer_id).one()

    recent_bookings = (
        db.query(Booking)
        .filter(Booking.customer_id == customer_id)
        .order_by(Booking.created_at.desc(), Booking.id.desc())
        .limit(recent)
        .all()
    )
    recent_reviews = (
        db.query(Review)
        .filter(Review.customer_id == customer_id)
        .order_by(Review.created_at.desc(), Review.id.desc())
        .limit(recent)
        .all()
    )

    return {
        "customer_id": customer.id,
        "total_bookings": sum(by_status.values()),
        "completed_bookings": by_status.get("completed", 0),
        "pending_bookings": by_status.get("pending", 0),
        # no-shows count with cancellations
        "cancelled_bookings": by_status.get("cancelled", 0) + by_status.get("no-show", 0),
        "total_reviews": total_reviews or 0,
        "avg_rating": float(avg_rating) if avg_rating is not None else 0.0,
        "recent_bookings": recent_bookings,
        "recent_reviews": recent_reviews,
    }
