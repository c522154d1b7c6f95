# app/services/booking_service.py
"""Booking lifecycle: creation, status transitions and payment status.

The review fields (`is_reviewed`, `review_id`) are never written here; see
`app.services.review_service`.
"""

import logging
from datetime import datetime

from sqlalchemy import or_, select, update
from sqlalchemy.orm import Session

from app.core.exceptions import (
    BookingNotFoundError,
    InvalidStatusTransitionError,
    ProviderNotFoundError,
    ServiceError,
    ServiceNotFoundError,
    UserNotFoundError,
    ValidationError,
)
from app.db.models.booking import Booking
from app.db.models.service import Service
from app.db.models.user import User
from app.schemas.booking import BookingCreate
from app.services.pagination import paginate
from app.services.unit_of_work import commit

logger = logging.getLogger(__name__)


STATUS_TRANSITIONS = {
    "pending": {"confirmed", "cancelled"},
    "confirmed": {"in-progress", "cancelled", "no-show"},
    "in-progress": {"completed"},
    "completed": set(),
    "cancelled": set(),
    "no-show": set(),
}

PAYMENT_TRANSITIONS = {
    "pending": {"partial", "completed"},
    "partial": {"completed"},
    "completed": {"refunded"},
    "refunded": set(),
}


def _bump_provider_counter(db: Session, provider_id: int, column):
    db.execute(
        update(User)
        .where(User.id == provider_id)
        .values({column: column + 1})
        .execution_options(synchronize_session=False)
    )


def get_booking(db: Session, booking_id: int) -> Booking:
    booking = db.query(Booking).filter(Booking.id == booking_id).first()
    if not booking:
        raise BookingNotFoundError(f"Booking {booking_id} not found")
    return booking


def create_booking(db: Session, data: BookingCreate) -> Booking:
    customer = db.query(User).filter(User.id == data.customer_id, User.role == "customer").first()
    if not customer:
        raise UserNotFoundError(f"Customer {data.customer_id} not found")

    provider = db.query(User).filter(User.id == data.provider_id, User.role == "provider").first()
    if not provider:
        raise ProviderNotFoundError(f"Provider {data.provider_id} not found")

    service = db.query(Service).filter(Service.id == data.service_id).first()
    if not service:
        raise ServiceNotFoundError(f"Service {data.service_id} not found")

    # Snapshot the chosen sub-service so later catalog edits don't change the booking
    sub_service = None
    if data.sub_service_name:
        sub_service = next((s for s in service.sub_services if s.name == data.sub_service_name), None)
        if sub_service is None:
            raise ValidationError(
                f"Service {service.id} has no sub-service named {data.sub_service_name!r}",
                errors=[{"field": "sub_service_name", "message": "Unknown sub-service"}],
            )

    new_booking = Booking(
        customer_id=customer.id,
        provider_id=provider.id,
        service_id=service.id,
        sub_service_name=sub_service.name if sub_service else None,
        sub_service_price=sub_service.price if sub_service else None,
        sub_service_price_unit=sub_service.price_unit if sub_service else None,
        booking_date=data.booking_date,
        address=data.address,
        description=data.description,
        payment_method=data.payment_method,
        estimated_price=data.estimated_price,
        status="pending",
        payment_status="pending",
        is_reviewed=False,
    )
    db.add(new_booking)
    _bump_provider_counter(db, provider.id, User.total_bookings)
    commit(db, "create booking")
    db.refresh(new_booking)

    logger.info(f"Booking {new_booking.id} created: customer {customer.id} -> provider {provider.id}")
    return new_booking


def _transition(db: Session, booking_id: int, new_status: str) -> Booking:
    booking = get_booking(db, booking_id)
    allowed = STATUS_TRANSITIONS.get(booking.status, set())
    if new_status not in allowed:
        logger.warning(f"Booking {booking_id}: rejected transition {booking.status} -> {new_status}")
        raise InvalidStatusTransitionError(
            f"Cannot move booking from {booking.status} to {new_status}"
        )
    booking.status = new_status
    return booking


def confirm_booking(db: Session, booking_id: int) -> Booking:
    booking = _transition(db, booking_id, "confirmed")
    commit(db, "confirm booking")
    db.refresh(booking)
    logger.info(f"Booking {booking_id} confirmed")
    return booking


def start_booking(db: Session, booking_id: int) -> Booking:
    booking = _transition(db, booking_id, "in-progress")
    booking.service_start_time = datetime.utcnow()
    commit(db, "start booking")
    db.refresh(booking)
    logger.info(f"Booking {booking_id} started")
    return booking


def complete_booking(db: Session, booking_id: int, final_price: float = None) -> Booking:
    booking = _transition(db, booking_id, "completed")

    end = datetime.utcnow()
    booking.service_end_time = end
    if booking.service_start_time:
        booking.total_hours = round((end - booking.service_start_time).total_seconds() / 3600, 2)
    booking.final_price = final_price if final_price is not None else booking.estimated_price

    _bump_provider_counter(db, booking.provider_id, User.completed_bookings)
    commit(db, "complete booking")
    db.refresh(booking)
    logger.info(f"Booking {booking_id} completed (final price {booking.final_price})")
    return booking


def cancel_booking(db: Session, booking_id: int, reason: str, cancelled_by: str) -> Booking:
    booking = _transition(db, booking_id, "cancelled")
    booking.cancellation_reason = reason
    booking.cancelled_by = cancelled_by
    commit(db, "cancel booking")
    db.refresh(booking)
    logger.info(f"Booking {booking_id} cancelled by {cancelled_by}")
    return booking


def mark_no_show(db: Session, booking_id: int) -> Booking:
    booking = _transition(db, booking_id, "no-show")
    commit(db, "mark booking as no-show")
    db.refresh(booking)
    logger.info(f"Booking {booking_id} marked no-show")
    return booking


def update_payment(db: Session, booking_id: int, payment_status: str = None, payment_method: str = None) -> Booking:
    booking = get_booking(db, booking_id)

    try:
        if payment_method is not None and payment_method != booking.payment_method:
            if booking.payment_status != "pending":
                raise InvalidStatusTransitionError(
                    "Payment method can only change while payment is pending"
                )
            booking.payment_method = payment_method

        if payment_status is not None and payment_status != booking.payment_status:
            if payment_status not in PAYMENT_TRANSITIONS.get(booking.payment_status, set()):
                raise InvalidStatusTransitionError(
                    f"Cannot move payment from {booking.payment_status} to {payment_status}"
                )
            booking.payment_status = payment_status
    except ServiceError:
        db.rollback()
        raise

    commit(db, "update payment")
    db.refresh(booking)
    logger.info(f"Booking {booking_id} payment now {booking.payment_status} ({booking.payment_method})")
    return booking


def list_customer_bookings(db: Session, customer_id: int, page: int = 1, limit: int = None):
    q = db.query(Booking).filter(Booking.customer_id == customer_id)
    return paginate(q.order_by(Booking.created_at.desc(), Booking.id.desc()), page, limit)


def list_provider_bookings(db: Session, provider_id: int, page: int = 1, limit: int = None):
    q = db.query(Booking).filter(Booking.provider_id == provider_id)
    return paginate(q.order_by(Booking.created_at.desc(), Booking.id.desc()), page, limit)


def list_bookings(db: Session, page: int = 1, limit: int = None, search: str = "", status: str = None):
    """Admin listing across all bookings, newest first.

    `search` matches customer, provider and service names, the sub-service
    name and the address, case-insensitively. `status="all"` means no filter.
    """
    q = db.query(Booking)
    if status and status != "all":
        if status not in STATUS_TRANSITIONS:
            raise ValidationError(
                f"Unknown booking status {status!r}",
                errors=[{"field": "status", "message": "Unknown status"}],
            )
        q = q.filter(Booking.status == status)
    if search:
        pattern = f"%{search}%"
        matching_users = select(User.id).where(User.name.ilike(pattern))
        matching_services = select(Service.id).where(Service.name.ilike(pattern))
        q = q.filter(
            or_(
                Booking.customer_id.in_(matching_users),
                Booking.provider_id.in_(matching_users),
                Booking.service_id.in_(matching_services),
                Booking.sub_service_name.ilike(pattern),
                Booking.address.ilike(pattern),
            )
        )
    return paginate(q.order_by(Booking.created_at.desc(), Booking.id.desc()), page, limit)
