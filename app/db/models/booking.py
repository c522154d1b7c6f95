# app/db/models/booking.py
from sqlalchemy import Column, Integer, String, ForeignKey, Float, DateTime, Boolean
from sqlalchemy.orm import relationship
from datetime import datetime
from app.db.base import Base


BOOKING_STATUSES = ("pending", "confirmed", "in-progress", "completed", "cancelled", "no-show")
PAYMENT_STATUSES = ("pending", "partial", "completed", "refunded")
PAYMENT_METHODS = ("cash", "online", "wallet")
CANCELLED_BY = ("user", "provider", "admin")
PRICE_UNITS = ("hour", "day", "job")


class Booking(Base):
    __tablename__ = "bookings"

    id = Column(Integer, primary_key=True, index=True)

    customer_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    provider_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    service_id = Column(Integer, ForeignKey("services.id"), nullable=False)

    # sub-service snapshot, copied at booking time
    sub_service_name = Column(String, nullable=True)
    sub_service_price = Column(Float, nullable=True)
    sub_service_price_unit = Column(String, nullable=True)

    booking_date = Column(DateTime, nullable=False)
    address = Column(String, nullable=False)
    description = Column(String, nullable=False)

    status = Column(String, nullable=False, default="pending")
    payment_status = Column(String, nullable=False, default="pending")
    payment_method = Column(String, nullable=False, default="cash")

    estimated_price = Column(Float, nullable=False)
    final_price = Column(Float, nullable=True)

    service_start_time = Column(DateTime, nullable=True)
    service_end_time = Column(DateTime, nullable=True)
    total_hours = Column(Float, nullable=True)

    cancellation_reason = Column(String, nullable=True)
    cancelled_by = Column(String, nullable=True)

    # set together, once, by the review service
    is_reviewed = Column(Boolean, nullable=False, default=False)
    review_id = Column(
        Integer,
        ForeignKey("reviews.id", use_alter=True, name="fk_bookings_review_id"),
        nullable=True,
    )

    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    # relationships
    customer = relationship("User", foreign_keys=[customer_id])
    provider = relationship("User", foreign_keys=[provider_id])
    service = relationship("Service", foreign_keys=[service_id])
    review = relationship("Review", foreign_keys=[review_id], post_update=True)
