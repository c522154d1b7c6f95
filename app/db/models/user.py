# app/db/models/user.py
from sqlalchemy import Column, Float, Integer, String, Boolean, ForeignKey, DateTime, CheckConstraint, func
from sqlalchemy.orm import relationship
from app.db.base import Base


class User(Base):
    """
    Customers, providers and admins share this table, told apart by `role`.
    Provider-only columns stay NULL/default for the other roles.
    rating / total_reviews are the provider's running review aggregate and
    are written only by the review service.
    """
    __tablename__ = "users"
    __table_args__ = (
        CheckConstraint("total_reviews >= 0", name="ck_users_total_reviews_non_negative"),
    )

    id = Column(Integer, primary_key=True, index=True)
    email = Column(String, unique=True, index=True, nullable=False)
    name = Column(String, nullable=False)
    role = Column(String, nullable=False, default="customer", server_default="customer")

    phone = Column(String, nullable=True)
    address = Column(String, nullable=True)
    is_active = Column(Boolean, nullable=False, default=True)

    # provider profile
    profession_id = Column(Integer, ForeignKey("services.id", ondelete="SET NULL"), nullable=True)
    experience = Column(Integer, nullable=True)
    provider_status = Column(String, nullable=True)   # active / inactive / suspended / pending
    is_verified = Column(Boolean, nullable=False, default=False)

    # provider aggregates
    rating = Column(Float, nullable=False, default=0.0, server_default="0")
    total_reviews = Column(Integer, nullable=False, default=0, server_default="0")
    total_bookings = Column(Integer, nullable=False, default=0, server_default="0")
    completed_bookings = Column(Integer, nullable=False, default=0, server_default="0")

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())

    profession = relationship("Service", foreign_keys=[profession_id])

    # reviews received as a provider
    reviews = relationship(
        "Review",
        foreign_keys="Review.provider_id",
        back_populates="provider",
        lazy="selectin",
        order_by="Review.created_at",
    )

    @property
    def completion_rate(self):
        if not self.total_bookings:
            return 0.0
        return round(self.completed_bookings / self.total_bookings * 100, 1)
