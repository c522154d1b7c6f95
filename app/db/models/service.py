# app/db/models/service.py

from sqlalchemy import Column, DateTime, Integer, String, ForeignKey, Boolean, Float, func
from sqlalchemy.orm import relationship
from app.db.base import Base


class Service(Base):
    """Catalog entry (plumbing, electrical work, ...) managed by admins."""
    __tablename__ = "services"

    id = Column(Integer, primary_key=True, index=True)

    # Basic details
    name = Column(String, nullable=False, unique=True)
    description = Column(String, nullable=True)

    # Status
    is_active = Column(Boolean, default=True)

    # Timestamps
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())

    # Relationships
    sub_services = relationship(
        "SubService",
        back_populates="service",
        lazy="selectin",
        cascade="all, delete-orphan",
    )


class SubService(Base):
    __tablename__ = "sub_services"

    id = Column(Integer, primary_key=True, index=True)
    service_id = Column(Integer, ForeignKey("services.id", ondelete="CASCADE"), nullable=False)

    name = Column(String, nullable=False)
    price = Column(Float, nullable=False)
    price_unit = Column(String, nullable=False, default="hour")  # hour / day / job

    service = relationship("Service", back_populates="sub_services")
