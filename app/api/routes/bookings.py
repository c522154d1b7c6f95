# app/api/routes/bookings.py
from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from app.db.base import get_db
from app.schemas.booking import (
    BookingCreate,
    BookingComplete,
    BookingCancel,
    PaymentUpdate,
    BookingResponse,
)
from app.services import booking_service

router = APIRouter(prefix="/bookings", tags=["bookings"])


# Customer creates booking
@router.post("/", response_model=BookingResponse, status_code=201)
def create_booking(booking: BookingCreate, db: Session = Depends(get_db)):
    return booking_service.create_booking(db, booking)


@router.get("/{booking_id}", response_model=BookingResponse)
def get_booking(booking_id: int, db: Session = Depends(get_db)):
    return booking_service.get_booking(db, booking_id)


# Customer views their bookings
@router.get("/customer/{customer_id}", response_model=list[BookingResponse])
def customer_bookings(
    customer_id: int,
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    db: Session = Depends(get_db),
):
    return booking_service.list_customer_bookings(db, customer_id, page, limit)["items"]


# Provider views their bookings
@router.get("/provider/{provider_id}", response_model=list[BookingResponse])
def provider_bookings(
    provider_id: int,
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    db: Session = Depends(get_db),
):
    return booking_service.list_provider_bookings(db, provider_id, page, limit)["items"]


# Provider accepts booking
@router.post("/{booking_id}/confirm", response_model=BookingResponse)
def confirm_booking(booking_id: int, db: Session = Depends(get_db)):
    return booking_service.confirm_booking(db, booking_id)


@router.post("/{booking_id}/start", response_model=BookingResponse)
def start_booking(booking_id: int, db: Session = Depends(get_db)):
    return booking_service.start_booking(db, booking_id)


# Provider completes booking
@router.post("/{booking_id}/complete", response_model=BookingResponse)
def complete_booking(booking_id: int, body: Optional[BookingComplete] = None, db: Session = Depends(get_db)):
    final_price = body.final_price if body else None
    return booking_service.complete_booking(db, booking_id, final_price=final_price)


# Customer, provider or admin cancels booking
@router.post("/{booking_id}/cancel", response_model=BookingResponse)
def cancel_booking(booking_id: int, body: BookingCancel, db: Session = Depends(get_db)):
    return booking_service.cancel_booking(db, booking_id, body.reason, body.cancelled_by)


@router.post("/{booking_id}/no-show", response_model=BookingResponse)
def mark_no_show(booking_id: int, db: Session = Depends(get_db)):
    return booking_service.mark_no_show(db, booking_id)


@router.put("/{booking_id}/payment", response_model=BookingResponse)
def update_payment(booking_id: int, body: PaymentUpdate, db: Session = Depends(get_db)):
    return booking_service.update_payment(
        db, booking_id, payment_status=body.payment_status, payment_method=body.payment_method
    )
