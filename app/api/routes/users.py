# app/api/routes/users.py
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from app.db.base import get_db
from app.schemas.user import CustomerDashboardResponse, UserCreate, UserResponse
from app.services import provider_service

router = APIRouter(prefix="/users", tags=["users"])


@router.post("/", response_model=UserResponse, status_code=201)
def register(user: UserCreate, db: Session = Depends(get_db)):
    return provider_service.create_user(db, user)


@router.get("/{user_id}", response_model=UserResponse)
def get_user(user_id: int, db: Session = Depends(get_db)):
    return provider_service.get_user(db, user_id)


@router.get("/{user_id}/dashboard", response_model=CustomerDashboardResponse)
def customer_dashboard(user_id: int, db: Session = Depends(get_db)):
    return provider_service.get_customer_dashboard(db, user_id)
