# app/api/routes/services.py

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from app.db.base import get_db
from app.schemas.service import ServiceCreate, SubServiceCreate, ServiceResponse
from app.services import catalog_service


router = APIRouter(prefix="/services", tags=["services"])


# Admin creates catalog entry
@router.post("/", response_model=ServiceResponse, status_code=201)
def create_service(service_data: ServiceCreate, db: Session = Depends(get_db)):
    return catalog_service.create_service(db, service_data)


@router.get("/", response_model=list[ServiceResponse])
def list_services(active_only: bool = Query(True), db: Session = Depends(get_db)):
    return catalog_service.list_services(db, active_only=active_only)


@router.get("/{service_id}", response_model=ServiceResponse)
def get_service(service_id: int, db: Session = Depends(get_db)):
    return catalog_service.get_service(db, service_id)


@router.post("/{service_id}/sub-services", response_model=ServiceResponse, status_code=201)
def add_sub_service(service_id: int, sub_service: SubServiceCreate, db: Session = Depends(get_db)):
    return catalog_service.add_sub_service(db, service_id, sub_service)
