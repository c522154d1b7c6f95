# app/services/catalog_service.py
import logging

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.core.exceptions import ServiceNotFoundError, ValidationError
from app.db.models.service import Service, SubService
from app.schemas.service import ServiceCreate, SubServiceCreate
from app.services.unit_of_work import commit

logger = logging.getLogger(__name__)


def create_service(db: Session, data: ServiceCreate) -> Service:
    service = Service(
        name=data.name,
        description=data.description,
        is_active=data.is_active,
        sub_services=[
            SubService(name=s.name, price=s.price, price_unit=s.price_unit)
            for s in data.sub_services
        ],
    )
    db.add(service)
    try:
        db.commit()
    except IntegrityError as e:
        db.rollback()
        raise ValidationError(
            f"Service {data.name!r} already exists",
            errors=[{"field": "name", "message": "Already exists"}],
        ) from e
    db.refresh(service)
    logger.info(f"Service {service.id} ({service.name}) created")
    return service


def get_service(db: Session, service_id: int) -> Service:
    service = db.query(Service).filter(Service.id == service_id).first()
    if not service:
        raise ServiceNotFoundError(f"Service {service_id} not found")
    return service


def list_services(db: Session, active_only: bool = True):
    q = db.query(Service)
    if active_only:
        q = q.filter(Service.is_active == True)
    return q.order_by(Service.name).all()


def add_sub_service(db: Session, service_id: int, data: SubServiceCreate) -> Service:
    service = get_service(db, service_id)
    if any(s.name == data.name for s in service.sub_services):
        raise ValidationError(
            f"Sub-service {data.name!r} already exists on service {service_id}",
            errors=[{"field": "name", "message": "Already exists"}],
        )
    service.sub_services.append(SubService(name=data.name, price=data.price, price_unit=data.price_unit))
    commit(db, "add sub-service")
    db.refresh(service)
    return service
