from datetime import datetime, timedelta

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.orm import sessionmaker

from app.db.base import Base, get_db, make_engine
from app.db import models  # noqa: F401
from app.db.models.booking import Booking
from app.db.models.service import Service, SubService
from app.db.models.user import User
from app.main import create_app


@pytest.fixture
def engine(tmp_path):
    # file-backed so separate sessions (and threads) see the same database
    engine = make_engine(f"sqlite:///{tmp_path / 'test.db'}")
    Base.metadata.create_all(bind=engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture
def db(session_factory):
    session = session_factory()
    yield session
    session.close()


@pytest.fixture
def client(session_factory):
    app = create_app(create_tables=False)

    def override_get_db():
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = override_get_db
    return TestClient(app)


@pytest.fixture
def service(db):
    service = Service(
        name="Plumbing",
        description="Pipes, taps and drains",
        sub_services=[
            SubService(name="Tap repair", price=250.0, price_unit="job"),
            SubService(name="Pipe fitting", price=400.0, price_unit="hour"),
        ],
    )
    db.add(service)
    db.commit()
    db.refresh(service)
    return service


@pytest.fixture
def customer(db):
    user = User(email="asha@example.com", name="Asha Rao", role="customer")
    db.add(user)
    db.commit()
    db.refresh(user)
    return user


@pytest.fixture
def make_provider(db, service):
    counter = {"n": 0}

    def _make(rating=0.0, total_reviews=0, name=None):
        counter["n"] += 1
        provider = User(
            email=f"provider{counter['n']}@example.com",
            name=name or f"Provider {counter['n']}",
            phone="9876543210",
            role="provider",
            profession_id=service.id,
            experience=5,
            provider_status="active",
            rating=rating,
            total_reviews=total_reviews,
        )
        db.add(provider)
        db.commit()
        db.refresh(provider)
        return provider

    return _make


@pytest.fixture
def provider(make_provider):
    return make_provider()


@pytest.fixture
def make_booking(db, customer, provider, service):
    def _make(status="completed", provider_id=None, customer_id=None, estimated_price=500.0, **fields):
        values = dict(
            customer_id=customer_id or customer.id,
            provider_id=provider_id or provider.id,
            service_id=service.id,
            booking_date=datetime.utcnow() + timedelta(days=1),
            address="12 MG Road, Bengaluru 560001",
            description="Kitchen tap is leaking",
            estimated_price=estimated_price,
            status=status,
        )
        values.update(fields)
        booking = Booking(**values)
        db.add(booking)
        db.commit()
        db.refresh(booking)
        # detached with attributes loaded, safe to hand to other sessions and threads
        db.expunge(booking)
        return booking

    return _make


@pytest.fixture
def completed_booking(make_booking):
    return make_booking()
