import os
from datetime import date
from decimal import Decimal

os.environ.setdefault("PYTEST_RUN", "1")
os.environ["REDIS_URL"] = "disabled"
os.environ["QUOTATION_SWEEP_INTERVAL_SECONDS"] = "0"

import fakeredis
import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from hall_service import schemas
from hall_service.models.base import BaseModel
from hall_service.services.container import ServiceContainer
from hall_service.utils.redis_cache import CacheFacade

# 2030-01-01 is a Tuesday, 2030-01-05 a Saturday
TUESDAY = date(2030, 1, 1)
SATURDAY = date(2030, 1, 5)


def make_engine(url: str = "sqlite:///:memory:"):
    if url == "sqlite:///:memory:":
        engine = create_engine(
            url, connect_args={"check_same_thread": False}, poolclass=StaticPool
        )
    else:
        engine = create_engine(url, connect_args={"check_same_thread": False, "timeout": 30})
    BaseModel.metadata.create_all(engine)
    return engine


@pytest.fixture
def engine():
    engine = make_engine()
    yield engine
    engine.dispose()


@pytest.fixture
def db(engine):
    Session = sessionmaker(bind=engine, autocommit=False, autoflush=False)
    session = Session()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def fake_redis():
    return fakeredis.FakeStrictRedis()


@pytest.fixture
def container(fake_redis):
    return ServiceContainer.build(cache=CacheFacade(client=fake_redis))


@pytest.fixture
def hall_service(db, container):
    return container.hall_service(db)


@pytest.fixture
def booking_engine(db, container):
    return container.booking_engine(db)


@pytest.fixture
def quotation_engine(db, container):
    return container.quotation_engine(db)


@pytest.fixture
def hall(hall_service):
    return hall_service.create(
        schemas.HallCreate(
            name="Grand Hall",
            description="Main ballroom",
            capacity=200,
            location="Mumbai",
            amenities=["Parking", "AC"],
            base_rate=Decimal("5000"),
        )
    )


def rental_line(unit_price="5000", quantity=1):
    return schemas.LineItemIn(
        type="hall_rental", name="Hall Rental", quantity=quantity, unit_price=Decimal(unit_price)
    )


def booking_request(hall_id, **overrides):
    data = dict(
        hall_id=hall_id,
        customer_id=1,
        event_name="Annual Meet",
        event_type="meeting",
        start_date=TUESDAY,
        start_time="10:00",
        end_time="18:00",
        guest_count=50,
        line_items=[rental_line()],
    )
    data.update(overrides)
    return schemas.BookingCreate(**data)


def quotation_request(hall_id, **overrides):
    data = dict(
        hall_id=hall_id,
        customer_id=1,
        event_name="Annual Meet",
        event_type="meeting",
        event_date=TUESDAY,
        start_time="10:00",
        end_time="18:00",
        guest_count=50,
        line_items=[rental_line()],
    )
    data.update(overrides)
    return schemas.QuotationCreate(**data)
