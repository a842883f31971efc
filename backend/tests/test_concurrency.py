import threading
from decimal import Decimal

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

from hall_service import schemas
from hall_service.database import apply_sqlite_pragmas
from hall_service.models.base import BaseModel
from hall_service.services.container import ServiceContainer
from hall_service.utils import redis_cache
from hall_service.utils.errors import ConflictError

from conftest import booking_request, quotation_request


@pytest.fixture
def file_sessionmaker(tmp_path):
    engine = create_engine(
        f"sqlite:///{tmp_path / 'halls.db'}",
        connect_args={"check_same_thread": False, "timeout": 30},
    )
    apply_sqlite_pragmas(engine)
    BaseModel.metadata.create_all(engine)
    yield sessionmaker(bind=engine, autocommit=False, autoflush=False)
    engine.dispose()


@pytest.fixture
def container():
    return ServiceContainer.build(cache=redis_cache.CacheFacade(client=redis_cache._NullRedis()))


@pytest.fixture
def shared_hall_id(file_sessionmaker, container):
    with file_sessionmaker() as db:
        hall = container.hall_service(db).create(
            schemas.HallCreate(name="Shared Hall", capacity=100, base_rate=Decimal("5000"))
        )
        return hall.id


def _run_in_parallel(file_sessionmaker, container, work, count=2):
    barrier = threading.Barrier(count)
    results, errors = [], []

    def runner(idx):
        with file_sessionmaker() as db:
            barrier.wait()
            try:
                results.append(work(container, db, idx))
            except ConflictError as exc:
                errors.append(exc)

    threads = [threading.Thread(target=runner, args=(i,)) for i in range(count)]
    for t in threads:
        t.start()
    for t in threads:
        t.join(timeout=30)
    return results, errors


def test_concurrent_overlapping_bookings_one_wins(file_sessionmaker, container, shared_hall_id):
    def work(container, db, idx):
        start = "10:00" if idx == 0 else "12:00"
        request = booking_request(shared_hall_id, start_time=start, end_time="18:00")
        return container.booking_engine(db).create(request).id

    results, errors = _run_in_parallel(file_sessionmaker, container, work)
    assert len(results) == 1
    assert len(errors) == 1
    assert errors[0].field_errors["hall_id"] == "unavailable"


def test_concurrent_accepts_share_one_booking(file_sessionmaker, container, shared_hall_id):
    with file_sessionmaker() as db:
        engine = container.quotation_engine(db)
        quotation = engine.create(quotation_request(shared_hall_id))
        engine.send(quotation.id)
        quotation_id = quotation.id

    def work(container, db, idx):
        return container.quotation_engine(db).accept(quotation_id).id

    results, errors = _run_in_parallel(file_sessionmaker, container, work)
    assert errors == []
    assert len(results) == 2
    assert results[0] == results[1]
