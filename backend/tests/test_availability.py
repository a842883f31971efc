from datetime import date

import pytest

from hall_service import schemas
from hall_service.utils.errors import ValidationError

from conftest import SATURDAY, TUESDAY, booking_request


def test_free_hall_is_available(container, db, hall):
    checker = container.checker(db)
    assert checker.is_available(hall.id, TUESDAY, "10:00", "18:00")


def test_unknown_or_inactive_hall_is_unavailable(container, db, hall, hall_service):
    checker = container.checker(db)
    assert not checker.is_available(9999, TUESDAY, "10:00", "18:00")
    hall_service.update(hall.id, schemas.HallUpdate(is_active=False))
    assert not checker.is_available(hall.id, TUESDAY, "10:00", "18:00")


def test_overlapping_booking_blocks_window(container, db, hall, booking_engine):
    booking_engine.create(booking_request(hall.id))
    checker = container.checker(db)
    assert not checker.is_available(hall.id, TUESDAY, "09:00", "11:00")
    assert not checker.is_available(hall.id, TUESDAY, "12:00", "13:00")
    assert not checker.is_available(hall.id, TUESDAY, "17:59", "20:00")


def test_touching_windows_do_not_overlap(container, db, hall, booking_engine):
    booking_engine.create(booking_request(hall.id))
    checker = container.checker(db)
    assert checker.is_available(hall.id, TUESDAY, "18:00", "22:00")
    assert checker.is_available(hall.id, TUESDAY, "07:00", "10:00")


def test_other_day_is_free(container, db, hall, booking_engine):
    booking_engine.create(booking_request(hall.id))
    assert container.checker(db).is_available(hall.id, date(2030, 1, 2), "10:00", "18:00")


def test_multi_day_booking_covers_middle_day(container, db, hall, booking_engine):
    booking_engine.create(booking_request(hall.id, end_date=date(2030, 1, 3), line_items=[]))
    checker = container.checker(db)
    assert not checker.is_available(hall.id, date(2030, 1, 2), "11:00", "12:00")
    assert checker.is_available(hall.id, date(2030, 1, 4), "11:00", "12:00")


def test_cancelled_booking_frees_window(container, db, hall, booking_engine):
    booking = booking_engine.create(booking_request(hall.id))
    booking_engine.cancel(booking.id, "Plans changed")
    assert container.checker(db).is_available(hall.id, TUESDAY, "10:00", "18:00")


def test_excluded_booking_is_ignored(container, db, hall, booking_engine):
    booking = booking_engine.create(booking_request(hall.id))
    checker = container.checker(db)
    assert checker.is_available(hall.id, TUESDAY, "10:00", "18:00", exclude_booking_id=booking.id)


def test_admin_block_covering_window(container, db, hall, hall_service):
    hall_service.add_block(
        hall.id,
        schemas.AvailabilityBlockCreate(date=SATURDAY, start_time="08:00", end_time="20:00", reason="Maintenance"),
    )
    checker = container.checker(db)
    assert not checker.is_available(hall.id, SATURDAY, "10:00", "18:00")
    assert checker.is_available(hall.id, TUESDAY, "10:00", "18:00")


def test_invalid_window_raises(container, db, hall):
    with pytest.raises(ValidationError):
        container.checker(db).is_available(hall.id, TUESDAY, "18:00", "10:00")
