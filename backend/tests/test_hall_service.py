from decimal import Decimal

import pytest

from hall_service import schemas
from hall_service.models.enums import BookingStatus
from hall_service.utils.errors import ConflictError, NotFoundError, ValidationError

from conftest import SATURDAY, TUESDAY, booking_request, quotation_request


def test_duplicate_name_is_case_insensitive(hall_service, hall):
    with pytest.raises(ConflictError):
        hall_service.create(schemas.HallCreate(name=" grand hall ", capacity=10, base_rate=Decimal("1")))


def test_rename_to_existing_name(hall_service, hall):
    other = hall_service.create(schemas.HallCreate(name="Annex", capacity=40, base_rate=Decimal("2000")))
    with pytest.raises(ConflictError):
        hall_service.update(other.id, schemas.HallUpdate(name="Grand Hall"))
    renamed = hall_service.update(other.id, schemas.HallUpdate(name="Garden Room", capacity=60))
    assert renamed.name == "Garden Room"
    assert renamed.capacity == 60


def test_list_filters(hall_service, hall):
    hall_service.create(
        schemas.HallCreate(name="Rooftop", capacity=30, base_rate=Decimal("1500"), amenities=["Bar"])
    )
    assert hall_service.list(schemas.HallFilter(min_capacity=100)).total == 1
    assert hall_service.list(schemas.HallFilter(amenity="parking")).items[0].name == "Grand Hall"
    assert hall_service.list(schemas.HallFilter(max_base_rate=Decimal("2000"))).items[0].name == "Rooftop"


def test_search(hall_service, hall):
    assert [h.id for h in hall_service.search("ballroom")] == [hall.id]
    assert hall_service.search("nowhere") == []
    with pytest.raises(ValidationError):
        hall_service.search(" ")


def test_delete_unused_hall(hall_service, hall):
    assert hall_service.delete(hall.id) is True
    with pytest.raises(NotFoundError):
        hall_service.get(hall.id)


def test_delete_refused_with_active_booking(hall_service, booking_engine, hall):
    booking_engine.create(booking_request(hall.id))
    with pytest.raises(ConflictError):
        hall_service.delete(hall.id)


def test_delete_refused_with_open_quotation(hall_service, quotation_engine, hall):
    quotation_engine.create(quotation_request(hall.id))
    with pytest.raises(ConflictError):
        hall_service.delete(hall.id)


def test_delete_with_history_deactivates(hall_service, booking_engine, hall):
    booking = booking_engine.create(booking_request(hall.id))
    booking_engine.cancel(booking.id, "Plans changed")
    assert hall_service.delete(hall.id) is False
    hall = hall_service.get(hall.id)
    assert not hall.is_active
    assert not hall.is_available


def test_blocks(hall_service, hall):
    block = hall_service.add_block(
        hall.id, schemas.AvailabilityBlockCreate(date=SATURDAY, start_time="08:00", end_time="22:00")
    )
    assert not hall_service.check_availability(hall.id, SATURDAY, "10:00", "12:00")
    assert [b.id for b in hall_service.list_blocks(hall.id, SATURDAY)] == [block.id]
    hall_service.remove_block(hall.id, block.id)
    assert hall_service.check_availability(hall.id, SATURDAY, "10:00", "12:00")
    with pytest.raises(NotFoundError):
        hall_service.remove_block(hall.id, block.id)


def test_block_with_inverted_window(hall_service, hall):
    with pytest.raises(ValidationError):
        hall_service.add_block(
            hall.id, schemas.AvailabilityBlockCreate(date=SATURDAY, start_time="22:00", end_time="08:00")
        )


def test_statistics(hall_service, booking_engine, quotation_engine, hall):
    booking = booking_engine.create(booking_request(hall.id))
    for step in (booking_engine.confirm, booking_engine.check_in, booking_engine.check_out):
        step(booking.id)
    quotation_engine.create(quotation_request(hall.id, start_time="19:00", end_time="22:00"))

    stats = hall_service.statistics(hall.id)
    assert stats.total_bookings == 1
    assert stats.completed_bookings == 1
    assert stats.total_quotations == 1
    assert stats.total_revenue == Decimal("5900.00")
    assert booking_engine.get(booking.id).status == BookingStatus.COMPLETED


def test_check_availability_unknown_hall(hall_service):
    with pytest.raises(NotFoundError):
        hall_service.check_availability(42, TUESDAY, "10:00", "11:00")
