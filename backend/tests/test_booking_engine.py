from datetime import date
from decimal import Decimal

import pytest
from freezegun import freeze_time

from hall_service import schemas
from hall_service.models.enums import BookingStatus, LineItemOwner, PaymentStatus
from hall_service.utils.errors import ConflictError, NotFoundError, ValidationError

from conftest import SATURDAY, TUESDAY, booking_request, rental_line


def test_create_booking_totals(booking_engine, hall):
    booking = booking_engine.create(booking_request(hall.id))
    assert booking.status == BookingStatus.PENDING
    assert booking.payment_status == PaymentStatus.PENDING
    assert booking.end_date == TUESDAY
    assert booking.duration == Decimal("8.00")
    assert booking.base_amount == Decimal("5000.00")
    assert booking.additional_charges == Decimal("0.00")
    assert booking.tax_amount == Decimal("900.00")
    assert booking.total_amount == Decimal("5900.00")
    assert booking.deposit_amount == Decimal("1180.00")
    assert booking.balance_amount == Decimal("4720.00")
    assert booking.line_items[0].owner_kind == LineItemOwner.BOOKING


def test_multi_day_booking_uses_template(booking_engine, hall):
    booking = booking_engine.create(
        booking_request(hall.id, end_date=date(2030, 1, 3), line_items=[])
    )
    rental = booking.line_items[0]
    assert rental.quantity == 3
    assert booking.duration == Decimal("24.00")
    assert booking.base_amount == Decimal("15000.00")
    assert booking.additional_charges == Decimal("2500.00")
    assert booking.total_amount == Decimal("20650.00")


def test_overlapping_booking_conflicts(booking_engine, hall):
    booking_engine.create(booking_request(hall.id))
    with pytest.raises(ConflictError) as exc:
        booking_engine.create(booking_request(hall.id, start_time="17:00", end_time="21:00"))
    assert exc.value.field_errors["hall_id"] == "unavailable"


def test_create_validation(booking_engine, hall):
    with pytest.raises(ValidationError) as exc:
        booking_engine.create(
            booking_request(hall.id, guest_count=500, end_date=date(2029, 12, 31))
        )
    assert {"guest_count", "end_date"} <= set(exc.value.field_errors)
    with pytest.raises(NotFoundError):
        booking_engine.create(booking_request(9999))


def test_full_lifecycle(booking_engine, hall):
    booking = booking_engine.create(booking_request(hall.id))
    booking = booking_engine.confirm(booking.id)
    assert booking.is_confirmed and booking.confirmed_at is not None
    booking = booking_engine.check_in(booking.id)
    assert booking.status == BookingStatus.CHECKED_IN
    booking = booking_engine.check_out(booking.id)
    assert booking.status == BookingStatus.COMPLETED
    assert booking.checked_out_at is not None

    with pytest.raises(ConflictError):
        booking_engine.cancel(booking.id, "too late")


def test_check_in_requires_confirmation(booking_engine, hall):
    booking = booking_engine.create(booking_request(hall.id))
    with pytest.raises(ConflictError) as exc:
        booking_engine.check_in(booking.id)
    assert exc.value.message == "Cannot transition booking from pending to checked_in"


@freeze_time("2029-12-31 04:00:00")
def test_cancel_refund_follows_policy(booking_engine, hall):
    booking = booking_engine.create(booking_request(hall.id, line_items=[rental_line("20000")]))
    booking_engine.record_payment(booking.id, Decimal("10000"))
    booking = booking_engine.cancel(booking.id, "Venue change")
    assert booking.status == BookingStatus.CANCELLED
    assert booking.is_cancelled
    assert booking.cancellation_reason == "Venue change"
    assert booking.refund_amount == Decimal("5000.00")
    assert booking.payment_status == PaymentStatus.PARTIALLY_REFUNDED


def test_cancel_requires_reason(booking_engine, hall):
    booking = booking_engine.create(booking_request(hall.id))
    with pytest.raises(ValidationError):
        booking_engine.cancel(booking.id, "  ")


def test_cancel_unpaid_booking_refunds_nothing(booking_engine, hall):
    booking = booking_engine.create(booking_request(hall.id))
    booking = booking_engine.cancel(booking.id, "No longer needed")
    assert booking.refund_amount == Decimal("0.00")
    assert booking.payment_status == PaymentStatus.PENDING


def test_no_show_only_after_event_window(booking_engine, hall):
    booking = booking_engine.create(booking_request(hall.id))
    booking_engine.confirm(booking.id)
    with pytest.raises(ConflictError):
        booking_engine.mark_no_show(booking.id)
    with freeze_time("2030-01-01 19:00:00"):
        booking = booking_engine.mark_no_show(booking.id)
    assert booking.status == BookingStatus.NO_SHOW


def test_payments(booking_engine, hall):
    booking = booking_engine.create(booking_request(hall.id))
    booking = booking_engine.record_payment(booking.id, Decimal("1180"))
    assert booking.deposit_paid
    assert booking.payment_status == PaymentStatus.PROCESSING
    with pytest.raises(ValidationError):
        booking_engine.record_payment(booking.id, Decimal("5000"))
    booking = booking_engine.record_payment(booking.id, Decimal("4720"))
    assert booking.amount_paid == Decimal("5900.00")
    assert booking.payment_status == PaymentStatus.COMPLETED


def test_payment_on_cancelled_booking(booking_engine, hall):
    booking = booking_engine.create(booking_request(hall.id))
    booking_engine.cancel(booking.id, "Changed plans")
    with pytest.raises(ConflictError):
        booking_engine.record_payment(booking.id, Decimal("100"))


def test_update_moves_to_weekend_and_reprices(booking_engine, hall):
    booking = booking_engine.create(booking_request(hall.id))
    booking = booking_engine.update(booking.id, schemas.BookingUpdate(start_date=SATURDAY))
    assert booking.start_date == SATURDAY
    assert booking.end_date == SATURDAY
    assert booking.base_amount == Decimal("7500.00")
    assert booking.total_amount == Decimal("8850.00")
    assert len(booking.line_items) == 1


def test_update_replaces_line_items(booking_engine, hall, db):
    booking = booking_engine.create(booking_request(hall.id))
    chairs = schemas.LineItemIn(type="chair", name="Chairs", quantity=10, unit_price=Decimal("50"))
    booking_engine.update(booking.id, schemas.BookingUpdate(line_items=[rental_line("6000"), chairs]))
    db.expire_all()
    stored = booking_engine.get(booking.id)
    assert len(stored.line_items) == 2
    assert all(item.owner_kind == LineItemOwner.BOOKING for item in stored.line_items)
    assert sum(item.total_price for item in stored.line_items) == Decimal("6500.00")
    assert stored.base_amount == Decimal("6000.00")
    assert stored.additional_charges == Decimal("500.00")
    assert stored.total_amount == Decimal("7670.00")


def test_update_keeps_multi_day_span(booking_engine, hall):
    booking = booking_engine.create(
        booking_request(hall.id, end_date=date(2030, 1, 3), line_items=[])
    )
    booking = booking_engine.update(booking.id, schemas.BookingUpdate(start_date=date(2030, 1, 8)))
    assert booking.end_date == date(2030, 1, 10)


def test_update_checks_availability_excluding_itself(booking_engine, hall):
    first = booking_engine.create(booking_request(hall.id))
    second = booking_engine.create(booking_request(hall.id, start_time="19:00", end_time="22:00"))

    first = booking_engine.update(first.id, schemas.BookingUpdate(end_time="19:00"))
    assert first.end_time == "19:00"
    assert first.duration == Decimal("9.00")
    with pytest.raises(ConflictError):
        booking_engine.update(second.id, schemas.BookingUpdate(start_time="18:30"))


def test_update_descriptive_fields(booking_engine, hall):
    booking = booking_engine.create(booking_request(hall.id))
    booking = booking_engine.update(booking.id, schemas.BookingUpdate(special_requests="Stage"))
    assert booking.special_requests == "Stage"
    assert booking.total_amount == Decimal("5900.00")


def test_update_cancelled_booking(booking_engine, hall):
    booking = booking_engine.create(booking_request(hall.id))
    booking_engine.cancel(booking.id, "Changed plans")
    with pytest.raises(ConflictError):
        booking_engine.update(booking.id, schemas.BookingUpdate(event_name="x"))


def test_statistics(booking_engine, hall):
    done = booking_engine.create(booking_request(hall.id))
    booking_engine.confirm(done.id)
    booking_engine.check_in(done.id)
    booking_engine.check_out(done.id)
    cancelled = booking_engine.create(booking_request(hall.id, start_date=date(2030, 1, 2)))
    booking_engine.cancel(cancelled.id, "No budget")

    stats = booking_engine.statistics()
    assert stats.total == 2
    assert stats.completed == 1
    assert stats.cancelled == 1
    assert stats.total_revenue == Decimal("5900.00")
    assert stats.average_booking_value == Decimal("5900.00")
    assert stats.completion_rate == 50.0
    assert stats.cancellation_rate == 50.0


def test_list_by_hall(booking_engine, hall):
    booking_engine.create(booking_request(hall.id))
    booking_engine.create(booking_request(hall.id, start_date=date(2030, 1, 2)))
    page = booking_engine.list(schemas.BookingFilter(hall_id=hall.id), schemas.Pagination(page=1, limit=1))
    assert page.total == 2
    assert len(page.items) == 1
    assert page.items[0].start_date == date(2030, 1, 2)
