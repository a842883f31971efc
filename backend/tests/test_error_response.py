import pytest

from hall_service import schemas
from hall_service.utils.errors import BadRequestError, ConflictError, NotFoundError, ValidationError

from conftest import booking_request, quotation_request


@pytest.mark.parametrize(
    "error_cls, status_code",
    [(ValidationError, 400), (BadRequestError, 400), (NotFoundError, 404), (ConflictError, 409)],
)
def test_status_codes(error_cls, status_code):
    assert error_cls("boom").status_code == status_code


def test_detail_carries_message_and_field_errors():
    exc = ConflictError("Hall is busy", {"hall_id": "unavailable"})
    assert exc.detail == {"message": "Hall is busy", "field_errors": {"hall_id": "unavailable"}}
    assert ValidationError("Bad").detail == {"message": "Bad", "field_errors": {}}


def test_quotation_discount_type_without_discount(quotation_engine, hall):
    quotation = quotation_engine.create(quotation_request(hall.id))
    with pytest.raises(BadRequestError) as exc:
        quotation_engine.update(quotation.id, schemas.QuotationUpdate(discount_type="flat"))
    assert exc.value.field_errors == {"discount": "required_with_discount_type"}


def test_booking_discount_type_without_discount(booking_engine, hall):
    booking = booking_engine.create(booking_request(hall.id))
    with pytest.raises(BadRequestError):
        booking_engine.update(booking.id, schemas.BookingUpdate(discount_type="flat"))
