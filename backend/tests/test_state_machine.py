import pytest

from hall_service.models.enums import BookingStatus, QuotationStatus
from hall_service.services.state_machine import (
    BOOKING_TRANSITIONS,
    QUOTATION_TRANSITIONS,
    assert_booking_transition,
    assert_quotation_transition,
    is_terminal,
)
from hall_service.utils.errors import ConflictError


def test_every_status_has_a_row():
    assert set(QUOTATION_TRANSITIONS) == set(QuotationStatus)
    assert set(BOOKING_TRANSITIONS) == set(BookingStatus)


@pytest.mark.parametrize("state", [QuotationStatus.ACCEPTED, QuotationStatus.REJECTED, QuotationStatus.EXPIRED])
def test_quotation_terminal_states(state):
    assert is_terminal(QUOTATION_TRANSITIONS, state)


@pytest.mark.parametrize("state", [BookingStatus.COMPLETED, BookingStatus.CANCELLED, BookingStatus.NO_SHOW])
def test_booking_terminal_states(state):
    assert is_terminal(BOOKING_TRANSITIONS, state)


def test_accept_only_from_sent():
    assert_quotation_transition(QuotationStatus.SENT, QuotationStatus.ACCEPTED)
    with pytest.raises(ConflictError) as exc:
        assert_quotation_transition(QuotationStatus.DRAFT, QuotationStatus.ACCEPTED)
    assert exc.value.message == "Cannot transition quotation from draft to accepted"


def test_cancel_only_before_check_in():
    assert_booking_transition(BookingStatus.PENDING, BookingStatus.CANCELLED)
    assert_booking_transition(BookingStatus.CONFIRMED, BookingStatus.CANCELLED)
    with pytest.raises(ConflictError):
        assert_booking_transition(BookingStatus.CHECKED_IN, BookingStatus.CANCELLED)


def test_booking_cannot_skip_confirmation():
    with pytest.raises(ConflictError):
        assert_booking_transition(BookingStatus.PENDING, BookingStatus.CHECKED_IN)
    with pytest.raises(ConflictError):
        assert_booking_transition(BookingStatus.COMPLETED, BookingStatus.CANCELLED)
