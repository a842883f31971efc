"""Quotation and booking state machines."""

from typing import Dict, FrozenSet

from ..models.enums import BookingStatus, QuotationStatus
from ..utils.errors import ConflictError

QUOTATION_TRANSITIONS: Dict[QuotationStatus, FrozenSet[QuotationStatus]] = {
    QuotationStatus.DRAFT: frozenset(
        {QuotationStatus.SENT, QuotationStatus.REJECTED, QuotationStatus.EXPIRED}
    ),
    QuotationStatus.SENT: frozenset(
        {QuotationStatus.ACCEPTED, QuotationStatus.REJECTED, QuotationStatus.EXPIRED}
    ),
    QuotationStatus.ACCEPTED: frozenset(),
    QuotationStatus.REJECTED: frozenset(),
    QuotationStatus.EXPIRED: frozenset(),
}

BOOKING_TRANSITIONS: Dict[BookingStatus, FrozenSet[BookingStatus]] = {
    BookingStatus.PENDING: frozenset({BookingStatus.CONFIRMED, BookingStatus.CANCELLED}),
    BookingStatus.CONFIRMED: frozenset(
        {BookingStatus.CHECKED_IN, BookingStatus.CANCELLED, BookingStatus.NO_SHOW}
    ),
    BookingStatus.CHECKED_IN: frozenset({BookingStatus.COMPLETED}),
    BookingStatus.COMPLETED: frozenset(),
    BookingStatus.CANCELLED: frozenset(),
    BookingStatus.NO_SHOW: frozenset(),
}

QUOTATION_OPEN_STATES = frozenset({QuotationStatus.DRAFT, QuotationStatus.SENT})
BOOKING_ACTIVE_STATES = frozenset(
    {BookingStatus.PENDING, BookingStatus.CONFIRMED, BookingStatus.CHECKED_IN}
)


def is_terminal(table: Dict, state) -> bool:
    return not table.get(state)


def _assert(kind: str, table: Dict, current, target) -> None:
    if target not in table.get(current, frozenset()):
        raise ConflictError(
            f"Cannot transition {kind} from {current.value} to {target.value}",
            {"status": current.value},
        )


def assert_quotation_transition(current: QuotationStatus, target: QuotationStatus) -> None:
    _assert("quotation", QUOTATION_TRANSITIONS, current, target)


def assert_booking_transition(current: BookingStatus, target: BookingStatus) -> None:
    _assert("booking", BOOKING_TRANSITIONS, current, target)
