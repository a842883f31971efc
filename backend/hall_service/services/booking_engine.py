"""Booking lifecycle.

PENDING -> CONFIRMED -> CHECKED_IN -> COMPLETED, with CANCELLED reachable from
PENDING or CONFIRMED and NO_SHOW from CONFIRMED once the event window is over.
Every status change is a conditional update on the status that was read, so
two racing transitions cannot both apply.
"""

import logging
from datetime import datetime
from decimal import Decimal
from typing import Any, Dict, List, Optional

from sqlalchemy.orm import Session

from .. import models, schemas
from ..crud import BookingRepository, HallRepository
from ..models.enums import BookingStatus, DiscountType, LineItemType, PaymentStatus
from ..utils import redis_cache
from ..utils.errors import BadRequestError, ConflictError, NotFoundError, ValidationError
from ..utils.locks import HallLockManager
from .availability import AvailabilityChecker
from .cost_calculator import CostCalculator, money
from .state_machine import assert_booking_transition
from .time_windows import combine, date_span, window_hours

logger = logging.getLogger(__name__)

_EDITABLE_STATES = {BookingStatus.PENDING, BookingStatus.CONFIRMED}
_PAYABLE_STATES = {BookingStatus.PENDING, BookingStatus.CONFIRMED, BookingStatus.CHECKED_IN}
_REPRICE_FIELDS = {
    "start_date", "end_date", "start_time", "end_time",
    "guest_count", "line_items", "discount", "discount_type", "event_type",
}


def _pct(part: int, whole: int) -> float:
    return round(part * 100.0 / whole, 2) if whole else 0.0


class BookingEngine:
    def __init__(
        self,
        db: Session,
        bookings: BookingRepository,
        halls: HallRepository,
        checker: AvailabilityChecker,
        calculator: CostCalculator,
        locks: HallLockManager,
        cache: redis_cache.CacheFacade,
    ):
        self.db = db
        self.bookings = bookings
        self.halls = halls
        self.checker = checker
        self.calculator = calculator
        self.locks = locks
        self.cache = cache

    # ─── reads ──────────────────────────────────────────────────────────────
    def get(self, booking_id: int) -> models.HallBooking:
        booking = self.bookings.get(booking_id)
        if booking is None:
            raise NotFoundError(f"Booking {booking_id} not found", {"booking_id": "not_found"})
        return booking

    def get_read(self, booking_id: int) -> schemas.BookingRead:
        payload = self.cache.read_through(
            redis_cache.BOOKING,
            booking_id,
            lambda: schemas.BookingRead.model_validate(self.get(booking_id)).model_dump(mode="json"),
        )
        return schemas.BookingRead.model_validate(payload)

    def list(
        self,
        filters: Optional[schemas.BookingFilter] = None,
        pagination: Optional[schemas.Pagination] = None,
    ) -> schemas.Page[schemas.BookingRead]:
        filters = filters or schemas.BookingFilter()
        pagination = pagination or schemas.Pagination()
        params = {**filters.model_dump(mode="json"), **pagination.model_dump()}

        def load():
            items, total = self.bookings.list(filters, pagination)
            return schemas.Page[schemas.BookingRead](
                items=[schemas.BookingRead.model_validate(b) for b in items],
                total=total,
                page=pagination.page,
                limit=pagination.limit,
            ).model_dump(mode="json")

        payload = self.cache.list_through(redis_cache.BOOKING, params, load)
        return schemas.Page[schemas.BookingRead].model_validate(payload)

    def statistics(self, filters: Optional[schemas.BookingFilter] = None) -> schemas.BookingStatistics:
        counts = self.bookings.count_by_status(filters)
        revenue, completed = self.bookings.aggregate_revenue(filters)
        total = sum(counts.values())
        return schemas.BookingStatistics(
            total=total,
            pending=counts[BookingStatus.PENDING],
            confirmed=counts[BookingStatus.CONFIRMED],
            checked_in=counts[BookingStatus.CHECKED_IN],
            completed=counts[BookingStatus.COMPLETED],
            cancelled=counts[BookingStatus.CANCELLED],
            no_show=counts[BookingStatus.NO_SHOW],
            total_revenue=money(revenue),
            average_booking_value=money(revenue / completed) if completed else Decimal("0.00"),
            confirmation_rate=_pct(
                counts[BookingStatus.CONFIRMED]
                + counts[BookingStatus.CHECKED_IN]
                + counts[BookingStatus.COMPLETED],
                total,
            ),
            completion_rate=_pct(counts[BookingStatus.COMPLETED], total),
            cancellation_rate=_pct(counts[BookingStatus.CANCELLED], total),
        )

    # ─── creation ───────────────────────────────────────────────────────────
    def _validate(self, data: Dict[str, Any], hall: models.Hall) -> schemas.CostRequest:
        """Collect every field problem and return the cost request to price."""
        errors: Dict[str, str] = {}
        end_date = data.get("end_date") or data["start_date"]
        if end_date < data["start_date"]:
            errors["end_date"] = "End date cannot be before start date"
        if data["guest_count"] > hall.capacity:
            errors["guest_count"] = f"Guest count exceeds hall capacity of {hall.capacity}"

        line_items = list(data.get("line_items") or [])
        if not line_items:
            line_items = self.calculator.get_default_line_items(
                data.get("event_type"), data["guest_count"], base_rate=hall.base_rate
            )
            days = (end_date - data["start_date"]).days + 1
            if days > 1:
                line_items = [
                    i.model_copy(update={"quantity": days}) if i.type == LineItemType.HALL_RENTAL else i
                    for i in line_items
                ]
        cost_request = schemas.CostRequest(
            event_date=data["start_date"],
            start_time=data["start_time"],
            end_time=data["end_time"],
            guest_count=data["guest_count"],
            event_type=data.get("event_type"),
            line_items=line_items,
            discount=data.get("discount") or Decimal("0"),
            discount_type=data.get("discount_type") or DiscountType.PERCENTAGE,
            base_rate=hall.base_rate,
        )
        errors.update(self.calculator.validate_cost_request(cost_request).field_errors)
        if errors:
            raise ValidationError("Invalid booking request", errors)
        return cost_request

    def _apply_cost(self, booking: models.HallBooking, cost: schemas.CostCalculation) -> None:
        booking.base_amount = cost.base_amount
        booking.additional_charges = money(cost.gross_amount - cost.base_amount)
        booking.discount = cost.discount
        booking.tax_amount = cost.tax_amount
        self._settle_totals(booking)

    def _settle_totals(self, booking: models.HallBooking) -> None:
        total = money(
            Decimal(booking.base_amount)
            + Decimal(booking.additional_charges)
            - Decimal(booking.discount)
            + Decimal(booking.tax_amount)
        )
        booking.total_amount = total
        booking.deposit_amount = self.calculator.calculate_deposit_amount(total)
        booking.balance_amount = money(total - booking.deposit_amount)

    def _assert_window_free(self, hall_id: int, start, end, start_time: str, end_time: str,
                            exclude_booking_id: Optional[int] = None) -> None:
        for day in date_span(start, end):
            if not self.checker.is_available(hall_id, day, start_time, end_time, exclude_booking_id):
                raise ConflictError(
                    "Hall is not available for the requested date and time",
                    {"hall_id": "unavailable", "date": day.isoformat()},
                )

    def create(self, request: schemas.BookingCreate) -> models.HallBooking:
        hall = self.halls.get(request.hall_id)
        if hall is None:
            raise NotFoundError(f"Hall {request.hall_id} not found", {"hall_id": "not_found"})
        data = request.model_dump()
        data["line_items"] = request.line_items
        cost_request = self._validate(data, hall)
        cost = self.calculator.calculate_cost(cost_request)
        end_date = request.end_date or request.start_date

        booking = models.HallBooking(
            hall_id=hall.id,
            customer_id=request.customer_id,
            event_name=request.event_name,
            event_type=request.event_type,
            start_date=request.start_date,
            end_date=end_date,
            start_time=request.start_time,
            end_time=request.end_time,
            duration=self._duration(request.start_date, end_date, request.start_time, request.end_time),
            guest_count=request.guest_count,
            special_requests=request.special_requests,
            currency=cost.currency,
            status=BookingStatus.PENDING,
            payment_status=PaymentStatus.PENDING,
            amount_paid=Decimal("0.00"),
        )
        self._apply_cost(booking, cost)
        for item in cost.line_items:
            models.LineItem.for_booking(booking, **item.model_dump())

        try:
            with self.locks.hold(self.db, hall.id):
                self._assert_window_free(
                    hall.id, request.start_date, end_date, request.start_time, request.end_time
                )
                self.bookings.create(booking)
                self.db.commit()
        except Exception:
            self.db.rollback()
            raise
        self.db.refresh(booking)
        self.cache.invalidate(redis_cache.BOOKING, booking.id)
        logger.info("Created booking %s for hall %s on %s", booking.id, hall.id, booking.start_date)
        return booking

    def create_from_quotation(self, quotation: models.HallQuotation) -> models.HallBooking:
        """Insert the booking for an accepted quotation without committing.

        The caller holds the hall lock, has re-checked availability and owns
        the transaction.
        """
        booking = models.HallBooking(
            hall_id=quotation.hall_id,
            customer_id=quotation.customer_id,
            quotation_id=quotation.id,
            event_name=quotation.event_name,
            event_type=quotation.event_type,
            start_date=quotation.event_date,
            end_date=quotation.event_date,
            start_time=quotation.start_time,
            end_time=quotation.end_time,
            duration=self._duration(
                quotation.event_date, quotation.event_date, quotation.start_time, quotation.end_time
            ),
            guest_count=quotation.guest_count,
            currency=quotation.currency,
            status=BookingStatus.PENDING,
            payment_status=PaymentStatus.PENDING,
            amount_paid=Decimal("0.00"),
            base_amount=quotation.base_amount,
            additional_charges=money(
                Decimal(quotation.subtotal) + Decimal(quotation.discount_amount) - Decimal(quotation.base_amount)
            ),
            discount=quotation.discount_amount,
            tax_amount=quotation.tax_amount,
        )
        self._settle_totals(booking)
        for item in quotation.line_items:
            models.LineItem.for_booking(
                booking,
                type=item.type,
                name=item.name,
                description=item.description,
                quantity=item.quantity,
                unit_price=item.unit_price,
                total_price=item.total_price,
            )
        return self.bookings.create(booking)

    @staticmethod
    def _duration(start, end, start_time: str, end_time: str) -> Decimal:
        days = (end - start).days + 1
        return window_hours(start_time, end_time) * days

    # ─── updates ────────────────────────────────────────────────────────────
    def update(self, booking_id: int, patch: schemas.BookingUpdate) -> models.HallBooking:
        booking = self.get(booking_id)
        if booking.status not in _EDITABLE_STATES:
            raise ConflictError(
                f"Cannot update a {booking.status.value} booking",
                {"status": booking.status.value},
            )
        changes = patch.model_dump(exclude_unset=True, exclude_none=True)
        if "line_items" in changes:
            changes["line_items"] = patch.line_items
        if "discount_type" in changes and "discount" not in changes:
            raise BadRequestError(
                "A discount type needs a discount value", {"discount": "required_with_discount_type"}
            )
        reprice = bool(_REPRICE_FIELDS & changes.keys())
        descriptive = {k: v for k, v in changes.items() if k not in _REPRICE_FIELDS}

        try:
            if reprice:
                hall = self.halls.get(booking.hall_id)
                merged = {
                    "start_date": changes.get("start_date", booking.start_date),
                    "end_date": changes.get(
                        "end_date",
                        changes.get("start_date", booking.start_date) + (booking.end_date - booking.start_date),
                    ),
                    "start_time": changes.get("start_time", booking.start_time),
                    "end_time": changes.get("end_time", booking.end_time),
                    "guest_count": changes.get("guest_count", booking.guest_count),
                    "event_type": changes.get("event_type", booking.event_type),
                    "line_items": changes.get("line_items") or self.calculator.list_price_lines(
                        booking.line_items, booking.start_date
                    ),
                }
                if "discount" in changes:
                    merged["discount"] = changes["discount"]
                    merged["discount_type"] = changes.get("discount_type", DiscountType.PERCENTAGE)
                else:
                    # stored discount is an amount, not the original percentage
                    merged["discount"] = booking.discount
                    merged["discount_type"] = DiscountType.FLAT
                cost_request = self._validate(merged, hall)
                cost = self.calculator.calculate_cost(cost_request)
                with self.locks.hold(self.db, booking.hall_id):
                    self._assert_window_free(
                        booking.hall_id, merged["start_date"], merged["end_date"],
                        merged["start_time"], merged["end_time"], exclude_booking_id=booking.id,
                    )
                    self.bookings.update(booking, {
                        "start_date": merged["start_date"],
                        "end_date": merged["end_date"],
                        "start_time": merged["start_time"],
                        "end_time": merged["end_time"],
                        "guest_count": merged["guest_count"],
                        "event_type": merged["event_type"],
                        "duration": self._duration(
                            merged["start_date"], merged["end_date"], merged["start_time"], merged["end_time"]
                        ),
                        **descriptive,
                    })
                    self._apply_cost(booking, cost)
                    self.bookings.replace_line_items(booking, cost.line_items)
                    self.db.commit()
            else:
                self.bookings.update(booking, descriptive)
                self.db.commit()
        except Exception:
            self.db.rollback()
            raise
        self.db.refresh(booking)
        self.cache.invalidate(redis_cache.BOOKING, booking.id)
        return booking

    def record_payment(self, booking_id: int, amount: Decimal) -> models.HallBooking:
        booking = self.get(booking_id)
        if booking.status not in _PAYABLE_STATES:
            raise ConflictError(
                f"Cannot record a payment on a {booking.status.value} booking",
                {"status": booking.status.value},
            )
        amount = money(amount)
        if amount <= 0:
            raise ValidationError("Payment amount must be positive", {"amount": "must_be_positive"})
        previous = money(booking.amount_paid)
        paid = money(previous + amount)
        if paid > money(booking.total_amount):
            raise ValidationError("Payment exceeds the outstanding amount", {"amount": "overpayment"})
        values = {
            "amount_paid": paid,
            "deposit_paid": paid >= money(booking.deposit_amount),
            "payment_status": (
                PaymentStatus.COMPLETED if paid >= money(booking.total_amount) else PaymentStatus.PROCESSING
            ),
        }
        updated = self.bookings.update_if(
            booking.id, {"amount_paid": previous, "status": booking.status}, values
        )
        if not updated:
            self.db.rollback()
            raise ConflictError("Booking changed while recording payment, retry", {"booking_id": "stale"})
        self.db.commit()
        self.db.refresh(booking)
        self.cache.invalidate(redis_cache.BOOKING, booking.id)
        logger.info("Recorded payment of %s on booking %s", amount, booking.id)
        return booking

    # ─── state machine ──────────────────────────────────────────────────────
    def _transition(self, booking_id: int, target: BookingStatus, **values: Any) -> models.HallBooking:
        booking = self.get(booking_id)
        current = booking.status
        assert_booking_transition(current, target)
        updated = self.bookings.transition(booking.id, {current}, {"status": target, **values})
        if not updated:
            self.db.rollback()
            self.db.refresh(booking)
            raise ConflictError(
                f"Cannot transition booking from {booking.status.value} to {target.value}",
                {"status": booking.status.value},
            )
        self.db.commit()
        self.db.refresh(booking)
        self.cache.invalidate(redis_cache.BOOKING, booking.id)
        logger.info("Booking %s moved %s -> %s", booking.id, current.value, target.value)
        return booking

    def confirm(self, booking_id: int) -> models.HallBooking:
        return self._transition(
            booking_id, BookingStatus.CONFIRMED, is_confirmed=True, confirmed_at=datetime.utcnow()
        )

    def check_in(self, booking_id: int) -> models.HallBooking:
        return self._transition(booking_id, BookingStatus.CHECKED_IN, checked_in_at=datetime.utcnow())

    def check_out(self, booking_id: int) -> models.HallBooking:
        return self._transition(booking_id, BookingStatus.COMPLETED, checked_out_at=datetime.utcnow())

    def cancel(self, booking_id: int, reason: str) -> models.HallBooking:
        if not reason or not reason.strip():
            raise ValidationError("Cancellation reason is required", {"reason": "required"})
        booking = self.get(booking_id)
        assert_booking_transition(booking.status, BookingStatus.CANCELLED)
        now = datetime.utcnow()
        paid = money(booking.amount_paid)
        refund = self.calculator.calculate_refund_amount(
            booking.total_amount,
            paid,
            self.calculator.rates.cancellation_hours,
            combine(booking.start_date, booking.start_time),
            now=now,
        )
        values: Dict[str, Any] = {
            "is_cancelled": True,
            "cancelled_at": now,
            "cancellation_reason": reason.strip(),
            "refund_amount": refund,
        }
        if refund > 0:
            values["payment_status"] = (
                PaymentStatus.REFUNDED if refund >= paid else PaymentStatus.PARTIALLY_REFUNDED
            )
        return self._transition(booking_id, BookingStatus.CANCELLED, **values)

    def mark_no_show(self, booking_id: int) -> models.HallBooking:
        booking = self.get(booking_id)
        assert_booking_transition(booking.status, BookingStatus.NO_SHOW)
        if datetime.utcnow() < combine(booking.end_date, booking.end_time):
            raise ConflictError(
                "Cannot mark no-show before the event window has ended",
                {"status": booking.status.value},
            )
        return self._transition(booking_id, BookingStatus.NO_SHOW)
