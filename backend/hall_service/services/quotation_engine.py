"""Quotation lifecycle: DRAFT -> SENT -> ACCEPTED | REJECTED | EXPIRED.

Accepting a quotation converts it into a booking. The SENT -> ACCEPTED step
is a compare-and-set on the status column and runs under the hall lock
together with the availability re-check and the booking insert, all in one
transaction. Accepting an already accepted quotation returns its booking.
"""

import logging
from datetime import datetime, timedelta
from decimal import Decimal
from typing import Any, Dict, Optional

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from .. import models, schemas
from ..crud import BookingRepository, HallRepository, QuotationRepository
from ..models.enums import DiscountType, QuotationStatus
from ..utils import redis_cache
from ..utils.errors import BadRequestError, ConflictError, NotFoundError, ValidationError
from ..utils.locks import HallLockManager
from .availability import AvailabilityChecker
from .booking_engine import BookingEngine
from .cost_calculator import CostCalculator, money
from .state_machine import assert_quotation_transition, is_terminal, QUOTATION_TRANSITIONS

logger = logging.getLogger(__name__)

_REPRICE_FIELDS = {
    "event_date", "start_time", "end_time", "guest_count",
    "line_items", "discount", "discount_type",
}
_MAX_NUMBER_ATTEMPTS = 5


def _pct(part: int, whole: int) -> float:
    return round(part * 100.0 / whole, 2) if whole else 0.0


class QuotationEngine:
    def __init__(
        self,
        db: Session,
        quotations: QuotationRepository,
        halls: HallRepository,
        bookings: BookingRepository,
        checker: AvailabilityChecker,
        calculator: CostCalculator,
        booking_engine: BookingEngine,
        locks: HallLockManager,
        cache: redis_cache.CacheFacade,
        validity_days: int = 7,
    ):
        self.db = db
        self.quotations = quotations
        self.halls = halls
        self.bookings = bookings
        self.checker = checker
        self.calculator = calculator
        self.booking_engine = booking_engine
        self.locks = locks
        self.cache = cache
        self.validity_days = validity_days

    # ─── reads ──────────────────────────────────────────────────────────────
    def get(self, quotation_id: int) -> models.HallQuotation:
        quotation = self.quotations.get(quotation_id)
        if quotation is None:
            raise NotFoundError(f"Quotation {quotation_id} not found", {"quotation_id": "not_found"})
        return quotation

    def get_read(self, quotation_id: int) -> schemas.QuotationRead:
        payload = self.cache.read_through(
            redis_cache.QUOTATION,
            quotation_id,
            lambda: schemas.QuotationRead.model_validate(self.get(quotation_id)).model_dump(mode="json"),
        )
        return schemas.QuotationRead.model_validate(payload)

    def get_by_number(self, quotation_number: str) -> models.HallQuotation:
        quotation = self.quotations.get_by_number(quotation_number)
        if quotation is None:
            raise NotFoundError(
                f"Quotation {quotation_number} not found", {"quotation_number": "not_found"}
            )
        return quotation

    def list(
        self,
        filters: Optional[schemas.QuotationFilter] = None,
        pagination: Optional[schemas.Pagination] = None,
    ) -> schemas.Page[schemas.QuotationRead]:
        filters = filters or schemas.QuotationFilter()
        pagination = pagination or schemas.Pagination()
        params = {**filters.model_dump(mode="json"), **pagination.model_dump()}

        def load():
            items, total = self.quotations.list(filters, pagination)
            return schemas.Page[schemas.QuotationRead](
                items=[schemas.QuotationRead.model_validate(q) for q in items],
                total=total,
                page=pagination.page,
                limit=pagination.limit,
            ).model_dump(mode="json")

        payload = self.cache.list_through(redis_cache.QUOTATION, params, load)
        return schemas.Page[schemas.QuotationRead].model_validate(payload)

    def statistics(self, filters: Optional[schemas.QuotationFilter] = None) -> schemas.QuotationStatistics:
        counts = self.quotations.count_by_status(filters)
        value, accepted = self.quotations.aggregate_value(filters)
        total = sum(counts.values())
        return schemas.QuotationStatistics(
            total=total,
            by_status={status.value: count for status, count in counts.items()},
            accepted_value=money(value),
            average_accepted_value=money(value / accepted) if accepted else Decimal("0.00"),
            acceptance_rate=_pct(counts[QuotationStatus.ACCEPTED], total),
            rejection_rate=_pct(counts[QuotationStatus.REJECTED], total),
            expiration_rate=_pct(counts[QuotationStatus.EXPIRED], total),
        )

    # ─── pricing ────────────────────────────────────────────────────────────
    def calculate_cost(self, request: schemas.CostRequest) -> schemas.CostCalculation:
        result = self.calculator.validate_cost_request(request)
        if not result.is_valid:
            raise ValidationError("Invalid cost request", result.field_errors)
        return self.calculator.calculate_cost(request)

    def _price(self, data: Dict[str, Any], hall: models.Hall) -> schemas.CostCalculation:
        request = schemas.CostRequest(
            event_date=data["event_date"],
            start_time=data["start_time"],
            end_time=data["end_time"],
            guest_count=data["guest_count"],
            event_type=data.get("event_type"),
            line_items=list(data.get("line_items") or []),
            discount=data.get("discount") or Decimal("0"),
            discount_type=data.get("discount_type") or DiscountType.PERCENTAGE,
            base_rate=hall.base_rate,
        )
        errors = dict(self.calculator.validate_cost_request(request).field_errors)
        if data["guest_count"] > hall.capacity:
            errors["guest_count"] = f"Guest count exceeds hall capacity of {hall.capacity}"
        if errors:
            raise ValidationError("Invalid quotation request", errors)
        return self.calculator.calculate_cost(request)

    @staticmethod
    def _money_fields(cost: schemas.CostCalculation) -> Dict[str, Decimal]:
        return {
            "base_amount": cost.base_amount,
            "subtotal": cost.subtotal,
            "discount_amount": cost.discount,
            "tax_amount": cost.tax_amount,
            "total_amount": cost.total_amount,
        }

    def _new_number(self) -> str:
        for _ in range(_MAX_NUMBER_ATTEMPTS):
            number = self.calculator.generate_quotation_number()
            if not self.quotations.number_exists(number):
                return number
        raise ConflictError("Could not allocate a unique quotation number", {"quotation_number": "collision"})

    # ─── commands ───────────────────────────────────────────────────────────
    def create(self, request: schemas.QuotationCreate) -> models.HallQuotation:
        hall = self.halls.get(request.hall_id)
        if hall is None:
            raise NotFoundError(f"Hall {request.hall_id} not found", {"hall_id": "not_found"})
        if not hall.is_active:
            raise ConflictError("Hall is not active", {"hall_id": "inactive"})

        data = request.model_dump()
        data["line_items"] = request.line_items
        cost = self._price(data, hall)

        now = datetime.utcnow()
        valid_until = request.valid_until or now + timedelta(days=self.validity_days)
        if valid_until <= now:
            raise ValidationError("Validity must end in the future", {"valid_until": "in_past"})

        def build(number: str) -> models.HallQuotation:
            quotation = models.HallQuotation(
                quotation_number=number,
                hall_id=hall.id,
                customer_id=request.customer_id,
                event_name=request.event_name,
                event_type=request.event_type,
                event_date=request.event_date,
                start_time=request.start_time,
                end_time=request.end_time,
                guest_count=request.guest_count,
                currency=cost.currency,
                valid_until=valid_until,
                status=QuotationStatus.DRAFT,
                is_accepted=False,
                is_expired=False,
                notes=request.notes,
                **self._money_fields(cost),
            )
            for item in cost.line_items:
                models.LineItem.for_quotation(quotation, **item.model_dump())
            return quotation

        for attempt in range(1, _MAX_NUMBER_ATTEMPTS + 1):
            number = self._new_number()
            quotation = build(number)
            try:
                self.quotations.create(quotation)
                self.db.commit()
                break
            except IntegrityError:
                self.db.rollback()
                # another writer took the number after our existence check
                if attempt == _MAX_NUMBER_ATTEMPTS or self.quotations.get_by_number(number) is None:
                    raise
                logger.info("Quotation number %s collided, retrying", number)
            except Exception:
                self.db.rollback()
                raise
        self.db.refresh(quotation)
        self.cache.invalidate(redis_cache.QUOTATION, quotation.id)
        logger.info("Created quotation %s for hall %s", quotation.quotation_number, hall.id)
        return quotation

    def update(self, quotation_id: int, patch: schemas.QuotationUpdate) -> models.HallQuotation:
        quotation = self.get(quotation_id)
        current = quotation.status
        if quotation.is_accepted or quotation.is_expired or is_terminal(QUOTATION_TRANSITIONS, current):
            raise ConflictError(
                f"Cannot update a {current.value} quotation",
                {"status": current.value},
            )
        changes = patch.model_dump(exclude_unset=True, exclude_none=True)
        if "line_items" in changes:
            changes["line_items"] = patch.line_items
        if "discount_type" in changes and "discount" not in changes:
            raise BadRequestError(
                "A discount type needs a discount value", {"discount": "required_with_discount_type"}
            )
        reprice = bool(_REPRICE_FIELDS & changes.keys())
        if reprice and current != QuotationStatus.DRAFT:
            raise ConflictError(
                "Pricing can only change while the quotation is a draft",
                {"status": current.value},
            )

        values = {k: v for k, v in changes.items() if k not in _REPRICE_FIELDS}
        cost = None
        if reprice:
            merged = {
                "event_date": changes.get("event_date", quotation.event_date),
                "start_time": changes.get("start_time", quotation.start_time),
                "end_time": changes.get("end_time", quotation.end_time),
                "guest_count": changes.get("guest_count", quotation.guest_count),
                "event_type": changes.get("event_type", quotation.event_type),
                "line_items": changes.get("line_items") or self.calculator.list_price_lines(
                    quotation.line_items, quotation.event_date
                ),
            }
            if "discount" in changes:
                merged["discount"] = changes["discount"]
                merged["discount_type"] = changes.get("discount_type", DiscountType.PERCENTAGE)
            else:
                # stored discount is an amount, not the original percentage
                merged["discount"] = quotation.discount_amount
                merged["discount_type"] = DiscountType.FLAT
            cost = self._price(merged, self.halls.get(quotation.hall_id))
            values.update({
                "event_date": merged["event_date"],
                "start_time": merged["start_time"],
                "end_time": merged["end_time"],
                "guest_count": merged["guest_count"],
                **self._money_fields(cost),
            })

        try:
            if values:
                updated = self.quotations.transition(quotation.id, {current}, values)
                if not updated:
                    self.db.rollback()
                    self.db.refresh(quotation)
                    raise ConflictError(
                        f"Quotation moved to {quotation.status.value} while updating",
                        {"status": quotation.status.value},
                    )
            if cost is not None:
                self.quotations.replace_line_items(quotation, cost.line_items)
            self.db.commit()
        except Exception:
            self.db.rollback()
            raise
        self.db.refresh(quotation)
        self.cache.invalidate(redis_cache.QUOTATION, quotation.id)
        return quotation

    def _transition(self, quotation_id: int, target: QuotationStatus, **values: Any) -> models.HallQuotation:
        quotation = self.get(quotation_id)
        current = quotation.status
        if quotation.is_accepted or quotation.is_expired:
            raise ConflictError(
                f"Cannot transition quotation from {current.value} to {target.value}",
                {"status": current.value},
            )
        assert_quotation_transition(current, target)
        updated = self.quotations.transition(quotation.id, {current}, {"status": target, **values})
        if not updated:
            self.db.rollback()
            self.db.refresh(quotation)
            raise ConflictError(
                f"Cannot transition quotation from {quotation.status.value} to {target.value}",
                {"status": quotation.status.value},
            )
        self.db.commit()
        self.db.refresh(quotation)
        self.cache.invalidate(redis_cache.QUOTATION, quotation.id)
        logger.info("Quotation %s moved %s -> %s", quotation.id, current.value, target.value)
        return quotation

    def send(self, quotation_id: int) -> models.HallQuotation:
        quotation = self.get(quotation_id)
        if quotation.status != QuotationStatus.DRAFT:
            raise ConflictError("Only draft quotations can be sent", {"status": quotation.status.value})
        return self._transition(quotation_id, QuotationStatus.SENT)

    def reject(self, quotation_id: int) -> models.HallQuotation:
        return self._transition(quotation_id, QuotationStatus.REJECTED)

    def expire(self, quotation_id: int) -> models.HallQuotation:
        return self._transition(quotation_id, QuotationStatus.EXPIRED, is_expired=True)

    def expire_overdue(self, now: Optional[datetime] = None) -> int:
        """Expire every open quotation whose validity has lapsed."""
        now = now or datetime.utcnow()
        expired = []
        for quotation in self.quotations.find_overdue(now):
            if self.quotations.transition(
                quotation.id,
                {quotation.status},
                {"status": QuotationStatus.EXPIRED, "is_expired": True},
            ):
                expired.append(quotation.id)
        self.db.commit()
        if expired:
            self.cache.invalidate(redis_cache.QUOTATION, *expired)
            logger.info("Expired %d overdue quotations", len(expired))
        return len(expired)

    def _existing_booking(self, quotation: models.HallQuotation) -> models.HallBooking:
        booking = self.bookings.get_by_quotation(quotation.id)
        if booking is None:
            raise ConflictError(
                "Quotation is accepted but has no booking", {"quotation_id": "missing_booking"}
            )
        return booking

    def accept(self, quotation_id: int) -> models.HallBooking:
        quotation = self.get(quotation_id)
        if quotation.status == QuotationStatus.ACCEPTED:
            return self._existing_booking(quotation)
        if quotation.is_expired:
            raise ConflictError(
                f"Cannot transition quotation from {quotation.status.value} to accepted",
                {"status": quotation.status.value},
            )
        assert_quotation_transition(quotation.status, QuotationStatus.ACCEPTED)
        now = datetime.utcnow()
        if quotation.valid_until < now:
            raise ConflictError("Quotation validity has lapsed", {"valid_until": "expired"})

        try:
            with self.locks.hold(self.db, quotation.hall_id):
                # a concurrent accept may have committed while we waited
                self.db.refresh(quotation)
                if quotation.status == QuotationStatus.ACCEPTED:
                    return self._existing_booking(quotation)
                if not self.checker.is_available(
                    quotation.hall_id, quotation.event_date, quotation.start_time, quotation.end_time
                ):
                    raise ConflictError("Hall no longer available", {"hall_id": "unavailable"})
                updated = self.quotations.transition(
                    quotation.id,
                    {QuotationStatus.SENT},
                    {"status": QuotationStatus.ACCEPTED, "is_accepted": True, "accepted_at": now},
                )
                if not updated:
                    self.db.rollback()
                    self.db.refresh(quotation)
                    if quotation.status == QuotationStatus.ACCEPTED:
                        return self._existing_booking(quotation)
                    raise ConflictError(
                        f"Cannot transition quotation from {quotation.status.value} to accepted",
                        {"status": quotation.status.value},
                    )
                booking = self.booking_engine.create_from_quotation(quotation)
                self.db.commit()
        except IntegrityError:
            self.db.rollback()
            self.db.refresh(quotation)
            return self._existing_booking(quotation)
        except Exception:
            self.db.rollback()
            raise

        self.db.refresh(quotation)
        self.db.refresh(booking)
        self.cache.invalidate(redis_cache.QUOTATION, quotation.id)
        self.cache.invalidate(redis_cache.BOOKING, booking.id)
        logger.info("Quotation %s accepted as booking %s", quotation.quotation_number, booking.id)
        return booking
