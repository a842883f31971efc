"""Event pricing.

Every function here is pure: no I/O, and business-rule problems are reported
by :meth:`CostCalculator.validate_cost_request` rather than raised.
"""

from __future__ import annotations

import math
import secrets
import string
from datetime import date, datetime
from decimal import Decimal, ROUND_HALF_UP
from typing import Any, Dict, List, Optional

from ..models.enums import DiscountType, EventType, LineItemType
from ..schemas.cost import CostCalculation, CostRequest, CostValidation, LineItemIn, PricedLineItem
from .rate_table import RateTable
from .time_windows import is_valid_time, is_weekend, time_to_minutes

_CENT = Decimal("0.01")
_HUNDRED = Decimal("100")
_NUMBER_ALPHABET = string.ascii_uppercase + string.digits

BREAKDOWN_KEYS: Dict[LineItemType, str] = {
    LineItemType.HALL_RENTAL: "hall_rental",
    LineItemType.CHAIR: "chairs",
    LineItemType.TABLE: "tables",
    LineItemType.DECORATION: "decoration",
    LineItemType.LIGHTING: "lighting",
    LineItemType.AV_EQUIPMENT: "av_equipment",
    LineItemType.CATERING: "catering",
    LineItemType.SECURITY: "security",
    LineItemType.GENERATOR: "generator",
    LineItemType.CLEANING: "cleaning",
    LineItemType.PARKING: "parking",
    LineItemType.OTHER: "other",
}

_CONFERENCE_TYPES = {EventType.CORPORATE, EventType.CONFERENCE, EventType.SEMINAR}
_PARTY_TYPES = {EventType.BIRTHDAY, EventType.PARTY}


def money(value: Any) -> Decimal:
    if not isinstance(value, Decimal):
        value = Decimal(str(value))
    return value.quantize(_CENT, rounding=ROUND_HALF_UP)


class CostCalculator:
    def __init__(self, rates: Optional[RateTable] = None):
        self.rates = rates or RateTable()

    # ─── pricing ────────────────────────────────────────────────────────────
    def calculate_cost(self, request: CostRequest) -> CostCalculation:
        if request is None:
            raise TypeError("calculate_cost() requires a request")

        items = list(request.line_items)
        if not items:
            items = self.get_default_line_items(
                request.event_type, request.guest_count, base_rate=request.base_rate
            )
        if not any(i.type == LineItemType.HALL_RENTAL for i in items):
            items.insert(0, self._rental_line(request.base_rate))

        weekend = request.event_date is not None and is_weekend(request.event_date)
        priced: List[PricedLineItem] = []
        breakdown = {key: Decimal("0.00") for key in BREAKDOWN_KEYS.values()}
        base_amount = Decimal("0.00")
        for item in items:
            unit_price = money(item.unit_price)
            if weekend and item.type == LineItemType.HALL_RENTAL:
                unit_price = money(unit_price * self.rates.weekend_rate_factor)
            total = money(Decimal(item.quantity) * unit_price)
            priced.append(
                PricedLineItem(
                    type=item.type,
                    name=item.name,
                    description=item.description,
                    quantity=item.quantity,
                    unit_price=unit_price,
                    total_price=total,
                )
            )
            breakdown[BREAKDOWN_KEYS[item.type]] += total
            if item.type == LineItemType.HALL_RENTAL:
                base_amount += total

        gross = sum((p.total_price for p in priced), Decimal("0.00"))
        discount = self._discount_amount(gross, request.discount, request.discount_type)
        subtotal = money(gross - discount)
        tax_amount = money(subtotal * self.rates.tax_percentage / _HUNDRED)
        return CostCalculation(
            base_amount=money(base_amount),
            gross_amount=money(gross),
            discount=discount,
            subtotal=subtotal,
            tax_amount=tax_amount,
            total_amount=money(subtotal + tax_amount),
            is_weekend=weekend,
            currency=self.rates.currency,
            line_items=priced,
            breakdown=breakdown,
        )

    def _discount_amount(self, gross: Decimal, discount: Decimal, kind: DiscountType) -> Decimal:
        discount = Decimal(discount or 0)
        if discount <= 0:
            return Decimal("0.00")
        if kind == DiscountType.PERCENTAGE:
            amount = gross * min(discount, _HUNDRED) / _HUNDRED
        else:
            amount = discount
        # subtotal never goes negative
        return money(min(amount, gross))

    def _rental_line(self, base_rate: Optional[Decimal]) -> LineItemIn:
        return LineItemIn(
            type=LineItemType.HALL_RENTAL,
            name="Hall Rental",
            description="Base hall rental charge",
            quantity=1,
            unit_price=base_rate if base_rate is not None else self.rates.base_hall_rate,
        )

    def list_price_lines(self, stored_items, event_date: Optional[date]) -> List[LineItemIn]:
        """Turn persisted line items back into pricing input.

        Stored hall-rental prices already carry the weekend factor when the
        event fell on a weekend; that is undone so repricing applies it once.
        """
        weekend = event_date is not None and is_weekend(event_date)
        lines = []
        for item in stored_items:
            unit_price = Decimal(item.unit_price)
            if weekend and item.type == LineItemType.HALL_RENTAL:
                unit_price = money(unit_price / self.rates.weekend_rate_factor)
            lines.append(LineItemIn(
                type=item.type,
                name=item.name,
                description=item.description,
                quantity=item.quantity,
                unit_price=unit_price,
            ))
        return lines

    def get_default_line_items(
        self,
        event_type: Optional[EventType],
        guest_count: int,
        base_rate: Optional[Decimal] = None,
    ) -> List[LineItemIn]:
        """Template line items for an event type, always led by hall rental."""
        r = self.rates
        items = [self._rental_line(base_rate)]
        if guest_count > 0:
            items.append(LineItemIn(
                type=LineItemType.CHAIR, name="Chairs", quantity=guest_count, unit_price=r.chair_rate,
            ))

        if event_type == EventType.WEDDING:
            items += [
                LineItemIn(type=LineItemType.DECORATION, name="Wedding Decoration",
                           unit_price=r.decoration_rate * 2),
                LineItemIn(type=LineItemType.LIGHTING, name="Special Lighting",
                           unit_price=r.lighting_rate * Decimal("1.5")),
                LineItemIn(type=LineItemType.CATERING, name="Catering Service",
                           quantity=max(guest_count, 1),
                           unit_price=r.catering_rate_per_person * Decimal("1.2")),
            ]
        elif event_type in _CONFERENCE_TYPES:
            items += [
                LineItemIn(type=LineItemType.AV_EQUIPMENT, name="AV Equipment", unit_price=r.av_rate),
                LineItemIn(type=LineItemType.TABLE, name="Tables",
                           quantity=max(math.ceil(guest_count / 6), 1), unit_price=r.table_rate),
            ]
        elif event_type in _PARTY_TYPES:
            items += [
                LineItemIn(type=LineItemType.DECORATION, name="Party Decoration",
                           unit_price=r.decoration_rate),
                LineItemIn(type=LineItemType.CATERING, name="Catering Service",
                           quantity=max(guest_count, 1), unit_price=r.catering_rate_per_person),
            ]

        if guest_count > 50:
            items.append(LineItemIn(type=LineItemType.SECURITY, name="Security Service",
                                    unit_price=r.security_rate))
        if guest_count > 100:
            items.append(LineItemIn(type=LineItemType.GENERATOR, name="Backup Generator",
                                    unit_price=r.generator_rate))
        return items

    # ─── derived amounts ────────────────────────────────────────────────────
    def calculate_deposit_amount(self, total: Decimal) -> Decimal:
        return money(Decimal(total) * self.rates.deposit_percentage / _HUNDRED)

    def refund_fraction(self, hours_remaining: float, cancellation_policy_hours: int) -> Decimal:
        if hours_remaining <= 0:
            return Decimal("0")
        if hours_remaining >= self.rates.full_refund_hours:
            return Decimal("1")
        if hours_remaining >= cancellation_policy_hours:
            return Decimal("0.5")
        if hours_remaining >= self.rates.no_refund_hours:
            return Decimal("0.25")
        return Decimal("0")

    def calculate_refund_amount(
        self,
        total: Decimal,
        paid: Decimal,
        cancellation_policy_hours: int,
        event_start: datetime,
        now: Optional[datetime] = None,
    ) -> Decimal:
        """Refund owed on cancellation, as a share of what was actually paid."""
        now = now or datetime.utcnow()
        paid = Decimal(paid or 0)
        if total is not None:
            paid = min(paid, Decimal(total))
        if paid <= 0:
            return Decimal("0.00")
        hours_remaining = (event_start - now).total_seconds() / 3600
        fraction = self.refund_fraction(hours_remaining, cancellation_policy_hours)
        return money(min(paid * fraction, paid))

    @staticmethod
    def generate_quotation_number(today: Optional[date] = None) -> str:
        stamp = (today or datetime.utcnow().date()).strftime("%Y%m%d")
        suffix = "".join(secrets.choice(_NUMBER_ALPHABET) for _ in range(4))
        return f"QUO{stamp}{suffix}"

    # ─── validation pre-pass ────────────────────────────────────────────────
    def validate_cost_request(self, request: CostRequest, today: Optional[date] = None) -> CostValidation:
        errors: Dict[str, str] = {}
        today = today or datetime.utcnow().date()

        if request.event_date is None:
            errors["event_date"] = "Event date is required"
        elif request.event_date < today:
            errors["event_date"] = "Event date cannot be in the past"

        times_ok = True
        for field in ("start_time", "end_time"):
            if not is_valid_time(getattr(request, field)):
                errors[field] = "Time must be in HH:MM format"
                times_ok = False
        if times_ok and time_to_minutes(request.end_time) <= time_to_minutes(request.start_time):
            errors["end_time"] = "End time must be after start time"

        if request.guest_count < 1:
            errors["guest_count"] = "Guest count must be at least 1"

        if not request.line_items and request.event_type is None:
            errors["line_items"] = "At least one line item is required"
        for idx, item in enumerate(request.line_items):
            if item.quantity < 1:
                errors[f"line_items[{idx}].quantity"] = "Quantity must be positive"
            if item.unit_price < 0:
                errors[f"line_items[{idx}].unit_price"] = "Unit price cannot be negative"

        if request.discount < 0:
            errors["discount"] = "Discount cannot be negative"
        elif request.discount_type == DiscountType.PERCENTAGE and request.discount > _HUNDRED:
            errors["discount"] = "Discount percentage must be between 0 and 100"

        return CostValidation(field_errors=errors)
