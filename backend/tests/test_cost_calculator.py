import re
from datetime import date, datetime, timedelta
from decimal import Decimal

import pytest

from hall_service.models.enums import DiscountType, EventType, LineItemType
from hall_service.schemas import CostRequest, LineItemIn
from hall_service.services.cost_calculator import CostCalculator
from hall_service.services.rate_table import RateTable

TUESDAY = date(2030, 1, 1)
SATURDAY = date(2030, 1, 5)


def _request(**overrides):
    data = dict(
        event_date=TUESDAY,
        start_time="10:00",
        end_time="18:00",
        guest_count=50,
        line_items=[
            LineItemIn(type=LineItemType.HALL_RENTAL, name="Hall Rental", unit_price=Decimal("5000")),
        ],
    )
    data.update(overrides)
    return CostRequest(**data)


def test_weekday_rental_only():
    result = CostCalculator().calculate_cost(_request())
    assert result.base_amount == Decimal("5000.00")
    assert result.subtotal == Decimal("5000.00")
    assert result.tax_amount == Decimal("900.00")
    assert result.total_amount == Decimal("5900.00")
    assert result.is_weekend is False
    assert result.breakdown["hall_rental"] == Decimal("5000.00")


def test_weekend_factor_applies_to_hall_rental_only():
    chairs = LineItemIn(type=LineItemType.CHAIR, name="Chairs", quantity=10, unit_price=Decimal("50"))
    rental = LineItemIn(type=LineItemType.HALL_RENTAL, name="Hall Rental", unit_price=Decimal("5000"))
    result = CostCalculator().calculate_cost(_request(event_date=SATURDAY, line_items=[rental, chairs]))
    assert result.is_weekend is True
    assert result.base_amount == Decimal("7500.00")
    assert result.breakdown["chairs"] == Decimal("500.00")
    assert result.subtotal == Decimal("8000.00")
    assert result.total_amount == Decimal("9440.00")


def test_percentage_discount():
    chairs = LineItemIn(type=LineItemType.CHAIR, name="Chairs", quantity=50, unit_price=Decimal("50"))
    rental = LineItemIn(type=LineItemType.HALL_RENTAL, name="Hall Rental", unit_price=Decimal("5000"))
    result = CostCalculator().calculate_cost(
        _request(line_items=[rental, chairs], discount=Decimal("10"))
    )
    assert result.gross_amount == Decimal("7500.00")
    assert result.discount == Decimal("750.00")
    assert result.subtotal == Decimal("6750.00")
    assert result.tax_amount == Decimal("1215.00")
    assert result.total_amount == Decimal("7965.00")


def test_flat_discount_is_capped_at_gross():
    result = CostCalculator().calculate_cost(
        _request(discount=Decimal("10000"), discount_type=DiscountType.FLAT)
    )
    assert result.discount == Decimal("5000.00")
    assert result.subtotal == Decimal("0.00")
    assert result.total_amount == Decimal("0.00")


def test_missing_rental_line_is_inserted():
    chairs = LineItemIn(type=LineItemType.CHAIR, name="Chairs", quantity=2, unit_price=Decimal("50"))
    result = CostCalculator().calculate_cost(_request(line_items=[chairs], base_rate=Decimal("3000")))
    assert result.line_items[0].type == LineItemType.HALL_RENTAL
    assert result.base_amount == Decimal("3000.00")
    assert result.subtotal == Decimal("3100.00")


def test_empty_line_items_use_event_template():
    result = CostCalculator().calculate_cost(
        _request(line_items=[], event_type=EventType.CONFERENCE, guest_count=13)
    )
    types = [item.type for item in result.line_items]
    assert types == [
        LineItemType.HALL_RENTAL,
        LineItemType.CHAIR,
        LineItemType.AV_EQUIPMENT,
        LineItemType.TABLE,
    ]
    tables = result.line_items[-1]
    assert tables.quantity == 3


def test_wedding_template_for_large_party():
    items = CostCalculator().get_default_line_items(EventType.WEDDING, 120)
    by_type = {item.type: item for item in items}
    assert by_type[LineItemType.DECORATION].unit_price == Decimal("4000")
    assert by_type[LineItemType.CATERING].quantity == 120
    assert by_type[LineItemType.CATERING].unit_price == Decimal("360.0")
    assert LineItemType.SECURITY in by_type
    assert LineItemType.GENERATOR in by_type


def test_calculate_cost_requires_request():
    with pytest.raises(TypeError):
        CostCalculator().calculate_cost(None)


def test_custom_rate_table():
    calc = CostCalculator(RateTable(tax_percentage=Decimal("10"), deposit_percentage=Decimal("50")))
    result = calc.calculate_cost(_request())
    assert result.total_amount == Decimal("5500.00")
    assert calc.calculate_deposit_amount(result.total_amount) == Decimal("2750.00")


def test_deposit_amount():
    assert CostCalculator().calculate_deposit_amount(Decimal("5900")) == Decimal("1180.00")


def test_refund_thirty_hours_before_is_half():
    now = datetime(2030, 1, 1, 0, 0)
    refund = CostCalculator().calculate_refund_amount(
        Decimal("20000"), Decimal("10000"), 24, now + timedelta(hours=30), now=now
    )
    assert refund == Decimal("5000.00")


@pytest.mark.parametrize(
    "hours, expected",
    [
        (100, Decimal("10000.00")),
        (72, Decimal("10000.00")),
        (24, Decimal("5000.00")),
        (20, Decimal("2500.00")),
        (12, Decimal("2500.00")),
        (5, Decimal("0.00")),
        (-1, Decimal("0.00")),
    ],
)
def test_refund_tiers(hours, expected):
    now = datetime(2030, 1, 1, 0, 0)
    refund = CostCalculator().calculate_refund_amount(
        Decimal("20000"), Decimal("10000"), 24, now + timedelta(hours=hours), now=now
    )
    assert refund == expected


def test_refund_never_exceeds_total():
    now = datetime(2030, 1, 1, 0, 0)
    refund = CostCalculator().calculate_refund_amount(
        Decimal("1000"), Decimal("5000"), 24, now + timedelta(days=10), now=now
    )
    assert refund == Decimal("1000.00")


def test_refund_nothing_paid():
    now = datetime(2030, 1, 1, 0, 0)
    assert CostCalculator().calculate_refund_amount(
        Decimal("1000"), Decimal("0"), 24, now + timedelta(days=10), now=now
    ) == Decimal("0.00")


def test_quotation_number_format():
    number = CostCalculator.generate_quotation_number(date(2030, 1, 1))
    assert re.fullmatch(r"QUO20300101[A-Z0-9]{4}", number)


def test_validation_collects_every_field_error():
    request = _request(
        event_date=date(2029, 12, 31),
        start_time="25:00",
        guest_count=0,
        discount=Decimal("150"),
        line_items=[
            LineItemIn(type=LineItemType.CHAIR, name="Chairs", quantity=0, unit_price=Decimal("-1")),
        ],
    )
    result = CostCalculator().validate_cost_request(request, today=TUESDAY)
    assert not result.is_valid
    assert set(result.field_errors) == {
        "event_date",
        "start_time",
        "guest_count",
        "discount",
        "line_items[0].quantity",
        "line_items[0].unit_price",
    }


def test_validation_end_before_start():
    result = CostCalculator().validate_cost_request(
        _request(start_time="18:00", end_time="10:00"), today=TUESDAY
    )
    assert result.field_errors == {"end_time": "End time must be after start time"}


def test_validation_needs_items_or_event_type():
    result = CostCalculator().validate_cost_request(_request(line_items=[]), today=TUESDAY)
    assert "line_items" in result.field_errors
    result = CostCalculator().validate_cost_request(
        _request(line_items=[], event_type=EventType.PARTY), today=TUESDAY
    )
    assert result.is_valid


def test_list_price_lines_undoes_weekend_factor():
    calc = CostCalculator()
    priced = calc.calculate_cost(_request(event_date=SATURDAY))
    lines = calc.list_price_lines(priced.line_items, SATURDAY)
    assert lines[0].unit_price == Decimal("5000.00")
    again = calc.calculate_cost(_request(event_date=SATURDAY, line_items=lines))
    assert again.total_amount == priced.total_amount
