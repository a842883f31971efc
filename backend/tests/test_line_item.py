from decimal import Decimal

import pytest
from sqlalchemy.exc import IntegrityError

from hall_service import models
from hall_service.models.enums import LineItemOwner, LineItemType

from conftest import booking_request, quotation_request


def test_total_price_is_quantity_times_unit():
    item = models.LineItem.for_quotation(
        None, type=LineItemType.CHAIR, name="Chairs", quantity=3, unit_price="50.005"
    )
    assert item.unit_price == Decimal("50.01")
    assert item.total_price == Decimal("150.03")
    assert item.owner_kind == LineItemOwner.QUOTATION


def test_owner_resolves_to_quotation(quotation_engine, hall):
    quotation = quotation_engine.create(quotation_request(hall.id))
    item = quotation.line_items[0]
    assert item.owner is quotation


def test_line_item_without_owner_is_rejected(db):
    db.add(models.LineItem(
        owner_kind=LineItemOwner.BOOKING,
        type=LineItemType.OTHER,
        name="Orphan",
        quantity=1,
        unit_price=Decimal("1"),
        total_price=Decimal("1"),
    ))
    with pytest.raises(IntegrityError):
        db.flush()
    db.rollback()


def test_line_item_with_both_owners_is_rejected(db, quotation_engine, booking_engine, hall):
    quotation = quotation_engine.create(quotation_request(hall.id))
    booking = booking_engine.create(booking_request(hall.id))
    db.add(models.LineItem(
        owner_kind=LineItemOwner.QUOTATION,
        quotation_id=quotation.id,
        booking_id=booking.id,
        type=LineItemType.OTHER,
        name="Shared",
        quantity=1,
        unit_price=Decimal("1"),
        total_price=Decimal("1"),
    ))
    with pytest.raises(IntegrityError):
        db.flush()
    db.rollback()
