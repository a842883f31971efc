from decimal import Decimal, ROUND_HALF_UP

from sqlalchemy import (
    Column,
    Integer,
    String,
    Text,
    ForeignKey,
    Numeric,
    CheckConstraint,
)
from sqlalchemy.orm import relationship

from .base import BaseModel
from .types import CaseInsensitiveEnum
from .enums import LineItemOwner, LineItemType

_CENT = Decimal("0.01")


class LineItem(BaseModel):
    """A priced component owned by exactly one quotation or one booking.

    ``owner_kind`` tags which foreign key is populated; the table constraint
    rejects rows that point at neither or both. Build instances through
    :meth:`for_quotation` or :meth:`for_booking`, which append to the owner's
    collection so the item joins the owner's session.
    """

    __tablename__ = "line_items"

    id = Column(Integer, primary_key=True, index=True)
    owner_kind = Column(CaseInsensitiveEnum(LineItemOwner), nullable=False)
    quotation_id = Column(
        Integer,
        ForeignKey("hall_quotations.id", ondelete="CASCADE"),
        nullable=True,
        index=True,
    )
    booking_id = Column(
        Integer,
        ForeignKey("hall_bookings.id", ondelete="CASCADE"),
        nullable=True,
        index=True,
    )
    type = Column(CaseInsensitiveEnum(LineItemType), nullable=False)
    name = Column(String(255), nullable=False)
    description = Column(Text, nullable=True)
    quantity = Column(Integer, nullable=False, default=1)
    unit_price = Column(Numeric(12, 2), nullable=False)
    total_price = Column(Numeric(12, 2), nullable=False)

    quotation = relationship("HallQuotation", back_populates="line_items")
    booking = relationship("HallBooking", back_populates="line_items")

    __table_args__ = (
        CheckConstraint(
            "(owner_kind = 'quotation' AND quotation_id IS NOT NULL AND booking_id IS NULL)"
            " OR (owner_kind = 'booking' AND booking_id IS NOT NULL AND quotation_id IS NULL)",
            name="ck_line_items_single_owner",
        ),
        CheckConstraint("quantity > 0", name="ck_line_items_quantity_positive"),
    )

    @classmethod
    def _build(cls, owner_kind, *, type, name, quantity, unit_price, description=None, total_price=None):
        unit = Decimal(str(unit_price)).quantize(_CENT, rounding=ROUND_HALF_UP)
        if total_price is None:
            total_price = Decimal(quantity) * unit
        total = Decimal(str(total_price)).quantize(_CENT, rounding=ROUND_HALF_UP)
        return cls(
            owner_kind=owner_kind,
            type=type,
            name=name,
            description=description,
            quantity=quantity,
            unit_price=unit,
            total_price=total,
        )

    @classmethod
    def for_quotation(cls, quotation, **fields) -> "LineItem":
        item = cls._build(LineItemOwner.QUOTATION, **fields)
        if quotation is not None:
            quotation.line_items.append(item)
        return item

    @classmethod
    def for_booking(cls, booking, **fields) -> "LineItem":
        item = cls._build(LineItemOwner.BOOKING, **fields)
        if booking is not None:
            booking.line_items.append(item)
        return item

    @property
    def owner(self):
        if self.owner_kind == LineItemOwner.QUOTATION:
            return self.quotation
        return self.booking
