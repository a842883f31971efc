from sqlalchemy import (
    Column,
    Integer,
    String,
    Text,
    Boolean,
    Date,
    DateTime,
    ForeignKey,
    Numeric,
)
from sqlalchemy.orm import relationship

from .base import BaseModel
from .types import CaseInsensitiveEnum
from .enums import EventType, QuotationStatus


class HallQuotation(BaseModel):
    __tablename__ = "hall_quotations"

    id = Column(Integer, primary_key=True, index=True)
    quotation_number = Column(String(16), nullable=False, unique=True, index=True)
    hall_id = Column(Integer, ForeignKey("halls.id"), nullable=False, index=True)
    customer_id = Column(Integer, nullable=False, index=True)

    event_name = Column(String(255), nullable=False)
    event_type = Column(CaseInsensitiveEnum(EventType), nullable=False, default=EventType.OTHER)
    event_date = Column(Date, nullable=False)
    start_time = Column(String(5), nullable=False)
    end_time = Column(String(5), nullable=False)
    guest_count = Column(Integer, nullable=False)

    base_amount = Column(Numeric(12, 2), nullable=False, default=0)
    subtotal = Column(Numeric(12, 2), nullable=False, default=0)
    discount_amount = Column(Numeric(12, 2), nullable=False, default=0)
    tax_amount = Column(Numeric(12, 2), nullable=False, default=0)
    total_amount = Column(Numeric(12, 2), nullable=False, default=0)
    currency = Column(String(3), nullable=False, default="INR")

    valid_until = Column(DateTime, nullable=False)
    status = Column(
        CaseInsensitiveEnum(QuotationStatus),
        nullable=False,
        default=QuotationStatus.DRAFT,
        index=True,
    )
    is_accepted = Column(Boolean, nullable=False, default=False)
    is_expired = Column(Boolean, nullable=False, default=False)
    accepted_at = Column(DateTime, nullable=True)
    notes = Column(Text, nullable=True)

    hall = relationship("Hall", back_populates="quotations")
    line_items = relationship(
        "LineItem",
        back_populates="quotation",
        cascade="all, delete-orphan",
        order_by="LineItem.id",
    )
    booking = relationship("HallBooking", back_populates="quotation", uselist=False)
