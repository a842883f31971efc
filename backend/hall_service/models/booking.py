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
    Index,
    CheckConstraint,
)
from sqlalchemy.orm import relationship

from .base import BaseModel
from .types import CaseInsensitiveEnum
from .enums import EventType, BookingStatus, PaymentStatus


class HallBooking(BaseModel):
    __tablename__ = "hall_bookings"

    id = Column(Integer, primary_key=True, index=True)
    hall_id = Column(Integer, ForeignKey("halls.id"), nullable=False)
    customer_id = Column(Integer, nullable=False, index=True)
    # A quotation converts into at most one booking.
    quotation_id = Column(
        Integer,
        ForeignKey("hall_quotations.id"),
        nullable=True,
        unique=True,
    )

    event_name = Column(String(255), nullable=False)
    event_type = Column(CaseInsensitiveEnum(EventType), nullable=False, default=EventType.OTHER)
    start_date = Column(Date, nullable=False)
    end_date = Column(Date, nullable=False)
    start_time = Column(String(5), nullable=False)
    end_time = Column(String(5), nullable=False)
    duration = Column(Numeric(8, 2), nullable=False)  # hours
    guest_count = Column(Integer, nullable=False)
    special_requests = Column(Text, nullable=True)

    base_amount = Column(Numeric(12, 2), nullable=False, default=0)
    additional_charges = Column(Numeric(12, 2), nullable=False, default=0)
    discount = Column(Numeric(12, 2), nullable=False, default=0)
    tax_amount = Column(Numeric(12, 2), nullable=False, default=0)
    total_amount = Column(Numeric(12, 2), nullable=False, default=0)
    deposit_amount = Column(Numeric(12, 2), nullable=False, default=0)
    balance_amount = Column(Numeric(12, 2), nullable=False, default=0)
    amount_paid = Column(Numeric(12, 2), nullable=False, default=0)
    deposit_paid = Column(Boolean, nullable=False, default=False)
    currency = Column(String(3), nullable=False, default="INR")

    status = Column(
        CaseInsensitiveEnum(BookingStatus),
        nullable=False,
        default=BookingStatus.PENDING,
        index=True,
    )
    payment_status = Column(
        CaseInsensitiveEnum(PaymentStatus),
        nullable=False,
        default=PaymentStatus.PENDING,
    )
    is_confirmed = Column(Boolean, nullable=False, default=False)
    confirmed_at = Column(DateTime, nullable=True)
    checked_in_at = Column(DateTime, nullable=True)
    checked_out_at = Column(DateTime, nullable=True)
    is_cancelled = Column(Boolean, nullable=False, default=False)
    cancelled_at = Column(DateTime, nullable=True)
    cancellation_reason = Column(Text, nullable=True)
    refund_amount = Column(Numeric(12, 2), nullable=True)

    hall = relationship("Hall", back_populates="bookings")
    quotation = relationship("HallQuotation", back_populates="booking")
    line_items = relationship(
        "LineItem",
        back_populates="booking",
        cascade="all, delete-orphan",
        order_by="LineItem.id",
    )

    __table_args__ = (
        Index("ix_hall_bookings_hall_dates", "hall_id", "start_date", "end_date"),
        CheckConstraint("end_date >= start_date", name="ck_hall_bookings_date_span"),
        CheckConstraint("end_time > start_time", name="ck_hall_bookings_time_window"),
    )
