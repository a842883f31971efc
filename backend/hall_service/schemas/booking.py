from pydantic import BaseModel, Field
from typing import Optional, List
from datetime import date, datetime
from decimal import Decimal

from ..models.enums import BookingStatus, DiscountType, EventType, PaymentStatus
from .cost import LineItemIn, LineItemRead


class BookingCreate(BaseModel):
    hall_id: int
    customer_id: int
    event_name: str
    event_type: EventType = EventType.OTHER
    start_date: date
    end_date: Optional[date] = None
    start_time: str
    end_time: str
    guest_count: int
    line_items: List[LineItemIn] = Field(default_factory=list)
    discount: Decimal = Decimal("0")
    discount_type: DiscountType = DiscountType.PERCENTAGE
    special_requests: Optional[str] = None


class BookingUpdate(BaseModel):
    event_name: Optional[str] = None
    event_type: Optional[EventType] = None
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    start_time: Optional[str] = None
    end_time: Optional[str] = None
    guest_count: Optional[int] = None
    line_items: Optional[List[LineItemIn]] = None
    discount: Optional[Decimal] = None
    discount_type: Optional[DiscountType] = None
    special_requests: Optional[str] = None


class BookingCancel(BaseModel):
    reason: str = Field(min_length=1)


class PaymentIn(BaseModel):
    amount: Decimal = Field(gt=0)


class BookingRead(BaseModel):
    id: int
    hall_id: int
    customer_id: int
    quotation_id: Optional[int] = None
    event_name: str
    event_type: EventType
    start_date: date
    end_date: date
    start_time: str
    end_time: str
    duration: Decimal
    guest_count: int
    special_requests: Optional[str] = None
    base_amount: Decimal
    additional_charges: Decimal
    discount: Decimal
    tax_amount: Decimal
    total_amount: Decimal
    deposit_amount: Decimal
    balance_amount: Decimal
    amount_paid: Decimal
    deposit_paid: bool
    currency: str
    status: BookingStatus
    payment_status: PaymentStatus
    is_confirmed: bool
    confirmed_at: Optional[datetime] = None
    checked_in_at: Optional[datetime] = None
    checked_out_at: Optional[datetime] = None
    is_cancelled: bool
    cancelled_at: Optional[datetime] = None
    cancellation_reason: Optional[str] = None
    refund_amount: Optional[Decimal] = None
    line_items: List[LineItemRead] = Field(default_factory=list)
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    model_config = {"from_attributes": True}


class BookingFilter(BaseModel):
    hall_id: Optional[int] = None
    customer_id: Optional[int] = None
    status: Optional[BookingStatus] = None
    payment_status: Optional[PaymentStatus] = None
    date_from: Optional[date] = None
    date_to: Optional[date] = None


class BookingStatistics(BaseModel):
    total: int
    pending: int
    confirmed: int
    checked_in: int
    completed: int
    cancelled: int
    no_show: int
    total_revenue: Decimal
    average_booking_value: Decimal
    confirmation_rate: float
    completion_rate: float
    cancellation_rate: float
