from pydantic import BaseModel, Field
from typing import Optional, List, Dict
from datetime import date, datetime
from decimal import Decimal

from ..models.enums import DiscountType, EventType, QuotationStatus
from .cost import LineItemIn, LineItemRead


class QuotationCreate(BaseModel):
    hall_id: int
    customer_id: int
    event_name: str
    event_type: EventType = EventType.OTHER
    event_date: date
    start_time: str
    end_time: str
    guest_count: int
    line_items: List[LineItemIn] = Field(default_factory=list)
    discount: Decimal = Decimal("0")
    discount_type: DiscountType = DiscountType.PERCENTAGE
    valid_until: Optional[datetime] = None
    notes: Optional[str] = None


class QuotationUpdate(BaseModel):
    event_name: Optional[str] = None
    event_type: Optional[EventType] = None
    event_date: Optional[date] = None
    start_time: Optional[str] = None
    end_time: Optional[str] = None
    guest_count: Optional[int] = None
    line_items: Optional[List[LineItemIn]] = None
    discount: Optional[Decimal] = None
    discount_type: Optional[DiscountType] = None
    valid_until: Optional[datetime] = None
    notes: Optional[str] = None


class QuotationRead(BaseModel):
    id: int
    quotation_number: str
    hall_id: int
    customer_id: int
    event_name: str
    event_type: EventType
    event_date: date
    start_time: str
    end_time: str
    guest_count: int
    base_amount: Decimal
    subtotal: Decimal
    discount_amount: Decimal
    tax_amount: Decimal
    total_amount: Decimal
    currency: str
    valid_until: datetime
    status: QuotationStatus
    is_accepted: bool
    is_expired: bool
    accepted_at: Optional[datetime] = None
    notes: Optional[str] = None
    line_items: List[LineItemRead] = Field(default_factory=list)
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    model_config = {"from_attributes": True}


class QuotationFilter(BaseModel):
    hall_id: Optional[int] = None
    customer_id: Optional[int] = None
    status: Optional[QuotationStatus] = None
    event_type: Optional[EventType] = None
    date_from: Optional[date] = None
    date_to: Optional[date] = None


class QuotationStatistics(BaseModel):
    total: int
    by_status: Dict[str, int]
    accepted_value: Decimal
    average_accepted_value: Decimal
    acceptance_rate: float
    rejection_rate: float
    expiration_rate: float
