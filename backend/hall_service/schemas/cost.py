from pydantic import BaseModel, Field
from typing import Optional, List, Dict
from datetime import date
from decimal import Decimal

from ..models.enums import DiscountType, EventType, LineItemType


class LineItemIn(BaseModel):
    type: LineItemType
    name: str
    description: Optional[str] = None
    quantity: int = 1
    unit_price: Decimal


class PricedLineItem(LineItemIn):
    total_price: Decimal


class LineItemRead(PricedLineItem):
    id: int

    model_config = {"from_attributes": True}


class CostRequest(BaseModel):
    """Inputs for pricing an event. Range checks happen in the validation pre-pass."""

    event_date: Optional[date] = None
    start_time: str
    end_time: str
    guest_count: int
    event_type: Optional[EventType] = None
    line_items: List[LineItemIn] = Field(default_factory=list)
    discount: Decimal = Decimal("0")
    discount_type: DiscountType = DiscountType.PERCENTAGE
    base_rate: Optional[Decimal] = None


class CostCalculation(BaseModel):
    base_amount: Decimal
    gross_amount: Decimal
    discount: Decimal
    subtotal: Decimal
    tax_amount: Decimal
    total_amount: Decimal
    is_weekend: bool
    currency: str
    line_items: List[PricedLineItem]
    breakdown: Dict[str, Decimal]


class CostValidation(BaseModel):
    field_errors: Dict[str, str] = Field(default_factory=dict)

    @property
    def is_valid(self) -> bool:
        return not self.field_errors

    @property
    def errors(self) -> List[str]:
        return list(self.field_errors.values())
