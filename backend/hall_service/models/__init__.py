from .base import BaseModel
from .enums import (
    BookingStatus,
    DiscountType,
    EventType,
    LineItemOwner,
    LineItemType,
    PaymentStatus,
    QuotationStatus,
)
from .hall import Hall, HallAvailabilityBlock
from .quotation import HallQuotation
from .booking import HallBooking
from .line_item import LineItem

__all__ = [
    "BaseModel",
    "BookingStatus",
    "DiscountType",
    "EventType",
    "LineItemOwner",
    "LineItemType",
    "PaymentStatus",
    "QuotationStatus",
    "Hall",
    "HallAvailabilityBlock",
    "HallQuotation",
    "HallBooking",
    "LineItem",
]
