import enum


class EventType(str, enum.Enum):
    WEDDING = "wedding"
    CORPORATE = "corporate"
    BIRTHDAY = "birthday"
    ANNIVERSARY = "anniversary"
    CONFERENCE = "conference"
    SEMINAR = "seminar"
    PARTY = "party"
    MEETING = "meeting"
    OTHER = "other"


class LineItemType(str, enum.Enum):
    HALL_RENTAL = "hall_rental"
    CHAIR = "chair"
    TABLE = "table"
    DECORATION = "decoration"
    LIGHTING = "lighting"
    AV_EQUIPMENT = "av_equipment"
    CATERING = "catering"
    SECURITY = "security"
    GENERATOR = "generator"
    CLEANING = "cleaning"
    PARKING = "parking"
    OTHER = "other"


class LineItemOwner(str, enum.Enum):
    """Which parent a line item belongs to."""

    QUOTATION = "quotation"
    BOOKING = "booking"


class QuotationStatus(str, enum.Enum):
    DRAFT = "draft"
    SENT = "sent"
    ACCEPTED = "accepted"
    REJECTED = "rejected"
    EXPIRED = "expired"


class BookingStatus(str, enum.Enum):
    PENDING = "pending"
    CONFIRMED = "confirmed"
    CHECKED_IN = "checked_in"
    COMPLETED = "completed"
    CANCELLED = "cancelled"
    NO_SHOW = "no_show"


class PaymentStatus(str, enum.Enum):
    PENDING = "pending"
    PROCESSING = "processing"
    COMPLETED = "completed"
    FAILED = "failed"
    REFUNDED = "refunded"
    PARTIALLY_REFUNDED = "partially_refunded"


class DiscountType(str, enum.Enum):
    PERCENTAGE = "percentage"
    FLAT = "flat"
