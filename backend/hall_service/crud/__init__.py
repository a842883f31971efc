from .crud_hall import HallRepository
from .crud_booking import BookingRepository
from .crud_quotation import QuotationRepository
from .crud_availability import AvailabilityBlockRepository

__all__ = [
    "HallRepository",
    "BookingRepository",
    "QuotationRepository",
    "AvailabilityBlockRepository",
]
