from .common import Page, Pagination
from .cost import (
    CostCalculation,
    CostRequest,
    CostValidation,
    LineItemIn,
    LineItemRead,
    PricedLineItem,
)
from .hall import (
    AvailabilityBlockCreate,
    AvailabilityBlockRead,
    AvailabilityRead,
    HallCreate,
    HallFilter,
    HallRead,
    HallStatistics,
    HallUpdate,
)
from .quotation import (
    QuotationCreate,
    QuotationFilter,
    QuotationRead,
    QuotationStatistics,
    QuotationUpdate,
)
from .booking import (
    BookingCancel,
    BookingCreate,
    BookingFilter,
    BookingRead,
    BookingStatistics,
    BookingUpdate,
    PaymentIn,
)
