from fastapi import Depends, Request
from sqlalchemy.orm import Session

from ..database import get_db
from ..services.booking_engine import BookingEngine
from ..services.container import ServiceContainer
from ..services.hall_service import HallService
from ..services.quotation_engine import QuotationEngine


def get_container(request: Request) -> ServiceContainer:
    return request.app.state.container


def get_hall_service(
    db: Session = Depends(get_db),
    container: ServiceContainer = Depends(get_container),
) -> HallService:
    return container.hall_service(db)


def get_booking_engine(
    db: Session = Depends(get_db),
    container: ServiceContainer = Depends(get_container),
) -> BookingEngine:
    return container.booking_engine(db)


def get_quotation_engine(
    db: Session = Depends(get_db),
    container: ServiceContainer = Depends(get_container),
) -> QuotationEngine:
    return container.quotation_engine(db)
