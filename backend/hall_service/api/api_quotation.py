from fastapi import APIRouter, Depends, Query, status

from .. import schemas
from ..services.quotation_engine import QuotationEngine
from .dependencies import get_quotation_engine

router = APIRouter()


@router.post("/calculate", response_model=schemas.CostCalculation)
def calculate_cost(request: schemas.CostRequest, engine: QuotationEngine = Depends(get_quotation_engine)):
    return engine.calculate_cost(request)


@router.post("/", response_model=schemas.QuotationRead, status_code=status.HTTP_201_CREATED)
def create_quotation(
    quotation_in: schemas.QuotationCreate,
    engine: QuotationEngine = Depends(get_quotation_engine),
):
    return engine.create(quotation_in)


@router.get("/", response_model=schemas.Page[schemas.QuotationRead])
def list_quotations(
    filters: schemas.QuotationFilter = Depends(),
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1, le=100),
    engine: QuotationEngine = Depends(get_quotation_engine),
):
    return engine.list(filters, schemas.Pagination(page=page, limit=limit))


@router.get("/statistics", response_model=schemas.QuotationStatistics)
def quotation_statistics(
    filters: schemas.QuotationFilter = Depends(),
    engine: QuotationEngine = Depends(get_quotation_engine),
):
    return engine.statistics(filters)


@router.get("/number/{quotation_number}", response_model=schemas.QuotationRead)
def read_quotation_by_number(quotation_number: str, engine: QuotationEngine = Depends(get_quotation_engine)):
    return engine.get_by_number(quotation_number)


@router.get("/{quotation_id}", response_model=schemas.QuotationRead)
def read_quotation(quotation_id: int, engine: QuotationEngine = Depends(get_quotation_engine)):
    return engine.get_read(quotation_id)


@router.patch("/{quotation_id}", response_model=schemas.QuotationRead)
def update_quotation(
    quotation_id: int,
    patch: schemas.QuotationUpdate,
    engine: QuotationEngine = Depends(get_quotation_engine),
):
    return engine.update(quotation_id, patch)


@router.post("/{quotation_id}/send", response_model=schemas.QuotationRead)
def send_quotation(quotation_id: int, engine: QuotationEngine = Depends(get_quotation_engine)):
    return engine.send(quotation_id)


@router.post("/{quotation_id}/accept", response_model=schemas.BookingRead)
def accept_quotation(quotation_id: int, engine: QuotationEngine = Depends(get_quotation_engine)):
    return engine.accept(quotation_id)


@router.post("/{quotation_id}/reject", response_model=schemas.QuotationRead)
def reject_quotation(quotation_id: int, engine: QuotationEngine = Depends(get_quotation_engine)):
    return engine.reject(quotation_id)


@router.post("/{quotation_id}/expire", response_model=schemas.QuotationRead)
def expire_quotation(quotation_id: int, engine: QuotationEngine = Depends(get_quotation_engine)):
    return engine.expire(quotation_id)
