from fastapi import APIRouter, Depends, Query, status

from .. import schemas
from ..services.booking_engine import BookingEngine
from .dependencies import get_booking_engine

router = APIRouter()


@router.post("/", response_model=schemas.BookingRead, status_code=status.HTTP_201_CREATED)
def create_booking(booking_in: schemas.BookingCreate, engine: BookingEngine = Depends(get_booking_engine)):
    return engine.create(booking_in)


@router.get("/", response_model=schemas.Page[schemas.BookingRead])
def list_bookings(
    filters: schemas.BookingFilter = Depends(),
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1, le=100),
    engine: BookingEngine = Depends(get_booking_engine),
):
    return engine.list(filters, schemas.Pagination(page=page, limit=limit))


@router.get("/statistics", response_model=schemas.BookingStatistics)
def booking_statistics(
    filters: schemas.BookingFilter = Depends(),
    engine: BookingEngine = Depends(get_booking_engine),
):
    return engine.statistics(filters)


@router.get("/{booking_id}", response_model=schemas.BookingRead)
def read_booking(booking_id: int, engine: BookingEngine = Depends(get_booking_engine)):
    return engine.get_read(booking_id)


@router.patch("/{booking_id}", response_model=schemas.BookingRead)
def update_booking(
    booking_id: int,
    patch: schemas.BookingUpdate,
    engine: BookingEngine = Depends(get_booking_engine),
):
    return engine.update(booking_id, patch)


@router.post("/{booking_id}/confirm", response_model=schemas.BookingRead)
def confirm_booking(booking_id: int, engine: BookingEngine = Depends(get_booking_engine)):
    return engine.confirm(booking_id)


@router.post("/{booking_id}/check-in", response_model=schemas.BookingRead)
def check_in_booking(booking_id: int, engine: BookingEngine = Depends(get_booking_engine)):
    return engine.check_in(booking_id)


@router.post("/{booking_id}/check-out", response_model=schemas.BookingRead)
def check_out_booking(booking_id: int, engine: BookingEngine = Depends(get_booking_engine)):
    return engine.check_out(booking_id)


@router.post("/{booking_id}/cancel", response_model=schemas.BookingRead)
def cancel_booking(
    booking_id: int,
    body: schemas.BookingCancel,
    engine: BookingEngine = Depends(get_booking_engine),
):
    return engine.cancel(booking_id, body.reason)


@router.post("/{booking_id}/no-show", response_model=schemas.BookingRead)
def mark_no_show(booking_id: int, engine: BookingEngine = Depends(get_booking_engine)):
    return engine.mark_no_show(booking_id)


@router.post("/{booking_id}/payments", response_model=schemas.BookingRead)
def record_payment(
    booking_id: int,
    payment: schemas.PaymentIn,
    engine: BookingEngine = Depends(get_booking_engine),
):
    return engine.record_payment(booking_id, payment.amount)
