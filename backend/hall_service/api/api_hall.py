from datetime import date
from typing import List, Optional

from fastapi import APIRouter, Depends, Query, Response, status

from .. import schemas
from ..services.hall_service import HallService
from .dependencies import get_hall_service

router = APIRouter()


@router.post("/", response_model=schemas.HallRead, status_code=status.HTTP_201_CREATED)
def create_hall(hall_in: schemas.HallCreate, service: HallService = Depends(get_hall_service)):
    return service.create(hall_in)


@router.get("/", response_model=schemas.Page[schemas.HallRead])
def list_halls(
    filters: schemas.HallFilter = Depends(),
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1, le=100),
    service: HallService = Depends(get_hall_service),
):
    return service.list(filters, schemas.Pagination(page=page, limit=limit))


@router.get("/search", response_model=List[schemas.HallRead])
def search_halls(
    q: str = Query(..., min_length=1),
    limit: int = Query(20, ge=1, le=100),
    service: HallService = Depends(get_hall_service),
):
    return service.search(q, limit=limit)


@router.get("/{hall_id}", response_model=schemas.HallRead)
def read_hall(hall_id: int, service: HallService = Depends(get_hall_service)):
    return service.get_read(hall_id)


@router.patch("/{hall_id}", response_model=schemas.HallRead)
def update_hall(
    hall_id: int,
    hall_in: schemas.HallUpdate,
    service: HallService = Depends(get_hall_service),
):
    return service.update(hall_id, hall_in)


@router.delete("/{hall_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_hall(hall_id: int, service: HallService = Depends(get_hall_service)):
    service.delete(hall_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.get("/{hall_id}/statistics", response_model=schemas.HallStatistics)
def hall_statistics(hall_id: int, service: HallService = Depends(get_hall_service)):
    return service.statistics(hall_id)


@router.get("/{hall_id}/availability", response_model=schemas.AvailabilityRead)
def check_availability(
    hall_id: int,
    on_date: date = Query(..., alias="date"),
    start_time: str = Query(...),
    end_time: str = Query(...),
    service: HallService = Depends(get_hall_service),
):
    available = service.check_availability(hall_id, on_date, start_time, end_time)
    return schemas.AvailabilityRead(
        hall_id=hall_id,
        date=on_date,
        start_time=start_time,
        end_time=end_time,
        available=available,
    )


@router.get("/{hall_id}/blocks", response_model=List[schemas.AvailabilityBlockRead])
def list_blocks(
    hall_id: int,
    on_date: Optional[date] = Query(None, alias="date"),
    service: HallService = Depends(get_hall_service),
):
    return service.list_blocks(hall_id, on_date)


@router.post(
    "/{hall_id}/blocks",
    response_model=schemas.AvailabilityBlockRead,
    status_code=status.HTTP_201_CREATED,
)
def add_block(
    hall_id: int,
    block_in: schemas.AvailabilityBlockCreate,
    service: HallService = Depends(get_hall_service),
):
    return service.add_block(hall_id, block_in)


@router.delete("/{hall_id}/blocks/{block_id}", status_code=status.HTTP_204_NO_CONTENT)
def remove_block(hall_id: int, block_id: int, service: HallService = Depends(get_hall_service)):
    service.remove_block(hall_id, block_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
