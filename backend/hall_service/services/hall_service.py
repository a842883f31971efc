import logging
from datetime import date
from decimal import Decimal
from typing import List, Optional

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from .. import models, schemas
from ..crud import AvailabilityBlockRepository, BookingRepository, HallRepository, QuotationRepository
from ..models.enums import BookingStatus, QuotationStatus
from ..utils import redis_cache
from ..utils.errors import ConflictError, NotFoundError, ValidationError
from .availability import AvailabilityChecker
from .cost_calculator import money
from .time_windows import window

logger = logging.getLogger(__name__)


class HallService:
    """Hall inventory and admin availability blocks."""

    def __init__(
        self,
        db: Session,
        halls: HallRepository,
        blocks: AvailabilityBlockRepository,
        bookings: BookingRepository,
        quotations: QuotationRepository,
        checker: AvailabilityChecker,
        cache: redis_cache.CacheFacade,
    ):
        self.db = db
        self.halls = halls
        self.blocks = blocks
        self.bookings = bookings
        self.quotations = quotations
        self.checker = checker
        self.cache = cache

    def _commit(self) -> None:
        try:
            self.db.commit()
        except IntegrityError as exc:
            self.db.rollback()
            raise ConflictError("Hall data conflicts with an existing record", {"hall": "integrity"}) from exc
        except Exception:
            self.db.rollback()
            raise

    def get(self, hall_id: int) -> models.Hall:
        hall = self.halls.get(hall_id)
        if hall is None:
            raise NotFoundError(f"Hall {hall_id} not found", {"hall_id": "not_found"})
        return hall

    def get_read(self, hall_id: int) -> schemas.HallRead:
        payload = self.cache.read_through(
            redis_cache.HALL,
            hall_id,
            lambda: schemas.HallRead.model_validate(self.get(hall_id)).model_dump(mode="json"),
        )
        return schemas.HallRead.model_validate(payload)

    def list(
        self,
        filters: Optional[schemas.HallFilter] = None,
        pagination: Optional[schemas.Pagination] = None,
    ) -> schemas.Page[schemas.HallRead]:
        filters = filters or schemas.HallFilter()
        pagination = pagination or schemas.Pagination()
        params = {**filters.model_dump(mode="json"), **pagination.model_dump()}

        def load():
            items, total = self.halls.list(filters, pagination)
            return schemas.Page[schemas.HallRead](
                items=[schemas.HallRead.model_validate(h) for h in items],
                total=total,
                page=pagination.page,
                limit=pagination.limit,
            ).model_dump(mode="json")

        payload = self.cache.list_through(redis_cache.HALL, params, load)
        return schemas.Page[schemas.HallRead].model_validate(payload)

    def search(self, term: str, limit: int = 20) -> List[models.Hall]:
        if not term or not term.strip():
            raise ValidationError("Search term is required", {"q": "required"})
        return self.halls.search(term, limit=limit)

    def create(self, hall_in: schemas.HallCreate) -> models.Hall:
        if self.halls.find_by_name(hall_in.name):
            raise ConflictError(f"Hall named '{hall_in.name}' already exists", {"name": "duplicate"})
        hall = self.halls.create(hall_in.model_dump())
        self._commit()
        self.db.refresh(hall)
        self.cache.invalidate(redis_cache.HALL, hall.id)
        logger.info("Created hall %s (%s)", hall.id, hall.name)
        return hall

    def update(self, hall_id: int, hall_in: schemas.HallUpdate) -> models.Hall:
        hall = self.get(hall_id)
        data = hall_in.model_dump(exclude_unset=True)
        if data.get("name") and data["name"].strip().lower() != hall.name.lower():
            if self.halls.find_by_name(data["name"]):
                raise ConflictError(f"Hall named '{data['name']}' already exists", {"name": "duplicate"})
        self.halls.update(hall, data)
        self._commit()
        self.db.refresh(hall)
        self.cache.invalidate(redis_cache.HALL, hall.id)
        return hall

    def delete(self, hall_id: int) -> bool:
        hall = self.get(hall_id)
        try:
            removed = self.halls.delete(hall)
            self.db.commit()
        except Exception:
            self.db.rollback()
            raise
        self.cache.invalidate(redis_cache.HALL, hall_id)
        logger.info("%s hall %s", "Deleted" if removed else "Deactivated", hall_id)
        return removed

    def statistics(self, hall_id: int) -> schemas.HallStatistics:
        self.get(hall_id)
        booking_counts = self.bookings.count_by_status(schemas.BookingFilter(hall_id=hall_id))
        quotation_counts = self.quotations.count_by_status(schemas.QuotationFilter(hall_id=hall_id))
        revenue, completed = self.bookings.aggregate_revenue(schemas.BookingFilter(hall_id=hall_id))
        return schemas.HallStatistics(
            hall_id=hall_id,
            total_bookings=sum(booking_counts.values()),
            confirmed_bookings=booking_counts[BookingStatus.CONFIRMED],
            completed_bookings=booking_counts[BookingStatus.COMPLETED],
            cancelled_bookings=booking_counts[BookingStatus.CANCELLED],
            total_quotations=sum(quotation_counts.values()),
            accepted_quotations=quotation_counts[QuotationStatus.ACCEPTED],
            total_revenue=money(revenue),
            average_booking_value=money(revenue / completed) if completed else Decimal("0.00"),
        )

    # ─── availability ───────────────────────────────────────────────────────
    def check_availability(self, hall_id: int, on_date: date, start_time: str, end_time: str) -> bool:
        self.get(hall_id)
        return self.checker.is_available(hall_id, on_date, start_time, end_time)

    def list_blocks(self, hall_id: int, on_date: Optional[date] = None) -> List[models.HallAvailabilityBlock]:
        self.get(hall_id)
        return self.blocks.list_for_hall(hall_id, on_date)

    def add_block(self, hall_id: int, block_in: schemas.AvailabilityBlockCreate) -> models.HallAvailabilityBlock:
        self.get(hall_id)
        window(block_in.start_time, block_in.end_time)
        block = self.blocks.create(
            models.HallAvailabilityBlock(
                hall_id=hall_id,
                date=block_in.date,
                start_time=block_in.start_time,
                end_time=block_in.end_time,
                is_available=False,
                reason=block_in.reason,
            )
        )
        self._commit()
        self.db.refresh(block)
        logger.info("Blocked hall %s on %s %s-%s", hall_id, block.date, block.start_time, block.end_time)
        return block

    def remove_block(self, hall_id: int, block_id: int) -> None:
        block = self.blocks.get(block_id)
        if block is None or block.hall_id != hall_id:
            raise NotFoundError(f"Availability block {block_id} not found", {"block_id": "not_found"})
        self.blocks.delete(block)
        self._commit()
