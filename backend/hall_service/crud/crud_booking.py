from sqlalchemy import func
from sqlalchemy.orm import Session
from typing import Any, Dict, Iterable, List, Optional, Tuple
from datetime import date
from decimal import Decimal

from .. import models, schemas
from ..models.enums import BookingStatus

_LINE_FIELDS = {"type", "name", "description", "quantity", "unit_price", "total_price"}


class BookingRepository:
    def __init__(self, db: Session):
        self.db = db

    def get(self, booking_id: int) -> Optional[models.HallBooking]:
        return self.db.query(models.HallBooking).filter(models.HallBooking.id == booking_id).first()

    def get_by_quotation(self, quotation_id: int) -> Optional[models.HallBooking]:
        return (
            self.db.query(models.HallBooking)
            .filter(models.HallBooking.quotation_id == quotation_id)
            .first()
        )

    def find_overlapping(self, hall_id: int, on_date: date) -> List[models.HallBooking]:
        """Live bookings for the hall whose date span covers ``on_date``.

        Time-window overlap is decided by the caller.
        """
        return (
            self.db.query(models.HallBooking)
            .filter(
                models.HallBooking.hall_id == hall_id,
                models.HallBooking.start_date <= on_date,
                models.HallBooking.end_date >= on_date,
                models.HallBooking.is_cancelled.is_(False),
                models.HallBooking.status != BookingStatus.CANCELLED,
            )
            .all()
        )

    def _filtered(self, filters: Optional[schemas.BookingFilter]):
        query = self.db.query(models.HallBooking)
        if filters is None:
            return query
        if filters.hall_id is not None:
            query = query.filter(models.HallBooking.hall_id == filters.hall_id)
        if filters.customer_id is not None:
            query = query.filter(models.HallBooking.customer_id == filters.customer_id)
        if filters.status is not None:
            query = query.filter(models.HallBooking.status == filters.status)
        if filters.payment_status is not None:
            query = query.filter(models.HallBooking.payment_status == filters.payment_status)
        if filters.date_from is not None:
            query = query.filter(models.HallBooking.start_date >= filters.date_from)
        if filters.date_to is not None:
            query = query.filter(models.HallBooking.start_date <= filters.date_to)
        return query

    def list(
        self,
        filters: Optional[schemas.BookingFilter] = None,
        pagination: Optional[schemas.Pagination] = None,
    ) -> Tuple[List[models.HallBooking], int]:
        pagination = pagination or schemas.Pagination()
        query = self._filtered(filters)
        total = query.count()
        items = (
            query.order_by(models.HallBooking.start_date.desc(), models.HallBooking.id.desc())
            .offset(pagination.offset)
            .limit(pagination.limit)
            .all()
        )
        return items, total

    def create(self, booking: models.HallBooking) -> models.HallBooking:
        self.db.add(booking)
        self.db.flush()
        return booking

    def update(self, booking: models.HallBooking, data: Dict[str, Any]) -> models.HallBooking:
        for key, value in data.items():
            setattr(booking, key, value)
        self.db.flush()
        return booking

    def transition(
        self,
        booking_id: int,
        from_states: Iterable[BookingStatus],
        values: Dict[str, Any],
    ) -> int:
        """Conditionally update a booking whose status is still in ``from_states``.

        Returns the affected row count; 0 means another writer moved it first.
        """
        return (
            self.db.query(models.HallBooking)
            .filter(
                models.HallBooking.id == booking_id,
                models.HallBooking.status.in_(list(from_states)),
            )
            .update(values, synchronize_session="fetch")
        )

    def update_if(self, booking_id: int, conditions: Dict[str, Any], values: Dict[str, Any]) -> int:
        """Update only while every column in ``conditions`` still holds its expected value."""
        query = self.db.query(models.HallBooking).filter(models.HallBooking.id == booking_id)
        for column, expected in conditions.items():
            query = query.filter(getattr(models.HallBooking, column) == expected)
        return query.update(values, synchronize_session="fetch")

    def replace_line_items(self, booking: models.HallBooking, items: Iterable[Any]) -> None:
        booking.line_items.clear()
        self.db.flush()
        for item in items:
            fields = item.model_dump(include=_LINE_FIELDS) if hasattr(item, "model_dump") else dict(item)
            models.LineItem.for_booking(booking, **fields)
        self.db.flush()

    def count_by_status(self, filters: Optional[schemas.BookingFilter] = None) -> Dict[BookingStatus, int]:
        rows = (
            self._filtered(filters)
            .with_entities(models.HallBooking.status, func.count(models.HallBooking.id))
            .group_by(models.HallBooking.status)
            .all()
        )
        counts = {status: 0 for status in BookingStatus}
        for status, count in rows:
            counts[status] = count
        return counts

    def aggregate_revenue(self, filters: Optional[schemas.BookingFilter] = None) -> Tuple[Decimal, int]:
        """Sum and count of completed bookings."""
        total, count = (
            self._filtered(filters)
            .filter(models.HallBooking.status == BookingStatus.COMPLETED)
            .with_entities(
                func.coalesce(func.sum(models.HallBooking.total_amount), 0),
                func.count(models.HallBooking.id),
            )
            .one()
        )
        return Decimal(str(total)), int(count)
