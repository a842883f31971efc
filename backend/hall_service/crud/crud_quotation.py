from sqlalchemy import func
from sqlalchemy.orm import Session
from typing import Any, Dict, Iterable, List, Optional, Tuple
from datetime import datetime
from decimal import Decimal

from .. import models, schemas
from ..models.enums import QuotationStatus
from ..services.state_machine import QUOTATION_OPEN_STATES

_LINE_FIELDS = {"type", "name", "description", "quantity", "unit_price", "total_price"}


class QuotationRepository:
    def __init__(self, db: Session):
        self.db = db

    def get(self, quotation_id: int) -> Optional[models.HallQuotation]:
        return (
            self.db.query(models.HallQuotation)
            .filter(models.HallQuotation.id == quotation_id)
            .first()
        )

    def get_by_number(self, quotation_number: str) -> Optional[models.HallQuotation]:
        return (
            self.db.query(models.HallQuotation)
            .filter(models.HallQuotation.quotation_number == quotation_number.strip().upper())
            .first()
        )

    def number_exists(self, quotation_number: str) -> bool:
        return (
            self.db.query(models.HallQuotation.id)
            .filter(models.HallQuotation.quotation_number == quotation_number)
            .first()
            is not None
        )

    def _filtered(self, filters: Optional[schemas.QuotationFilter]):
        query = self.db.query(models.HallQuotation)
        if filters is None:
            return query
        if filters.hall_id is not None:
            query = query.filter(models.HallQuotation.hall_id == filters.hall_id)
        if filters.customer_id is not None:
            query = query.filter(models.HallQuotation.customer_id == filters.customer_id)
        if filters.status is not None:
            query = query.filter(models.HallQuotation.status == filters.status)
        if filters.event_type is not None:
            query = query.filter(models.HallQuotation.event_type == filters.event_type)
        if filters.date_from is not None:
            query = query.filter(models.HallQuotation.event_date >= filters.date_from)
        if filters.date_to is not None:
            query = query.filter(models.HallQuotation.event_date <= filters.date_to)
        return query

    def list(
        self,
        filters: Optional[schemas.QuotationFilter] = None,
        pagination: Optional[schemas.Pagination] = None,
    ) -> Tuple[List[models.HallQuotation], int]:
        pagination = pagination or schemas.Pagination()
        query = self._filtered(filters)
        total = query.count()
        items = (
            query.order_by(models.HallQuotation.created_at.desc(), models.HallQuotation.id.desc())
            .offset(pagination.offset)
            .limit(pagination.limit)
            .all()
        )
        return items, total

    def create(self, quotation: models.HallQuotation) -> models.HallQuotation:
        self.db.add(quotation)
        self.db.flush()
        return quotation

    def update(self, quotation: models.HallQuotation, data: Dict[str, Any]) -> models.HallQuotation:
        for key, value in data.items():
            setattr(quotation, key, value)
        self.db.flush()
        return quotation

    def transition(
        self,
        quotation_id: int,
        from_states: Iterable[QuotationStatus],
        values: Dict[str, Any],
    ) -> int:
        """Compare-and-set on status; only unexpired, unaccepted rows qualify."""
        return (
            self.db.query(models.HallQuotation)
            .filter(
                models.HallQuotation.id == quotation_id,
                models.HallQuotation.status.in_(list(from_states)),
                models.HallQuotation.is_accepted.is_(False),
                models.HallQuotation.is_expired.is_(False),
            )
            .update(values, synchronize_session="fetch")
        )

    def replace_line_items(self, quotation: models.HallQuotation, items: Iterable[Any]) -> None:
        quotation.line_items.clear()
        self.db.flush()
        for item in items:
            fields = item.model_dump(include=_LINE_FIELDS) if hasattr(item, "model_dump") else dict(item)
            models.LineItem.for_quotation(quotation, **fields)
        self.db.flush()

    def find_overdue(self, now: datetime) -> List[models.HallQuotation]:
        return (
            self.db.query(models.HallQuotation)
            .filter(
                models.HallQuotation.status.in_(list(QUOTATION_OPEN_STATES)),
                models.HallQuotation.valid_until < now,
            )
            .all()
        )

    def count_by_status(self, filters: Optional[schemas.QuotationFilter] = None) -> Dict[QuotationStatus, int]:
        rows = (
            self._filtered(filters)
            .with_entities(models.HallQuotation.status, func.count(models.HallQuotation.id))
            .group_by(models.HallQuotation.status)
            .all()
        )
        counts = {status: 0 for status in QuotationStatus}
        for status, count in rows:
            counts[status] = count
        return counts

    def aggregate_value(self, filters: Optional[schemas.QuotationFilter] = None) -> Tuple[Decimal, int]:
        """Sum and count of accepted quotations."""
        total, count = (
            self._filtered(filters)
            .filter(models.HallQuotation.status == QuotationStatus.ACCEPTED)
            .with_entities(
                func.coalesce(func.sum(models.HallQuotation.total_amount), 0),
                func.count(models.HallQuotation.id),
            )
            .one()
        )
        return Decimal(str(total)), int(count)
