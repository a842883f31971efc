from sqlalchemy import func, or_
from sqlalchemy.orm import Session
from typing import Any, Dict, List, Optional, Tuple

from .. import models, schemas
from ..services.state_machine import BOOKING_ACTIVE_STATES, QUOTATION_OPEN_STATES
from ..utils.errors import ConflictError


class HallRepository:
    def __init__(self, db: Session):
        self.db = db

    def get(self, hall_id: int) -> Optional[models.Hall]:
        return self.db.query(models.Hall).filter(models.Hall.id == hall_id).first()

    def find_by_name(self, name: str) -> Optional[models.Hall]:
        return (
            self.db.query(models.Hall)
            .filter(func.lower(models.Hall.name) == name.strip().lower())
            .first()
        )

    def _filtered(self, filters: Optional[schemas.HallFilter]):
        query = self.db.query(models.Hall)
        if filters is None:
            return query
        if filters.is_active is not None:
            query = query.filter(models.Hall.is_active.is_(filters.is_active))
        if filters.is_available is not None:
            query = query.filter(models.Hall.is_available.is_(filters.is_available))
        if filters.location:
            query = query.filter(models.Hall.location.ilike(f"%{filters.location}%"))
        if filters.min_capacity is not None:
            query = query.filter(models.Hall.capacity >= filters.min_capacity)
        if filters.max_capacity is not None:
            query = query.filter(models.Hall.capacity <= filters.max_capacity)
        if filters.max_base_rate is not None:
            query = query.filter(models.Hall.base_rate <= filters.max_base_rate)
        return query

    def list(
        self,
        filters: Optional[schemas.HallFilter] = None,
        pagination: Optional[schemas.Pagination] = None,
    ) -> Tuple[List[models.Hall], int]:
        pagination = pagination or schemas.Pagination()
        query = self._filtered(filters)
        halls = query.order_by(models.Hall.name.asc()).all()
        # Amenities are a JSON list; filter in Python to stay portable across dialects.
        if filters is not None and filters.amenity:
            wanted = filters.amenity.strip().lower()
            halls = [h for h in halls if wanted in {a.lower() for a in (h.amenities or [])}]
        total = len(halls)
        return halls[pagination.offset: pagination.offset + pagination.limit], total

    def search(self, term: str, limit: int = 20) -> List[models.Hall]:
        pattern = f"%{term.strip()}%"
        return (
            self.db.query(models.Hall)
            .filter(models.Hall.is_active.is_(True))
            .filter(
                or_(
                    models.Hall.name.ilike(pattern),
                    models.Hall.description.ilike(pattern),
                    models.Hall.location.ilike(pattern),
                )
            )
            .order_by(models.Hall.name.asc())
            .limit(limit)
            .all()
        )

    def create(self, data: Dict[str, Any]) -> models.Hall:
        hall = models.Hall(**data)
        self.db.add(hall)
        self.db.flush()
        return hall

    def update(self, hall: models.Hall, data: Dict[str, Any]) -> models.Hall:
        for key, value in data.items():
            setattr(hall, key, value)
        self.db.flush()
        return hall

    def count_active_bookings(self, hall_id: int) -> int:
        return (
            self.db.query(func.count(models.HallBooking.id))
            .filter(
                models.HallBooking.hall_id == hall_id,
                models.HallBooking.status.in_(list(BOOKING_ACTIVE_STATES)),
            )
            .scalar()
            or 0
        )

    def count_open_quotations(self, hall_id: int) -> int:
        return (
            self.db.query(func.count(models.HallQuotation.id))
            .filter(
                models.HallQuotation.hall_id == hall_id,
                models.HallQuotation.status.in_(list(QUOTATION_OPEN_STATES)),
            )
            .scalar()
            or 0
        )

    def has_history(self, hall_id: int) -> bool:
        booking = self.db.query(models.HallBooking.id).filter(models.HallBooking.hall_id == hall_id).first()
        quotation = self.db.query(models.HallQuotation.id).filter(models.HallQuotation.hall_id == hall_id).first()
        return booking is not None or quotation is not None

    def delete(self, hall: models.Hall) -> bool:
        """Delete a hall, refusing while it has live bookings or open quotations.

        Halls referenced by finished bookings or closed quotations are
        deactivated instead so the history keeps its foreign keys. Returns
        True when the row was removed.
        """
        bookings = self.count_active_bookings(hall.id)
        quotations = self.count_open_quotations(hall.id)
        if bookings or quotations:
            raise ConflictError(
                "Cannot delete hall with active bookings or open quotations",
                {"bookings": str(bookings), "quotations": str(quotations)},
            )
        if self.has_history(hall.id):
            hall.is_active = False
            hall.is_available = False
            self.db.flush()
            return False
        self.db.delete(hall)
        self.db.flush()
        return True
