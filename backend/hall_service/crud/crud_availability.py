from sqlalchemy.orm import Session
from typing import List, Optional
from datetime import date

from .. import models


class AvailabilityBlockRepository:
    def __init__(self, db: Session):
        self.db = db

    def get(self, block_id: int) -> Optional[models.HallAvailabilityBlock]:
        return (
            self.db.query(models.HallAvailabilityBlock)
            .filter(models.HallAvailabilityBlock.id == block_id)
            .first()
        )

    def find_blocking(
        self, hall_id: int, on_date: date, start_time: str, end_time: str
    ) -> List[models.HallAvailabilityBlock]:
        """Unavailable blocks on ``on_date`` whose window covers the request."""
        return (
            self.db.query(models.HallAvailabilityBlock)
            .filter(
                models.HallAvailabilityBlock.hall_id == hall_id,
                models.HallAvailabilityBlock.date == on_date,
                models.HallAvailabilityBlock.is_available.is_(False),
                models.HallAvailabilityBlock.start_time <= start_time,
                models.HallAvailabilityBlock.end_time >= end_time,
            )
            .all()
        )

    def list_for_hall(self, hall_id: int, on_date: Optional[date] = None) -> List[models.HallAvailabilityBlock]:
        query = self.db.query(models.HallAvailabilityBlock).filter(
            models.HallAvailabilityBlock.hall_id == hall_id
        )
        if on_date is not None:
            query = query.filter(models.HallAvailabilityBlock.date == on_date)
        return query.order_by(
            models.HallAvailabilityBlock.date.asc(),
            models.HallAvailabilityBlock.start_time.asc(),
        ).all()

    def create(self, block: models.HallAvailabilityBlock) -> models.HallAvailabilityBlock:
        self.db.add(block)
        self.db.flush()
        return block

    def delete(self, block: models.HallAvailabilityBlock) -> None:
        self.db.delete(block)
        self.db.flush()
