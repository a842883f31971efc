import logging
from datetime import date
from typing import Optional

from ..crud import AvailabilityBlockRepository, BookingRepository, HallRepository
from .time_windows import overlaps, time_to_minutes, window

logger = logging.getLogger(__name__)


class AvailabilityChecker:
    """Decides whether a hall is free for a date and time window.

    Reads straight from the repositories every time; nothing is cached here.
    """

    def __init__(
        self,
        halls: HallRepository,
        bookings: BookingRepository,
        blocks: AvailabilityBlockRepository,
    ):
        self.halls = halls
        self.bookings = bookings
        self.blocks = blocks

    def is_available(
        self,
        hall_id: int,
        on_date: date,
        start_time: str,
        end_time: str,
        exclude_booking_id: Optional[int] = None,
    ) -> bool:
        hall = self.halls.get(hall_id)
        if hall is None or not hall.is_active or not hall.is_available:
            return False

        requested = window(start_time, end_time)
        for booking in self.bookings.find_overlapping(hall_id, on_date):
            if exclude_booking_id is not None and booking.id == exclude_booking_id:
                continue
            existing = (time_to_minutes(booking.start_time), time_to_minutes(booking.end_time))
            if overlaps(requested, existing):
                logger.debug(
                    "Hall %s busy on %s: booking %s overlaps %s-%s",
                    hall_id, on_date, booking.id, start_time, end_time,
                )
                return False

        if self.blocks.find_blocking(hall_id, on_date, start_time, end_time):
            return False
        return True
