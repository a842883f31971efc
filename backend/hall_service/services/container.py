from dataclasses import dataclass, field
from typing import Optional

from sqlalchemy.orm import Session

from ..core.config import Settings, settings as default_settings
from ..crud import AvailabilityBlockRepository, BookingRepository, HallRepository, QuotationRepository
from ..utils.locks import HallLockManager
from ..utils.redis_cache import CacheFacade
from .availability import AvailabilityChecker
from .booking_engine import BookingEngine
from .cost_calculator import CostCalculator
from .hall_service import HallService
from .quotation_engine import QuotationEngine
from .rate_table import RateTable


@dataclass
class ServiceContainer:
    """Process-wide collaborators, built once at startup.

    Session-bound engines are assembled per unit of work from these shared
    pieces.
    """

    settings: Settings
    rates: RateTable
    calculator: CostCalculator
    cache: CacheFacade
    locks: HallLockManager = field(default_factory=HallLockManager)

    @classmethod
    def build(cls, cfg: Optional[Settings] = None, cache: Optional[CacheFacade] = None) -> "ServiceContainer":
        cfg = cfg or default_settings
        rates = RateTable.from_settings(cfg)
        return cls(
            settings=cfg,
            rates=rates,
            calculator=CostCalculator(rates),
            cache=cache or CacheFacade(),
        )

    def checker(self, db: Session) -> AvailabilityChecker:
        return AvailabilityChecker(
            HallRepository(db), BookingRepository(db), AvailabilityBlockRepository(db)
        )

    def booking_engine(self, db: Session) -> BookingEngine:
        return BookingEngine(
            db,
            BookingRepository(db),
            HallRepository(db),
            self.checker(db),
            self.calculator,
            self.locks,
            self.cache,
        )

    def quotation_engine(self, db: Session) -> QuotationEngine:
        return QuotationEngine(
            db,
            QuotationRepository(db),
            HallRepository(db),
            BookingRepository(db),
            self.checker(db),
            self.calculator,
            self.booking_engine(db),
            self.locks,
            self.cache,
            validity_days=self.settings.QUOTATION_VALIDITY_DAYS,
        )

    def hall_service(self, db: Session) -> HallService:
        return HallService(
            db,
            HallRepository(db),
            AvailabilityBlockRepository(db),
            BookingRepository(db),
            QuotationRepository(db),
            self.checker(db),
            self.cache,
        )
