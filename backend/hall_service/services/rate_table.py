from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal

from ..core.config import Settings


@dataclass(frozen=True)
class RateTable:
    """Price inputs for the cost calculator, loaded once from settings."""

    base_hall_rate: Decimal = Decimal("5000")
    chair_rate: Decimal = Decimal("50")
    table_rate: Decimal = Decimal("200")
    decoration_rate: Decimal = Decimal("2000")
    lighting_rate: Decimal = Decimal("1000")
    av_rate: Decimal = Decimal("3000")
    catering_rate_per_person: Decimal = Decimal("300")
    security_rate: Decimal = Decimal("1000")
    generator_rate: Decimal = Decimal("2000")
    tax_percentage: Decimal = Decimal("18")
    deposit_percentage: Decimal = Decimal("20")
    weekend_rate_factor: Decimal = Decimal("1.5")
    cancellation_hours: int = 24
    full_refund_hours: int = 72
    no_refund_hours: int = 12
    currency: str = "INR"

    @classmethod
    def from_settings(cls, cfg: Settings) -> "RateTable":
        return cls(
            base_hall_rate=cfg.BASE_HALL_RATE,
            chair_rate=cfg.CHAIR_RATE,
            table_rate=cfg.TABLE_RATE,
            decoration_rate=cfg.DECORATION_RATE,
            lighting_rate=cfg.LIGHTING_RATE,
            av_rate=cfg.AV_RATE,
            catering_rate_per_person=cfg.CATERING_RATE_PER_PERSON,
            security_rate=cfg.SECURITY_RATE,
            generator_rate=cfg.GENERATOR_RATE,
            tax_percentage=cfg.TAX_PERCENTAGE,
            deposit_percentage=cfg.DEPOSIT_PERCENTAGE,
            weekend_rate_factor=cfg.WEEKEND_RATE_FACTOR,
            cancellation_hours=cfg.CANCELLATION_HOURS,
            full_refund_hours=cfg.REFUND_FULL_HOURS,
            no_refund_hours=cfg.REFUND_NONE_HOURS,
            currency=cfg.DEFAULT_CURRENCY,
        )
