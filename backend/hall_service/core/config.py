from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import field_validator, model_validator
from decimal import Decimal
from typing import Any, ClassVar
import json
from pathlib import Path
import os


def _default_env_file() -> str:
    return os.getenv("ENV_FILE", str(Path(__file__).resolve().parents[3] / ".env"))


class Settings(BaseSettings):
    API_V1_STR: str = "/api/v1"
    PROJECT_NAME: str = "Hall Reservation API"

    # Use an absolute path so running from the repo root or backend/ resolves
    # the same SQLite file.
    BASE_DIR: ClassVar[Path] = Path(__file__).resolve().parents[2]
    SQLALCHEMY_DATABASE_URL: str = f"sqlite:///{BASE_DIR / 'halls.db'}"

    # Redis connection URL for caching. Empty/"disabled" turns caching off.
    REDIS_URL: str = "redis://localhost:6379/0"
    REDIS_CONNECT_TIMEOUT: float = 0.5
    REDIS_SOCKET_TIMEOUT: float = 0.5

    LOG_LEVEL: str = "INFO"

    CORS_ORIGINS: list[str] = ["http://localhost:3000"]
    CORS_ALLOW_ALL: bool = False

    DEFAULT_CURRENCY: str = "INR"

    # Rate table
    BASE_HALL_RATE: Decimal = Decimal("5000")
    CHAIR_RATE: Decimal = Decimal("50")
    TABLE_RATE: Decimal = Decimal("200")
    DECORATION_RATE: Decimal = Decimal("2000")
    LIGHTING_RATE: Decimal = Decimal("1000")
    AV_RATE: Decimal = Decimal("3000")
    CATERING_RATE_PER_PERSON: Decimal = Decimal("300")
    SECURITY_RATE: Decimal = Decimal("1000")
    GENERATOR_RATE: Decimal = Decimal("2000")
    TAX_PERCENTAGE: Decimal = Decimal("18")
    DEPOSIT_PERCENTAGE: Decimal = Decimal("20")
    WEEKEND_RATE_FACTOR: Decimal = Decimal("1.5")

    # Cancellation policy (hours before event start)
    CANCELLATION_HOURS: int = 24
    REFUND_FULL_HOURS: int = 72
    REFUND_NONE_HOURS: int = 12

    QUOTATION_VALIDITY_DAYS: int = 7
    # Background sweep that expires lapsed quotations; 0 disables it.
    QUOTATION_SWEEP_INTERVAL_SECONDS: int = 3600

    # Cache TTLs (seconds)
    HALL_CACHE_TTL: int = 3600
    QUOTATION_CACHE_TTL: int = 1800
    BOOKING_CACHE_TTL: int = 1800
    LIST_CACHE_TTL: int = 300

    model_config = SettingsConfigDict(
        extra="ignore",
        env_file=_default_env_file(),
        case_sensitive=True,
    )

    @field_validator("CORS_ORIGINS", mode="before")
    def split_origins(cls, v: Any) -> list[str]:
        """Parse comma-separated or JSON list of origins from environment."""
        if isinstance(v, str):
            try:
                parsed = json.loads(v)
                if isinstance(parsed, list):
                    return parsed
            except json.JSONDecodeError:
                pass
            return [s.strip() for s in v.split(",") if s.strip()]
        return v

    @field_validator("REDIS_URL", "DEFAULT_CURRENCY", "LOG_LEVEL", mode="before")
    def strip_whitespace(cls, v: Any) -> Any:
        if isinstance(v, str):
            return v.strip()
        return v

    @model_validator(mode="after")
    def allow_all_if_requested(cls, values: "Settings") -> "Settings":
        if values.CORS_ALLOW_ALL:
            values.CORS_ORIGINS = ["*"]
        return values

    @model_validator(mode="after")
    def check_refund_tiers(cls, values: "Settings") -> "Settings":
        if not (
            values.REFUND_NONE_HOURS
            <= values.CANCELLATION_HOURS
            <= values.REFUND_FULL_HOURS
        ):
            raise ValueError(
                "refund tiers must satisfy REFUND_NONE_HOURS <= CANCELLATION_HOURS <= REFUND_FULL_HOURS"
            )
        return values


def load_settings() -> "Settings":
    return Settings(_env_file=_default_env_file())


settings = load_settings()
