from .errors import (
    BadRequestError,
    ConflictError,
    HallServiceError,
    NotFoundError,
    ValidationError,
)

__all__ = [
    "BadRequestError",
    "ConflictError",
    "HallServiceError",
    "NotFoundError",
    "ValidationError",
]
