from typing import Any, Dict, Optional

from fastapi import status


class HallServiceError(Exception):
    """Base class for business-rule failures raised by the engines."""

    status_code = status.HTTP_400_BAD_REQUEST

    def __init__(self, message: str, field_errors: Optional[Dict[str, str]] = None):
        super().__init__(message)
        self.message = message
        self.field_errors = dict(field_errors or {})

    @property
    def detail(self) -> Dict[str, Any]:
        return {"message": self.message, "field_errors": self.field_errors}


class ValidationError(HallServiceError):
    """Malformed or out-of-range input, raised before any write."""

    status_code = status.HTTP_400_BAD_REQUEST


class BadRequestError(HallServiceError):
    """Correlated fields are missing or inconsistent."""

    status_code = status.HTTP_400_BAD_REQUEST


class NotFoundError(HallServiceError):
    status_code = status.HTTP_404_NOT_FOUND


class ConflictError(HallServiceError):
    """State guard violation, duplicate, overlap or unavailable hall."""

    status_code = status.HTTP_409_CONFLICT

