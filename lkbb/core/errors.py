"""
Error taxonomy for the admin API.

Every error is an ``HTTPException`` so services can raise them directly and
FastAPI renders them with the right status code. ``ConfigurationError`` is
kept apart from ``AuthorizationError`` so a client can prompt an operator to
pick a focus event instead of treating it as a permission denial.
"""
from typing import Optional

from fastapi import HTTPException, status


class LkbbError(HTTPException):
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    code = "internal_error"

    def __init__(self, detail: str, field: Optional[str] = None):
        super().__init__(status_code=self.status_code, detail=detail)
        self.field = field


class ValidationError(LkbbError):
    status_code = status.HTTP_400_BAD_REQUEST
    code = "validation_error"


class ConfigurationError(LkbbError):
    status_code = status.HTTP_400_BAD_REQUEST
    code = "configuration_error"


class AuthorizationError(LkbbError):
    status_code = status.HTTP_403_FORBIDDEN
    code = "forbidden"


class NotFoundError(LkbbError):
    status_code = status.HTTP_404_NOT_FOUND
    code = "not_found"


class ConflictError(LkbbError):
    status_code = status.HTTP_409_CONFLICT
    code = "conflict"


def from_integrity_error(exc, conflict_detail: str = "Data violates a unique constraint") -> LkbbError:
    """Map a database constraint violation to the matching API error."""
    message = str(getattr(exc, "orig", exc)).lower()
    if "foreign key" in message:
        return NotFoundError("Referenced record does not exist")
    if "unique" in message or "duplicate" in message:
        return ConflictError(conflict_detail)
    return ConflictError("Data violates a database constraint")
