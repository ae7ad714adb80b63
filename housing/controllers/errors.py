"""Translation of engine errors into HTTP responses."""

from __future__ import annotations

from fastapi import HTTPException, status

from housing.domain.errors import (
    CapacityError,
    HousingError,
    NotFoundError,
    ProtectedTenantError,
    StructuralError,
    TenantIsolationError,
    ValidationError,
)
from housing.utils.logger import get_logger


logger = get_logger(__name__)

# Order matters: subclasses precede their bases.
_STATUS_BY_ERROR: tuple[tuple[type[HousingError], int], ...] = (
    (ProtectedTenantError, status.HTTP_403_FORBIDDEN),
    (TenantIsolationError, status.HTTP_409_CONFLICT),
    (NotFoundError, status.HTTP_404_NOT_FOUND),
    (CapacityError, status.HTTP_409_CONFLICT),
    (StructuralError, status.HTTP_409_CONFLICT),
    (ValidationError, status.HTTP_400_BAD_REQUEST),
)


def status_for(exc: HousingError) -> int:
    for error_type, status_code in _STATUS_BY_ERROR:
        if isinstance(exc, error_type):
            return status_code
    return status.HTTP_400_BAD_REQUEST


def to_http_exception(exc: HousingError, operation: str) -> HTTPException:
    """Log a rejected operation and build the matching HTTP error."""
    status_code = status_for(exc)
    logger.warning(
        "Operation rejected | operation=%s status=%s code=%s message=%s",
        operation,
        status_code,
        exc.code,
        exc.message,
    )
    return HTTPException(status_code=status_code, detail=exc.to_dict())


def unexpected_failure(operation: str) -> HTTPException:
    """Call from inside an ``except`` block; logs the active traceback."""
    logger.exception("Unexpected %s failure", operation)
    return HTTPException(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        detail=f"Failed to {operation}",
    )
