"""Error kinds raised by the occupancy engine.

Every error carries a stable machine ``code`` plus a human-readable message so
the routing layer can map it to a response without inspecting internals.
"""

from __future__ import annotations

from typing import Optional


class HousingError(Exception):
    """Base class for all recoverable engine failures."""

    code = "housing_error"

    def __init__(self, message: str, *, code: Optional[str] = None) -> None:
        super().__init__(message)
        self.message = message
        if code is not None:
            self.code = code

    def to_dict(self) -> dict[str, str]:
        return {"code": self.code, "message": self.message}


class ValidationError(HousingError, ValueError):
    """Raised for malformed input: bad dates, capacity < 1, empty identifiers."""

    code = "validation_error"


class ApartmentOutOfServiceError(ValidationError):
    """Raised when a new occupant targets an apartment that is out of service."""

    code = "apartment_out_of_service"


class AssignmentConflictError(ValidationError):
    """Raised when a collaborator already holds a room inside the uniqueness scope."""

    code = "already_assigned"


class CapacityError(HousingError):
    """Raised when the slot or capacity invariant would be violated."""

    code = "capacity_exceeded"


class DestinationFullError(CapacityError):
    """Raised when a move target has no free slot."""

    code = "destination_full"


class StructuralError(HousingError):
    """Raised when a structural edit would leave a parent without children."""

    code = "structural_error"


class NotFoundError(HousingError):
    """Raised when a referenced entity id is absent from the tenant dataset."""

    code = "not_found"


class TenantIsolationError(HousingError):
    """Raised when an operation runs against an unresolved or foreign dataset."""

    code = "tenant_isolation_error"


class ProtectedTenantError(TenantIsolationError):
    """Raised when removing the default tenant is attempted."""

    code = "protected_tenant"
