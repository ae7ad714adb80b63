"""Controller layer for the tenant dashboard overview."""

from __future__ import annotations

from typing import Any

from fastapi import APIRouter, Depends, status

from housing.controllers.dependencies import get_namespace, get_occupancy_service
from housing.controllers.errors import to_http_exception, unexpected_failure
from housing.domain.errors import HousingError
from housing.services.occupancy_service import OccupancyService


router = APIRouter(prefix="/dashboard", tags=["dashboard"])


@router.get("/overview", status_code=status.HTTP_200_OK)
async def overview(
    namespace: str = Depends(get_namespace),
    service: OccupancyService = Depends(get_occupancy_service),
) -> dict[str, Any]:
    try:
        return service.overview(namespace)
    except HousingError as exc:
        raise to_http_exception(exc, "build dashboard overview") from exc
    except Exception as exc:  # pragma: no cover - defensive fallback
        raise unexpected_failure("build dashboard overview") from exc
