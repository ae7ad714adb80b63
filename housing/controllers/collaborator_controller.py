"""HTTP controller layer for the collaborator directory mirror and movement log."""

from __future__ import annotations

from datetime import date
from typing import Any, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status

from housing.controllers.dependencies import get_namespace, get_occupancy_service
from housing.controllers.errors import to_http_exception, unexpected_failure
from housing.controllers.schemas import CollaboratorSyncRequest
from housing.domain.errors import HousingError
from housing.services.occupancy_service import OccupancyService


router = APIRouter(prefix="/collaborators", tags=["collaborators"])


@router.get("", status_code=status.HTTP_200_OK)
async def list_collaborators(
    estado: Optional[str] = Query(default=None, pattern="^(activos|retirados)$"),
    namespace: str = Depends(get_namespace),
    service: OccupancyService = Depends(get_occupancy_service),
) -> dict[str, Any]:
    try:
        return service.list_collaborators(namespace, estado)
    except HousingError as exc:
        raise to_http_exception(exc, "list collaborators") from exc
    except Exception as exc:  # pragma: no cover - defensive fallback
        raise unexpected_failure("list collaborators") from exc


@router.put("", status_code=status.HTTP_200_OK)
async def sync_collaborators(
    payload: CollaboratorSyncRequest,
    namespace: str = Depends(get_namespace),
    service: OccupancyService = Depends(get_occupancy_service),
) -> dict[str, Any]:
    records = [record.model_dump() for record in payload.collaborators]
    try:
        return service.sync_collaborators(namespace, records)
    except HousingError as exc:
        raise to_http_exception(exc, "sync collaborators") from exc
    except Exception as exc:  # pragma: no cover - defensive fallback
        raise unexpected_failure("sync collaborators") from exc


@router.get("/movements", status_code=status.HTTP_200_OK)
async def list_movements(
    date_from: Optional[date] = Query(default=None, alias="from"),
    date_to: Optional[date] = Query(default=None, alias="to"),
    limit: Optional[int] = Query(default=None, ge=1, le=1000),
    namespace: str = Depends(get_namespace),
    service: OccupancyService = Depends(get_occupancy_service),
) -> dict[str, Any]:
    if date_from and date_to and date_to < date_from:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="'to' must not be earlier than 'from'",
        )
    try:
        return service.list_movements(
            namespace,
            date_from=date_from,
            date_to=date_to,
            limit=limit,
        )
    except HousingError as exc:
        raise to_http_exception(exc, "list movements") from exc
    except Exception as exc:  # pragma: no cover - defensive fallback
        raise unexpected_failure("list movements") from exc


@router.delete("/movements", status_code=status.HTTP_200_OK)
async def clear_movements(
    namespace: str = Depends(get_namespace),
    service: OccupancyService = Depends(get_occupancy_service),
) -> dict[str, Any]:
    try:
        return service.clear_movements(namespace)
    except HousingError as exc:
        raise to_http_exception(exc, "clear movements") from exc
    except Exception as exc:  # pragma: no cover - defensive fallback
        raise unexpected_failure("clear movements") from exc
