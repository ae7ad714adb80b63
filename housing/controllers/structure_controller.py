"""HTTP controller layer for palaces, floors, apartments and rooms."""

from __future__ import annotations

from typing import Any, Optional

from fastapi import APIRouter, Body, Depends, status

from housing.controllers.dependencies import get_namespace, get_occupancy_service
from housing.controllers.errors import to_http_exception, unexpected_failure
from housing.controllers.schemas import (
    ApartmentStatusRequest,
    CreatePalaceRequest,
    RoomUpdateRequest,
)
from housing.domain.errors import HousingError
from housing.domain.models import MaintenanceAreaType, RoomRef, RoomStatus
from housing.domain.room_state import MaintenanceDetails
from housing.services.occupancy_service import OccupancyService


router = APIRouter(prefix="/palaces", tags=["structure"])


@router.get("", status_code=status.HTTP_200_OK)
async def list_palaces(
    namespace: str = Depends(get_namespace),
    service: OccupancyService = Depends(get_occupancy_service),
) -> dict[str, Any]:
    try:
        return service.list_palaces(namespace)
    except HousingError as exc:
        raise to_http_exception(exc, "list palaces") from exc
    except Exception as exc:  # pragma: no cover - defensive fallback
        raise unexpected_failure("list palaces") from exc


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_palace(
    payload: Optional[CreatePalaceRequest] = Body(default=None),
    namespace: str = Depends(get_namespace),
    service: OccupancyService = Depends(get_occupancy_service),
) -> dict[str, Any]:
    params = (payload or CreatePalaceRequest()).model_dump()
    try:
        return service.create_palace(namespace, **params)
    except HousingError as exc:
        raise to_http_exception(exc, "create palace") from exc
    except Exception as exc:  # pragma: no cover - defensive fallback
        raise unexpected_failure("create palace") from exc


@router.get("/{palace_id}", status_code=status.HTTP_200_OK)
async def get_palace(
    palace_id: str,
    namespace: str = Depends(get_namespace),
    service: OccupancyService = Depends(get_occupancy_service),
) -> dict[str, Any]:
    try:
        return service.get_palace(namespace, palace_id)
    except HousingError as exc:
        raise to_http_exception(exc, "get palace") from exc
    except Exception as exc:  # pragma: no cover - defensive fallback
        raise unexpected_failure("get palace") from exc


@router.put("/{palace_id}", status_code=status.HTTP_200_OK)
async def update_palace(
    palace_id: str,
    payload: dict[str, Any] = Body(...),
    namespace: str = Depends(get_namespace),
    service: OccupancyService = Depends(get_occupancy_service),
) -> dict[str, Any]:
    try:
        return service.update_palace(namespace, palace_id, payload)
    except HousingError as exc:
        raise to_http_exception(exc, "update palace") from exc
    except Exception as exc:  # pragma: no cover - defensive fallback
        raise unexpected_failure("update palace") from exc


@router.delete("/{palace_id}", status_code=status.HTTP_200_OK)
async def delete_palace(
    palace_id: str,
    namespace: str = Depends(get_namespace),
    service: OccupancyService = Depends(get_occupancy_service),
) -> dict[str, Any]:
    try:
        return service.delete_palace(namespace, palace_id)
    except HousingError as exc:
        raise to_http_exception(exc, "delete palace") from exc
    except Exception as exc:  # pragma: no cover - defensive fallback
        raise unexpected_failure("delete palace") from exc


@router.post("/{palace_id}/floors", status_code=status.HTTP_201_CREATED)
async def add_floor(
    palace_id: str,
    namespace: str = Depends(get_namespace),
    service: OccupancyService = Depends(get_occupancy_service),
) -> dict[str, Any]:
    try:
        return service.add_floor(namespace, palace_id)
    except HousingError as exc:
        raise to_http_exception(exc, "add floor") from exc
    except Exception as exc:  # pragma: no cover - defensive fallback
        raise unexpected_failure("add floor") from exc


@router.delete("/{palace_id}/floors/{floor_id}", status_code=status.HTTP_200_OK)
async def remove_floor(
    palace_id: str,
    floor_id: str,
    namespace: str = Depends(get_namespace),
    service: OccupancyService = Depends(get_occupancy_service),
) -> dict[str, Any]:
    try:
        return service.remove_floor(namespace, palace_id, floor_id)
    except HousingError as exc:
        raise to_http_exception(exc, "remove floor") from exc
    except Exception as exc:  # pragma: no cover - defensive fallback
        raise unexpected_failure("remove floor") from exc


@router.post("/{palace_id}/floors/{floor_id}/apartments", status_code=status.HTTP_201_CREATED)
async def add_apartment(
    palace_id: str,
    floor_id: str,
    namespace: str = Depends(get_namespace),
    service: OccupancyService = Depends(get_occupancy_service),
) -> dict[str, Any]:
    try:
        return service.add_apartment(namespace, palace_id, floor_id)
    except HousingError as exc:
        raise to_http_exception(exc, "add apartment") from exc
    except Exception as exc:  # pragma: no cover - defensive fallback
        raise unexpected_failure("add apartment") from exc


@router.delete("/{palace_id}/apartments/{apartment_id}", status_code=status.HTTP_200_OK)
async def remove_apartment(
    palace_id: str,
    apartment_id: str,
    namespace: str = Depends(get_namespace),
    service: OccupancyService = Depends(get_occupancy_service),
) -> dict[str, Any]:
    try:
        return service.remove_apartment(namespace, palace_id, apartment_id)
    except HousingError as exc:
        raise to_http_exception(exc, "remove apartment") from exc
    except Exception as exc:  # pragma: no cover - defensive fallback
        raise unexpected_failure("remove apartment") from exc


@router.patch("/{palace_id}/apartments/{apartment_id}/status", status_code=status.HTTP_200_OK)
async def set_apartment_status(
    palace_id: str,
    apartment_id: str,
    payload: ApartmentStatusRequest,
    namespace: str = Depends(get_namespace),
    service: OccupancyService = Depends(get_occupancy_service),
) -> dict[str, Any]:
    try:
        return service.set_apartment_status(
            namespace,
            palace_id,
            apartment_id,
            payload.status,
            payload.note,
        )
    except HousingError as exc:
        raise to_http_exception(exc, "set apartment status") from exc
    except Exception as exc:  # pragma: no cover - defensive fallback
        raise unexpected_failure("set apartment status") from exc


@router.post("/{palace_id}/apartments/{apartment_id}/rooms", status_code=status.HTTP_201_CREATED)
async def add_room(
    palace_id: str,
    apartment_id: str,
    namespace: str = Depends(get_namespace),
    service: OccupancyService = Depends(get_occupancy_service),
) -> dict[str, Any]:
    try:
        return service.add_room(namespace, palace_id, apartment_id)
    except HousingError as exc:
        raise to_http_exception(exc, "add room") from exc
    except Exception as exc:  # pragma: no cover - defensive fallback
        raise unexpected_failure("add room") from exc


@router.patch("/{palace_id}/rooms/{room_id}", status_code=status.HTTP_200_OK)
async def update_room(
    palace_id: str,
    room_id: str,
    payload: RoomUpdateRequest,
    namespace: str = Depends(get_namespace),
    service: OccupancyService = Depends(get_occupancy_service),
) -> dict[str, Any]:
    maintenance = None
    if payload.status == RoomStatus.MAINTENANCE.value:
        maintenance = MaintenanceDetails(
            note=payload.maintenance_note or "",
            zone=payload.maintenance_zone or "",
            area_type=payload.maintenance_area_type or MaintenanceAreaType.ROOM.value,
        )
    try:
        return service.update_room(
            namespace,
            RoomRef(palace_id=palace_id, room_id=room_id),
            capacity=payload.capacity,
            status=payload.status,
            maintenance=maintenance,
        )
    except HousingError as exc:
        raise to_http_exception(exc, "update room") from exc
    except Exception as exc:  # pragma: no cover - defensive fallback
        raise unexpected_failure("update room") from exc


@router.delete("/{palace_id}/rooms/{room_id}", status_code=status.HTTP_200_OK)
async def remove_room(
    palace_id: str,
    room_id: str,
    namespace: str = Depends(get_namespace),
    service: OccupancyService = Depends(get_occupancy_service),
) -> dict[str, Any]:
    try:
        return service.remove_room(namespace, palace_id, room_id)
    except HousingError as exc:
        raise to_http_exception(exc, "remove room") from exc
    except Exception as exc:  # pragma: no cover - defensive fallback
        raise unexpected_failure("remove room") from exc
