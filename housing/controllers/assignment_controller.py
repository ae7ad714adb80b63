"""HTTP controller layer for room assignments and pre-checkins."""

from __future__ import annotations

from typing import Any

from fastapi import APIRouter, Depends, status

from housing.controllers.dependencies import get_namespace, get_occupancy_service
from housing.controllers.errors import to_http_exception, unexpected_failure
from housing.controllers.schemas import AssignRequest, MoveRequest, PreCheckinRequest
from housing.domain.errors import HousingError
from housing.domain.models import RoomRef
from housing.services.occupancy_service import OccupancyService


router = APIRouter(tags=["assignments"])


@router.put("/palaces/{palace_id}/rooms/{room_id}/collaborators", status_code=status.HTTP_200_OK)
async def assign_collaborators(
    palace_id: str,
    room_id: str,
    payload: AssignRequest,
    namespace: str = Depends(get_namespace),
    service: OccupancyService = Depends(get_occupancy_service),
) -> dict[str, Any]:
    try:
        return service.assign(
            namespace,
            RoomRef(palace_id=palace_id, room_id=room_id),
            payload.collaborator_ids,
        )
    except HousingError as exc:
        raise to_http_exception(exc, "assign collaborators") from exc
    except Exception as exc:  # pragma: no cover - defensive fallback
        raise unexpected_failure("assign collaborators") from exc


@router.delete(
    "/palaces/{palace_id}/rooms/{room_id}/collaborators/{collaborator_id}",
    status_code=status.HTTP_200_OK,
)
async def unassign_collaborator(
    palace_id: str,
    room_id: str,
    collaborator_id: str,
    namespace: str = Depends(get_namespace),
    service: OccupancyService = Depends(get_occupancy_service),
) -> dict[str, Any]:
    try:
        return service.unassign(
            namespace,
            RoomRef(palace_id=palace_id, room_id=room_id),
            collaborator_id,
        )
    except HousingError as exc:
        raise to_http_exception(exc, "unassign collaborator") from exc
    except Exception as exc:  # pragma: no cover - defensive fallback
        raise unexpected_failure("unassign collaborator") from exc


@router.post("/assignments/move", status_code=status.HTTP_200_OK)
async def move_collaborator(
    payload: MoveRequest,
    namespace: str = Depends(get_namespace),
    service: OccupancyService = Depends(get_occupancy_service),
) -> dict[str, Any]:
    try:
        return service.move(
            namespace,
            payload.collaborator_id,
            RoomRef(palace_id=payload.source.palace_id, room_id=payload.source.room_id),
            RoomRef(palace_id=payload.target.palace_id, room_id=payload.target.room_id),
        )
    except HousingError as exc:
        raise to_http_exception(exc, "move collaborator") from exc
    except Exception as exc:  # pragma: no cover - defensive fallback
        raise unexpected_failure("move collaborator") from exc


@router.get("/assignments/{collaborator_id}", status_code=status.HTTP_200_OK)
async def lookup_assignment(
    collaborator_id: str,
    namespace: str = Depends(get_namespace),
    service: OccupancyService = Depends(get_occupancy_service),
) -> dict[str, Any]:
    try:
        return service.lookup(namespace, collaborator_id)
    except HousingError as exc:
        raise to_http_exception(exc, "look up assignment") from exc
    except Exception as exc:  # pragma: no cover - defensive fallback
        raise unexpected_failure("look up assignment") from exc


@router.put("/palaces/{palace_id}/rooms/{room_id}/pre_checkin", status_code=status.HTTP_200_OK)
async def set_pre_checkin(
    palace_id: str,
    room_id: str,
    payload: PreCheckinRequest,
    namespace: str = Depends(get_namespace),
    service: OccupancyService = Depends(get_occupancy_service),
) -> dict[str, Any]:
    try:
        return service.set_pre_checkin(
            namespace,
            RoomRef(palace_id=palace_id, room_id=room_id),
            checkin_date=payload.checkin_date,
            guest_name=payload.guest_name,
            notes=payload.notes,
        )
    except HousingError as exc:
        raise to_http_exception(exc, "set pre-checkin") from exc
    except Exception as exc:  # pragma: no cover - defensive fallback
        raise unexpected_failure("set pre-checkin") from exc


@router.delete("/palaces/{palace_id}/rooms/{room_id}/pre_checkin", status_code=status.HTTP_200_OK)
async def clear_pre_checkin(
    palace_id: str,
    room_id: str,
    namespace: str = Depends(get_namespace),
    service: OccupancyService = Depends(get_occupancy_service),
) -> dict[str, Any]:
    try:
        return service.clear_pre_checkin(namespace, RoomRef(palace_id=palace_id, room_id=room_id))
    except HousingError as exc:
        raise to_http_exception(exc, "clear pre-checkin") from exc
    except Exception as exc:  # pragma: no cover - defensive fallback
        raise unexpected_failure("clear pre-checkin") from exc
