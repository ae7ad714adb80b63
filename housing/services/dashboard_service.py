"""Read-only overview aggregating occupancy, staff and maintenance data."""

from __future__ import annotations

from typing import Any, Optional

import pandas as pd

from housing.domain.lookup import iter_dataset_rooms
from housing.domain.models import RoomStatus, TenantDataset, format_timestamp
from housing.domain.serialization import movement_to_dict
from housing.services.apartment_service import compute_property_stats
from housing.services.collaborator_service import collaborator_summary
from housing.services.movement_service import today_summary
from housing.utils.config import Settings, get_settings


UNDEFINED_GROUP = "Sin definir"

AREA_LABELS = {
    "room": "Habitación",
    "bathroom": "Baños",
    "common": "Zona común",
}


def occupancy_breakdown(dataset: TenantDataset, attribute: str, label_key: str) -> list[dict[str, Any]]:
    """Active collaborators and distinct rooms held, grouped by a directory field."""
    rooms_by_collaborator: dict[str, list[str]] = {}
    for location in iter_dataset_rooms(dataset):
        for collaborator_id in location.room.collaborator_ids:
            rooms_by_collaborator.setdefault(collaborator_id, []).append(location.room.id)

    rows = []
    for collaborator in dataset.collaborators:
        if not collaborator.active:
            continue
        key = str(getattr(collaborator, attribute) or "").strip() or UNDEFINED_GROUP
        room_ids = rooms_by_collaborator.get(collaborator.id) or [None]
        for room_id in room_ids:
            rows.append({"group": key, "collaborator_id": collaborator.id, "room_id": room_id})
    if not rows:
        return []

    frame = pd.DataFrame(rows, columns=["group", "collaborator_id", "room_id"])
    grouped = (
        frame.groupby("group", sort=False)
        .agg(
            activeCollaborators=("collaborator_id", "nunique"),
            roomsAssigned=("room_id", "nunique"),
        )
        .reset_index()
        .sort_values(
            ["roomsAssigned", "activeCollaborators"],
            ascending=[False, False],
            kind="stable",
        )
    )
    return [
        {
            label_key: str(row.group),
            "activeCollaborators": int(row.activeCollaborators),
            "roomsAssigned": int(row.roomsAssigned),
        }
        for row in grouped.itertuples(index=False)
    ]


def maintenance_alerts(dataset: TenantDataset) -> list[dict[str, Any]]:
    """Out-of-service apartments as errors, rooms in maintenance as warnings."""
    alerts: list[dict[str, Any]] = []
    seen_apartments: set[str] = set()
    for location in iter_dataset_rooms(dataset):
        palace, floor, apartment, room = (
            location.palace,
            location.floor,
            location.apartment,
            location.room,
        )
        base = {
            "palaceId": palace.id,
            "palaceName": palace.name,
            "floorId": floor.id,
            "floorName": floor.name,
            "apartmentId": apartment.id,
            "apartmentName": apartment.name,
        }
        if apartment.is_out_of_service and apartment.id not in seen_apartments:
            seen_apartments.add(apartment.id)
            alerts.append(
                {
                    "id": f"{palace.id}-{floor.id}-{apartment.id}-out-of-service",
                    "level": "error",
                    "message": f"{apartment.name} fuera de servicio",
                    "note": apartment.out_of_service_note,
                    "timestamp": palace.updated_at,
                    "status": apartment.status.value,
                    "roomId": None,
                    "roomName": None,
                    **base,
                }
            )
        if room.status == RoomStatus.MAINTENANCE:
            parts = [f"{room.name} en mantenimiento"]
            area_label = AREA_LABELS.get(room.maintenance_area_type, "")
            if area_label:
                parts.append(f"({area_label})")
            if room.maintenance_zone:
                parts.append(f"• Zona: {room.maintenance_zone}")
            alerts.append(
                {
                    "id": f"{palace.id}-{floor.id}-{apartment.id}-{room.id}",
                    "level": "warning",
                    "message": " ".join(parts),
                    "note": room.maintenance_note,
                    "timestamp": room.maintenance_updated_at or palace.updated_at,
                    "status": room.status.value,
                    "roomId": room.id,
                    "roomName": room.name,
                    "maintenanceZone": room.maintenance_zone,
                    "maintenanceAreaType": room.maintenance_area_type,
                    **base,
                }
            )

    alerts.sort(key=lambda alert: alert["timestamp"], reverse=True)
    for alert in alerts:
        alert["timestamp"] = format_timestamp(alert["timestamp"])
    return alerts


class DashboardService:
    """Builds the tenant overview in one pass over the dataset."""

    def __init__(self, settings: Optional[Settings] = None) -> None:
        self._settings = settings or get_settings()

    def overview(self, dataset: TenantDataset, recent_limit: Optional[int] = None) -> dict[str, Any]:
        limit = recent_limit or self._settings.dashboard_recent_movements_limit
        return {
            "namespace": dataset.namespace,
            "stats": compute_property_stats(dataset),
            "collaborators": collaborator_summary(dataset),
            "occupancyByDepartment": occupancy_breakdown(dataset, "departamento", "department"),
            "occupancyByPosition": occupancy_breakdown(dataset, "posicion", "position"),
            "alerts": maintenance_alerts(dataset),
            "movementsToday": today_summary(dataset),
            "recentMovements": [
                movement_to_dict(movement)
                for movement in dataset.collaborator_movements[: max(limit, 0)]
            ],
        }
