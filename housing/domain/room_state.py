"""Room status transitions and their side effects on guests and maintenance fields."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from housing.domain.errors import ValidationError
from housing.domain.models import MaintenanceAreaType, Room, RoomStatus, utc_now


# occupied -> maintenance is allowed only through this explicit set, which clears guests first.
ALLOWED_TRANSITIONS: dict[RoomStatus, frozenset[RoomStatus]] = {
    RoomStatus.AVAILABLE: frozenset(
        {RoomStatus.AVAILABLE, RoomStatus.OCCUPIED, RoomStatus.MAINTENANCE}
    ),
    RoomStatus.OCCUPIED: frozenset(
        {RoomStatus.OCCUPIED, RoomStatus.AVAILABLE, RoomStatus.MAINTENANCE}
    ),
    RoomStatus.MAINTENANCE: frozenset({RoomStatus.MAINTENANCE, RoomStatus.AVAILABLE}),
}


@dataclass(frozen=True)
class MaintenanceDetails:
    note: str
    zone: str = ""
    area_type: str = MaintenanceAreaType.ROOM.value
    updated_at: Optional[datetime] = None


def parse_room_status(value: object) -> RoomStatus:
    raw = value.value if isinstance(value, RoomStatus) else str(value or "").strip().lower()
    try:
        return RoomStatus(raw)
    except ValueError as exc:
        allowed = ", ".join(status.value for status in RoomStatus)
        raise ValidationError(f"Room status must be one of {allowed}, got {value!r}") from exc


def normalize_area_type(value: object) -> str:
    """Return a known maintenance area type or an empty string."""
    raw = str(value or "").strip().lower()
    allowed = {item.value for item in MaintenanceAreaType}
    return raw if raw in allowed else ""


def clear_maintenance(room: Room) -> None:
    room.maintenance_note = ""
    room.maintenance_zone = ""
    room.maintenance_area_type = ""
    room.maintenance_updated_at = None


def _validate_maintenance(details: Optional[MaintenanceDetails]) -> MaintenanceDetails:
    if details is None:
        raise ValidationError("Maintenance status requires a note, zone and area type")
    note = details.note.strip()
    if not note:
        raise ValidationError("maintenanceNote must not be empty")
    area_type = normalize_area_type(details.area_type)
    if not area_type:
        allowed = ", ".join(item.value for item in MaintenanceAreaType)
        raise ValidationError(f"maintenanceAreaType must be one of {allowed}")
    return MaintenanceDetails(
        note=note,
        zone=details.zone.strip(),
        area_type=area_type,
        updated_at=details.updated_at,
    )


def set_room_status(
    room: Room,
    next_status: RoomStatus | str,
    *,
    maintenance: Optional[MaintenanceDetails] = None,
) -> Room:
    """Apply a status transition in place and return the room.

    ``available`` and ``maintenance`` force zero guests; ``occupied`` seeds one
    guest when the room was empty. Collaborator ids are never touched here.
    """
    target = parse_room_status(next_status)
    if target not in ALLOWED_TRANSITIONS[room.status]:
        raise ValidationError(
            f"Room {room.id} cannot go from {room.status.value} to {target.value}; "
            "set it available first"
        )

    if target == RoomStatus.MAINTENANCE:
        details = _validate_maintenance(maintenance)
        room.guests = 0
        room.status = RoomStatus.MAINTENANCE
        room.maintenance_note = details.note
        room.maintenance_zone = details.zone
        room.maintenance_area_type = details.area_type
        room.maintenance_updated_at = details.updated_at or utc_now()
        return room

    clear_maintenance(room)
    if target == RoomStatus.AVAILABLE:
        room.guests = 0
        room.status = RoomStatus.AVAILABLE
        return room

    if room.guests == 0:
        room.guests = min(1, room.capacity)
    room.guests = max(room.guests, len(room.collaborator_ids))
    room.status = RoomStatus.OCCUPIED
    return room


def sync_occupancy(room: Room) -> Room:
    """Recompute guests, status and capacity from the assigned collaborators.

    A room in maintenance keeps its status and zero guests.
    """
    count = len(room.collaborator_ids)
    if room.occupant_count > room.capacity:
        room.capacity = room.occupant_count
    if room.status == RoomStatus.MAINTENANCE:
        room.guests = 0
        return room
    room.guests = count
    room.status = RoomStatus.OCCUPIED if count > 0 else RoomStatus.AVAILABLE
    clear_maintenance(room)
    return room
