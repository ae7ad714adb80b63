"""Conversion between domain objects and plain camelCase structures.

The same shapes are used for API responses and for tenant snapshots handed to
an external store. Room collaborators are derived from the directory on the
way out and never read back in; ``collaboratorIds`` is the stored truth.
"""

from __future__ import annotations

from typing import Any, Callable, Iterable, Mapping, Optional

from housing.domain.constraints import available_slots
from housing.domain.errors import ValidationError
from housing.domain.identifiers import generate_id, parse_entity_id, resolve_entity_id
from housing.domain.models import (
    Apartment,
    ApartmentStatus,
    Collaborator,
    Floor,
    MovementRecord,
    MovementType,
    Palace,
    PreCheckin,
    Room,
    RoomContext,
    RoomStatus,
    TenantDataset,
    format_timestamp,
    parse_timestamp,
    utc_now,
)
from housing.domain.room_state import normalize_area_type


DEFAULT_NOTE_MAX_LENGTH = 320

IdResolver = Callable[[object, str], str]


def _persisted_or_new(raw: object, prefix: str) -> str:
    return resolve_entity_id(parse_entity_id(raw), prefix)


def _require_persisted(raw: object, prefix: str) -> str:
    text = str(raw or "").strip()
    if not text:
        raise ValidationError(f"Snapshot {prefix} entry is missing its id")
    return text


def _text(value: object) -> str:
    return value.strip() if isinstance(value, str) else ""


def _positive_int(value: object, field_name: str, default: Optional[int] = None) -> int:
    if value is None and default is not None:
        return default
    try:
        number = int(value)  # type: ignore[arg-type]
    except (TypeError, ValueError) as exc:
        raise ValidationError(f"{field_name} must be an integer") from exc
    if number < 1:
        raise ValidationError(f"{field_name} must be >= 1")
    return number


def _count(value: object, field_name: str) -> int:
    if value is None or value == "":
        return 0
    try:
        number = int(value)  # type: ignore[arg-type]
    except (TypeError, ValueError) as exc:
        raise ValidationError(f"{field_name} must be an integer") from exc
    return max(number, 0)


def _mapping(value: object, label: str) -> Mapping[str, Any]:
    if not isinstance(value, Mapping):
        raise ValidationError(f"{label} entry must be an object")
    return value


def _entries(value: object, label: str) -> list[Mapping[str, Any]]:
    if value is None:
        return []
    if not isinstance(value, list):
        raise ValidationError(f"{label} must be a list")
    return [_mapping(item, label) for item in value]


def _unique_ids(taken: Iterable[str]) -> IdResolver:
    """Resolver that reissues any id already used elsewhere in the tenant or payload."""
    used = set(taken)

    def resolve(raw: object, prefix: str) -> str:
        resolved = _persisted_or_new(raw, prefix)
        if resolved in used:
            resolved = generate_id(prefix)
        used.add(resolved)
        return resolved

    return resolve


# ---------------------------------------------------------------------------
# Outbound
# ---------------------------------------------------------------------------


def collaborator_to_dict(collaborator: Collaborator) -> dict[str, Any]:
    return {
        "id": collaborator.id,
        "codigo": collaborator.codigo,
        "nombre": collaborator.nombre,
        "apellido": collaborator.apellido,
        "departamento": collaborator.departamento,
        "posicion": collaborator.posicion,
        "active": collaborator.active,
    }


def pre_checkin_to_dict(pre_checkin: Optional[PreCheckin]) -> Optional[dict[str, Any]]:
    if pre_checkin is None:
        return None
    return {
        "guestName": pre_checkin.guest_name,
        "checkinDate": format_timestamp(pre_checkin.checkin_date),
        "notes": pre_checkin.notes,
    }


def room_to_dict(
    room: Room,
    directory: Optional[Mapping[str, Collaborator]] = None,
) -> dict[str, Any]:
    payload: dict[str, Any] = {
        "id": room.id,
        "name": room.name,
        "capacity": room.capacity,
        "guests": room.guests,
        "status": room.status.value,
        "collaboratorIds": list(room.collaborator_ids),
        "maintenanceNote": room.maintenance_note,
        "maintenanceZone": room.maintenance_zone,
        "maintenanceAreaType": room.maintenance_area_type,
        "maintenanceUpdatedAt": format_timestamp(room.maintenance_updated_at),
        "preCheckin": pre_checkin_to_dict(room.pre_checkin),
    }
    if directory is not None:
        payload["collaborators"] = [
            collaborator_to_dict(directory[collaborator_id])
            for collaborator_id in room.collaborator_ids
            if collaborator_id in directory
        ]
        payload["availableSlots"] = available_slots(room)
    return payload


def apartment_to_dict(
    apartment: Apartment,
    directory: Optional[Mapping[str, Collaborator]] = None,
) -> dict[str, Any]:
    return {
        "id": apartment.id,
        "number": apartment.number,
        "name": apartment.name,
        "status": apartment.status.value,
        "outOfServiceNote": apartment.out_of_service_note,
        "rooms": [room_to_dict(room, directory) for room in apartment.rooms],
    }


def floor_to_dict(
    floor: Floor,
    directory: Optional[Mapping[str, Collaborator]] = None,
) -> dict[str, Any]:
    return {
        "id": floor.id,
        "number": floor.number,
        "name": floor.name,
        "apartments": [apartment_to_dict(apartment, directory) for apartment in floor.apartments],
    }


def palace_to_dict(
    palace: Palace,
    directory: Optional[Mapping[str, Collaborator]] = None,
) -> dict[str, Any]:
    return {
        "id": palace.id,
        "name": palace.name,
        "seriesNumber": palace.series_number,
        "createdAt": format_timestamp(palace.created_at),
        "updatedAt": format_timestamp(palace.updated_at),
        "floors": [floor_to_dict(floor, directory) for floor in palace.floors],
    }


def room_context_to_dict(context: Optional[RoomContext]) -> dict[str, Any]:
    if context is None:
        return {
            "palaceId": None,
            "palaceName": "",
            "floorId": None,
            "floorName": "",
            "apartmentId": None,
            "apartmentName": "",
            "roomId": None,
            "roomName": "",
        }
    return {
        "palaceId": context.palace_id,
        "palaceName": context.palace_name,
        "floorId": context.floor_id,
        "floorName": context.floor_name,
        "apartmentId": context.apartment_id,
        "apartmentName": context.apartment_name,
        "roomId": context.room_id,
        "roomName": context.room_name,
    }


def movement_to_dict(movement: MovementRecord) -> dict[str, Any]:
    payload = {
        "id": movement.id,
        "type": movement.type.value,
        "timestamp": format_timestamp(movement.timestamp),
        "collaboratorId": movement.collaborator_id,
        "collaboratorCodigo": movement.collaborator_codigo,
        "collaboratorNombre": movement.collaborator_name,
        "department": movement.department,
        "position": movement.position,
        "note": movement.note,
    }
    payload.update(room_context_to_dict(movement.room))
    return payload


def dataset_to_dict(dataset: TenantDataset) -> dict[str, Any]:
    """Snapshot shape for an external store."""
    return {
        "namespace": dataset.namespace,
        "palaces": [palace_to_dict(palace) for palace in dataset.palaces],
        "collaborators": [collaborator_to_dict(item) for item in dataset.collaborators],
        "collaboratorMovements": [
            movement_to_dict(movement) for movement in dataset.collaborator_movements
        ],
    }


# ---------------------------------------------------------------------------
# Inbound
# ---------------------------------------------------------------------------


def pre_checkin_from_dict(data: object) -> Optional[PreCheckin]:
    if not data:
        return None
    entry = _mapping(data, "preCheckin")
    date_source = entry.get("checkinDate") or entry.get("date") or entry.get("scheduledAt")
    guest_name = _text(entry.get("guestName"))
    return PreCheckin(
        checkin_date=parse_timestamp(date_source, "checkinDate"),
        guest_name=guest_name or None,
        notes=_text(entry.get("notes")),
    )


def _room_collaborator_ids(data: Mapping[str, Any]) -> list[str]:
    candidates: list[object] = []
    if isinstance(data.get("collaboratorIds"), list):
        candidates.extend(data["collaboratorIds"])
    if isinstance(data.get("collaborators"), list):
        candidates.extend(
            item.get("id") if isinstance(item, Mapping) else item
            for item in data["collaborators"]
        )
    ordered: list[str] = []
    for candidate in candidates:
        text = str(candidate or "").strip()
        if text and text not in ordered:
            ordered.append(text)
    return ordered


def room_from_dict(data: Mapping[str, Any], resolve_id: IdResolver) -> Room:
    raw_status = str(data.get("status") or RoomStatus.AVAILABLE.value).strip().lower()
    try:
        status = RoomStatus(raw_status)
    except ValueError as exc:
        raise ValidationError(f"Unknown room status {raw_status!r}") from exc
    in_maintenance = status == RoomStatus.MAINTENANCE
    maintenance_updated_at = data.get("maintenanceUpdatedAt")
    return Room(
        id=resolve_id(data.get("id"), "room"),
        name=_text(data.get("name")),
        capacity=_positive_int(data.get("capacity"), "capacity", default=2),
        guests=_count(data.get("guests"), "guests"),
        status=status,
        collaborator_ids=_room_collaborator_ids(data),
        maintenance_note=_text(data.get("maintenanceNote")) if in_maintenance else "",
        maintenance_zone=_text(data.get("maintenanceZone")) if in_maintenance else "",
        maintenance_area_type=(
            normalize_area_type(data.get("maintenanceAreaType")) if in_maintenance else ""
        ),
        maintenance_updated_at=(
            parse_timestamp(maintenance_updated_at, "maintenanceUpdatedAt")
            if in_maintenance and maintenance_updated_at
            else None
        ),
        pre_checkin=pre_checkin_from_dict(data.get("preCheckin")),
    )


def apartment_from_dict(
    data: Mapping[str, Any],
    resolve_id: IdResolver,
    note_max_length: int = DEFAULT_NOTE_MAX_LENGTH,
) -> Apartment:
    raw_status = _text(data.get("status")).lower().replace("-", "_").replace(" ", "_")
    status = (
        ApartmentStatus.OUT_OF_SERVICE
        if raw_status == ApartmentStatus.OUT_OF_SERVICE.value
        else ApartmentStatus.ACTIVE
    )
    note = _text(data.get("outOfServiceNote"))[:note_max_length]
    return Apartment(
        id=resolve_id(data.get("id"), "apto"),
        number=_positive_int(data.get("number") or 1, "number"),
        name=_text(data.get("name")),
        status=status,
        out_of_service_note=note if status == ApartmentStatus.OUT_OF_SERVICE else "",
        rooms=[
            room_from_dict(room, resolve_id) for room in _entries(data.get("rooms"), "rooms")
        ],
    )


def floor_from_dict(
    data: Mapping[str, Any],
    resolve_id: IdResolver,
    note_max_length: int = DEFAULT_NOTE_MAX_LENGTH,
) -> Floor:
    return Floor(
        id=resolve_id(data.get("id"), "floor"),
        number=_positive_int(data.get("number") or 1, "number"),
        name=_text(data.get("name")),
        apartments=[
            apartment_from_dict(apartment, resolve_id, note_max_length)
            for apartment in _entries(data.get("apartments"), "apartments")
        ],
    )


def palace_from_dict(
    data: Mapping[str, Any],
    resolve_id: IdResolver = _require_persisted,
    note_max_length: int = DEFAULT_NOTE_MAX_LENGTH,
) -> Palace:
    created_at = data.get("createdAt")
    updated_at = data.get("updatedAt")
    return Palace(
        id=resolve_id(data.get("id"), "palace"),
        name=_text(data.get("name")),
        series_number=_positive_int(data.get("seriesNumber"), "seriesNumber", default=1),
        floors=[
            floor_from_dict(floor, resolve_id, note_max_length)
            for floor in _entries(data.get("floors"), "floors")
        ],
        created_at=parse_timestamp(created_at, "createdAt") if created_at else utc_now(),
        updated_at=parse_timestamp(updated_at, "updatedAt") if updated_at else utc_now(),
    )


def palace_from_payload(
    data: Mapping[str, Any],
    note_max_length: int = DEFAULT_NOTE_MAX_LENGTH,
    taken_ids: Iterable[str] = (),
) -> Palace:
    """Parse a client-submitted subtree.

    Pending entities receive fresh ids, and so does any entity repeating an id
    seen earlier in the payload or listed in ``taken_ids``.
    """
    return palace_from_dict(data, _unique_ids(taken_ids), note_max_length)


def collaborator_from_dict(data: Mapping[str, Any]) -> Collaborator:
    codigo = _text(data.get("codigo"))
    nombre = _text(data.get("nombre"))
    apellido = _text(data.get("apellido"))
    if not codigo:
        raise ValidationError("Collaborator codigo is required")
    if not nombre and not apellido:
        raise ValidationError(f"Collaborator {codigo} needs a nombre or apellido")
    active = data.get("active", data.get("activo", True))
    return Collaborator(
        id=_persisted_or_new(data.get("id"), "colab"),
        codigo=codigo,
        nombre=nombre,
        apellido=apellido,
        departamento=_text(data.get("departamento")),
        posicion=_text(data.get("posicion")),
        active=bool(active),
    )


def _room_context_from_dict(data: Mapping[str, Any]) -> Optional[RoomContext]:
    if not data.get("roomId"):
        return None
    return RoomContext(
        palace_id=str(data.get("palaceId") or ""),
        palace_name=_text(data.get("palaceName")),
        floor_id=str(data.get("floorId") or ""),
        floor_name=_text(data.get("floorName")),
        apartment_id=str(data.get("apartmentId") or ""),
        apartment_name=_text(data.get("apartmentName")),
        room_id=str(data.get("roomId")),
        room_name=_text(data.get("roomName")),
    )


def movement_from_dict(data: Mapping[str, Any]) -> MovementRecord:
    try:
        movement_type = MovementType(str(data.get("type") or "").lower())
    except ValueError as exc:
        raise ValidationError(f"Unknown movement type {data.get('type')!r}") from exc
    return MovementRecord(
        id=_require_persisted(data.get("id"), "movement"),
        type=movement_type,
        timestamp=parse_timestamp(data.get("timestamp"), "timestamp"),
        collaborator_id=str(data.get("collaboratorId") or ""),
        collaborator_codigo=_text(data.get("collaboratorCodigo")),
        collaborator_name=_text(data.get("collaboratorNombre")),
        department=_text(data.get("department")),
        position=_text(data.get("position")),
        room=_room_context_from_dict(data),
        note=_text(data.get("note")),
    )


def dataset_from_dict(
    data: Mapping[str, Any],
    namespace: str,
    note_max_length: int = DEFAULT_NOTE_MAX_LENGTH,
) -> TenantDataset:
    """Rebuild a tenant dataset from a snapshot produced by :func:`dataset_to_dict`."""
    return TenantDataset(
        namespace=namespace,
        palaces=[
            palace_from_dict(palace, note_max_length=note_max_length)
            for palace in _entries(data.get("palaces"), "palaces")
        ],
        collaborators=[
            collaborator_from_dict(item)
            for item in _entries(data.get("collaborators"), "collaborators")
        ],
        collaborator_movements=[
            movement_from_dict(item)
            for item in _entries(data.get("collaboratorMovements"), "collaboratorMovements")
        ],
    )
