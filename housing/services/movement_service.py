"""Collaborator movement log: recording, filtering and daily summaries."""

from __future__ import annotations

from datetime import date, datetime, timedelta, timezone
from typing import Optional

from housing.domain.identifiers import generate_id
from housing.domain.lookup import RoomLocation
from housing.domain.models import MovementRecord, MovementType, TenantDataset, utc_now


def _room_label(location: Optional[RoomLocation]) -> str:
    if location is None:
        return ""
    return " - ".join(part for part in (location.room.name, location.palace.name) if part)


def assignment_note(target: RoomLocation, previous: Optional[RoomLocation] = None) -> str:
    if previous is not None and previous.room.id != target.room.id:
        source_label = _room_label(previous)
        return f"Reasignado desde {source_label}" if source_label else "Reasignación registrada"
    target_label = _room_label(target)
    return f"Asignado a {target_label}" if target_label else "Asignación registrada"


def unassignment_note(location: Optional[RoomLocation]) -> str:
    label = _room_label(location)
    return f"Desasignado de {label}" if label else "Desasignación registrada"


def record_movement(
    dataset: TenantDataset,
    movement_type: MovementType,
    collaborator_id: str,
    location: Optional[RoomLocation] = None,
    note: str = "",
    timestamp: Optional[datetime] = None,
) -> MovementRecord:
    """Append a movement to the tenant log, keeping it newest first."""
    collaborator = dataset.collaborator_directory().get(collaborator_id)
    record = MovementRecord(
        id=generate_id("mov"),
        type=movement_type,
        timestamp=timestamp or utc_now(),
        collaborator_id=collaborator_id,
        collaborator_codigo=collaborator.codigo if collaborator else "",
        collaborator_name=collaborator.full_name if collaborator else collaborator_id,
        department=collaborator.departamento if collaborator else "",
        position=collaborator.posicion if collaborator else "",
        room=location.context() if location is not None else None,
        note=note,
    )
    dataset.collaborator_movements.insert(0, record)
    dataset.collaborator_movements.sort(key=lambda item: item.timestamp, reverse=True)
    return record


def _day_start(value: date) -> datetime:
    return datetime(value.year, value.month, value.day, tzinfo=timezone.utc)


def filter_movements(
    dataset: TenantDataset,
    *,
    date_from: Optional[date] = None,
    date_to: Optional[date] = None,
    limit: Optional[int] = None,
) -> tuple[list[MovementRecord], int]:
    """Return ``(page, total)``; ``date_to`` includes the whole end day."""
    lower = _day_start(date_from) if date_from else None
    upper = _day_start(date_to) + timedelta(days=1) if date_to else None
    filtered = [
        movement
        for movement in dataset.collaborator_movements
        if (lower is None or movement.timestamp >= lower)
        and (upper is None or movement.timestamp < upper)
    ]
    filtered.sort(key=lambda item: item.timestamp, reverse=True)
    page = filtered[:limit] if limit and limit > 0 else filtered
    return page, len(filtered)


def clear_movements(dataset: TenantDataset) -> int:
    removed = len(dataset.collaborator_movements)
    dataset.collaborator_movements = []
    return removed


def today_summary(dataset: TenantDataset, today: Optional[date] = None) -> dict[str, int]:
    current_day = today or utc_now().date()
    summary = {movement_type.value: 0 for movement_type in MovementType}
    for movement in dataset.collaborator_movements:
        if movement.timestamp.astimezone(timezone.utc).date() == current_day:
            summary[movement.type.value] += 1
    return summary
