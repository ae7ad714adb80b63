"""Domain models for the palace → floor → apartment → room hierarchy."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime, time, timezone
from enum import Enum
from typing import Optional

from housing.domain.errors import ValidationError


class RoomStatus(str, Enum):
    AVAILABLE = "available"
    OCCUPIED = "occupied"
    MAINTENANCE = "maintenance"


class ApartmentStatus(str, Enum):
    ACTIVE = "active"
    OUT_OF_SERVICE = "out_of_service"


class MaintenanceAreaType(str, Enum):
    ROOM = "room"
    BATHROOM = "bathroom"
    COMMON = "common"


class MovementType(str, Enum):
    ASSIGNMENT = "assignment"
    UNASSIGNMENT = "unassignment"
    RELOCATION = "relocation"


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def parse_timestamp(value: object, field_name: str = "timestamp") -> datetime:
    """Parse an ISO-8601 date or timestamp; naive values are taken as UTC."""
    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, date):
        parsed = datetime.combine(value, time.min)
    elif isinstance(value, str) and value.strip():
        try:
            parsed = datetime.fromisoformat(value.strip())
        except ValueError as exc:
            raise ValidationError(f"{field_name} is not a valid ISO-8601 timestamp: {value!r}") from exc
    else:
        raise ValidationError(f"{field_name} is required")
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed.astimezone(timezone.utc)


def format_timestamp(value: Optional[datetime]) -> Optional[str]:
    if value is None:
        return None
    return value.astimezone(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


@dataclass(frozen=True)
class PreCheckin:
    checkin_date: datetime
    guest_name: Optional[str] = None
    notes: str = ""


@dataclass
class Collaborator:
    id: str
    codigo: str
    nombre: str
    apellido: str
    departamento: str = ""
    posicion: str = ""
    active: bool = True

    @property
    def full_name(self) -> str:
        return f"{self.nombre} {self.apellido}".strip()


@dataclass
class Room:
    id: str
    name: str = ""
    capacity: int = 2
    guests: int = 0
    status: RoomStatus = RoomStatus.AVAILABLE
    collaborator_ids: list[str] = field(default_factory=list)
    maintenance_note: str = ""
    maintenance_zone: str = ""
    maintenance_area_type: str = ""
    maintenance_updated_at: Optional[datetime] = None
    pre_checkin: Optional[PreCheckin] = None

    @property
    def occupant_count(self) -> int:
        return len(self.collaborator_ids) + (1 if self.pre_checkin is not None else 0)


@dataclass
class Apartment:
    id: str
    number: int = 1
    name: str = ""
    status: ApartmentStatus = ApartmentStatus.ACTIVE
    out_of_service_note: str = ""
    rooms: list[Room] = field(default_factory=list)

    @property
    def is_out_of_service(self) -> bool:
        return self.status == ApartmentStatus.OUT_OF_SERVICE


@dataclass
class Floor:
    id: str
    number: int = 1
    name: str = ""
    apartments: list[Apartment] = field(default_factory=list)


@dataclass
class Palace:
    id: str
    name: str
    series_number: int = 1
    floors: list[Floor] = field(default_factory=list)
    created_at: datetime = field(default_factory=utc_now)
    updated_at: datetime = field(default_factory=utc_now)


@dataclass(frozen=True)
class RoomContext:
    """Where a room sits in the hierarchy; copied into movement records."""

    palace_id: str
    palace_name: str
    floor_id: str
    floor_name: str
    apartment_id: str
    apartment_name: str
    room_id: str
    room_name: str


@dataclass(frozen=True)
class MovementRecord:
    id: str
    type: MovementType
    timestamp: datetime
    collaborator_id: str
    collaborator_codigo: str
    collaborator_name: str
    department: str = ""
    position: str = ""
    room: Optional[RoomContext] = None
    note: str = ""


@dataclass
class TenantDataset:
    namespace: str
    palaces: list[Palace] = field(default_factory=list)
    collaborators: list[Collaborator] = field(default_factory=list)
    collaborator_movements: list[MovementRecord] = field(default_factory=list)

    def collaborator_directory(self) -> dict[str, Collaborator]:
        return {collaborator.id: collaborator for collaborator in self.collaborators}


@dataclass(frozen=True)
class RoomRef:
    palace_id: str
    room_id: str
