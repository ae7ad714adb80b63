"""Request DTOs shared by the controllers; the wire format is camelCase."""

from __future__ import annotations

from datetime import date, datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

from housing.domain.models import ApartmentStatus, MaintenanceAreaType, RoomStatus


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class CreatePalaceRequest(CamelModel):
    series_number: Optional[int] = Field(default=None, ge=1)
    floors: Optional[int] = Field(default=None, ge=1, le=100)
    apartments_per_floor: Optional[int] = Field(default=None, ge=1, le=52)
    rooms_per_apartment: Optional[int] = Field(default=None, ge=1, le=20)
    capacity_per_room: Optional[int] = Field(default=None, ge=1, le=20)
    name_prefix: Optional[str] = Field(default=None, max_length=60)
    custom_name: Optional[str] = Field(default=None, max_length=120)


class ApartmentStatusRequest(CamelModel):
    status: str
    note: Optional[str] = None

    @field_validator("status")
    @classmethod
    def validate_status(cls, value: str) -> str:
        normalized = value.strip().lower().replace("-", "_").replace(" ", "_")
        allowed = {item.value for item in ApartmentStatus}
        if normalized not in allowed:
            raise ValueError(f"status must be one of {', '.join(sorted(allowed))}")
        return normalized


class RoomUpdateRequest(CamelModel):
    capacity: Optional[int] = Field(default=None, ge=1, le=20)
    status: Optional[str] = None
    maintenance_note: Optional[str] = None
    maintenance_zone: Optional[str] = None
    maintenance_area_type: Optional[str] = None

    @field_validator("status")
    @classmethod
    def validate_status(cls, value: Optional[str]) -> Optional[str]:
        if value is None:
            return None
        normalized = value.strip().lower()
        allowed = {item.value for item in RoomStatus}
        if normalized not in allowed:
            raise ValueError(f"status must be one of {', '.join(sorted(allowed))}")
        return normalized

    @field_validator("maintenance_area_type")
    @classmethod
    def validate_area_type(cls, value: Optional[str]) -> Optional[str]:
        if value is None:
            return None
        normalized = value.strip().lower()
        allowed = {item.value for item in MaintenanceAreaType}
        if normalized not in allowed:
            raise ValueError(f"maintenanceAreaType must be one of {', '.join(sorted(allowed))}")
        return normalized


class AssignRequest(CamelModel):
    collaborator_ids: list[str] = Field(default_factory=list, max_length=2)

    @field_validator("collaborator_ids")
    @classmethod
    def validate_ids(cls, value: list[str]) -> list[str]:
        for item in value:
            if not item or not item.strip():
                raise ValueError("collaboratorIds must not contain empty values")
        return [item.strip() for item in value]


class RoomRefPayload(CamelModel):
    palace_id: str = Field(min_length=1)
    room_id: str = Field(min_length=1)


class MoveRequest(CamelModel):
    collaborator_id: str = Field(min_length=1)
    source: RoomRefPayload = Field(alias="from")
    target: RoomRefPayload = Field(alias="to")


class PreCheckinRequest(CamelModel):
    checkin_date: datetime | date | str
    guest_name: Optional[str] = Field(default=None, max_length=120)
    notes: str = Field(default="", max_length=500)


class CollaboratorRecord(CamelModel):
    id: Optional[str] = None
    codigo: str = Field(min_length=1)
    nombre: str = ""
    apellido: str = ""
    departamento: str = ""
    posicion: str = ""
    active: bool = True

    @field_validator("codigo")
    @classmethod
    def validate_codigo(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("codigo must not be blank")
        return value.strip()


class CollaboratorSyncRequest(CamelModel):
    collaborators: list[CollaboratorRecord]


class TenantCreateRequest(CamelModel):
    namespace: str = Field(min_length=1, max_length=80, pattern=r"^\s*[A-Za-z0-9_.-]+\s*$")
    clone_from_default: bool = False


class LoginRequest(BaseModel):
    admin_token: str = Field(min_length=1)


class LoginResponse(BaseModel):
    access_token: str
    token_type: str = "bearer"


class TenantResponse(CamelModel):
    namespace: str
    access_token: Optional[str] = None


class TenantListResponse(CamelModel):
    namespaces: list[str]
    default_namespace: str
