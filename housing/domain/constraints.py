"""Domain-level rules: slot limits, policy validation, invariant checks."""

from __future__ import annotations

from dataclasses import dataclass

from housing.domain.errors import CapacityError, ValidationError
from housing.domain.lookup import iter_entity_ids, iter_room_locations
from housing.domain.models import Room, RoomStatus, TenantDataset


MAX_SLOTS = 2

OUT_OF_SERVICE_POLICIES = ("display_only", "cascade")
ASSIGNMENT_SCOPES = ("tenant", "building")


@dataclass(frozen=True)
class StructureConfig:
    floors: int
    apartments_per_floor: int
    rooms_per_apartment: int
    capacity_per_room: int


@dataclass(frozen=True)
class PolicyConfig:
    out_of_service_policy: str
    assignment_uniqueness_scope: str
    apartment_note_max_length: int

    @classmethod
    def from_settings(cls, settings: object) -> "PolicyConfig":
        return cls(
            out_of_service_policy=getattr(settings, "out_of_service_policy"),
            assignment_uniqueness_scope=getattr(settings, "assignment_uniqueness_scope"),
            apartment_note_max_length=getattr(settings, "apartment_note_max_length"),
        )


def validate_structure_config(config: StructureConfig) -> None:
    if config.floors < 1:
        raise ValidationError("floors must be >= 1")
    if config.apartments_per_floor < 1:
        raise ValidationError("apartments_per_floor must be >= 1")
    if config.rooms_per_apartment < 1:
        raise ValidationError("rooms_per_apartment must be >= 1")
    if config.capacity_per_room < 1:
        raise ValidationError("capacity_per_room must be >= 1")


def validate_policy_config(config: PolicyConfig) -> None:
    if config.out_of_service_policy not in OUT_OF_SERVICE_POLICIES:
        raise ValidationError(
            f"out_of_service_policy must be one of {', '.join(OUT_OF_SERVICE_POLICIES)}"
        )
    if config.assignment_uniqueness_scope not in ASSIGNMENT_SCOPES:
        raise ValidationError(
            f"assignment_uniqueness_scope must be one of {', '.join(ASSIGNMENT_SCOPES)}"
        )
    if config.apartment_note_max_length <= 0:
        raise ValidationError("apartment_note_max_length must be > 0")


def available_slots(room: Room) -> int:
    """Free slots after collaborators and a pending pre-checkin."""
    return max(MAX_SLOTS - room.occupant_count, 0)


def check_room_invariants(room: Room) -> None:
    if len(set(room.collaborator_ids)) != len(room.collaborator_ids):
        raise ValidationError(f"Room {room.id} lists a collaborator more than once")
    if room.occupant_count > MAX_SLOTS:
        raise CapacityError(
            f"Room {room.id} holds {room.occupant_count} occupants; the limit is {MAX_SLOTS}"
        )
    if room.capacity < max(1, room.occupant_count):
        raise CapacityError(
            f"Room {room.id} capacity {room.capacity} is below its {room.occupant_count} occupants"
        )
    if room.status == RoomStatus.OCCUPIED:
        if room.guests < max(1, len(room.collaborator_ids)) or room.guests > room.capacity:
            raise ValidationError(
                f"Room {room.id} is occupied with an inconsistent guest count {room.guests}"
            )
    elif room.guests != 0:
        raise ValidationError(f"Room {room.id} is {room.status.value} but reports {room.guests} guests")


def check_dataset_invariants(dataset: TenantDataset) -> None:
    seen: set[str] = set()
    for palace in dataset.palaces:
        for entity_id in iter_entity_ids(palace):
            if entity_id in seen:
                raise ValidationError(
                    f"Id {entity_id} is used by more than one entity",
                    code="duplicate_id",
                )
            seen.add(entity_id)
        for location in iter_room_locations(palace):
            check_room_invariants(location.room)
