"""Structural edits of the palace → floor → apartment → room hierarchy."""

from __future__ import annotations

from typing import AbstractSet, Any, Mapping, Optional

from housing.domain.constraints import (
    MAX_SLOTS,
    PolicyConfig,
    StructureConfig,
    check_room_invariants,
    validate_policy_config,
    validate_structure_config,
)
from housing.domain.errors import (
    ApartmentOutOfServiceError,
    AssignmentConflictError,
    CapacityError,
    NotFoundError,
    StructuralError,
    ValidationError,
)
from housing.domain.identifiers import PersistedId, generate_id, parse_entity_id
from housing.domain.lookup import (
    RoomLocation,
    find_apartment,
    find_floor,
    find_palace,
    iter_entity_ids,
    iter_room_locations,
    locate_room,
)
from housing.domain.models import (
    Apartment,
    Floor,
    MovementType,
    Palace,
    Room,
    RoomRef,
    RoomStatus,
    TenantDataset,
    utc_now,
)
from housing.domain.normalization import normalize_palace
from housing.domain.room_state import (
    MaintenanceDetails,
    parse_room_status,
    set_room_status,
    sync_occupancy,
)
from housing.domain.serialization import palace_from_payload
from housing.services.movement_service import (
    assignment_note,
    record_movement,
    unassignment_note,
)
from housing.utils.config import Settings, get_settings
from housing.utils.logger import get_logger


logger = get_logger(__name__)


def _new_room(capacity: int) -> Room:
    return Room(id=generate_id("room"), capacity=capacity)


def _new_apartment(rooms_per_apartment: int, capacity: int) -> Apartment:
    return Apartment(
        id=generate_id("apto"),
        rooms=[_new_room(capacity) for _ in range(rooms_per_apartment)],
    )


def _new_floor(apartments_per_floor: int, rooms_per_apartment: int, capacity: int) -> Floor:
    return Floor(
        id=generate_id("floor"),
        apartments=[
            _new_apartment(rooms_per_apartment, capacity) for _ in range(apartments_per_floor)
        ],
    )


def _occupant_locations(palace: Palace, predicate=None) -> list[tuple[str, RoomLocation]]:
    pairs = []
    for location in iter_room_locations(palace):
        if predicate is not None and not predicate(location):
            continue
        for collaborator_id in location.room.collaborator_ids:
            pairs.append((collaborator_id, location))
    return pairs


class StructureService:
    """Creates, edits and removes palaces and their children.

    Every edit re-normalizes the palace it touched, so numbering and display
    names are always contiguous.
    """

    def __init__(self, settings: Optional[Settings] = None) -> None:
        self._settings = settings or get_settings()
        self.policy = PolicyConfig.from_settings(self._settings)
        validate_policy_config(self.policy)
        self.defaults = StructureConfig(
            floors=self._settings.structure_default_floors,
            apartments_per_floor=self._settings.structure_default_apartments_per_floor,
            rooms_per_apartment=self._settings.structure_default_rooms_per_apartment,
            capacity_per_room=self._settings.structure_default_room_capacity,
        )
        validate_structure_config(self.defaults)

    def _commit(self, dataset: TenantDataset, palace: Palace) -> Palace:
        normalized = normalize_palace(palace)
        normalized.updated_at = utc_now()
        for index, existing in enumerate(dataset.palaces):
            if existing.id == normalized.id:
                dataset.palaces[index] = normalized
                break
        else:
            dataset.palaces.append(normalized)
        return normalized

    def _evict(self, dataset: TenantDataset, pairs: list[tuple[str, RoomLocation]]) -> None:
        for collaborator_id, location in pairs:
            record_movement(
                dataset,
                MovementType.UNASSIGNMENT,
                collaborator_id,
                location,
                note=unassignment_note(location),
            )

    # ------------------------------------------------------------------
    # Palaces
    # ------------------------------------------------------------------

    def create_palace(
        self,
        dataset: TenantDataset,
        *,
        series_number: Optional[int] = None,
        floors: Optional[int] = None,
        apartments_per_floor: Optional[int] = None,
        rooms_per_apartment: Optional[int] = None,
        capacity_per_room: Optional[int] = None,
        name_prefix: Optional[str] = None,
        custom_name: Optional[str] = None,
    ) -> Palace:
        config = StructureConfig(
            floors=self.defaults.floors if floors is None else floors,
            apartments_per_floor=(
                self.defaults.apartments_per_floor
                if apartments_per_floor is None
                else apartments_per_floor
            ),
            rooms_per_apartment=(
                self.defaults.rooms_per_apartment
                if rooms_per_apartment is None
                else rooms_per_apartment
            ),
            capacity_per_room=(
                self.defaults.capacity_per_room if capacity_per_room is None else capacity_per_room
            ),
        )
        validate_structure_config(config)
        series = series_number if series_number is not None else len(dataset.palaces) + 1
        if series < 1:
            raise ValidationError("seriesNumber must be >= 1")

        prefix = (name_prefix or "").strip() or self._settings.palace_name_prefix
        name = (custom_name or "").strip() or f"{prefix} {series:02d}"
        palace = Palace(
            id=generate_id("palace"),
            name=name,
            series_number=series,
            floors=[
                _new_floor(
                    config.apartments_per_floor,
                    config.rooms_per_apartment,
                    config.capacity_per_room,
                )
                for _ in range(config.floors)
            ],
        )
        created = self._commit(dataset, palace)
        logger.info(
            "Palace created | namespace=%s palace=%s floors=%s apartments_per_floor=%s",
            dataset.namespace,
            created.id,
            config.floors,
            config.apartments_per_floor,
        )
        return created

    def delete_palace(self, dataset: TenantDataset, palace_id: str) -> Palace:
        palace = find_palace(dataset, palace_id)
        self._evict(dataset, _occupant_locations(palace))
        dataset.palaces = [item for item in dataset.palaces if item.id != palace_id]
        logger.info("Palace deleted | namespace=%s palace=%s", dataset.namespace, palace_id)
        return palace

    def update_palace(
        self,
        dataset: TenantDataset,
        palace_id: str,
        payload: Mapping[str, Any],
    ) -> Palace:
        """Replace a palace subtree with a client-edited version of it."""
        existing = find_palace(dataset, palace_id)
        payload_id = parse_entity_id(payload.get("id"))
        if isinstance(payload_id, PersistedId) and payload_id.value != palace_id:
            raise ValidationError(f"Payload id {payload_id.value} does not match palace {palace_id}")
        taken_ids = [
            entity_id
            for other in dataset.palaces
            if other.id != palace_id
            for entity_id in iter_entity_ids(other)
        ]
        candidate = palace_from_payload(
            {**payload, "id": palace_id},
            note_max_length=self.policy.apartment_note_max_length,
            taken_ids=taken_ids,
        )

        candidate.name = candidate.name or existing.name
        if payload.get("seriesNumber") is None:
            candidate.series_number = existing.series_number
        candidate.created_at = existing.created_at

        previous = {
            collaborator_id: location for collaborator_id, location in _occupant_locations(existing)
        }
        scheduled = {
            location.room.id
            for location in iter_room_locations(existing)
            if location.room.pre_checkin is not None
        }
        self._prepare_rooms(dataset, candidate, previous, scheduled)
        normalized = normalize_palace(candidate)
        current = {
            collaborator_id: location
            for collaborator_id, location in _occupant_locations(normalized)
        }

        updated = self._commit(dataset, normalized)
        for collaborator_id, location in previous.items():
            if collaborator_id not in current:
                self._evict(dataset, [(collaborator_id, location)])
        for collaborator_id, location in current.items():
            before = previous.get(collaborator_id)
            if before is not None and before.room.id == location.room.id:
                continue
            record_movement(
                dataset,
                MovementType.ASSIGNMENT,
                collaborator_id,
                location,
                note=assignment_note(location, before),
            )

        logger.info(
            "Palace updated | namespace=%s palace=%s assigned=%s",
            dataset.namespace,
            palace_id,
            len(current),
        )
        return updated

    def _prepare_rooms(
        self,
        dataset: TenantDataset,
        palace: Palace,
        previous: Mapping[str, RoomLocation],
        scheduled: AbstractSet[str],
    ) -> None:
        directory = dataset.collaborator_directory()
        seen: dict[str, str] = {}
        if self.policy.assignment_uniqueness_scope == "tenant":
            for other in dataset.palaces:
                if other.id == palace.id:
                    continue
                for collaborator_id, location in _occupant_locations(other):
                    seen.setdefault(collaborator_id, location.room.id)

        for location in iter_room_locations(palace):
            room = location.room
            for collaborator_id in room.collaborator_ids:
                if collaborator_id not in directory:
                    raise NotFoundError(f"Collaborator {collaborator_id} not found")
                if collaborator_id in seen:
                    raise AssignmentConflictError(
                        f"Collaborator {collaborator_id} is assigned to more than one room"
                    )
                seen[collaborator_id] = room.id
                before = previous.get(collaborator_id)
                is_new = before is None or before.room.id != room.id
                if is_new and location.apartment.is_out_of_service:
                    raise ApartmentOutOfServiceError(
                        f"Apartment {location.apartment.id} is out of service"
                    )
                if is_new and not directory[collaborator_id].active:
                    raise ValidationError(
                        f"Collaborator {directory[collaborator_id].codigo} is not active",
                        code="collaborator_inactive",
                    )
            if (
                room.pre_checkin is not None
                and room.id not in scheduled
                and location.apartment.is_out_of_service
            ):
                raise ApartmentOutOfServiceError(
                    f"Apartment {location.apartment.id} is out of service; "
                    f"room {room.id} cannot take a new pre-checkin"
                )
            if room.occupant_count > MAX_SLOTS:
                raise CapacityError(
                    f"Room {room.id} holds {room.occupant_count} occupants; the limit is {MAX_SLOTS}"
                )
            if room.capacity < room.occupant_count:
                raise CapacityError(
                    f"Room {room.id} capacity {room.capacity} is below its occupants"
                )
            if room.status == RoomStatus.MAINTENANCE and room.maintenance_updated_at is None:
                room.maintenance_updated_at = utc_now()
            sync_occupancy(room)
            check_room_invariants(room)

    # ------------------------------------------------------------------
    # Floors, apartments, rooms
    # ------------------------------------------------------------------

    def add_floor(self, dataset: TenantDataset, palace_id: str) -> Floor:
        palace = find_palace(dataset, palace_id)
        reference = palace.floors[0] if palace.floors else None
        apartments_per_floor = (
            len(reference.apartments) if reference else self.defaults.apartments_per_floor
        )
        first_apartment = reference.apartments[0] if reference and reference.apartments else None
        rooms_per_apartment = (
            len(first_apartment.rooms) if first_apartment and first_apartment.rooms
            else self.defaults.rooms_per_apartment
        )
        capacity = (
            first_apartment.rooms[0].capacity if first_apartment and first_apartment.rooms
            else self.defaults.capacity_per_room
        )
        floor = _new_floor(apartments_per_floor, rooms_per_apartment, capacity)
        palace.floors.append(floor)
        updated = self._commit(dataset, palace)
        logger.info("Floor added | palace=%s floor=%s", palace_id, floor.id)
        return find_floor(updated, floor.id)

    def remove_floor(self, dataset: TenantDataset, palace_id: str, floor_id: str) -> Palace:
        palace = find_palace(dataset, palace_id)
        find_floor(palace, floor_id)
        if len(palace.floors) <= 1:
            raise StructuralError(f"Palace {palace_id} must keep at least one floor")
        self._evict(
            dataset,
            _occupant_locations(palace, lambda location: location.floor.id == floor_id),
        )
        palace.floors = [floor for floor in palace.floors if floor.id != floor_id]
        logger.info("Floor removed | palace=%s floor=%s", palace_id, floor_id)
        return self._commit(dataset, palace)

    def add_apartment(self, dataset: TenantDataset, palace_id: str, floor_id: str) -> Apartment:
        palace = find_palace(dataset, palace_id)
        floor = find_floor(palace, floor_id)
        reference = floor.apartments[0] if floor.apartments else None
        rooms_per_apartment = (
            len(reference.rooms) if reference and reference.rooms
            else self.defaults.rooms_per_apartment
        )
        capacity = (
            reference.rooms[0].capacity if reference and reference.rooms
            else self.defaults.capacity_per_room
        )
        apartment = _new_apartment(rooms_per_apartment, capacity)
        floor.apartments.append(apartment)
        updated = self._commit(dataset, palace)
        logger.info("Apartment added | palace=%s floor=%s apartment=%s", palace_id, floor_id, apartment.id)
        return find_apartment(updated, apartment.id)[1]

    def remove_apartment(self, dataset: TenantDataset, palace_id: str, apartment_id: str) -> Palace:
        palace = find_palace(dataset, palace_id)
        floor, _ = find_apartment(palace, apartment_id)
        if len(floor.apartments) <= 1:
            raise StructuralError(f"Floor {floor.id} must keep at least one apartment")
        self._evict(
            dataset,
            _occupant_locations(palace, lambda location: location.apartment.id == apartment_id),
        )
        floor.apartments = [item for item in floor.apartments if item.id != apartment_id]
        logger.info("Apartment removed | palace=%s apartment=%s", palace_id, apartment_id)
        return self._commit(dataset, palace)

    def add_room(self, dataset: TenantDataset, palace_id: str, apartment_id: str) -> Room:
        palace = find_palace(dataset, palace_id)
        _, apartment = find_apartment(palace, apartment_id)
        if apartment.is_out_of_service:
            raise ApartmentOutOfServiceError(
                f"Apartment {apartment.name} is out of service; rooms cannot be added"
            )
        capacity = apartment.rooms[0].capacity if apartment.rooms else self.defaults.capacity_per_room
        room = _new_room(capacity)
        apartment.rooms.append(room)
        updated = self._commit(dataset, palace)
        logger.info("Room added | palace=%s apartment=%s room=%s", palace_id, apartment_id, room.id)
        return locate_room(dataset, RoomRef(palace_id=updated.id, room_id=room.id)).room

    def remove_room(self, dataset: TenantDataset, palace_id: str, room_id: str) -> Palace:
        palace = find_palace(dataset, palace_id)
        location = locate_room(dataset, RoomRef(palace_id=palace_id, room_id=room_id))
        if len(location.apartment.rooms) <= 1:
            raise StructuralError(
                f"Apartment {location.apartment.id} must keep at least one room"
            )
        self._evict(dataset, [(collaborator_id, location) for collaborator_id in location.room.collaborator_ids])
        location.apartment.rooms = [room for room in location.apartment.rooms if room.id != room_id]
        logger.info("Room removed | palace=%s room=%s", palace_id, room_id)
        return self._commit(dataset, palace)

    def update_room(
        self,
        dataset: TenantDataset,
        ref: RoomRef,
        *,
        capacity: Optional[int] = None,
        status: Optional[str] = None,
        maintenance: Optional[MaintenanceDetails] = None,
    ) -> Room:
        """Change capacity and/or status of one room."""
        location = locate_room(dataset, ref)
        room = location.room
        if capacity is not None:
            if capacity < 1:
                raise ValidationError("capacity must be >= 1")
            if capacity < room.occupant_count:
                raise CapacityError(
                    f"Room {room.name} holds {room.occupant_count} occupants; "
                    f"capacity {capacity} is too low"
                )
            room.capacity = capacity
            room.guests = min(room.guests, capacity)
            if room.status == RoomStatus.OCCUPIED:
                room.guests = max(room.guests, 1, len(room.collaborator_ids))
        if status is not None:
            target = parse_room_status(status)
            if target == RoomStatus.OCCUPIED and location.apartment.is_out_of_service:
                raise ApartmentOutOfServiceError(
                    f"Apartment {location.apartment.name} is out of service"
                )
            set_room_status(room, target, maintenance=maintenance)
        location.palace.updated_at = utc_now()
        logger.info(
            "Room updated | palace=%s room=%s capacity=%s status=%s",
            ref.palace_id,
            ref.room_id,
            room.capacity,
            room.status.value,
        )
        return room
