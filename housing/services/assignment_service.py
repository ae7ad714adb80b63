"""Assignment engine: placing collaborators into room slots."""

from __future__ import annotations

from typing import Any, Optional, Sequence

from housing.domain.constraints import (
    MAX_SLOTS,
    PolicyConfig,
    available_slots,
    validate_policy_config,
)
from housing.domain.errors import (
    ApartmentOutOfServiceError,
    AssignmentConflictError,
    CapacityError,
    DestinationFullError,
    NotFoundError,
    ValidationError,
)
from housing.domain.lookup import RoomLocation, collaborator_room_locations, locate_room
from housing.domain.models import MovementType, Room, RoomRef, TenantDataset, utc_now
from housing.domain.room_state import sync_occupancy
from housing.domain.serialization import room_context_to_dict
from housing.services.movement_service import (
    assignment_note,
    record_movement,
    unassignment_note,
)
from housing.utils.config import Settings, get_settings
from housing.utils.logger import get_logger


logger = get_logger(__name__)


def _clean_ids(collaborator_ids: Sequence[str]) -> list[str]:
    ordered: list[str] = []
    for raw in collaborator_ids:
        text = str(raw or "").strip()
        if not text:
            raise ValidationError("Collaborator ids must not be empty")
        if text not in ordered:
            ordered.append(text)
    return ordered


def location_to_assignment(location: RoomLocation) -> dict[str, Any]:
    payload = room_context_to_dict(location.context())
    payload["apartmentStatus"] = location.apartment.status.value
    payload["roomStatus"] = location.room.status.value
    return payload


class AssignmentService:
    """Assign, unassign and move collaborators while keeping room invariants."""

    def __init__(self, settings: Optional[Settings] = None) -> None:
        self._settings = settings or get_settings()
        self.policy = PolicyConfig.from_settings(self._settings)
        validate_policy_config(self.policy)

    def lookup(self, dataset: TenantDataset, collaborator_id: str) -> list[RoomLocation]:
        """Rooms currently holding the collaborator, in hierarchy order."""
        return collaborator_room_locations(dataset, collaborator_id)

    def _conflicts(
        self,
        dataset: TenantDataset,
        collaborator_id: str,
        target: RoomLocation,
        ignore_room_ids: Sequence[str] = (),
    ) -> list[RoomLocation]:
        conflicts = []
        for location in collaborator_room_locations(dataset, collaborator_id):
            if location.room.id == target.room.id or location.room.id in ignore_room_ids:
                continue
            if (
                self.policy.assignment_uniqueness_scope == "building"
                and location.palace.id != target.palace.id
            ):
                continue
            conflicts.append(location)
        return conflicts

    def assign(
        self,
        dataset: TenantDataset,
        ref: RoomRef,
        collaborator_ids: Sequence[str],
    ) -> Room:
        """Replace the occupant list of a room wholesale."""
        location = locate_room(dataset, ref)
        room = location.room
        requested = _clean_ids(collaborator_ids)

        reserved = 1 if room.pre_checkin is not None else 0
        if len(requested) + reserved > MAX_SLOTS:
            raise CapacityError(
                f"Room {room.id} accepts at most {MAX_SLOTS - reserved} collaborators, "
                f"got {len(requested)}"
            )

        directory = dataset.collaborator_directory()
        added = [collaborator_id for collaborator_id in requested if collaborator_id not in room.collaborator_ids]
        removed = [collaborator_id for collaborator_id in room.collaborator_ids if collaborator_id not in requested]

        for collaborator_id in added:
            collaborator = directory.get(collaborator_id)
            if collaborator is None:
                raise NotFoundError(f"Collaborator {collaborator_id} not found")
            if not collaborator.active:
                raise ValidationError(
                    f"Collaborator {collaborator.codigo} is not active",
                    code="collaborator_inactive",
                )
        if added and location.apartment.is_out_of_service:
            raise ApartmentOutOfServiceError(
                f"Apartment {location.apartment.name} is out of service"
            )
        for collaborator_id in added:
            conflicts = self._conflicts(dataset, collaborator_id, location)
            if conflicts:
                holder = conflicts[0]
                raise AssignmentConflictError(
                    f"Collaborator {collaborator_id} already holds {holder.room.name} "
                    f"in {holder.palace.name}"
                )

        room.collaborator_ids = requested
        sync_occupancy(room)
        location.palace.updated_at = utc_now()

        for collaborator_id in removed:
            record_movement(
                dataset,
                MovementType.UNASSIGNMENT,
                collaborator_id,
                location,
                note=unassignment_note(location),
            )
        for collaborator_id in added:
            record_movement(
                dataset,
                MovementType.ASSIGNMENT,
                collaborator_id,
                location,
                note=assignment_note(location),
            )

        logger.info(
            "Room assignment replaced | palace=%s room=%s added=%s removed=%s",
            ref.palace_id,
            ref.room_id,
            added,
            removed,
        )
        return room

    def unassign(self, dataset: TenantDataset, ref: RoomRef, collaborator_id: str) -> bool:
        """Remove one occupant; returns False when the collaborator was not there."""
        location = locate_room(dataset, ref)
        room = location.room
        if collaborator_id not in room.collaborator_ids:
            return False

        room.collaborator_ids = [item for item in room.collaborator_ids if item != collaborator_id]
        sync_occupancy(room)
        location.palace.updated_at = utc_now()
        record_movement(
            dataset,
            MovementType.UNASSIGNMENT,
            collaborator_id,
            location,
            note=unassignment_note(location),
        )
        logger.info(
            "Collaborator unassigned | palace=%s room=%s collaborator=%s",
            ref.palace_id,
            ref.room_id,
            collaborator_id,
        )
        return True

    def move(
        self,
        dataset: TenantDataset,
        collaborator_id: str,
        source: RoomRef,
        target: RoomRef,
    ) -> RoomLocation:
        """Relocate a collaborator; every check runs before anything changes."""
        origin = locate_room(dataset, source)
        destination = locate_room(dataset, target)
        if collaborator_id not in origin.room.collaborator_ids:
            raise NotFoundError(
                f"Collaborator {collaborator_id} is not assigned to room {source.room_id}"
            )
        if origin.room.id == destination.room.id:
            return destination
        if collaborator_id in destination.room.collaborator_ids:
            return destination

        if destination.apartment.is_out_of_service:
            raise ApartmentOutOfServiceError(
                f"Apartment {destination.apartment.name} is out of service"
            )
        if available_slots(destination.room) < 1:
            raise DestinationFullError(f"Room {destination.room.name} has no free slot")
        conflicts = self._conflicts(
            dataset,
            collaborator_id,
            destination,
            ignore_room_ids=(origin.room.id,),
        )
        if conflicts:
            raise AssignmentConflictError(
                f"Collaborator {collaborator_id} already holds {conflicts[0].room.name}"
            )

        origin.room.collaborator_ids = [
            item for item in origin.room.collaborator_ids if item != collaborator_id
        ]
        sync_occupancy(origin.room)
        destination.room.collaborator_ids.append(collaborator_id)
        sync_occupancy(destination.room)
        now = utc_now()
        origin.palace.updated_at = now
        destination.palace.updated_at = now

        record_movement(
            dataset,
            MovementType.RELOCATION,
            collaborator_id,
            destination,
            note=assignment_note(destination, origin),
        )
        logger.info(
            "Collaborator moved | collaborator=%s from=%s/%s to=%s/%s",
            collaborator_id,
            source.palace_id,
            source.room_id,
            target.palace_id,
            target.room_id,
        )
        return destination
