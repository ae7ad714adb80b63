"""Lookups inside one tenant dataset."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterator

from housing.domain.errors import NotFoundError
from housing.domain.models import (
    Apartment,
    Floor,
    Palace,
    Room,
    RoomContext,
    RoomRef,
    TenantDataset,
)


@dataclass(frozen=True)
class RoomLocation:
    palace: Palace
    floor: Floor
    apartment: Apartment
    room: Room

    @property
    def ref(self) -> RoomRef:
        return RoomRef(palace_id=self.palace.id, room_id=self.room.id)

    def context(self) -> RoomContext:
        return RoomContext(
            palace_id=self.palace.id,
            palace_name=self.palace.name,
            floor_id=self.floor.id,
            floor_name=self.floor.name,
            apartment_id=self.apartment.id,
            apartment_name=self.apartment.name,
            room_id=self.room.id,
            room_name=self.room.name,
        )


def find_palace(dataset: TenantDataset, palace_id: str) -> Palace:
    for palace in dataset.palaces:
        if palace.id == palace_id:
            return palace
    raise NotFoundError(f"Palace {palace_id} not found")


def find_floor(palace: Palace, floor_id: str) -> Floor:
    for floor in palace.floors:
        if floor.id == floor_id:
            return floor
    raise NotFoundError(f"Floor {floor_id} not found in palace {palace.id}")


def find_apartment(palace: Palace, apartment_id: str) -> tuple[Floor, Apartment]:
    for floor in palace.floors:
        for apartment in floor.apartments:
            if apartment.id == apartment_id:
                return floor, apartment
    raise NotFoundError(f"Apartment {apartment_id} not found in palace {palace.id}")


def iter_room_locations(palace: Palace) -> Iterator[RoomLocation]:
    for floor in palace.floors:
        for apartment in floor.apartments:
            for room in apartment.rooms:
                yield RoomLocation(palace=palace, floor=floor, apartment=apartment, room=room)


def iter_dataset_rooms(dataset: TenantDataset) -> Iterator[RoomLocation]:
    for palace in dataset.palaces:
        yield from iter_room_locations(palace)


def iter_entity_ids(palace: Palace) -> Iterator[str]:
    """Palace, floor, apartment and room ids in hierarchy order."""
    yield palace.id
    for floor in palace.floors:
        yield floor.id
        for apartment in floor.apartments:
            yield apartment.id
            for room in apartment.rooms:
                yield room.id


def locate_room(dataset: TenantDataset, ref: RoomRef) -> RoomLocation:
    palace = find_palace(dataset, ref.palace_id)
    for location in iter_room_locations(palace):
        if location.room.id == ref.room_id:
            return location
    raise NotFoundError(f"Room {ref.room_id} not found in palace {ref.palace_id}")


def collaborator_room_locations(
    dataset: TenantDataset,
    collaborator_id: str,
) -> list[RoomLocation]:
    """Every room currently listing the collaborator, in hierarchy order."""
    return [
        location
        for location in iter_dataset_rooms(dataset)
        if collaborator_id in location.room.collaborator_ids
    ]
