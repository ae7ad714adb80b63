"""Re-derivation of positional numbers and display names after structural edits."""

from __future__ import annotations

import copy

from housing.domain.errors import StructuralError
from housing.domain.models import ApartmentStatus, Palace


def apartment_letter(index: int) -> str:
    """0 -> A, 25 -> Z, 26 -> AA."""
    letters = ""
    position = index + 1
    while position > 0:
        position, remainder = divmod(position - 1, 26)
        letters = chr(65 + remainder) + letters
    return letters


def floor_display_name(floor_number: int) -> str:
    return f"Piso {floor_number}"


def apartment_display_name(floor_number: int, apartment_index: int) -> str:
    return f"Apartamento {floor_number}{apartment_letter(apartment_index)}"


def room_display_name(floor_number: int, apartment_number: int, room_index: int) -> str:
    return f"Habitación {floor_number}{apartment_number}{room_index + 1}"


def normalize_palace(palace: Palace) -> Palace:
    """Return a renumbered copy of ``palace``; the input is left untouched.

    Floors and apartments get contiguous 1-based numbers, every display name is
    re-derived, and active apartments lose any leftover out-of-service note.
    """
    if not palace.floors:
        raise StructuralError(f"Palace {palace.id} has no floors")
    for floor in palace.floors:
        if not floor.apartments:
            raise StructuralError(f"Floor {floor.id} in palace {palace.id} has no apartments")

    normalized = copy.deepcopy(palace)
    for floor_index, floor in enumerate(normalized.floors):
        floor.number = floor_index + 1
        floor.name = floor_display_name(floor.number)
        for apartment_index, apartment in enumerate(floor.apartments):
            apartment.number = apartment_index + 1
            apartment.name = apartment_display_name(floor.number, apartment_index)
            if apartment.status != ApartmentStatus.OUT_OF_SERVICE:
                apartment.status = ApartmentStatus.ACTIVE
                apartment.out_of_service_note = ""
            for room_index, room in enumerate(apartment.rooms):
                room.name = room_display_name(floor.number, apartment.number, room_index)
    return normalized
