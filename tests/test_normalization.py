from __future__ import annotations

import copy

import pytest

from housing.domain.errors import StructuralError
from housing.domain.models import Apartment, ApartmentStatus, Floor, Palace, Room
from housing.domain.normalization import apartment_letter, normalize_palace


def _palace() -> Palace:
    return Palace(
        id="palace_a",
        name="Edificio 01",
        floors=[
            Floor(
                id="floor_x",
                number=7,
                name="old",
                apartments=[
                    Apartment(id="apto_1", number=4, rooms=[Room(id="r1"), Room(id="r2")]),
                    Apartment(
                        id="apto_2",
                        number=9,
                        status=ApartmentStatus.ACTIVE,
                        out_of_service_note="leftover",
                        rooms=[Room(id="r3")],
                    ),
                ],
            ),
            Floor(
                id="floor_y",
                number=3,
                apartments=[
                    Apartment(
                        id="apto_3",
                        status=ApartmentStatus.OUT_OF_SERVICE,
                        out_of_service_note="AC repair",
                        rooms=[Room(id="r4")],
                    )
                ],
            ),
        ],
    )


@pytest.mark.parametrize(
    ("index", "expected"),
    [(0, "A"), (1, "B"), (25, "Z"), (26, "AA"), (27, "AB")],
)
def test_apartment_letter(index: int, expected: str) -> None:
    assert apartment_letter(index) == expected


def test_normalize_renumbers_and_renames() -> None:
    normalized = normalize_palace(_palace())

    assert [floor.number for floor in normalized.floors] == [1, 2]
    assert [floor.name for floor in normalized.floors] == ["Piso 1", "Piso 2"]

    first_floor = normalized.floors[0]
    assert [apartment.number for apartment in first_floor.apartments] == [1, 2]
    assert [apartment.name for apartment in first_floor.apartments] == [
        "Apartamento 1A",
        "Apartamento 1B",
    ]
    assert [room.name for room in first_floor.apartments[0].rooms] == [
        "Habitación 111",
        "Habitación 112",
    ]
    assert first_floor.apartments[1].rooms[0].name == "Habitación 121"
    assert normalized.floors[1].apartments[0].rooms[0].name == "Habitación 211"


def test_normalize_clears_note_of_active_apartments_only() -> None:
    normalized = normalize_palace(_palace())

    assert normalized.floors[0].apartments[1].out_of_service_note == ""
    out_of_service = normalized.floors[1].apartments[0]
    assert out_of_service.status == ApartmentStatus.OUT_OF_SERVICE
    assert out_of_service.out_of_service_note == "AC repair"


def test_normalize_is_pure_and_idempotent() -> None:
    original = _palace()
    snapshot = copy.deepcopy(original)

    once = normalize_palace(original)
    twice = normalize_palace(once)

    assert original == snapshot
    assert once == twice
    assert once is not original


def test_palace_without_floors_is_structural_error() -> None:
    with pytest.raises(StructuralError):
        normalize_palace(Palace(id="palace_a", name="Edificio 01"))


def test_floor_without_apartments_is_structural_error() -> None:
    palace = Palace(id="palace_a", name="Edificio 01", floors=[Floor(id="floor_a")])
    with pytest.raises(StructuralError):
        normalize_palace(palace)
