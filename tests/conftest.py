from __future__ import annotations

from dataclasses import replace
from typing import Callable

import pytest

from housing.domain.models import RoomRef, TenantDataset
from housing.services.collaborator_service import sync_directory
from housing.services.structure_service import StructureService
from housing.utils.config import Settings, get_settings


DIRECTORY = [
    {"id": "col_ana", "codigo": "COL-001", "nombre": "Ana", "apellido": "González", "departamento": "Recepción", "posicion": "Supervisora"},
    {"id": "col_bruno", "codigo": "COL-002", "nombre": "Bruno", "apellido": "Díaz", "departamento": "Mantenimiento", "posicion": "Técnico"},
    {"id": "col_carla", "codigo": "COL-003", "nombre": "Carla", "apellido": "Ruiz", "departamento": "Recepción", "posicion": "Recepcionista"},
    {"id": "col_diego", "codigo": "COL-004", "nombre": "Diego", "apellido": "Paz", "departamento": "", "posicion": "Chef"},
    {"id": "col_ena", "codigo": "COL-005", "nombre": "Ena", "apellido": "Mora", "departamento": "Housekeeping", "posicion": "Camarera", "active": False},
]


@pytest.fixture
def make_settings(tmp_path) -> Callable[..., Settings]:
    def _build(**overrides) -> Settings:
        get_settings.cache_clear()
        values = {
            "database_path": tmp_path / "housing.db",
            "persist_snapshots": False,
            "seed_demo_palaces": False,
            "seed_demo_collaborators": False,
            "admin_token": None,
            "require_authentication": False,
        }
        values.update(overrides)
        return replace(get_settings(), **values)

    return _build


@pytest.fixture
def settings(make_settings) -> Settings:
    return make_settings()


@pytest.fixture
def make_dataset(settings) -> Callable[..., TenantDataset]:
    """Tenant with palaces of one floor, two apartments, two rooms each."""

    def _build(palaces: int = 1, namespace: str = "tenant_default") -> TenantDataset:
        dataset = TenantDataset(namespace=namespace)
        structure = StructureService(settings=settings)
        for _ in range(palaces):
            structure.create_palace(
                dataset,
                floors=1,
                apartments_per_floor=2,
                rooms_per_apartment=2,
                capacity_per_room=2,
            )
        sync_directory(dataset, DIRECTORY)
        return dataset

    return _build


@pytest.fixture
def dataset(make_dataset) -> TenantDataset:
    return make_dataset()


def room_ref(
    dataset: TenantDataset,
    apartment_index: int = 0,
    room_index: int = 0,
    palace_index: int = 0,
) -> RoomRef:
    palace = dataset.palaces[palace_index]
    room = palace.floors[0].apartments[apartment_index].rooms[room_index]
    return RoomRef(palace_id=palace.id, room_id=room.id)


@pytest.fixture
def ref_for() -> Callable[..., RoomRef]:
    return room_ref
