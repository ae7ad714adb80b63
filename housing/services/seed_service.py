"""Optional demo data for the default tenant."""

from __future__ import annotations

from typing import Any, Optional

from housing.domain.models import RoomRef, TenantDataset
from housing.repository.tenant_store import TenantContextStore
from housing.services.assignment_service import AssignmentService
from housing.services.collaborator_service import sync_directory
from housing.services.structure_service import StructureService
from housing.utils.config import Settings, get_settings
from housing.utils.logger import get_logger


logger = get_logger(__name__)

DEMO_COLLABORATORS: tuple[dict[str, Any], ...] = (
    {"codigo": "COL-001", "nombre": "Ana María", "apellido": "González", "departamento": "Recepción", "posicion": "Supervisora"},
    {"codigo": "COL-002", "nombre": "Diego", "apellido": "Fernández", "departamento": "Mantenimiento", "posicion": "Técnico HVAC"},
    {"codigo": "COL-003", "nombre": "Laura", "apellido": "Serrano", "departamento": "Housekeeping", "posicion": "Coordinadora"},
    {"codigo": "COL-004", "nombre": "Carlos", "apellido": "Martínez", "departamento": "Seguridad", "posicion": "Supervisor de turno"},
    {"codigo": "COL-005", "nombre": "Verónica", "apellido": "Suárez", "departamento": "Alimentos y bebidas", "posicion": "Chef ejecutiva"},
    {"codigo": "COL-006", "nombre": "Gabriel", "apellido": "Ortiz", "departamento": "Recepción", "posicion": "Recepcionista"},
    {"codigo": "COL-007", "nombre": "Marta", "apellido": "Villalba", "departamento": "Housekeeping", "posicion": "Especialista en habitaciones", "active": False},
)


def seed_demo_data(
    store: TenantContextStore,
    structure_service: StructureService,
    assignment_service: AssignmentService,
    settings: Optional[Settings] = None,
) -> dict[str, int]:
    """Seed the default tenant when it is still empty; never overwrites data."""
    resolved = settings or get_settings()

    def _seed(dataset: TenantDataset) -> dict[str, int]:
        palaces = 0
        collaborators = 0
        if resolved.seed_demo_palaces and not dataset.palaces:
            for series in range(1, resolved.demo_palace_count + 1):
                structure_service.create_palace(dataset, series_number=series)
                palaces += 1
        if resolved.seed_demo_collaborators and not dataset.collaborators:
            collaborators = sync_directory(dataset, DEMO_COLLABORATORS)["created"]
        if palaces and collaborators:
            first_palace = dataset.palaces[0]
            first_floor = first_palace.floors[0]
            active = [item for item in dataset.collaborators if item.active]
            for apartment, collaborator in zip(first_floor.apartments[:2], active[:2]):
                assignment_service.assign(
                    dataset,
                    RoomRef(palace_id=first_palace.id, room_id=apartment.rooms[0].id),
                    [collaborator.id],
                )
        return {"palaces": palaces, "collaborators": collaborators}

    if not (resolved.seed_demo_palaces or resolved.seed_demo_collaborators):
        return {"palaces": 0, "collaborators": 0}
    result = store.run(store.default_namespace, _seed)
    logger.info(
        "Demo seed completed | palaces=%s collaborators=%s",
        result["palaces"],
        result["collaborators"],
    )
    return result
