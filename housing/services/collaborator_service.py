"""Tenant-local mirror of the collaborator directory."""

from __future__ import annotations

from typing import Any, Iterable, Mapping, Optional

from housing.domain.errors import ValidationError
from housing.domain.lookup import iter_dataset_rooms
from housing.domain.models import Collaborator, TenantDataset
from housing.domain.serialization import collaborator_from_dict, collaborator_to_dict
from housing.services.assignment_service import location_to_assignment
from housing.utils.logger import get_logger


logger = get_logger(__name__)

ESTADO_FILTERS = ("activos", "retirados")


def sync_directory(
    dataset: TenantDataset,
    records: Iterable[Mapping[str, Any]],
) -> dict[str, int]:
    """Upsert directory records keyed by ``codigo`` (case-insensitive).

    Known collaborators keep their id so room references stay valid; the
    directory stays external, nothing is removed here.
    """
    by_codigo = {item.codigo.lower(): item for item in dataset.collaborators}
    incoming: list[Collaborator] = []
    seen: set[str] = set()
    for record in records:
        parsed = collaborator_from_dict(record)
        key = parsed.codigo.lower()
        if key in seen:
            raise ValidationError(f"Collaborator codigo {parsed.codigo} is repeated in the batch")
        seen.add(key)
        incoming.append(parsed)

    created = 0
    updated = 0
    for parsed in incoming:
        existing = by_codigo.get(parsed.codigo.lower())
        if existing is None:
            dataset.collaborators.append(parsed)
            by_codigo[parsed.codigo.lower()] = parsed
            created += 1
            continue
        existing.nombre = parsed.nombre
        existing.apellido = parsed.apellido
        existing.departamento = parsed.departamento
        existing.posicion = parsed.posicion
        existing.active = parsed.active
        updated += 1

    ids = [item.id for item in dataset.collaborators]
    if len(set(ids)) != len(ids):
        raise ValidationError("Collaborator ids must be unique within a tenant")

    logger.info(
        "Collaborator directory synced | namespace=%s created=%s updated=%s",
        dataset.namespace,
        created,
        updated,
    )
    return {"created": created, "updated": updated, "total": len(dataset.collaborators)}


def collaborator_summary(dataset: TenantDataset) -> dict[str, int]:
    total = len(dataset.collaborators)
    activos = sum(1 for item in dataset.collaborators if item.active)
    return {"total": total, "activos": activos, "retirados": total - activos}


def assignment_index(dataset: TenantDataset) -> dict[str, list[dict[str, Any]]]:
    index: dict[str, list[dict[str, Any]]] = {}
    for location in iter_dataset_rooms(dataset):
        for collaborator_id in location.room.collaborator_ids:
            index.setdefault(collaborator_id, []).append(location_to_assignment(location))
    return index


def list_collaborators(dataset: TenantDataset, estado: Optional[str] = None) -> dict[str, Any]:
    normalized = (estado or "").strip().lower()
    if normalized and normalized not in ESTADO_FILTERS:
        raise ValidationError("estado must be activos or retirados")

    if normalized == "activos":
        visible = [item for item in dataset.collaborators if item.active]
    elif normalized == "retirados":
        visible = [item for item in dataset.collaborators if not item.active]
    else:
        visible = list(dataset.collaborators)

    index = assignment_index(dataset)
    rows = []
    for collaborator in visible:
        row = collaborator_to_dict(collaborator)
        row["assignments"] = index.get(collaborator.id, [])
        rows.append(row)

    meta: dict[str, Any] = collaborator_summary(dataset)
    meta["visibles"] = len(rows)
    return {"collaborators": rows, "meta": meta}
