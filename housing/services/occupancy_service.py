"""Tenant-scoped orchestration of every housing operation.

Each public method resolves the tenant dataset through the context store, runs
the domain services against it and returns plain payloads, so nothing the
caller receives aliases committed state.
"""

from __future__ import annotations

from datetime import date
from typing import Any, Iterable, Mapping, Optional, Sequence

from housing.domain.errors import NotFoundError
from housing.domain.lookup import find_palace, locate_room
from housing.domain.models import Palace, RoomRef, TenantDataset
from housing.domain.room_state import MaintenanceDetails
from housing.domain.serialization import (
    apartment_to_dict,
    floor_to_dict,
    movement_to_dict,
    palace_to_dict,
    room_to_dict,
)
from housing.repository.tenant_store import TenantContextStore
from housing.services.apartment_service import (
    ApartmentService,
    compute_palace_stats,
    compute_property_stats,
)
from housing.services.assignment_service import AssignmentService, location_to_assignment
from housing.services.collaborator_service import list_collaborators, sync_directory
from housing.services.dashboard_service import DashboardService
from housing.services.movement_service import clear_movements, filter_movements
from housing.services.pre_checkin_service import clear_pre_checkin, set_pre_checkin
from housing.services.structure_service import StructureService
from housing.utils.config import Settings, get_settings


def palace_payload(dataset: TenantDataset, palace: Palace) -> dict[str, Any]:
    return {
        "palace": palace_to_dict(palace, dataset.collaborator_directory()),
        "stats": compute_palace_stats(palace),
        "summary": compute_property_stats(dataset),
    }


def room_payload(dataset: TenantDataset, ref: RoomRef) -> dict[str, Any]:
    location = locate_room(dataset, ref)
    payload = palace_payload(dataset, location.palace)
    payload["room"] = room_to_dict(location.room, dataset.collaborator_directory())
    return payload


class OccupancyService:
    """Coordinates structure -> assignment -> lifecycle operations per tenant."""

    def __init__(
        self,
        store: Optional[TenantContextStore] = None,
        structure_service: Optional[StructureService] = None,
        assignment_service: Optional[AssignmentService] = None,
        apartment_service: Optional[ApartmentService] = None,
        dashboard_service: Optional[DashboardService] = None,
        settings: Optional[Settings] = None,
    ) -> None:
        self._settings = settings or get_settings()
        self.store = store or TenantContextStore(settings=self._settings)
        self.structure = structure_service or StructureService(settings=self._settings)
        self.assignments = assignment_service or AssignmentService(settings=self._settings)
        self.apartments = apartment_service or ApartmentService(settings=self._settings)
        self.dashboard = dashboard_service or DashboardService(settings=self._settings)

    # Palaces -----------------------------------------------------------------

    def list_palaces(self, namespace: Optional[str]) -> dict[str, Any]:
        def _list(dataset: TenantDataset) -> dict[str, Any]:
            directory = dataset.collaborator_directory()
            return {
                "palaces": [palace_to_dict(palace, directory) for palace in dataset.palaces],
                "summary": compute_property_stats(dataset),
            }

        return self.store.run(namespace, _list, readonly=True)

    def get_palace(self, namespace: Optional[str], palace_id: str) -> dict[str, Any]:
        return self.store.run(
            namespace,
            lambda dataset: palace_payload(dataset, find_palace(dataset, palace_id)),
            readonly=True,
        )

    def create_palace(self, namespace: Optional[str], **params: Any) -> dict[str, Any]:
        return self.store.run(
            namespace,
            lambda dataset: palace_payload(dataset, self.structure.create_palace(dataset, **params)),
        )

    def update_palace(
        self,
        namespace: Optional[str],
        palace_id: str,
        payload: Mapping[str, Any],
    ) -> dict[str, Any]:
        return self.store.run(
            namespace,
            lambda dataset: palace_payload(
                dataset,
                self.structure.update_palace(dataset, palace_id, payload),
            ),
        )

    def delete_palace(self, namespace: Optional[str], palace_id: str) -> dict[str, Any]:
        def _delete(dataset: TenantDataset) -> dict[str, Any]:
            self.structure.delete_palace(dataset, palace_id)
            return {"deletedId": palace_id, "summary": compute_property_stats(dataset)}

        return self.store.run(namespace, _delete)

    # Floors / apartments / rooms --------------------------------------------

    def add_floor(self, namespace: Optional[str], palace_id: str) -> dict[str, Any]:
        def _add(dataset: TenantDataset) -> dict[str, Any]:
            floor = self.structure.add_floor(dataset, palace_id)
            payload = palace_payload(dataset, find_palace(dataset, palace_id))
            payload["floor"] = floor_to_dict(floor, dataset.collaborator_directory())
            return payload

        return self.store.run(namespace, _add)

    def remove_floor(self, namespace: Optional[str], palace_id: str, floor_id: str) -> dict[str, Any]:
        return self.store.run(
            namespace,
            lambda dataset: palace_payload(
                dataset,
                self.structure.remove_floor(dataset, palace_id, floor_id),
            ),
        )

    def add_apartment(self, namespace: Optional[str], palace_id: str, floor_id: str) -> dict[str, Any]:
        def _add(dataset: TenantDataset) -> dict[str, Any]:
            apartment = self.structure.add_apartment(dataset, palace_id, floor_id)
            payload = palace_payload(dataset, find_palace(dataset, palace_id))
            payload["apartment"] = apartment_to_dict(apartment, dataset.collaborator_directory())
            return payload

        return self.store.run(namespace, _add)

    def remove_apartment(
        self,
        namespace: Optional[str],
        palace_id: str,
        apartment_id: str,
    ) -> dict[str, Any]:
        return self.store.run(
            namespace,
            lambda dataset: palace_payload(
                dataset,
                self.structure.remove_apartment(dataset, palace_id, apartment_id),
            ),
        )

    def set_apartment_status(
        self,
        namespace: Optional[str],
        palace_id: str,
        apartment_id: str,
        status: str,
        note: Optional[str] = None,
    ) -> dict[str, Any]:
        def _set(dataset: TenantDataset) -> dict[str, Any]:
            apartment = self.apartments.set_apartment_status(
                dataset,
                palace_id,
                apartment_id,
                status,
                note,
            )
            payload = palace_payload(dataset, find_palace(dataset, palace_id))
            payload["apartment"] = apartment_to_dict(apartment, dataset.collaborator_directory())
            return payload

        return self.store.run(namespace, _set)

    def add_room(self, namespace: Optional[str], palace_id: str, apartment_id: str) -> dict[str, Any]:
        def _add(dataset: TenantDataset) -> dict[str, Any]:
            room = self.structure.add_room(dataset, palace_id, apartment_id)
            return room_payload(dataset, RoomRef(palace_id=palace_id, room_id=room.id))

        return self.store.run(namespace, _add)

    def remove_room(self, namespace: Optional[str], palace_id: str, room_id: str) -> dict[str, Any]:
        return self.store.run(
            namespace,
            lambda dataset: palace_payload(
                dataset,
                self.structure.remove_room(dataset, palace_id, room_id),
            ),
        )

    def update_room(
        self,
        namespace: Optional[str],
        ref: RoomRef,
        *,
        capacity: Optional[int] = None,
        status: Optional[str] = None,
        maintenance: Optional[MaintenanceDetails] = None,
    ) -> dict[str, Any]:
        def _update(dataset: TenantDataset) -> dict[str, Any]:
            self.structure.update_room(
                dataset,
                ref,
                capacity=capacity,
                status=status,
                maintenance=maintenance,
            )
            return room_payload(dataset, ref)

        return self.store.run(namespace, _update)

    # Assignments -------------------------------------------------------------

    def assign(
        self,
        namespace: Optional[str],
        ref: RoomRef,
        collaborator_ids: Sequence[str],
    ) -> dict[str, Any]:
        def _assign(dataset: TenantDataset) -> dict[str, Any]:
            self.assignments.assign(dataset, ref, collaborator_ids)
            return room_payload(dataset, ref)

        return self.store.run(namespace, _assign)

    def unassign(self, namespace: Optional[str], ref: RoomRef, collaborator_id: str) -> dict[str, Any]:
        def _unassign(dataset: TenantDataset) -> dict[str, Any]:
            holders = self.assignments.lookup(dataset, collaborator_id)
            if not any(location.ref == ref for location in holders):
                raise NotFoundError(
                    f"Collaborator {collaborator_id} is not assigned to room {ref.room_id}"
                )
            self.assignments.unassign(dataset, ref, collaborator_id)
            return room_payload(dataset, ref)

        return self.store.run(namespace, _unassign)

    def move(
        self,
        namespace: Optional[str],
        collaborator_id: str,
        source: RoomRef,
        target: RoomRef,
    ) -> dict[str, Any]:
        def _move(dataset: TenantDataset) -> dict[str, Any]:
            self.assignments.move(dataset, collaborator_id, source, target)
            directory = dataset.collaborator_directory()
            origin = locate_room(dataset, source)
            destination = locate_room(dataset, target)
            return {
                "collaboratorId": collaborator_id,
                "from": room_to_dict(origin.room, directory),
                "to": room_to_dict(destination.room, directory),
                "summary": compute_property_stats(dataset),
            }

        return self.store.run(namespace, _move)

    def lookup(self, namespace: Optional[str], collaborator_id: str) -> dict[str, Any]:
        def _lookup(dataset: TenantDataset) -> dict[str, Any]:
            return {
                "collaboratorId": collaborator_id,
                "assignments": [
                    location_to_assignment(location)
                    for location in self.assignments.lookup(dataset, collaborator_id)
                ],
            }

        return self.store.run(namespace, _lookup, readonly=True)

    # Pre-checkin -------------------------------------------------------------

    def set_pre_checkin(
        self,
        namespace: Optional[str],
        ref: RoomRef,
        *,
        checkin_date: object,
        guest_name: Optional[str] = None,
        notes: str = "",
    ) -> dict[str, Any]:
        def _set(dataset: TenantDataset) -> dict[str, Any]:
            set_pre_checkin(
                dataset,
                ref,
                checkin_date=checkin_date,
                guest_name=guest_name,
                notes=notes,
            )
            return room_payload(dataset, ref)

        return self.store.run(namespace, _set)

    def clear_pre_checkin(self, namespace: Optional[str], ref: RoomRef) -> dict[str, Any]:
        def _clear(dataset: TenantDataset) -> dict[str, Any]:
            clear_pre_checkin(dataset, ref)
            return room_payload(dataset, ref)

        return self.store.run(namespace, _clear)

    # Collaborators -----------------------------------------------------------

    def list_collaborators(self, namespace: Optional[str], estado: Optional[str] = None) -> dict[str, Any]:
        return self.store.run(
            namespace,
            lambda dataset: list_collaborators(dataset, estado),
            readonly=True,
        )

    def sync_collaborators(
        self,
        namespace: Optional[str],
        records: Iterable[Mapping[str, Any]],
    ) -> dict[str, Any]:
        def _sync(dataset: TenantDataset) -> dict[str, Any]:
            result = sync_directory(dataset, records)
            listing = list_collaborators(dataset)
            listing["sync"] = result
            return listing

        return self.store.run(namespace, _sync)

    def list_movements(
        self,
        namespace: Optional[str],
        *,
        date_from: Optional[date] = None,
        date_to: Optional[date] = None,
        limit: Optional[int] = None,
    ) -> dict[str, Any]:
        def _list(dataset: TenantDataset) -> dict[str, Any]:
            page, total = filter_movements(
                dataset,
                date_from=date_from,
                date_to=date_to,
                limit=limit,
            )
            return {"movements": [movement_to_dict(item) for item in page], "total": total}

        return self.store.run(namespace, _list, readonly=True)

    def clear_movements(self, namespace: Optional[str]) -> dict[str, Any]:
        def _clear(dataset: TenantDataset) -> dict[str, Any]:
            return {"movements": [], "total": 0, "removed": clear_movements(dataset)}

        return self.store.run(namespace, _clear)

    # Dashboard ---------------------------------------------------------------

    def overview(self, namespace: Optional[str]) -> dict[str, Any]:
        return self.store.run(namespace, self.dashboard.overview, readonly=True)
