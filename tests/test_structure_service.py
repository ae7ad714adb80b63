from __future__ import annotations

import pytest

from housing.domain.errors import (
    ApartmentOutOfServiceError,
    AssignmentConflictError,
    CapacityError,
    NotFoundError,
    StructuralError,
    ValidationError,
)
from housing.domain.lookup import locate_room
from housing.domain.models import MovementType, RoomRef, RoomStatus, TenantDataset
from housing.domain.room_state import MaintenanceDetails
from housing.domain.serialization import palace_to_dict
from housing.services.apartment_service import ApartmentService
from housing.services.assignment_service import AssignmentService
from housing.services.pre_checkin_service import set_pre_checkin
from housing.services.structure_service import StructureService


# --- Creation ---

def test_create_palace_uses_configured_defaults(settings) -> None:
    dataset = TenantDataset(namespace="tenant_default")
    palace = StructureService(settings=settings).create_palace(dataset)

    assert palace.name == "Edificio 01"
    assert palace.series_number == 1
    assert len(palace.floors) == 3
    assert all(len(floor.apartments) == 4 for floor in palace.floors)
    rooms = [room for floor in palace.floors for apartment in floor.apartments for room in apartment.rooms]
    assert len(rooms) == 24
    assert all(room.status == RoomStatus.AVAILABLE and room.capacity == 2 for room in rooms)
    assert palace.floors[2].apartments[3].name == "Apartamento 3D"


def test_create_palace_series_and_names(settings) -> None:
    dataset = TenantDataset(namespace="tenant_default")
    service = StructureService(settings=settings)

    service.create_palace(dataset, floors=1)
    second = service.create_palace(dataset, floors=1, name_prefix="Torre")
    custom = service.create_palace(dataset, floors=1, series_number=9, custom_name="Casa Norte")

    assert second.series_number == 2
    assert second.name == "Torre 02"
    assert (custom.series_number, custom.name) == (9, "Casa Norte")


def test_create_palace_rejects_zero_dimensions(settings) -> None:
    with pytest.raises(ValidationError):
        StructureService(settings=settings).create_palace(
            TenantDataset(namespace="tenant_default"), floors=0
        )


def test_delete_palace_logs_unassignments(dataset, settings, ref_for) -> None:
    ref = ref_for(dataset)
    AssignmentService(settings=settings).assign(dataset, ref, ["col_ana"])

    StructureService(settings=settings).delete_palace(dataset, ref.palace_id)

    assert dataset.palaces == []
    assert dataset.collaborator_movements[0].type == MovementType.UNASSIGNMENT


# --- Children ---

def test_add_floor_copies_first_floor_dimensions(dataset, settings) -> None:
    service = StructureService(settings=settings)
    palace_id = dataset.palaces[0].id

    floor = service.add_floor(dataset, palace_id)

    assert floor.number == 2
    assert floor.name == "Piso 2"
    assert len(floor.apartments) == 2
    assert all(len(apartment.rooms) == 2 for apartment in floor.apartments)
    assert floor.apartments[1].rooms[1].name == "Habitación 222"


def test_add_apartment_and_room(dataset, settings) -> None:
    service = StructureService(settings=settings)
    palace = dataset.palaces[0]

    apartment = service.add_apartment(dataset, palace.id, palace.floors[0].id)
    room = service.add_room(dataset, palace.id, apartment.id)

    assert apartment.name == "Apartamento 1C"
    assert room.name == "Habitación 133"
    assert room.capacity == 2


def test_add_room_to_out_of_service_apartment_rejected(dataset, settings) -> None:
    palace = dataset.palaces[0]
    apartment_id = palace.floors[0].apartments[0].id
    ApartmentService(settings=settings).set_apartment_status(
        dataset, palace.id, apartment_id, "out_of_service"
    )

    with pytest.raises(ApartmentOutOfServiceError):
        StructureService(settings=settings).add_room(dataset, palace.id, apartment_id)


def test_removing_last_children_is_structural_error(settings) -> None:
    dataset = TenantDataset(namespace="tenant_default")
    service = StructureService(settings=settings)
    palace = service.create_palace(
        dataset, floors=1, apartments_per_floor=1, rooms_per_apartment=1
    )
    floor = palace.floors[0]
    apartment = floor.apartments[0]

    with pytest.raises(StructuralError):
        service.remove_floor(dataset, palace.id, floor.id)
    with pytest.raises(StructuralError):
        service.remove_apartment(dataset, palace.id, apartment.id)
    with pytest.raises(StructuralError):
        service.remove_room(dataset, palace.id, apartment.rooms[0].id)


def test_remove_apartment_renumbers_and_evicts(dataset, settings, ref_for) -> None:
    service = StructureService(settings=settings)
    ref = ref_for(dataset)
    AssignmentService(settings=settings).assign(dataset, ref, ["col_ana"])
    palace = dataset.palaces[0]
    doomed = palace.floors[0].apartments[0].id

    updated = service.remove_apartment(dataset, palace.id, doomed)

    remaining = updated.floors[0].apartments
    assert len(remaining) == 1
    assert remaining[0].number == 1
    assert remaining[0].name == "Apartamento 1A"
    assert dataset.collaborator_movements[0].type == MovementType.UNASSIGNMENT
    assert dataset.collaborator_movements[0].collaborator_id == "col_ana"


def test_remove_unknown_room_not_found(dataset, settings) -> None:
    with pytest.raises(NotFoundError):
        StructureService(settings=settings).remove_room(dataset, dataset.palaces[0].id, "room_missing")


# --- Room details ---

def test_update_room_capacity_cannot_drop_below_occupants(dataset, settings, ref_for) -> None:
    service = StructureService(settings=settings)
    ref = ref_for(dataset)
    AssignmentService(settings=settings).assign(dataset, ref, ["col_ana", "col_bruno"])

    with pytest.raises(CapacityError):
        service.update_room(dataset, ref, capacity=1)

    room = service.update_room(dataset, ref, capacity=4)
    assert room.capacity == 4
    assert room.guests == 2


def test_update_room_to_maintenance(dataset, settings, ref_for) -> None:
    ref = ref_for(dataset)
    room = StructureService(settings=settings).update_room(
        dataset,
        ref,
        status="maintenance",
        maintenance=MaintenanceDetails(note="Cambio de colchón", zone="Cama", area_type="room"),
    )

    assert room.status == RoomStatus.MAINTENANCE
    assert room.maintenance_note == "Cambio de colchón"
    assert room.maintenance_area_type == "room"


def test_update_room_cannot_occupy_out_of_service_apartment(dataset, settings, ref_for) -> None:
    ref = ref_for(dataset)
    ApartmentService(settings=settings).set_apartment_status(
        dataset, ref.palace_id, locate_room(dataset, ref).apartment.id, "out_of_service"
    )

    with pytest.raises(ApartmentOutOfServiceError):
        StructureService(settings=settings).update_room(dataset, ref, status="occupied")


# --- Full subtree update ---

def test_update_palace_assigns_ids_to_pending_entities(dataset, settings) -> None:
    service = StructureService(settings=settings)
    palace = dataset.palaces[0]
    payload = palace_to_dict(palace)
    payload["name"] = "Residencia Sur"
    payload["floors"][0]["apartments"][0]["rooms"].append({"id": "temp-123", "capacity": 2})
    payload["floors"].append(
        {"id": "temp-floor", "apartments": [{"id": "temp-apto", "rooms": [{"capacity": 1}]}]}
    )

    updated = service.update_palace(dataset, palace.id, payload)

    assert updated.name == "Residencia Sur"
    new_room = updated.floors[0].apartments[0].rooms[2]
    assert new_room.id.startswith("room_")
    assert new_room.name == "Habitación 113"
    new_floor = updated.floors[1]
    assert new_floor.id.startswith("floor_")
    assert new_floor.apartments[0].id.startswith("apto_")
    assert new_floor.apartments[0].rooms[0].name == "Habitación 211"


def test_update_palace_rejects_foreign_payload_id(dataset, settings) -> None:
    payload = palace_to_dict(dataset.palaces[0])
    payload["id"] = "palace_other"

    with pytest.raises(ValidationError):
        StructureService(settings=settings).update_palace(dataset, dataset.palaces[0].id, payload)


def test_update_palace_records_assignment_diff(dataset, settings, ref_for) -> None:
    service = StructureService(settings=settings)
    first = ref_for(dataset)
    AssignmentService(settings=settings).assign(dataset, first, ["col_ana"])
    payload = palace_to_dict(dataset.palaces[0])
    rooms = payload["floors"][0]["apartments"][0]["rooms"]
    rooms[0]["collaboratorIds"] = []
    rooms[1]["collaboratorIds"] = ["col_ana", "col_bruno"]

    updated = service.update_palace(dataset, first.palace_id, payload)

    second_room = updated.floors[0].apartments[0].rooms[1]
    assert second_room.collaborator_ids == ["col_ana", "col_bruno"]
    assert second_room.status == RoomStatus.OCCUPIED
    assert second_room.guests == 2
    assert updated.floors[0].apartments[0].rooms[0].status == RoomStatus.AVAILABLE
    latest = {movement.collaborator_id: movement for movement in dataset.collaborator_movements[:2]}
    assert latest["col_bruno"].note.startswith("Asignado a")
    assert latest["col_ana"].note.startswith("Reasignado desde")


def test_update_palace_rejects_unknown_collaborator(dataset, settings) -> None:
    payload = palace_to_dict(dataset.palaces[0])
    payload["floors"][0]["apartments"][0]["rooms"][0]["collaboratorIds"] = ["col_ghost"]

    with pytest.raises(NotFoundError):
        StructureService(settings=settings).update_palace(dataset, dataset.palaces[0].id, payload)


def test_update_palace_rejects_double_booking(dataset, settings) -> None:
    payload = palace_to_dict(dataset.palaces[0])
    payload["floors"][0]["apartments"][0]["rooms"][0]["collaboratorIds"] = ["col_ana"]
    payload["floors"][0]["apartments"][1]["rooms"][0]["collaboratorIds"] = ["col_ana"]

    with pytest.raises(AssignmentConflictError):
        StructureService(settings=settings).update_palace(dataset, dataset.palaces[0].id, payload)


def test_update_palace_rejects_overfull_room(dataset, settings) -> None:
    payload = palace_to_dict(dataset.palaces[0])
    room = payload["floors"][0]["apartments"][0]["rooms"][0]
    room["collaboratorIds"] = ["col_ana", "col_bruno"]
    room["preCheckin"] = {"checkinDate": "2025-12-01T15:00:00Z"}

    with pytest.raises(CapacityError):
        StructureService(settings=settings).update_palace(dataset, dataset.palaces[0].id, payload)


def test_update_palace_drops_maintenance_fields_outside_maintenance(dataset, settings) -> None:
    payload = palace_to_dict(dataset.palaces[0])
    room = payload["floors"][0]["apartments"][0]["rooms"][0]
    room["maintenanceNote"] = "stale"
    room["maintenanceAreaType"] = "bathroom"

    updated = StructureService(settings=settings).update_palace(dataset, dataset.palaces[0].id, payload)

    refreshed = updated.floors[0].apartments[0].rooms[0]
    assert refreshed.maintenance_note == ""
    assert refreshed.maintenance_area_type == ""
    assert locate_room(dataset, RoomRef(palace_id=updated.id, room_id=refreshed.id)).room is refreshed


def test_update_palace_reissues_repeated_room_id(dataset, settings) -> None:
    payload = palace_to_dict(dataset.palaces[0])
    rooms = payload["floors"][0]["apartments"][0]["rooms"]
    rooms.append(dict(rooms[0]))

    updated = StructureService(settings=settings).update_palace(dataset, dataset.palaces[0].id, payload)

    room_ids = [room.id for floor in updated.floors for apartment in floor.apartments for room in apartment.rooms]
    assert len(room_ids) == 5
    assert len(set(room_ids)) == 5
    assert room_ids[0] == payload["floors"][0]["apartments"][0]["rooms"][0]["id"]


def test_update_palace_reissues_ids_of_other_palaces(make_dataset, settings) -> None:
    dataset = make_dataset(palaces=2)
    first, second = dataset.palaces
    payload = palace_to_dict(second)
    payload["floors"][0]["apartments"][0]["rooms"].append({"id": first.floors[0].apartments[0].rooms[0].id})

    updated = StructureService(settings=settings).update_palace(dataset, second.id, payload)

    added = updated.floors[0].apartments[0].rooms[2]
    assert added.id != first.floors[0].apartments[0].rooms[0].id
    assert locate_room(dataset, RoomRef(palace_id=second.id, room_id=added.id)).room is added


def test_update_palace_rejects_new_pre_checkin_out_of_service(dataset, settings) -> None:
    palace = dataset.palaces[0]
    apartment_id = palace.floors[0].apartments[0].id
    ApartmentService(settings=settings).set_apartment_status(
        dataset, palace.id, apartment_id, "out_of_service", "AC"
    )
    payload = palace_to_dict(dataset.palaces[0])
    payload["floors"][0]["apartments"][0]["rooms"][0]["preCheckin"] = {
        "guestName": "Ana",
        "checkinDate": "2025-12-01T15:00:00Z",
    }

    with pytest.raises(ApartmentOutOfServiceError):
        StructureService(settings=settings).update_palace(dataset, palace.id, payload)
    assert dataset.palaces[0].floors[0].apartments[0].rooms[0].pre_checkin is None


def test_update_palace_keeps_existing_pre_checkin_out_of_service(dataset, settings, ref_for) -> None:
    ref = ref_for(dataset)
    set_pre_checkin(dataset, ref, checkin_date="2025-12-01T15:00:00Z", guest_name="Luis")
    palace = dataset.palaces[0]
    ApartmentService(settings=settings).set_apartment_status(
        dataset, palace.id, palace.floors[0].apartments[0].id, "out_of_service", "AC"
    )
    payload = palace_to_dict(dataset.palaces[0])
    payload["floors"][0]["apartments"][0]["rooms"][0]["preCheckin"]["notes"] = "Llega tarde"

    updated = StructureService(settings=settings).update_palace(dataset, palace.id, payload)

    pre_checkin = updated.floors[0].apartments[0].rooms[0].pre_checkin
    assert pre_checkin is not None
    assert pre_checkin.notes == "Llega tarde"
