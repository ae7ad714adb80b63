from __future__ import annotations

from datetime import datetime, timezone

import pytest

from housing.domain.constraints import available_slots
from housing.domain.errors import ApartmentOutOfServiceError, CapacityError, ValidationError
from housing.domain.lookup import locate_room
from housing.domain.models import RoomStatus
from housing.services.apartment_service import ApartmentService
from housing.services.assignment_service import AssignmentService
from housing.services.pre_checkin_service import clear_pre_checkin, set_pre_checkin


def test_pre_checkin_consumes_slot_without_changing_status(dataset, ref_for) -> None:
    ref = ref_for(dataset)
    room = locate_room(dataset, ref).room
    assert available_slots(room) == 2

    room = set_pre_checkin(
        dataset,
        ref,
        checkin_date="2025-12-01T15:00:00Z",
        guest_name="Ana",
        notes="",
    )

    assert available_slots(room) == 1
    assert room.status == RoomStatus.AVAILABLE
    assert room.guests == 0
    assert room.pre_checkin.guest_name == "Ana"
    assert room.pre_checkin.checkin_date == datetime(2025, 12, 1, 15, 0, tzinfo=timezone.utc)


def test_unparsable_date_is_validation_error(dataset, ref_for) -> None:
    ref = ref_for(dataset)
    with pytest.raises(ValidationError):
        set_pre_checkin(dataset, ref, checkin_date="next tuesday")
    assert locate_room(dataset, ref).room.pre_checkin is None


def test_blank_guest_name_is_stored_as_none(dataset, ref_for) -> None:
    room = set_pre_checkin(dataset, ref_for(dataset), checkin_date="2025-12-01", guest_name="  ")
    assert room.pre_checkin.guest_name is None


def test_full_room_rejects_new_pre_checkin(dataset, settings, ref_for) -> None:
    ref = ref_for(dataset)
    AssignmentService(settings=settings).assign(dataset, ref, ["col_ana", "col_bruno"])

    with pytest.raises(CapacityError):
        set_pre_checkin(dataset, ref, checkin_date="2025-12-01T15:00:00Z")


def test_replacing_pre_checkin_keeps_single_slot(dataset, settings, ref_for) -> None:
    ref = ref_for(dataset)
    AssignmentService(settings=settings).assign(dataset, ref, ["col_ana"])
    set_pre_checkin(dataset, ref, checkin_date="2025-12-01T15:00:00Z", guest_name="Ana")

    room = set_pre_checkin(dataset, ref, checkin_date="2025-12-03T09:00:00Z", guest_name="Luis")

    assert room.pre_checkin.guest_name == "Luis"
    assert available_slots(room) == 0
    assert room.guests == 1


def test_out_of_service_apartment_rejects_pre_checkin(dataset, settings, ref_for) -> None:
    ref = ref_for(dataset)
    ApartmentService(settings=settings).set_apartment_status(
        dataset, ref.palace_id, locate_room(dataset, ref).apartment.id, "out_of_service"
    )

    with pytest.raises(ApartmentOutOfServiceError):
        set_pre_checkin(dataset, ref, checkin_date="2025-12-01T15:00:00Z")


def test_clear_pre_checkin_frees_slot(dataset, ref_for) -> None:
    ref = ref_for(dataset)
    set_pre_checkin(dataset, ref, checkin_date="2025-12-01T15:00:00Z")

    room = clear_pre_checkin(dataset, ref)

    assert room.pre_checkin is None
    assert available_slots(room) == 2
