"""Pre-checkin scheduling: reserving one room slot ahead of an arrival."""

from __future__ import annotations

from typing import Optional

from housing.domain.constraints import MAX_SLOTS
from housing.domain.errors import ApartmentOutOfServiceError, CapacityError
from housing.domain.lookup import locate_room
from housing.domain.models import PreCheckin, Room, RoomRef, TenantDataset, parse_timestamp, utc_now
from housing.utils.logger import get_logger


logger = get_logger(__name__)


def set_pre_checkin(
    dataset: TenantDataset,
    ref: RoomRef,
    *,
    checkin_date: object,
    guest_name: Optional[str] = None,
    notes: str = "",
) -> Room:
    """Attach or replace the pre-checkin of a room.

    Status and guests are left alone; the reservation only shows up in the
    slot count.
    """
    parsed_date = parse_timestamp(checkin_date, "checkinDate")
    location = locate_room(dataset, ref)
    room = location.room

    if room.pre_checkin is None:
        if location.apartment.is_out_of_service:
            raise ApartmentOutOfServiceError(
                f"Apartment {location.apartment.name} is out of service"
            )
        if len(room.collaborator_ids) + 1 > MAX_SLOTS:
            raise CapacityError(f"Room {room.name} has no free slot for a pre-checkin")

    cleaned_name = (guest_name or "").strip()
    room.pre_checkin = PreCheckin(
        checkin_date=parsed_date,
        guest_name=cleaned_name or None,
        notes=(notes or "").strip(),
    )
    if room.capacity < room.occupant_count:
        room.capacity = room.occupant_count
    location.palace.updated_at = utc_now()
    logger.info(
        "Pre-checkin set | palace=%s room=%s checkin=%s",
        ref.palace_id,
        ref.room_id,
        parsed_date.isoformat(),
    )
    return room


def clear_pre_checkin(dataset: TenantDataset, ref: RoomRef) -> Room:
    location = locate_room(dataset, ref)
    if location.room.pre_checkin is not None:
        location.room.pre_checkin = None
        location.palace.updated_at = utc_now()
        logger.info("Pre-checkin cleared | palace=%s room=%s", ref.palace_id, ref.room_id)
    return location.room
