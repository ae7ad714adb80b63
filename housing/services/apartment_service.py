"""Apartment lifecycle (active / out of service) and occupancy statistics."""

from __future__ import annotations

import math
from dataclasses import asdict, dataclass
from typing import Any, Optional

from housing.domain.constraints import PolicyConfig, validate_policy_config
from housing.domain.errors import ValidationError
from housing.domain.lookup import find_apartment, find_palace, iter_room_locations
from housing.domain.models import (
    Apartment,
    ApartmentStatus,
    MaintenanceAreaType,
    MovementType,
    Palace,
    RoomStatus,
    TenantDataset,
    utc_now,
)
from housing.domain.room_state import MaintenanceDetails, set_room_status
from housing.services.movement_service import record_movement, unassignment_note
from housing.utils.config import Settings, get_settings
from housing.utils.logger import get_logger


logger = get_logger(__name__)

# Zone written on rooms forced into maintenance by the cascade policy, so that
# reactivation only releases the rooms it locked itself.
CASCADE_MAINTENANCE_ZONE = "apartment_out_of_service"
DEFAULT_CASCADE_NOTE = "Apartamento fuera de servicio"


def _round_percent(part: int, whole: int) -> int:
    if whole <= 0:
        return 0
    return int(math.floor(part / whole * 100 + 0.5))


@dataclass
class OccupancyCounts:
    rooms: int = 0
    occupied: int = 0
    maintenance: int = 0
    guests: int = 0
    capacity: int = 0
    apartments: int = 0
    apartments_out_of_service: int = 0
    floors: int = 0

    @property
    def available(self) -> int:
        return max(self.rooms - self.occupied - self.maintenance, 0)

    @property
    def occupancy_rate(self) -> int:
        return _round_percent(self.guests, self.capacity)


def count_palace(palace: Palace) -> OccupancyCounts:
    """Tally a palace; rooms of an out-of-service apartment count as maintenance."""
    counts = OccupancyCounts(floors=len(palace.floors))
    for floor in palace.floors:
        for apartment in floor.apartments:
            counts.apartments += 1
            if apartment.is_out_of_service:
                counts.apartments_out_of_service += 1
            for room in apartment.rooms:
                counts.rooms += 1
                counts.capacity += room.capacity
                counts.guests += room.guests
                if apartment.is_out_of_service or room.status == RoomStatus.MAINTENANCE:
                    counts.maintenance += 1
                elif room.status == RoomStatus.OCCUPIED or room.guests > 0:
                    counts.occupied += 1
    return counts


def compute_palace_stats(palace: Palace) -> dict[str, int]:
    counts = count_palace(palace)
    return {
        "rooms": counts.rooms,
        "occupied": counts.occupied,
        "available": counts.available,
        "maintenance": counts.maintenance,
        "outOfService": counts.apartments_out_of_service,
        "guests": counts.guests,
        "capacity": counts.capacity,
        "occupancyRate": counts.occupancy_rate,
    }


def compute_property_stats(dataset: TenantDataset) -> dict[str, Any]:
    totals = OccupancyCounts()
    by_palace: list[dict[str, Any]] = []
    for palace in dataset.palaces:
        counts = count_palace(palace)
        for key, value in asdict(counts).items():
            setattr(totals, key, getattr(totals, key) + value)
        by_palace.append(
            {
                "id": palace.id,
                "name": palace.name,
                "seriesNumber": palace.series_number,
                "roomsTotal": counts.rooms,
                "roomsOccupied": counts.occupied,
                "roomsMaintenance": counts.maintenance,
                "roomsAvailable": counts.available,
                "capacity": counts.capacity,
                "guests": counts.guests,
                "occupancyPercent": counts.occupancy_rate,
                "apartmentsOutOfService": counts.apartments_out_of_service,
            }
        )
    return {
        "totalPalaces": len(dataset.palaces),
        "totalFloors": totals.floors,
        "totalApartments": totals.apartments,
        "apartmentsOutOfService": totals.apartments_out_of_service,
        "totalRooms": totals.rooms,
        "totalCapacity": totals.capacity,
        "totalGuests": totals.guests,
        "roomsOccupied": totals.occupied,
        "roomsMaintenance": totals.maintenance,
        "roomsAvailable": totals.available,
        "occupancyRate": totals.occupancy_rate,
        "occupancyByPalace": by_palace,
    }


def parse_apartment_status(value: object) -> ApartmentStatus:
    raw = value.value if isinstance(value, ApartmentStatus) else str(value or "").strip().lower()
    try:
        return ApartmentStatus(raw)
    except ValueError as exc:
        raise ValidationError(
            f"Apartment status must be active or out_of_service, got {value!r}"
        ) from exc


class ApartmentService:
    """Transitions apartments between active and out of service."""

    def __init__(self, settings: Optional[Settings] = None) -> None:
        self._settings = settings or get_settings()
        self.policy = PolicyConfig.from_settings(self._settings)
        validate_policy_config(self.policy)

    def set_apartment_status(
        self,
        dataset: TenantDataset,
        palace_id: str,
        apartment_id: str,
        status: ApartmentStatus | str,
        note: Optional[str] = None,
    ) -> Apartment:
        palace = find_palace(dataset, palace_id)
        _, apartment = find_apartment(palace, apartment_id)
        target = parse_apartment_status(status)

        if target == ApartmentStatus.OUT_OF_SERVICE:
            apartment.status = ApartmentStatus.OUT_OF_SERVICE
            apartment.out_of_service_note = (note or "").strip()[
                : self.policy.apartment_note_max_length
            ]
            if self.policy.out_of_service_policy == "cascade":
                self._lock_rooms(dataset, palace, apartment)
        else:
            apartment.status = ApartmentStatus.ACTIVE
            apartment.out_of_service_note = ""
            if self.policy.out_of_service_policy == "cascade":
                self._release_rooms(apartment)

        palace.updated_at = utc_now()
        logger.info(
            "Apartment status updated | palace=%s apartment=%s status=%s policy=%s",
            palace.id,
            apartment.id,
            apartment.status.value,
            self.policy.out_of_service_policy,
        )
        return apartment

    def _lock_rooms(self, dataset: TenantDataset, palace: Palace, apartment: Apartment) -> None:
        locations = [
            location
            for location in iter_room_locations(palace)
            if location.apartment.id == apartment.id
        ]
        for location in locations:
            room = location.room
            for collaborator_id in list(room.collaborator_ids):
                record_movement(
                    dataset,
                    MovementType.UNASSIGNMENT,
                    collaborator_id,
                    location,
                    note=unassignment_note(location),
                )
            room.collaborator_ids = []
            room.pre_checkin = None
            if room.status == RoomStatus.MAINTENANCE:
                room.guests = 0
                continue
            set_room_status(
                room,
                RoomStatus.MAINTENANCE,
                maintenance=MaintenanceDetails(
                    note=apartment.out_of_service_note or DEFAULT_CASCADE_NOTE,
                    zone=CASCADE_MAINTENANCE_ZONE,
                    area_type=MaintenanceAreaType.ROOM.value,
                ),
            )

    def _release_rooms(self, apartment: Apartment) -> None:
        for room in apartment.rooms:
            if (
                room.status == RoomStatus.MAINTENANCE
                and room.maintenance_zone == CASCADE_MAINTENANCE_ZONE
            ):
                set_room_status(room, RoomStatus.AVAILABLE)
