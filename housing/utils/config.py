"""Environment-driven application settings."""

from __future__ import annotations

import os
from dataclasses import dataclass
from functools import lru_cache
from pathlib import Path
from typing import Optional


def _env_str(name: str, default: str) -> str:
    value = os.getenv(name)
    if value is None or not value.strip():
        return default
    return value.strip()


def _env_optional_str(name: str) -> Optional[str]:
    value = os.getenv(name)
    if value is None or not value.strip():
        return None
    return value.strip()


def _env_int(name: str, default: int) -> int:
    value = os.getenv(name)
    if value is None or not value.strip():
        return default
    try:
        return int(value)
    except ValueError as exc:
        raise ValueError(f"{name} must be an integer, got {value!r}") from exc


def _env_bool(name: str, default: bool) -> bool:
    value = os.getenv(name)
    if value is None or not value.strip():
        return default
    return value.strip().lower() in {"1", "true", "yes", "on"}


@dataclass(frozen=True)
class Settings:
    app_name: str = "Staff Housing Occupancy Engine"
    app_version: str = "1.0.0"
    log_level: str = "INFO"

    database_path: Path = Path("data/housing.db")
    persist_snapshots: bool = False

    admin_token: Optional[str] = None
    jwt_secret: str = "change_me_please"
    jwt_algorithm: str = "HS256"
    access_token_ttl_minutes: int = 120
    require_authentication: bool = False
    super_admin_role: str = "super_admin"
    tenant_admin_role: str = "tenant_admin"

    default_namespace: str = "tenant_default"
    tenant_header_name: str = "X-Tenant-Namespace"

    structure_default_floors: int = 3
    structure_default_apartments_per_floor: int = 4
    structure_default_rooms_per_apartment: int = 2
    structure_default_room_capacity: int = 2
    palace_name_prefix: str = "Edificio"

    apartment_note_max_length: int = 320
    out_of_service_policy: str = "display_only"
    assignment_uniqueness_scope: str = "tenant"

    dashboard_recent_movements_limit: int = 20

    seed_demo_palaces: bool = False
    seed_demo_collaborators: bool = False
    demo_palace_count: int = 2


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Build settings once per process from HOUSING_* environment variables."""
    defaults = Settings()
    return Settings(
        app_name=_env_str("HOUSING_APP_NAME", defaults.app_name),
        app_version=_env_str("HOUSING_APP_VERSION", defaults.app_version),
        log_level=_env_str("HOUSING_LOG_LEVEL", defaults.log_level),
        database_path=Path(_env_str("HOUSING_DATABASE_PATH", str(defaults.database_path))),
        persist_snapshots=_env_bool("HOUSING_PERSIST_SNAPSHOTS", defaults.persist_snapshots),
        admin_token=_env_optional_str("ADMIN_TOKEN"),
        jwt_secret=_env_str("HOUSING_JWT_SECRET", defaults.jwt_secret),
        jwt_algorithm=_env_str("HOUSING_JWT_ALGORITHM", defaults.jwt_algorithm),
        access_token_ttl_minutes=_env_int(
            "HOUSING_ACCESS_TOKEN_TTL_MINUTES",
            defaults.access_token_ttl_minutes,
        ),
        require_authentication=_env_bool(
            "HOUSING_REQUIRE_AUTHENTICATION",
            defaults.require_authentication,
        ),
        super_admin_role=_env_str("HOUSING_SUPER_ADMIN_ROLE", defaults.super_admin_role),
        tenant_admin_role=_env_str("HOUSING_TENANT_ADMIN_ROLE", defaults.tenant_admin_role),
        default_namespace=_env_str("HOUSING_DEFAULT_NAMESPACE", defaults.default_namespace).lower(),
        tenant_header_name=_env_str("HOUSING_TENANT_HEADER", defaults.tenant_header_name),
        structure_default_floors=_env_int(
            "HOUSING_DEFAULT_FLOORS",
            defaults.structure_default_floors,
        ),
        structure_default_apartments_per_floor=_env_int(
            "HOUSING_DEFAULT_APARTMENTS_PER_FLOOR",
            defaults.structure_default_apartments_per_floor,
        ),
        structure_default_rooms_per_apartment=_env_int(
            "HOUSING_DEFAULT_ROOMS_PER_APARTMENT",
            defaults.structure_default_rooms_per_apartment,
        ),
        structure_default_room_capacity=_env_int(
            "HOUSING_DEFAULT_ROOM_CAPACITY",
            defaults.structure_default_room_capacity,
        ),
        palace_name_prefix=_env_str("HOUSING_PALACE_NAME_PREFIX", defaults.palace_name_prefix),
        apartment_note_max_length=_env_int(
            "HOUSING_APARTMENT_NOTE_MAX_LENGTH",
            defaults.apartment_note_max_length,
        ),
        out_of_service_policy=_env_str(
            "HOUSING_OUT_OF_SERVICE_POLICY",
            defaults.out_of_service_policy,
        ).lower(),
        assignment_uniqueness_scope=_env_str(
            "HOUSING_ASSIGNMENT_SCOPE",
            defaults.assignment_uniqueness_scope,
        ).lower(),
        dashboard_recent_movements_limit=_env_int(
            "HOUSING_RECENT_MOVEMENTS_LIMIT",
            defaults.dashboard_recent_movements_limit,
        ),
        seed_demo_palaces=_env_bool("SEED_DEMO_PALACES", defaults.seed_demo_palaces),
        seed_demo_collaborators=_env_bool(
            "SEED_DEMO_COLLABORATORS",
            defaults.seed_demo_collaborators,
        ),
        demo_palace_count=_env_int("HOUSING_DEMO_PALACE_COUNT", defaults.demo_palace_count),
    )
