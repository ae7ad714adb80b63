#!/usr/bin/env python3
"""Validate local housing engine environment readiness."""

from __future__ import annotations

import importlib
import shutil
import sys
import tempfile
from dataclasses import replace
from importlib.metadata import version
from pathlib import Path

PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from housing.domain.models import RoomRef
from housing.repository.snapshot_repository import SnapshotRepository
from housing.repository.tenant_store import TenantContextStore
from housing.services.occupancy_service import OccupancyService
from housing.services.seed_service import seed_demo_data
from housing.utils.config import get_settings

SEPARATOR_LINE = "=" * 44


def _print_result(name: str, success: bool, detail: str = "") -> tuple[bool, str]:
    if success:
        return True, f"[PASS] {name}{detail}"
    return False, f"[FAIL] {name}: {detail}"


def main() -> int:
    results: list[str] = []
    all_passed = True
    temp_dir = tempfile.mkdtemp(prefix="housing-env-")

    # CHECK 1: Python version >= 3.11
    if sys.version_info >= (3, 11):
        ok, line = _print_result("Python " + sys.version.split()[0], True)
    else:
        ok, line = _print_result(
            "Python version >= 3.11",
            False,
            f"found {sys.version.split()[0]}",
        )
    results.append(line)
    all_passed = all_passed and ok

    # CHECK 2: Required packages importable with versions
    package_specs = [
        ("fastapi", "fastapi"),
        ("uvicorn", "uvicorn"),
        ("pydantic", "pydantic"),
        ("pandas", "pandas"),
        ("jwt", "PyJWT"),
        ("httpx", "httpx"),
        ("pytest", "pytest"),
    ]
    import_errors: list[str] = []
    for module_name, dist_name in package_specs:
        try:
            importlib.import_module(module_name)
            version(dist_name)
        except Exception as exc:  # pragma: no cover - runtime guard
            import_errors.append(f"{module_name} ({exc})")
    if import_errors:
        ok, line = _print_result(
            "Required packages",
            False,
            "missing/unimportable -> " + "; ".join(import_errors),
        )
    else:
        ok, line = _print_result("Required packages: all importable", True)
    results.append(line)
    all_passed = all_passed and ok

    try:
        validation_settings = replace(
            get_settings(),
            database_path=Path(temp_dir) / "housing_validation.db",
            persist_snapshots=True,
            seed_demo_palaces=True,
            seed_demo_collaborators=True,
        )
        repository = SnapshotRepository(validation_settings)

        # CHECK 3: Database initialization
        try:
            repository.initialize_database()
            ok, line = _print_result("Database initialization", True)
        except Exception as exc:
            ok, line = _print_result("Database initialization", False, str(exc))
        results.append(line)
        all_passed = all_passed and ok

        store = TenantContextStore(settings=validation_settings, repository=repository)
        service = OccupancyService(store=store, settings=validation_settings)

        # CHECK 4: Demo seeding
        try:
            seeded = seed_demo_data(
                store,
                service.structure,
                service.assignments,
                validation_settings,
            )
            if seeded["palaces"] != validation_settings.demo_palace_count:
                raise RuntimeError(f"expected {validation_settings.demo_palace_count} palaces, got {seeded}")
            ok, line = _print_result(
                "Demo seeding",
                True,
                f": {seeded['palaces']} palaces, {seeded['collaborators']} collaborators",
            )
        except Exception as exc:
            ok, line = _print_result("Demo seeding", False, str(exc))
        results.append(line)
        all_passed = all_passed and ok

        # CHECK 5: Assignment round trip against the seeded structure
        try:
            listing = service.list_palaces(None)
            palace = listing["palaces"][0]
            room = palace["floors"][0]["apartments"][2]["rooms"][0]
            ref = RoomRef(palace_id=palace["id"], room_id=room["id"])
            directory = service.list_collaborators(None, "activos")["collaborators"]
            unassigned = next(item for item in directory if not item["assignments"])
            service.assign(None, ref, [unassigned["id"]])
            lookup = service.lookup(None, unassigned["id"])
            if not lookup["assignments"]:
                raise RuntimeError("assigned collaborator not found by lookup")
            ok, line = _print_result("Assignment round trip", True)
        except Exception as exc:
            ok, line = _print_result("Assignment round trip", False, str(exc))
        results.append(line)
        all_passed = all_passed and ok

        # CHECK 6: Snapshot persistence
        try:
            stored = repository.count_snapshots()
            if stored < 1:
                raise RuntimeError("no tenant snapshot was persisted")
            reloaded = TenantContextStore(settings=validation_settings, repository=repository)
            loaded = reloaded.load_from_repository()
            ok, line = _print_result("Snapshot persistence", True, f": {loaded} tenants reloaded")
        except Exception as exc:
            ok, line = _print_result("Snapshot persistence", False, str(exc))
        results.append(line)
        all_passed = all_passed and ok

    finally:
        shutil.rmtree(temp_dir, ignore_errors=True)

    print(SEPARATOR_LINE)
    print(" Housing Engine Environment Validation")
    print(SEPARATOR_LINE)
    for line in results:
        print(f" {line}")
    print(SEPARATOR_LINE)
    if all_passed:
        print(" All checks passed. Environment is ready.")
        print(SEPARATOR_LINE)
        return 0
    print(" One or more checks failed.")
    print(SEPARATOR_LINE)
    return 1


if __name__ == "__main__":
    raise SystemExit(main())
