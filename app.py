"""
app.py: FastAPI application factory and startup lifecycle.

This is the ASGI application object imported by uvicorn.
It wires the services and routers, then runs startup initialization.

Usage (via launcher):
    python main.py

Usage (direct uvicorn):
    uvicorn app:app --reload
"""

from __future__ import annotations

from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI

from housing.controllers.admin_controller import router as admin_router
from housing.controllers.assignment_controller import router as assignment_router
from housing.controllers.collaborator_controller import router as collaborator_router
from housing.controllers.dashboard_controller import router as dashboard_router
from housing.controllers.structure_controller import router as structure_router
from housing.repository.snapshot_repository import SnapshotRepository
from housing.repository.tenant_store import TenantContextStore
from housing.services.apartment_service import ApartmentService
from housing.services.assignment_service import AssignmentService
from housing.services.auth_service import AuthService
from housing.services.dashboard_service import DashboardService
from housing.services.occupancy_service import OccupancyService
from housing.services.seed_service import seed_demo_data
from housing.services.structure_service import StructureService
from housing.utils.config import Settings, get_settings
from housing.utils.logger import configure_logging, get_logger


logger = get_logger(__name__)


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    """
    Build and wire the FastAPI application.

    Instantiates all services with explicit dependency injection via app.state.
    Tests pass their own settings; the server uses environment-driven ones.
    """
    settings = settings or get_settings()
    configure_logging(settings.log_level)

    # --- Repository (only when snapshots are persisted) ---
    repository = SnapshotRepository(settings) if settings.persist_snapshots else None
    store = TenantContextStore(settings=settings, repository=repository)

    # --- Services (business logic, no direct DB access) ---
    structure_service = StructureService(settings=settings)
    assignment_service = AssignmentService(settings=settings)
    occupancy_service = OccupancyService(
        store=store,
        structure_service=structure_service,
        assignment_service=assignment_service,
        apartment_service=ApartmentService(settings=settings),
        dashboard_service=DashboardService(settings=settings),
        settings=settings,
    )
    auth_service = AuthService(settings=settings)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """Run startup initialization before accepting requests."""
        _startup(app)
        yield

    app = FastAPI(
        title=settings.app_name,
        version=settings.app_version,
        lifespan=lifespan,
    )

    # --- Routers ---
    app.include_router(admin_router)
    app.include_router(structure_router)
    app.include_router(assignment_router)
    app.include_router(collaborator_router)
    app.include_router(dashboard_router)

    # --- Inject services into app.state for dependency resolution ---
    app.state.settings = settings
    app.state.repository = repository
    app.state.tenant_store = store
    app.state.occupancy_service = occupancy_service
    app.state.auth_service = auth_service

    return app


def _startup(app: FastAPI) -> None:
    """
    Idempotent startup sequence. Safe to re-run on server restarts.

    Order matters:
      1. Schema must exist before persisted tenants are loaded.
      2. Persisted tenants are restored before seeding, so seeding never
         overwrites a stored default tenant.
    """
    settings: Settings = app.state.settings
    repository: Optional[SnapshotRepository] = app.state.repository
    occupancy_service: OccupancyService = app.state.occupancy_service

    if repository is not None:
        logger.info("Startup: initializing snapshot schema")
        repository.initialize_database()
        logger.info("Startup: restoring persisted tenants")
        occupancy_service.store.load_from_repository()

    logger.info("Startup: seeding demo data (skipped if default tenant not empty)")
    seed_demo_data(
        occupancy_service.store,
        occupancy_service.structure,
        occupancy_service.assignments,
        settings,
    )

    logger.info("Startup complete | default_namespace=%s", settings.default_namespace)


# Module-level app object for uvicorn
app = create_app()
