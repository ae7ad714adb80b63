"""Shared FastAPI dependency providers for controller layer."""

from __future__ import annotations

from typing import Optional

from fastapi import Depends, HTTPException, Request, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from housing.repository.tenant_store import TenantContextStore
from housing.services.auth_service import (
    AuthService,
    InvalidBearerTokenError,
    TenantCredential,
)
from housing.services.occupancy_service import OccupancyService
from housing.utils.config import get_settings
from housing.utils.logger import get_logger


logger = get_logger(__name__)

bearer_scheme = HTTPBearer(auto_error=False)


def get_auth_service(request: Request) -> AuthService:
    service = getattr(request.app.state, "auth_service", None)
    if service is None:
        service = AuthService(settings=get_settings())
        request.app.state.auth_service = service
    return service


def get_occupancy_service(request: Request) -> OccupancyService:
    service = getattr(request.app.state, "occupancy_service", None)
    if service is None:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Occupancy service is not initialized",
        )
    return service


def get_tenant_store(
    occupancy_service: OccupancyService = Depends(get_occupancy_service),
) -> TenantContextStore:
    return occupancy_service.store


async def get_credential(
    request: Request,
    credentials: HTTPAuthorizationCredentials | None = Depends(bearer_scheme),
    auth_service: AuthService = Depends(get_auth_service),
) -> Optional[TenantCredential]:
    """Decode the bearer token if present.

    Without enforced authentication an unusable token falls back to the
    anonymous (default tenant) context.
    """
    settings = getattr(request.app.state, "settings", None) or get_settings()
    if credentials is None:
        if settings.require_authentication:
            raise HTTPException(
                status_code=status.HTTP_401_UNAUTHORIZED,
                detail="Authorization header with Bearer token is required",
            )
        return None
    try:
        return auth_service.decode_bearer_token(credentials.credentials)
    except InvalidBearerTokenError as exc:
        if settings.require_authentication:
            raise HTTPException(
                status_code=status.HTTP_401_UNAUTHORIZED,
                detail=str(exc),
            ) from exc
        logger.warning("Ignoring unusable bearer token: %s", exc)
        return None


async def get_namespace(
    request: Request,
    credential: Optional[TenantCredential] = Depends(get_credential),
    auth_service: AuthService = Depends(get_auth_service),
) -> str:
    settings = getattr(request.app.state, "settings", None) or get_settings()
    override = request.headers.get(settings.tenant_header_name)
    return auth_service.resolve_namespace(credential, override)


async def require_super_admin(
    credential: Optional[TenantCredential] = Depends(get_credential),
    auth_service: AuthService = Depends(get_auth_service),
) -> None:
    if not auth_service.auth_enabled:
        return
    if credential is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Authorization header with Bearer token is required",
        )
    if not auth_service.is_super_admin(credential):
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Super administrator role is required",
        )
