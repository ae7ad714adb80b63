"""Controller layer for login, tenant administration and snapshots."""

from __future__ import annotations

from typing import Any

from fastapi import APIRouter, Body, Depends, HTTPException, status

from housing.controllers.dependencies import (
    get_auth_service,
    get_namespace,
    get_tenant_store,
    require_super_admin,
)
from housing.controllers.errors import to_http_exception, unexpected_failure
from housing.controllers.schemas import (
    LoginRequest,
    LoginResponse,
    TenantCreateRequest,
    TenantListResponse,
    TenantResponse,
)
from housing.domain.errors import HousingError
from housing.repository.tenant_store import TenantContextStore
from housing.services.auth_service import (
    AdminTokenNotConfiguredError,
    AuthService,
    InvalidAdminTokenError,
)


router = APIRouter(tags=["admin"])


@router.post("/login", response_model=LoginResponse, status_code=status.HTTP_200_OK)
async def login(
    payload: LoginRequest,
    auth_service: AuthService = Depends(get_auth_service),
) -> LoginResponse:
    try:
        bearer = auth_service.login(payload.admin_token)
        return LoginResponse(access_token=bearer)
    except (AdminTokenNotConfiguredError, InvalidAdminTokenError) as exc:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=str(exc),
        ) from exc
    except Exception as exc:  # pragma: no cover - defensive fallback
        raise unexpected_failure("login") from exc


@router.get(
    "/admin/tenants",
    response_model=TenantListResponse,
    status_code=status.HTTP_200_OK,
    dependencies=[Depends(require_super_admin)],
)
async def list_tenants(
    store: TenantContextStore = Depends(get_tenant_store),
) -> TenantListResponse:
    return TenantListResponse(namespaces=store.namespaces(), default_namespace=store.default_namespace)


@router.post(
    "/admin/tenants",
    response_model=TenantResponse,
    status_code=status.HTTP_201_CREATED,
    dependencies=[Depends(require_super_admin)],
)
async def register_tenant(
    payload: TenantCreateRequest,
    store: TenantContextStore = Depends(get_tenant_store),
    auth_service: AuthService = Depends(get_auth_service),
) -> TenantResponse:
    try:
        namespace = store.register_tenant(
            payload.namespace,
            clone_from_default=payload.clone_from_default,
        )
    except HousingError as exc:
        raise to_http_exception(exc, "register tenant") from exc
    except Exception as exc:  # pragma: no cover - defensive fallback
        raise unexpected_failure("register tenant") from exc

    access_token = None
    if auth_service.auth_enabled:
        access_token = auth_service.issue_token(
            subject=f"{namespace}-admin",
            role=auth_service.tenant_admin_role,
            namespace=namespace,
        )
    return TenantResponse(namespace=namespace, access_token=access_token)


@router.delete(
    "/admin/tenants/{namespace}",
    response_model=TenantResponse,
    status_code=status.HTTP_200_OK,
    dependencies=[Depends(require_super_admin)],
)
async def remove_tenant(
    namespace: str,
    store: TenantContextStore = Depends(get_tenant_store),
) -> TenantResponse:
    try:
        removed = store.remove_tenant(namespace)
        return TenantResponse(namespace=removed)
    except HousingError as exc:
        raise to_http_exception(exc, "remove tenant") from exc
    except Exception as exc:  # pragma: no cover - defensive fallback
        raise unexpected_failure("remove tenant") from exc


@router.get("/tenant/snapshot", status_code=status.HTTP_200_OK)
async def export_snapshot(
    namespace: str = Depends(get_namespace),
    store: TenantContextStore = Depends(get_tenant_store),
) -> dict[str, Any]:
    try:
        return store.snapshot(namespace)
    except HousingError as exc:
        raise to_http_exception(exc, "export snapshot") from exc
    except Exception as exc:  # pragma: no cover - defensive fallback
        raise unexpected_failure("export snapshot") from exc


@router.put("/tenant/snapshot", status_code=status.HTTP_200_OK)
async def import_snapshot(
    payload: dict[str, Any] = Body(...),
    namespace: str = Depends(get_namespace),
    store: TenantContextStore = Depends(get_tenant_store),
) -> dict[str, Any]:
    try:
        return store.restore(namespace, payload)
    except HousingError as exc:
        raise to_http_exception(exc, "import snapshot") from exc
    except Exception as exc:  # pragma: no cover - defensive fallback
        raise unexpected_failure("import snapshot") from exc
