from __future__ import annotations

from datetime import datetime, timedelta, timezone

import jwt
import pytest

from housing.services.auth_service import (
    AdminTokenNotConfiguredError,
    AuthService,
    InvalidAdminTokenError,
    InvalidBearerTokenError,
    TenantCredential,
)


def test_login_requires_configured_token(settings) -> None:
    with pytest.raises(AdminTokenNotConfiguredError):
        AuthService(settings=settings).login("anything")


def test_login_rejects_wrong_token(make_settings) -> None:
    service = AuthService(settings=make_settings(admin_token="secret-admin-token"))
    with pytest.raises(InvalidAdminTokenError):
        service.login("nope")


def test_login_issues_super_admin_token(make_settings) -> None:
    settings = make_settings(admin_token="secret-admin-token")
    service = AuthService(settings=settings)

    credential = service.decode_bearer_token(service.login("secret-admin-token"))

    assert credential.role == settings.super_admin_role
    assert credential.namespace == settings.default_namespace
    assert service.is_super_admin(credential)


def test_decode_accepts_alternate_claim_names(settings) -> None:
    token = jwt.encode(
        {"sub": "ops", "rol": "Tenant_Admin", "tenant": " Acme "},
        settings.jwt_secret,
        algorithm=settings.jwt_algorithm,
    )

    credential = AuthService(settings=settings).decode_bearer_token(token)

    assert credential == TenantCredential(subject="ops", role="tenant_admin", namespace="acme")


def test_expired_or_forged_tokens_rejected(settings) -> None:
    service = AuthService(settings=settings)
    expired = jwt.encode(
        {"sub": "ops", "exp": datetime.now(timezone.utc) - timedelta(minutes=1)},
        settings.jwt_secret,
        algorithm=settings.jwt_algorithm,
    )
    forged = jwt.encode({"sub": "ops"}, "another-secret-entirely-0123456789", algorithm="HS256")

    with pytest.raises(InvalidBearerTokenError):
        service.decode_bearer_token(expired)
    with pytest.raises(InvalidBearerTokenError):
        service.decode_bearer_token(forged)


# --- Namespace resolution ---

def test_anonymous_callers_use_default_tenant(settings) -> None:
    service = AuthService(settings=settings)
    assert service.resolve_namespace(None) == settings.default_namespace
    assert service.resolve_namespace(None, "acme") == settings.default_namespace


def test_override_honoured_for_super_admin(settings) -> None:
    service = AuthService(settings=settings)
    admin = TenantCredential(subject="admin", role=settings.super_admin_role, namespace=settings.default_namespace)

    assert service.resolve_namespace(admin, " Globex ") == "globex"
    assert service.resolve_namespace(admin, "  ") == settings.default_namespace


def test_override_ignored_for_other_tenants(settings) -> None:
    service = AuthService(settings=settings)
    tenant = TenantCredential(subject="acme-admin", role=settings.tenant_admin_role, namespace="acme")

    assert service.resolve_namespace(tenant) == "acme"
    assert service.resolve_namespace(tenant, "ACME") == "acme"
    assert service.resolve_namespace(tenant, "globex") == "acme"
