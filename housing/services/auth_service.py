"""Admin login and JWT bearer credentials carrying a tenant namespace."""

from __future__ import annotations

import secrets
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Optional

import jwt

from housing.repository.tenant_store import normalize_namespace
from housing.utils.config import Settings, get_settings


class AuthenticationError(Exception):
    """Base authentication failure."""


class AdminTokenNotConfiguredError(AuthenticationError):
    """Raised when ADMIN_TOKEN is missing."""


class InvalidAdminTokenError(AuthenticationError):
    """Raised when provided token is invalid."""


class InvalidBearerTokenError(AuthenticationError):
    """Raised when a bearer token cannot be decoded or has expired."""


class InsufficientRoleError(AuthenticationError):
    """Raised when a credential lacks the role an operation needs."""


@dataclass(frozen=True)
class TenantCredential:
    subject: str
    role: str
    namespace: str


class AuthService:
    """Validates login credentials and issues/decodes bearer tokens."""

    def __init__(self, settings: Optional[Settings] = None) -> None:
        self._settings = settings or get_settings()

    @property
    def auth_enabled(self) -> bool:
        return bool(self._settings.admin_token)

    @property
    def tenant_admin_role(self) -> str:
        return self._settings.tenant_admin_role

    def _expected_token(self) -> str:
        if not self._settings.admin_token:
            raise AdminTokenNotConfiguredError(
                "ADMIN_TOKEN is not configured. Set ADMIN_TOKEN in environment variables."
            )
        return self._settings.admin_token

    def login(self, provided_admin_token: str) -> str:
        expected = self._expected_token()
        if not secrets.compare_digest(provided_admin_token, expected):
            raise InvalidAdminTokenError("Invalid admin token")
        return self.issue_token(
            subject="admin",
            role=self._settings.super_admin_role,
            namespace=self._settings.default_namespace,
        )

    def issue_token(self, *, subject: str, role: str, namespace: str) -> str:
        now = datetime.now(timezone.utc)
        payload = {
            "sub": subject,
            "role": role.lower(),
            "namespace": normalize_namespace(namespace, self._settings.default_namespace),
            "iat": now,
            "exp": now + timedelta(minutes=self._settings.access_token_ttl_minutes),
            "typ": "access",
        }
        return jwt.encode(payload, self._settings.jwt_secret, algorithm=self._settings.jwt_algorithm)

    def decode_bearer_token(self, token: str) -> TenantCredential:
        try:
            claims = jwt.decode(
                token,
                self._settings.jwt_secret,
                algorithms=[self._settings.jwt_algorithm],
            )
        except jwt.PyJWTError as exc:
            raise InvalidBearerTokenError(f"Invalid bearer token: {exc}") from exc
        raw_namespace = claims.get("namespace") or claims.get("tenant") or claims.get("ns")
        raw_role = claims.get("role") or claims.get("rol") or ""
        return TenantCredential(
            subject=str(claims.get("sub") or ""),
            role=str(raw_role).lower(),
            namespace=normalize_namespace(raw_namespace, self._settings.default_namespace),
        )

    def is_super_admin(self, credential: Optional[TenantCredential]) -> bool:
        return credential is not None and credential.role == self._settings.super_admin_role

    def resolve_namespace(
        self,
        credential: Optional[TenantCredential],
        override: Optional[str] = None,
    ) -> str:
        """Pick the tenant an operation runs against.

        The override header wins only for a super administrator or when it
        names the credential's own tenant. Anonymous callers land on the
        default tenant.
        """
        token_namespace = (
            credential.namespace if credential is not None else self._settings.default_namespace
        )
        if override and override.strip():
            requested = normalize_namespace(override, self._settings.default_namespace)
            if self.is_super_admin(credential) or requested == token_namespace:
                return requested
        return token_namespace
