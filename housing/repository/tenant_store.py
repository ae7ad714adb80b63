"""Per-tenant dataset registry with serialized, all-or-nothing operations."""

from __future__ import annotations

import copy
from threading import RLock
from typing import Any, Callable, Optional, TypeVar

from housing.domain.constraints import check_dataset_invariants
from housing.domain.errors import (
    NotFoundError,
    ProtectedTenantError,
    TenantIsolationError,
    ValidationError,
)
from housing.domain.models import TenantDataset
from housing.domain.normalization import normalize_palace
from housing.domain.serialization import dataset_from_dict, dataset_to_dict
from housing.repository.snapshot_repository import SnapshotRepository
from housing.utils.config import Settings, get_settings
from housing.utils.logger import get_logger, tenant_context


logger = get_logger(__name__)

T = TypeVar("T")


def normalize_namespace(namespace: Optional[str], default_namespace: str) -> str:
    raw = namespace.strip() if isinstance(namespace, str) else ""
    return raw.lower() if raw else default_namespace


class TenantContextStore:
    """Holds one dataset per namespace and runs operations against them.

    Operations on the same namespace are serialized by a per-namespace lock.
    A mutating operation works on a private copy that replaces the committed
    dataset only after it returns and the invariants hold, so a failure
    leaves the tenant untouched.
    """

    def __init__(
        self,
        settings: Optional[Settings] = None,
        repository: Optional[SnapshotRepository] = None,
    ) -> None:
        self._settings = settings or get_settings()
        self._repository = repository
        self._datasets: dict[str, TenantDataset] = {}
        self._locks: dict[str, RLock] = {}
        self._registry_lock = RLock()
        self._ensure(self.default_namespace)

    @property
    def default_namespace(self) -> str:
        return self._settings.default_namespace

    def resolve_key(self, namespace: Optional[str]) -> str:
        return normalize_namespace(namespace, self.default_namespace)

    def _ensure(self, key: str) -> RLock:
        with self._registry_lock:
            if key not in self._datasets:
                self._datasets[key] = TenantDataset(namespace=key)
                self._locks[key] = RLock()
                logger.info("Tenant dataset created | namespace=%s", key)
            return self._locks[key]

    def _persist(self, key: str, dataset: TenantDataset) -> None:
        if self._repository is None:
            return
        self._repository.save_snapshot(key, dataset_to_dict(dataset))

    def run(
        self,
        namespace: Optional[str],
        operation: Callable[[TenantDataset], T],
        *,
        readonly: bool = False,
    ) -> T:
        """Resolve (or create) the tenant dataset and run ``operation`` on it."""
        key = self.resolve_key(namespace)
        lock = self._ensure(key)
        with lock, tenant_context(key):
            current = self._datasets.get(key)
            if current is None or self._locks.get(key) is not lock:
                raise TenantIsolationError(f"Tenant {key} was removed or replaced while waiting")
            if readonly:
                return operation(current)

            working = copy.deepcopy(current)
            result = operation(working)
            if working.namespace != key:
                raise TenantIsolationError(
                    f"Operation for {key} returned dataset of {working.namespace}"
                )
            check_dataset_invariants(working)
            if self._locks.get(key) is not lock:
                raise TenantIsolationError(
                    f"Tenant {key} was removed or replaced during the operation"
                )
            self._persist(key, working)
            self._datasets[key] = working
            return result

    def namespaces(self) -> list[str]:
        with self._registry_lock:
            return sorted(self._datasets)

    def has_tenant(self, namespace: Optional[str]) -> bool:
        with self._registry_lock:
            return self.resolve_key(namespace) in self._datasets

    def register_tenant(self, namespace: str, *, clone_from_default: bool = False) -> str:
        key = self.resolve_key(namespace)
        with self._registry_lock:
            if key in self._datasets:
                raise ValidationError(f"Tenant {key} already exists", code="tenant_exists")
            dataset = TenantDataset(namespace=key)
            if clone_from_default:
                default_lock = self._locks[self.default_namespace]
                with default_lock:
                    source = self._datasets[self.default_namespace]
                    dataset.palaces = copy.deepcopy(source.palaces)
                    dataset.collaborators = copy.deepcopy(source.collaborators)
                    dataset.collaborator_movements = copy.deepcopy(source.collaborator_movements)
            self._persist(key, dataset)
            self._datasets[key] = dataset
            self._locks[key] = RLock()
        logger.info("Tenant registered | namespace=%s cloned=%s", key, clone_from_default)
        return key

    def remove_tenant(self, namespace: str) -> str:
        key = self.resolve_key(namespace)
        if key == self.default_namespace:
            raise ProtectedTenantError(f"The default tenant {key} cannot be removed")
        with self._registry_lock:
            if key not in self._datasets:
                raise NotFoundError(f"Tenant {key} not found")
            with self._locks[key]:
                del self._datasets[key]
            del self._locks[key]
            if self._repository is not None:
                self._repository.delete_snapshot(key)
        logger.info("Tenant removed | namespace=%s", key)
        return key

    def snapshot(self, namespace: Optional[str]) -> dict[str, Any]:
        return self.run(namespace, dataset_to_dict, readonly=True)

    def restore(self, namespace: Optional[str], payload: dict[str, Any]) -> dict[str, Any]:
        """Replace a tenant dataset with an externally stored snapshot."""
        key = self.resolve_key(namespace)
        restored = dataset_from_dict(
            payload,
            key,
            note_max_length=self._settings.apartment_note_max_length,
        )
        restored.palaces = [normalize_palace(palace) for palace in restored.palaces]

        def _replace(dataset: TenantDataset) -> dict[str, Any]:
            dataset.palaces = restored.palaces
            dataset.collaborators = restored.collaborators
            dataset.collaborator_movements = restored.collaborator_movements
            return dataset_to_dict(dataset)

        result = self.run(key, _replace)
        logger.info(
            "Tenant restored from snapshot | namespace=%s palaces=%s collaborators=%s",
            key,
            len(restored.palaces),
            len(restored.collaborators),
        )
        return result

    def load_from_repository(self) -> int:
        """Restore every persisted tenant; returns the number of tenants loaded."""
        if self._repository is None:
            return 0
        loaded = 0
        for namespace in self._repository.list_namespaces():
            payload = self._repository.load_snapshot(namespace)
            if payload is None:
                continue
            dataset = dataset_from_dict(
                payload,
                namespace,
                note_max_length=self._settings.apartment_note_max_length,
            )
            check_dataset_invariants(dataset)
            with self._registry_lock:
                self._datasets[namespace] = dataset
                self._locks.setdefault(namespace, RLock())
            loaded += 1
        logger.info("Loaded %s tenant snapshots from %s", loaded, self._repository.database_path)
        return loaded
