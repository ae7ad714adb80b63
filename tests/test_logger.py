"""Tests for tenant-aware log records."""

from __future__ import annotations

import logging

from housing.repository.tenant_store import TenantContextStore
from housing.utils.logger import (
    LOG_FORMAT,
    NO_TENANT,
    TenantNamespaceFilter,
    current_namespace,
    tenant_context,
)


def _record() -> logging.LogRecord:
    return logging.LogRecord("housing.test", logging.INFO, __file__, 1, "hello", None, None)


def test_filter_stamps_active_namespace() -> None:
    record = _record()
    with tenant_context("acme"):
        assert TenantNamespaceFilter().filter(record)

    assert record.namespace == "acme"
    assert "tenant=acme" in logging.Formatter(LOG_FORMAT).format(record)


def test_filter_outside_tenant_uses_placeholder() -> None:
    record = _record()
    TenantNamespaceFilter().filter(record)

    assert record.namespace == NO_TENANT


def test_filter_keeps_explicit_namespace() -> None:
    record = _record()
    record.namespace = "other"
    with tenant_context("acme"):
        TenantNamespaceFilter().filter(record)

    assert record.namespace == "other"


def test_store_operations_run_inside_tenant_context(settings) -> None:
    store = TenantContextStore(settings=settings)
    store.register_tenant("acme")

    assert store.run("acme", lambda dataset: current_namespace(), readonly=True) == "acme"
    assert store.run("acme", lambda dataset: current_namespace()) == "acme"
    assert current_namespace() == NO_TENANT
