"""Shared fixtures: registry isolation."""

from __future__ import annotations

import pytest

from gencheck import defaults
from gencheck.registry import TypeRegistry, default_registry


@pytest.fixture(autouse=True)
def _clean_default_registry():
    """Undo registrations made on the default registry by a test."""
    registry = default_registry()
    snapshot_specs = registry._specs
    snapshot_families = registry._families
    yield
    with registry._lock:
        registry._specs = snapshot_specs
        registry._families = snapshot_families
        registry._invalidate()


@pytest.fixture
def registry() -> TypeRegistry:
    """A private registry with the built-ins installed."""
    fresh = TypeRegistry()
    defaults.install(fresh)
    return fresh
