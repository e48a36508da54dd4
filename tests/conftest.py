"""Shared test fixtures for vhandle.

Fixtures defined here are available to all tests in the suite without
needing an explicit import. Add project-wide fixtures here; keep
domain-specific fixtures close to the tests that use them.
"""
from __future__ import annotations

from datetime import datetime, timezone

import pytest

from vhandle.config import EngineConfig
from vhandle.engine import HandleEngine
from vhandle.model import ObjectKind, RepositoryObject
from vhandle.stores import MemoryBackend, MemoryHandleRegistry

FIXED_TIME = datetime(2024, 5, 1, 12, 0, tzinfo=timezone.utc)


@pytest.fixture()
def package_name() -> str:
    """Return the importable package name for assertions."""
    return "vhandle"


@pytest.fixture()
def expected_version() -> str:
    """Return the current expected version string.

    Update this fixture when cutting a release so that the version
    test immediately catches stale ``__version__`` values.
    """
    return "0.1.0"


@pytest.fixture()
def backend() -> MemoryBackend:
    """A fresh in-memory backend whose first generated suffix is 100."""
    return MemoryBackend(registry=MemoryHandleRegistry(first_suffix=100))


@pytest.fixture()
def config() -> EngineConfig:
    return EngineConfig(prefix="123456789")


@pytest.fixture()
def fixed_time() -> datetime:
    """The timestamp the engine fixture's clock always returns."""
    return FIXED_TIME


@pytest.fixture()
def engine(backend: MemoryBackend, config: EngineConfig) -> HandleEngine:
    return backend.engine(config, clock=lambda: FIXED_TIME)


@pytest.fixture()
def item(backend: MemoryBackend) -> RepositoryObject:
    return backend.add_object(ObjectKind.ITEM)
