"""Tests for how HandleEngine reports store, authorization and configuration failures."""
from __future__ import annotations

import logging
from unittest.mock import patch

import pytest

from vhandle.config import ConfigurationError, EngineConfig
from vhandle.engine import (
    Failed,
    HandleEngine,
    IdentifierAuthorizationError,
    IdentifierNotResolvable,
    Ok,
    UpstreamStoreError,
)
from vhandle.model import ObjectKind, RepositoryObject
from vhandle.stores import AuthorizationDenied, MemoryBackend, StoreUnavailable

_FIELD = "dc.identifier.uri"


class TestAuthorization:
    def test_metadata_write_denied(
        self, engine: HandleEngine, backend: MemoryBackend, item: RepositoryObject
    ) -> None:
        backend.metadata.add_value(item, _FIELD, None, "urn:issn:1234")
        backend.metadata.persist(item)
        denied = AuthorizationDenied(item.id, "modify")

        with patch.object(backend.metadata, "add_value", side_effect=denied):
            outcome = engine.register(item, "123456789/500")

        assert isinstance(outcome, Failed)
        assert isinstance(outcome.error, IdentifierAuthorizationError)
        assert outcome.error.operation == "register"
        assert [v.value for v in backend.metadata.committed(item, _FIELD)] == ["urn:issn:1234"]

    def test_retry_after_denial_succeeds(
        self, engine: HandleEngine, backend: MemoryBackend, item: RepositoryObject
    ) -> None:
        denied = AuthorizationDenied(item.id, "modify")
        with patch.object(backend.metadata, "persist", side_effect=denied):
            assert isinstance(engine.register(item, "123456789/500"), Failed)

        assert engine.register(item, "123456789/500") == Ok("123456789/500")
        assert [v.value for v in backend.metadata.committed(item, _FIELD)] == [
            "http://hdl.handle.net/123456789/500"
        ]

    def test_registry_denial(
        self, engine: HandleEngine, backend: MemoryBackend, item: RepositoryObject
    ) -> None:
        denied = AuthorizationDenied(item.id, "bind")
        with patch.object(backend.registry, "create_generated", side_effect=denied):
            outcome = engine.mint(item)
        assert isinstance(outcome, Failed)
        assert isinstance(outcome.error, IdentifierAuthorizationError)
        assert outcome.error.operation == "mint"


class TestStoreFailures:
    def test_mint_wraps_store_error(
        self, engine: HandleEngine, backend: MemoryBackend, item: RepositoryObject
    ) -> None:
        cause = StoreUnavailable("registry offline")
        with patch.object(backend.registry, "create_generated", side_effect=cause):
            outcome = engine.mint(item)
        assert isinstance(outcome, Failed)
        assert isinstance(outcome.error, UpstreamStoreError)
        assert outcome.error.cause is cause
        assert outcome.error.object_id == item.id

    def test_history_store_failure(
        self, engine: HandleEngine, backend: MemoryBackend, item: RepositoryObject
    ) -> None:
        with patch.object(backend.versions, "persist", side_effect=StoreUnavailable("down")):
            outcome = engine.register(item, "123456789/100.4")
        assert isinstance(outcome.error, UpstreamStoreError)
        # The binding made before the failure stays in place.
        assert engine.lookup(item) == Ok("123456789/100.4")

    def test_restore_completes_on_retry(
        self, engine: HandleEngine, backend: MemoryBackend, item: RepositoryObject
    ) -> None:
        with patch.object(backend.versions, "persist", side_effect=StoreUnavailable("down")):
            assert isinstance(engine.register(item, "123456789/100.4"), Failed)

        assert engine.register(item, "123456789/100.4") == Ok("123456789/100.4")
        history = backend.versions.find_history(item)
        assert history.version_of(item).version_number == 4
        assert len(backend.versions.histories) == 1
        assert backend.versions.persist_count == 1

    def test_restore_retry_after_version_write_failure(
        self, engine: HandleEngine, backend: MemoryBackend, item: RepositoryObject
    ) -> None:
        failure = StoreUnavailable("down")
        with patch.object(backend.versions, "create_version", side_effect=failure):
            assert isinstance(engine.register(item, "123456789/100.4"), Failed)

        assert engine.register(item, "123456789/100.4") == Ok("123456789/100.4")
        (history,) = backend.versions.histories
        assert [v.version_number for v in history.versions] == [4]
        assert backend.versions.persist_count == 1

    def test_resolve_wraps_store_error(
        self, engine: HandleEngine, backend: MemoryBackend
    ) -> None:
        with patch.object(backend.registry, "resolve", side_effect=StoreUnavailable("down")):
            outcome = engine.resolve("123456789/100")
        assert isinstance(outcome, Failed)
        assert isinstance(outcome.error, UpstreamStoreError)
        assert outcome.error.operation == "resolve"

    def test_lookup_wraps_store_error(
        self, engine: HandleEngine, backend: MemoryBackend, item: RepositoryObject
    ) -> None:
        with patch.object(backend.registry, "find_bound", side_effect=StoreUnavailable("down")):
            outcome = engine.lookup(item)
        assert isinstance(outcome, Failed)
        assert isinstance(outcome.error, IdentifierNotResolvable)

    def test_delete_wraps_store_error(
        self, engine: HandleEngine, backend: MemoryBackend, item: RepositoryObject
    ) -> None:
        engine.mint(item).unwrap()
        with patch.object(backend.registry, "unbind", side_effect=StoreUnavailable("down")):
            outcome = engine.delete(item)
        assert isinstance(outcome.error, UpstreamStoreError)

    def test_failures_are_logged(
        self,
        engine: HandleEngine,
        backend: MemoryBackend,
        item: RepositoryObject,
        caplog: pytest.LogCaptureFixture,
    ) -> None:
        with caplog.at_level(logging.ERROR, logger="vhandle.engine"):
            with patch.object(
                backend.registry, "create_generated", side_effect=StoreUnavailable("down")
            ):
                engine.mint(item)
        assert "Error while attempting to mint" in caplog.text

    def test_unexpected_exceptions_propagate(
        self, engine: HandleEngine, backend: MemoryBackend, item: RepositoryObject
    ) -> None:
        with patch.object(backend.registry, "create_generated", side_effect=RuntimeError("bug")):
            with pytest.raises(RuntimeError, match="bug"):
                engine.mint(item)


class TestConfiguration:
    def test_versioning_disabled_refuses_construction(self, backend: MemoryBackend) -> None:
        with pytest.raises(ConfigurationError, match="versioning is disabled"):
            backend.engine(EngineConfig(prefix="123456789", versioning_enabled=False))

    def test_missing_prefix_mints_under_example_prefix(
        self, backend: MemoryBackend, caplog: pytest.LogCaptureFixture
    ) -> None:
        engine = backend.engine(EngineConfig())
        obj = backend.add_object(ObjectKind.BITSTREAM)
        with caplog.at_level(logging.WARNING):
            assert engine.mint(obj) == Ok("123456789/100")
        assert "prefix is not configured" in caplog.text

    def test_configured_prefix(self, backend: MemoryBackend) -> None:
        engine = backend.engine(EngineConfig(prefix="10673"))
        obj = backend.add_object(ObjectKind.BITSTREAM)
        assert engine.mint(obj) == Ok("10673/100")

    def test_custom_identifier_field(self, backend: MemoryBackend) -> None:
        engine = backend.engine(EngineConfig(prefix="10673", identifier_field="dc.identifier"))
        obj = backend.add_object(ObjectKind.COMMUNITY)
        handle = engine.mint(obj).unwrap()
        assert [v.value for v in backend.metadata.committed(obj, "dc.identifier")] == [
            f"http://hdl.handle.net/{handle}"
        ]
        assert backend.metadata.committed(obj, _FIELD) == []
