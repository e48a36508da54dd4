"""Tests for HandleEngine.resolve, lookup, delete and supports."""
from __future__ import annotations

import pytest

from vhandle.config import EngineConfig
from vhandle.engine import HandleEngine, NotFound, Ok
from vhandle.model import ObjectKind, RepositoryObject
from vhandle.stores import MemoryBackend


class TestResolve:
    @pytest.mark.parametrize(
        "text",
        [
            "123456789/100",
            "hdl:123456789/100",
            "info:hdl/123456789/100",
            "http://hdl.handle.net/123456789/100",
            "https://hdl.handle.net/123456789/100",
        ],
    )
    def test_accepted_forms(
        self, engine: HandleEngine, item: RepositoryObject, text: str
    ) -> None:
        engine.mint(item).unwrap()
        assert engine.resolve(text) == Ok(item)

    def test_versioned_handle_resolves_to_snapshot(
        self, engine: HandleEngine, backend: MemoryBackend, item: RepositoryObject
    ) -> None:
        engine.mint(item).unwrap()
        v2 = backend.new_version(item)
        engine.mint(v2).unwrap()
        assert engine.resolve("123456789/100.2") == Ok(v2)
        assert engine.resolve("123456789/100") == Ok(item)

    def test_unbound_handle_is_not_found(self, engine: HandleEngine) -> None:
        outcome = engine.resolve("123456789/999")
        assert isinstance(outcome, NotFound)
        assert "not bound" in outcome.reason

    @pytest.mark.parametrize("text", ["", "urn:issn:1234", "a/b/c", "doi:10.1000/182"])
    def test_non_handle_is_not_found(self, engine: HandleEngine, text: str) -> None:
        outcome = engine.resolve(text)
        assert isinstance(outcome, NotFound)
        assert "not a handle" in outcome.reason

    def test_configured_canonical_prefix(self, backend: MemoryBackend) -> None:
        engine = backend.engine(
            EngineConfig(prefix="10673", canonical_prefix="https://repo.example.org/handle/")
        )
        obj = backend.add_object(ObjectKind.COLLECTION)
        handle = engine.mint(obj).unwrap()
        assert engine.resolve(f"https://repo.example.org/handle/{handle}") == Ok(obj)


class TestLookup:
    def test_bound(self, engine: HandleEngine, item: RepositoryObject) -> None:
        handle = engine.mint(item).unwrap()
        assert engine.lookup(item) == Ok(handle)

    def test_unbound(self, engine: HandleEngine, item: RepositoryObject) -> None:
        outcome = engine.lookup(item)
        assert isinstance(outcome, NotFound)
        assert item.id in outcome.reason


class TestDelete:
    def test_returns_released_handle(self, engine: HandleEngine, item: RepositoryObject) -> None:
        handle = engine.mint(item).unwrap()
        assert engine.delete(item) == Ok(handle)
        assert isinstance(engine.lookup(item), NotFound)
        assert isinstance(engine.resolve(handle), NotFound)

    def test_nothing_bound(self, engine: HandleEngine, item: RepositoryObject) -> None:
        assert isinstance(engine.delete(item), NotFound)

    def test_given_handle_does_not_matter(
        self, engine: HandleEngine, item: RepositoryObject
    ) -> None:
        handle = engine.mint(item).unwrap()
        assert engine.delete(item, "123456789/555") == Ok(handle)

    def test_released_handle_can_be_registered_again(
        self, engine: HandleEngine, backend: MemoryBackend, item: RepositoryObject
    ) -> None:
        handle = engine.mint(item).unwrap()
        engine.delete(item).unwrap()
        other = backend.add_object(ObjectKind.ITEM)
        assert engine.register(other, handle) == Ok(handle)

    def test_metadata_is_left_alone(
        self, engine: HandleEngine, backend: MemoryBackend, item: RepositoryObject
    ) -> None:
        engine.mint(item).unwrap()
        before = backend.metadata.records
        engine.delete(item).unwrap()
        assert backend.metadata.records == before


class TestSupports:
    @pytest.mark.parametrize(
        ("text", "expected"),
        [
            ("123456789/100", True),
            ("hdl:123456789/100.3", True),
            ("urn:issn:1234", False),
            ("", False),
        ],
    )
    def test_supports(self, engine: HandleEngine, text: str, expected: bool) -> None:
        assert engine.supports(text) is expected

    def test_prefix(self, engine: HandleEngine) -> None:
        assert engine.prefix == "123456789"
