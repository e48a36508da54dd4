"""Unit tests for vhandle.workspace: WorkspaceSerializer and file helpers."""
from __future__ import annotations

import json
from datetime import datetime, timezone
from pathlib import Path

import pytest
import yaml

from vhandle.config import EngineConfig
from vhandle.model import Capability, ObjectKind
from vhandle.stores import MemoryBackend
from vhandle.workspace import WorkspaceError, WorkspaceSerializer, load_workspace, save_workspace

_WHEN = datetime(2024, 3, 2, 10, 30, tzinfo=timezone.utc)


@pytest.fixture()
def populated() -> MemoryBackend:
    """A backend holding a two-version lineage with handles and metadata."""
    backend = MemoryBackend()
    engine = backend.engine(EngineConfig(prefix="10673"))
    v1 = backend.add_object(ObjectKind.ITEM, object_id="item-1")
    backend.metadata.add_value(v1, "dc.identifier.uri", "en", "urn:issn:1234")
    backend.metadata.persist(v1)
    engine.mint(v1).unwrap()
    v2 = backend.new_version(v1, summary="second", timestamp=_WHEN)
    engine.mint(v2).unwrap()
    backend.add_object(
        ObjectKind.BITSTREAM, capabilities=frozenset({Capability.DESCRIBED}), object_id="bs-1"
    )
    return backend


class TestRoundTrip:
    def test_dict_shape(self, populated: MemoryBackend) -> None:
        data = WorkspaceSerializer().to_dict(populated)
        assert data["kind"] == "Workspace"
        assert data["format"] == 1
        assert data["registry"]["handles"]["10673/1"] == "item-1"
        (history,) = data["histories"]
        assert [v["number"] for v in history["versions"]] == [1, 2]
        assert history["versions"][1]["created"] == _WHEN.isoformat()

    @pytest.mark.parametrize("fmt", ["json", "yaml"])
    def test_round_trip_preserves_state(self, populated: MemoryBackend, fmt: str) -> None:
        serializer = WorkspaceSerializer()
        if fmt == "json":
            restored = serializer.from_json(serializer.to_json(populated))
        else:
            restored = serializer.from_yaml(serializer.to_yaml(populated))

        assert restored.objects == populated.objects
        assert restored.registry.handles == populated.registry.handles
        assert restored.registry.next_suffix == populated.registry.next_suffix
        assert restored.metadata.records == populated.metadata.records
        original = populated.versions.histories[0]
        (history,) = restored.versions.histories
        assert history.id == original.id
        assert history.versions == original.versions

    def test_restored_backend_keeps_minting(self, populated: MemoryBackend) -> None:
        serializer = WorkspaceSerializer()
        restored = serializer.from_yaml(serializer.to_yaml(populated))
        engine = restored.engine(EngineConfig(prefix="10673"))
        v2 = restored.versions.histories[0].latest.snapshot
        assert engine.lookup(v2).unwrap() == "10673/1.2"
        v3 = restored.new_version(v2)
        assert engine.mint(v3).unwrap() == "10673/1.3"

    def test_yaml_is_readable(self, populated: MemoryBackend) -> None:
        data = yaml.safe_load(WorkspaceSerializer().to_yaml(populated))
        assert data["kind"] == "Workspace"

    def test_json_is_readable(self, populated: MemoryBackend) -> None:
        assert json.loads(WorkspaceSerializer().to_json(populated))["format"] == 1


class TestInvalidDocuments:
    def test_wrong_kind(self) -> None:
        with pytest.raises(WorkspaceError, match="kind"):
            WorkspaceSerializer().from_dict({"kind": "Other", "format": 1})

    def test_wrong_format(self) -> None:
        with pytest.raises(WorkspaceError, match="format"):
            WorkspaceSerializer().from_dict({"kind": "Workspace", "format": 99})

    def test_unknown_object_kind(self) -> None:
        with pytest.raises(WorkspaceError, match="unknown"):
            WorkspaceSerializer().from_dict(
                {"kind": "Workspace", "format": 1, "objects": [{"id": "x", "kind": "BOOK"}]}
            )

    def test_handle_bound_to_unknown_object(self) -> None:
        with pytest.raises(WorkspaceError, match="unknown object"):
            WorkspaceSerializer().from_dict(
                {"kind": "Workspace", "format": 1, "registry": {"handles": {"1/2": "ghost"}}}
            )

    def test_history_with_unknown_object(self) -> None:
        data = {
            "kind": "Workspace",
            "format": 1,
            "histories": [{"id": "h", "versions": [{"number": 1, "object": "ghost"}]}],
        }
        with pytest.raises(WorkspaceError, match="unknown object"):
            WorkspaceSerializer().from_dict(data)

    def test_yaml_must_be_mapping(self) -> None:
        with pytest.raises(WorkspaceError, match="mapping"):
            WorkspaceSerializer().from_yaml("- 1\n")


class TestFiles:
    def test_missing_file_gives_empty_backend(self, tmp_path: Path) -> None:
        backend = load_workspace(tmp_path / "absent.yaml")
        assert backend.objects == {}

    def test_save_then_load(self, tmp_path: Path, populated: MemoryBackend) -> None:
        path = tmp_path / "ws.yaml"
        save_workspace(populated, path)
        assert load_workspace(path).registry.handles == populated.registry.handles
