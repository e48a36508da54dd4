"""Workspace serialization for the in-memory backends.

Provides round-trip serialization of a ``MemoryBackend`` (objects,
handle records, version histories and committed metadata) to and from
JSON and YAML.  The CLI keeps its state in such a file between
invocations.

Usage
-----
::

    from vhandle.workspace.serializer import WorkspaceSerializer

    serializer = WorkspaceSerializer()
    yaml_text = serializer.to_yaml(backend)
    backend2 = serializer.from_yaml(yaml_text)
"""
from __future__ import annotations

import json
from datetime import datetime
from pathlib import Path

import yaml

from vhandle.model.objects import (
    Capability,
    MetadataValue,
    ObjectKind,
    RepositoryObject,
    Version,
    VersionHistory,
)
from vhandle.stores.memory import MemoryBackend

WORKSPACE_FORMAT = 1


class WorkspaceError(ValueError):
    """Raised when a workspace document cannot be loaded."""


class WorkspaceSerializer:
    """Converts between ``MemoryBackend`` state and plain Python dicts."""

    # ------------------------------------------------------------------
    # Serialization (backend → dict)
    # ------------------------------------------------------------------

    def to_dict(self, backend: MemoryBackend) -> dict[str, object]:
        """Serialize ``backend`` to a JSON-compatible dict."""
        return {
            "kind": "Workspace",
            "format": WORKSPACE_FORMAT,
            "objects": [self._object_to_dict(o) for o in backend.objects.values()],
            "registry": {
                "next_suffix": backend.registry.next_suffix,
                "handles": backend.registry.handles,
            },
            "histories": [self._history_to_dict(h) for h in backend.versions.histories],
            "metadata": {
                object_id: {
                    key: [self._value_to_dict(v) for v in values]
                    for key, values in fields.items()
                }
                for object_id, fields in backend.metadata.records.items()
            },
        }

    def _object_to_dict(self, obj: RepositoryObject) -> dict[str, object]:
        return {
            "id": obj.id,
            "kind": obj.kind.name,
            "capabilities": sorted(c.name for c in obj.capabilities),
        }

    def _history_to_dict(self, history: VersionHistory) -> dict[str, object]:
        return {
            "id": history.id,
            "versions": [
                {
                    "number": v.version_number,
                    "object": v.snapshot.id,
                    "summary": v.summary,
                    "created": v.created.isoformat() if v.created else None,
                }
                for v in history.versions
            ],
        }

    def _value_to_dict(self, value: MetadataValue) -> dict[str, object]:
        return {
            "value": value.value,
            "language": value.language,
            "authority": value.authority,
            "confidence": value.confidence,
        }

    # ------------------------------------------------------------------
    # Deserialization (dict → backend)
    # ------------------------------------------------------------------

    def from_dict(self, data: dict[str, object]) -> MemoryBackend:
        """Deserialize a ``MemoryBackend`` from a dict produced by ``to_dict``.

        Raises
        ------
        WorkspaceError
            If the document is not a workspace or references unknown objects.
        """
        if data.get("kind") != "Workspace":
            raise WorkspaceError(f"Expected kind 'Workspace', got {data.get('kind')!r}")
        if data.get("format") != WORKSPACE_FORMAT:
            raise WorkspaceError(f"Unsupported workspace format {data.get('format')!r}")

        backend = MemoryBackend()
        for d in data.get("objects", []):  # type: ignore[union-attr]
            obj = self._object_from_dict(d)
            backend.objects[obj.id] = obj

        registry = data.get("registry", {}) or {}
        handles: dict[str, str | None] = dict(registry.get("handles", {}) or {})  # type: ignore[union-attr]
        for handle, holder in handles.items():
            if holder is not None and holder not in backend.objects:
                raise WorkspaceError(f"Handle {handle!r} is bound to unknown object {holder!r}")
        backend.registry.restore(
            handles,
            backend.objects,
            int(registry.get("next_suffix", 1)),  # type: ignore[union-attr]
        )

        backend.versions.restore(
            [self._history_from_dict(d, backend.objects) for d in data.get("histories", [])]  # type: ignore[union-attr]
        )
        backend.metadata.restore(
            {
                object_id: {
                    key: [self._value_from_dict(v) for v in values]
                    for key, values in fields.items()
                }
                for object_id, fields in (data.get("metadata", {}) or {}).items()  # type: ignore[union-attr]
            }
        )
        return backend

    def _object_from_dict(self, d: dict[str, object]) -> RepositoryObject:
        try:
            return RepositoryObject(
                id=str(d["id"]),
                kind=ObjectKind[str(d["kind"])],
                capabilities=frozenset(Capability[c] for c in d.get("capabilities", [])),  # type: ignore[union-attr]
            )
        except KeyError as exc:
            raise WorkspaceError(f"Invalid object entry {d!r}: unknown {exc}") from None

    def _history_from_dict(
        self, d: dict[str, object], objects: dict[str, RepositoryObject]
    ) -> VersionHistory:
        history = VersionHistory(id=str(d["id"]))
        for v in d.get("versions", []):  # type: ignore[union-attr]
            snapshot = objects.get(v["object"])
            if snapshot is None:
                raise WorkspaceError(
                    f"History {history.id} references unknown object {v['object']!r}"
                )
            created = v.get("created")
            if isinstance(created, str):
                created = datetime.fromisoformat(created)
            history.add(
                Version(
                    version_number=int(v["number"]),
                    snapshot=snapshot,
                    history_id=history.id,
                    summary=v.get("summary") or "",
                    created=created or None,
                )
            )
        return history

    def _value_from_dict(self, d: dict[str, object]) -> MetadataValue:
        return MetadataValue(
            value=str(d["value"]),
            language=d.get("language"),  # type: ignore[arg-type]
            authority=d.get("authority"),  # type: ignore[arg-type]
            confidence=int(d.get("confidence", -1)),  # type: ignore[arg-type]
        )

    # ------------------------------------------------------------------
    # JSON helpers
    # ------------------------------------------------------------------

    def to_json(self, backend: MemoryBackend, indent: int = 2) -> str:
        """Serialize ``backend`` to a JSON string."""
        return json.dumps(self.to_dict(backend), indent=indent, ensure_ascii=False)

    def from_json(self, text: str) -> MemoryBackend:
        """Deserialize a ``MemoryBackend`` from a JSON string."""
        data: dict[str, object] = json.loads(text)
        return self.from_dict(data)

    # ------------------------------------------------------------------
    # YAML helpers
    # ------------------------------------------------------------------

    def to_yaml(self, backend: MemoryBackend) -> str:
        """Serialize ``backend`` to a YAML string."""
        return yaml.dump(self.to_dict(backend), default_flow_style=False, allow_unicode=True)

    def from_yaml(self, text: str) -> MemoryBackend:
        """Deserialize a ``MemoryBackend`` from a YAML string."""
        data = yaml.safe_load(text)
        if not isinstance(data, dict):
            raise WorkspaceError("Workspace YAML must contain a mapping at top level")
        return self.from_dict(data)


def load_workspace(path: Path | str) -> MemoryBackend:
    """Load a workspace file, or return an empty backend if it does not exist."""
    workspace_path = Path(path)
    if not workspace_path.exists():
        return MemoryBackend()
    return WorkspaceSerializer().from_yaml(workspace_path.read_text(encoding="utf-8"))


def save_workspace(backend: MemoryBackend, path: Path | str) -> None:
    """Write ``backend`` to ``path`` as YAML."""
    Path(path).write_text(WorkspaceSerializer().to_yaml(backend), encoding="utf-8")
