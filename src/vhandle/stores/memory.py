"""In-process reference implementations of the store protocols.

These backends keep everything in dictionaries.  They are used by the
test suite and by the CLI workspace (see ``vhandle.workspace``), and
they double as executable documentation of the contracts in
:mod:`vhandle.stores.protocols`.

Usage
-----
::

    from vhandle.stores.memory import MemoryBackend
    from vhandle.model import ObjectKind

    backend = MemoryBackend()
    item = backend.add_object(ObjectKind.ITEM)
    engine = backend.engine()
    handle = engine.mint(item).unwrap()
"""
from __future__ import annotations

import logging
import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import TYPE_CHECKING

from vhandle.model.objects import (
    Capability,
    MetadataValue,
    ObjectKind,
    RepositoryObject,
    Version,
    VersionHistory,
)
from vhandle.stores.errors import HandleAlreadyBound, StoreError

if TYPE_CHECKING:
    from vhandle.config import EngineConfig
    from vhandle.engine.minting import HandleEngine

logger = logging.getLogger(__name__)


class MemoryHandleRegistry:
    """Dictionary-backed handle registry.

    Unbinding keeps the handle record with no owner, so a generated
    handle is never handed out twice.  Re-binding a released handle is
    only possible through ``create_explicit``.

    Parameters
    ----------
    first_suffix:
        The numeric suffix the first generated handle receives.
    """

    def __init__(self, first_suffix: int = 1) -> None:
        self._next_suffix = first_suffix
        self._records: dict[str, str | None] = {}
        self._bound: dict[str, str] = {}
        self._objects: dict[str, RepositoryObject] = {}
        self.write_count = 0

    def create_generated(self, obj: RepositoryObject, prefix: str) -> str:
        handle = f"{prefix}/{self._next_suffix}"
        while handle in self._records:
            self._next_suffix += 1
            handle = f"{prefix}/{self._next_suffix}"
        self._next_suffix += 1
        return self._bind(obj, handle)

    def create_explicit(self, obj: RepositoryObject, handle: str) -> str:
        holder = self._records.get(handle)
        if holder is not None and holder != obj.id:
            raise HandleAlreadyBound(handle, holder)
        if holder == obj.id:
            return handle
        return self._bind(obj, handle)

    def resolve(self, handle: str) -> RepositoryObject | None:
        holder = self._records.get(handle)
        if holder is None:
            return None
        return self._objects.get(holder)

    def find_bound(self, obj: RepositoryObject) -> str | None:
        return self._bound.get(obj.id)

    def unbind(self, obj: RepositoryObject) -> None:
        handle = self._bound.pop(obj.id, None)
        if handle is None:
            logger.debug("No handle bound to %s; nothing to unbind", obj.describe())
            return
        self._records[handle] = None
        self.write_count += 1
        logger.debug("Unbound handle %r from %s", handle, obj.describe())

    def _bind(self, obj: RepositoryObject, handle: str) -> str:
        current = self._bound.get(obj.id)
        if current is not None:
            raise StoreError(
                f"{obj.describe()} is already bound to {current!r}; unbind it before "
                f"binding {handle!r}"
            )
        self._records[handle] = obj.id
        self._bound[obj.id] = handle
        self._objects[obj.id] = obj
        self.write_count += 1
        logger.debug("Bound handle %r to %s", handle, obj.describe())
        return handle

    @property
    def handles(self) -> dict[str, str | None]:
        """Return a copy of every handle record, bound or released."""
        return dict(self._records)

    @property
    def next_suffix(self) -> int:
        return self._next_suffix

    def restore(
        self,
        records: dict[str, str | None],
        objects: dict[str, RepositoryObject],
        next_suffix: int,
    ) -> None:
        """Replace the registry contents wholesale (used when loading a workspace)."""
        self._records = dict(records)
        self._bound = {holder: handle for handle, holder in records.items() if holder}
        self._objects = {
            holder: objects[holder] for holder in self._bound if holder in objects
        }
        self._next_suffix = next_suffix


class MemoryVersionHistoryStore:
    """Dictionary-backed version-history store."""

    def __init__(self) -> None:
        self._histories: dict[str, VersionHistory] = {}
        self.persist_count = 0

    def find_history(self, obj: RepositoryObject) -> VersionHistory | None:
        for history in self._histories.values():
            if obj in history:
                return history
        return None

    def create_history(self) -> VersionHistory:
        history = VersionHistory(id=str(uuid.uuid4()))
        logger.debug("Created version history %s", history.id)
        return history

    def find_version(self, history: VersionHistory, obj: RepositoryObject) -> Version | None:
        return history.version_of(obj)

    def create_version(
        self,
        history: VersionHistory,
        obj: RepositoryObject,
        summary: str,
        timestamp: datetime,
        version_number: int | None = None,
    ) -> Version:
        number = version_number if version_number is not None else history.next_number()
        version = Version(
            version_number=number,
            snapshot=obj,
            history_id=history.id,
            summary=summary,
            created=timestamp,
        )
        history.add(version)
        self._histories.setdefault(history.id, history)
        logger.debug("Created version %d of %s in history %s", number, obj.describe(), history.id)
        return version

    def persist(self, history: VersionHistory) -> None:
        self._histories[history.id] = history
        self.persist_count += 1

    @property
    def histories(self) -> list[VersionHistory]:
        return list(self._histories.values())

    def restore(self, histories: list[VersionHistory]) -> None:
        """Replace every stored history (used when loading a workspace)."""
        self._histories = {history.id: history for history in histories}


class MemoryMetadataStore:
    """Dictionary-backed metadata store with per-object pending changes.

    Writes go to a pending copy of the object's fields; ``persist``
    commits them and ``rollback`` discards them, so a failure before
    ``persist`` leaves the committed state untouched.
    """

    def __init__(self) -> None:
        self._committed: dict[str, dict[str, list[MetadataValue]]] = {}
        self._pending: dict[str, dict[str, list[MetadataValue]]] = {}

    def get_field(self, obj: RepositoryObject, field: str) -> list[MetadataValue]:
        return list(self._view(obj.id).get(field, []))

    def clear_field(self, obj: RepositoryObject, field: str) -> None:
        self._working(obj.id).pop(field, None)

    def add_value(
        self,
        obj: RepositoryObject,
        field: str,
        language: str | None,
        value: str,
        authority: str | None = None,
        confidence: int = -1,
    ) -> None:
        self._working(obj.id).setdefault(field, []).append(
            MetadataValue(value=value, language=language, authority=authority, confidence=confidence)
        )

    def persist(self, obj: RepositoryObject) -> None:
        pending = self._pending.pop(obj.id, None)
        if pending is not None:
            self._committed[obj.id] = pending

    def rollback(self, obj: RepositoryObject) -> None:
        """Discard uncommitted changes of ``obj``."""
        self._pending.pop(obj.id, None)

    def committed(self, obj: RepositoryObject, field: str) -> list[MetadataValue]:
        """Return the committed values of ``field``, ignoring pending writes."""
        return list(self._committed.get(obj.id, {}).get(field, []))

    def _view(self, object_id: str) -> dict[str, list[MetadataValue]]:
        if object_id in self._pending:
            return self._pending[object_id]
        return self._committed.get(object_id, {})

    def _working(self, object_id: str) -> dict[str, list[MetadataValue]]:
        if object_id not in self._pending:
            self._pending[object_id] = {
                key: list(values) for key, values in self._committed.get(object_id, {}).items()
            }
        return self._pending[object_id]

    @property
    def records(self) -> dict[str, dict[str, list[MetadataValue]]]:
        """Return the committed state of every object."""
        return {
            object_id: {key: list(values) for key, values in fields.items()}
            for object_id, fields in self._committed.items()
        }

    def restore(self, records: dict[str, dict[str, list[MetadataValue]]]) -> None:
        """Replace the committed state wholesale (used when loading a workspace)."""
        self._committed = {
            object_id: {key: list(values) for key, values in fields.items()}
            for object_id, fields in records.items()
        }
        self._pending = {}


@dataclass
class MemoryBackend:
    """A complete set of in-memory collaborators plus an object catalogue.

    ``add_object`` and ``new_version`` stand in for the surrounding
    repository's object creation and versioning services.
    """

    registry: MemoryHandleRegistry = field(default_factory=MemoryHandleRegistry)
    versions: MemoryVersionHistoryStore = field(default_factory=MemoryVersionHistoryStore)
    metadata: MemoryMetadataStore = field(default_factory=MemoryMetadataStore)
    objects: dict[str, RepositoryObject] = field(default_factory=dict)

    def add_object(
        self,
        kind: ObjectKind,
        capabilities: frozenset[Capability] | None = None,
        object_id: str | None = None,
    ) -> RepositoryObject:
        """Create and catalogue a new repository object."""
        obj = RepositoryObject.new(kind, capabilities=capabilities, object_id=object_id)
        self.objects[obj.id] = obj
        return obj

    def get_object(self, object_id: str) -> RepositoryObject | None:
        return self.objects.get(object_id)

    def new_version(
        self,
        previous: RepositoryObject,
        summary: str = "",
        timestamp: datetime | None = None,
    ) -> RepositoryObject:
        """Create the next version of ``previous``'s lineage and return its snapshot.

        A lineage is created on first use, with ``previous`` as version 1.

        Raises
        ------
        ValueError
            If ``previous`` is not version-capable.
        """
        if not previous.is_versioned:
            raise ValueError(f"{previous.describe()} does not support versioning")
        when = timestamp or datetime.now(timezone.utc)
        history = self.versions.find_history(previous)
        if history is None:
            history = self.versions.create_history()
            self.versions.create_version(history, previous, "Initial version", when)
        snapshot = self.add_object(previous.kind, capabilities=previous.capabilities)
        self.versions.create_version(history, snapshot, summary, when)
        self.versions.persist(history)
        return snapshot

    def engine(self, config: "EngineConfig | None" = None, **kwargs: object) -> "HandleEngine":
        """Build a ``HandleEngine`` wired to these collaborators."""
        from vhandle.engine.minting import HandleEngine

        return HandleEngine(
            registry=self.registry,
            versions=self.versions,
            metadata=self.metadata,
            config=config,
            **kwargs,  # type: ignore[arg-type]
        )
