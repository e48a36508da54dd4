"""Contracts for the external collaborators of the handle engine.

Defines three protocols the engine is composed from:

- ``HandleRegistry``: binds handle strings to objects.
- ``VersionHistoryStore``: reads and extends version lineages.
- ``MetadataStore``: reads and rewrites descriptive metadata fields.

All three are :func:`runtime-checkable <typing.runtime_checkable>` so
``isinstance`` tests work.  Implementations are assumed transactional
within the caller's unit of work and report failures by raising
``vhandle.stores.errors.StoreError`` subclasses.

Implementations
---------------
- :mod:`vhandle.stores.memory`: in-process reference backends used by
  the test suite and the CLI workspace.
- Database-backed implementations must be injected by callers; this
  library ships no storage engine.
"""
from __future__ import annotations

from datetime import datetime
from typing import Protocol, runtime_checkable

from vhandle.model.objects import MetadataValue, RepositoryObject, Version, VersionHistory


@runtime_checkable
class HandleRegistry(Protocol):
    """Protocol for the handle registry."""

    def create_generated(self, obj: RepositoryObject, prefix: str) -> str:
        """Bind a freshly generated, never-used handle under ``prefix`` to ``obj``."""
        ...  # pragma: no cover

    def create_explicit(self, obj: RepositoryObject, handle: str) -> str:
        """Bind ``handle`` to ``obj`` and return it.

        Raises
        ------
        HandleAlreadyBound
            If ``handle`` is bound to a different object.
        """
        ...  # pragma: no cover

    def resolve(self, handle: str) -> RepositoryObject | None:
        """Return the object ``handle`` is bound to, or ``None``."""
        ...  # pragma: no cover

    def find_bound(self, obj: RepositoryObject) -> str | None:
        """Return the handle bound to ``obj``, or ``None`` if it has none."""
        ...  # pragma: no cover

    def unbind(self, obj: RepositoryObject) -> None:
        """Release whatever handle is bound to ``obj``."""
        ...  # pragma: no cover


@runtime_checkable
class VersionHistoryStore(Protocol):
    """Protocol for the version-history persistence store."""

    def find_history(self, obj: RepositoryObject) -> VersionHistory | None:
        """Return the lineage ``obj`` is a version of, or ``None``."""
        ...  # pragma: no cover

    def create_history(self) -> VersionHistory:
        """Create and return an empty lineage.

        The lineage is not stored until a version is added to it or it is
        persisted.
        """
        ...  # pragma: no cover

    def find_version(self, history: VersionHistory, obj: RepositoryObject) -> Version | None:
        """Return the version record of ``obj`` within ``history``, or ``None``."""
        ...  # pragma: no cover

    def create_version(
        self,
        history: VersionHistory,
        obj: RepositoryObject,
        summary: str,
        timestamp: datetime,
        version_number: int | None = None,
    ) -> Version:
        """Add ``obj`` to ``history``.

        ``version_number=None`` takes the next sequential number; an
        explicit number is used verbatim.
        """
        ...  # pragma: no cover

    def persist(self, history: VersionHistory) -> None:
        """Write ``history`` back to the store."""
        ...  # pragma: no cover


@runtime_checkable
class MetadataStore(Protocol):
    """Protocol for descriptive metadata access."""

    def get_field(self, obj: RepositoryObject, field: str) -> list[MetadataValue]:
        """Return every value of ``field`` on ``obj``, in stored order."""
        ...  # pragma: no cover

    def clear_field(self, obj: RepositoryObject, field: str) -> None:
        """Remove every value of ``field`` from ``obj``."""
        ...  # pragma: no cover

    def add_value(
        self,
        obj: RepositoryObject,
        field: str,
        language: str | None,
        value: str,
        authority: str | None = None,
        confidence: int = -1,
    ) -> None:
        """Append one value to ``field`` on ``obj``."""
        ...  # pragma: no cover

    def persist(self, obj: RepositoryObject) -> None:
        """Commit pending metadata changes of ``obj``."""
        ...  # pragma: no cover

    def rollback(self, obj: RepositoryObject) -> None:
        """Discard uncommitted metadata changes of ``obj``."""
        ...  # pragma: no cover
