"""Error taxonomy of the handle engine.

Every error names the operation it arose in and the object involved,
so a caller can report it without further context.  Errors are carried
inside ``Failed`` outcomes; the engine itself never raises them for
expected conditions.
"""
from __future__ import annotations

from vhandle.config import ConfigurationError
from vhandle.model.objects import RepositoryObject


class HandleError(Exception):
    """Base class for every failure the engine reports.

    Parameters
    ----------
    message:
        Human-readable description of the problem.
    operation:
        The engine operation that failed, e.g. ``"mint"``.
    obj:
        The object the operation was applied to, if any.
    """

    def __init__(
        self,
        message: str,
        operation: str,
        obj: RepositoryObject | None = None,
    ) -> None:
        self.message = message
        self.operation = operation
        self.object_id = obj.id if obj is not None else None
        self.object_kind = obj.kind.label if obj is not None else None
        super().__init__(str(self))

    def __str__(self) -> str:
        if self.object_id is None:
            return f"{self.operation}: {self.message}"
        return f"{self.operation} {self.object_kind} {self.object_id}: {self.message}"


# ---------------------------------------------------------------------------
# Version inconsistencies
# ---------------------------------------------------------------------------


class VersionInconsistency(HandleError):
    """The registry, the version history and a handle disagree."""


class VersionNumberMismatch(VersionInconsistency):
    """A handle's version suffix differs from the snapshot's version number."""

    def __init__(
        self, handle: str, expected: int, found: int, operation: str, obj: RepositoryObject
    ) -> None:
        self.handle = handle
        self.expected = expected
        self.found = found
        super().__init__(
            f"handle {handle!r} designates version {found} but the snapshot is version "
            f"{expected}",
            operation,
            obj,
        )


class VersionRecordMissing(VersionInconsistency):
    """A version history exists but holds no record for the snapshot."""

    def __init__(self, history_id: str, operation: str, obj: RepositoryObject) -> None:
        self.history_id = history_id
        super().__init__(
            f"version history {history_id} has no version record for this snapshot",
            operation,
            obj,
        )


class DuplicateVersionedIdentifier(VersionInconsistency):
    """A versioned handle is already bound to another version's snapshot."""

    def __init__(
        self,
        handle: str,
        holder_id: str | None,
        version_number: int,
        operation: str,
        obj: RepositoryObject,
    ) -> None:
        self.handle = handle
        self.holder_id = holder_id
        self.version_number = version_number
        super().__init__(
            f"versioned handle {handle!r} for version {version_number} is already used by "
            f"object {holder_id}",
            operation,
            obj,
        )


class LineageHandleMissing(VersionInconsistency):
    """The first version of a lineage has no handle to derive from."""

    def __init__(self, version_number: int, operation: str, obj: RepositoryObject) -> None:
        self.version_number = version_number
        super().__init__(
            f"cannot derive a handle for version {version_number}: the lineage's first "
            "version has no handle",
            operation,
            obj,
        )


# ---------------------------------------------------------------------------
# Registry and store failures
# ---------------------------------------------------------------------------


class HandleConflict(HandleError):
    """An explicit handle is already bound to a different object."""

    def __init__(
        self, handle: str, holder_id: str, operation: str, obj: RepositoryObject
    ) -> None:
        self.handle = handle
        self.holder_id = holder_id
        super().__init__(
            f"handle {handle!r} is already bound to object {holder_id}", operation, obj
        )


class UpstreamStoreError(HandleError):
    """A registry, history or metadata store reported a failure."""

    def __init__(
        self, cause: Exception, operation: str, obj: RepositoryObject | None = None
    ) -> None:
        self.cause = cause
        super().__init__(f"store failure: {cause}", operation, obj)


class IdentifierNotResolvable(HandleError):
    """The registry could not be queried for an object's handle."""


class IdentifierAuthorizationError(HandleError):
    """The current user may not write the object's identifier metadata."""


__all__ = [
    "HandleError",
    "VersionInconsistency",
    "VersionNumberMismatch",
    "VersionRecordMissing",
    "DuplicateVersionedIdentifier",
    "LineageHandleMissing",
    "HandleConflict",
    "UpstreamStoreError",
    "IdentifierNotResolvable",
    "IdentifierAuthorizationError",
    "ConfigurationError",
]
