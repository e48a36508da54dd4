"""Data model for identified repository objects and their version lineage.

The engine treats a ``RepositoryObject`` opaquely except for two facts:
its identity (``id`` and ``kind``) and its ``capabilities``.  Decisions
that the engine makes per object are driven by the capability tags, never
by inspecting ``kind``.
"""
from __future__ import annotations

import uuid
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum, auto


class ObjectKind(Enum):
    """The kind of repository object an identifier is assigned to."""

    ITEM = auto()
    COLLECTION = auto()
    COMMUNITY = auto()
    BITSTREAM = auto()
    SITE = auto()

    @property
    def label(self) -> str:
        """Return the lower-case display name, e.g. ``"item"``."""
        return self.name.lower()


class Capability(Enum):
    """Behavioural tags carried explicitly by a repository object.

    VERSIONED
        The object may belong to a version lineage, so explicit
        identifiers with a version suffix are checked against its history.
    DESCRIBED
        The object carries descriptive metadata, so its identifier field
        is synchronized whenever a handle is bound.
    """

    VERSIONED = auto()
    DESCRIBED = auto()


# Capabilities each kind carries unless the caller says otherwise.
DEFAULT_CAPABILITIES: dict[ObjectKind, frozenset[Capability]] = {
    ObjectKind.ITEM: frozenset({Capability.VERSIONED, Capability.DESCRIBED}),
    ObjectKind.COLLECTION: frozenset({Capability.DESCRIBED}),
    ObjectKind.COMMUNITY: frozenset({Capability.DESCRIBED}),
    ObjectKind.BITSTREAM: frozenset(),
    ObjectKind.SITE: frozenset(),
}


@dataclass(frozen=True)
class RepositoryObject:
    """An object that can be bound to a handle.

    Parameters
    ----------
    id:
        Stable unique identifier of the object (a UUID string).
    kind:
        What sort of object this is; used in messages only.
    capabilities:
        The behavioural tags driving minting and registration decisions.
    """

    id: str
    kind: ObjectKind
    capabilities: frozenset[Capability] = field(default_factory=frozenset)

    @classmethod
    def new(
        cls,
        kind: ObjectKind,
        capabilities: frozenset[Capability] | None = None,
        object_id: str | None = None,
    ) -> "RepositoryObject":
        """Create an object of ``kind`` with its default capabilities."""
        return cls(
            id=object_id or str(uuid.uuid4()),
            kind=kind,
            capabilities=(
                capabilities if capabilities is not None else DEFAULT_CAPABILITIES[kind]
            ),
        )

    @property
    def is_versioned(self) -> bool:
        return Capability.VERSIONED in self.capabilities

    @property
    def is_described(self) -> bool:
        return Capability.DESCRIBED in self.capabilities

    def describe(self) -> str:
        """Return ``"<kind> <id>"`` for log and error messages."""
        return f"{self.kind.label} {self.id}"


@dataclass(frozen=True)
class Version:
    """One snapshot within a lineage.

    Parameters
    ----------
    version_number:
        Positive number, unique within its history.
    snapshot:
        The repository object this version designates.
    history_id:
        Back-reference to the owning ``VersionHistory``.
    summary:
        Free-text note recorded when the version was created.
    created:
        Timestamp of creation.
    """

    version_number: int
    snapshot: RepositoryObject
    history_id: str
    summary: str = ""
    created: datetime | None = None


@dataclass
class VersionHistory:
    """The ordered lineage of versions of one logical object.

    ``versions`` is kept sorted by ``version_number``.  Gaps are allowed;
    they arise when earlier versions are restored out of order.
    """

    id: str
    versions: list[Version] = field(default_factory=list)

    def add(self, version: Version) -> None:
        """Insert ``version`` keeping the list ordered by number.

        Raises
        ------
        ValueError
            If the number is already taken or belongs to another history.
        """
        if version.history_id != self.id:
            raise ValueError(
                f"Version {version.version_number} belongs to history "
                f"{version.history_id!r}, not {self.id!r}"
            )
        if any(v.version_number == version.version_number for v in self.versions):
            raise ValueError(
                f"History {self.id!r} already holds version {version.version_number}"
            )
        self.versions.append(version)
        self.versions.sort(key=lambda v: v.version_number)

    @property
    def first(self) -> Version | None:
        return self.versions[0] if self.versions else None

    @property
    def latest(self) -> Version | None:
        return self.versions[-1] if self.versions else None

    def next_number(self) -> int:
        """Return the number the next sequential version would take."""
        return self.latest.version_number + 1 if self.latest else 1

    def version_of(self, snapshot: RepositoryObject) -> Version | None:
        """Return the version whose snapshot is ``snapshot``, if any."""
        for version in self.versions:
            if version.snapshot.id == snapshot.id:
                return version
        return None

    def __contains__(self, snapshot: object) -> bool:
        return isinstance(snapshot, RepositoryObject) and self.version_of(snapshot) is not None

    def __len__(self) -> int:
        return len(self.versions)


@dataclass(frozen=True)
class MetadataValue:
    """A single value of a descriptive metadata field.

    Parameters
    ----------
    value:
        The stored text.
    language:
        Optional language tag, e.g. ``"en"``.
    authority:
        Optional authority key from a controlled vocabulary.
    confidence:
        Authority confidence score; ``-1`` means unset.
    """

    value: str
    language: str | None = None
    authority: str | None = None
    confidence: int = -1
