"""Repository object and version lineage model.

Exports the object identity types, capability tags, version records,
and the metadata value type used by the synchronizer.
"""
from __future__ import annotations

from vhandle.model.objects import (
    DEFAULT_CAPABILITIES,
    Capability,
    MetadataValue,
    ObjectKind,
    RepositoryObject,
    Version,
    VersionHistory,
)

__all__ = [
    "ObjectKind",
    "Capability",
    "DEFAULT_CAPABILITIES",
    "RepositoryObject",
    "Version",
    "VersionHistory",
    "MetadataValue",
]
