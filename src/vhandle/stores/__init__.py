"""Store contracts and reference backends.

Exports the three collaborator protocols, the ``StoreError`` family
backends raise, and the in-memory implementations.
"""
from __future__ import annotations

from vhandle.stores.errors import (
    AuthorizationDenied,
    HandleAlreadyBound,
    StoreError,
    StoreUnavailable,
)
from vhandle.stores.memory import (
    MemoryBackend,
    MemoryHandleRegistry,
    MemoryMetadataStore,
    MemoryVersionHistoryStore,
)
from vhandle.stores.protocols import HandleRegistry, MetadataStore, VersionHistoryStore

__all__ = [
    # Protocols
    "HandleRegistry",
    "VersionHistoryStore",
    "MetadataStore",
    # Errors
    "StoreError",
    "StoreUnavailable",
    "HandleAlreadyBound",
    "AuthorizationDenied",
    # In-memory backends
    "MemoryHandleRegistry",
    "MemoryVersionHistoryStore",
    "MemoryMetadataStore",
    "MemoryBackend",
]
