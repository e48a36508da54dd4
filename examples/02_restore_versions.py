#!/usr/bin/env python3
"""Example: Restoring version lineages from external handles

When objects are reloaded from archival packages their handles are
known but their version histories are not.  Registering a versioned
handle such as ``10673/7.3`` recreates the history entry, and later
mismatching handles are reported instead of bound.

Usage:
    python examples/02_restore_versions.py

Requirements:
    pip install vhandle
"""
from __future__ import annotations

from vhandle.config import EngineConfig
from vhandle.engine import Failed, NotFound, Ok
from vhandle.model import ObjectKind
from vhandle.stores import MemoryBackend


def main() -> None:
    backend = MemoryBackend()
    engine = backend.engine(EngineConfig(prefix="10673", restore_note="Restored from AIP"))

    # Step 1: An object arrives with a versioned handle and some other identifiers
    item = backend.add_object(ObjectKind.ITEM)
    backend.metadata.add_value(item, "dc.identifier.uri", None, "urn:issn:1234-5678")
    backend.metadata.add_value(item, "dc.identifier.uri", None, "http://hdl.handle.net/10673/7")
    backend.metadata.persist(item)

    # Step 2: Register it; the lineage is rebuilt with the version from the suffix
    print(f"register -> {engine.register(item, 'hdl:10673/7.3')}")
    history = backend.versions.find_history(item)
    version = history.version_of(item)
    print(f"history {history.id}: version {version.version_number} ({version.summary!r})")
    for value in backend.metadata.get_field(item, "dc.identifier.uri"):
        print(f"  dc.identifier.uri = {value.value}")

    # Step 3: A handle naming a different version is rejected
    match engine.register(item, "10673/7.5"):
        case Failed(error=err):
            print(f"rejected: {err}")
        case Ok(value=handle):
            print(f"unexpectedly bound {handle}")
        case NotFound(reason=reason):
            print(f"not found: {reason}")


if __name__ == "__main__":
    main()
