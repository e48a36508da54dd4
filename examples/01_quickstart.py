#!/usr/bin/env python3
"""Example: Quickstart for vhandle

Minimal working example: parse a handle, then mint handles for an item
and two later versions of it.

Usage:
    python examples/01_quickstart.py

Requirements:
    pip install vhandle
"""
from __future__ import annotations

import vhandle
from vhandle.config import EngineConfig
from vhandle.model import ObjectKind
from vhandle.stores import MemoryBackend


def main() -> None:
    print(f"vhandle version: {vhandle.__version__}")

    # Step 1: Parse a handle in one of its resolvable forms
    ident = vhandle.parse("https://hdl.handle.net/10673/42.3")
    print(f"Parsed: prefix={ident.prefix}, suffix={ident.suffix}, "
          f"version={ident.version_ordinal}")
    print(f"Canonical: {vhandle.format(ident)}")

    # Step 2: Build an engine over the in-memory backends
    backend = MemoryBackend()
    engine = vhandle.create_engine(
        backend.registry, backend.versions, backend.metadata, EngineConfig(prefix="10673")
    )

    # Step 3: Mint handles across a version lineage
    v1 = backend.add_object(ObjectKind.ITEM)
    v2 = backend.new_version(v1, summary="Corrected abstract")
    v3 = backend.new_version(v2, summary="Added dataset")
    for snapshot in (v1, v2, v3):
        print(f"{snapshot.describe()} -> {engine.mint(snapshot).unwrap()}")

    # Step 4: Resolve a versioned handle back to its snapshot
    resolved = engine.resolve("hdl:10673/1.2").unwrap()
    print(f"hdl:10673/1.2 resolves to {resolved.describe()}")

    # Step 5: The identifier metadata carries the current handle
    for value in backend.metadata.get_field(v3, engine.config.identifier_field):
        print(f"dc.identifier.uri = {value.value}")


if __name__ == "__main__":
    main()
