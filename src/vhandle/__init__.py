"""vhandle: versioned persistent-identifier minting and resolution engine.

Public API
----------
The stable public surface is everything exported from this module.
Anything inside submodules not re-exported here is considered private
and may change without notice.

Example
-------
::

    import vhandle
    from vhandle.model import ObjectKind
    from vhandle.stores import MemoryBackend

    # Parse a handle into prefix, suffix and version
    ident = vhandle.parse("123456789/100.4")
    ident.version_ordinal          # 4

    # Mint handles across a version lineage
    backend = MemoryBackend()
    engine = vhandle.create_engine(backend.registry, backend.versions, backend.metadata)
    item = backend.add_object(ObjectKind.ITEM)
    engine.mint(item).unwrap()      # '123456789/1'
    v2 = backend.new_version(item)
    engine.mint(v2).unwrap()        # '123456789/1.2'

    vhandle.__version__
    '0.1.0'
"""
from __future__ import annotations

from typing import TYPE_CHECKING

__version__: str = "0.1.0"

if TYPE_CHECKING:
    from vhandle.config import EngineConfig
    from vhandle.engine.minting import HandleEngine
    from vhandle.grammar.identifier import Identifier, NotAHandle
    from vhandle.stores.protocols import HandleRegistry, MetadataStore, VersionHistoryStore


def parse(text: str) -> "Identifier | NotAHandle":
    """Parse handle text into an ``Identifier``.

    Parameters
    ----------
    text:
        A bare handle (``prefix/suffix[.version]``) or a resolvable form
        such as ``hdl:...`` or ``http://hdl.handle.net/...``.

    Returns
    -------
    Identifier | NotAHandle
        The parsed identifier, or a falsy ``NotAHandle``.  Never raises.
    """
    from vhandle.grammar.identifier import parse as _parse

    return _parse(text)


def format(identifier: "Identifier") -> str:  # noqa: A001
    """Format an ``Identifier`` to its canonical string.

    ``parse(format(ident)) == ident`` for every identifier.
    """
    from vhandle.grammar.identifier import format as _format

    return _format(identifier)


def match_version_suffix(text: str) -> int | None:
    """Return the version number encoded in a handle's suffix, if any."""
    from vhandle.grammar.identifier import match_version_suffix as _match

    return _match(text)


def create_engine(
    registry: "HandleRegistry",
    versions: "VersionHistoryStore",
    metadata: "MetadataStore",
    config: "EngineConfig | None" = None,
) -> "HandleEngine":
    """Build a ``HandleEngine`` from its three collaborators.

    Parameters
    ----------
    registry:
        Handle registry implementation.
    versions:
        Version-history store implementation.
    metadata:
        Metadata store implementation.
    config:
        Engine settings; defaults apply when omitted.

    Raises
    ------
    vhandle.config.ConfigurationError
        If the configuration disables versioning.
    """
    from vhandle.engine.minting import HandleEngine

    return HandleEngine(registry, versions, metadata, config=config)


__all__ = [
    "__version__",
    "parse",
    "format",
    "match_version_suffix",
    "create_engine",
]
