"""Handle grammar module.

Exports the ``Identifier`` value type, the total ``parse`` function and
its inverse ``format``, the version-suffix helpers, and the formal
grammar constants.
"""
from __future__ import annotations

from vhandle.grammar.grammar import (
    DEFAULT_CANONICAL_PREFIX,
    EXAMPLE_PREFIX,
    FULL_GRAMMAR,
    GRAMMAR_HANDLE,
    GRAMMAR_RESOLVABLE,
    GRAMMAR_VERSION,
    RESOLVER_SCHEMES,
)
from vhandle.grammar.identifier import (
    Identifier,
    NotAHandle,
    canonical_form,
    format,
    is_handle,
    match_version_suffix,
    normalize,
    parse,
    strip_version_suffix,
)

__all__ = [
    # Values
    "Identifier",
    "NotAHandle",
    # Functions
    "parse",
    "format",
    "normalize",
    "match_version_suffix",
    "strip_version_suffix",
    "is_handle",
    "canonical_form",
    # Grammar constants
    "FULL_GRAMMAR",
    "GRAMMAR_HANDLE",
    "GRAMMAR_VERSION",
    "GRAMMAR_RESOLVABLE",
    "RESOLVER_SCHEMES",
    "DEFAULT_CANONICAL_PREFIX",
    "EXAMPLE_PREFIX",
]
