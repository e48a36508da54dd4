"""Formal grammar rules for handle identifier strings.

This module documents the handle grammar as EBNF-style string constants
and holds the compiled patterns that ``vhandle.grammar.identifier``
matches against.  The constants serve as authoritative reference
documentation; the patterns are the executable form of the same rules.

Grammar notation used here:
    ``::=``     production rule
    ``|``       alternation
    ``( )``     grouping
    ``[ ]``     optional (zero or one)
    ``{ }``     zero or more repetitions
    ``TOKEN``   terminal: one or more characters other than ``/`` and whitespace
    ``PREFIX_TOKEN`` terminal: a ``TOKEN`` that also contains no ``:``
    ``DIGIT``   terminal: ``0``-``9``
    ``NZDIGIT`` terminal: ``1``-``9``
"""
from __future__ import annotations

import re

# ---------------------------------------------------------------------------
# Bare handle
# ---------------------------------------------------------------------------

GRAMMAR_HANDLE = """
handle ::= prefix '/' suffix

prefix ::= PREFIX_TOKEN
suffix ::= base_suffix [ version_suffix ]
"""

# ---------------------------------------------------------------------------
# Version suffix
# ---------------------------------------------------------------------------

GRAMMAR_VERSION = """
version_suffix ::= '.' version_ordinal

version_ordinal ::= { '0' } NZDIGIT { DIGIT }   (* value >= 1 *)

(* Ordinal 1 designates the bare handle and formats without a suffix.
   A base_suffix never itself ends in a version_suffix. *)
"""

# ---------------------------------------------------------------------------
# Resolvable forms
# ---------------------------------------------------------------------------

GRAMMAR_RESOLVABLE = """
resolvable ::= [ scheme ] handle

scheme ::= 'hdl:'
         | 'info:hdl/'
         | 'http://hdl.handle.net/'
         | 'https://hdl.handle.net/'
         | CANONICAL_PREFIX
"""

FULL_GRAMMAR: str = "\n".join([
    "# Handle Identifier Grammar (EBNF-like notation)",
    "# ==============================================",
    "",
    "# Bare handle",
    GRAMMAR_HANDLE,
    "# Version suffix",
    GRAMMAR_VERSION,
    "# Resolvable forms",
    GRAMMAR_RESOLVABLE,
])

# ---------------------------------------------------------------------------
# Executable form
# ---------------------------------------------------------------------------

# Schemes stripped by the parser before matching the bare form, longest first.
RESOLVER_SCHEMES: tuple[str, ...] = (
    "https://hdl.handle.net/",
    "http://hdl.handle.net/",
    "info:hdl/",
    "hdl:",
)

DEFAULT_CANONICAL_PREFIX = "http://hdl.handle.net/"

# Prefix registered to no one; used only when no prefix is configured.
EXAMPLE_PREFIX = "123456789"

HANDLE_PATTERN: re.Pattern[str] = re.compile(r"^(?P<prefix>[^/\s:]+)/(?P<suffix>[^/\s]+)$")

VERSION_SUFFIX_PATTERN: re.Pattern[str] = re.compile(
    r"^(?P<base>.+)\.(?P<ordinal>0*[1-9]\d*)$"
)
