"""Identifier values and the pure functions of the handle grammar.

``parse`` is total: it never raises, and returns either an ``Identifier``
or a falsy ``NotAHandle`` describing why the text was rejected.
``format`` is its exact inverse on the canonical form.  A trailing ``.1``
reads as version 1, which formats as the bare handle::

    >>> ident = parse("123456789/100.4")
    >>> ident.prefix, ident.suffix, ident.version_ordinal
    ('123456789', '100', 4)
    >>> format(ident)
    '123456789/100.4'
"""
from __future__ import annotations

from dataclasses import dataclass, field

from vhandle.grammar.grammar import (
    DEFAULT_CANONICAL_PREFIX,
    HANDLE_PATTERN,
    RESOLVER_SCHEMES,
    VERSION_SUFFIX_PATTERN,
)


@dataclass(frozen=True, eq=False)
class Identifier:
    """An immutable handle value.

    Parameters
    ----------
    prefix:
        The naming-authority token before the slash.
    suffix:
        The local token after the slash, without any version suffix.  It may
        not itself end in a version suffix, so that ``parse`` inverts
        ``format``.
    version_ordinal:
        The lineage version this handle designates, or ``None`` for an
        unversioned handle.  Ordinal ``1`` formats exactly like ``None``.

    Two identifiers are equal iff their canonical strings are equal.
    """

    prefix: str
    suffix: str
    version_ordinal: int | None = field(default=None)

    def __post_init__(self) -> None:
        for name, token in (("prefix", self.prefix), ("suffix", self.suffix)):
            if not token or "/" in token or any(ch.isspace() for ch in token):
                raise ValueError(f"Identifier {name} must be a non-empty token, got {token!r}")
        if ":" in self.prefix:
            raise ValueError(f"Identifier prefix must not contain ':', got {self.prefix!r}")
        if VERSION_SUFFIX_PATTERN.match(self.suffix):
            raise ValueError(
                f"Identifier suffix must not end in a version number, got {self.suffix!r}"
            )
        if self.version_ordinal is not None and self.version_ordinal < 1:
            raise ValueError(
                f"Identifier version_ordinal must be positive, got {self.version_ordinal!r}"
            )

    @property
    def canonical(self) -> str:
        """Return the canonical string form of this identifier."""
        base = f"{self.prefix}/{self.suffix}"
        if self.version_ordinal is not None and self.version_ordinal > 1:
            return f"{base}.{self.version_ordinal}"
        return base

    @property
    def bare(self) -> "Identifier":
        """Return this identifier without its version ordinal."""
        return Identifier(prefix=self.prefix, suffix=self.suffix)

    def with_version(self, version_ordinal: int) -> "Identifier":
        """Return the identifier designating ``version_ordinal`` of this lineage."""
        return Identifier(
            prefix=self.prefix, suffix=self.suffix, version_ordinal=version_ordinal
        )

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Identifier):
            return NotImplemented
        return self.canonical == other.canonical

    def __hash__(self) -> int:
        return hash(self.canonical)

    def __str__(self) -> str:
        return self.canonical


@dataclass(frozen=True)
class NotAHandle:
    """The outcome of parsing text that is not handle-shaped.

    Always falsy, so callers can write ``if ident := parse(text): ...``.
    """

    text: str
    reason: str

    def __bool__(self) -> bool:
        return False


def normalize(text: str, canonical_prefix: str = DEFAULT_CANONICAL_PREFIX) -> str:
    """Strip whitespace and any recognised resolver scheme from ``text``."""
    candidate = text.strip()
    schemes = (canonical_prefix, *RESOLVER_SCHEMES) if canonical_prefix else RESOLVER_SCHEMES
    for scheme in schemes:
        if candidate.startswith(scheme):
            return candidate[len(scheme):]
    return candidate


def parse(
    text: object, canonical_prefix: str = DEFAULT_CANONICAL_PREFIX
) -> Identifier | NotAHandle:
    """Parse ``text`` into an ``Identifier``.

    Bare handles and the resolvable forms listed in
    ``vhandle.grammar.grammar.GRAMMAR_RESOLVABLE`` are accepted.

    Parameters
    ----------
    text:
        Candidate handle text.  Non-string input is rejected, not raised on.
    canonical_prefix:
        The deployment's resolver URL prefix, accepted in addition to the
        built-in schemes.

    Returns
    -------
    Identifier | NotAHandle
        The parsed identifier, or a falsy ``NotAHandle`` with a reason.
    """
    if not isinstance(text, str):
        return NotAHandle(text=repr(text), reason="not a string")
    candidate = normalize(text, canonical_prefix)
    if not candidate:
        return NotAHandle(text=text, reason="empty")
    match = HANDLE_PATTERN.match(candidate)
    if match is None:
        return NotAHandle(text=text, reason="expected exactly one '/' between two tokens")

    prefix, suffix = match.group("prefix"), match.group("suffix")
    version = VERSION_SUFFIX_PATTERN.match(suffix)
    if version is None:
        return Identifier(prefix=prefix, suffix=suffix)
    base = version.group("base")
    if VERSION_SUFFIX_PATTERN.match(base):
        return NotAHandle(text=text, reason="more than one version suffix")
    return Identifier(prefix=prefix, suffix=base, version_ordinal=int(version.group("ordinal")))


def format(identifier: Identifier) -> str:  # noqa: A001
    """Return the canonical string form of ``identifier``."""
    return identifier.canonical


def match_version_suffix(
    text: str, canonical_prefix: str = DEFAULT_CANONICAL_PREFIX
) -> int | None:
    """Return the version number encoded in ``text``, if any.

    ``"123456789/100.4"`` yields ``4`` and ``"123456789/100.1"`` yields ``1``;
    ``"123456789/100"`` and non-handle text yield ``None``.
    """
    identifier = parse(text, canonical_prefix)
    if not identifier:
        return None
    return identifier.version_ordinal


def strip_version_suffix(text: str, canonical_prefix: str = DEFAULT_CANONICAL_PREFIX) -> str:
    """Return the bare canonical form of ``text``, or ``text`` unchanged if not a handle."""
    identifier = parse(text, canonical_prefix)
    if not identifier:
        return text
    return identifier.bare.canonical


def is_handle(text: object, canonical_prefix: str = DEFAULT_CANONICAL_PREFIX) -> bool:
    """Return True if ``text`` is recognised as a handle in any accepted form."""
    return bool(parse(text, canonical_prefix))


def canonical_form(handle: str, canonical_prefix: str = DEFAULT_CANONICAL_PREFIX) -> str:
    """Return the fully-qualified resolvable form of ``handle``.

    The result is what gets stored in an object's identifier metadata,
    e.g. ``http://hdl.handle.net/123456789/100.2``.
    """
    identifier = parse(handle, canonical_prefix)
    bare = identifier.canonical if identifier else handle.strip()
    return f"{canonical_prefix}{bare}"

