"""Three-way outcome type returned by every engine operation.

``Ok``
    The operation succeeded; ``value`` holds its result.
``NotFound``
    An expected absence, e.g. resolving text that is not a handle or
    looking up an object with no handle.  Not an error.
``Failed``
    A fatal problem the caller must surface; ``error`` holds a
    ``HandleError`` describing it.

Outcomes are plain data, so they can be matched structurally::

    match engine.resolve(text):
        case Ok(value=obj):
            ...
        case NotFound(reason=why):
            ...
        case Failed(error=err):
            raise err
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Generic, TypeVar, Union

from vhandle.engine.errors import HandleError

T = TypeVar("T")


@dataclass(frozen=True)
class Ok(Generic[T]):
    """A successful outcome carrying ``value``."""

    value: T

    @property
    def is_ok(self) -> bool:
        return True

    def unwrap(self) -> T:
        return self.value


@dataclass(frozen=True)
class NotFound:
    """An expected absence, with a human-readable ``reason``."""

    reason: str

    @property
    def is_ok(self) -> bool:
        return False

    def unwrap(self) -> None:
        """Raise ``LookupError``: there is no value to return."""
        raise LookupError(self.reason)


@dataclass(frozen=True)
class Failed:
    """A fatal outcome carrying the ``HandleError`` that caused it."""

    error: HandleError

    @property
    def is_ok(self) -> bool:
        return False

    def unwrap(self) -> None:
        """Raise the carried error."""
        raise self.error

    def __str__(self) -> str:
        return str(self.error)


Outcome = Union[Ok[T], NotFound, Failed]
