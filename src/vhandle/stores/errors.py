"""Failure types raised by store backends.

Backends report every expected failure as a ``StoreError`` subclass.
The engine catches exactly this family and converts it into a
``Failed`` outcome; any other exception is treated as a bug and
propagates unchanged.
"""
from __future__ import annotations


class StoreError(Exception):
    """Base class for failures reported by a store backend."""


class StoreUnavailable(StoreError):
    """The backing store could not be reached or refused the operation."""


class HandleAlreadyBound(StoreError):
    """An explicit handle string is already bound to a different object."""

    def __init__(self, handle: str, holder_id: str) -> None:
        self.handle = handle
        self.holder_id = holder_id
        super().__init__(f"Handle {handle!r} is already bound to object {holder_id}")


class AuthorizationDenied(StoreError):
    """The current user may not modify the object."""

    def __init__(self, object_id: str, action: str) -> None:
        self.object_id = object_id
        self.action = action
        super().__init__(f"Not authorized to {action} object {object_id}")
