"""Handle engine module.

Exports ``HandleEngine``, the ``Ok`` / ``NotFound`` / ``Failed`` outcome
types, and the engine's error taxonomy.
"""
from __future__ import annotations

from vhandle.engine.errors import (
    ConfigurationError,
    DuplicateVersionedIdentifier,
    HandleConflict,
    HandleError,
    IdentifierAuthorizationError,
    IdentifierNotResolvable,
    LineageHandleMissing,
    UpstreamStoreError,
    VersionInconsistency,
    VersionNumberMismatch,
    VersionRecordMissing,
)
from vhandle.engine.minting import HandleEngine
from vhandle.engine.result import Failed, NotFound, Ok, Outcome

__all__ = [
    "HandleEngine",
    # Outcomes
    "Ok",
    "NotFound",
    "Failed",
    "Outcome",
    # Errors
    "HandleError",
    "VersionInconsistency",
    "VersionNumberMismatch",
    "VersionRecordMissing",
    "DuplicateVersionedIdentifier",
    "LineageHandleMissing",
    "HandleConflict",
    "UpstreamStoreError",
    "IdentifierNotResolvable",
    "IdentifierAuthorizationError",
    "ConfigurationError",
]
