"""The versioned handle engine.

``HandleEngine`` mints, registers, reserves, resolves, looks up and
deletes handles for repository objects.  It composes three injected
collaborators (a ``HandleRegistry``, a ``VersionHistoryStore`` and a
``MetadataStore``) and keeps them consistent:

- an object is bound to at most one handle at a time;
- within a lineage, version 1 carries the bare handle and version N > 1
  carries ``<bare>.N``;
- the object's identifier metadata always ends up holding its current
  handle and nothing else handle-shaped.

Every public operation returns an ``Outcome``: ``Ok``, ``NotFound`` or
``Failed``.  Store failures are wrapped and returned as ``Failed``; nothing is
retried.

Usage
-----
::

    from vhandle.engine import HandleEngine, Ok

    engine = HandleEngine(registry, versions, metadata, config)
    outcome = engine.register(item, "123456789/100.4")
    if isinstance(outcome, Ok):
        print(outcome.value)
"""
from __future__ import annotations

import logging
from collections.abc import Callable
from datetime import datetime, timezone
from typing import TypeVar

from vhandle.config import ConfigurationError, EngineConfig
from vhandle.engine.errors import (
    DuplicateVersionedIdentifier,
    HandleConflict,
    HandleError,
    IdentifierAuthorizationError,
    IdentifierNotResolvable,
    LineageHandleMissing,
    UpstreamStoreError,
    VersionNumberMismatch,
    VersionRecordMissing,
)
from vhandle.engine.result import Failed, NotFound, Ok, Outcome
from vhandle.grammar.identifier import (
    is_handle,
    match_version_suffix,
    parse,
    strip_version_suffix,
)
from vhandle.metadata.synchronizer import MetadataSynchronizer
from vhandle.model.objects import RepositoryObject, VersionHistory
from vhandle.stores.errors import AuthorizationDenied, HandleAlreadyBound, StoreError
from vhandle.stores.protocols import HandleRegistry, MetadataStore, VersionHistoryStore

logger = logging.getLogger(__name__)

T = TypeVar("T")


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class HandleEngine:
    """Version-aware handle minting and resolution.

    Parameters
    ----------
    registry:
        Binds handle strings to objects.
    versions:
        Reads and extends version lineages.
    metadata:
        Reads and rewrites the objects' identifier metadata.
    config:
        Engine settings.  Defaults to ``EngineConfig()``.
    clock:
        Returns the timestamp recorded on restored version records.

    Raises
    ------
    ConfigurationError
        If ``config.versioning_enabled`` is ``False``.
    """

    def __init__(
        self,
        registry: HandleRegistry,
        versions: VersionHistoryStore,
        metadata: MetadataStore,
        config: EngineConfig | None = None,
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        self._config = config or EngineConfig()
        if not self._config.versioning_enabled:
            raise ConfigurationError(
                "the versioned handle engine is enabled, but versioning is disabled"
            )
        self._registry = registry
        self._versions = versions
        self._synchronizer = MetadataSynchronizer(
            metadata,
            field=self._config.identifier_field,
            canonical_prefix=self._config.canonical_prefix,
        )
        self._clock = clock or _utcnow

    @property
    def config(self) -> EngineConfig:
        return self._config

    @property
    def prefix(self) -> str:
        """The prefix generated handles are minted under."""
        return self._config.effective_prefix()

    def supports(self, text: str) -> bool:
        """Return True if ``text`` is a handle this engine can resolve."""
        return is_handle(text, self._config.canonical_prefix)

    # ------------------------------------------------------------------
    # Minting
    # ------------------------------------------------------------------

    def mint(self, obj: RepositoryObject) -> Outcome[str]:
        """Return ``obj``'s handle, creating and binding one if it has none.

        Already-bound objects get their existing handle back with no
        registry writes.  Objects in a version lineage get a handle
        derived from the lineage's first version; all others get a
        registry-generated handle.
        """
        return self._run("mint", obj, lambda: self._mint(obj))

    def _mint(self, obj: RepositoryObject) -> Ok[str]:
        existing = self._registry.find_bound(obj)
        if existing is not None:
            return Ok(existing)

        history = self._versions.find_history(obj) if obj.is_versioned else None
        if history is not None:
            handle = self._mint_from_history(obj, history)
        else:
            handle = self._registry.create_generated(obj, self.prefix)
        logger.info("Minted handle %s for %s", handle, obj.describe())
        self._synchronize(obj, handle, "mint")
        return Ok(handle)

    def _mint_from_history(self, obj: RepositoryObject, history: VersionHistory) -> str:
        version = self._versions.find_version(history, obj)
        if version is None:
            raise VersionRecordMissing(history.id, "mint", obj)
        number = version.version_number

        first = history.first
        bare = None
        if first is not None and first.snapshot.id != obj.id:
            bare = self._registry.find_bound(first.snapshot)
        if bare is None:
            if number == 1:
                return self._registry.create_generated(obj, self.prefix)
            raise LineageHandleMissing(number, "mint", obj)

        base = strip_version_suffix(bare, self._config.canonical_prefix)
        handle = base if number == 1 else f"{base}.{number}"

        holder = self._registry.resolve(handle)
        if holder is not None and holder.id != obj.id:
            raise DuplicateVersionedIdentifier(handle, holder.id, number, "mint", obj)
        try:
            return self._registry.create_explicit(obj, handle)
        except HandleAlreadyBound as exc:
            raise DuplicateVersionedIdentifier(
                handle, exc.holder_id, number, "mint", obj
            ) from exc

    # ------------------------------------------------------------------
    # Registration
    # ------------------------------------------------------------------

    def register(self, obj: RepositoryObject, handle: str | None = None) -> Outcome[str]:
        """Bind a handle to ``obj`` and synchronize its metadata.

        Without ``handle`` this is ``mint``.  With ``handle``, a version
        suffix is checked against ``obj``'s version history:

        - history present, record number equal to the suffix: bind;
        - history present, numbers differ: ``VersionNumberMismatch``;
        - history present, no record for ``obj``: ``VersionRecordMissing``;
        - no history: restore the lineage from the handle (see
          ``_restore_as_version``).

        Handles without a version suffix, and objects that are not
        version-capable, are bound as given.
        """
        if handle is None:
            return self.mint(obj)
        return self._run("register", obj, lambda: self._register_explicit(obj, handle))

    def _register_explicit(self, obj: RepositoryObject, handle: str) -> Ok[str]:
        number = match_version_suffix(handle, self._config.canonical_prefix)
        handle = self._normalize(handle)
        if number is None or not obj.is_versioned:
            self._bind(obj, handle, "register")
            self._synchronize(obj, handle, "register")
            logger.info("Registered handle %s for %s", handle, obj.describe())
            return Ok(handle)

        history = self._versions.find_history(obj)
        if history is None:
            return self._restore_as_version(obj, handle, number)

        version = self._versions.find_version(history, obj)
        if version is None:
            raise VersionRecordMissing(history.id, "register", obj)
        if version.version_number != number:
            raise VersionNumberMismatch(
                handle, version.version_number, number, "register", obj
            )
        self._bind(obj, handle, "register")
        self._synchronize(obj, handle, "register")
        # Completes a restore whose history write failed.
        self._versions.persist(history)
        logger.info("Registered handle %s for version %d of %s", handle, number, obj.describe())
        return Ok(handle)

    def _restore_as_version(self, obj: RepositoryObject, handle: str, number: int) -> Ok[str]:
        # Each step is skipped when its result already exists.
        self._bind(obj, handle, "register")
        self._synchronize(obj, handle, "register")

        history = self._versions.find_history(obj)
        if history is None:
            history = self._versions.create_history()
        version = self._versions.find_version(history, obj)
        if version is None:
            self._versions.create_version(
                history, obj, self._config.restore_note, self._clock(), number
            )
        self._versions.persist(history)
        logger.info(
            "Restored %s as version %d of history %s with handle %s",
            obj.describe(),
            number,
            history.id,
            handle,
        )
        return Ok(handle)

    def reserve(self, obj: RepositoryObject, handle: str) -> Outcome[str]:
        """Bind ``handle`` to ``obj`` without version checks or metadata changes."""

        def action() -> Ok[str]:
            normalized = self._normalize(handle)
            self._bind(obj, normalized, "reserve")
            logger.info("Reserved handle %s for %s", normalized, obj.describe())
            return Ok(normalized)

        return self._run("reserve", obj, action)

    # ------------------------------------------------------------------
    # Resolution
    # ------------------------------------------------------------------

    def resolve(self, text: str) -> Outcome[RepositoryObject]:
        """Return the object ``text`` is bound to.

        Text that is not a handle yields ``NotFound``, never ``Failed``.
        """
        identifier = parse(text, self._config.canonical_prefix)
        if not identifier:
            return NotFound(f"{text!r} is not a handle ({identifier.reason})")
        try:
            obj = self._registry.resolve(identifier.canonical)
        except StoreError as exc:
            logger.error("Error while resolving handle %s: %s", identifier.canonical, exc)
            return Failed(UpstreamStoreError(exc, "resolve"))
        if obj is None:
            return NotFound(f"handle {identifier.canonical} is not bound")
        return Ok(obj)

    def lookup(self, obj: RepositoryObject) -> Outcome[str]:
        """Return the handle bound to ``obj``."""
        try:
            handle = self._registry.find_bound(obj)
        except StoreError as exc:
            logger.error("Error while looking up the handle of %s: %s", obj.describe(), exc)
            return Failed(IdentifierNotResolvable(str(exc), "lookup", obj))
        if handle is None:
            return NotFound(f"{obj.describe()} has no handle")
        return Ok(handle)

    def delete(self, obj: RepositoryObject, handle: str | None = None) -> Outcome[str]:
        """Unbind ``obj``'s handle and return it.

        ``handle`` is accepted for symmetry with ``register``; the object's
        current handle is unbound either way.
        """

        def action() -> Outcome[str]:
            current = self._registry.find_bound(obj)
            if current is None:
                return NotFound(f"{obj.describe()} has no handle")
            if handle is not None and self._normalize(handle) != current:
                logger.debug(
                    "delete called with %s but %s is bound to %s; unbinding %s",
                    handle,
                    obj.describe(),
                    current,
                    current,
                )
            self._registry.unbind(obj)
            logger.info("Deleted handle %s of %s", current, obj.describe())
            return Ok(current)

        return self._run("delete", obj, action)

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _run(
        self, operation: str, obj: RepositoryObject, action: Callable[[], Outcome[T]]
    ) -> Outcome[T]:
        try:
            return action()
        except HandleError as err:
            logger.error("Error while attempting to %s: %s", operation, err)
            return Failed(err)
        except AuthorizationDenied as exc:
            logger.error("Error while attempting to %s: %s", operation, exc)
            return Failed(IdentifierAuthorizationError(str(exc), operation, obj))
        except StoreError as exc:
            logger.error(
                "Error while attempting to %s for %s: %s", operation, obj.describe(), exc
            )
            return Failed(UpstreamStoreError(exc, operation, obj))

    def _normalize(self, handle: str) -> str:
        identifier = parse(handle, self._config.canonical_prefix)
        return identifier.canonical if identifier else handle

    def _bind(self, obj: RepositoryObject, handle: str, operation: str) -> None:
        current = self._registry.find_bound(obj)
        if current == handle:
            return
        holder = self._registry.resolve(handle)
        if holder is not None and holder.id != obj.id:
            raise HandleConflict(handle, holder.id, operation, obj)
        if current is not None:
            logger.info("Unbinding %s from %s before binding %s", current, obj.describe(), handle)
            self._registry.unbind(obj)
        try:
            self._registry.create_explicit(obj, handle)
        except HandleAlreadyBound as exc:
            raise HandleConflict(handle, exc.holder_id, operation, obj) from exc

    def _synchronize(self, obj: RepositoryObject, handle: str, operation: str) -> None:
        if not obj.is_described:
            return
        try:
            self._synchronizer.synchronize(obj, handle)
        except AuthorizationDenied as exc:
            raise IdentifierAuthorizationError(
                f"not allowed to add handle {handle} to the object's metadata: {exc}",
                operation,
                obj,
            ) from exc
