"""Keeps an object's identifier metadata in step with its bound handle.

After ``synchronize`` the identifier field holds every value that is
not a handle, in its original order and with its language, authority
and confidence untouched, followed by exactly one value: the resolvable
form of the current handle.  Old handle values are dropped.

Usage
-----
::

    from vhandle.metadata import MetadataSynchronizer

    synchronizer = MetadataSynchronizer(metadata_store)
    synchronizer.synchronize(item, "123456789/100.2")
"""
from __future__ import annotations

import logging

from vhandle.grammar.grammar import DEFAULT_CANONICAL_PREFIX
from vhandle.grammar.identifier import canonical_form, is_handle
from vhandle.model.objects import MetadataValue, RepositoryObject
from vhandle.stores.errors import StoreError
from vhandle.stores.protocols import MetadataStore

logger = logging.getLogger(__name__)


class MetadataSynchronizer:
    """Rewrites the identifier field of an object around its current handle.

    Parameters
    ----------
    store:
        The metadata store to read and write.
    field:
        The identifier field key, ``dc.identifier.uri`` by default.
    canonical_prefix:
        Resolver URL prefix used both to build the stored value and to
        recognise previously stored handle values.
    """

    def __init__(
        self,
        store: MetadataStore,
        field: str = "dc.identifier.uri",
        canonical_prefix: str = DEFAULT_CANONICAL_PREFIX,
    ) -> None:
        self._store = store
        self._field = field
        self._canonical_prefix = canonical_prefix

    @property
    def field(self) -> str:
        return self._field

    def partition(
        self, values: list[MetadataValue]
    ) -> tuple[list[MetadataValue], list[MetadataValue]]:
        """Split ``values`` into ``(handles, others)``, each in original order."""
        handles: list[MetadataValue] = []
        others: list[MetadataValue] = []
        for value in values:
            if is_handle(value.value, self._canonical_prefix):
                handles.append(value)
            else:
                others.append(value)
        return handles, others

    def synchronize(self, obj: RepositoryObject, handle: str) -> str:
        """Rewrite ``obj``'s identifier field so it carries ``handle``.

        Returns
        -------
        str
            The resolvable value that was stored.

        Raises
        ------
        StoreError
            Whatever the store raised.  Pending changes are rolled back
            first, so the call can be retried as a whole.
        """
        handle_uri = canonical_form(handle, self._canonical_prefix)
        try:
            self._rewrite(obj, handle_uri)
        except StoreError:
            self._store.rollback(obj)
            raise
        return handle_uri

    def _rewrite(self, obj: RepositoryObject, handle_uri: str) -> None:
        current = self._store.get_field(obj, self._field)
        stale, preserved = self.partition(current)
        self._store.clear_field(obj, self._field)

        for value in stale:
            logger.debug("Removing identifier %s from %s", value.value, obj.describe())
        for value in preserved:
            logger.debug("Preserving identifier %s on %s", value.value, obj.describe())
            self._store.add_value(
                obj,
                self._field,
                value.language,
                value.value,
                value.authority,
                value.confidence,
            )

        if handle_uri.strip():
            self._store.add_value(obj, self._field, None, handle_uri)
        self._store.persist(obj)
