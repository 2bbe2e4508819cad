"""Reflector store: single-writer, many-reader mirror of one resource type."""

from __future__ import annotations

import asyncio
from collections.abc import Mapping
from types import MappingProxyType

from kubemirror.models.events import Applied, Deleted, Restarted, WatchEvent
from kubemirror.models.resources import DynamicObject, ResourceIdentity
from kubemirror.observability.logging import get_logger

_log = get_logger("cache.store")


class Store:
    """In-memory map of ResourceIdentity to object.

    The writer builds a new mapping per event and publishes it with a single
    reference assignment, so readers always see a fully-applied event and
    never contend with the writer.  Returned objects are shared with the
    snapshot and must be treated as read-only.
    """

    def __init__(self) -> None:
        self._snapshot: Mapping[ResourceIdentity, DynamicObject] = MappingProxyType({})
        self._ready = asyncio.Event()

    # ------------------------------------------------------------------
    # Writer
    # ------------------------------------------------------------------

    def apply(self, event: WatchEvent) -> None:
        """Fold one event into the store."""
        current = self._snapshot
        if isinstance(event, Applied):
            updated = dict(current)
            updated[ResourceIdentity.of(event.obj)] = event.obj
        elif isinstance(event, Deleted):
            key = ResourceIdentity.of(event.obj)
            if key not in current:
                return
            updated = dict(current)
            del updated[key]
        elif isinstance(event, Restarted):
            updated = {ResourceIdentity.of(obj): obj for obj in event.objects}
            purged = len(current.keys() - updated.keys())
            if purged:
                _log.info("store_purged_on_restart", purged=purged, size=len(updated))
        else:
            raise TypeError(f"unsupported event: {event!r}")

        self._snapshot = MappingProxyType(updated)
        if isinstance(event, Restarted):
            self._ready.set()

    # ------------------------------------------------------------------
    # Readers
    # ------------------------------------------------------------------

    def snapshot(self) -> Mapping[ResourceIdentity, DynamicObject]:
        """Immutable view of the state after the last applied event."""
        return self._snapshot

    def get(self, identity: ResourceIdentity) -> DynamicObject | None:
        return self._snapshot.get(identity)

    def objects(self) -> list[DynamicObject]:
        snapshot = self._snapshot
        return [snapshot[key] for key in sorted(snapshot, key=_sort_key)]

    def identities(self) -> list[ResourceIdentity]:
        return sorted(self._snapshot, key=_sort_key)

    def __len__(self) -> int:
        return len(self._snapshot)

    def __contains__(self, identity: object) -> bool:
        return identity in self._snapshot

    @property
    def ready(self) -> bool:
        """True once the first full listing has been applied."""
        return self._ready.is_set()

    async def wait_until_ready(self) -> None:
        await self._ready.wait()


def _sort_key(identity: ResourceIdentity) -> tuple[str, str]:
    return (identity.namespace or "", identity.name)
