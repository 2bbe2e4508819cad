"""Stream combinators that fold events into a Store."""

from __future__ import annotations

from collections.abc import AsyncGenerator
from contextlib import aclosing

from kubemirror.cache.store import Store
from kubemirror.models.events import Applied, Restarted, WatchEvent
from kubemirror.models.resources import DynamicObject


async def reflector(store: Store, events: AsyncGenerator[WatchEvent, None]) -> AsyncGenerator[WatchEvent, None]:
    """Apply each event to *store* before passing it on, in delivery order."""
    async with aclosing(events):
        async for event in events:
            store.apply(event)
            yield event


async def touched_objects(events: AsyncGenerator[WatchEvent, None]) -> AsyncGenerator[DynamicObject, None]:
    """Flatten events into the objects they create or update.

    Deletions carry no live object and are skipped.
    """
    async with aclosing(events):
        async for event in events:
            if isinstance(event, Applied):
                yield event.obj
            elif isinstance(event, Restarted):
                for obj in event.objects:
                    yield obj
