"""Wires the watch pipeline end to end.

    WatchSession -> resilient_watch -> transform -> reflector -> sink

Each stage is an async generator pulling from the previous one; the sink is
awaited before the next event is requested, so at most one event is in
flight and a slow consumer stalls polling instead of growing a buffer.
"""

from __future__ import annotations

import random
from collections.abc import AsyncGenerator

from kubemirror.cache.reflector import reflector
from kubemirror.cache.store import Store
from kubemirror.cache.transform import transform
from kubemirror.client import ClusterClient
from kubemirror.collector.resilient import resilient_watch
from kubemirror.collector.session import WatchSession
from kubemirror.models.config import MirrorConfig
from kubemirror.models.events import ObservedEvent, WatchEvent
from kubemirror.models.resources import ResourceDescriptor, WatchTarget
from kubemirror.observability.logging import get_logger
from kubemirror.sinks.base import EventSink

_log = get_logger("pipeline")


def build_event_stream(
    client: ClusterClient,
    descriptor: ResourceDescriptor,
    target: WatchTarget,
    store: Store,
    config: MirrorConfig,
    rng: random.Random | None = None,
) -> AsyncGenerator[WatchEvent, None]:
    """Compose session, resilience, transform and reflector stages."""

    def _new_session() -> AsyncGenerator[WatchEvent, None]:
        session = WatchSession(client, descriptor, target, timeout_seconds=config.watch.timeout_seconds)
        return session.events()

    events = resilient_watch(_new_session, config.backoff, rng=rng)
    trimmed = transform(events, resource=str(descriptor), strip_last_applied=config.watch.strip_last_applied)
    return reflector(store, trimmed)


async def run_pipeline(
    events: AsyncGenerator[WatchEvent, None],
    sink: EventSink,
    resource: str,
) -> None:
    """Drain *events*, emitting one ObservedEvent per event to *sink*.

    Runs until the event stream ends or the task is cancelled.
    """
    try:
        async for event in events:
            await sink.emit(ObservedEvent.from_event(event, resource))
    finally:
        await events.aclose()
        _log.debug("pipeline_closed", resource=resource)
