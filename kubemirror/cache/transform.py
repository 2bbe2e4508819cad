"""Event transform stage: trims bookkeeping metadata before storage."""

from __future__ import annotations

from collections.abc import AsyncGenerator
from contextlib import aclosing
from functools import partial

from kubemirror.models.events import Deleted, Restarted, WatchEvent
from kubemirror.models.resources import DynamicObject
from kubemirror.observability.logging import get_logger

_log = get_logger("cache.transform")

LAST_APPLIED_ANNOTATION = "kubectl.kubernetes.io/last-applied-configuration"


def strip_metadata(obj: DynamicObject, *, strip_last_applied: bool = False) -> None:
    """Remove field-ownership bookkeeping from *obj* in place.

    Only ``metadata.managedFields`` (and optionally the last-applied
    annotation) is touched; name, namespace, spec and status are kept.
    """
    metadata = obj.get("metadata")
    if not isinstance(metadata, dict):
        return
    metadata.pop("managedFields", None)
    if strip_last_applied:
        annotations = metadata.get("annotations")
        if isinstance(annotations, dict):
            annotations.pop(LAST_APPLIED_ANNOTATION, None)


def trim_event(event: WatchEvent, *, strip_last_applied: bool = False) -> WatchEvent:
    """Return *event* with its objects trimmed; deletions pass through unchanged."""
    if isinstance(event, Deleted):
        return event
    return event.modify(partial(strip_metadata, strip_last_applied=strip_last_applied))


async def transform(
    events: AsyncGenerator[WatchEvent, None],
    *,
    resource: str = "",
    strip_last_applied: bool = False,
) -> AsyncGenerator[WatchEvent, None]:
    """Trim each event and log one record per event."""
    async with aclosing(events):
        async for event in events:
            trimmed = trim_event(event, strip_last_applied=strip_last_applied)
            if isinstance(trimmed, Restarted):
                _log.info("watch_event", event_type=trimmed.type.value, resource=resource, count=len(trimmed.objects))
            else:
                _log.debug("watch_event", event_type=trimmed.type.value, resource=resource)
            yield trimmed
