"""Shared helpers for kubemirror tests.

Objects are plain dictionaries shaped like API server JSON so every stage
of the pipeline can be exercised without a cluster.
"""

from __future__ import annotations

from collections.abc import AsyncGenerator, Iterable
from typing import Any

from kubemirror.models.events import ObservedEvent, WatchEvent
from kubemirror.sinks.base import EventSink


def make_object(
    name: str,
    namespace: str | None = "default",
    rv: str = "1",
    spec: dict[str, Any] | None = None,
    managed_fields: bool = True,
) -> dict[str, Any]:
    """Return a minimal object as served by the API, with managedFields."""
    metadata: dict[str, Any] = {"name": name, "resourceVersion": rv, "uid": f"uid-{name}"}
    if namespace is not None:
        metadata["namespace"] = namespace
    if managed_fields:
        metadata["managedFields"] = [
            {"manager": "kubectl", "operation": "Apply", "fieldsType": "FieldsV1", "fieldsV1": {"f:spec": {}}},
        ]
    return {
        "apiVersion": "example.com/v1",
        "kind": "Widget",
        "metadata": metadata,
        "spec": spec or {"size": name},
        "status": {"phase": "Ready"},
    }


async def event_stream(events: Iterable[WatchEvent]) -> AsyncGenerator[WatchEvent, None]:
    for event in events:
        yield event


class RecordingSink(EventSink):
    """Sink that keeps every record for assertions."""

    def __init__(self) -> None:
        self.records: list[ObservedEvent] = []
        self.closed = False

    @property
    def sink_name(self) -> str:
        return "recording"

    async def emit(self, record: ObservedEvent) -> None:
        self.records.append(record)

    async def close(self) -> None:
        self.closed = True
