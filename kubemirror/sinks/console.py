"""Console sinks: JSON lines on stdout or structured log records."""

from __future__ import annotations

import json

import click
import structlog

from kubemirror.models.events import ObservedEvent
from kubemirror.sinks.base import EventSink

_log = structlog.get_logger(component="sinks.console")


class ConsoleSink(EventSink):
    """Writes one JSON line per record to stdout.

    Args:
        show_objects: Also print every object the event touched.
    """

    def __init__(self, show_objects: bool = False) -> None:
        self._show_objects = show_objects

    @property
    def sink_name(self) -> str:
        return "console"

    async def emit(self, record: ObservedEvent) -> None:
        payload = record.to_dict()
        if self._show_objects:
            payload["objects"] = list(record.objects)
        click.echo(json.dumps(payload, default=str, sort_keys=True))


class LogSink(EventSink):
    """Emits each record as a structlog event."""

    @property
    def sink_name(self) -> str:
        return "log"

    async def emit(self, record: ObservedEvent) -> None:
        _log.info(
            "object_event",
            event_type=record.event_type.value,
            resource=record.resource,
            count=record.count,
            summary=record.summary(),
        )
