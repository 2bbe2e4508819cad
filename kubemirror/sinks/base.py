"""Sink interface and fan-out.

EventSink -- ABC every output sink implements.
MultiSink -- forwards each record to several sinks in order.
"""

from __future__ import annotations

from abc import ABC, abstractmethod

import structlog

from kubemirror.models.events import ObservedEvent

_log = structlog.get_logger(component="sinks.base")


class EventSink(ABC):
    """Receives one record per event processed by the mirror.

    ``emit`` is awaited inline by the pipeline, so a slow sink slows the
    watch rather than queueing records.
    """

    @property
    @abstractmethod
    def sink_name(self) -> str:
        """Identifier used in logs."""

    @abstractmethod
    async def emit(self, record: ObservedEvent) -> None:
        """Deliver *record*."""

    async def close(self) -> None:  # noqa: B027
        """Release any held resources."""


class MultiSink(EventSink):
    """Fan-out to every registered sink; a failing sink never blocks the others."""

    def __init__(self, sinks: list[EventSink]) -> None:
        self._sinks = sinks

    @property
    def sink_name(self) -> str:
        return "multi"

    @property
    def sinks(self) -> list[EventSink]:
        return list(self._sinks)

    async def emit(self, record: ObservedEvent) -> None:
        for sink in self._sinks:
            try:
                await sink.emit(record)
            except Exception as exc:  # noqa: BLE001
                _log.error(
                    "sink_unexpected_error",
                    sink=sink.sink_name,
                    event_type=record.event_type.value,
                    error=str(exc),
                )

    async def close(self) -> None:
        for sink in self._sinks:
            await sink.close()
