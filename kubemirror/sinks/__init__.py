"""Output sinks for observed events.

Exports:
    EventSink   -- Abstract base for every sink.
    MultiSink   -- Forwards each record to several sinks.
    ConsoleSink -- JSON lines on stdout.
    LogSink     -- structlog records.
    WebhookSink -- JSON POST to an HTTP endpoint.
    build_sink  -- Factory used by the application bootstrap.
"""

from __future__ import annotations

import structlog

from kubemirror.models.config import SinkConfig
from kubemirror.sinks.base import EventSink, MultiSink
from kubemirror.sinks.console import ConsoleSink, LogSink
from kubemirror.sinks.webhook import WebhookSink

_log = structlog.get_logger(component="sinks")

__all__ = [
    "ConsoleSink",
    "EventSink",
    "LogSink",
    "MultiSink",
    "OUTPUT_CHOICES",
    "WebhookSink",
    "build_sink",
]

OUTPUT_CHOICES = ("console", "log", "none")


def build_sink(output: str, config: SinkConfig, show_objects: bool = False) -> MultiSink:
    """Build the sink chain for the ``--output`` choice plus configured extras.

    A webhook is added when ``KUBEMIRROR_WEBHOOK_URL`` is set.
    """
    sinks: list[EventSink] = []

    if output == "console":
        sinks.append(ConsoleSink(show_objects=show_objects))
    elif output == "log":
        sinks.append(LogSink())
    elif output != "none":
        raise ValueError(f"unknown output {output!r}; expected one of {OUTPUT_CHOICES}")

    if config.webhook_url:
        sinks.append(WebhookSink(url=config.webhook_url))
        _log.info("webhook_sink_enabled")

    if not sinks:
        _log.info("no_output_sinks_configured")

    return MultiSink(sinks)
