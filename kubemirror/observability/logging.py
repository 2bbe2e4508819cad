"""structlog setup shared by every kubemirror component.

Records go to stderr; stdout belongs to the console sink so observed events
can be piped without log noise.  Once the watch target is resolved the app
binds it into the context, so every later record names the mirrored resource.
"""

from __future__ import annotations

import logging
import sys

import structlog

LOG_FORMATS = ("json", "console")

# Libraries that log through the stdlib and are chatty at INFO.
_QUIET_LOGGERS = ("kubernetes_asyncio", "aiohttp.access", "uvicorn.error")


def setup_logging(level: str = "info", fmt: str = "json") -> None:
    """Configure structlog and route stdlib logging to stderr.

    Args:
        level: Minimum level for kubemirror records.
        fmt:   ``json`` for one JSON object per line, ``console`` for
               human-readable output while debugging.
    """
    log_level = getattr(logging, level.upper(), logging.INFO)

    renderer: structlog.types.Processor
    if fmt == "console":
        renderer = structlog.dev.ConsoleRenderer(colors=sys.stderr.isatty())
    else:
        renderer = structlog.processors.JSONRenderer()

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.processors.add_log_level,
            structlog.processors.StackInfoRenderer(),
            structlog.dev.set_exc_info,
            structlog.processors.TimeStamper(fmt="iso", utc=True, key="ts"),
            renderer,
        ],
        wrapper_class=structlog.make_filtering_bound_logger(log_level),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(file=sys.stderr),
        cache_logger_on_first_use=True,
    )

    logging.basicConfig(stream=sys.stderr, level=log_level, format="%(levelname)s %(name)s: %(message)s")
    for name in _QUIET_LOGGERS:
        logging.getLogger(name).setLevel(max(log_level, logging.WARNING))


def bind_watch_context(resource: str, target: str) -> None:
    """Attach the mirrored resource and scope to every subsequent record."""
    structlog.contextvars.bind_contextvars(resource=resource, target=target)


def get_logger(component: str) -> structlog.stdlib.BoundLogger:
    """Get a logger bound with a component name."""
    return structlog.get_logger(component=component)  # type: ignore[return-value]
