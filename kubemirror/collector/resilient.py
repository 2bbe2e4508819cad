"""Reconnect-with-backoff wrapper turning sessions into an endless stream."""

from __future__ import annotations

import asyncio
import random
import time
from collections.abc import AsyncGenerator, Awaitable, Callable

from kubemirror.collector.backoff import Backoff
from kubemirror.errors import TransientStreamError
from kubemirror.models.config import BackoffConfig
from kubemirror.models.events import WatchEvent
from kubemirror.observability.logging import get_logger

_log = get_logger("collector.resilient")

SessionFactory = Callable[[], AsyncGenerator[WatchEvent, None]]


async def resilient_watch(
    session_factory: SessionFactory,
    policy: BackoffConfig,
    *,
    rng: random.Random | None = None,
    sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    clock: Callable[[], float] = time.monotonic,
) -> AsyncGenerator[WatchEvent, None]:
    """Yield events from successive sessions, reconnecting after each failure.

    Every session starts with a ``Restarted`` event, so consumers are
    reconciled to ground truth after each reconnect.  The backoff resets
    once a session stayed up for ``policy.reset_after`` seconds.  With
    ``policy.max_retries`` unset the wrapper retries forever; otherwise the
    last error is re-raised after that many consecutive failures.

    Cancellation at a network wait or during the backoff sleep closes the
    open session before propagating.
    """
    backoff = Backoff(policy, rng)
    failures = 0

    while True:
        started = clock()
        stream = session_factory()
        try:
            async for event in stream:
                yield event
            error: TransientStreamError = TransientStreamError("session ended without error")
        except TransientStreamError as exc:
            error = exc
        finally:
            await stream.aclose()

        if clock() - started >= policy.reset_after:
            backoff.reset()
            failures = 0
        failures += 1

        if policy.max_retries is not None and failures > policy.max_retries:
            _log.error("watch_retries_exhausted", failures=failures, error=str(error))
            raise error

        delay = backoff.next_delay()
        _log.warning(
            "watch_reconnecting",
            attempt=failures,
            delay_seconds=round(delay, 3),
            error=str(error),
            status=error.status,
        )
        await sleep(delay)
