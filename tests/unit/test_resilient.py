"""Unit tests for kubemirror.collector.backoff and kubemirror.collector.resilient.

Sessions are scripted async generators; sleep and clock are injected so the
reconnect schedule is observed without waiting.
"""

from __future__ import annotations

import asyncio
import random
from collections.abc import AsyncGenerator, Callable

import pytest

from kubemirror.collector.backoff import Backoff
from kubemirror.collector.resilient import resilient_watch
from kubemirror.errors import CheckpointExpiredError, TransientStreamError
from kubemirror.models.config import BackoffConfig
from kubemirror.models.events import Applied, Restarted, WatchEvent
from tests.helpers import make_object

# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


class _Stop(Exception):
    """Non-transient error used to end a test run."""


class _FakeClock:
    def __init__(self) -> None:
        self.now = 0.0

    def __call__(self) -> float:
        return self.now


class _SleepRecorder:
    def __init__(self, clock: _FakeClock | None = None) -> None:
        self.delays: list[float] = []
        self._clock = clock

    async def __call__(self, delay: float) -> None:
        self.delays.append(delay)
        if self._clock is not None:
            self._clock.now += delay


def _scripted(
    scripts: list[list[WatchEvent | BaseException | float]],
    clock: _FakeClock | None = None,
    closed: list[int] | None = None,
) -> Callable[[], AsyncGenerator[WatchEvent, None]]:
    """Session factory replaying one script per session.

    Script items are events to yield, exceptions to raise, or floats that
    advance the fake clock (time the session stayed connected).
    """
    remaining = iter(scripts)
    counter = iter(range(len(scripts)))

    def factory() -> AsyncGenerator[WatchEvent, None]:
        script = next(remaining)
        index = next(counter)

        async def session() -> AsyncGenerator[WatchEvent, None]:
            try:
                for item in script:
                    if isinstance(item, BaseException):
                        raise item
                    if isinstance(item, float):
                        assert clock is not None
                        clock.now += item
                        continue
                    yield item
            finally:
                if closed is not None:
                    closed.append(index)

        return session()

    return factory


def _failing_session(n: int) -> list[WatchEvent | BaseException | float]:
    return [Restarted((make_object(f"obj-{n}"),)), TransientStreamError(f"drop {n}", status=500)]


async def _drain(stream: AsyncGenerator[WatchEvent, None]) -> list[WatchEvent]:
    events: list[WatchEvent] = []
    with pytest.raises(_Stop):
        async for event in stream:
            events.append(event)
    return events


# ===========================================================================
# Backoff schedule
# ===========================================================================


class TestBackoff:
    def test_without_jitter_doubles_until_capped(self) -> None:
        backoff = Backoff(BackoffConfig(initial_delay=1.0, multiplier=2.0, max_delay=10.0, jitter=0.0))
        assert [backoff.next_delay() for _ in range(6)] == [1.0, 2.0, 4.0, 8.0, 10.0, 10.0]

    def test_jittered_schedule_is_non_decreasing_and_capped(self) -> None:
        policy = BackoffConfig(initial_delay=0.5, multiplier=2.0, max_delay=30.0, jitter=1.0)
        backoff = Backoff(policy, random.Random(1234))
        delays = [backoff.next_delay() for _ in range(20)]

        assert all(a <= b for a, b in zip(delays, delays[1:]))
        assert max(delays) == 30.0

    def test_same_seed_gives_same_schedule(self) -> None:
        policy = BackoffConfig()
        first = Backoff(policy, random.Random(7))
        second = Backoff(policy, random.Random(7))
        assert [first.next_delay() for _ in range(10)] == [second.next_delay() for _ in range(10)]

    def test_reset_returns_to_initial_delay(self) -> None:
        backoff = Backoff(BackoffConfig(initial_delay=1.0, jitter=0.0))
        for _ in range(4):
            backoff.next_delay()
        backoff.reset()
        assert backoff.attempt == 0
        assert backoff.next_delay() == 1.0

    def test_jitter_above_multiplier_headroom_is_rejected(self) -> None:
        with pytest.raises(ValueError):
            Backoff(BackoffConfig(multiplier=1.5, jitter=0.8))

    def test_many_attempts_do_not_overflow(self) -> None:
        backoff = Backoff(BackoffConfig(initial_delay=1.0, max_delay=60.0, jitter=0.0))
        for _ in range(5000):
            delay = backoff.next_delay()
        assert delay == 60.0


# ===========================================================================
# Reconnect loop
# ===========================================================================


class TestResilientWatch:
    async def test_every_reconnect_starts_with_restarted(self) -> None:
        """After each failure the next session's Restarted is the next event delivered."""
        scripts: list[list[WatchEvent | BaseException | float]] = [_failing_session(n) for n in range(4)]
        scripts.append([Restarted(()), _Stop()])
        sleep = _SleepRecorder()
        policy = BackoffConfig(initial_delay=1.0, jitter=0.0)

        events = await _drain(resilient_watch(_scripted(scripts), policy, sleep=sleep, clock=_FakeClock()))

        assert all(isinstance(e, Restarted) for e in events)
        assert len(events) == 5
        assert len(sleep.delays) == 4

    async def test_delays_non_decreasing_up_to_ceiling(self) -> None:
        failures = 8
        scripts: list[list[WatchEvent | BaseException | float]] = [_failing_session(n) for n in range(failures)]
        scripts.append([_Stop()])
        sleep = _SleepRecorder()
        policy = BackoffConfig(initial_delay=0.8, multiplier=2.0, max_delay=10.0, jitter=0.5)

        await _drain(
            resilient_watch(_scripted(scripts), policy, rng=random.Random(99), sleep=sleep, clock=_FakeClock())
        )

        assert len(sleep.delays) == failures
        assert all(a <= b for a, b in zip(sleep.delays, sleep.delays[1:]))
        assert all(d <= 10.0 for d in sleep.delays)
        assert sleep.delays[-1] == 10.0

    async def test_incremental_events_pass_through_in_order(self) -> None:
        a, b = make_object("a"), make_object("b")
        scripts: list[list[WatchEvent | BaseException | float]] = [
            [Restarted((a,)), Applied(b), CheckpointExpiredError()],
            [Restarted((a, b)), _Stop()],
        ]
        sleep = _SleepRecorder()

        events = await _drain(
            resilient_watch(_scripted(scripts), BackoffConfig(jitter=0.0), sleep=sleep, clock=_FakeClock())
        )

        assert [type(e) for e in events] == [Restarted, Applied, Restarted]
        assert sleep.delays == [0.8]

    async def test_healthy_session_resets_backoff(self) -> None:
        """A session that stayed up past reset_after brings the delay back to initial."""
        clock = _FakeClock()
        scripts: list[list[WatchEvent | BaseException | float]] = [
            _failing_session(0),
            _failing_session(1),
            _failing_session(2),
            [Restarted(()), 300.0, TransientStreamError("late drop")],
            [_Stop()],
        ]
        sleep = _SleepRecorder(clock)
        policy = BackoffConfig(initial_delay=1.0, multiplier=2.0, max_delay=30.0, jitter=0.0, reset_after=120.0)

        await _drain(resilient_watch(_scripted(scripts, clock=clock), policy, sleep=sleep, clock=clock))

        assert sleep.delays == [1.0, 2.0, 4.0, 1.0]

    async def test_unlimited_retries_by_default(self) -> None:
        scripts: list[list[WatchEvent | BaseException | float]] = [_failing_session(n) for n in range(50)]
        scripts.append([_Stop()])
        sleep = _SleepRecorder()

        await _drain(resilient_watch(_scripted(scripts), BackoffConfig(), sleep=sleep, clock=_FakeClock()))

        assert len(sleep.delays) == 50

    async def test_max_retries_reraises_last_error(self) -> None:
        scripts: list[list[WatchEvent | BaseException | float]] = [_failing_session(n) for n in range(3)]
        sleep = _SleepRecorder()
        policy = BackoffConfig(max_retries=2, jitter=0.0)

        with pytest.raises(TransientStreamError, match="drop 2"):
            async for _ in resilient_watch(_scripted(scripts), policy, sleep=sleep, clock=_FakeClock()):
                pass

        assert len(sleep.delays) == 2

    async def test_non_transient_error_propagates_and_closes_session(self) -> None:
        closed: list[int] = []
        scripts: list[list[WatchEvent | BaseException | float]] = [[Restarted(()), ValueError("bug")]]

        with pytest.raises(ValueError):
            async for _ in resilient_watch(_scripted(scripts, closed=closed), BackoffConfig(), clock=_FakeClock()):
                pass

        assert closed == [0]

    async def test_cancel_during_backoff_sleep(self) -> None:
        """Cancellation while waiting to reconnect ends the stream promptly."""
        closed: list[int] = []
        scripts: list[list[WatchEvent | BaseException | float]] = [_failing_session(0), [Restarted(())]]
        policy = BackoffConfig(initial_delay=3600.0, max_delay=3600.0, jitter=0.0)
        received: list[WatchEvent] = []

        async def consume() -> None:
            async for event in resilient_watch(_scripted(scripts, closed=closed), policy):
                received.append(event)

        task = asyncio.create_task(consume())
        while not closed:
            await asyncio.sleep(0)
        task.cancel()
        with pytest.raises(asyncio.CancelledError):
            await task

        assert len(received) == 1
        assert closed == [0]

    async def test_cancel_while_waiting_on_session_closes_it(self) -> None:
        """Cancellation at a network wait tears down the open session."""
        closed: list[int] = []
        gate = asyncio.Event()
        started = asyncio.Event()

        def factory() -> AsyncGenerator[WatchEvent, None]:
            async def session() -> AsyncGenerator[WatchEvent, None]:
                try:
                    yield Restarted(())
                    started.set()
                    await gate.wait()
                    yield Applied(make_object("never"))
                finally:
                    closed.append(0)

            return session()

        async def consume() -> None:
            async for _ in resilient_watch(factory, BackoffConfig()):
                pass

        task = asyncio.create_task(consume())
        await started.wait()
        task.cancel()
        with pytest.raises(asyncio.CancelledError):
            await task

        assert closed == [0]
