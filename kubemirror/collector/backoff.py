"""Deterministic exponential backoff with upward-only jitter."""

from __future__ import annotations

import random

from kubemirror.models.config import BackoffConfig


class Backoff:
    """Produces the delay before each reconnect attempt.

    ``delay_n = min(max_delay, initial_delay * multiplier**n * (1 + jitter * u))``
    with ``u`` drawn from *rng* in ``[0, 1)``.  With ``jitter <= multiplier - 1``
    the sequence never decreases until it is capped, and a seeded *rng*
    makes it reproducible.
    """

    def __init__(self, policy: BackoffConfig, rng: random.Random | None = None) -> None:
        if policy.jitter < 0 or policy.jitter > policy.multiplier - 1:
            raise ValueError("jitter must be within [0, multiplier - 1]")
        self._policy = policy
        self._rng = rng or random.Random()
        self._attempt = 0

    @property
    def attempt(self) -> int:
        return self._attempt

    def next_delay(self) -> float:
        policy = self._policy
        base = policy.initial_delay * policy.multiplier**self._attempt
        delay = min(policy.max_delay, base * (1 + policy.jitter * self._rng.random()))
        # Stop growing once capped so the exponent cannot overflow.
        if base < policy.max_delay:
            self._attempt += 1
        return delay

    def reset(self) -> None:
        self._attempt = 0
