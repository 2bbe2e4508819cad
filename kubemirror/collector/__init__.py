"""Collector package for kubemirror.

Turns a possibly-interrupted Kubernetes watch into a logically infinite,
self-healing event sequence.

Submodules
----------
session   -- WatchSession: one list-then-watch connection.
backoff   -- Backoff: deterministic exponential delay schedule.
resilient -- resilient_watch: reconnect loop around successive sessions.
"""

from kubemirror.collector.backoff import Backoff
from kubemirror.collector.resilient import resilient_watch
from kubemirror.collector.session import WatchSession

__all__ = ["Backoff", "WatchSession", "resilient_watch"]
