"""Configuration data structures."""

from __future__ import annotations

from dataclasses import dataclass, field


@dataclass
class BackoffConfig:
    """Reconnect backoff configuration."""

    initial_delay: float = 0.8
    multiplier: float = 2.0
    max_delay: float = 30.0
    jitter: float = 0.5
    reset_after: float = 120.0
    # None retries forever.
    max_retries: int | None = None


@dataclass
class WatchConfig:
    """Watch session configuration."""

    timeout_seconds: int = 290
    strip_last_applied: bool = False


@dataclass
class SinkConfig:
    """Output sink configuration."""

    webhook_url: str = ""


@dataclass
class APIConfig:
    """Read-only status API configuration."""

    enabled: bool = False
    port: int = 8080


@dataclass
class LogConfig:
    """Logging configuration."""

    level: str = "info"
    format: str = "json"


@dataclass
class MirrorConfig:
    """Top-level kubemirror configuration."""

    backoff: BackoffConfig = field(default_factory=BackoffConfig)
    watch: WatchConfig = field(default_factory=WatchConfig)
    sinks: SinkConfig = field(default_factory=SinkConfig)
    api: APIConfig = field(default_factory=APIConfig)
    log: LogConfig = field(default_factory=LogConfig)
