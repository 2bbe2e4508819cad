"""Configuration loading from environment variables."""

from __future__ import annotations

import os

from kubemirror.errors import ConfigurationError
from kubemirror.models.config import (
    APIConfig,
    BackoffConfig,
    LogConfig,
    MirrorConfig,
    SinkConfig,
    WatchConfig,
)
from kubemirror.observability.logging import LOG_FORMATS


def _env(key: str, default: str = "") -> str:
    return os.environ.get(f"KUBEMIRROR_{key}", default)


def _env_bool(key: str, default: bool = False) -> bool:
    val = _env(key, str(default).lower())
    return val.lower() in ("true", "1", "yes")


def _env_int(key: str, default: int, min_val: int | None = None, max_val: int | None = None) -> int:
    raw = _env(key, str(default))
    try:
        val = int(raw)
    except ValueError as exc:
        raise ConfigurationError(f"KUBEMIRROR_{key} must be an integer, got {raw!r}") from exc
    if min_val is not None:
        val = max(val, min_val)
    if max_val is not None:
        val = min(val, max_val)
    return val


def _env_float(key: str, default: float, min_val: float = 0.0) -> float:
    raw = _env(key, str(default))
    try:
        val = float(raw)
    except ValueError as exc:
        raise ConfigurationError(f"KUBEMIRROR_{key} must be a number, got {raw!r}") from exc
    if val < min_val:
        raise ConfigurationError(f"KUBEMIRROR_{key} must be >= {min_val}, got {val}")
    return val


def _env_optional_int(key: str) -> int | None:
    raw = _env(key, "").strip()
    if not raw:
        return None
    return _env_int(key, 0, min_val=0)


def _validate_log_level(value: str) -> str:
    valid = {"debug", "info", "warning", "error"}
    if value.lower() not in valid:
        raise ConfigurationError(f"Invalid log level: {value}. Must be one of {sorted(valid)}")
    return value.lower()


def _validate_log_format(value: str) -> str:
    if value.lower() not in LOG_FORMATS:
        raise ConfigurationError(f"Invalid log format: {value}. Must be one of {list(LOG_FORMATS)}")
    return value.lower()


def _validate_backoff(cfg: BackoffConfig) -> BackoffConfig:
    if cfg.initial_delay <= 0:
        raise ConfigurationError("KUBEMIRROR_BACKOFF_INITIAL must be > 0")
    if cfg.multiplier < 1:
        raise ConfigurationError("KUBEMIRROR_BACKOFF_MULTIPLIER must be >= 1")
    if cfg.max_delay < cfg.initial_delay:
        raise ConfigurationError("KUBEMIRROR_BACKOFF_MAX must be >= KUBEMIRROR_BACKOFF_INITIAL")
    if cfg.jitter > cfg.multiplier - 1:
        raise ConfigurationError("KUBEMIRROR_BACKOFF_JITTER must be <= KUBEMIRROR_BACKOFF_MULTIPLIER - 1")
    return cfg


def load_config() -> MirrorConfig:
    """Load configuration from KUBEMIRROR_* environment variables.

    Raises:
        ConfigurationError: on any unparsable or out-of-range value.
    """
    return MirrorConfig(
        backoff=_validate_backoff(
            BackoffConfig(
                initial_delay=_env_float("BACKOFF_INITIAL", 0.8),
                multiplier=_env_float("BACKOFF_MULTIPLIER", 2.0),
                max_delay=_env_float("BACKOFF_MAX", 30.0),
                jitter=_env_float("BACKOFF_JITTER", 0.5),
                reset_after=_env_float("BACKOFF_RESET_AFTER", 120.0),
                max_retries=_env_optional_int("MAX_RETRIES"),
            )
        ),
        watch=WatchConfig(
            timeout_seconds=_env_int("WATCH_TIMEOUT", 290, min_val=1, max_val=3600),
            strip_last_applied=_env_bool("STRIP_LAST_APPLIED", False),
        ),
        sinks=SinkConfig(
            webhook_url=_env("WEBHOOK_URL", ""),
        ),
        api=APIConfig(
            enabled=_env_bool("API_ENABLED", False),
            port=_env_int("API_PORT", 8080, min_val=1024, max_val=65535),
        ),
        log=LogConfig(
            level=_validate_log_level(_env("LOG_LEVEL", "info")),
            format=_validate_log_format(_env("LOG_FORMAT", "json")),
        ),
    )
