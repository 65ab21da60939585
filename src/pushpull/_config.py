"""Runtime configuration: RuntimeConfig and initialization."""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass

from pushpull._logging import configure_logging

__all__ = [
    'RuntimeConfig',
    'get_config',
    'init',
    'reset_config',
]

_TRUTHY = frozenset({'1', 'true', 'yes', 'on'})
_LOG_FORMATS = frozenset({'json', 'console'})


@dataclass(frozen=True)
class RuntimeConfig:
    """Configuration for pushpull channels.

    Attributes:
        log_level: Logging level (e.g., "DEBUG", "INFO"). None = leave logging alone.
        json_logs: Render logs as JSON (True) or colored console output (False).
        trace_requests: Log every push and pull request as it is submitted.
    """

    log_level: str | None = None
    json_logs: bool = True
    trace_requests: bool = False


# Global runtime configuration (set by init() or built from the environment on first use)
_config: RuntimeConfig | None = None


def _detect_log_level() -> str | None:
    """Read PUSHPULL_LOG_LEVEL, ignoring unknown level names."""
    level = os.environ.get('PUSHPULL_LOG_LEVEL', '').strip().upper()
    if not level:
        return None
    if not isinstance(logging.getLevelName(level), int):
        logging.warning("Unknown PUSHPULL_LOG_LEVEL value '%s', ignoring", level)
        return None
    return level


def _detect_json_logs() -> bool:
    """Read PUSHPULL_LOG_FORMAT ("json" or "console"), defaulting to JSON."""
    fmt = os.environ.get('PUSHPULL_LOG_FORMAT', '').strip().lower()
    if fmt and fmt not in _LOG_FORMATS:
        logging.warning("Unknown PUSHPULL_LOG_FORMAT value '%s', defaulting to json", fmt)
    return fmt != 'console'


def _detect_trace_requests() -> bool:
    """Read PUSHPULL_TRACE as a boolean flag."""
    return os.environ.get('PUSHPULL_TRACE', '').strip().lower() in _TRUTHY


def init(
    log_level: str | None = None,
    *,
    json_logs: bool | None = None,
    trace_requests: bool | None = None,
) -> RuntimeConfig:
    """Initialize pushpull with the given configuration.

    Arguments left as None fall back to the environment
    (PUSHPULL_LOG_LEVEL, PUSHPULL_LOG_FORMAT, PUSHPULL_TRACE).

    Args:
        log_level: Logging level ("DEBUG", "INFO", etc.). None = leave logging alone.
        json_logs: JSON (True) or console (False) log rendering.
        trace_requests: Log every submitted push and pull request.

    Returns:
        The RuntimeConfig that was set.

    Example:
        ```python
        from pushpull import init

        init(log_level='DEBUG', json_logs=False, trace_requests=True)
        ```
    """
    global _config  # noqa: PLW0603

    _config = RuntimeConfig(
        log_level=log_level.upper() if log_level is not None else _detect_log_level(),
        json_logs=json_logs if json_logs is not None else _detect_json_logs(),
        trace_requests=trace_requests if trace_requests is not None else _detect_trace_requests(),
    )

    if _config.log_level is not None:
        configure_logging(_config.log_level, json_output=_config.json_logs)

    return _config


def get_config() -> RuntimeConfig:
    """Get the current configuration, initializing it from the environment on first use."""
    if _config is None:
        return init()
    return _config


def reset_config() -> None:
    """Forget the current configuration; the next get_config() re-reads the environment."""
    global _config  # noqa: PLW0603
    _config = None
