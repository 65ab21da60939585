"""structlog setup for channel events.

Channel lifecycle events (``channel_started``, ``channel_terminated``,
``late_push``, ...) are emitted through structlog. ``configure_logging``
routes them and plain stdlib records through one ProcessorFormatter on
stderr. Until it is called, channel loggers sit on top of the stdlib
logger of the same name, so the host application's own logging setup
decides what is shown.
"""

from __future__ import annotations

import contextlib
import logging
import sys
from collections.abc import Callable
from typing import Any

import structlog

__all__ = [
    'LogHook',
    'add_log_hook',
    'clear_log_hooks',
    'configure_logging',
    'get_logger',
    'remove_log_hook',
]

type LogHook = Callable[[dict[str, Any]], None]

_DEFAULT_LOGGER = 'pushpull'

_hooks: list[LogHook] = []


def _run_hooks(logger: Any, method_name: str, event_dict: dict[str, Any]) -> dict[str, Any]:
    for hook in tuple(_hooks):
        with contextlib.suppress(Exception):
            hook(dict(event_dict))
    return event_dict


def _pre_chain() -> list[Any]:
    """Processors applied to structlog events and foreign stdlib records alike."""
    return [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.TimeStamper(fmt='iso'),
        structlog.stdlib.ExtraAdder(),
        _run_hooks,
    ]


def _bound_chain() -> list[Any]:
    return [
        *_pre_chain(),
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.StackInfoRenderer(),
        structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
    ]


def configure_logging(level: str = 'INFO', *, json_output: bool = True) -> None:
    """Install the shared pipeline on the root logger.

    Args:
        level: stdlib level name; unknown names fall back to INFO.
        json_output: JSON lines when True, otherwise the console renderer
            (colored only when stderr is a terminal).
    """
    structlog.configure(
        processors=_bound_chain(),
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=False,
    )

    renderer: Any = (
        structlog.processors.JSONRenderer() if json_output else structlog.dev.ConsoleRenderer(colors=sys.stderr.isatty())
    )
    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(
        structlog.stdlib.ProcessorFormatter(
            foreign_pre_chain=_pre_chain(),
            processors=[
                structlog.stdlib.ProcessorFormatter.remove_processors_meta,
                structlog.processors.format_exc_info,
                renderer,
            ],
        )
    )

    root = logging.getLogger()
    root.handlers.clear()
    root.addHandler(handler)
    root.setLevel(logging.getLevelNamesMapping().get(level.upper(), logging.INFO))


def get_logger(name: str | None = None) -> Any:
    """Return a structlog BoundLogger named ``name`` (default ``pushpull``)."""
    if structlog.is_configured():
        return structlog.get_logger(name or _DEFAULT_LOGGER)
    return structlog.wrap_logger(
        logging.getLogger(name or _DEFAULT_LOGGER),
        processors=_bound_chain(),
        wrapper_class=structlog.stdlib.BoundLogger,
    )


# --- hooks ---


def add_log_hook(hook: LogHook) -> None:
    """Call ``hook`` with a copy of every event dict, before rendering.

    Hooks see events regardless of the configured level. A hook that raises
    is skipped for that event.
    """
    _hooks.append(hook)


def remove_log_hook(hook: LogHook) -> None:
    with contextlib.suppress(ValueError):
        _hooks.remove(hook)


def clear_log_hooks() -> None:
    _hooks.clear()
