"""Result, state and statistics types shared by every channel component."""

from __future__ import annotations

from datetime import datetime
from enum import Enum
from typing import Any

import msgspec

__all__ = [
    'ChannelState',
    'ChannelStats',
    'IteratorResult',
    'TerminationCause',
]


class ChannelState(Enum):
    """Lifecycle of a channel. TERMINAL is entered once and never left."""

    NOT_STARTED = 'not_started'
    RUNNING = 'running'
    TERMINAL = 'terminal'


class TerminationCause(Enum):
    """Which side, and how, moved the channel to TERMINAL."""

    FINISHED = 'finished'
    FAILED = 'failed'
    CLOSED = 'closed'
    ABORTED = 'aborted'


class IteratorResult[T](msgspec.Struct, frozen=True):
    """Outcome of a single push or pull: ``done`` plus an optional value.

    ``done=True`` is the done-signal: the channel reached its terminal state
    at or before this request.
    """

    done: bool
    value: T | None = None

    @classmethod
    def finished(cls) -> IteratorResult[Any]:
        """The done-signal with no value."""
        return _FINISHED

    @classmethod
    def of(cls, value: T) -> IteratorResult[T]:
        """A non-terminal result carrying ``value``."""
        return cls(done=False, value=value)


_FINISHED: IteratorResult[Any] = IteratorResult(done=True)


class ChannelStats(msgspec.Struct, frozen=True, gc=False):
    """Statistics snapshot for a channel."""

    name: str
    state: ChannelState
    pending_pulls: int
    pending_pushes: int
    in_flight: bool
    total_pushes: int
    total_pulls: int
    delivered: int
    created_at: datetime
    cause: TerminationCause | None = None
