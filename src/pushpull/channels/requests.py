"""Push and pull requests: queued intents awaiting FIFO pairing.

Each request is a resumable continuation. The side that created it awaits
``wait()``; the channel core resolves it exactly once, either with an
IteratorResult or with a fault that is raised at the awaiting call site.
"""

from __future__ import annotations

from enum import Enum
from typing import Any

import aiologic

from pushpull.types import IteratorResult

__all__ = ['PullKind', 'PullRequest', 'PushKind', 'PushRequest']


class PushKind(Enum):
    """Producer-side request variants."""

    VALUE = 'value'
    FINISH = 'finish'
    FAIL = 'fail'


class PullKind(Enum):
    """Consumer-side request variants."""

    NEXT = 'next'
    CLOSE = 'close'
    ABORT = 'abort'


class _Request:
    """Single-assignment result slot backed by an aiologic.Event."""

    __slots__ = ('_event', '_exception', '_resolved', '_result')

    def __init__(self) -> None:
        self._event: aiologic.Event = aiologic.Event()
        self._result: IteratorResult[Any] | None = None
        self._exception: BaseException | None = None
        self._resolved = False

    @property
    def resolved(self) -> bool:
        return self._resolved

    @property
    def delivered_value(self) -> bool:
        """True once resolved with a value that is not the done-signal."""
        return self._result is not None and not self._result.done

    def resolve(self, result: IteratorResult[Any]) -> None:
        """Complete the request with ``result``."""
        if self._resolved:
            msg = f'{type(self).__name__} already resolved'
            raise RuntimeError(msg)
        self._result = result
        self._resolved = True
        self._event.set()

    def fault(self, exc: BaseException) -> None:
        """Complete the request so that ``wait()`` raises ``exc``."""
        if self._resolved:
            msg = f'{type(self).__name__} already resolved'
            raise RuntimeError(msg)
        self._exception = exc
        self._resolved = True
        self._event.set()

    async def wait(self) -> IteratorResult[Any]:
        """Suspend until resolved, then return the result or raise the fault."""
        if not self._resolved:
            await self._event
        if self._exception is not None:
            raise self._exception
        return self._result  # type: ignore[return-value]


class PushRequest(_Request):
    """Value(payload) | Finish(payload) | Fail(error), created by the controller."""

    __slots__ = ('error', 'kind', 'payload')

    def __init__(self, kind: PushKind, payload: Any = None, error: BaseException | None = None) -> None:
        super().__init__()
        self.kind = kind
        self.payload = payload
        self.error = error

    @classmethod
    def value(cls, payload: Any) -> PushRequest:
        return cls(PushKind.VALUE, payload)

    @classmethod
    def finish(cls, payload: Any) -> PushRequest:
        return cls(PushKind.FINISH, payload)

    @classmethod
    def fail(cls, error: BaseException) -> PushRequest:
        return cls(PushKind.FAIL, error=error)

    def __repr__(self) -> str:
        return f'PushRequest({self.kind.value}, resolved={self.resolved})'


class PullRequest(_Request):
    """Next(input) | Close(value) | Abort(error), created by the iterator."""

    __slots__ = ('error', 'input', 'kind')

    def __init__(self, kind: PullKind, input: Any = None, error: BaseException | None = None) -> None:  # noqa: A002
        super().__init__()
        self.kind = kind
        self.input = input
        self.error = error

    @classmethod
    def next(cls, input: Any = None) -> PullRequest:  # noqa: A002
        return cls(PullKind.NEXT, input)

    @classmethod
    def close(cls, value: Any = None) -> PullRequest:
        return cls(PullKind.CLOSE, value)

    @classmethod
    def abort(cls, error: BaseException) -> PullRequest:
        return cls(PullKind.ABORT, error=error)

    def __repr__(self) -> str:
        return f'PullRequest({self.kind.value}, resolved={self.resolved})'
