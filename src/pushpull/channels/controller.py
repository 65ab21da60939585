"""Producer-facing controller: send, finish, fail."""

from __future__ import annotations

from typing import Any

from pushpull.channels.core import ChannelCore
from pushpull.channels.requests import PushRequest
from pushpull.errors import as_exception
from pushpull.types import IteratorResult

__all__ = ['Controller']


class Controller[T, R, I]:
    """Handle passed to the producer routine.

    Every method is a suspension point: the producer task stays suspended
    until the consumer side has paired the request. Once the channel is
    terminal every call resolves at once with ``IteratorResult(done=True)``.

    Type Parameters:
        T: Values pushed with ``send``.
        R: Final value passed to ``finish``.
        I: Input the consumer forwards through ``next(input)``.

    Example:
        ```python
        async def produce(ctl: Controller[int, str, None]) -> None:
            for x in range(3):
                if (await ctl.send(x)).done:
                    return
            await ctl.finish('bye')
        ```
    """

    __slots__ = ('_core',)

    def __init__(self, core: ChannelCore) -> None:
        self._core = core

    @property
    def closed(self) -> bool:
        """True once the channel is terminal; further calls are no-ops."""
        return self._core.terminal

    async def send(self, value: T) -> IteratorResult[I]:
        """Push ``value`` and suspend until the consumer resumes this producer.

        Returns:
            ``IteratorResult(done=False, value=<input of the consumer's next pull>)``,
            or the done-signal if the consumer side terminated. Well-behaved
            producers stop sending after a done-signal; later sends are no-ops.
        """
        return await self._core.push(PushRequest.value(value))

    async def finish(self, value: R | None = None) -> IteratorResult[Any]:
        """Terminate the channel and deliver ``value`` as the final result.

        Exactly one pending or future pull observes ``done=True`` with
        ``value``. On an already-terminal channel ``value`` is discarded.
        """
        return await self._core.push(PushRequest.finish(value))

    async def fail(self, error: BaseException | Any) -> IteratorResult[Any]:
        """Terminate the channel and raise ``error`` at the matched pull.

        Non-exception values are wrapped in ProducerFaultError. On an
        already-terminal channel the error is discarded.
        """
        return await self._core.push(PushRequest.fail(as_exception(error)))
