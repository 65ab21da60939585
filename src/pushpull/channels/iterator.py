"""Consumer-facing iterator and producer task management."""

from __future__ import annotations

import asyncio
import weakref
from collections.abc import AsyncIterator, Awaitable, Callable
from types import TracebackType
from typing import Any

import anyio
from anyio.abc import TaskGroup

from pushpull._logging import get_logger
from pushpull.channels.controller import Controller
from pushpull.channels.core import ChannelCore
from pushpull.channels.requests import PullRequest
from pushpull.errors import ProducerContractViolation
from pushpull.types import ChannelState, ChannelStats, IteratorResult

__all__ = ['ChannelIterator', 'ProducerRoutine']

type ProducerRoutine[T, R, I] = Callable[[Controller[T, R, I]], Awaitable[None]]

_UNSET: Any = object()

# Detached producer tasks, strongly referenced until they finish.
_background_tasks: set[asyncio.Task[None]] = set()


class _Producer[T, R, I]:
    """Owns the core and runs the routine; never refers back to the iterator.

    The running producer task keeps this object alive, so the iterator
    itself stays collectable while the producer is suspended in ``send``.
    """

    __slots__ = ('controller', 'core', 'log', 'routine', 'task_group', 'violation')

    def __init__(self, routine: ProducerRoutine[T, R, I], name: str, task_group: TaskGroup | None) -> None:
        self.routine = routine
        self.task_group = task_group
        self.core = ChannelCore(name, self.launch)
        self.controller: Controller[T, R, I] = Controller(self.core)
        self.log = get_logger('pushpull.channel').bind(channel=name)
        self.violation: ProducerContractViolation | None = None

    def launch(self) -> None:
        name = f'pushpull-producer:{self.core.name}'
        if self.task_group is not None:
            self.task_group.start_soon(self.run, name=name)
            return
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            msg = (
                f'channel {self.core.name!r}: a detached producer needs a running asyncio loop; '
                "pass task_group= or use 'async with channel(...)' on other backends"
            )
            raise RuntimeError(msg) from None
        task = loop.create_task(self.run(), name=name)
        _background_tasks.add(task)
        task.add_done_callback(_reap)

    async def run(self) -> None:
        try:
            await self.routine(self.controller)
        except Exception as exc:
            self.violation = ProducerContractViolation(self.core.name, type(exc).__name__, str(exc))
            self.log.error('producer_contract_violation', error_type=type(exc).__name__, exc_info=exc)
            raise
        if not self.core.terminal:
            self.log.debug('producer_returned_without_finishing')


def _reap(task: asyncio.Task[None]) -> None:
    _background_tasks.discard(task)
    if not task.cancelled():
        # Contract violations were logged by _Producer.run; mark them retrieved.
        task.exception()


class ChannelIterator[T, R, I]:
    """Pull side of a channel.

    Offers the explicit request interface (``next``, ``close``, ``abort``)
    returning IteratorResult, and the Python async-iterator protocol on top
    of it. The producer routine is launched lazily by the first ``next``.

    Where the producer runs:
        - in ``task_group`` if one was passed to ``channel()``;
        - in a task group owned by the ``async with`` block, if used;
        - otherwise in a detached asyncio task.

    Exiting an ``async with`` block closes the channel. A bare ``break`` out
    of ``async for`` does not; the channel is then closed when the iterator
    is garbage collected, which releases a producer suspended in ``send``.

    Attributes:
        violation: Set when the producer routine raised without calling fail().
    """

    __slots__ = (
        '__weakref__',
        '_core',
        '_owned_task_group',
        '_producer',
        '_return_value',
        '_task_group',
    )

    def __init__(
        self,
        routine: ProducerRoutine[T, R, I],
        name: str,
        task_group: TaskGroup | None = None,
    ) -> None:
        self._task_group = task_group
        self._owned_task_group: TaskGroup | None = None
        self._producer: _Producer[T, R, I] = _Producer(routine, name, task_group)
        self._core = self._producer.core
        self._return_value: Any = _UNSET
        finalizer = weakref.finalize(self, self._core.shutdown)
        finalizer.atexit = False

    @property
    def name(self) -> str:
        return self._core.name

    @property
    def state(self) -> ChannelState:
        return self._core.state

    @property
    def violation(self) -> ProducerContractViolation | None:
        return self._producer.violation

    @property
    def return_value(self) -> R | None:
        """Final value seen by ``async for`` iteration (None until it stops)."""
        return None if self._return_value is _UNSET else self._return_value

    def stats(self) -> ChannelStats:
        return self._core.stats()

    # --- explicit request interface ---

    async def next(self, input: I | None = None) -> IteratorResult[T | R]:  # noqa: A002
        """Request the next value; ``input`` resumes the producer's pending ``send``.

        If this call is cancelled after a value was already handed to it, that
        value is lost (logged as ``delivered_to_cancelled_pull``); the next
        call receives the following value.
        """
        return await self._core.pull(PullRequest.next(input))

    async def close(self, value: R | None = None) -> IteratorResult[Any]:
        """Terminate the channel from the consumer side.

        Always resolves ``IteratorResult(done=True)``; ``value`` is not
        delivered anywhere. Idempotent.
        """
        return await self._core.pull(PullRequest.close(value))

    async def abort(self, error: BaseException) -> IteratorResult[Any]:
        """Terminate the channel and raise ``error`` out of this call.

        On an already-terminal channel this is a no-op resolving the
        done-signal instead of raising.
        """
        return await self._core.pull(PullRequest.abort(error))

    # --- async iterator protocol ---

    def __aiter__(self) -> ChannelIterator[T, R, I]:
        return self

    async def __anext__(self) -> T:
        return await self.asend(None)

    async def asend(self, value: I | None) -> T:
        """Like ``next`` but raising StopAsyncIteration on the done-signal."""
        result = await self.next(value)
        if result.done:
            if self._return_value is _UNSET:
                self._return_value = result.value
            raise StopAsyncIteration
        return result.value  # type: ignore[return-value]

    async def athrow(self, error: BaseException) -> T:
        """Like ``abort`` but raising StopAsyncIteration when it was a no-op."""
        await self.abort(error)
        raise StopAsyncIteration

    async def aclose(self) -> None:
        await self.close()

    async def with_result(self) -> AsyncIterator[T | R | None]:
        """Yield every value, then the final value passed to ``finish``.

        Closes the channel if the caller stops iterating early.

        Example:
            ```python
            async with contextlib.aclosing(it.with_result()) as values:
                async for x in values:
                    ...
            ```
        """
        try:
            result = await self.next()
            while not result.done:
                yield result.value
                result = await self.next()
            yield result.value
        finally:
            await self.close()

    # --- structured usage ---

    async def __aenter__(self) -> ChannelIterator[T, R, I]:
        if self._task_group is None:
            self._owned_task_group = anyio.create_task_group()
            await self._owned_task_group.__aenter__()
            self._producer.task_group = self._owned_task_group
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> bool | None:
        self._core.shutdown()
        if self._owned_task_group is None:
            return None
        task_group, self._owned_task_group = self._owned_task_group, None
        self._producer.task_group = self._task_group
        if exc_val is not None and not isinstance(exc_val, anyio.get_cancelled_exc_class()):
            # The consumer's own error propagates unwrapped; shutdown() already released the producer.
            exc_type = exc_val = exc_tb = None
        return await task_group.__aexit__(exc_type, exc_val, exc_tb)
