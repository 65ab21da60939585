"""Channel factory."""

from __future__ import annotations

import itertools

from anyio.abc import TaskGroup

from pushpull.channels.iterator import ChannelIterator, ProducerRoutine

__all__ = ['channel']

_ids = itertools.count(1)


def channel[T, R, I](
    routine: ProducerRoutine[T, R, I],
    *,
    task_group: TaskGroup | None = None,
    name: str | None = None,
) -> ChannelIterator[T, R, I]:
    """Create a bidirectional coroutine channel driven by ``routine``.

    ``routine`` receives a Controller and pushes values with ``send``,
    terminating with ``finish`` or ``fail``. It starts lazily, on the
    first value requested from the returned iterator, and never starts if
    nothing is requested.

    Args:
        routine: ``async def routine(controller) -> None``.
        task_group: anyio task group to run the producer in. Without one the
            producer runs in the task group of an ``async with`` block, or
            else in a detached asyncio task.
        name: Channel name used in logs and stats. Defaults to ``channel-<n>``.

    Returns:
        A fresh ChannelIterator; each call creates independent state.

    Example:
        ```python
        async def numbers(ctl):
            for x in (4, 5, 6, 7):
                if (await ctl.send(x)).done:
                    return
            await ctl.finish('x')

        async with channel(numbers) as it:
            async for x in it:
                print(x)
            print(it.return_value)  # 'x'
        ```
    """
    return ChannelIterator(routine, name or f'channel-{next(_ids)}', task_group)
