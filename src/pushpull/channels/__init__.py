"""Bidirectional coroutine channels.

A producer routine pushes values through a Controller (``send``, ``finish``,
``fail``) and suspends after each push until the consumer resumes it. The
consumer pulls through a ChannelIterator (``next``, ``close``, ``abort``) or
plain ``async for``.

- Pairing is strictly FIFO: the Nth push meets the Nth pull.
- Termination happens once, from either side, and is permanent; every later
  request on either side resolves ``IteratorResult(done=True)`` at once.
- A producer fault surfaces as an exception at exactly one pull.

No timeouts are built in; use anyio.fail_after() around a request:
    ```python
    with anyio.fail_after(5):
        result = await it.next()
    ```
"""

from pushpull.channels.controller import Controller
from pushpull.channels.core import ChannelCore
from pushpull.channels.factory import channel
from pushpull.channels.iterator import ChannelIterator, ProducerRoutine
from pushpull.channels.requests import PullKind, PullRequest, PushKind, PushRequest

__all__ = [
    'ChannelCore',
    'ChannelIterator',
    'Controller',
    'ProducerRoutine',
    'PullKind',
    'PullRequest',
    'PushKind',
    'PushRequest',
    'channel',
]
