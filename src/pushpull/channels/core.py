"""Channel core: FIFO pairing of pull requests with push requests.

The core owns the only shared mutable state of a channel: two FIFO queues,
the in-flight push and the terminal flag. Every mutation happens in
synchronous methods (``_pump()`` and its callers) with no await inside,
so each runs atomically under cooperative scheduling. A request whose
waiter is cancelled before it was resolved is withdrawn from its queue.

Pairing follows generator semantics. The Nth pull receives the Nth push.
A delivered value leaves its push *in flight*: the producer's ``send``
resumes only when the consumer issues its next request, with that request's
input (``next``) or with the done-signal (``close``/``abort``).
"""

from __future__ import annotations

import contextlib
from collections import deque
from collections.abc import Callable
from datetime import UTC, datetime
from typing import Any

import anyio

from pushpull._config import get_config
from pushpull._logging import get_logger
from pushpull.channels.requests import PullKind, PullRequest, PushKind, PushRequest
from pushpull.types import ChannelState, ChannelStats, IteratorResult, TerminationCause

__all__ = ['ChannelCore']


class ChannelCore:
    """Matching algorithm and terminal-state tracking for one channel.

    Args:
        name: Channel name, bound into every log event.
        on_start: Called once, synchronously, when the first ``next`` pull
            moves the channel from NOT_STARTED to RUNNING.
    """

    __slots__ = (
        '_cause',
        '_created_at',
        '_delivered',
        '_in_flight',
        '_log',
        '_on_start',
        '_pulls',
        '_pushes',
        '_state',
        '_total_pulls',
        '_total_pushes',
        '_trace',
        'name',
    )

    def __init__(self, name: str, on_start: Callable[[], None]) -> None:
        self.name = name
        self._on_start = on_start
        self._pulls: deque[PullRequest] = deque()
        self._pushes: deque[PushRequest] = deque()
        self._in_flight: PushRequest | None = None
        self._state = ChannelState.NOT_STARTED
        self._cause: TerminationCause | None = None
        self._total_pushes = 0
        self._total_pulls = 0
        self._delivered = 0
        self._created_at = datetime.now(UTC)
        self._trace = get_config().trace_requests
        self._log = get_logger('pushpull.channel').bind(channel=name)

    @property
    def state(self) -> ChannelState:
        return self._state

    @property
    def cause(self) -> TerminationCause | None:
        return self._cause

    @property
    def terminal(self) -> bool:
        return self._state is ChannelState.TERMINAL

    def submit_push(self, req: PushRequest) -> PushRequest:
        """Queue a producer request, or resolve it at once if the channel is terminal."""
        self._total_pushes += 1
        if self._trace:
            self._log.debug('push_submitted', kind=req.kind.value, state=self._state.value)

        if self._state is ChannelState.TERMINAL:
            if req.kind is PushKind.VALUE:
                self._log.debug('late_push', cause=self._cause.value if self._cause else None)
            req.resolve(IteratorResult.finished())
            return req

        self._pushes.append(req)
        self._pump()
        return req

    def submit_pull(self, req: PullRequest) -> PullRequest:
        """Queue a consumer request, or resolve it at once if the channel is terminal.

        The first ``next`` pull ever submitted launches the producer. A
        ``close``/``abort`` that arrives before that terminates the channel
        without ever starting it.
        """
        self._total_pulls += 1
        if self._trace:
            if req.kind is PullKind.CLOSE:
                self._log.debug('pull_submitted', kind=req.kind.value, state=self._state.value, value=req.input)
            else:
                self._log.debug('pull_submitted', kind=req.kind.value, state=self._state.value)

        if self._state is ChannelState.TERMINAL:
            req.resolve(IteratorResult.finished())
            return req

        if self._state is ChannelState.NOT_STARTED and req.kind is PullKind.NEXT:
            # A launch failure leaves the channel untouched.
            self._on_start()
            self._state = ChannelState.RUNNING
            self._log.debug('channel_started')

        self._pulls.append(req)
        self._pump()
        return req

    async def push(self, req: PushRequest) -> IteratorResult[Any]:
        """Submit a producer request and suspend until it is resolved."""
        self.submit_push(req)
        return await self._wait(req)

    async def pull(self, req: PullRequest) -> IteratorResult[Any]:
        """Submit a consumer request and suspend until it is resolved."""
        self.submit_pull(req)
        return await self._wait(req)

    async def _wait(self, req: PushRequest | PullRequest) -> IteratorResult[Any]:
        try:
            return await req.wait()
        except anyio.get_cancelled_exc_class():
            self._withdraw(req)
            raise

    def _withdraw(self, req: PushRequest | PullRequest) -> None:
        """Drop a request whose waiter was cancelled before it was resolved.

        A pull that was already handed a value cannot give it back; the loss
        is logged instead.
        """
        if req.resolved:
            if isinstance(req, PullRequest) and req.delivered_value:
                self._log.warning('delivered_to_cancelled_pull', delivered=self._delivered)
            return
        if req is self._in_flight:
            self._in_flight = None
        queue: deque[Any] = self._pulls if isinstance(req, PullRequest) else self._pushes
        with contextlib.suppress(ValueError):
            queue.remove(req)
        self._log.debug('request_withdrawn', kind=req.kind.value)
        self._pump()

    def shutdown(self) -> None:
        """Close immediately, releasing queued pulls as well as pushes.

        Unlike a queued close request this never waits behind earlier pulls.
        """
        if self._state is not ChannelState.TERMINAL:
            self._terminate(TerminationCause.CLOSED)
        self._drain()

    def _pump(self) -> None:
        while self._pulls and self._state is not ChannelState.TERMINAL:
            pull = self._pulls[0]

            if pull.kind is not PullKind.NEXT:
                self._pulls.popleft()
                if pull.kind is PullKind.CLOSE:
                    self._terminate(TerminationCause.CLOSED)
                    pull.resolve(IteratorResult.finished())
                else:
                    self._terminate(TerminationCause.ABORTED)
                    pull.fault(pull.error)  # type: ignore[arg-type]
                break

            if self._in_flight is not None:
                self._in_flight.resolve(IteratorResult.of(pull.input))
                self._in_flight = None

            if not self._pushes:
                break

            self._pulls.popleft()
            push = self._pushes.popleft()
            if push.kind is PushKind.VALUE:
                self._delivered += 1
                self._in_flight = push
                pull.resolve(IteratorResult.of(push.payload))
            elif push.kind is PushKind.FINISH:
                self._terminate(TerminationCause.FINISHED)
                pull.resolve(IteratorResult(done=True, value=push.payload))
                push.resolve(IteratorResult.finished())
            else:
                self._terminate(TerminationCause.FAILED)
                pull.fault(push.error)  # type: ignore[arg-type]
                push.resolve(IteratorResult.finished())

        if self._state is ChannelState.TERMINAL:
            self._drain()

    def _terminate(self, cause: TerminationCause) -> None:
        self._state = ChannelState.TERMINAL
        self._cause = cause
        self._log.debug('channel_terminated', cause=cause.value, delivered=self._delivered)

    def _drain(self) -> None:
        """Release everything still waiting once the channel is terminal."""
        done = IteratorResult.finished()
        if self._in_flight is not None:
            self._in_flight.resolve(done)
            self._in_flight = None
        while self._pushes:
            self._pushes.popleft().resolve(done)
        while self._pulls:
            self._pulls.popleft().resolve(done)

    def stats(self) -> ChannelStats:
        """Snapshot of queue depths, counters and state."""
        return ChannelStats(
            name=self.name,
            state=self._state,
            pending_pulls=len(self._pulls),
            pending_pushes=len(self._pushes),
            in_flight=self._in_flight is not None,
            total_pushes=self._total_pushes,
            total_pulls=self._total_pulls,
            delivered=self._delivered,
            created_at=self._created_at,
            cause=self._cause,
        )
