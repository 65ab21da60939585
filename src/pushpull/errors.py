"""Channel error types: dual struct+exception for value-based and raise-based code.

A channel has exactly one error kind of its own: the producer signaled
failure. Everything else that looks like a failure (operating on a channel
that already terminated) is a no-op, not an error.
"""

from __future__ import annotations

from typing import Any

import msgspec

__all__ = [
    'ProducerContractViolation',
    'ProducerContractViolationError',
    'ProducerFault',
    'ProducerFaultError',
    'as_exception',
]


class ProducerFault(msgspec.Struct, frozen=True):
    """Producer failed with a non-exception value - struct variant."""

    reason: Any = None

    def to_exception(self) -> ProducerFaultError:
        """Convert to exception for raise-based code."""
        return ProducerFaultError(self.reason)


class ProducerFaultError(Exception):
    """Producer failed with a non-exception value - exception variant.

    Raised at the consumer's call site when the producer calls
    ``fail()`` with something that is not an exception instance.
    """

    def __init__(self, reason: Any = None) -> None:
        self.reason = reason
        super().__init__('Producer failed' if reason is None else f'Producer failed: {reason!r}')

    def to_struct(self) -> ProducerFault:
        """Convert to struct for value-based code."""
        return ProducerFault(self.reason)


class ProducerContractViolation(msgspec.Struct, frozen=True, gc=False):
    """Producer routine raised without calling fail() - struct variant."""

    channel: str
    error_type: str
    message: str

    def to_exception(self) -> ProducerContractViolationError:
        """Convert to exception for raise-based code."""
        return ProducerContractViolationError(self.channel, self.error_type, self.message)


class ProducerContractViolationError(Exception):
    """Producer routine raised without calling fail() - exception variant."""

    def __init__(self, channel: str, error_type: str, message: str) -> None:
        self.channel = channel
        self.error_type = error_type
        self.message = message
        super().__init__(f"Producer of channel '{channel}' raised {error_type} without calling fail(): {message}")

    def to_struct(self) -> ProducerContractViolation:
        """Convert to struct for value-based code."""
        return ProducerContractViolation(self.channel, self.error_type, self.message)


def as_exception(error: Any) -> BaseException:
    """Return ``error`` unchanged if it is an exception, otherwise wrap it in ProducerFaultError."""
    if isinstance(error, BaseException):
        return error
    if isinstance(error, ProducerFault):
        return error.to_exception()
    return ProducerFaultError(error)
