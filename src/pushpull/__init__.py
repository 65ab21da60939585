"""pushpull: bidirectional coroutine channels on anyio.

Flat imports (preferred):
    from pushpull import channel, Controller, IteratorResult

Submodule imports:
    from pushpull.channels import ChannelCore, PushRequest, PullRequest
    from pushpull.errors import ProducerFaultError
"""

from pushpull._config import RuntimeConfig, get_config, init, reset_config
from pushpull._logging import configure_logging, get_logger
from pushpull.channels import ChannelIterator, Controller, ProducerRoutine, channel
from pushpull.errors import (
    ProducerContractViolation,
    ProducerContractViolationError,
    ProducerFault,
    ProducerFaultError,
)
from pushpull.types import ChannelState, ChannelStats, IteratorResult, TerminationCause

__all__ = [
    'ChannelIterator',
    'ChannelState',
    'ChannelStats',
    'Controller',
    'IteratorResult',
    'ProducerContractViolation',
    'ProducerContractViolationError',
    'ProducerFault',
    'ProducerFaultError',
    'ProducerRoutine',
    'RuntimeConfig',
    'TerminationCause',
    'channel',
    'configure_logging',
    'get_config',
    'get_logger',
    'init',
    'reset_config',
]
