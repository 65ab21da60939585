"""Smoke tests to verify package structure and imports work."""


def test_import_flat_api():
    """Test that the public API can be imported from the root."""
    from pushpull import ChannelIterator, Controller, IteratorResult, channel

    assert channel is not None
    assert Controller is not None
    assert ChannelIterator is not None
    assert IteratorResult is not None


def test_import_channels_submodule():
    """Test that the channel building blocks are importable."""
    from pushpull.channels import ChannelCore, PullKind, PullRequest, PushKind, PushRequest

    assert ChannelCore is not None
    assert {k.value for k in PushKind} == {'value', 'finish', 'fail'}
    assert {k.value for k in PullKind} == {'next', 'close', 'abort'}
    assert PushRequest is not None
    assert PullRequest is not None


def test_import_errors():
    """Test that error types are importable."""
    from pushpull.errors import ProducerFault, ProducerFaultError

    assert issubclass(ProducerFaultError, Exception)
    assert ProducerFault().to_exception().reason is None
