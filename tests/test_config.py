"""Tests for runtime configuration and initialization."""

from __future__ import annotations

import os
from unittest.mock import patch

import pytest
from pushpull import RuntimeConfig, get_config, init, reset_config
from pushpull._config import _detect_json_logs, _detect_log_level, _detect_trace_requests


class TestRuntimeConfig:
    """Tests for the RuntimeConfig dataclass."""

    def test_default_values(self) -> None:
        config = RuntimeConfig()
        assert config.log_level is None
        assert config.json_logs is True
        assert config.trace_requests is False

    def test_config_is_frozen(self) -> None:
        config = RuntimeConfig()
        with pytest.raises(AttributeError):
            config.trace_requests = True  # type: ignore[misc]


class TestDetectFromEnvironment:
    """Tests for environment-driven defaults."""

    def test_log_level_unset(self) -> None:
        assert _detect_log_level() is None

    def test_log_level_case_insensitive(self) -> None:
        with patch.dict(os.environ, {'PUSHPULL_LOG_LEVEL': 'debug'}):
            assert _detect_log_level() == 'DEBUG'

    def test_log_level_unknown_is_ignored(self) -> None:
        with patch.dict(os.environ, {'PUSHPULL_LOG_LEVEL': 'chatty'}):
            assert _detect_log_level() is None

    def test_log_format_console(self) -> None:
        with patch.dict(os.environ, {'PUSHPULL_LOG_FORMAT': 'console'}):
            assert _detect_json_logs() is False

    def test_log_format_defaults_to_json(self) -> None:
        assert _detect_json_logs() is True
        with patch.dict(os.environ, {'PUSHPULL_LOG_FORMAT': 'xml'}):
            assert _detect_json_logs() is True

    @pytest.mark.parametrize('value', ['1', 'true', 'YES', 'on'])
    def test_trace_truthy(self, value: str) -> None:
        with patch.dict(os.environ, {'PUSHPULL_TRACE': value}):
            assert _detect_trace_requests() is True

    @pytest.mark.parametrize('value', ['', '0', 'false', 'nope'])
    def test_trace_falsy(self, value: str) -> None:
        with patch.dict(os.environ, {'PUSHPULL_TRACE': value}):
            assert _detect_trace_requests() is False


class TestInit:
    """Tests for init() and get_config()."""

    def test_init_explicit_values(self) -> None:
        config = init(log_level='warning', json_logs=False, trace_requests=True)
        assert config == RuntimeConfig(log_level='WARNING', json_logs=False, trace_requests=True)
        assert get_config() is config

    def test_explicit_values_override_environment(self) -> None:
        with patch.dict(os.environ, {'PUSHPULL_TRACE': '1'}):
            config = init(trace_requests=False)
        assert config.trace_requests is False

    def test_get_config_reads_environment_on_first_use(self) -> None:
        with patch.dict(os.environ, {'PUSHPULL_TRACE': 'true'}):
            config = get_config()
        assert config.trace_requests is True

    def test_get_config_is_stable(self) -> None:
        assert get_config() is get_config()

    def test_reset_config(self) -> None:
        first = init(trace_requests=True)
        reset_config()
        second = get_config()
        assert second is not first
        assert second.trace_requests is False

    def test_init_with_level_configures_logging(self) -> None:
        with patch('pushpull._config.configure_logging') as configure:
            init(log_level='INFO', json_logs=False)
        configure.assert_called_once_with('INFO', json_output=False)

    def test_init_without_level_leaves_logging_alone(self) -> None:
        with patch('pushpull._config.configure_logging') as configure:
            init()
        configure.assert_not_called()
