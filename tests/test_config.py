"""Tests for relay configuration loading."""

from __future__ import annotations

import os
from unittest.mock import patch

import pytest
from pydantic import ValidationError

from linerelay.config import RelayConfig, get_relay_config


@pytest.fixture(autouse=True)
def clear_config_cache():
    get_relay_config.cache_clear()
    yield
    get_relay_config.cache_clear()


class TestDefaults:
    """Default scenario values."""

    def test_defaults(self):
        with patch.dict(os.environ, {}, clear=True):
            config = RelayConfig(_env_file=None)

        assert config.line_length == 5
        assert config.start_offset == 1.0
        assert config.stop_deadline == 30.0
        assert config.value_range == (0, 100)
        assert config.hop_latency == 0.5
        assert config.tick_interval == 0.1
        assert config.seed is None


class TestEnvironment:
    """Loading from RELAY_* environment variables."""

    def test_reads_prefixed_variables(self):
        env = {"RELAY_LINE_LENGTH": "7", "RELAY_SEED": "42", "RELAY_STOP_DEADLINE": "12.5"}
        with patch.dict(os.environ, env, clear=True):
            config = RelayConfig(_env_file=None)

        assert config.line_length == 7
        assert config.seed == 42
        assert config.stop_deadline == 12.5

    def test_keyword_arguments_win_over_environment(self):
        with patch.dict(os.environ, {"RELAY_LINE_LENGTH": "7"}, clear=True):
            config = RelayConfig(_env_file=None, line_length=3)

        assert config.line_length == 3

    def test_get_relay_config_is_cached(self):
        with patch.dict(os.environ, {"RELAY_SEED": "5"}, clear=True):
            first = get_relay_config()
            second = get_relay_config()

        assert first is second
        assert first.seed == 5


class TestValidation:
    """Configuration errors are caught before a run starts."""

    def test_line_of_one_is_rejected(self):
        with pytest.raises(ValidationError):
            RelayConfig(line_length=1)

    def test_deadline_must_follow_start(self):
        with pytest.raises(ValidationError, match="stop_deadline"):
            RelayConfig(start_offset=10.0, stop_deadline=10.0)

    def test_negative_start_is_rejected(self):
        with pytest.raises(ValidationError):
            RelayConfig(start_offset=-1.0)

    def test_inverted_random_range_is_rejected(self):
        with pytest.raises(ValidationError, match="random_min"):
            RelayConfig(random_min=50, random_max=10)

    def test_random_range_must_fit_wire_format(self):
        with pytest.raises(ValidationError):
            RelayConfig(random_max=2**31)

    def test_tick_must_not_exceed_hop_latency(self):
        with pytest.raises(ValidationError, match="tick_interval"):
            RelayConfig(tick_interval=1.0, hop_latency=0.5)

    def test_repr_lists_scenario(self):
        text = repr(RelayConfig(seed=3))

        assert "line_length=5" in text
        assert "value_range=[0, 100]" in text
        assert "seed=3" in text
