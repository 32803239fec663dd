"""Tests for the command-line runner."""

from __future__ import annotations

import os
from unittest.mock import patch

import pytest

from linerelay import __version__
from linerelay.cli import EXIT_CONFIG_ERROR, main, parse_args


class TestParseArgs:
    """Tests for parse_args()."""

    def test_unset_options_are_none(self):
        parsed = parse_args([])

        assert parsed.line_length is None
        assert parsed.seed is None
        assert parsed.log_format is None

    def test_parses_overrides(self):
        parsed = parse_args(["--line-length", "6", "--stop-deadline", "9.5", "--seed", "3"])

        assert parsed.line_length == 6
        assert parsed.stop_deadline == 9.5
        assert parsed.seed == 3

    def test_version(self, capsys):
        with pytest.raises(SystemExit) as exc_info:
            parse_args(["--version"])

        assert exc_info.value.code == 0
        assert __version__ in capsys.readouterr().out


class TestMain:
    """Tests for main()."""

    def test_runs_scenario_and_prints_summary(self, capsys):
        with patch.dict(os.environ, {}, clear=True):
            code = main(["--seed", "7", "--stop-deadline", "5", "--log-level", "WARNING"])

        out = capsys.readouterr().out
        assert code == 0
        assert "node 0 (origin): received=0 sent=1" in out
        assert "node 1 (endpoint_generator)" in out
        assert "node 4 (endpoint_generator)" in out

    def test_invalid_timing_exits_with_config_error(self, capsys):
        with patch.dict(os.environ, {}, clear=True):
            code = main(["--start-offset", "5", "--stop-deadline", "2", "--log-level", "ERROR"])

        assert code == EXIT_CONFIG_ERROR
        assert "Configuration error" in capsys.readouterr().err

    def test_invalid_line_length_exits_with_config_error(self):
        with patch.dict(os.environ, {}, clear=True):
            code = main(["--line-length", "1", "--log-level", "ERROR"])

        assert code == EXIT_CONFIG_ERROR
