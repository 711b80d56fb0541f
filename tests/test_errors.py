"""Tests for agentconf.utils.errors module."""

from pathlib import Path

import pytest

from agentconf.utils.errors import (
    AgentConfError,
    ConfigValidationError,
    ExitCode,
    ReadFailed,
    RestoreFailed,
    WriteFailed,
)


class TestExitCode:
    def test_values_are_stable(self):
        assert ExitCode.SUCCESS == 0
        assert ExitCode.GENERAL_ERROR == 1
        assert ExitCode.INVALID_SETTINGS == 2
        assert ExitCode.READ_FAILED == 3
        assert ExitCode.WRITE_FAILED == 4
        assert ExitCode.RESTORE_FAILED == 5
        assert ExitCode.PROBE_FAILED == 6


class TestAgentConfError:
    def test_default_exit_code(self):
        assert AgentConfError("boom").exit_code == ExitCode.GENERAL_ERROR

    def test_explicit_exit_code_wins(self):
        error = ConfigValidationError("bad", exit_code=ExitCode.GENERAL_ERROR)

        assert error.exit_code == ExitCode.GENERAL_ERROR

    @pytest.mark.parametrize(
        "error_class,exit_code",
        [
            (ConfigValidationError, ExitCode.INVALID_SETTINGS),
            (ReadFailed, ExitCode.READ_FAILED),
            (WriteFailed, ExitCode.WRITE_FAILED),
            (RestoreFailed, ExitCode.RESTORE_FAILED),
        ],
    )
    def test_subclass_exit_codes(self, error_class, exit_code):
        error = error_class("message")

        assert isinstance(error, AgentConfError)
        assert error.exit_code == exit_code
        assert str(error) == "message"

    def test_path_errors_carry_path(self):
        error = WriteFailed("disk full", path=Path("/tmp/x"))

        assert error.path == Path("/tmp/x")
        assert ReadFailed("no").path is None
