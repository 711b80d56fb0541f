"""Tests for agentconf.utils.logging module."""

import logging
from pathlib import Path
from unittest.mock import patch

import pytest

import agentconf.utils.logging as logging_module


@pytest.fixture
def fresh_logger():
    """Reset the cached logger before and after each test."""
    logging_module._logger = None
    yield
    logging_module._logger = None
    logger = logging.getLogger("agentconf")
    for handler in logger.handlers:
        handler.close()
    logger.handlers.clear()


class TestLogging:
    def test_disabled_uses_null_handler(self, fresh_logger):
        with patch.object(logging_module, "LOG_ENABLED", False):
            logger = logging_module.setup_logging()

        assert logger.name == "agentconf"
        assert any(isinstance(h, logging.NullHandler) for h in logger.handlers)

    def test_get_logger_returns_same_instance(self, fresh_logger):
        with patch.object(logging_module, "LOG_ENABLED", False):
            first = logging_module.get_logger()
            second = logging_module.get_logger()

        assert first is second

    def test_log_message_writes_file_when_enabled(self, fresh_logger, tmp_path):
        log_file = tmp_path / "logs" / "agentconf.log"
        with (
            patch.object(logging_module, "LOG_ENABLED", True),
            patch.object(logging_module, "LOG_FILE", log_file),
        ):
            logging_module.log_message("hello from test")
            for handler in logging.getLogger("agentconf").handlers:
                handler.flush()

        assert "hello from test" in log_file.read_text()

    def test_log_file_operation_format(self):
        with patch.object(logging_module, "log_message") as mock_log:
            logging_module.log_file_operation("write", Path("/x/settings.json"), "12 bytes")

        mock_log.assert_called_once_with("FILE: write /x/settings.json | 12 bytes")

    def test_log_file_operation_without_detail(self):
        with patch.object(logging_module, "log_message") as mock_log:
            logging_module.log_file_operation("delete", Path("/x/a.bak"))

        mock_log.assert_called_once_with("FILE: delete /x/a.bak")
