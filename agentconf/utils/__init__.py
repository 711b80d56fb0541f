"""Utility modules for agentconf.

This package contains:
- console: Rich-based terminal output utilities
- errors: Custom exceptions and exit codes
- logging: Logging configuration
- redaction: Secret masking for logs and output
"""

from agentconf.utils.errors import (
    AgentConfError,
    ConfigValidationError,
    ExitCode,
    ReadFailed,
    RestoreFailed,
    WriteFailed,
)
from agentconf.utils.logging import log_file_operation, log_message, setup_logging
from agentconf.utils.redaction import is_sensitive_key, redact

__all__ = [
    # Errors
    "ExitCode",
    "AgentConfError",
    "ConfigValidationError",
    "ReadFailed",
    "WriteFailed",
    "RestoreFailed",
    # Logging
    "setup_logging",
    "log_message",
    "log_file_operation",
    # Redaction
    "is_sensitive_key",
    "redact",
]
