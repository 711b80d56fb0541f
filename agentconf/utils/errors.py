"""Custom exceptions and exit codes for agentconf.

This module defines the exit codes and exception hierarchy used throughout
the application. File-system failures surface as typed exceptions; absence
of a configuration file and network failures are reported as result values
instead (see ``agentconf.models``).
"""

from enum import IntEnum
from pathlib import Path
from typing import ClassVar


class ExitCode(IntEnum):
    """Exit codes used by the command-line interface.

    These codes are used for consistent error reporting and can be
    checked by calling scripts or CI systems.
    """

    SUCCESS = 0
    GENERAL_ERROR = 1
    INVALID_SETTINGS = 2
    READ_FAILED = 3
    WRITE_FAILED = 4
    RESTORE_FAILED = 5
    PROBE_FAILED = 6


class AgentConfError(Exception):
    """Base exception for agentconf errors.

    All custom exceptions in this application should inherit from this class.
    Each exception type has an associated exit code for proper error reporting.
    """

    _default_exit_code: ClassVar[ExitCode] = ExitCode.GENERAL_ERROR

    def __init__(self, message: str, exit_code: ExitCode | None = None) -> None:
        """Initialize the exception."""
        super().__init__(message)
        self._exit_code = exit_code

    @property
    def exit_code(self) -> ExitCode:
        """Get the exit code for this exception."""
        if self._exit_code is not None:
            return self._exit_code
        return self.__class__._default_exit_code


class ConfigValidationError(AgentConfError):
    """Raised when canonical settings or application config values are invalid.

    Raised when:
    - The endpoint URL is not an http(s) URL with a host
    - A required field for the requested agent is empty
    - An extension key is not a plain identifier
    - An application config key is malformed
    """

    _default_exit_code: ClassVar[ExitCode] = ExitCode.INVALID_SETTINGS


class _PathError(AgentConfError):
    """Shared base for errors tied to one file path."""

    def __init__(
        self,
        message: str,
        path: Path | None = None,
        exit_code: ExitCode | None = None,
    ) -> None:
        super().__init__(message, exit_code)
        self.path = path


class ReadFailed(_PathError):
    """An existing configuration file could not be read.

    Raised for permission errors and other I/O failures. A missing file
    is not an error and is reported as ``NotConfigured`` instead.
    """

    _default_exit_code: ClassVar[ExitCode] = ExitCode.READ_FAILED


class WriteFailed(_PathError):
    """A configuration file or snapshot could not be written.

    Raised when:
    - The disk is full
    - The target directory is not writable
    - The target path is unavailable (e.g. a directory sits in its place)
    """

    _default_exit_code: ClassVar[ExitCode] = ExitCode.WRITE_FAILED


class RestoreFailed(_PathError):
    """A snapshot could not be restored.

    Raised when the snapshot file is missing or unreadable, or when writing
    its content back to the live path fails. The live file is left as it
    was whenever the failure happens before the atomic replace.
    """

    _default_exit_code: ClassVar[ExitCode] = ExitCode.RESTORE_FAILED


__all__ = [
    "ExitCode",
    "AgentConfError",
    "ConfigValidationError",
    "ReadFailed",
    "WriteFailed",
    "RestoreFailed",
]
