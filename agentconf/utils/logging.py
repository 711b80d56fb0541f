"""Logging configuration for agentconf.

Logging is controlled by environment variables and writes to a file so it
never interferes with the command-line output.

Environment Variables:
    AGENTCONF_LOG: Set to "true" to enable logging (default: "false")
    AGENTCONF_LOG_FILE: Path to log file (default: ~/.agentconf.log)
"""

import logging
import os
from pathlib import Path

# Environment variable configuration
LOG_ENABLED = os.environ.get("AGENTCONF_LOG", "false").lower() == "true"
LOG_FILE = Path(os.environ.get("AGENTCONF_LOG_FILE", str(Path.home() / ".agentconf.log")))

# Module-level logger instance
_logger: logging.Logger | None = None


def setup_logging() -> logging.Logger:
    """Configure logging based on environment variables.

    Creates a logger that writes to the configured log file when
    AGENTCONF_LOG is set to "true". Otherwise, uses a NullHandler
    to suppress all log output.

    Returns:
        Configured logger instance
    """
    global _logger

    if _logger is not None:
        return _logger

    logger = logging.getLogger("agentconf")

    # Clear any existing handlers
    logger.handlers.clear()

    if LOG_ENABLED:
        LOG_FILE.parent.mkdir(parents=True, exist_ok=True)

        handler = logging.FileHandler(LOG_FILE)
        handler.setFormatter(
            logging.Formatter(
                "[%(asctime)s] %(levelname)s %(name)s: %(message)s",
                datefmt="%Y-%m-%d %H:%M:%S",
            )
        )
        logger.addHandler(handler)
        logger.setLevel(logging.DEBUG if os.environ.get("AGENTCONF_DEBUG") else logging.INFO)
    else:
        logger.addHandler(logging.NullHandler())

    _logger = logger
    return logger


def get_logger() -> logging.Logger:
    """Get the configured logger instance, creating it if necessary."""
    global _logger
    if _logger is None:
        return setup_logging()
    return _logger


def log_message(message: str) -> None:
    """Log an operation-trail message if logging is enabled.

    Messages are only written to the log file if AGENTCONF_LOG=true.
    Callers must redact secrets before passing them here.

    Args:
        message: Message to log
    """
    logger = get_logger()
    logger.info(message)


def log_file_operation(operation: str, path: Path, detail: str = "") -> None:
    """Log a file-system mutation performed on an agent configuration.

    Args:
        operation: Short verb such as "write", "snapshot", "restore", "prune"
        path: File the operation touched
        detail: Optional extra context (never secrets)
    """
    suffix = f" | {detail}" if detail else ""
    log_message(f"FILE: {operation} {path}{suffix}")


__all__ = [
    "LOG_ENABLED",
    "LOG_FILE",
    "setup_logging",
    "get_logger",
    "log_message",
    "log_file_operation",
]
