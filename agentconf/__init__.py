"""agentconf - Agent configuration lifecycle manager.

This package reads, generates, backs up, restores and validates the
configuration files of third-party CLI coding agents on behalf of one
canonical settings model.
"""

__version__ = "0.1.0"
SCRIPT_NAME = "agentconf"

__all__ = [
    "__version__",
    "SCRIPT_NAME",
]
