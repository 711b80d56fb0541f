"""Configuration management for agentconf."""

from agentconf.config.manager import ConfigManager
from agentconf.config.settings import CONFIG_FILE, Settings

__all__ = [
    "ConfigManager",
    "Settings",
    "CONFIG_FILE",
]
