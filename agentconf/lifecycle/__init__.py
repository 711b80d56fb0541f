"""Configuration lifecycle for agentconf.

This package contains:
- reader: ConfigReader, reads and decodes agent config files
- generator: ConfigGenerator, renders config files from canonical settings
- backup: BackupManager, snapshots, restore and retention
- coordinator: LifecycleCoordinator, the serialized async facade
"""

from agentconf.lifecycle.backup import BackupManager
from agentconf.lifecycle.coordinator import LifecycleCoordinator, LifecycleState
from agentconf.lifecycle.generator import ConfigGenerator, validate_settings
from agentconf.lifecycle.reader import ConfigReader

__all__ = [
    "BackupManager",
    "ConfigGenerator",
    "ConfigReader",
    "LifecycleCoordinator",
    "LifecycleState",
    "validate_settings",
]
