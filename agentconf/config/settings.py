"""Settings dataclass for agentconf's own configuration.

These are application settings (backup retention, timeouts, proxy URLs),
not the canonical settings written into agent configuration files.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path

DEFAULT_LOCAL_PROXY_URL = "http://127.0.0.1:8317"
DEFAULT_BACKUP_RETENTION = 10
DEFAULT_PROBE_TIMEOUT_SECONDS = 10.0


@dataclass
class Settings:
    """Configuration settings for agentconf.

    All settings have defaults and can be loaded from the configuration
    file (~/.agentconf-config) or overridden by environment variables.

    Attributes:
        home_dir: Home directory the agent config paths are resolved under
            (empty = the current user's home)
        backup_dir: Directory holding configuration snapshots
            (empty = ~/.agentconf/backups)
        backup_retention: Maximum number of snapshots kept per agent
        probe_timeout_seconds: Upper bound for one connectivity probe
        catalog_timeout_seconds: Upper bound for one model listing request
        local_proxy_url: Endpoint used when scaffolding local-mode configs
        remote_proxy_url: Endpoint used when scaffolding remote-mode configs
        default_model: Model used when scaffolding (empty = per-agent default)
        probe_after_write: Run a connectivity probe after each generate
    """

    home_dir: str = ""
    backup_dir: str = ""
    backup_retention: int = DEFAULT_BACKUP_RETENTION
    probe_timeout_seconds: float = DEFAULT_PROBE_TIMEOUT_SECONDS
    catalog_timeout_seconds: float = DEFAULT_PROBE_TIMEOUT_SECONDS
    local_proxy_url: str = DEFAULT_LOCAL_PROXY_URL
    remote_proxy_url: str = ""
    default_model: str = ""
    probe_after_write: bool = True

    # Config key to attribute mapping
    _key_mapping: dict[str, str] = field(
        default_factory=lambda: {
            "HOME_DIR": "home_dir",
            "BACKUP_DIR": "backup_dir",
            "BACKUP_RETENTION": "backup_retention",
            "PROBE_TIMEOUT_SECONDS": "probe_timeout_seconds",
            "CATALOG_TIMEOUT_SECONDS": "catalog_timeout_seconds",
            "LOCAL_PROXY_URL": "local_proxy_url",
            "REMOTE_PROXY_URL": "remote_proxy_url",
            "DEFAULT_MODEL": "default_model",
            "PROBE_AFTER_WRITE": "probe_after_write",
        },
        repr=False,
    )

    def get_attribute_for_key(self, key: str) -> str | None:
        """Get the attribute name for a config key."""
        return self._key_mapping.get(key)

    def get_key_for_attribute(self, attr: str) -> str | None:
        """Get the config key for an attribute name."""
        for key, value in self._key_mapping.items():
            if value == attr:
                return key
        return None

    @classmethod
    def get_config_keys(cls) -> list[str]:
        """Get list of all valid configuration keys."""
        temp = cls()
        return list(temp._key_mapping.keys())

    @property
    def home_path(self) -> Path:
        """Resolved home directory for agent configuration files."""
        return Path(self.home_dir).expanduser() if self.home_dir else Path.home()

    @property
    def backup_path(self) -> Path:
        """Resolved snapshot storage directory."""
        if self.backup_dir:
            return Path(self.backup_dir).expanduser()
        return self.home_path / ".agentconf" / "backups"


# Default configuration file path
CONFIG_FILE = Path.home() / ".agentconf-config"


__all__ = [
    "Settings",
    "CONFIG_FILE",
    "DEFAULT_LOCAL_PROXY_URL",
    "DEFAULT_BACKUP_RETENTION",
    "DEFAULT_PROBE_TIMEOUT_SECONDS",
]
