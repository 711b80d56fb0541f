"""Configuration manager for agentconf.

This module provides the ConfigManager class for loading, saving, and
managing agentconf's own configuration values with a simple hierarchy:

    1. Environment Variables (highest priority)
    2. Global Config (~/.agentconf-config)
    3. Built-in Defaults (lowest priority)
"""

from __future__ import annotations

import logging
import os
import re
from pathlib import Path

from rich.table import Table

from agentconf.config.settings import (
    CONFIG_FILE,
    DEFAULT_BACKUP_RETENTION,
    DEFAULT_PROBE_TIMEOUT_SECONDS,
    Settings,
)
from agentconf.utils.console import console
from agentconf.utils.errors import ConfigValidationError
from agentconf.utils.fileio import SECURE_FILE_MODE, atomic_write_text
from agentconf.utils.logging import log_message
from agentconf.utils.redaction import is_sensitive_key, redact

logger = logging.getLogger(__name__)

_LINE_PATTERN = re.compile(r"^([a-zA-Z_][a-zA-Z0-9_]*)=(.*)$")
_KEY_PATTERN = re.compile(r"^[a-zA-Z_][a-zA-Z0-9_]*$")

# Upper bounds keep a bad config value from hanging the serialized queue
_MAX_TIMEOUT_SECONDS = 300.0
_MAX_BACKUP_RETENTION = 1000

# Config keys whose value must be an http(s) URL when non-empty
_URL_KEYS = frozenset({"LOCAL_PROXY_URL", "REMOTE_PROXY_URL"})


class ConfigManager:
    """Manages configuration loading and saving.

    Configuration Precedence (highest to lowest):
    1. Environment Variables - CI/CD, temporary overrides
    2. Global Config (~/.agentconf-config) - User defaults
    3. Built-in Defaults - Fallback values

    Security features:
    - Safe line-by-line parsing (no eval/exec)
    - Key name validation
    - Atomic file writes
    - Secure file permissions (600)

    Attributes:
        settings: Current settings instance
        config_path: Path to the config file
    """

    def __init__(self, config_path: Path | None = None) -> None:
        """Initialize the configuration manager.

        Args:
            config_path: Optional custom path to the config file.
                         Defaults to ~/.agentconf-config.
        """
        self.config_path = config_path or CONFIG_FILE
        self.settings = Settings()
        self._raw_values: dict[str, str] = {}
        self._config_sources: dict[str, str] = {}

    def load(self) -> Settings:
        """Load configuration from all sources.

        Each call starts from clean defaults so stale values never persist
        across multiple loads.

        Returns:
            Settings instance with loaded values
        """
        self.settings = Settings()
        self._raw_values = {}
        self._config_sources = {}

        if self.config_path.exists():
            log_message(f"Loading configuration from {self.config_path}")
            self._raw_values.update(self._read_file_values(self.config_path))
            for key in self._raw_values:
                self._config_sources[key] = "file"

        self._load_environment()

        for key, value in self._raw_values.items():
            self._apply_value_to_settings(key, value)

        log_message(f"Configuration loaded successfully ({len(self._raw_values)} keys)")
        return self.settings

    def _read_file_values(self, path: Path) -> dict[str, str]:
        """Read KEY=VALUE pairs from a config file without modifying state.

        Comments, empty lines and malformed lines are skipped.

        Args:
            path: Path to the config file

        Returns:
            Dictionary of key-value pairs
        """
        values: dict[str, str] = {}

        with path.open(encoding="utf-8") as f:
            for line in f:
                line = line.strip()
                if not line or line.startswith("#"):
                    continue
                match = _LINE_PATTERN.match(line)
                if match:
                    key, value = match.groups()
                    values[key] = unquote_value(value)
        return values

    def _load_environment(self) -> None:
        """Override config with environment variables.

        Only known keys are read, prefixed with ``AGENTCONF_`` to avoid
        clashing with unrelated variables (e.g. ``AGENTCONF_BACKUP_RETENTION``).
        """
        for key in Settings.get_config_keys():
            env_value = os.environ.get(f"AGENTCONF_{key}")
            if env_value is not None:
                self._raw_values[key] = env_value
                self._config_sources[key] = "environment"

    def _apply_value_to_settings(self, key: str, value: str) -> None:
        """Apply a raw config value to the settings object.

        Values that fail to parse or fall outside their bounds are logged
        and the default is kept.

        Args:
            key: Configuration key
            value: Raw string value
        """
        attr = self.settings.get_attribute_for_key(key)
        if attr is None:
            return  # Unknown key, ignore

        current_value = getattr(self.settings, attr)

        if isinstance(current_value, bool):
            setattr(self.settings, attr, value.strip().lower() in ("true", "1", "yes"))
        elif isinstance(current_value, int):
            try:
                parsed_int = int(value)
            except ValueError:
                logger.warning(f"Invalid {key} value '{value}', using default {current_value}")
                return
            if not 1 <= parsed_int <= _MAX_BACKUP_RETENTION:
                logger.warning(
                    f"{key} must be between 1 and {_MAX_BACKUP_RETENTION}, got {parsed_int}, "
                    f"using default {DEFAULT_BACKUP_RETENTION}"
                )
                return
            setattr(self.settings, attr, parsed_int)
        elif isinstance(current_value, float):
            try:
                parsed_float = float(value)
            except ValueError:
                logger.warning(f"Invalid {key} value '{value}', using default {current_value}")
                return
            if not 0 < parsed_float <= _MAX_TIMEOUT_SECONDS:
                logger.warning(
                    f"{key} must be > 0 and <= {_MAX_TIMEOUT_SECONDS}, got {parsed_float}, "
                    f"using default {DEFAULT_PROBE_TIMEOUT_SECONDS}"
                )
                return
            setattr(self.settings, attr, parsed_float)
        else:
            value = value.strip()
            if key in _URL_KEYS and value and not value.startswith(("http://", "https://")):
                logger.warning(f"{key} must be an http(s) URL, got '{value}', ignoring")
                return
            setattr(self.settings, attr, value)

    def save(self, key: str, value: str) -> None:
        """Save a configuration value to the config file.

        Existing lines are preserved: comments, blank lines, unknown keys and
        malformed lines are written back untouched, and the saved key is
        updated in place (or appended). The file is replaced atomically and
        the configuration is reloaded afterwards.

        Args:
            key: Configuration key (must match pattern: [a-zA-Z_][a-zA-Z0-9_]*)
            value: Configuration value to save

        Raises:
            ConfigValidationError: If the key name is invalid
        """
        if not _KEY_PATTERN.match(key):
            raise ConfigValidationError(f"Invalid config key: {key}")

        existing_lines: list[str] = []
        if self.config_path.exists():
            existing_lines = self.config_path.read_text(encoding="utf-8").splitlines()

        new_lines: list[str] = []
        written = False
        stored = f'{key}="{escape_value(value)}"'

        for line in existing_lines:
            match = _LINE_PATTERN.match(line.strip())
            if match and match.group(1) == key:
                if not written:
                    new_lines.append(stored)
                    written = True
                continue
            new_lines.append(line)

        if not written:
            new_lines.append(stored)

        atomic_write_text(
            self.config_path, "\n".join(new_lines) + "\n", mode=SECURE_FILE_MODE, prefix=".agentconf-config-"
        )

        if is_sensitive_key(key):
            log_message(f"Configuration saved: {key}={redact(value)}")
        else:
            log_message(f"Configuration saved: {key}")

        self.load()

    def get(self, key: str, default: str = "") -> str:
        """Get a raw configuration value.

        Args:
            key: Configuration key to retrieve
            default: Default value if key not found

        Returns:
            Configuration value or default
        """
        return self._raw_values.get(key, default)

    def get_config_source(self, key: str) -> str:
        """Describe where a key's effective value came from."""
        return self._config_sources.get(key, "default")

    def show(self) -> None:
        """Print the effective configuration as a table."""
        table = Table(title=f"agentconf configuration ({self.config_path})")
        table.add_column("Key", style="bold")
        table.add_column("Value")
        table.add_column("Source", style="dim")

        for key in Settings.get_config_keys():
            attr = self.settings.get_attribute_for_key(key)
            value = str(getattr(self.settings, attr)) if attr else ""
            table.add_row(key, value, self.get_config_source(key))

        console.print(table)


def escape_value(value: str) -> str:
    """Escape a value for storage inside double quotes.

    Backslashes are escaped first, then double quotes.
    """
    return value.replace("\\", "\\\\").replace('"', '\\"')


def unquote_value(value: str) -> str:
    """Strip surrounding quotes from a raw KEY=VALUE value.

    Double-quoted values are unescaped; single-quoted values are literal.
    """
    value = value.strip()
    if len(value) >= 2 and value.startswith('"') and value.endswith('"'):
        return value[1:-1].replace("\\\\", "\\").replace('\\"', '"')
    if len(value) >= 2 and value.startswith("'") and value.endswith("'"):
        return value[1:-1]
    return value


__all__ = ["ConfigManager", "escape_value", "unquote_value"]
