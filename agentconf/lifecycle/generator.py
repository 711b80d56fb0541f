"""Render agent configuration files from canonical settings."""

from __future__ import annotations

import re
from dataclasses import replace

from agentconf.config.settings import Settings
from agentconf.integrations.agents import AgentKind, OperatingMode
from agentconf.integrations.codecs import get_codec
from agentconf.integrations.endpoints import endpoint_problem
from agentconf.lifecycle.reader import ConfigReader
from agentconf.models import CanonicalSettings
from agentconf.utils.errors import ConfigValidationError

_EXTENSION_KEY_RE = re.compile(r"^[a-z][a-z0-9_]*$")

# Agents whose file carries no model selection
_MODELLESS_KINDS = frozenset({AgentKind.AMP})


def validate_settings(kind: AgentKind, settings: CanonicalSettings) -> None:
    """Check settings before anything is snapshotted or written.

    An empty API key is allowed: local proxies may not require one.

    Raises:
        ConfigValidationError: If the endpoint is unusable, a required model
            is missing, the API key is not printable ASCII or an extension
            key is malformed
    """
    problem = endpoint_problem(settings.endpoint_url)
    if problem:
        raise ConfigValidationError(f"{problem} (agent: {kind.value})")

    # Keys travel in HTTP headers, which are ASCII only
    if not settings.api_key.isascii() or any(not ch.isprintable() for ch in settings.api_key):
        raise ConfigValidationError(
            f"API key for {kind.display_name} contains non-ASCII or control characters"
        )

    if kind not in _MODELLESS_KINDS and not settings.selected_model:
        raise ConfigValidationError(f"A model is required for {kind.display_name}")

    for key, value in settings.extensions.items():
        if not _EXTENSION_KEY_RE.match(key):
            raise ConfigValidationError(f"Invalid extension key: {key!r}")
        if not isinstance(value, str):
            raise ConfigValidationError(f"Extension {key!r} must be a string")

    for model in settings.available_models:
        if not model or model != model.strip():
            raise ConfigValidationError(f"Invalid model id in available models: {model!r}")


class ConfigGenerator:
    """Produce native file content, merging with what is on disk.

    Output is deterministic: the same settings and on-disk content always
    render the same bytes.
    """

    def __init__(self, reader: ConfigReader, app_settings: Settings | None = None) -> None:
        self.reader = reader
        self.app_settings = app_settings or Settings()

    def generate(
        self,
        kind: AgentKind,
        settings: CanonicalSettings,
        selected_model: str | None = None,
    ) -> str:
        """Render the config for ``kind``.

        Args:
            kind: Target agent
            settings: Canonical settings to encode
            selected_model: Overrides ``settings.selected_model`` when given

        Raises:
            ConfigValidationError: If the settings are invalid
            ReadFailed: If the existing file cannot be read
        """
        if selected_model:
            settings = replace(settings, selected_model=selected_model)
        validate_settings(kind, settings)

        existing = self.reader.read_raw(kind)
        return get_codec(kind).encode(settings, existing)

    def default_settings(self, kind: AgentKind, mode: OperatingMode, api_key: str = "") -> CanonicalSettings:
        """Canonical settings used to scaffold a first-run config.

        Raises:
            ConfigValidationError: If remote mode is requested but no
                remote proxy URL is configured
        """
        if mode is OperatingMode.LOCAL:
            endpoint_url = self.app_settings.local_proxy_url
        else:
            endpoint_url = self.app_settings.remote_proxy_url
            if not endpoint_url:
                raise ConfigValidationError(
                    "REMOTE_PROXY_URL is not configured. Set it with: agentconf config set REMOTE_PROXY_URL <url>"
                )

        return CanonicalSettings(
            endpoint_url=endpoint_url,
            api_key=api_key,
            selected_model=self.app_settings.default_model or kind.default_model,
            operating_mode=mode,
        )

    def generate_default(self, kind: AgentKind, mode: OperatingMode, api_key: str = "") -> str:
        """Render a first-run config from the application defaults."""
        return self.generate(kind, self.default_settings(kind, mode, api_key))

    def strip(self, kind: AgentKind) -> str | None:
        """Render the current file with every managed field removed.

        Returns:
            The stripped content, or None if the file does not exist
        """
        existing = self.reader.read_raw(kind)
        if existing is None:
            return None
        return get_codec(kind).strip(existing)


__all__ = ["ConfigGenerator", "validate_settings"]
