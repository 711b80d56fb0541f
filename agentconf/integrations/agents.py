"""Supported agent tools and their fixed configuration locations.

Each :class:`AgentKind` member knows where its tool keeps its configuration
file, which file-format family that file uses and which HTTP protocol its
provider speaks. The kind drives codec selection and probe construction.
"""

from __future__ import annotations

from enum import Enum
from pathlib import Path

from agentconf.utils.errors import ConfigValidationError


class OperatingMode(Enum):
    """Where the configured endpoint lives.

    Attributes:
        LOCAL: A proxy running on this machine
        REMOTE: A remote proxy reached over the network
    """

    LOCAL = "local"
    REMOTE = "remote"


class FormatFamily(Enum):
    """Native file syntax families used by the supported agents."""

    OBJECT = "json"
    TOML = "toml"
    DOTENV = "env"


class ProbeStyle(Enum):
    """Provider protocol used for connectivity probes and model listing.

    Attributes:
        ANTHROPIC: ``/v1/models`` with ``x-api-key`` and ``anthropic-version``
        OPENAI: ``/v1/models`` with a bearer token
        GEMINI: ``/v1beta/models`` with ``x-goog-api-key``
    """

    ANTHROPIC = "anthropic"
    OPENAI = "openai"
    GEMINI = "gemini"


class AgentKind(Enum):
    """Supported CLI coding agents.

    Attributes:
        CLAUDE_CODE: Anthropic's Claude Code
        CODEX: OpenAI Codex CLI
        GEMINI_CLI: Google Gemini CLI
        AMP: Sourcegraph Amp
        OPENCODE: OpenCode
        FACTORY_DROID: Factory Droid
    """

    CLAUDE_CODE = "claude-code"
    CODEX = "codex"
    GEMINI_CLI = "gemini-cli"
    AMP = "amp"
    OPENCODE = "opencode"
    FACTORY_DROID = "factory-droid"

    @property
    def display_name(self) -> str:
        return _DISPLAY_NAMES[self]

    @property
    def relative_config_path(self) -> Path:
        """Config file location relative to the user's home directory."""
        return _CONFIG_PATHS[self]

    @property
    def format_family(self) -> FormatFamily:
        return _FORMAT_FAMILIES[self]

    @property
    def probe_style(self) -> ProbeStyle:
        return _PROBE_STYLES[self]

    @property
    def default_model(self) -> str:
        """Model written when scaffolding a first-run configuration."""
        return _DEFAULT_MODELS[self]

    def config_path(self, home: Path) -> Path:
        """Absolute config file path under ``home``."""
        return home / self.relative_config_path


_DISPLAY_NAMES: dict[AgentKind, str] = {
    AgentKind.CLAUDE_CODE: "Claude Code",
    AgentKind.CODEX: "Codex CLI",
    AgentKind.GEMINI_CLI: "Gemini CLI",
    AgentKind.AMP: "Amp CLI",
    AgentKind.OPENCODE: "OpenCode",
    AgentKind.FACTORY_DROID: "Factory Droid",
}

_CONFIG_PATHS: dict[AgentKind, Path] = {
    AgentKind.CLAUDE_CODE: Path(".claude") / "settings.json",
    AgentKind.CODEX: Path(".codex") / "config.toml",
    AgentKind.GEMINI_CLI: Path(".gemini") / ".env",
    AgentKind.AMP: Path(".config") / "amp" / "settings.json",
    AgentKind.OPENCODE: Path(".config") / "opencode" / "opencode.json",
    AgentKind.FACTORY_DROID: Path(".factory") / "config.json",
}

_FORMAT_FAMILIES: dict[AgentKind, FormatFamily] = {
    AgentKind.CLAUDE_CODE: FormatFamily.OBJECT,
    AgentKind.CODEX: FormatFamily.TOML,
    AgentKind.GEMINI_CLI: FormatFamily.DOTENV,
    AgentKind.AMP: FormatFamily.OBJECT,
    AgentKind.OPENCODE: FormatFamily.OBJECT,
    AgentKind.FACTORY_DROID: FormatFamily.OBJECT,
}

_PROBE_STYLES: dict[AgentKind, ProbeStyle] = {
    AgentKind.CLAUDE_CODE: ProbeStyle.ANTHROPIC,
    AgentKind.CODEX: ProbeStyle.OPENAI,
    AgentKind.GEMINI_CLI: ProbeStyle.GEMINI,
    AgentKind.AMP: ProbeStyle.OPENAI,
    AgentKind.OPENCODE: ProbeStyle.ANTHROPIC,
    AgentKind.FACTORY_DROID: ProbeStyle.OPENAI,
}

_DEFAULT_MODELS: dict[AgentKind, str] = {
    AgentKind.CLAUDE_CODE: "claude-sonnet-4-5",
    AgentKind.CODEX: "gpt-5-codex",
    AgentKind.GEMINI_CLI: "gemini-2.5-pro",
    AgentKind.AMP: "claude-sonnet-4-5",
    AgentKind.OPENCODE: "claude-sonnet-4-5",
    AgentKind.FACTORY_DROID: "claude-sonnet-4-5",
}


def parse_agent_kind(value: str | None, context: str = "") -> AgentKind:
    """Parse an AgentKind from user input.

    Accepts the canonical value (``claude-code``) as well as the member name
    in any case (``CLAUDE_CODE``) and underscore spelling (``claude_code``).

    Raises:
        ConfigValidationError: If value does not name a supported agent
    """
    valid_values = [e.value for e in AgentKind]
    if value is None or value.strip() == "":
        raise ConfigValidationError(f"Agent is required. Allowed values: {', '.join(valid_values)}")

    normalized = value.strip().lower().replace("_", "-")
    try:
        return AgentKind(normalized)
    except ValueError:
        context_msg = f" in {context}" if context else ""
        raise ConfigValidationError(
            f"Invalid agent '{value}'{context_msg}. Allowed values: {', '.join(valid_values)}"
        ) from None


def parse_operating_mode(value: str | None, default: OperatingMode = OperatingMode.LOCAL) -> OperatingMode:
    """Parse an OperatingMode, accepting ``remote-proxy`` as an alias of ``remote``.

    Raises:
        ConfigValidationError: If value is not a known mode
    """
    if value is None or value.strip() == "":
        return default

    normalized = value.strip().lower()
    if normalized in ("remote-proxy", "remoteproxy", "remote_proxy"):
        return OperatingMode.REMOTE
    try:
        return OperatingMode(normalized)
    except ValueError:
        valid_values = [e.value for e in OperatingMode]
        raise ConfigValidationError(
            f"Invalid operating mode '{value}'. Allowed values: {', '.join(valid_values)}"
        ) from None


__all__ = [
    "AgentKind",
    "OperatingMode",
    "FormatFamily",
    "ProbeStyle",
    "parse_agent_kind",
    "parse_operating_mode",
]
