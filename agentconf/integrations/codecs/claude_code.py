"""Claude Code codec for ``~/.claude/settings.json``.

Managed fields live in the ``env`` object; the top-level ``model`` selects
the default model. Permissions, hooks, MCP servers and any other env keys
are preserved.
"""

from __future__ import annotations

from pathlib import Path

from agentconf.integrations.agents import AgentKind
from agentconf.integrations.codecs.base import (
    FormatCodec,
    child_object,
    dump_json,
    load_json_object,
    merge_base,
    scan_string_field,
    string_value,
)
from agentconf.models import CanonicalSettings, ParsedAgentConfig

ENV_BASE_URL = "ANTHROPIC_BASE_URL"
ENV_AUTH_TOKEN = "ANTHROPIC_AUTH_TOKEN"
ENV_OPUS_MODEL = "ANTHROPIC_DEFAULT_OPUS_MODEL"
ENV_SONNET_MODEL = "ANTHROPIC_DEFAULT_SONNET_MODEL"
ENV_HAIKU_MODEL = "ANTHROPIC_DEFAULT_HAIKU_MODEL"

MANAGED_ENV_KEYS = (
    ENV_BASE_URL,
    ENV_AUTH_TOKEN,
    ENV_OPUS_MODEL,
    ENV_SONNET_MODEL,
    ENV_HAIKU_MODEL,
)

# Extension keys for the secondary model slots
EXT_SONNET_MODEL = "sonnet_model"
EXT_HAIKU_MODEL = "haiku_model"


class ClaudeCodeCodec(FormatCodec):
    """Reads and writes the Anthropic env block of Claude Code settings."""

    @property
    def agent_kind(self) -> AgentKind:
        return AgentKind.CLAUDE_CODE

    @property
    def owned_fields(self) -> frozenset[str]:
        return frozenset({"endpoint_url", "api_key", "selected_model", "extensions"})

    def decode(self, raw_text: str, source_path: Path | None = None) -> ParsedAgentConfig:
        data = load_json_object(raw_text)
        if data is None:
            return self._decode_scan(raw_text, source_path)

        env = data.get("env")
        env = env if isinstance(env, dict) else {}

        extensions = {}
        for ext_key, env_key in ((EXT_SONNET_MODEL, ENV_SONNET_MODEL), (EXT_HAIKU_MODEL, ENV_HAIKU_MODEL)):
            value = string_value(env.get(env_key))
            if value:
                extensions[ext_key] = value

        return self._parsed(
            source_path,
            endpoint_url=string_value(env.get(ENV_BASE_URL)),
            api_key=string_value(env.get(ENV_AUTH_TOKEN)) or string_value(env.get("ANTHROPIC_API_KEY")),
            selected_model=string_value(data.get("model")) or string_value(env.get(ENV_OPUS_MODEL)),
            extensions=extensions,
        )

    def _decode_scan(self, raw_text: str, source_path: Path | None) -> ParsedAgentConfig:
        extensions = {}
        sonnet = scan_string_field(raw_text, ENV_SONNET_MODEL)
        haiku = scan_string_field(raw_text, ENV_HAIKU_MODEL)
        if sonnet:
            extensions[EXT_SONNET_MODEL] = sonnet
        if haiku:
            extensions[EXT_HAIKU_MODEL] = haiku

        return self._parsed(
            source_path,
            endpoint_url=scan_string_field(raw_text, ENV_BASE_URL),
            api_key=scan_string_field(raw_text, ENV_AUTH_TOKEN),
            selected_model=scan_string_field(raw_text, "model") or scan_string_field(raw_text, ENV_OPUS_MODEL),
            extensions=extensions,
        )

    def encode(self, settings: CanonicalSettings, existing_text: str | None = None) -> str:
        data = merge_base(self.agent_kind, existing_text)

        model = settings.selected_model
        env = child_object(data, "env")
        env[ENV_BASE_URL] = settings.endpoint_url
        env[ENV_AUTH_TOKEN] = settings.api_key
        env[ENV_OPUS_MODEL] = model
        env[ENV_SONNET_MODEL] = settings.extension(EXT_SONNET_MODEL, model)
        env[ENV_HAIKU_MODEL] = settings.extension(EXT_HAIKU_MODEL, model)
        data["model"] = model

        return dump_json(data)

    def strip(self, existing_text: str) -> str:
        data = load_json_object(existing_text)
        if data is None:
            return existing_text

        env = data.get("env")
        if not isinstance(env, dict):
            return dump_json(data)

        managed_model = string_value(env.get(ENV_OPUS_MODEL))
        for key in MANAGED_ENV_KEYS:
            env.pop(key, None)
        if not env:
            del data["env"]

        # The top-level model goes only when it is the one we wrote
        if managed_model and string_value(data.get("model")) == managed_model:
            del data["model"]

        return dump_json(data)


__all__ = ["ClaudeCodeCodec", "MANAGED_ENV_KEYS"]
