"""OpenCode codec for ``~/.config/opencode/opencode.json``.

The managed provider is a block under ``provider`` using the Anthropic AI
SDK adapter. Every published model gets an entry with family-derived
limits, and the top-level ``model`` selects ``<provider>/<model>``.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any

from agentconf.integrations.agents import AgentKind
from agentconf.integrations.codecs.base import (
    MANAGED_PROVIDER_ID,
    MANAGED_PROVIDER_NAME,
    FormatCodec,
    child_object,
    dump_json,
    load_json_object,
    merge_base,
    scan_string_field,
    string_value,
)
from agentconf.integrations.endpoints import api_base_url
from agentconf.integrations.model_traits import opencode_model_entry
from agentconf.models import CanonicalSettings, ParsedAgentConfig

SCHEMA_URL = "https://opencode.ai/config.json"
PROVIDER_NPM_PACKAGE = "@ai-sdk/anthropic"
MODEL_PREFIX = f"{MANAGED_PROVIDER_ID}/"


class OpenCodeCodec(FormatCodec):
    @property
    def agent_kind(self) -> AgentKind:
        return AgentKind.OPENCODE

    @property
    def owned_fields(self) -> frozenset[str]:
        return frozenset({"endpoint_url", "api_key", "selected_model"})

    def decode(self, raw_text: str, source_path: Path | None = None) -> ParsedAgentConfig:
        data = load_json_object(raw_text)
        if data is None:
            model = scan_string_field(raw_text, "model")
            return self._parsed(
                source_path,
                endpoint_url=scan_string_field(raw_text, "baseURL"),
                api_key=scan_string_field(raw_text, "apiKey"),
                selected_model=model.removeprefix(MODEL_PREFIX) if model else None,
            )

        provider = _managed_provider(data)
        options = provider.get("options") if isinstance(provider.get("options"), dict) else {}

        model = string_value(data.get("model"))
        if model and model.startswith(MODEL_PREFIX):
            selected_model = model.removeprefix(MODEL_PREFIX)
        else:
            models = provider.get("models")
            selected_model = next(iter(models), None) if isinstance(models, dict) else None

        return self._parsed(
            source_path,
            endpoint_url=string_value(options.get("baseURL")),
            api_key=string_value(options.get("apiKey")),
            selected_model=selected_model,
        )

    def encode(self, settings: CanonicalSettings, existing_text: str | None = None) -> str:
        data = merge_base(self.agent_kind, existing_text)
        if not data:
            data["$schema"] = SCHEMA_URL
        else:
            data.setdefault("$schema", SCHEMA_URL)

        providers = child_object(data, "provider")
        providers[MANAGED_PROVIDER_ID] = {
            "npm": PROVIDER_NPM_PACKAGE,
            "name": MANAGED_PROVIDER_NAME,
            "options": {
                "apiKey": settings.api_key,
                "baseURL": api_base_url(settings.endpoint_url),
            },
            "models": {model: opencode_model_entry(model) for model in settings.published_models()},
        }
        if settings.selected_model:
            data["model"] = f"{MODEL_PREFIX}{settings.selected_model}"

        return dump_json(data)

    def strip(self, existing_text: str) -> str:
        data = load_json_object(existing_text)
        if data is None:
            return existing_text

        providers = data.get("provider")
        if isinstance(providers, dict):
            providers.pop(MANAGED_PROVIDER_ID, None)
            if not providers:
                del data["provider"]

        model = string_value(data.get("model"))
        if model and model.startswith(MODEL_PREFIX):
            del data["model"]

        return dump_json(data)


def _managed_provider(data: dict[str, Any]) -> dict[str, Any]:
    providers = data.get("provider")
    if not isinstance(providers, dict):
        return {}
    provider = providers.get(MANAGED_PROVIDER_ID)
    return provider if isinstance(provider, dict) else {}


__all__ = ["OpenCodeCodec"]
