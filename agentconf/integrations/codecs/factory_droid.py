"""Factory Droid codec for ``~/.factory/config.json``.

Droid lists custom models in ``custom_models``. Managed entries carry a
display-name suffix so they can be told apart from the user's own entries,
which are kept after the managed ones in their original order.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any

from agentconf.integrations.agents import AgentKind
from agentconf.integrations.codecs.base import (
    MANAGED_PROVIDER_ID,
    FormatCodec,
    dump_json,
    load_json_object,
    merge_base,
    scan_string_field,
    string_value,
)
from agentconf.integrations.endpoints import api_base_url
from agentconf.models import CanonicalSettings, ParsedAgentConfig

KEY_CUSTOM_MODELS = "custom_models"
DISPLAY_SUFFIX = f" [{MANAGED_PROVIDER_ID}]"
WIRE_PROVIDER = "openai"


def is_managed_entry(entry: Any) -> bool:
    if not isinstance(entry, dict):
        return False
    name = entry.get("model_display_name")
    return isinstance(name, str) and name.endswith(DISPLAY_SUFFIX)


class FactoryDroidCodec(FormatCodec):
    @property
    def agent_kind(self) -> AgentKind:
        return AgentKind.FACTORY_DROID

    @property
    def owned_fields(self) -> frozenset[str]:
        return frozenset({"endpoint_url", "api_key", "selected_model"})

    def decode(self, raw_text: str, source_path: Path | None = None) -> ParsedAgentConfig:
        data = load_json_object(raw_text)
        if data is None:
            return self._parsed(
                source_path,
                endpoint_url=scan_string_field(raw_text, "base_url"),
                api_key=scan_string_field(raw_text, "api_key"),
                selected_model=scan_string_field(raw_text, "model"),
            )

        entries = data.get(KEY_CUSTOM_MODELS)
        entries = [e for e in entries if isinstance(e, dict)] if isinstance(entries, list) else []
        managed = [e for e in entries if is_managed_entry(e)]
        # Fall back to the user's first entry when none of ours exist
        entry = (managed or entries or [{}])[0]

        return self._parsed(
            source_path,
            endpoint_url=string_value(entry.get("base_url")),
            api_key=string_value(entry.get("api_key")),
            selected_model=string_value(entry.get("model")),
        )

    def encode(self, settings: CanonicalSettings, existing_text: str | None = None) -> str:
        data = merge_base(self.agent_kind, existing_text)

        existing = data.get(KEY_CUSTOM_MODELS)
        user_entries = (
            [e for e in existing if not is_managed_entry(e)] if isinstance(existing, list) else []
        )
        base_url = api_base_url(settings.endpoint_url)
        managed = [
            {
                "model": model,
                "model_display_name": f"{model}{DISPLAY_SUFFIX}",
                "base_url": base_url,
                "api_key": settings.api_key,
                "provider": WIRE_PROVIDER,
            }
            for model in settings.published_models()
        ]
        data[KEY_CUSTOM_MODELS] = managed + user_entries

        return dump_json(data)

    def strip(self, existing_text: str) -> str:
        data = load_json_object(existing_text)
        if data is None:
            return existing_text

        existing = data.get(KEY_CUSTOM_MODELS)
        if isinstance(existing, list):
            remaining = [e for e in existing if not is_managed_entry(e)]
            if remaining:
                data[KEY_CUSTOM_MODELS] = remaining
            else:
                del data[KEY_CUSTOM_MODELS]

        return dump_json(data)


__all__ = ["FactoryDroidCodec", "DISPLAY_SUFFIX", "is_managed_entry"]
