"""Amp codec for ``~/.config/amp/settings.json``.

Amp reads its endpoint from the flat ``amp.url`` setting. Its API key lives
in a separate secrets store that is not managed here.
"""

from __future__ import annotations

from pathlib import Path

from agentconf.integrations.agents import AgentKind
from agentconf.integrations.codecs.base import (
    FormatCodec,
    dump_json,
    load_json_object,
    merge_base,
    scan_string_field,
    string_value,
)
from agentconf.models import CanonicalSettings, ParsedAgentConfig

KEY_URL = "amp.url"


class AmpCodec(FormatCodec):
    @property
    def agent_kind(self) -> AgentKind:
        return AgentKind.AMP

    @property
    def owned_fields(self) -> frozenset[str]:
        return frozenset({"endpoint_url"})

    def decode(self, raw_text: str, source_path: Path | None = None) -> ParsedAgentConfig:
        data = load_json_object(raw_text)
        if data is None:
            endpoint_url = scan_string_field(raw_text, KEY_URL)
        else:
            endpoint_url = string_value(data.get(KEY_URL))
        return self._parsed(source_path, endpoint_url=endpoint_url)

    def encode(self, settings: CanonicalSettings, existing_text: str | None = None) -> str:
        data = merge_base(self.agent_kind, existing_text)
        data[KEY_URL] = settings.endpoint_url
        return dump_json(data)

    def strip(self, existing_text: str) -> str:
        data = load_json_object(existing_text)
        if data is None:
            return existing_text
        data.pop(KEY_URL, None)
        return dump_json(data)


__all__ = ["AmpCodec"]
