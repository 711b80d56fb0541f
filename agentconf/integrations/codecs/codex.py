"""Codex CLI codec for ``~/.codex/config.toml``.

Writes go through tomlkit so comments, layout and keys we do not own
survive a rewrite, including extra keys the user added to the managed
provider table. Decoding stays line based so a file tomlkit cannot parse
is still read.
"""

from __future__ import annotations

import json
import logging
import re
from collections.abc import MutableMapping
from pathlib import Path
from typing import Any

import tomlkit
from tomlkit.exceptions import TOMLKitError

from agentconf.integrations.agents import AgentKind
from agentconf.integrations.codecs.base import MANAGED_PROVIDER_ID, MANAGED_PROVIDER_NAME, FormatCodec
from agentconf.integrations.endpoints import api_base_url
from agentconf.models import CanonicalSettings, ParsedAgentConfig

logger = logging.getLogger(__name__)

PROVIDERS_TABLE = "model_providers"
MANAGED_TABLE = f"{PROVIDERS_TABLE}.{MANAGED_PROVIDER_ID}"

KEY_MODEL_PROVIDER = "model_provider"
KEY_MODEL = "model"
KEY_REASONING_EFFORT = "model_reasoning_effort"

EXT_REASONING_EFFORT = "reasoning_effort"
DEFAULT_REASONING_EFFORT = "high"

# Provider Codex falls back to once our table is removed
FALLBACK_PROVIDER = "openai"

_KEY_VALUE_RE = re.compile(r"^\s*([A-Za-z0-9_.-]+|\"[^\"]+\")\s*=\s*(.*?)\s*$")
_TABLE_RE = re.compile(r"^\s*\[\[?\s*([^\]]+?)\s*\]\]?\s*(?:#.*)?$")


def _table_name(line: str) -> str | None:
    match = _TABLE_RE.match(line)
    return match.group(1).replace(" ", "").replace('"', "") if match else None


def _parse_value(raw: str) -> str | None:
    """Parse the right-hand side of a ``key = value`` line into a string."""
    raw = raw.strip()
    if not raw:
        return None
    if raw.startswith('"'):
        match = re.match(r'"((?:[^"\\]|\\.)*)"', raw)
        if not match:
            return None
        try:
            return json.loads(f'"{match.group(1)}"')
        except ValueError:
            return match.group(1)
    if raw.startswith("'"):
        end = raw.find("'", 1)
        return raw[1:end] if end > 0 else None
    value = raw.split("#", 1)[0].strip()
    return value or None


def _parse_line(line: str) -> tuple[str, str | None] | None:
    match = _KEY_VALUE_RE.match(line)
    if not match or line.lstrip().startswith("#"):
        return None
    return match.group(1).strip('"'), _parse_value(match.group(2))


def _load_document(existing_text: str | None) -> tomlkit.TOMLDocument:
    """Parse ``existing_text`` preserving formatting.

    Unparseable content is replaced by an empty document; the snapshot
    taken before the write still holds the original bytes.
    """
    if not existing_text or not existing_text.strip():
        return tomlkit.document()
    try:
        return tomlkit.parse(existing_text)
    except TOMLKitError as e:
        logger.warning(
            f"Existing {AgentKind.CODEX.display_name} config is not valid TOML ({e}), rendering a fresh one"
        )
        return tomlkit.document()


def _dump(doc: tomlkit.TOMLDocument) -> str:
    text = tomlkit.dumps(doc).rstrip()
    return text + "\n" if text else ""


def _providers(doc: tomlkit.TOMLDocument) -> MutableMapping[str, Any]:
    """The ``[model_providers]`` table, created as a header-less super table if missing."""
    providers = doc.get(PROVIDERS_TABLE)
    if not isinstance(providers, MutableMapping):
        providers = tomlkit.table(is_super_table=True)
        doc[PROVIDERS_TABLE] = providers
        providers = doc[PROVIDERS_TABLE]
    return providers


class CodexCodec(FormatCodec):
    """Reads and writes the Codex provider selection and provider table."""

    @property
    def agent_kind(self) -> AgentKind:
        return AgentKind.CODEX

    @property
    def owned_fields(self) -> frozenset[str]:
        return frozenset({"endpoint_url", "api_key", "selected_model", "extensions"})

    def decode(self, raw_text: str, source_path: Path | None = None) -> ParsedAgentConfig:
        top_level: dict[str, str | None] = {}
        provider: dict[str, str | None] = {}
        current_table: str | None = None

        for line in raw_text.splitlines():
            name = _table_name(line)
            if name is not None:
                current_table = name
                continue
            parsed = _parse_line(line)
            if parsed is None:
                continue
            key, value = parsed
            if current_table is None:
                top_level.setdefault(key, value)
            elif current_table == MANAGED_TABLE:
                provider.setdefault(key, value)

        extensions = {}
        if top_level.get(KEY_REASONING_EFFORT):
            extensions[EXT_REASONING_EFFORT] = top_level[KEY_REASONING_EFFORT]

        return self._parsed(
            source_path,
            endpoint_url=provider.get("base_url"),
            api_key=provider.get("experimental_bearer_token"),
            selected_model=top_level.get(KEY_MODEL),
            extensions=extensions,
        )

    def encode(self, settings: CanonicalSettings, existing_text: str | None = None) -> str:
        doc = _load_document(existing_text)

        # Existing keys are replaced in place; new ones land before the first table
        doc[KEY_MODEL_PROVIDER] = MANAGED_PROVIDER_ID
        doc[KEY_MODEL] = settings.selected_model
        doc[KEY_REASONING_EFFORT] = settings.extension(EXT_REASONING_EFFORT, DEFAULT_REASONING_EFFORT)

        owned = {
            "name": MANAGED_PROVIDER_NAME,
            "base_url": api_base_url(settings.endpoint_url),
            "wire_api": "responses",
            "experimental_bearer_token": settings.api_key,
        }
        preceding = tomlkit.dumps(doc)
        providers = _providers(doc)
        managed = providers.get(MANAGED_PROVIDER_ID)
        if isinstance(managed, MutableMapping):
            for key, value in owned.items():
                managed[key] = value
        else:
            table = tomlkit.table()
            if preceding.strip() and not preceding.endswith("\n\n"):
                table.trivia.indent = "\n"
            for key, value in owned.items():
                table.add(key, value)
            providers[MANAGED_PROVIDER_ID] = table

        return _dump(doc)

    def strip(self, existing_text: str) -> str:
        try:
            doc = tomlkit.parse(existing_text)
        except TOMLKitError:
            return existing_text

        providers = doc.get(PROVIDERS_TABLE)
        if isinstance(providers, MutableMapping) and MANAGED_PROVIDER_ID in providers:
            del providers[MANAGED_PROVIDER_ID]
            if not providers:
                del doc[PROVIDERS_TABLE]

        if doc.get(KEY_MODEL_PROVIDER) == MANAGED_PROVIDER_ID:
            doc[KEY_MODEL_PROVIDER] = FALLBACK_PROVIDER

        return _dump(doc)


__all__ = ["CodexCodec", "MANAGED_TABLE"]
