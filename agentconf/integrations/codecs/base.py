"""Codec contract and the object-notation helpers shared by the JSON codecs.

A codec translates :class:`CanonicalSettings` to and from one agent's native
file syntax. It only touches the fields it owns: everything else in an
existing file survives ``encode`` and ``strip`` untouched.
"""

from __future__ import annotations

import json
import logging
import re
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any

from agentconf.integrations.agents import AgentKind, OperatingMode
from agentconf.integrations.endpoints import is_loopback_url, normalize_endpoint_url
from agentconf.models import CanonicalSettings, ParsedAgentConfig

logger = logging.getLogger(__name__)

# Provider id written wherever an agent needs a named provider block
MANAGED_PROVIDER_ID = "agentconf"
MANAGED_PROVIDER_NAME = "agentconf"


class FormatCodec(ABC):
    """Encode/decode the managed fields of one agent's configuration file.

    Contract:
        - ``decode`` never raises; unrecognized content is ignored and
          missing fields come back as None.
        - ``encode`` without existing content renders a complete skeleton;
          with existing content it merges, preserving unmanaged fields.
        - ``encode`` is deterministic: ``encode(s, encode(s, x)) == encode(s, x)``.
        - ``strip`` removes every managed field and keeps the rest.
    """

    @property
    @abstractmethod
    def agent_kind(self) -> AgentKind:
        """Agent this codec serves."""
        pass

    @property
    @abstractmethod
    def owned_fields(self) -> frozenset[str]:
        """CanonicalSettings fields that survive an encode/decode round trip."""
        pass

    @abstractmethod
    def decode(self, raw_text: str, source_path: Path | None = None) -> ParsedAgentConfig:
        """Extract managed fields from raw file content."""
        pass

    @abstractmethod
    def encode(self, settings: CanonicalSettings, existing_text: str | None = None) -> str:
        """Render file content for ``settings``, merged into ``existing_text``."""
        pass

    @abstractmethod
    def strip(self, existing_text: str) -> str:
        """Remove managed fields from ``existing_text``."""
        pass

    def _parsed(self, source_path: Path | None, **fields: Any) -> ParsedAgentConfig:
        """Build a ParsedAgentConfig.

        The endpoint is normalized and, unless given, the operating mode is
        derived from whether the endpoint is a loopback address.
        """
        endpoint_url = fields.get("endpoint_url")
        if endpoint_url:
            endpoint_url = fields["endpoint_url"] = normalize_endpoint_url(endpoint_url)
        if "operating_mode" not in fields and endpoint_url:
            fields["operating_mode"] = (
                OperatingMode.LOCAL if is_loopback_url(endpoint_url) else OperatingMode.REMOTE
            )
        return ParsedAgentConfig(agent_kind=self.agent_kind, source_path=source_path, **fields)


# --- Object notation helpers ---


def load_json_object(text: str | None) -> dict[str, Any] | None:
    """Parse ``text`` as a JSON object.

    Returns:
        The object, an empty dict for blank text, or None when the text is
        not valid JSON or its top level is not an object.
    """
    if text is None or not text.strip():
        return {}
    try:
        data = json.loads(text)
    except ValueError:
        return None
    return data if isinstance(data, dict) else None


def dump_json(data: dict[str, Any]) -> str:
    """Render an object the same way on every call (insertion order, 2-space indent)."""
    return json.dumps(data, indent=2, ensure_ascii=False) + "\n"


def merge_base(kind: AgentKind, existing_text: str | None) -> dict[str, Any]:
    """Object to merge managed fields into.

    Unparseable existing content is replaced by a fresh object; the
    snapshot taken before the write still holds the original bytes.
    """
    data = load_json_object(existing_text)
    if data is None:
        logger.warning(
            f"Existing {kind.display_name} config is not a JSON object, rendering a fresh one"
        )
        return {}
    return data


def child_object(parent: dict[str, Any], key: str) -> dict[str, Any]:
    """Return ``parent[key]`` as a dict, replacing it if it is not one."""
    value = parent.get(key)
    if not isinstance(value, dict):
        value = {}
        parent[key] = value
    return value


def string_value(value: Any) -> str | None:
    """Non-empty string or None."""
    if isinstance(value, str) and value.strip():
        return value.strip()
    return None


def scan_string_field(text: str, key: str) -> str | None:
    """Find ``"key": "value"`` anywhere in text that is not valid JSON.

    Used on hand-edited files with comments, trailing commas or truncation.
    The first occurrence wins.
    """
    pattern = re.compile(r'"' + re.escape(key) + r'"\s*:\s*"((?:[^"\\\n]|\\.)*)"')
    match = pattern.search(text)
    if not match:
        return None
    try:
        value = json.loads(f'"{match.group(1)}"')
    except ValueError:
        value = match.group(1)
    return string_value(value)


__all__ = [
    "FormatCodec",
    "MANAGED_PROVIDER_ID",
    "MANAGED_PROVIDER_NAME",
    "load_json_object",
    "dump_json",
    "merge_base",
    "child_object",
    "string_value",
    "scan_string_field",
]
