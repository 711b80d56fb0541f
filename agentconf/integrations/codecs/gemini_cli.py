"""Gemini CLI codec for ``~/.gemini/.env``.

The file is a list of ``KEY=value`` lines, optionally prefixed with
``export``. Local mode points ``CODE_ASSIST_ENDPOINT`` at the proxy and
keeps the user's OAuth login; remote mode sets ``GOOGLE_GEMINI_BASE_URL``
and ``GEMINI_API_KEY``. Unlike the other agents, the operating mode is
encoded by which variables are present.
"""

from __future__ import annotations

import re
from pathlib import Path

from agentconf.integrations.agents import AgentKind, OperatingMode
from agentconf.integrations.codecs.base import FormatCodec
from agentconf.models import CanonicalSettings, ParsedAgentConfig

ENV_CODE_ASSIST_ENDPOINT = "CODE_ASSIST_ENDPOINT"
ENV_BASE_URL = "GOOGLE_GEMINI_BASE_URL"
ENV_API_KEY = "GEMINI_API_KEY"
ENV_MODEL = "GEMINI_MODEL"

_MODE_KEYS: dict[OperatingMode, tuple[str, ...]] = {
    OperatingMode.LOCAL: (ENV_CODE_ASSIST_ENDPOINT,),
    OperatingMode.REMOTE: (ENV_BASE_URL, ENV_API_KEY),
}
MANAGED_KEYS = (ENV_CODE_ASSIST_ENDPOINT, ENV_BASE_URL, ENV_API_KEY, ENV_MODEL)

MARKER_COMMENT = "# Managed by agentconf"

_LINE_RE = re.compile(r"^(\s*)(export\s+)?([A-Za-z_][A-Za-z0-9_]*)\s*=\s*(.*)$")


def _parse_value(raw: str) -> str:
    raw = raw.strip()
    if len(raw) >= 2 and raw[0] == raw[-1] == '"':
        return raw[1:-1].replace('\\"', '"').replace("\\\\", "\\")
    if len(raw) >= 2 and raw[0] == raw[-1] == "'":
        return raw[1:-1]
    # Unquoted values may carry a trailing comment
    return re.split(r"\s+#", raw, maxsplit=1)[0].strip()


def _quote(value: str) -> str:
    escaped = value.replace("\\", "\\\\").replace('"', '\\"')
    return f'"{escaped}"'


def _match(line: str) -> re.Match[str] | None:
    if line.lstrip().startswith("#"):
        return None
    return _LINE_RE.match(line)


class GeminiCliCodec(FormatCodec):
    """Reads and writes the Gemini CLI environment file."""

    @property
    def agent_kind(self) -> AgentKind:
        return AgentKind.GEMINI_CLI

    @property
    def owned_fields(self) -> frozenset[str]:
        # The key is only written in remote mode
        return frozenset({"endpoint_url", "selected_model", "operating_mode"})

    def decode(self, raw_text: str, source_path: Path | None = None) -> ParsedAgentConfig:
        values: dict[str, str] = {}
        for line in raw_text.splitlines():
            match = _match(line)
            if match and match.group(3) in MANAGED_KEYS:
                value = _parse_value(match.group(4))
                if value:
                    values.setdefault(match.group(3), value)

        endpoint_url = None
        operating_mode = None
        if values.get(ENV_CODE_ASSIST_ENDPOINT):
            endpoint_url = values[ENV_CODE_ASSIST_ENDPOINT]
            operating_mode = OperatingMode.LOCAL
        elif values.get(ENV_BASE_URL):
            endpoint_url = values[ENV_BASE_URL]
            operating_mode = OperatingMode.REMOTE

        return self._parsed(
            source_path,
            endpoint_url=endpoint_url,
            api_key=values.get(ENV_API_KEY),
            selected_model=values.get(ENV_MODEL),
            operating_mode=operating_mode,
        )

    def encode(self, settings: CanonicalSettings, existing_text: str | None = None) -> str:
        mode = settings.operating_mode
        wanted: dict[str, str] = {}
        if mode is OperatingMode.LOCAL:
            wanted[ENV_CODE_ASSIST_ENDPOINT] = settings.endpoint_url
        else:
            wanted[ENV_BASE_URL] = settings.endpoint_url
            wanted[ENV_API_KEY] = settings.api_key
        if settings.selected_model:
            wanted[ENV_MODEL] = settings.selected_model

        # Keys belonging to the other mode
        stale = {key for other, keys in _MODE_KEYS.items() if other is not mode for key in keys}
        stale.difference_update(wanted)
        if ENV_MODEL not in wanted:
            stale.add(ENV_MODEL)

        lines: list[str] = []
        written: set[str] = set()
        for line in (existing_text or "").splitlines():
            match = _match(line)
            if match is None:
                lines.append(line)
                continue
            indent, export, key = match.group(1), match.group(2) or "", match.group(3)
            if key in wanted:
                if key not in written:
                    lines.append(f"{indent}{export}{key}={_quote(wanted[key])}")
                    written.add(key)
                continue
            if key in stale:
                continue
            lines.append(line)

        missing = [key for key in wanted if key not in written]
        if missing:
            if MARKER_COMMENT not in (line.strip() for line in lines):
                while lines and not lines[-1].strip():
                    lines.pop()
                if lines:
                    lines.append("")
                lines.append(MARKER_COMMENT)
            lines.extend(f"{key}={_quote(wanted[key])}" for key in missing)

        return "\n".join(lines) + "\n"

    def strip(self, existing_text: str) -> str:
        lines = []
        for line in existing_text.splitlines():
            if line.strip() == MARKER_COMMENT:
                continue
            match = _match(line)
            if match and match.group(3) in MANAGED_KEYS:
                continue
            lines.append(line)
        while lines and not lines[-1].strip():
            lines.pop()
        return "\n".join(lines) + "\n" if lines else ""


__all__ = ["GeminiCliCodec", "MANAGED_KEYS", "MARKER_COMMENT"]
