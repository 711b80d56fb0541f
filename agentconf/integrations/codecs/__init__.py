"""Format codecs, one per agent kind.

Use :func:`get_codec` to look up the codec for an :class:`AgentKind`.
"""

from agentconf.integrations.agents import AgentKind
from agentconf.integrations.codecs.amp import AmpCodec
from agentconf.integrations.codecs.base import MANAGED_PROVIDER_ID, FormatCodec
from agentconf.integrations.codecs.claude_code import ClaudeCodeCodec
from agentconf.integrations.codecs.codex import CodexCodec
from agentconf.integrations.codecs.factory_droid import FactoryDroidCodec
from agentconf.integrations.codecs.gemini_cli import GeminiCliCodec
from agentconf.integrations.codecs.opencode import OpenCodeCodec

_CODECS: dict[AgentKind, FormatCodec] = {
    AgentKind.CLAUDE_CODE: ClaudeCodeCodec(),
    AgentKind.CODEX: CodexCodec(),
    AgentKind.GEMINI_CLI: GeminiCliCodec(),
    AgentKind.AMP: AmpCodec(),
    AgentKind.OPENCODE: OpenCodeCodec(),
    AgentKind.FACTORY_DROID: FactoryDroidCodec(),
}


def get_codec(kind: AgentKind) -> FormatCodec:
    """Return the codec for an agent kind.

    Codecs are stateless, so one shared instance per kind is returned.
    """
    return _CODECS[kind]


__all__ = [
    "FormatCodec",
    "MANAGED_PROVIDER_ID",
    "get_codec",
    "AmpCodec",
    "ClaudeCodeCodec",
    "CodexCodec",
    "FactoryDroidCodec",
    "GeminiCliCodec",
    "OpenCodeCodec",
]
