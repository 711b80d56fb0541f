"""Read agent configuration files through their codecs."""

from __future__ import annotations

import logging
from pathlib import Path

from agentconf.integrations.agents import AgentKind
from agentconf.integrations.codecs import get_codec
from agentconf.models import NotConfigured, ParsedAgentConfig
from agentconf.utils.errors import ReadFailed

logger = logging.getLogger(__name__)


class ConfigReader:
    """Load an agent's config file and decode the managed fields.

    Attributes:
        home: Directory the fixed per-agent paths are resolved under
    """

    def __init__(self, home: Path | None = None) -> None:
        self.home = home or Path.home()

    def path_for(self, kind: AgentKind) -> Path:
        return kind.config_path(self.home)

    def read_raw(self, kind: AgentKind) -> str | None:
        """Return the file content, or None if the file does not exist.

        Bytes that are not valid UTF-8 are replaced rather than rejected.

        Raises:
            ReadFailed: If the file exists but cannot be read
        """
        path = self.path_for(kind)
        try:
            data = path.read_bytes()
        except FileNotFoundError:
            return None
        except OSError as e:
            raise ReadFailed(f"Cannot read {kind.display_name} config at {path}: {e}", path=path) from e
        return data.decode("utf-8", errors="replace")

    def read(self, kind: AgentKind) -> ParsedAgentConfig | NotConfigured:
        """Read and decode the agent's configuration.

        Returns:
            ParsedAgentConfig with the fields found, or NotConfigured when
            the file does not exist

        Raises:
            ReadFailed: If the file exists but cannot be read
        """
        path = self.path_for(kind)
        raw_text = self.read_raw(kind)
        if raw_text is None:
            logger.debug(f"No {kind.display_name} config at {path}")
            return NotConfigured(agent_kind=kind, path=path)
        return get_codec(kind).decode(raw_text, source_path=path)


__all__ = ["ConfigReader"]
