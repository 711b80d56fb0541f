"""Data model for the agent configuration lifecycle.

Canonical settings flow into the codecs; parsed configs, snapshots, probe
and catalog results flow back out to callers. All records are immutable.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from pathlib import Path
from types import MappingProxyType

from agentconf.integrations.agents import AgentKind, OperatingMode
from agentconf.integrations.endpoints import is_loopback_url, normalize_endpoint_url


def _freeze(mapping: Mapping[str, str] | None) -> Mapping[str, str]:
    return MappingProxyType(dict(mapping or {}))


@dataclass(frozen=True)
class CanonicalSettings:
    """Format-neutral provider settings chosen by the user.

    Attributes:
        endpoint_url: Provider or proxy endpoint, normalized on construction
        api_key: API or management key (opaque)
        selected_model: Model the agent should use
        operating_mode: Local proxy or remote proxy
        extensions: Per-agent extra fields (e.g. ``reasoning_effort``)
        available_models: Model ids to publish in agents that enumerate models
    """

    endpoint_url: str
    api_key: str
    selected_model: str
    operating_mode: OperatingMode = OperatingMode.LOCAL
    extensions: Mapping[str, str] = field(default_factory=dict)
    available_models: tuple[str, ...] = ()

    def __post_init__(self) -> None:
        object.__setattr__(self, "endpoint_url", normalize_endpoint_url(self.endpoint_url))
        object.__setattr__(self, "api_key", self.api_key.strip())
        object.__setattr__(self, "selected_model", self.selected_model.strip())
        object.__setattr__(self, "extensions", _freeze(self.extensions))
        object.__setattr__(self, "available_models", tuple(self.available_models))

    def extension(self, key: str, default: str | None = None) -> str | None:
        value = self.extensions.get(key)
        return value if value else default

    def published_models(self) -> list[str]:
        """Selected model first, then the available models, without duplicates."""
        ordered: list[str] = []
        for model in (self.selected_model, *self.available_models):
            if model and model not in ordered:
                ordered.append(model)
        return ordered

    def __repr__(self) -> str:
        # api_key deliberately omitted
        return (
            f"CanonicalSettings(endpoint_url={self.endpoint_url!r}, "
            f"selected_model={self.selected_model!r}, "
            f"operating_mode={self.operating_mode.value!r})"
        )


@dataclass(frozen=True)
class ParsedAgentConfig:
    """Fields found in an existing agent configuration file.

    Every field is independently optional: None means the file did not
    contain it, which is not an error.
    """

    agent_kind: AgentKind
    source_path: Path | None = None
    endpoint_url: str | None = None
    api_key: str | None = None
    selected_model: str | None = None
    operating_mode: OperatingMode | None = None
    extensions: Mapping[str, str] = field(default_factory=dict)

    def __post_init__(self) -> None:
        object.__setattr__(self, "extensions", _freeze(self.extensions))

    @property
    def points_to_local_proxy(self) -> bool:
        return is_loopback_url(self.endpoint_url)

    @property
    def is_empty(self) -> bool:
        return (
            self.endpoint_url is None
            and self.api_key is None
            and self.selected_model is None
            and not self.extensions
        )

    def __repr__(self) -> str:
        key_state = "set" if self.api_key else "unset"
        return (
            f"ParsedAgentConfig(agent_kind={self.agent_kind.value!r}, "
            f"endpoint_url={self.endpoint_url!r}, selected_model={self.selected_model!r}, "
            f"api_key={key_state})"
        )


@dataclass(frozen=True)
class NotConfigured:
    """The agent has no configuration file yet."""

    agent_kind: AgentKind
    path: Path


@dataclass(frozen=True)
class ConfigSnapshot:
    """A byte-identical backup of an agent config taken before an overwrite."""

    agent_kind: AgentKind
    source_path: Path
    captured_at: datetime
    storage_path: Path
    size_bytes: int


class FailureCategory(Enum):
    """Outcome classes shared by connectivity probes and model listing."""

    NONE = "none"
    AUTH_FAILURE = "auth_failure"
    NETWORK_FAILURE = "network_failure"
    ENDPOINT_INVALID = "endpoint_invalid"
    TIMEOUT = "timeout"


@dataclass(frozen=True)
class ProbeResult:
    """Classified outcome of one connectivity probe."""

    success: bool
    failure_category: FailureCategory = FailureCategory.NONE
    raw_message: str | None = None
    latency_ms: int | None = None
    model_responded: str | None = None

    @classmethod
    def ok(cls, latency_ms: int, model_responded: str | None = None) -> ProbeResult:
        return cls(success=True, latency_ms=latency_ms, model_responded=model_responded)

    @classmethod
    def failed(
        cls,
        category: FailureCategory,
        message: str | None = None,
        latency_ms: int | None = None,
    ) -> ProbeResult:
        return cls(
            success=False,
            failure_category=category,
            raw_message=message,
            latency_ms=latency_ms,
        )


@dataclass(frozen=True)
class ModelDescriptor:
    """One model offered by an endpoint."""

    id: str
    display_name: str
    capability_tags: tuple[str, ...] = ()


@dataclass(frozen=True)
class CatalogResult:
    """Models listed by an endpoint, or the classified reason there are none.

    ``next_cursor`` is set when the endpoint has more pages; pass it back
    as ``cursor`` to continue.
    """

    models: tuple[ModelDescriptor, ...] = ()
    failure_category: FailureCategory = FailureCategory.NONE
    raw_message: str | None = None
    next_cursor: str | None = None

    @property
    def success(self) -> bool:
        return self.failure_category is FailureCategory.NONE


@dataclass(frozen=True)
class GenerateOutcome:
    """Result of writing an agent configuration."""

    agent_kind: AgentKind
    path: Path
    snapshot: ConfigSnapshot | None = None
    probe: ProbeResult | None = None


__all__ = [
    "CanonicalSettings",
    "ParsedAgentConfig",
    "NotConfigured",
    "ConfigSnapshot",
    "FailureCategory",
    "ProbeResult",
    "ModelDescriptor",
    "CatalogResult",
    "GenerateOutcome",
]
