"""Agent integrations for agentconf.

This package contains:
- agents: Supported agent kinds, operating modes and provider protocols
- endpoints: Endpoint URL normalization and checks
- codecs: One format codec per agent kind
- connectivity: Connectivity probe
- model_catalog: Model listing
- model_traits: Model family heuristics
"""

from agentconf.integrations.agents import (
    AgentKind,
    FormatFamily,
    OperatingMode,
    ProbeStyle,
    parse_agent_kind,
    parse_operating_mode,
)
from agentconf.integrations.endpoints import (
    api_base_url,
    endpoint_problem,
    is_loopback_url,
    normalize_endpoint_url,
)

# Note: codecs, connectivity and model_catalog import agentconf.models,
# which imports this package. Import them from their modules directly.

__all__ = [
    # Agents
    "AgentKind",
    "FormatFamily",
    "OperatingMode",
    "ProbeStyle",
    "parse_agent_kind",
    "parse_operating_mode",
    # Endpoints
    "api_base_url",
    "endpoint_problem",
    "is_loopback_url",
    "normalize_endpoint_url",
]
