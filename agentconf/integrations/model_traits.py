"""Model family heuristics.

Model ids are matched by substring to pick context limits, input
modalities and reasoning options. The same heuristics tag catalog entries
with capabilities.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any


@dataclass(frozen=True)
class ModelLimits:
    context: int
    output: int
    vision: bool


_DEFAULT_LIMITS = ModelLimits(context=128000, output=16384, vision=False)

# Checked in order, first match wins
_FAMILY_LIMITS: tuple[tuple[tuple[str, ...], ModelLimits], ...] = (
    (("claude",), ModelLimits(context=200000, output=64000, vision=True)),
    (("gemini",), ModelLimits(context=1048576, output=65536, vision=True)),
    (("gpt",), ModelLimits(context=400000, output=32768, vision=True)),
    (("qwen", "vl"), ModelLimits(context=128000, output=16384, vision=True)),
)

_REASONING_PREFIXES = ("gpt-5", "o1", "o3", "o4")

THINKING_BUDGET_TOKENS = 10000


def model_limits(model_id: str) -> ModelLimits:
    lowered = model_id.lower()
    for needles, limits in _FAMILY_LIMITS:
        if all(needle in lowered for needle in needles):
            return limits
    return _DEFAULT_LIMITS


def is_thinking_model(model_id: str) -> bool:
    return "thinking" in model_id.lower()


def is_reasoning_model(model_id: str) -> bool:
    lowered = model_id.lower()
    return "codex" in lowered or lowered.startswith(_REASONING_PREFIXES)


def reasoning_effort(model_id: str) -> str:
    """Default reasoning effort for a reasoning model: high for max, low for mini."""
    lowered = model_id.lower()
    if "max" in lowered:
        return "high"
    if "mini" in lowered:
        return "low"
    return "medium"


def display_name_for(model_id: str) -> str:
    """Title-case a model id: ``claude-sonnet-4-5`` becomes ``Claude Sonnet 4 5``."""
    return " ".join(part.capitalize() for part in model_id.split("-") if part)


def capability_tags(model_id: str, owned_by: str | None = None) -> tuple[str, ...]:
    """Capability tags for a catalog entry, owner first."""
    tags: list[str] = []
    if owned_by:
        tags.append(f"owner:{owned_by}")
    if model_limits(model_id).vision:
        tags.append("vision")
    if is_thinking_model(model_id):
        tags.append("thinking")
    if is_reasoning_model(model_id) or is_thinking_model(model_id):
        tags.append("reasoning")
    return tuple(tags)


def opencode_model_entry(model_id: str) -> dict[str, Any]:
    """OpenCode provider ``models`` entry for one model id."""
    limits = model_limits(model_id)
    entry: dict[str, Any] = {
        "name": display_name_for(model_id),
        "limit": {"context": limits.context, "output": limits.output},
        "attachment": limits.vision,
        "modalities": {
            "input": ["text", "image"] if limits.vision else ["text"],
            "output": ["text"],
        },
    }

    if is_thinking_model(model_id):
        entry["reasoning"] = True
        entry["options"] = {"thinking": {"type": "enabled", "budgetTokens": THINKING_BUDGET_TOKENS}}
    elif is_reasoning_model(model_id):
        entry["reasoning"] = True
        entry["options"] = {"reasoning": {"effort": reasoning_effort(model_id)}}

    return entry


__all__ = [
    "ModelLimits",
    "model_limits",
    "is_thinking_model",
    "is_reasoning_model",
    "reasoning_effort",
    "display_name_for",
    "capability_tags",
    "opencode_model_entry",
]
