"""Tests for agentconf.integrations.model_traits module."""

import pytest

from agentconf.integrations.model_traits import (
    THINKING_BUDGET_TOKENS,
    capability_tags,
    display_name_for,
    is_reasoning_model,
    is_thinking_model,
    model_limits,
    opencode_model_entry,
    reasoning_effort,
)


class TestModelLimits:
    @pytest.mark.parametrize(
        "model_id,context,vision",
        [
            ("claude-sonnet-4-5", 200000, True),
            ("gemini-2.5-pro", 1048576, True),
            ("gpt-5-codex", 400000, True),
            ("qwen2.5-vl-72b", 128000, True),
            ("qwen3-coder", 128000, False),
            ("deepseek-v3", 128000, False),
        ],
    )
    def test_family_limits(self, model_id, context, vision):
        limits = model_limits(model_id)

        assert limits.context == context
        assert limits.vision is vision


class TestReasoning:
    @pytest.mark.parametrize("model_id", ["gpt-5", "o3-mini", "o4-mini", "gpt-5-codex-max", "my-codex"])
    def test_reasoning_models(self, model_id):
        assert is_reasoning_model(model_id)

    @pytest.mark.parametrize("model_id", ["gpt-4o", "claude-opus-4-1", "gemini-2.5-pro"])
    def test_non_reasoning_models(self, model_id):
        assert not is_reasoning_model(model_id)

    @pytest.mark.parametrize(
        "model_id,effort",
        [("gpt-5-codex-max", "high"), ("gpt-5-mini", "low"), ("gpt-5", "medium")],
    )
    def test_effort(self, model_id, effort):
        assert reasoning_effort(model_id) == effort

    def test_thinking(self):
        assert is_thinking_model("claude-sonnet-4-5-Thinking")
        assert not is_thinking_model("claude-sonnet-4-5")


class TestDisplayAndTags:
    def test_display_name(self):
        assert display_name_for("claude-sonnet-4-5") == "Claude Sonnet 4 5"

    def test_tags_order(self):
        assert capability_tags("claude-opus-4-1-thinking", "anthropic") == (
            "owner:anthropic",
            "vision",
            "thinking",
            "reasoning",
        )

    def test_tags_without_owner(self):
        assert capability_tags("deepseek-v3") == ()


class TestOpenCodeModelEntry:
    def test_plain_model(self):
        entry = opencode_model_entry("claude-sonnet-4-5")

        assert entry == {
            "name": "Claude Sonnet 4 5",
            "limit": {"context": 200000, "output": 64000},
            "attachment": True,
            "modalities": {"input": ["text", "image"], "output": ["text"]},
        }

    def test_thinking_model(self):
        entry = opencode_model_entry("claude-opus-4-1-thinking")

        assert entry["reasoning"] is True
        assert entry["options"] == {"thinking": {"type": "enabled", "budgetTokens": THINKING_BUDGET_TOKENS}}

    def test_reasoning_model(self):
        entry = opencode_model_entry("gpt-5-codex")

        assert entry["options"] == {"reasoning": {"effort": "medium"}}

    def test_text_only_model(self):
        entry = opencode_model_entry("deepseek-v3")

        assert entry["modalities"]["input"] == ["text"]
        assert entry["attachment"] is False
