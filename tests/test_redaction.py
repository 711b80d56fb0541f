"""Tests for agentconf.utils.redaction module."""

import pytest

from agentconf.utils.redaction import is_sensitive_key, redact


class TestIsSensitiveKey:
    @pytest.mark.parametrize(
        "key",
        ["ANTHROPIC_AUTH_TOKEN", "GEMINI_API_KEY", "apiKey", "experimental_bearer_token", "client_secret"],
    )
    def test_sensitive(self, key):
        assert is_sensitive_key(key)

    @pytest.mark.parametrize("key", ["ANTHROPIC_BASE_URL", "model", "BACKUP_RETENTION"])
    def test_not_sensitive(self, key):
        assert not is_sensitive_key(key)


class TestRedact:
    def test_keeps_last_four(self):
        assert redact("sk-abcdef123456") == "****3456"

    def test_short_values_fully_masked(self):
        assert redact("12345678") == "****"

    @pytest.mark.parametrize("value", ["", None])
    def test_empty(self, value):
        assert redact(value) == "<empty>"
