"""Helpers that keep credential material out of logs and terminal output."""

from __future__ import annotations

# Keys containing these substrings are considered sensitive and should not be logged
SENSITIVE_KEY_PATTERNS = ("TOKEN", "KEY", "SECRET", "PASSWORD", "CREDENTIAL")

_VISIBLE_SUFFIX = 4


def is_sensitive_key(key: str) -> bool:
    """Check if a configuration key holds sensitive data.

    Works for environment-style names (``ANTHROPIC_AUTH_TOKEN``) as well as
    camelCase object keys (``apiKey``).

    Args:
        key: The configuration key name

    Returns:
        True if the key is considered sensitive
    """
    key_upper = key.upper()
    return any(pattern in key_upper for pattern in SENSITIVE_KEY_PATTERNS)


def redact(value: str | None) -> str:
    """Mask a secret, keeping only its last few characters.

    >>> redact("sk-abcdef123456")
    '****3456'
    >>> redact("abc")
    '****'
    """
    if not value:
        return "<empty>"
    if len(value) <= _VISIBLE_SUFFIX * 2:
        return "****"
    return "****" + value[-_VISIBLE_SUFFIX:]


__all__ = [
    "SENSITIVE_KEY_PATTERNS",
    "is_sensitive_key",
    "redact",
]
