"""Endpoint URL handling shared by the codecs, the probe and the model catalog."""

from __future__ import annotations

import ipaddress
from urllib.parse import urlsplit

_LOOPBACK_HOSTNAMES = frozenset({"localhost", "localhost.localdomain"})


def normalize_endpoint_url(url: str) -> str:
    """Reduce an endpoint URL to its base form.

    Surrounding whitespace, trailing slashes and a trailing ``/v1`` path
    segment are removed so every consumer can append its own suffix.

    Examples:
        >>> normalize_endpoint_url(" https://proxy.local:8317/v1/ ")
        'https://proxy.local:8317'
    """
    normalized = url.strip().rstrip("/")
    if normalized.endswith("/v1"):
        normalized = normalized[: -len("/v1")].rstrip("/")
    return normalized


def api_base_url(url: str) -> str:
    """Base URL with the ``/v1`` suffix OpenAI-compatible clients expect."""
    return f"{normalize_endpoint_url(url)}/v1"


def endpoint_problem(url: str) -> str | None:
    """Describe why ``url`` is not a usable endpoint, or return None if it is.

    Only the shape is checked: an http(s) scheme and a host.
    """
    if not url or not url.strip():
        return "Endpoint URL is empty"

    try:
        parts = urlsplit(url.strip())
        # Accessing port validates it
        _ = parts.port
    except ValueError as e:
        return f"Endpoint URL is malformed: {e}"

    if parts.scheme not in ("http", "https"):
        return f"Endpoint URL must use http or https, got '{parts.scheme or url}'"
    if not parts.hostname:
        return "Endpoint URL has no host"
    return None


def is_loopback_url(url: str | None) -> bool:
    """Check whether an endpoint points at this machine."""
    if not url:
        return False
    try:
        host = urlsplit(url.strip()).hostname
    except ValueError:
        return False
    if not host:
        return False
    if host.lower() in _LOOPBACK_HOSTNAMES:
        return True
    try:
        return ipaddress.ip_address(host).is_loopback
    except ValueError:
        return False


__all__ = [
    "normalize_endpoint_url",
    "api_base_url",
    "endpoint_problem",
    "is_loopback_url",
]
