"""HTTP plumbing shared by the connectivity probe and the model catalog.

Both issue one GET against the provider's model listing and classify the
outcome into a :class:`FailureCategory` instead of raising.
"""

from __future__ import annotations

import asyncio
from typing import Any

import httpx

from agentconf.integrations.agents import ProbeStyle
from agentconf.integrations.endpoints import normalize_endpoint_url
from agentconf.models import FailureCategory

ANTHROPIC_VERSION = "2023-06-01"

# Grace period on top of the HTTP timeout before asyncio gives up
SAFETY_MARGIN_SECONDS = 2.0


def models_request(style: ProbeStyle, endpoint_url: str, api_key: str) -> tuple[str, dict[str, str]]:
    """Build the model-listing URL and auth headers for a provider protocol."""
    base = normalize_endpoint_url(endpoint_url)
    headers: dict[str, str] = {"Accept": "application/json"}

    if style is ProbeStyle.GEMINI:
        url = f"{base}/v1beta/models"
        if api_key:
            headers["x-goog-api-key"] = api_key
        return url, headers

    url = f"{base}/v1/models"
    if style is ProbeStyle.ANTHROPIC:
        headers["anthropic-version"] = ANTHROPIC_VERSION
        if api_key:
            headers["x-api-key"] = api_key
    if api_key:
        # Proxies accept the bearer form for every protocol
        headers["Authorization"] = f"Bearer {api_key}"
    return url, headers


async def execute_get(
    url: str,
    *,
    http_client: httpx.AsyncClient | None = None,
    timeout_seconds: float,
    headers: dict[str, str] | None = None,
    params: dict[str, str] | None = None,
) -> httpx.Response:
    """GET using the injected client or a short-lived one.

    The timeout is applied per request even with a shared client. Status
    codes are not raised; callers classify the response.
    """
    kwargs: dict[str, Any] = {}
    if headers is not None:
        kwargs["headers"] = headers
    if params is not None:
        kwargs["params"] = params

    timeout = httpx.Timeout(timeout_seconds)
    if http_client is not None:
        return await http_client.get(url, timeout=timeout, **kwargs)

    async with httpx.AsyncClient(timeout=timeout) as client:
        return await client.get(url, **kwargs)


def classify_exception(exc: BaseException) -> tuple[FailureCategory, str]:
    """Map a transport-level exception to a failure category and message."""
    if isinstance(exc, UnicodeEncodeError):
        # httpx encodes header values as ASCII; only the key is user supplied
        return FailureCategory.AUTH_FAILURE, "API key contains characters that cannot be sent in a header"
    if isinstance(exc, (httpx.TimeoutException, asyncio.TimeoutError)):
        return FailureCategory.TIMEOUT, "Request timed out"
    if isinstance(exc, (httpx.InvalidURL, httpx.UnsupportedProtocol)):
        return FailureCategory.ENDPOINT_INVALID, f"Invalid endpoint: {exc}"
    if isinstance(exc, httpx.ConnectError):
        return FailureCategory.NETWORK_FAILURE, f"Connection failed: {exc}"
    return FailureCategory.NETWORK_FAILURE, f"{type(exc).__name__}: {exc}"


def classify_response(response: httpx.Response) -> tuple[FailureCategory, str | None, dict[str, Any] | None]:
    """Classify an HTTP response.

    Returns:
        Tuple of (category, message, payload). ``payload`` is the decoded
        JSON object for successful responses and None otherwise.
    """
    status = response.status_code
    if status in (401, 403):
        return FailureCategory.AUTH_FAILURE, f"HTTP {status}: {_error_message(response)}", None
    if status >= 500:
        return FailureCategory.NETWORK_FAILURE, f"HTTP {status}: {_error_message(response)}", None
    if not 200 <= status < 300:
        return FailureCategory.ENDPOINT_INVALID, f"HTTP {status}: {_error_message(response)}", None

    try:
        payload = response.json()
    except ValueError:
        return FailureCategory.ENDPOINT_INVALID, "Response is not JSON", None
    if not isinstance(payload, dict):
        return FailureCategory.ENDPOINT_INVALID, "Response is not a JSON object", None
    return FailureCategory.NONE, None, payload


def _error_message(response: httpx.Response) -> str:
    """Best-effort error text: ``error.message`` from the body, else the reason phrase."""
    try:
        payload = response.json()
    except ValueError:
        payload = None

    if isinstance(payload, dict):
        error = payload.get("error")
        if isinstance(error, dict) and isinstance(error.get("message"), str):
            return error["message"]
        if isinstance(error, str):
            return error
        if isinstance(payload.get("message"), str):
            return payload["message"]
    return response.reason_phrase or "request failed"


__all__ = [
    "ANTHROPIC_VERSION",
    "SAFETY_MARGIN_SECONDS",
    "models_request",
    "execute_get",
    "classify_exception",
    "classify_response",
]
