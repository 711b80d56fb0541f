"""Connectivity probe for generated agent configurations.

The probe checks the endpoint and key directly with one model-listing
request in the provider's protocol. It does not depend on the agent
binary being installed and never raises: every outcome is a ProbeResult.
"""

from __future__ import annotations

import asyncio
import logging
import time

import httpx

from agentconf.config.settings import DEFAULT_PROBE_TIMEOUT_SECONDS
from agentconf.integrations.agents import AgentKind
from agentconf.integrations.endpoints import endpoint_problem
from agentconf.integrations.provider_http import (
    SAFETY_MARGIN_SECONDS,
    classify_exception,
    classify_response,
    execute_get,
    models_request,
)
from agentconf.models import CanonicalSettings, FailureCategory, ProbeResult
from agentconf.utils.logging import log_message

logger = logging.getLogger(__name__)


class ConnectivityTester:
    """Issue lightweight probes and classify their outcome.

    Attributes:
        timeout_seconds: HTTP timeout for one probe. An asyncio safety
            timeout slightly above it bounds the whole call.
    """

    def __init__(
        self,
        timeout_seconds: float = DEFAULT_PROBE_TIMEOUT_SECONDS,
        http_client: httpx.AsyncClient | None = None,
    ) -> None:
        self.timeout_seconds = timeout_seconds
        self._http_client = http_client

    async def probe(self, kind: AgentKind, settings: CanonicalSettings) -> ProbeResult:
        """Probe ``settings.endpoint_url`` with ``settings.api_key``.

        Args:
            kind: Agent whose provider protocol to speak
            settings: Endpoint and key to check

        Returns:
            ProbeResult; never raises for network or protocol failures
        """
        problem = endpoint_problem(settings.endpoint_url)
        if problem:
            return ProbeResult.failed(FailureCategory.ENDPOINT_INVALID, problem)

        url, headers = models_request(kind.probe_style, settings.endpoint_url, settings.api_key)
        log_message(f"Probing {kind.value} endpoint {url}")

        start = time.monotonic()
        try:
            response = await asyncio.wait_for(
                execute_get(
                    url,
                    http_client=self._http_client,
                    timeout_seconds=self.timeout_seconds,
                    headers=headers,
                ),
                timeout=self.timeout_seconds + SAFETY_MARGIN_SECONDS,
            )
        except (httpx.HTTPError, httpx.InvalidURL, asyncio.TimeoutError, OSError, UnicodeEncodeError) as e:
            category, message = classify_exception(e)
            logger.debug(f"Probe of {url} failed: {message}", exc_info=True)
            return ProbeResult.failed(category, message, _elapsed_ms(start))

        latency_ms = _elapsed_ms(start)
        category, message, payload = classify_response(response)
        if category is not FailureCategory.NONE:
            log_message(f"Probe of {url} failed: {category.value} ({message})")
            return ProbeResult.failed(category, message, latency_ms)

        log_message(f"Probe of {url} succeeded in {latency_ms}ms")
        return ProbeResult.ok(latency_ms, _first_model_id(payload))


def _elapsed_ms(start: float) -> int:
    return int((time.monotonic() - start) * 1000)


def _first_model_id(payload: dict | None) -> str | None:
    if not payload:
        return None
    for key in ("data", "models"):
        items = payload.get(key)
        if isinstance(items, list):
            for item in items:
                if isinstance(item, dict):
                    model_id = item.get("id") or item.get("name")
                    if isinstance(model_id, str) and model_id:
                        return model_id.removeprefix("models/")
    return None


__all__ = ["ConnectivityTester"]
