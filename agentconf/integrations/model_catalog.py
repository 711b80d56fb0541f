"""Model listing for the model picker.

Queries an endpoint's model listing and returns descriptors in server
order. Failures come back as an empty CatalogResult carrying the same
classification the connectivity probe uses, so callers handle both through
one code path. No state is kept between calls: pagination is driven by the
cursor the caller passes back.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Any

import httpx

from agentconf.config.settings import DEFAULT_PROBE_TIMEOUT_SECONDS
from agentconf.integrations.agents import ProbeStyle
from agentconf.integrations.endpoints import endpoint_problem
from agentconf.integrations.model_traits import capability_tags
from agentconf.integrations.provider_http import (
    SAFETY_MARGIN_SECONDS,
    classify_exception,
    classify_response,
    execute_get,
    models_request,
)
from agentconf.models import CatalogResult, FailureCategory, ModelDescriptor
from agentconf.utils.logging import log_message

logger = logging.getLogger(__name__)


class ModelCatalogFetcher:
    def __init__(
        self,
        timeout_seconds: float = DEFAULT_PROBE_TIMEOUT_SECONDS,
        http_client: httpx.AsyncClient | None = None,
    ) -> None:
        self.timeout_seconds = timeout_seconds
        self._http_client = http_client

    async def fetch_models(
        self,
        endpoint_url: str,
        api_key: str,
        *,
        style: ProbeStyle | str = ProbeStyle.OPENAI,
        cursor: str | None = None,
    ) -> CatalogResult:
        """Fetch one page of models from ``endpoint_url``.

        Args:
            endpoint_url: Provider or proxy endpoint
            api_key: Key sent in the protocol's auth header
            style: Provider protocol (``openai``, ``anthropic`` or ``gemini``)
            cursor: ``next_cursor`` from a previous result, to fetch the next page

        Returns:
            CatalogResult with the models, or empty with a failure category
        """
        try:
            style = ProbeStyle(style)
        except ValueError:
            return CatalogResult(
                failure_category=FailureCategory.ENDPOINT_INVALID,
                raw_message=f"Unknown provider protocol '{style}'",
            )

        problem = endpoint_problem(endpoint_url)
        if problem:
            return CatalogResult(failure_category=FailureCategory.ENDPOINT_INVALID, raw_message=problem)

        url, headers = models_request(style, endpoint_url, api_key)
        params = _page_params(style, cursor)

        try:
            response = await asyncio.wait_for(
                execute_get(
                    url,
                    http_client=self._http_client,
                    timeout_seconds=self.timeout_seconds,
                    headers=headers,
                    params=params,
                ),
                timeout=self.timeout_seconds + SAFETY_MARGIN_SECONDS,
            )
        except (httpx.HTTPError, httpx.InvalidURL, asyncio.TimeoutError, OSError, UnicodeEncodeError) as e:
            category, message = classify_exception(e)
            logger.debug(f"Model listing from {url} failed: {message}", exc_info=True)
            return CatalogResult(failure_category=category, raw_message=message)

        category, message, payload = classify_response(response)
        if category is not FailureCategory.NONE or payload is None:
            log_message(f"Model listing from {url} failed: {category.value} ({message})")
            return CatalogResult(failure_category=category, raw_message=message)

        models = parse_models(payload)
        log_message(f"Listed {len(models)} models from {url}")
        return CatalogResult(models=tuple(models), next_cursor=_next_cursor(style, payload))


def parse_models(payload: dict[str, Any]) -> list[ModelDescriptor]:
    """Parse OpenAI/Anthropic ``data[]`` or Gemini ``models[]`` listings.

    Entries without an id are skipped and duplicate ids keep their first
    position. Gemini entries that cannot generate content are skipped.
    """
    models: list[ModelDescriptor] = []
    seen: set[str] = set()

    for item in payload.get("data") or []:
        if not isinstance(item, dict):
            continue
        model_id = item.get("id")
        if not isinstance(model_id, str) or not model_id or model_id in seen:
            continue
        seen.add(model_id)
        owned_by = item.get("owned_by") if isinstance(item.get("owned_by"), str) else None
        display_name = item.get("display_name")
        models.append(
            ModelDescriptor(
                id=model_id,
                display_name=display_name if isinstance(display_name, str) and display_name else model_id,
                capability_tags=capability_tags(model_id, owned_by),
            )
        )

    for item in payload.get("models") or []:
        if not isinstance(item, dict):
            continue
        methods = item.get("supportedGenerationMethods")
        if isinstance(methods, list) and "generateContent" not in methods:
            continue
        full_name = item.get("name")
        if not isinstance(full_name, str) or not full_name:
            continue
        # Gemini names look like "models/gemini-2.5-pro"
        model_id = full_name.removeprefix("models/")
        if model_id in seen:
            continue
        seen.add(model_id)
        display_name = item.get("displayName")
        models.append(
            ModelDescriptor(
                id=model_id,
                display_name=display_name if isinstance(display_name, str) and display_name else model_id,
                capability_tags=capability_tags(model_id, "google"),
            )
        )

    return models


def _page_params(style: ProbeStyle, cursor: str | None) -> dict[str, str] | None:
    if not cursor:
        return None
    if style is ProbeStyle.GEMINI:
        return {"pageToken": cursor}
    if style is ProbeStyle.ANTHROPIC:
        return {"after_id": cursor}
    return None


def _next_cursor(style: ProbeStyle, payload: dict[str, Any]) -> str | None:
    if style is ProbeStyle.ANTHROPIC:
        last_id = payload.get("last_id")
        if payload.get("has_more") and isinstance(last_id, str) and last_id:
            return last_id
        return None
    if style is ProbeStyle.GEMINI:
        token = payload.get("nextPageToken")
        return token if isinstance(token, str) and token else None
    return None


__all__ = ["ModelCatalogFetcher", "parse_models"]
