# SPDX-FileCopyrightText: 2025 OmniNode.ai Inc.
# SPDX-License-Identifier: MIT
"""Async classification client for OpenAI-compatible chat completion servers.

Implements ``ProtocolClassificationProvider`` over ``POST /v1/chat/completions``.
The client performs exactly one request per ``generate`` call; retries, rate
limiting and circuit breaking are applied by ``ReliableProviderCaller``.

Error mapping:
    - ``httpx.TimeoutException``, ``httpx.ConnectError``, other transport
      errors and 5xx responses -> ``ProviderTransientError``
    - 429 -> ``ProviderRateLimitedError`` (``Retry-After`` honored if numeric)
    - other 4xx -> ``ProviderRequestError``
    - non-JSON body or missing ``choices`` -> ``ProviderResponseParseError``

``finish_reason`` values ``length`` and ``content_filter`` are reported as
``EnumFinishReason.MAX_TOKENS`` and ``EnumFinishReason.CONTENT_FILTER`` so
the caller can escalate them instead of retrying.

Example:
    ```python
    config = ModelLlmClientConfig.from_environment()
    async with ClassificationLlmClient(config) as client:
        orchestrator = TaxonomyClassificationOrchestrator(client)
        taxonomy, usage = await orchestrator.classify(files, "en", "a1b2c3")
    ```
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

import httpx

from omnitaxonomy.clients.model_llm_client_config import ModelLlmClientConfig
from omnitaxonomy.enums import EnumFinishReason
from omnitaxonomy.errors import (
    ProviderRateLimitedError,
    ProviderRequestError,
    ProviderResponseParseError,
    ProviderTransientError,
)
from omnitaxonomy.models.model_provider_response import ModelProviderResponse
from omnitaxonomy.models.model_token_usage import ModelTokenUsage

if TYPE_CHECKING:
    from types import TracebackType

logger = logging.getLogger(__name__)

_HTTP_TOO_MANY_REQUESTS = 429
_HTTP_CLIENT_ERROR_MIN = 400
_HTTP_SERVER_ERROR_MIN = 500

_FINISH_REASONS: dict[str, EnumFinishReason] = {
    "stop": EnumFinishReason.STOP,
    "length": EnumFinishReason.MAX_TOKENS,
    "max_tokens": EnumFinishReason.MAX_TOKENS,
    "content_filter": EnumFinishReason.CONTENT_FILTER,
    "safety": EnumFinishReason.CONTENT_FILTER,
}


def _parse_retry_after(value: str | None) -> float | None:
    if not value:
        return None
    try:
        return max(float(value), 0.0)
    except ValueError:
        return None


def _parse_usage(data: dict[str, Any], model: str) -> ModelTokenUsage | None:
    usage = data.get("usage")
    if not isinstance(usage, dict):
        return None
    prompt = int(usage.get("prompt_tokens") or 0)
    completion = int(usage.get("completion_tokens") or 0)
    return ModelTokenUsage(
        prompt_tokens=prompt,
        candidates_tokens=completion,
        total_tokens=int(usage.get("total_tokens") or prompt + completion),
        model=str(data.get("model") or model),
    )


class ClassificationLlmClient:
    """Classification provider backed by a persistent ``httpx.AsyncClient``.

    Supports both context manager and manual lifecycle management. Calling
    ``generate`` on an unconnected client connects it first.
    """

    def __init__(
        self,
        config: ModelLlmClientConfig | None = None,
        *,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._config = config or ModelLlmClientConfig()
        self._transport = transport
        self._client: httpx.AsyncClient | None = None

    @property
    def config(self) -> ModelLlmClientConfig:
        return self._config

    @property
    def is_connected(self) -> bool:
        return self._client is not None

    @property
    def completions_url(self) -> str:
        return f"{self._config.base_url.rstrip('/')}/v1/chat/completions"

    async def connect(self) -> None:
        """Open the connection pool. Idempotent."""
        if self._client is not None:
            return
        headers = {}
        if self._config.api_key:
            headers["Authorization"] = f"Bearer {self._config.api_key}"
        self._client = httpx.AsyncClient(
            timeout=httpx.Timeout(self._config.timeout_seconds),
            limits=httpx.Limits(max_connections=self._config.max_connections),
            headers=headers,
            transport=self._transport,
        )
        logger.debug("ClassificationLlmClient connected to %s", self._config.base_url)

    async def close(self) -> None:
        """Close the connection pool. Idempotent."""
        if self._client is not None:
            await self._client.aclose()
            self._client = None
            logger.debug("ClassificationLlmClient connection closed")

    async def __aenter__(self) -> ClassificationLlmClient:
        await self.connect()
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> None:
        await self.close()

    def build_payload(
        self, *, model: str, system_prompt: str, user_prompt: str
    ) -> dict[str, Any]:
        """Request body with deterministic decoding and JSON output."""
        return {
            "model": model or self._config.default_model,
            "messages": [
                {"role": "system", "content": system_prompt},
                {"role": "user", "content": user_prompt},
            ],
            "temperature": 0,
            "seed": self._config.seed,
            "max_tokens": self._config.max_tokens,
            "response_format": {"type": "json_object"},
        }

    async def generate(
        self,
        *,
        model: str,
        system_prompt: str,
        user_prompt: str,
    ) -> ModelProviderResponse:
        if self._client is None:
            await self.connect()
        assert self._client is not None

        payload = self.build_payload(
            model=model, system_prompt=system_prompt, user_prompt=user_prompt
        )
        try:
            response = await self._client.post(self.completions_url, json=payload)
        except httpx.TimeoutException as e:
            raise ProviderTransientError(
                f"LLM request timed out after {self._config.timeout_seconds}s",
                details={"model": payload["model"]},
            ) from e
        except httpx.ConnectError as e:
            raise ProviderTransientError(
                f"Connection failed to {self._config.base_url}: {e}",
                details={"model": payload["model"]},
            ) from e
        except httpx.TransportError as e:
            raise ProviderTransientError(
                f"LLM transport error: {e}", details={"model": payload["model"]}
            ) from e

        self._raise_for_status(response)
        return self._parse_response(response, payload["model"])

    @staticmethod
    def _raise_for_status(response: httpx.Response) -> None:
        status = response.status_code
        if status < _HTTP_CLIENT_ERROR_MIN:
            return
        body = response.text[:500]
        if status == _HTTP_TOO_MANY_REQUESTS:
            raise ProviderRateLimitedError(
                "LLM rate limit exceeded",
                retry_after=_parse_retry_after(response.headers.get("Retry-After")),
            )
        if status >= _HTTP_SERVER_ERROR_MIN:
            raise ProviderTransientError(
                f"LLM server error: {status}",
                details={"status_code": status, "body": body},
            )
        raise ProviderRequestError(
            f"LLM request rejected: {status} - {body}", status_code=status
        )

    @staticmethod
    def _parse_response(response: httpx.Response, model: str) -> ModelProviderResponse:
        try:
            data = response.json()
            choice = data["choices"][0]
            text = choice["message"].get("content") or ""
        except (ValueError, KeyError, IndexError, TypeError, AttributeError) as e:
            raise ProviderResponseParseError(
                f"Unexpected response format from LLM server: {type(e).__name__}",
                details={"body": response.text[:500]},
            ) from e

        raw_reason = str(choice.get("finish_reason") or "stop").lower()
        finish_reason = _FINISH_REASONS.get(raw_reason, EnumFinishReason.OTHER)
        if finish_reason is not EnumFinishReason.STOP:
            logger.warning(
                "LLM generation finished with reason %r (model=%s)", raw_reason, model
            )
        return ModelProviderResponse(
            text=text,
            usage=_parse_usage(data, model),
            finish_reason=finish_reason,
        )


__all__ = ["ClassificationLlmClient"]
