# SPDX-FileCopyrightText: 2025 OmniNode.ai Inc.
# SPDX-License-Identifier: MIT
"""Shared protocol definitions for omnitaxonomy handlers.

These protocols define the outbound interfaces of the classification
pipeline: the AI provider and the checkpoint store. Handlers depend on the
protocols only, so tests substitute in-memory fakes and deployments plug in
real transports.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from omnitaxonomy.models.model_chunk_progress import (
        ModelChunkProgress,
        ModelChunkProgressKey,
    )
    from omnitaxonomy.models.model_provider_response import ModelProviderResponse


@runtime_checkable
class ProtocolClassificationProvider(Protocol):
    """Protocol for AI text-generation providers.

    Implementations perform exactly one generation per call with
    deterministic decoding (temperature 0, fixed seed) and JSON output.
    Retries, rate limiting and circuit breaking are applied by the caller,
    not the provider.

    Errors:
        Implementations raise ``ProviderTransientError`` (or a subclass) for
        failures worth retrying and ``ProviderRequestError`` for malformed
        requests. A truncated or blocked generation is reported through
        ``ModelProviderResponse.finish_reason`` rather than raised.
    """

    async def generate(
        self,
        *,
        model: str,
        system_prompt: str,
        user_prompt: str,
    ) -> ModelProviderResponse:
        """Generate a completion for the given prompts.

        Args:
            model: Provider model id.
            system_prompt: Instructions and response schema.
            user_prompt: Files and tests to classify.

        Returns:
            The generated text, token usage and finish reason.
        """
        ...


@runtime_checkable
class ProtocolChunkProgressStore(Protocol):
    """Protocol for checkpoint storage of partially completed runs."""

    async def get(self, key: ModelChunkProgressKey) -> ModelChunkProgress | None:
        """Return the checkpoint for ``key``, or None when absent."""
        ...

    async def save(
        self, key: ModelChunkProgressKey, progress: ModelChunkProgress
    ) -> None:
        """Create or overwrite the checkpoint for ``key``."""
        ...

    async def delete(self, key: ModelChunkProgressKey) -> None:
        """Remove the checkpoint for ``key``; absent keys are ignored."""
        ...


__all__ = [
    "ProtocolChunkProgressStore",
    "ProtocolClassificationProvider",
]
