# SPDX-FileCopyrightText: 2025 OmniNode.ai Inc.
# SPDX-License-Identifier: MIT

"""Exception hierarchy for taxonomy classification.

Provider failures are split by how the pipeline reacts to them:

- ``ProviderTransientError`` and subclasses: retried with backoff.
- ``ProviderOutputTruncatedError``: terminal, the caller must shrink chunks.
- ``ProviderContentBlockedError``: terminal, surfaced distinctly so the
  caller can skip, flag or fail the run.
- ``ProviderRequestError``: terminal, the request itself is malformed.
- ``CircuitOpenError``: terminal for this attempt, no network call was made.
- ``CircuitHalfOpenBusyError``: retried with backoff, the half-open breaker
  is waiting on another call to decide whether the service recovered.

Run-level failures are reported as ``ChunkClassificationError`` carrying
enough detail for the job layer to decide on resumption.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from omnitaxonomy.models.model_token_usage import ModelTokenUsage


class TaxonomyClassificationError(Exception):
    """Base exception for taxonomy classification errors."""

    def __init__(self, message: str, details: dict[str, Any] | None = None):
        self.message = message
        self.details = details or {}
        super().__init__(message)


class InvalidClassificationInputError(TaxonomyClassificationError):
    """Raised when the input test set cannot be classified (e.g. empty)."""


class CircuitOpenError(TaxonomyClassificationError):
    """Raised when the phase circuit breaker rejects a call (service unavailable)."""


class CircuitHalfOpenBusyError(CircuitOpenError):
    """Raised when a half-open breaker already has its single trial call out.

    Unlike a plain open circuit this clears as soon as the trial call
    finishes, so callers back off and try again.
    """


class ProviderError(TaxonomyClassificationError):
    """Base exception for failures reported by the AI provider."""


class ProviderTransientError(ProviderError):
    """Network, timeout or 5xx failure; safe to retry."""


class ProviderRateLimitedError(ProviderTransientError):
    """Raised when the provider rejects a call with a rate-limit response."""

    def __init__(
        self,
        message: str,
        retry_after: float | None = None,
        details: dict[str, Any] | None = None,
    ):
        details = details or {}
        if retry_after is not None:
            details["retry_after"] = retry_after
        self.retry_after = retry_after
        super().__init__(message, details)


class ProviderResponseParseError(ProviderTransientError):
    """Raised when the response body is empty or not the expected JSON."""


class ProviderOutputTruncatedError(ProviderError):
    """Raised when the response hit the output token limit.

    Retrying at the same chunk size reproduces the truncation, so this is
    escalated to the caller as "reduce chunk size".
    """


class ProviderContentBlockedError(ProviderError):
    """Raised when the provider refused to answer due to content policy."""

    def __init__(
        self,
        message: str,
        finish_reason: str = "",
        details: dict[str, Any] | None = None,
    ):
        details = details or {}
        details["finish_reason"] = finish_reason
        self.finish_reason = finish_reason
        super().__init__(message, details)


class ProviderRequestError(ProviderError):
    """Raised for non-retryable 4xx responses (bad request, auth)."""

    def __init__(
        self,
        message: str,
        status_code: int | None = None,
        details: dict[str, Any] | None = None,
    ):
        details = details or {}
        if status_code is not None:
            details["status_code"] = status_code
        self.status_code = status_code
        super().__init__(message, details)


class ChunkClassificationError(TaxonomyClassificationError):
    """Raised when a chunk fails and the run cannot complete.

    Attributes:
        chunk_index: 0-based index of the chunk that failed.
        completed_chunks: Chunks whose output is preserved in the checkpoint.
        total_chunks: Number of chunks in the run.
        resumable: True when a checkpoint was written before raising.
        spent_usage: Tokens billed by every provider attempt of this run,
            including failed attempts and chunks discarded from the wave.
            The checkpoint only counts usage of preserved chunks, so this
            is the figure to charge for the failed run. Also exposed as
            ``details["spent_usage"]``.
    """

    def __init__(
        self,
        message: str,
        *,
        chunk_index: int,
        completed_chunks: int,
        total_chunks: int,
        resumable: bool,
        spent_usage: ModelTokenUsage | None = None,
        details: dict[str, Any] | None = None,
    ):
        details = details or {}
        details.update(
            {
                "chunk_index": chunk_index,
                "completed_chunks": completed_chunks,
                "total_chunks": total_chunks,
                "resumable": resumable,
            }
        )
        if spent_usage is not None:
            details["spent_usage"] = spent_usage.model_dump(mode="json")
        self.spent_usage = spent_usage
        self.chunk_index = chunk_index
        self.completed_chunks = completed_chunks
        self.total_chunks = total_chunks
        self.resumable = resumable
        super().__init__(message, details)

    @property
    def should_reduce_chunk_size(self) -> bool:
        """True when the underlying cause was output truncation."""
        return isinstance(self.__cause__, ProviderOutputTruncatedError)

    @property
    def content_blocked(self) -> bool:
        """True when the underlying cause was a content-policy block."""
        return isinstance(self.__cause__, ProviderContentBlockedError)


__all__ = [
    "ChunkClassificationError",
    "CircuitHalfOpenBusyError",
    "CircuitOpenError",
    "InvalidClassificationInputError",
    "ProviderContentBlockedError",
    "ProviderError",
    "ProviderOutputTruncatedError",
    "ProviderRateLimitedError",
    "ProviderRequestError",
    "ProviderResponseParseError",
    "ProviderTransientError",
    "TaxonomyClassificationError",
]
