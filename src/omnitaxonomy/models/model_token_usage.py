# SPDX-FileCopyrightText: 2025 OmniNode.ai Inc.
# SPDX-License-Identifier: MIT

"""Token usage accounting for provider calls."""

from __future__ import annotations

from collections.abc import Iterable

from pydantic import BaseModel, Field


def _merge_model_names(left: str, right: str) -> str:
    names = {name for name in (*left.split(","), *right.split(",")) if name}
    return ",".join(sorted(names))


class ModelTokenUsage(BaseModel):
    """Token counts reported by the AI provider.

    Addition is associative and commutative, so usage summed across chunks
    is independent of the order in which chunks complete. When usages from
    different models are combined, ``model`` lists the distinct model ids
    sorted and comma-separated.

    Usage attached to a chunk result covers every attempt of that chunk.
    Attempts of a run that fails are reported separately, on
    ``ChunkClassificationError.spent_usage``.

    Attributes:
        prompt_tokens: Input tokens.
        candidates_tokens: Generated output tokens.
        total_tokens: Total tokens billed.
        model: Model id (or ids) that produced the usage.
    """

    model_config = {"frozen": True, "extra": "ignore"}

    prompt_tokens: int = Field(default=0, ge=0, description="Input tokens")
    candidates_tokens: int = Field(default=0, ge=0, description="Output tokens")
    total_tokens: int = Field(default=0, ge=0, description="Total tokens")
    model: str = Field(default="", description="Model id(s)")

    def __add__(self, other: ModelTokenUsage) -> ModelTokenUsage:
        if not isinstance(other, ModelTokenUsage):
            return NotImplemented
        return ModelTokenUsage(
            prompt_tokens=self.prompt_tokens + other.prompt_tokens,
            candidates_tokens=self.candidates_tokens + other.candidates_tokens,
            total_tokens=self.total_tokens + other.total_tokens,
            model=_merge_model_names(self.model, other.model),
        )

    @classmethod
    def accumulate(cls, usages: Iterable[ModelTokenUsage | None]) -> ModelTokenUsage:
        """Sum usages, skipping calls that reported none."""
        total = cls()
        for usage in usages:
            if usage is not None:
                total = total + usage
        return total


__all__ = ["ModelTokenUsage"]
