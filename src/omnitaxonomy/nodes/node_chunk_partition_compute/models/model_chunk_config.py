# SPDX-FileCopyrightText: 2025 OmniNode.ai Inc.
# SPDX-License-Identifier: MIT
"""Size limits and token-cost parameters for chunk partitioning."""

from __future__ import annotations

from pydantic import BaseModel, Field

from omnitaxonomy.constants import (
    BASE_PROMPT_TOKENS,
    DEFAULT_MAX_TESTS_PER_CHUNK,
    DEFAULT_MAX_TOKENS_PER_CHUNK,
    TOKENS_PER_FILE,
    TOKENS_PER_TEST,
)


class ModelChunkConfig(BaseModel):
    """Thresholds that bound one classification call.

    The token estimate is a fixed-cost model rather than a tokenizer: it only
    has to keep prompts comfortably below the provider's context window.

    Attributes:
        max_tests_per_chunk: Upper bound on tests per chunk.
        max_tokens_per_chunk: Upper bound on estimated prompt tokens per chunk.
        base_prompt_tokens: Fixed overhead of instructions and schema.
        tokens_per_file: Cost of a file header line and its hints.
        tokens_per_test: Cost of one ``index|suite|name`` line.
    """

    model_config = {"frozen": True, "extra": "forbid"}

    max_tests_per_chunk: int = Field(
        default=DEFAULT_MAX_TESTS_PER_CHUNK,
        ge=1,
        description="Maximum tests per chunk",
    )
    max_tokens_per_chunk: int = Field(
        default=DEFAULT_MAX_TOKENS_PER_CHUNK,
        ge=1,
        description="Maximum estimated prompt tokens per chunk",
    )
    base_prompt_tokens: int = Field(
        default=BASE_PROMPT_TOKENS, ge=0, description="Fixed prompt overhead"
    )
    tokens_per_file: int = Field(
        default=TOKENS_PER_FILE, ge=0, description="Estimated tokens per file"
    )
    tokens_per_test: int = Field(
        default=TOKENS_PER_TEST, ge=0, description="Estimated tokens per test"
    )


__all__ = ["ModelChunkConfig"]
