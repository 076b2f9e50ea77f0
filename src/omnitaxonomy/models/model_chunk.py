# SPDX-FileCopyrightText: 2025 OmniNode.ai Inc.
# SPDX-License-Identifier: MIT

"""A size-bounded slice of the input, classified in one provider call."""

from __future__ import annotations

from pydantic import BaseModel, Field

from omnitaxonomy.constants import BASE_PROMPT_TOKENS, TOKENS_PER_FILE, TOKENS_PER_TEST
from omnitaxonomy.models.model_test_case import ModelFileGroup


class ModelChunk(BaseModel):
    """Whole files assigned to one classification call.

    Attributes:
        chunk_index: 0-based position of the chunk in the run.
        files: Files in input order; a file is never split across chunks.
    """

    model_config = {"frozen": True, "extra": "ignore"}

    chunk_index: int = Field(ge=0, description="0-based chunk position")
    files: tuple[ModelFileGroup, ...] = Field(default=(), description="Files in chunk")

    @property
    def test_count(self) -> int:
        return sum(len(f.tests) for f in self.files)

    @property
    def estimated_tokens(self) -> int:
        """Prompt size estimate using the default per-file/per-test costs."""
        return (
            BASE_PROMPT_TOKENS
            + TOKENS_PER_FILE * len(self.files)
            + TOKENS_PER_TEST * self.test_count
        )


__all__ = ["ModelChunk"]
