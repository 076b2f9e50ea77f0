# SPDX-FileCopyrightText: 2025 OmniNode.ai Inc.
# SPDX-License-Identifier: MIT

"""Raw response returned by a classification provider."""

from __future__ import annotations

from pydantic import BaseModel, Field

from omnitaxonomy.enums import EnumFinishReason
from omnitaxonomy.models.model_token_usage import ModelTokenUsage


class ModelProviderResponse(BaseModel):
    """Text and metadata from a single provider completion.

    Attributes:
        text: Generated text, expected to be taxonomy JSON.
        usage: Token usage, when the provider reports it.
        finish_reason: Why generation stopped.
    """

    model_config = {"frozen": True, "extra": "ignore"}

    text: str = Field(default="", description="Generated text")
    usage: ModelTokenUsage | None = Field(default=None, description="Token usage")
    finish_reason: EnumFinishReason = Field(
        default=EnumFinishReason.STOP, description="Normalized stop reason"
    )


__all__ = ["ModelProviderResponse"]
