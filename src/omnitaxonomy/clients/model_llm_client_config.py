# SPDX-FileCopyrightText: 2025 OmniNode.ai Inc.
# SPDX-License-Identifier: MIT
"""Configuration model for the classification LLM HTTP client."""

from __future__ import annotations

import os

from pydantic import BaseModel, Field

from omnitaxonomy.constants import DEFAULT_CLASSIFICATION_MODEL, DEFAULT_SEED, MAX_OUTPUT_TOKENS

_DEFAULT_LLM_URL: str = "http://localhost:8000"


class ModelLlmClientConfig(BaseModel):
    """Configuration for an OpenAI-compatible chat completions endpoint.

    Attributes:
        base_url: Server base URL (from OMNITAXONOMY_LLM_URL).
        api_key: Bearer token (from OMNITAXONOMY_LLM_API_KEY); empty disables
            the Authorization header.
        default_model: Model used when a call does not name one.
        timeout_seconds: HTTP request timeout in seconds.
        max_tokens: Output token limit per response.
        seed: Fixed sampling seed for reproducible output.
        max_connections: Connection pool size.
    """

    model_config = {"frozen": True, "extra": "ignore"}

    base_url: str = Field(default=_DEFAULT_LLM_URL, description="LLM server base URL.")
    api_key: str = Field(default="", description="Bearer token for the LLM server.")
    default_model: str = Field(
        default=DEFAULT_CLASSIFICATION_MODEL, description="Fallback model id."
    )
    timeout_seconds: float = Field(
        default=300.0, gt=0.0, description="HTTP request timeout in seconds."
    )
    max_tokens: int = Field(
        default=MAX_OUTPUT_TOKENS, ge=1, description="Output token limit."
    )
    seed: int = Field(default=DEFAULT_SEED, description="Sampling seed.")
    max_connections: int = Field(
        default=10, ge=1, description="Maximum pooled connections."
    )

    @classmethod
    def from_environment(cls) -> ModelLlmClientConfig:
        """Build the config from ``OMNITAXONOMY_LLM_*`` environment variables."""
        return cls(
            base_url=os.getenv("OMNITAXONOMY_LLM_URL", _DEFAULT_LLM_URL),
            api_key=os.getenv("OMNITAXONOMY_LLM_API_KEY", ""),
            default_model=os.getenv(
                "OMNITAXONOMY_LLM_MODEL", DEFAULT_CLASSIFICATION_MODEL
            ),
        )


__all__ = ["ModelLlmClientConfig"]
