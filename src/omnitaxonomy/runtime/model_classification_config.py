# SPDX-FileCopyrightText: 2025 OmniNode.ai Inc.
# SPDX-License-Identifier: MIT
"""
Classification Runtime Configuration Model.

Aggregates every tunable of a classification run: chunk thresholds, wave
concurrency, reliability settings and the post-processor policy.

Features:
    - Strongly typed configuration with Pydantic validation
    - Supports environment variable interpolation (e.g., ${OMNITAXONOMY_MODEL})
      with optional defaults (e.g., ${OMNITAXONOMY_MODEL:-gemini-2.5-flash})
    - Supports loading from YAML files
    - Supports loading from environment variables

Example:
    # Load from YAML
    config = ModelClassificationConfig.from_yaml("/path/to/classification.yaml")

    # Load from environment
    config = ModelClassificationConfig.from_environment()

    orchestrator = TaxonomyClassificationOrchestrator(provider, config=config)
"""

from __future__ import annotations

import os
import re
from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, Field

from omnitaxonomy.constants import DEFAULT_CLASSIFICATION_MODEL
from omnitaxonomy.nodes.node_chunk_partition_compute.models.model_chunk_config import (
    ModelChunkConfig,
)
from omnitaxonomy.reliability.model_reliability_config import ModelReliabilityConfig

_ENV_VAR_PATTERN = re.compile(r"\$\{([A-Z_][A-Z0-9_]*)(?::-([^}]*))?\}")


class ModelClassificationConfig(BaseModel):
    """
    Configuration for chunked taxonomy classification.

    Attributes:
        chunking: Chunk size thresholds and token-cost model.
        reliability: Rate limit, circuit breakers and retry policies.
        wave_concurrency: Chunks classified in parallel per wave.
        inter_wave_delay_seconds: Pause between waves (0 disables).
        missing_index_warning_threshold: Ratio of unclassified tests above
            which recovery is logged at WARNING.
        model_id: Provider model used for classification.
        prohibit_uncategorized: Report catch-all assignments as violations.
    """

    model_config = {"frozen": True, "extra": "forbid"}

    chunking: ModelChunkConfig = Field(
        default_factory=ModelChunkConfig,
        description="Chunk size thresholds",
    )
    reliability: ModelReliabilityConfig = Field(
        default_factory=ModelReliabilityConfig,
        description="Rate limit, circuit breakers and retry policies",
    )
    wave_concurrency: int = Field(
        default=5,
        ge=1,
        le=50,
        description="Chunks classified concurrently per wave",
    )
    inter_wave_delay_seconds: float = Field(
        default=0.0,
        ge=0.0,
        description="Delay between waves in seconds",
    )
    missing_index_warning_threshold: float = Field(
        default=0.05,
        ge=0.0,
        le=1.0,
        description="Missing-test ratio that escalates recovery logs to WARNING",
    )
    model_id: str = Field(
        default=DEFAULT_CLASSIFICATION_MODEL,
        min_length=1,
        description="Classification model id",
        examples=["gemini-2.5-flash", "gpt-4o-mini"],
    )
    prohibit_uncategorized: bool = Field(
        default=True,
        description="Report catch-all assignments as quality violations",
    )

    @staticmethod
    def _interpolate_env_vars(value: Any) -> Any:
        """
        Recursively interpolate environment variables in configuration values.

        Supports ${VAR_NAME} and ${VAR_NAME:-default} syntax.

        Raises:
            ValueError: If a referenced variable is unset and has no default.
        """
        if isinstance(value, str):

            def _replace(match: re.Match[str]) -> str:
                var_name, default = match.group(1), match.group(2)
                env_value = os.environ.get(var_name)
                if env_value is not None:
                    return env_value
                if default is not None:
                    return default
                raise ValueError(
                    f"Environment variable '{var_name}' is not set "
                    f"(referenced in value: {value})"
                )

            return _ENV_VAR_PATTERN.sub(_replace, value)

        if isinstance(value, dict):
            return {
                k: ModelClassificationConfig._interpolate_env_vars(v)
                for k, v in value.items()
            }

        if isinstance(value, list):
            return [ModelClassificationConfig._interpolate_env_vars(item) for item in value]

        return value

    # ==========================================
    # Factory Methods
    # ==========================================

    @classmethod
    def from_yaml(
        cls,
        path: str | Path,
        *,
        interpolate_env: bool = True,
    ) -> ModelClassificationConfig:
        """
        Load configuration from a YAML file.

        Raises:
            FileNotFoundError: If configuration file does not exist.
            yaml.YAMLError: If YAML parsing fails.
            ValueError: If environment variable interpolation fails.
            pydantic.ValidationError: If configuration validation fails.
        """
        path = Path(path)

        if not path.exists():
            raise FileNotFoundError(f"Configuration file not found: {path}")

        with open(path, encoding="utf-8") as f:
            data = yaml.safe_load(f)

        if data is None:
            data = {}

        if interpolate_env:
            data = cls._interpolate_env_vars(data)

        return cls.model_validate(data)

    @classmethod
    def from_environment(
        cls,
        prefix: str = "OMNITAXONOMY_",
    ) -> ModelClassificationConfig:
        """
        Load configuration from environment variables.

        Supports environment variables with the given prefix:
        - OMNITAXONOMY_WAVE_CONCURRENCY
        - OMNITAXONOMY_MODEL_ID
        - OMNITAXONOMY_INTER_WAVE_DELAY_SECONDS
        - OMNITAXONOMY_MAX_TESTS_PER_CHUNK
        - OMNITAXONOMY_MAX_TOKENS_PER_CHUNK
        - OMNITAXONOMY_RATE_LIMIT_PER_SECOND
        - OMNITAXONOMY_PROHIBIT_UNCATEGORIZED
        """
        config_data: dict[str, Any] = {}

        if wave_concurrency := os.environ.get(f"{prefix}WAVE_CONCURRENCY"):
            config_data["wave_concurrency"] = int(wave_concurrency)

        if model_id := os.environ.get(f"{prefix}MODEL_ID"):
            config_data["model_id"] = model_id

        if delay := os.environ.get(f"{prefix}INTER_WAVE_DELAY_SECONDS"):
            config_data["inter_wave_delay_seconds"] = float(delay)

        if prohibit := os.environ.get(f"{prefix}PROHIBIT_UNCATEGORIZED"):
            config_data["prohibit_uncategorized"] = prohibit.lower() in (
                "true",
                "1",
                "yes",
            )

        # Chunking
        chunking_data: dict[str, Any] = {}
        if max_tests := os.environ.get(f"{prefix}MAX_TESTS_PER_CHUNK"):
            chunking_data["max_tests_per_chunk"] = int(max_tests)
        if max_tokens := os.environ.get(f"{prefix}MAX_TOKENS_PER_CHUNK"):
            chunking_data["max_tokens_per_chunk"] = int(max_tokens)
        if chunking_data:
            config_data["chunking"] = chunking_data

        # Reliability
        if rate := os.environ.get(f"{prefix}RATE_LIMIT_PER_SECOND"):
            config_data["reliability"] = {"rate_limit_per_second": float(rate)}

        return cls.model_validate(config_data)


__all__ = ["ModelClassificationConfig"]
