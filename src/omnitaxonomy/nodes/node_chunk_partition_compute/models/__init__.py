# SPDX-FileCopyrightText: 2025 OmniNode.ai Inc.
# SPDX-License-Identifier: MIT
"""Models for node_chunk_partition_compute."""

from __future__ import annotations

from omnitaxonomy.nodes.node_chunk_partition_compute.models.model_chunk_config import (
    ModelChunkConfig,
)

__all__ = ["ModelChunkConfig"]
