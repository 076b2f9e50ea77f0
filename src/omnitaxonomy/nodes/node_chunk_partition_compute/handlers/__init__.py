# SPDX-FileCopyrightText: 2025 OmniNode.ai Inc.
# SPDX-License-Identifier: MIT
"""Handlers for node_chunk_partition_compute."""

from __future__ import annotations

from omnitaxonomy.nodes.node_chunk_partition_compute.handlers.handler_chunk_partition import (
    count_tests,
    estimate_tokens,
    needs_chunking,
    partition_files,
    reindex_chunk,
    restore_indices,
)

__all__ = [
    "count_tests",
    "estimate_tokens",
    "needs_chunking",
    "partition_files",
    "reindex_chunk",
    "restore_indices",
]
