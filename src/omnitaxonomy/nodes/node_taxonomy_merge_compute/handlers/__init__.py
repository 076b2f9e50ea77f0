# SPDX-FileCopyrightText: 2025 OmniNode.ai Inc.
# SPDX-License-Identifier: MIT
"""Handlers for node_taxonomy_merge_compute."""

from __future__ import annotations

from omnitaxonomy.nodes.node_taxonomy_merge_compute.handlers.handler_taxonomy_merge import (
    merge_taxonomies,
)
from omnitaxonomy.nodes.node_taxonomy_merge_compute.handlers.handler_taxonomy_validate import (
    validate_taxonomy,
)

__all__ = ["merge_taxonomies", "validate_taxonomy"]
