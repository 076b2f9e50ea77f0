# SPDX-FileCopyrightText: 2025 OmniNode.ai Inc.
# SPDX-License-Identifier: MIT
"""Handlers for node_taxonomy_postprocess_compute."""

from __future__ import annotations

from omnitaxonomy.nodes.node_taxonomy_postprocess_compute.handlers.handler_domain_normalize import (
    are_similar_domains,
    build_domain_normalization_map,
    expand_abbreviation,
    normalize_domain_name,
)
from omnitaxonomy.nodes.node_taxonomy_postprocess_compute.handlers.handler_path_derivation import (
    create_domains_from_paths,
    derive_domain_from_path,
)
from omnitaxonomy.nodes.node_taxonomy_postprocess_compute.handlers.handler_taxonomy_postprocess import (
    TaxonomyPostProcessor,
    assemble_taxonomy,
    flatten_taxonomy,
    handle_taxonomy_postprocess,
    is_catch_all,
)

__all__ = [
    "TaxonomyPostProcessor",
    "are_similar_domains",
    "assemble_taxonomy",
    "build_domain_normalization_map",
    "create_domains_from_paths",
    "derive_domain_from_path",
    "expand_abbreviation",
    "flatten_taxonomy",
    "handle_taxonomy_postprocess",
    "is_catch_all",
    "normalize_domain_name",
]
