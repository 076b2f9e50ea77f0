# SPDX-FileCopyrightText: 2025 OmniNode.ai Inc.
# SPDX-License-Identifier: MIT
"""Taxonomy classification nodes.

Each node package holds pure handlers (``handlers/``), its pydantic models
(``models/``) and node-local tests (``node_tests/``). Import handlers from
their submodules directly.
"""
