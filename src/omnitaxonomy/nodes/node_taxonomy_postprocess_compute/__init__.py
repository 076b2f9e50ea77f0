# SPDX-FileCopyrightText: 2025 OmniNode.ai Inc.
# SPDX-License-Identifier: MIT
"""Terminal quality gate: no orphaned tests and no catch-all buckets."""
