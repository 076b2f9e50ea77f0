# SPDX-FileCopyrightText: 2025 OmniNode.ai Inc.
# SPDX-License-Identifier: MIT
"""Wave-parallel, resumable taxonomy classification orchestrator."""
