# SPDX-FileCopyrightText: 2025 OmniNode.ai Inc.
# SPDX-License-Identifier: MIT
"""In-memory checkpoint store for resumable classification runs.

Checkpoints live only for one job's retry window and do not survive a
process restart. A durable store (e.g. a database table) can replace this
one by implementing ``ProtocolChunkProgressStore``.
"""

from __future__ import annotations

import asyncio
import logging

from omnitaxonomy.models.model_chunk_progress import (
    ModelChunkProgress,
    ModelChunkProgressKey,
)

logger = logging.getLogger(__name__)


class InMemoryChunkProgressStore:
    """Dict-backed progress store guarded by an ``asyncio.Lock``."""

    def __init__(self) -> None:
        self._entries: dict[ModelChunkProgressKey, ModelChunkProgress] = {}
        self._lock = asyncio.Lock()

    async def get(self, key: ModelChunkProgressKey) -> ModelChunkProgress | None:
        async with self._lock:
            progress = self._entries.get(key)
        if progress is not None:
            logger.info(
                "Chunk progress found for %s: %d/%d chunks completed",
                key.short(),
                progress.completed_chunks,
                progress.total_chunks,
            )
        return progress

    async def save(
        self, key: ModelChunkProgressKey, progress: ModelChunkProgress
    ) -> None:
        async with self._lock:
            self._entries[key] = progress
        logger.info(
            "Chunk progress saved for %s: %d/%d chunks completed",
            key.short(),
            progress.completed_chunks,
            progress.total_chunks,
        )

    async def delete(self, key: ModelChunkProgressKey) -> None:
        async with self._lock:
            removed = self._entries.pop(key, None)
        if removed is not None:
            logger.debug("Chunk progress deleted for %s", key.short())

    def clear(self) -> None:
        """Drop every checkpoint."""
        self._entries.clear()

    def __len__(self) -> int:
        return len(self._entries)


_default_store: InMemoryChunkProgressStore | None = None


def default_progress_store() -> InMemoryChunkProgressStore:
    """Return the process-wide progress store, creating it on first use."""
    global _default_store
    if _default_store is None:
        _default_store = InMemoryChunkProgressStore()
    return _default_store


__all__ = ["InMemoryChunkProgressStore", "default_progress_store"]
