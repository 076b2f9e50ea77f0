# SPDX-FileCopyrightText: 2025 OmniNode.ai Inc.
# SPDX-License-Identifier: MIT
"""Handler for TaxonomyClassificationOrchestrator: chunked, resumable runs.

Run stages::

    INIT -> ANCHOR_CHUNK -> WAVE_LOOP -> DONE
                  |              |
                  +--> FAILED <--+

INIT
    Rejects an empty test set, partitions the input and looks up a
    checkpoint for the run key ``(analysis id or content hash, language,
    model)``. A checkpoint is resumed only when re-partitioning yields the
    same chunk count.

ANCHOR_CHUNK
    Chunk 0 is classified alone. Its domains seed the anchor vocabulary that
    every later prompt is asked to reuse. Skipped on resume.

WAVE_LOOP
    Remaining chunks run in waves of ``wave_concurrency`` tasks sharing the
    anchor snapshot taken when the wave starts. A wave ends when every task
    finishes or one fails; on failure the rest are cancelled and awaited.
    Results are recorded in chunk order, never completion order, and only
    the contiguous run of successes from the start of the wave is kept, so
    a checkpoint always describes a prefix of the chunk list. After each
    wave the anchors become the bulk merge of every completed output.
    While the classification circuit breaker is not CLOSED a wave holds a
    single chunk, so the one call a half-open breaker admits decides
    recovery before the run fans out again.

DONE
    All outputs are merged, validated against the full index set and passed
    through the quality post-processor. The checkpoint is deleted.

FAILED
    Whenever at least one chunk completed, a checkpoint is written before the
    failure propagates, whether the cause is a chunk error, the run deadline
    or cancellation. Chunk errors surface as ``ChunkClassificationError``;
    ``TimeoutError`` and ``asyncio.CancelledError`` propagate unchanged.
"""

from __future__ import annotations

import asyncio
import hashlib
import logging
from collections import Counter
from collections.abc import Awaitable, Callable, Sequence
from dataclasses import dataclass, field

from omnitaxonomy.enums import (
    EnumCircuitState,
    EnumClassificationPhase,
    EnumLanguage,
    EnumRunStage,
)
from omnitaxonomy.errors import (
    ChunkClassificationError,
    InvalidClassificationInputError,
)
from omnitaxonomy.models.model_chunk import ModelChunk
from omnitaxonomy.models.model_chunk_progress import (
    ModelChunkProgress,
    ModelChunkProgressKey,
)
from omnitaxonomy.models.model_taxonomy import ModelDomainGroup, ModelTaxonomy
from omnitaxonomy.models.model_test_case import ModelFileGroup
from omnitaxonomy.models.model_token_usage import ModelTokenUsage
from omnitaxonomy.nodes.node_chunk_partition_compute.handlers.handler_chunk_partition import (
    partition_files,
)
from omnitaxonomy.nodes.node_taxonomy_classification_orchestrator.handlers.handler_chunk_classify import (
    handle_chunk_classify,
)
from omnitaxonomy.nodes.node_taxonomy_classification_orchestrator.handlers.store_chunk_progress import (
    default_progress_store,
)
from omnitaxonomy.nodes.node_taxonomy_classification_orchestrator.models.model_chunk_classify_result import (
    ModelChunkClassifyResult,
)
from omnitaxonomy.nodes.node_taxonomy_classification_orchestrator.models.model_classify_input import (
    ModelClassifyInput,
)
from omnitaxonomy.nodes.node_taxonomy_classification_orchestrator.models.model_classify_output import (
    ModelClassifyOutput,
)
from omnitaxonomy.nodes.node_taxonomy_merge_compute.handlers.handler_taxonomy_merge import (
    merge_taxonomies,
)
from omnitaxonomy.nodes.node_taxonomy_merge_compute.handlers.handler_taxonomy_validate import (
    validate_taxonomy,
)
from omnitaxonomy.nodes.node_taxonomy_merge_compute.models.model_validation_result import (
    ModelIndexViolation,
)
from omnitaxonomy.nodes.node_taxonomy_postprocess_compute.handlers.handler_domain_normalize import (
    is_catch_all,
)
from omnitaxonomy.nodes.node_taxonomy_postprocess_compute.handlers.handler_taxonomy_postprocess import (
    handle_taxonomy_postprocess,
)
from omnitaxonomy.nodes.node_taxonomy_postprocess_compute.models.model_postprocess import (
    ModelPostProcessConfig,
)
from omnitaxonomy.protocols import (
    ProtocolChunkProgressStore,
    ProtocolClassificationProvider,
)
from omnitaxonomy.reliability.caller import ReliableProviderCaller
from omnitaxonomy.reliability.registry import ReliabilityRegistry, default_registry
from omnitaxonomy.runtime.model_classification_config import ModelClassificationConfig

logger = logging.getLogger(__name__)


# =============================================================================
# Run identity
# =============================================================================


def compute_content_hash(
    files: Sequence[ModelFileGroup], language: EnumLanguage | str
) -> str:
    """Hash the classification input for runs without an analysis id.

    The hash covers file paths, test names with their suite paths and the
    language. It ignores input order, so the same test set always maps to
    the same checkpoint key.
    """
    hasher = hashlib.sha256()
    for path in sorted(f.path for f in files):
        hasher.update(path.encode("utf-8"))
        hasher.update(b"\0")
    hasher.update(b"\0")
    for suite_path, name in sorted(
        (test.suite_path, test.name) for f in files for test in f.tests
    ):
        hasher.update(suite_path.encode("utf-8"))
        hasher.update(b"\0")
        hasher.update(name.encode("utf-8"))
        hasher.update(b"\0")
    hasher.update(EnumLanguage(language).value.encode("utf-8"))
    return hasher.hexdigest()


def _collect_test_indices(files: Sequence[ModelFileGroup]) -> list[int]:
    indices = [test.index for f in files for test in f.tests]
    duplicates = sorted(i for i, n in Counter(indices).items() if n > 1)
    if duplicates:
        raise InvalidClassificationInputError(
            f"Test indices must be unique across files; {len(duplicates)} repeated",
            details={"duplicate_indices": duplicates[:20]},
        )
    return indices


# =============================================================================
# Run state
# =============================================================================


@dataclass
class _RunState:
    """Mutable bookkeeping of one run, confined to the event loop running it.

    ``usage`` counts the chunks whose output is kept; ``spent_usage`` counts
    every provider attempt made by this run, kept or not.
    """

    key: ModelChunkProgressKey
    total_chunks: int
    outputs: list[ModelTaxonomy] = field(default_factory=list)
    anchors: tuple[ModelDomainGroup, ...] = ()
    usage: ModelTokenUsage = field(default_factory=ModelTokenUsage)
    spent_usage: ModelTokenUsage = field(default_factory=ModelTokenUsage)
    index_violations: list[ModelIndexViolation] = field(default_factory=list)
    stage: EnumRunStage = EnumRunStage.INIT
    resumed_from: int = 0
    provider_steps: int = 0

    @property
    def completed(self) -> int:
        return len(self.outputs)

    def restore(self, progress: ModelChunkProgress) -> None:
        self.outputs = list(progress.completed_outputs)
        self.anchors = progress.anchor_domains
        self.usage = progress.total_usage
        self.resumed_from = progress.completed_chunks

    def record(self, result: ModelChunkClassifyResult) -> None:
        self.outputs.append(result.taxonomy)
        if result.usage is not None:
            self.usage = self.usage + result.usage
        self.index_violations.extend(result.violations)

    def record_spent(self, usage: ModelTokenUsage) -> None:
        self.spent_usage = self.spent_usage + usage

    def refresh_anchors(self) -> None:
        merged = merge_taxonomies(self.outputs)
        self.anchors = tuple(
            domain for domain in merged.domains if not is_catch_all(domain.name, "")
        )

    def to_progress(self) -> ModelChunkProgress:
        return ModelChunkProgress(
            completed_chunks=self.completed,
            completed_outputs=tuple(self.outputs),
            anchor_domains=self.anchors,
            total_chunks=self.total_chunks,
            total_usage=self.usage,
        )

    def log_context(self, **extra: object) -> dict[str, object]:
        return {
            "analysis_id": self.key.analysis_id,
            "run_stage": self.stage.value,
            "total_chunks": self.total_chunks,
            "completed_chunks": self.completed,
            **extra,
        }


# =============================================================================
# Orchestrator
# =============================================================================


class TaxonomyClassificationOrchestrator:
    """Classify a repository's tests into a taxonomy, chunk by chunk.

    Args:
        provider: AI provider adapter.
        registry: Shared rate limiter, circuit breakers and retry policies.
            Defaults to the process-wide registry.
        progress_store: Checkpoint store. Defaults to the process-wide
            in-memory store.
        config: Run configuration.
        sleep: Sleep used for inter-wave delays and retry backoff.
    """

    def __init__(
        self,
        provider: ProtocolClassificationProvider,
        *,
        registry: ReliabilityRegistry | None = None,
        progress_store: ProtocolChunkProgressStore | None = None,
        config: ModelClassificationConfig | None = None,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ):
        self.provider = provider
        self.config = config or ModelClassificationConfig()
        self.registry = (
            registry if registry is not None else default_registry(self.config.reliability)
        )
        self.progress_store = (
            progress_store if progress_store is not None else default_progress_store()
        )
        self._sleep = sleep

    def _build_caller(self, state: _RunState) -> ReliableProviderCaller:
        phase = EnumClassificationPhase.CLASSIFICATION
        return ReliableProviderCaller(
            self.provider,
            rate_limiter=self.registry.rate_limiter,
            circuit_breaker=self.registry.circuit_breaker(phase),
            retry_policy=self.registry.retry_policy(phase),
            model=self.config.model_id,
            sleep=self._sleep,
            on_usage=state.record_spent,
        )

    async def classify(
        self,
        files: Sequence[ModelFileGroup],
        language: EnumLanguage | str = EnumLanguage.EN,
        analysis_id: str = "",
        *,
        timeout_seconds: float | None = None,
    ) -> tuple[ModelTaxonomy, ModelTokenUsage]:
        """Classify ``files`` and return the final taxonomy and token usage.

        Raises:
            InvalidClassificationInputError: Empty input, repeated indices or
                an unsupported language.
            ChunkClassificationError: A chunk failed; see ``resumable``.
            TimeoutError: The run deadline expired.
        """
        try:
            language = EnumLanguage(language)
        except ValueError as e:
            raise InvalidClassificationInputError(
                f"Unsupported language: {language!r}",
                details={
                    "language": str(language),
                    "supported": [member.value for member in EnumLanguage],
                },
            ) from e

        output = await self.run(
            ModelClassifyInput(
                files=tuple(files),
                language=language,
                analysis_id=analysis_id,
                timeout_seconds=timeout_seconds,
            )
        )
        return output.taxonomy, output.usage

    async def run(self, input_data: ModelClassifyInput) -> ModelClassifyOutput:
        """Execute one classification run, resuming from a checkpoint if present."""
        files = input_data.files
        indices = _collect_test_indices(files)
        if not indices:
            raise InvalidClassificationInputError(
                "No tests to classify",
                details={"analysis_id": input_data.analysis_id, "files": len(files)},
            )

        chunks = partition_files(
            [f for f in files if f.tests], self.config.chunking
        )
        key = ModelChunkProgressKey(
            analysis_id=input_data.analysis_id
            or compute_content_hash(files, input_data.language),
            language=input_data.language.value,
            model_id=self.config.model_id,
        )
        state = _RunState(key=key, total_chunks=len(chunks))
        await self._load_progress(state)

        logger.info(
            "Starting taxonomy classification: %d tests in %d chunks (resume at %d)",
            len(indices),
            len(chunks),
            state.resumed_from,
            extra=state.log_context(),
        )

        caller = self._build_caller(state)
        try:
            async with asyncio.timeout(input_data.timeout_seconds):
                await self._classify_chunks(chunks, state, caller, input_data.language)
        except (ChunkClassificationError, TimeoutError, asyncio.CancelledError) as e:
            state.stage = EnumRunStage.FAILED
            await self._save_checkpoint(state)
            logger.error(
                "Taxonomy classification failed after %d/%d chunks: %s",
                state.completed,
                state.total_chunks,
                type(e).__name__,
                extra=state.log_context(spent_tokens=state.spent_usage.total_tokens),
            )
            raise

        return await self._finalize(state, files, indices)

    # -------------------------------------------------------------------------
    # Stages
    # -------------------------------------------------------------------------

    async def _load_progress(self, state: _RunState) -> None:
        progress = await self.progress_store.get(state.key)
        if progress is None:
            return
        if (
            progress.total_chunks == state.total_chunks
            and 0 < progress.completed_chunks <= state.total_chunks
            and len(progress.completed_outputs) == progress.completed_chunks
        ):
            state.restore(progress)
            logger.info(
                "Resuming taxonomy classification from chunk %d/%d",
                state.resumed_from,
                state.total_chunks,
                extra=state.log_context(),
            )
            return

        logger.warning(
            "Discarding chunk progress for %s: checkpoint has %d chunks, input has %d",
            state.key.short(),
            progress.total_chunks,
            state.total_chunks,
        )
        await self.progress_store.delete(state.key)

    async def _classify_chunks(
        self,
        chunks: Sequence[ModelChunk],
        state: _RunState,
        caller: ReliableProviderCaller,
        language: EnumLanguage,
    ) -> None:
        if state.completed == 0:
            state.stage = EnumRunStage.ANCHOR_CHUNK
            await self._run_wave(chunks[:1], state, caller, language, wave_number=0)

        state.stage = EnumRunStage.WAVE_LOOP
        breaker = caller.circuit_breaker
        wave_number = 0
        while state.completed < state.total_chunks:
            wave_number += 1
            size = self.config.wave_concurrency
            if breaker.state is not EnumCircuitState.CLOSED:
                size = 1
                logger.info(
                    "Circuit breaker %s is %s: classifying chunk %d alone",
                    breaker.name,
                    breaker.state.value,
                    state.completed,
                    extra=state.log_context(wave_number=wave_number),
                )
            await self._run_wave(
                chunks[state.completed : state.completed + size],
                state,
                caller,
                language,
                wave_number=wave_number,
            )

    async def _run_wave(
        self,
        wave: Sequence[ModelChunk],
        state: _RunState,
        caller: ReliableProviderCaller,
        language: EnumLanguage,
        *,
        wave_number: int,
    ) -> None:
        delay = self.config.inter_wave_delay_seconds
        if state.provider_steps > 0 and delay > 0:
            await self._sleep(delay)
        state.provider_steps += 1

        anchors = state.anchors
        logger.info(
            "Wave %d: classifying chunks %d-%d with %d anchor domains",
            wave_number,
            wave[0].chunk_index,
            wave[-1].chunk_index,
            len(anchors),
            extra=state.log_context(wave_number=wave_number),
        )

        tasks = [
            asyncio.create_task(
                handle_chunk_classify(
                    chunk,
                    caller=caller,
                    language=language,
                    anchor_domains=anchors,
                    missing_warning_threshold=self.config.missing_index_warning_threshold,
                ),
                name=f"taxonomy-chunk-{chunk.chunk_index}",
            )
            for chunk in wave
        ]
        try:
            await asyncio.wait(tasks, return_when=asyncio.FIRST_EXCEPTION)
        finally:
            pending = [task for task in tasks if not task.done()]
            for task in pending:
                task.cancel()
            if pending:
                await asyncio.gather(*pending, return_exceptions=True)
            self._record_wave(wave, tasks, state)

        for chunk, task in zip(wave, tasks):
            if task.cancelled():
                continue
            error = task.exception()
            if error is not None:
                raise ChunkClassificationError(
                    f"Chunk {chunk.chunk_index} classification failed: {error}",
                    chunk_index=chunk.chunk_index,
                    completed_chunks=state.completed,
                    total_chunks=state.total_chunks,
                    resumable=state.completed > 0,
                    spent_usage=state.spent_usage,
                    details={"error_type": type(error).__name__},
                ) from error

        logger.info(
            "Wave %d complete: %d/%d chunks, %d anchor domains",
            wave_number,
            state.completed,
            state.total_chunks,
            len(state.anchors),
            extra=state.log_context(wave_number=wave_number),
        )

    @staticmethod
    def _record_wave(
        wave: Sequence[ModelChunk],
        tasks: Sequence[asyncio.Task[ModelChunkClassifyResult]],
        state: _RunState,
    ) -> None:
        recorded = 0
        for task in tasks:
            if not task.done() or task.cancelled() or task.exception() is not None:
                break
            state.record(task.result())
            recorded += 1
        if recorded:
            state.refresh_anchors()
        if recorded < len(wave):
            logger.info(
                "Kept %d of %d chunk results from interrupted wave",
                recorded,
                len(wave),
                extra=state.log_context(),
            )

    async def _save_checkpoint(self, state: _RunState) -> None:
        if state.completed == 0:
            return
        await self.progress_store.save(state.key, state.to_progress())

    async def _finalize(
        self,
        state: _RunState,
        files: Sequence[ModelFileGroup],
        indices: Sequence[int],
    ) -> ModelClassifyOutput:
        merged = merge_taxonomies(state.outputs)
        validation = validate_taxonomy(
            merged,
            indices,
            missing_warning_threshold=self.config.missing_index_warning_threshold,
        )
        result = handle_taxonomy_postprocess(
            validation.taxonomy,
            files,
            ModelPostProcessConfig(
                prohibit_uncategorized=self.config.prohibit_uncategorized
            ),
        )
        await self.progress_store.delete(state.key)

        state.stage = EnumRunStage.DONE
        logger.info(
            "Taxonomy classification complete: %d domains, %d tests, %d tokens",
            len(result.taxonomy.domains),
            len(indices),
            state.usage.total_tokens,
            extra=state.log_context(),
        )
        return ModelClassifyOutput(
            taxonomy=result.taxonomy,
            usage=state.usage,
            total_chunks=state.total_chunks,
            resumed_from_chunk=state.resumed_from,
            violations=result.violations,
            index_violations=(*state.index_violations, *validation.violations),
        )


async def handle_taxonomy_classification(
    input_data: ModelClassifyInput,
    *,
    provider: ProtocolClassificationProvider,
    registry: ReliabilityRegistry | None = None,
    progress_store: ProtocolChunkProgressStore | None = None,
    config: ModelClassificationConfig | None = None,
) -> ModelClassifyOutput:
    """Run one classification with the given collaborators."""
    orchestrator = TaxonomyClassificationOrchestrator(
        provider,
        registry=registry,
        progress_store=progress_store,
        config=config,
    )
    return await orchestrator.run(input_data)


__all__ = [
    "TaxonomyClassificationOrchestrator",
    "compute_content_hash",
    "handle_taxonomy_classification",
]
