"""Indexing orchestrator — decides when a full embedding rebuild is needed."""

from __future__ import annotations

import logging

from butler.pipeline.rag_pipeline import ProgressCallback, RAGPipeline
from butler.pipeline.status import EmbeddingStatus

logger = logging.getLogger(__name__)

PROGRESS_LOG_EVERY = 5


class IndexingOrchestrator:
    """Owns the embedding status and runs at most one rebuild at a time."""

    def __init__(
        self,
        pipeline: RAGPipeline,
        status: EmbeddingStatus | None = None,
        coverage_target: float = 0.8,
    ):
        self.pipeline = pipeline
        self.status = status or EmbeddingStatus()
        self.coverage_target = coverage_target

    def ensure_indexed(
        self,
        force: bool = False,
        on_progress: ProgressCallback | None = None,
    ) -> bool:
        """Rebuild embeddings when coverage is below target.

        Args:
            force: Rebuild even if coverage looks fine or a previous run
                completed.
            on_progress: Forwarded to ``rebuild_embeddings``.

        Returns:
            True if a rebuild ran to completion.
        """
        if force and not self.status.is_generating:
            self.status.reset()

        if self.status.is_generating:
            logger.info("Embeddings already generating, skipping")
            return False
        if self.status.is_complete:
            logger.info("Embeddings already complete, skipping")
            return False

        if not force:
            report = self.pipeline.indexing_status()
            total = report["total_domain_records"]
            coverage = report["overall_coverage"]
            logger.debug("Indexing coverage %.1f%% of %d records", coverage * 100, total)
            if total == 0 or coverage >= self.coverage_target:
                self.status.mark_complete()
                return False

        if not self.status.start():
            return False

        def progress(current: int, total: int) -> None:
            if current % PROGRESS_LOG_EVERY == 0 or current == total:
                logger.debug("Indexing progress: %d/%d", current, total)
            if on_progress is not None:
                on_progress(current, total)

        try:
            self.pipeline.rebuild_embeddings(on_progress=progress)
        except Exception:
            self.status.reset()
            logger.exception("Domain indexing failed")
            return False

        self.status.mark_complete()
        return True
