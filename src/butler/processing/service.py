"""Top-level service: route a question, process it, render the reply."""

from __future__ import annotations

import logging
import time

from butler.aggregation.aggregator import DataAggregator
from butler.config import Settings, load_settings
from butler.domain.access import DomainDataAccess
from butler.embeddings.base import EmbeddingProvider
from butler.embeddings.factory import embedding_provider_from_settings
from butler.llm.base import LLMProvider
from butler.llm.factory import llm_from_settings
from butler.pipeline.indexing import IndexingOrchestrator
from butler.pipeline.rag_pipeline import RAGPipeline
from butler.processing.formatting import to_response_text
from butler.processing.processor import RequestProcessor, error_result
from butler.processing.results import ProcessingResult
from butler.query.planner import KeywordQueryPlanner, QueryPlanner
from butler.routing.llm_classifier import LLMClassifier
from butler.routing.router import RequestRouter
from butler.routing.schemas import Routing
from butler.vectorstore.base import EmbeddingStore
from butler.vectorstore.factory import store_from_settings

logger = logging.getLogger(__name__)


class ButlerService:
    """Single entry point for answering questions about personal data."""

    def __init__(
        self,
        router: RequestRouter,
        processor: RequestProcessor,
        indexer: IndexingOrchestrator | None = None,
    ):
        self.router = router
        self.processor = processor
        self.indexer = indexer

    @property
    def rag(self) -> RAGPipeline:
        return self.processor.rag

    def route(self, query: str) -> Routing:
        return self.router.route_request(query)

    def route_and_process(self, query: str) -> ProcessingResult:
        """Classify, route and execute one query.

        Indexing is brought up to date first when an orchestrator is
        attached; a query never waits on a rebuild already in progress.
        Never raises: a failed indexing check is logged and the query is
        answered from whatever is already indexed, and a routing failure
        becomes the apologetic result.
        """
        start = time.perf_counter()
        if self.indexer is not None:
            try:
                self.indexer.ensure_indexed()
            except Exception as exc:
                logger.warning("Indexing check failed, answering from the current index: %s", exc)
        try:
            routing = self.route(query)
        except Exception as exc:
            logger.exception("Routing failed for %r", query)
            return error_result(query, exc, time.perf_counter() - start)
        return self.processor.process_request(routing)

    def ask(self, query: str) -> str:
        return to_response_text(self.route_and_process(query))


def build_service(
    settings: Settings | None = None,
    domain_data: DomainDataAccess | None = None,
    embedding_provider: EmbeddingProvider | None = None,
    llm_provider: LLMProvider | None = None,
    store: EmbeddingStore | None = None,
    planner: QueryPlanner | None = None,
    use_llm: bool = True,
) -> ButlerService:
    """Wire a ``ButlerService`` from settings, building missing parts.

    Args:
        settings: Loaded settings; ``load_settings()`` when omitted.
        domain_data: Source of the user's records. Required.
        embedding_provider: Overrides the configured embedding provider.
        llm_provider: Overrides the configured LLM provider.
        store: Overrides the configured embedding store.
        planner: Overrides the keyword query planner.
        use_llm: When False, no LLM is built and every generation step
            uses its rule-based fallback.

    Returns:
        A ready ``ButlerService``.
    """
    if domain_data is None:
        raise ValueError("build_service requires a domain data source")
    settings = settings or load_settings()

    if embedding_provider is None:
        embedding_provider = embedding_provider_from_settings(settings.embedding)
    if llm_provider is None and use_llm:
        llm_provider = llm_from_settings(settings.llm)
    if store is None:
        store = store_from_settings(settings.storage)

    rag = RAGPipeline(
        embedding_provider,
        store,
        llm_provider=llm_provider,
        domain_data=domain_data,
        settings=settings,
    )
    router = RequestRouter(
        planner=planner or KeywordQueryPlanner(),
        llm_classifier=LLMClassifier(llm_provider),
        settings=settings.routing,
    )
    processor = RequestProcessor(DataAggregator(domain_data), rag, settings)
    indexer = IndexingOrchestrator(rag, coverage_target=settings.ingestion.coverage_target)

    logger.info(
        "Butler ready: embeddings=%s llm=%s store=%s",
        settings.embedding.provider,
        settings.llm.provider if llm_provider is not None else "none",
        store.store_name(),
    )
    return ButlerService(router, processor, indexer)
