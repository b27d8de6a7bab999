"""RAG pipeline — record → text → chunks → embeddings, and query → answer.

Every provider call is treated as fallible. Ingest failures skip the record,
search failures return nothing, and generation failures fall back to a
plain listing of the best matches, so a user question always gets a reply.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable
from datetime import datetime

from butler.chunking.keywords import detect_language
from butler.chunking.text_chunker import TextChunker
from butler.config import Settings
from butler.domain.access import DomainDataAccess
from butler.domain.schemas import IndexableRecord
from butler.domain.serializers import to_searchable_text
from butler.embeddings.base import EmbeddingProvider
from butler.embeddings.batching import BatchedEmbedder
from butler.llm.base import LLMProvider
from butler.pipeline.prompts import (
    SYSTEM_PROMPT,
    fill_template,
    format_context,
    select_template,
)
from butler.vectorstore.base import EmbeddingStore
from butler.vectorstore.schemas import Embedding, EmbeddingFilter, SearchResult
from butler.vectorstore.similarity import cosine_similarity

logger = logging.getLogger(__name__)

ProgressCallback = Callable[[int, int], None]

NO_DATA_MESSAGES = {
    "en": (
        'I couldn\'t find relevant information in your data to answer: "{query}". '
        "You may need to add more data or try a different question."
    ),
    "zh": '抱歉，我在您的数据中没有找到与"{query}"相关的信息。您可能需要添加更多数据或换一个问题。',
}

FALLBACK_LISTING = 5


def no_data_message(query: str) -> str:
    return NO_DATA_MESSAGES[detect_language(query)].format(query=query)


class RAGPipeline:
    """Orchestrates ingest → search → prompt → generate over personal records."""

    def __init__(
        self,
        embedding_provider: EmbeddingProvider | None,
        store: EmbeddingStore,
        llm_provider: LLMProvider | None = None,
        domain_data: DomainDataAccess | None = None,
        chunker: TextChunker | None = None,
        settings: Settings | None = None,
    ):
        self.settings = settings or Settings()
        self.store = store
        self.llm_provider = llm_provider
        self.domain_data = domain_data
        self.chunker = chunker or TextChunker(
            max_tokens=self.settings.chunking.max_tokens,
            overlap_tokens=self.settings.chunking.overlap_tokens,
            chars_per_token=self.settings.chunking.chars_per_token,
        )
        self.embedder: EmbeddingProvider | None = None
        if embedding_provider is not None:
            self.embedder = BatchedEmbedder(
                embedding_provider,
                batch_size=self.settings.ingestion.batch_size,
                batch_delay=self.settings.ingestion.batch_delay,
            )

    # ------------------------------------------------------------------
    # Ingestion
    # ------------------------------------------------------------------

    def ingest(self, record: IndexableRecord) -> int:
        """Embed one record and store one embedding per chunk.

        Returns:
            Number of embeddings stored; 0 for empty text or on failure.
        """
        text = to_searchable_text(record)
        if not text:
            return 0
        if self.embedder is None:
            logger.warning("No embedding provider configured; skipping %s", record.id)
            return 0

        try:
            chunks = self.chunker.chunk(text)
            vectors = self.embedder.embed_texts([c.text for c in chunks])
            now = datetime.now()
            embeddings = [
                Embedding(
                    id=f"{record.id}_chunk_{chunk.chunk_index}",
                    object_type=record.object_type,
                    object_id=record.id,
                    chunk_text=chunk.text,
                    vector=vector,
                    created_at=now,
                )
                for chunk, vector in zip(chunks, vectors, strict=True)
            ]
            self.store.delete_by_object(record.object_type, record.id)
            stored = self.store.upsert(embeddings)
        except Exception as exc:
            logger.warning("Failed to ingest record %s (%s): %s", record.id, record.domain, exc)
            return 0

        logger.debug(
            "Ingested %s: %d chunks, ~%d tokens",
            record.id,
            stored,
            sum(c.token_count for c in chunks),
        )
        return stored

    def delete_record(self, object_type: str, object_id: str) -> int:
        """Drop every embedding owned by a deleted record."""
        return self.store.delete_by_object(object_type, object_id)

    def rebuild_embeddings(self, on_progress: ProgressCallback | None = None) -> int:
        """Re-ingest every indexable record from the domain data source.

        Args:
            on_progress: Called with ``(current, total)`` after each record.

        Returns:
            Number of records that produced at least one embedding.
        """
        if self.domain_data is None:
            logger.warning("No domain data source configured; nothing to rebuild")
            return 0

        records = self.domain_data.all_indexable_records()
        total = len(records)
        indexed = 0
        logger.info("Rebuilding embeddings for %d records", total)

        for i, record in enumerate(records):
            try:
                if self.ingest(record) > 0:
                    indexed += 1
            except Exception as exc:
                logger.warning("Rebuild skipped record %s: %s", record.id, exc)
            if on_progress is not None:
                on_progress(i + 1, total)

        logger.info("Rebuild finished: %d/%d records indexed", indexed, total)
        return indexed

    def indexing_status(self) -> dict:
        """Report domain record counts against what is embedded."""
        domain_counts = self.domain_data.domain_counts() if self.domain_data else {}
        total_records = sum(domain_counts.values())
        indexed = self.store.indexed_objects()
        coverage = min(1.0, len(indexed) / total_records) if total_records else 0.0
        return {
            "domain_counts": domain_counts,
            "embedding_counts": self.store.count_by_type(),
            "total_domain_records": total_records,
            "total_embeddings": self.store.count(),
            "indexed_records": len(indexed),
            "overall_coverage": coverage,
        }

    # ------------------------------------------------------------------
    # Query
    # ------------------------------------------------------------------

    def search(
        self,
        query: str,
        object_types: Iterable[str] | None = None,
        start: datetime | None = None,
        end: datetime | None = None,
        limit: int | None = None,
        min_score: float | None = None,
    ) -> list[SearchResult]:
        """Semantic search over stored chunks.

        Returns:
            Up to ``limit`` results with similarity >= ``min_score``, best
            first. Empty on any failure.
        """
        limit = limit or self.settings.retrieval.limit
        min_score = self.settings.retrieval.min_score if min_score is None else min_score

        try:
            if self.embedder is None:
                raise RuntimeError("no embedding provider configured")
            query_vector = self.embedder.embed_query(query)
            candidates = self.store.find_similar(
                query_vector,
                EmbeddingFilter.build(object_types, start, end),
                limit=limit * 2,
                threshold=min_score,
            )
        except Exception as exc:
            logger.warning("Search failed for %r: %s", query, exc)
            return []

        results = []
        for emb in candidates:
            similarity = cosine_similarity(query_vector, emb.vector)
            if similarity >= min_score:
                results.append(SearchResult(
                    embedding_id=emb.id,
                    text=emb.chunk_text,
                    object_type=emb.object_type,
                    object_id=emb.object_id,
                    similarity=similarity,
                ))

        results.sort(key=lambda r: r.similarity, reverse=True)
        logger.info("Search returned %d results (candidates=%d)", min(limit, len(results)), len(candidates))
        return results[:limit]

    def answer(
        self,
        query: str,
        object_types: Iterable[str] | None = None,
        prompt_templates: dict[str, str] | None = None,
        calculation_summary: str | None = None,
        generation_type: str | None = None,
        limit: int | None = None,
        results: list[SearchResult] | None = None,
    ) -> str:
        """Answer a question from the user's records.

        Args:
            query: The user's question.
            object_types: Restrict retrieval to these object types.
            prompt_templates: Optional overrides; ``rag_prompt_template`` wins.
            calculation_summary: Numbers to weave into the answer.
            generation_type: Picks a template when no override is given.
            limit: Number of results to retrieve.
            results: Pre-fetched search results; skips the search step.

        Returns:
            Generated text, the no-data message, or the rule-based fallback.
        """
        if results is None:
            results = self.search(query, object_types=object_types, limit=limit)
        if not results:
            return no_data_message(query)

        context = format_context(
            [(r.text, r.object_type, r.similarity) for r in results],
            max_chars=self.settings.retrieval.max_context_chars,
        )
        template = select_template(prompt_templates, generation_type)
        prompt = fill_template(template, query, context, calculation_summary)

        if self.llm_provider is None:
            logger.info("No LLM provider configured; using rule-based response")
            return simple_response(query, results)

        try:
            reply = self.llm_provider.chat(
                [
                    {"role": "system", "content": SYSTEM_PROMPT},
                    {"role": "user", "content": prompt},
                ],
                temperature=self.settings.retrieval.temperature,
            )
        except Exception as exc:
            logger.warning("LLM generation failed, using rule-based response: %s", exc)
            return simple_response(query, results)

        if not reply or not reply.strip():
            logger.warning("LLM returned an empty reply, using rule-based response")
            return simple_response(query, results)
        return reply.strip()


def simple_response(query: str, results: list[SearchResult]) -> str:
    """Deterministic answer listing the top matches verbatim."""
    lines = [f'Based on your data, here\'s what I found regarding "{query}":', ""]
    for i, result in enumerate(results[:FALLBACK_LISTING], 1):
        lines.append(f"{i}. {result.text}")
        lines.append("")
    remaining = len(results) - FALLBACK_LISTING
    if remaining > 0:
        lines.append(f"...and {remaining} more related entries in your data.")
    return "\n".join(lines).strip()
