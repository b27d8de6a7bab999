"""Tests for the RAG pipeline — ingest, search, answer, rebuild."""

from __future__ import annotations

import logging
from datetime import datetime

import pytest

from butler.chunking.text_chunker import TextChunker
from butler.config import Settings
from butler.domain.access import InMemoryDomainData
from butler.domain.schemas import Domain, IndexableRecord
from butler.domain.serializers import to_searchable_text
from butler.pipeline.prompts import (
    ANALYTICAL_TEMPLATE,
    DEFAULT_TEMPLATE,
    PROMPT_TEMPLATE_KEY,
    fill_template,
    format_context,
    select_template,
)
from butler.pipeline.rag_pipeline import RAGPipeline, no_data_message, simple_response
from butler.vectorstore.schemas import SearchResult
from tests.mocks import DIM, MockLLM

# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _result(i: int, text: str = "", object_type: str = "journals") -> SearchResult:
    return SearchResult(
        embedding_id=f"r{i}_chunk_0",
        text=text or f"entry number {i}",
        object_type=object_type,
        object_id=f"r{i}",
        similarity=1.0 - i * 0.1,
    )


@pytest.fixture
def pipeline(embedder, memory_store, domain_data, test_settings) -> RAGPipeline:
    return RAGPipeline(embedder, memory_store, domain_data=domain_data, settings=test_settings)


@pytest.fixture
def indexed(pipeline: RAGPipeline) -> RAGPipeline:
    pipeline.rebuild_embeddings()
    return pipeline


# ---------------------------------------------------------------------------
# Ingest
# ---------------------------------------------------------------------------


class TestIngest:
    def test_short_record_is_one_chunk(self, pipeline: RAGPipeline, sample_records):
        journal = sample_records[6]
        assert pipeline.ingest(journal) == 1

        [stored] = pipeline.store.all()
        assert stored.id == "journal-1_chunk_0"
        assert stored.object_type == "journals"
        assert stored.object_id == "journal-1"
        assert stored.chunk_text == to_searchable_text(journal)
        assert len(stored.vector) == DIM

    def test_long_record_is_many_chunks(self, embedder, memory_store, test_settings):
        record = IndexableRecord(
            id="j-long", domain=Domain.JOURNALS, timestamp=datetime(2026, 3, 1),
            data={"content": "Walked to the park and thought about work. " * 20},
        )
        pipeline = RAGPipeline(
            embedder, memory_store, settings=test_settings,
            chunker=TextChunker(max_tokens=25, overlap_tokens=5),
        )
        stored = pipeline.ingest(record)

        assert stored > 1
        ids = sorted(e.id for e in memory_store.all())
        assert ids == sorted(f"j-long_chunk_{i}" for i in range(stored))

    def test_ingest_logs_token_estimate(self, embedder, memory_store, test_settings, caplog):
        chunker = TextChunker(max_tokens=25, overlap_tokens=5)
        record = IndexableRecord(
            id="j-est", domain=Domain.JOURNALS, timestamp=datetime(2026, 3, 1),
            data={"content": "Slept late and skipped breakfast. " * 10},
        )
        pipeline = RAGPipeline(embedder, memory_store, settings=test_settings, chunker=chunker)
        expected = sum(c.token_count for c in chunker.chunk(to_searchable_text(record)))

        with caplog.at_level(logging.DEBUG, logger="butler.pipeline.rag_pipeline"):
            stored = pipeline.ingest(record)

        assert f"Ingested j-est: {stored} chunks, ~{expected} tokens" in caplog.text

    def test_reingest_replaces_old_chunks(self, embedder, memory_store, test_settings):
        pipeline = RAGPipeline(
            embedder, memory_store, settings=test_settings,
            chunker=TextChunker(max_tokens=40, overlap_tokens=0),
        )
        long = IndexableRecord(
            id="j1", domain=Domain.JOURNALS, timestamp=datetime(2026, 3, 1),
            data={"content": "A long day at the office. " * 20},
        )
        short = IndexableRecord(
            id="j1", domain=Domain.JOURNALS, timestamp=datetime(2026, 3, 1),
            data={"content": "Edited."},
        )
        assert pipeline.ingest(long) > 1
        assert pipeline.ingest(short) == 1
        assert [e.id for e in memory_store.all()] == ["j1_chunk_0"]

    def test_empty_text_is_skipped(self, pipeline: RAGPipeline):
        empty = IndexableRecord(id="j0", domain=Domain.JOURNALS, timestamp=datetime(2026, 3, 1))
        assert pipeline.ingest(empty) == 0
        assert pipeline.store.count() == 0

    def test_failed_embedding_stores_zero_vectors(
        self, failing_embedder, memory_store, test_settings, sample_records, caplog,
    ):
        pipeline = RAGPipeline(failing_embedder, memory_store, settings=test_settings)
        with caplog.at_level(logging.WARNING):
            assert pipeline.ingest(sample_records[0]) == 1
        assert memory_store.all()[0].vector == [0.0] * DIM
        assert "substituting" in caplog.text

    def test_no_embedder(self, memory_store, sample_records):
        pipeline = RAGPipeline(None, memory_store)
        assert pipeline.ingest(sample_records[0]) == 0

    def test_delete_record(self, indexed: RAGPipeline):
        assert indexed.delete_record("finance_records", "fin-1") == 1
        assert ("finance_records", "fin-1") not in indexed.store.indexed_objects()


# ---------------------------------------------------------------------------
# Rebuild and status
# ---------------------------------------------------------------------------


class TestRebuild:
    def test_rebuild_indexes_every_record(self, pipeline: RAGPipeline):
        progress: list[tuple[int, int]] = []
        assert pipeline.rebuild_embeddings(on_progress=lambda c, t: progress.append((c, t))) == 8
        assert progress[0] == (1, 8)
        assert progress[-1] == (8, 8)
        assert len(progress) == 8

    def test_rebuild_without_domain_data(self, embedder, memory_store):
        assert RAGPipeline(embedder, memory_store).rebuild_embeddings() == 0

    def test_indexing_status(self, indexed: RAGPipeline):
        report = indexed.indexing_status()
        assert report["total_domain_records"] == 8
        assert report["indexed_records"] == 8
        assert report["total_embeddings"] == 8
        assert report["overall_coverage"] == 1.0
        assert report["embedding_counts"] == {
            "finance_records": 4,
            "meals": 2,
            "journals": 1,
            "health_metrics": 1,
        }

    def test_status_before_indexing(self, pipeline: RAGPipeline):
        report = pipeline.indexing_status()
        assert report["overall_coverage"] == 0.0
        assert report["domain_counts"]["finance_records"] == 4

    def test_status_with_no_records(self, embedder, memory_store):
        pipeline = RAGPipeline(embedder, memory_store, domain_data=InMemoryDomainData())
        assert pipeline.indexing_status()["overall_coverage"] == 0.0


# ---------------------------------------------------------------------------
# Search
# ---------------------------------------------------------------------------


class TestSearch:
    def test_exact_text_ranks_first(self, indexed: RAGPipeline, sample_records):
        text = to_searchable_text(sample_records[6])
        results = indexed.search(text)
        assert results[0].object_id == "journal-1"
        assert results[0].similarity == pytest.approx(1.0)

    def test_sorted_and_limited(self, indexed: RAGPipeline):
        results = indexed.search("tired sleep groceries", limit=3)
        assert len(results) <= 3
        sims = [r.similarity for r in results]
        assert sims == sorted(sims, reverse=True)

    def test_type_filter(self, indexed: RAGPipeline):
        results = indexed.search("pizza dinner", object_types=["meals"])
        assert results
        assert {r.object_type for r in results} == {"meals"}

    def test_min_score(self, indexed: RAGPipeline, sample_records):
        text = to_searchable_text(sample_records[6])
        results = indexed.search(text, min_score=0.999)
        assert [r.object_id for r in results] == ["journal-1"]

    def test_embedding_failure_returns_empty(
        self, failing_embedder, memory_store, test_settings, caplog,
    ):
        pipeline = RAGPipeline(failing_embedder, memory_store, settings=test_settings)
        with caplog.at_level(logging.WARNING):
            assert pipeline.search("Why am I always tired?") == []
        assert "Search failed" in caplog.text

    def test_no_embedder_returns_empty(self, memory_store):
        assert RAGPipeline(None, memory_store).search("anything") == []


# ---------------------------------------------------------------------------
# Answer
# ---------------------------------------------------------------------------


class TestAnswer:
    def test_no_results_gives_no_data_message(self, pipeline: RAGPipeline):
        reply = pipeline.answer("Why am I always tired?")
        assert reply == no_data_message("Why am I always tired?")
        assert "couldn't find relevant information" in reply

    def test_no_data_message_in_chinese(self):
        reply = no_data_message("我为什么总是很累？")
        assert reply.startswith("抱歉")
        assert "我为什么总是很累？" in reply

    def test_rule_based_without_llm(self, indexed: RAGPipeline):
        reply = indexed.answer("tired sleep")
        assert reply.startswith('Based on your data, here\'s what I found regarding "tired sleep":')
        assert "1. DOMAIN:" in reply

    def test_llm_reply(self, embedder, memory_store, domain_data, test_settings):
        llm = MockLLM(reply="  You sleep too little.  ")
        pipeline = RAGPipeline(
            embedder, memory_store, llm_provider=llm,
            domain_data=domain_data, settings=test_settings,
        )
        pipeline.rebuild_embeddings()

        assert pipeline.answer("Why am I always tired?") == "You sleep too little."
        [prompt] = llm.prompts
        assert "User Question: Why am I always tired?" in prompt
        assert "## Relevant Information" in prompt
        assert "Relevance:" in prompt
        assert "{calculation_summary}" not in prompt

    def test_generation_type_and_summary(self, pipeline: RAGPipeline, mock_llm):
        pipeline.llm_provider = mock_llm
        pipeline.answer(
            "How much did I spend?",
            generation_type="analytical",
            calculation_summary="Total: 120.50",
            results=[_result(1)],
        )
        prompt = mock_llm.prompts[0]
        assert prompt.startswith('You are a personal data analyst AI. The user asked: "How much did I spend?"')
        assert "**Calculation Summary:**\nTotal: 120.50" in prompt

    def test_prompt_override(self, pipeline: RAGPipeline, mock_llm):
        pipeline.llm_provider = mock_llm
        pipeline.answer(
            "q",
            prompt_templates={PROMPT_TEMPLATE_KEY: "Q={query}\n{context}"},
            results=[_result(1, text="Slept five hours")],
        )
        assert mock_llm.prompts[0].startswith("Q=q\n## Relevant Information")

    def test_prefetched_results_skip_search(self, pipeline: RAGPipeline, embedder):
        reply = pipeline.answer("q", results=[_result(1, text="Pizza delivery")])
        assert "1. Pizza delivery" in reply
        assert embedder.calls == 0

    def test_llm_failure_falls_back(self, pipeline: RAGPipeline, failing_llm, caplog):
        pipeline.llm_provider = failing_llm
        with caplog.at_level(logging.WARNING):
            reply = pipeline.answer("q", results=[_result(1)])
        assert reply == simple_response("q", [_result(1)])
        assert "LLM generation failed" in caplog.text

    def test_empty_llm_reply_falls_back(self, pipeline: RAGPipeline):
        pipeline.llm_provider = MockLLM(reply="   ")
        reply = pipeline.answer("q", results=[_result(1)])
        assert reply.startswith("Based on your data")

    def test_failing_embedder_still_replies(self, failing_embedder, memory_store, domain_data):
        pipeline = RAGPipeline(
            failing_embedder, memory_store, domain_data=domain_data,
            settings=Settings(),
        )
        pipeline.rebuild_embeddings()
        reply = pipeline.answer("Why am I always tired?")
        assert reply == no_data_message("Why am I always tired?")


class TestSimpleResponse:
    def test_lists_top_five(self):
        results = [_result(i) for i in range(7)]
        reply = simple_response("q", results)
        assert "5. entry number 4" in reply
        assert "entry number 5" not in reply
        assert reply.endswith("...and 2 more related entries in your data.")

    def test_short_listing_has_no_tail(self):
        reply = simple_response("q", [_result(1)])
        assert reply.endswith("1. entry number 1")


# ---------------------------------------------------------------------------
# Prompts
# ---------------------------------------------------------------------------


class TestPrompts:
    def test_select_template_precedence(self):
        assert select_template() == DEFAULT_TEMPLATE
        assert select_template(generation_type="analytical") == ANALYTICAL_TEMPLATE
        assert select_template(generation_type="unknown") == DEFAULT_TEMPLATE
        override = {PROMPT_TEMPLATE_KEY: "custom {query}"}
        assert select_template(override, "analytical") == "custom {query}"
        assert select_template({PROMPT_TEMPLATE_KEY: ""}, "summary") != DEFAULT_TEMPLATE

    def test_missing_summary_leaves_no_gap(self):
        prompt = fill_template(DEFAULT_TEMPLATE, "q", "## Relevant Information")
        assert "{" not in prompt
        assert "\n\n\n" not in prompt

    def test_braces_in_query_are_literal(self):
        prompt = fill_template("Q: {query}\n{context}", "what is {context}?", "CTX")
        assert prompt == "Q: what is {context}?\nCTX"

    def test_format_context(self):
        block = format_context([("Slept five hours", "health_metrics", 0.875)])
        assert block == (
            "## Relevant Information\n\n"
            "1. Slept five hours\n"
            "   (Type: health_metrics, Relevance: 87.5%)"
        )

    def test_format_context_budget(self):
        entries = [("x" * 50, "meals", 0.5) for _ in range(10)]
        block = format_context(entries, max_chars=200)
        assert len(block) <= 200
        assert "1. " in block
        assert "3. " not in block
