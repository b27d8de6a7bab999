"""Shared fixtures for tests — synthetic personal records, no network calls."""

from __future__ import annotations

from datetime import datetime

import pytest

from butler.config import IngestionSettings, RetrievalSettings, Settings
from butler.domain.access import InMemoryDomainData
from butler.domain.schemas import Domain, IndexableRecord
from butler.query.planner import KeywordQueryPlanner
from butler.vectorstore.memory_store import InMemoryEmbeddingStore
from tests.mocks import NOW, BagOfWordsEmbedder, FailingEmbedder, FailingLLM, MockLLM

# ---------------------------------------------------------------------------
# Records
# ---------------------------------------------------------------------------


def _record(domain: str, record_id: str, ts: datetime, **data) -> IndexableRecord:
    return IndexableRecord(id=record_id, domain=domain, timestamp=ts, data=data)


@pytest.fixture
def sample_records() -> list[IndexableRecord]:
    """One month of records; this month's expenses total 120.50."""
    return [
        _record(
            Domain.FINANCE, "fin-1", datetime(2026, 3, 2, 9, 0),
            type="expense", amount=45.25, currency="USD",
            category="takeout", notes="Pizza delivery",
        ),
        _record(
            Domain.FINANCE, "fin-2", datetime(2026, 3, 5, 18, 30),
            type="expense", amount=75.25, currency="USD",
            category="groceries", notes="Weekly groceries",
        ),
        _record(
            Domain.FINANCE, "fin-3", datetime(2026, 2, 20, 10, 0),
            type="expense", amount=60.0, currency="USD",
            category="groceries", notes="February groceries",
        ),
        _record(
            Domain.FINANCE, "fin-4", datetime(2026, 3, 1, 8, 0),
            type="income", amount=3000.0, currency="USD",
            category="salary", notes="March salary",
        ),
        _record(
            Domain.MEALS, "meal-1", datetime(2026, 3, 2, 19, 0),
            name="Pizza", items=["pepperoni pizza", "cola"], calories=900,
        ),
        _record(
            Domain.MEALS, "meal-2", datetime(2026, 3, 6, 12, 30),
            name="Salad", items=["greens", "chicken"], calories=350,
        ),
        _record(
            Domain.JOURNALS, "journal-1", datetime(2026, 3, 10, 22, 0),
            content="Felt tired all week. Sleeping only five hours because of late work nights.",
            mood=2, topics=["sleep", "work"],
        ),
        _record(
            Domain.HEALTH, "health-1", datetime(2026, 3, 8, 7, 0),
            metric_type="sleep", value=5.0, unit="hours", notes="Short sleep, tired",
        ),
    ]


@pytest.fixture
def domain_data(sample_records: list[IndexableRecord]) -> InMemoryDomainData:
    return InMemoryDomainData(sample_records)


# ---------------------------------------------------------------------------
# Components
# ---------------------------------------------------------------------------


@pytest.fixture
def test_settings() -> Settings:
    """Defaults, minus the inter-batch pause and with a permissive score floor."""
    return Settings(
        ingestion=IngestionSettings(batch_delay=0.0),
        retrieval=RetrievalSettings(min_score=0.0),
    )


@pytest.fixture
def embedder() -> BagOfWordsEmbedder:
    return BagOfWordsEmbedder()


@pytest.fixture
def failing_embedder() -> FailingEmbedder:
    return FailingEmbedder()


@pytest.fixture
def mock_llm() -> MockLLM:
    return MockLLM()


@pytest.fixture
def failing_llm() -> FailingLLM:
    return FailingLLM()


@pytest.fixture
def memory_store() -> InMemoryEmbeddingStore:
    return InMemoryEmbeddingStore()


@pytest.fixture
def planner() -> KeywordQueryPlanner:
    return KeywordQueryPlanner(clock=lambda: NOW)
