"""Result types produced by the request processor.

``ProcessingResult`` is a closed union; formatting matches on it
exhaustively.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any

from butler.aggregation.schemas import DataPoint
from butler.routing.schemas import GenerationType


@dataclass(frozen=True)
class SourceCitation:
    id: str
    title: str
    type: str
    timestamp: datetime
    relevance_score: float | None = None
    snippet: str | None = None


@dataclass(frozen=True)
class CalculationResult:
    """Numbers computed for a query, plus the records behind them.

    Attributes:
        calculations: Headline figures (``Total``, ``Average``, ...), in
            the order they were computed.
        aggregations: Summary statistics (``Data Points``, ``Date Range``).
        data_points: Records that contributed, merged across operations.
        explanation: Generated or rule-based narrative of the numbers.
    """

    query: str
    confidence: float
    processing_time: float
    calculations: dict[str, Any] = field(default_factory=dict)
    aggregations: dict[str, Any] = field(default_factory=dict)
    data_points: list[DataPoint] = field(default_factory=list)
    explanation: str | None = None


@dataclass(frozen=True)
class RetrievalResult:
    query: str
    confidence: float
    processing_time: float
    response: str
    sources: list[SourceCitation] = field(default_factory=list)
    generation_type: GenerationType = GenerationType.FACTUAL
    advice: str | None = None


@dataclass(frozen=True)
class HybridResult:
    """Calculation and retrieval run side by side, then synthesized."""

    query: str
    confidence: float
    processing_time: float
    calculation: CalculationResult
    retrieval: RetrievalResult
    synthesis: str


ProcessingResult = CalculationResult | RetrievalResult | HybridResult
