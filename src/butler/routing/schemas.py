"""Data models for intent classification and request routing."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import StrEnum
from typing import Any

from butler.query.schemas import QueryContext, TimeRange


class IntentType(StrEnum):
    AGGREGATE = "aggregate"
    RETRIEVAL = "retrieval"
    REMINDER = "reminder"


class ProcessingPath(StrEnum):
    CALCULATION = "calculation"
    RETRIEVAL = "retrieval"
    HYBRID = "hybrid"


class CalculationOperation(StrEnum):
    SUM = "sum"
    AVERAGE = "average"
    COUNT = "count"
    MAX = "max"
    MIN = "min"
    MEDIAN = "median"
    TREND = "trend"
    CORRELATION = "correlation"
    PERCENTAGE = "percentage"
    RATIO = "ratio"
    GROUPING = "grouping"
    FILTERING = "filtering"
    RANKING = "ranking"


class AggregationType(StrEnum):
    SUM = "sum"
    COUNT = "count"
    AVERAGE = "average"
    MAX = "max"
    MIN = "min"
    GROUP_BY = "group_by"
    DISTINCT_COUNT = "distinct_count"
    TIME_SERIES_SUM = "time_series_sum"
    TIME_SERIES_AVERAGE = "time_series_average"


class ContextNeeds(StrEnum):
    MINIMAL = "minimal"
    MODERATE = "moderate"
    EXTENSIVE = "extensive"
    HISTORICAL = "historical"
    COMPARATIVE = "comparative"

    @property
    def result_budget(self) -> int:
        """Number of search results this level of context asks for."""
        return _RESULT_BUDGETS[self]


_RESULT_BUDGETS = {
    ContextNeeds.MINIMAL: 3,
    ContextNeeds.MODERATE: 5,
    ContextNeeds.EXTENSIVE: 10,
    ContextNeeds.HISTORICAL: 15,
    ContextNeeds.COMPARATIVE: 8,
}


class GenerationType(StrEnum):
    FACTUAL = "factual"
    ANALYTICAL = "analytical"
    ADVISORY = "advisory"
    NARRATIVE = "narrative"
    SUMMARY = "summary"


# ---------------------------------------------------------------------------
# Classification
# ---------------------------------------------------------------------------


@dataclass
class ClassificationResult:
    """Per-stage intent scores plus whatever the stage learned on the way.

    Attributes:
        stage: ``rule``, ``semantic`` or ``llm``.
        scores: Intent → confidence in [0, 1]. Only intents with evidence.
        language: Detected query language (rule stage).
        variants: Query forms that were scored (rule stage).
        raw_scores: Un-normalized keyword sums (rule stage).
        matched_keywords: Keywords that fired, per intent (rule stage).
        high_confidence: Whether the top rule score cleared the bar.
        mixed_query: Whether the query asks for a number and an explanation.
        threshold: Dynamic acceptance threshold (semantic stage).
        meets_threshold: Top semantic score >= threshold.
        margin: Gap between best and second-best semantic score.
        best_examples: Best-matching prototype per intent (semantic stage).
        slots: Extracted operation/domain/timeframe (LLM stage).
        reason: Short explanation (LLM stage).
    """

    stage: str
    scores: dict[IntentType, float] = field(default_factory=dict)
    language: str = "en"
    variants: list[str] = field(default_factory=list)
    raw_scores: dict[IntentType, float] = field(default_factory=dict)
    matched_keywords: dict[IntentType, list[str]] = field(default_factory=dict)
    high_confidence: bool = False
    mixed_query: bool = False
    threshold: float = 0.0
    meets_threshold: bool = False
    margin: float = 0.0
    best_examples: dict[IntentType, str] = field(default_factory=dict)
    slots: dict[str, Any] = field(default_factory=dict)
    reason: str = ""

    def top(self) -> tuple[IntentType, float] | None:
        if not self.scores:
            return None
        intent = max(self.scores, key=lambda k: self.scores[k])
        return intent, self.scores[intent]


@dataclass(frozen=True)
class RoutingDecision:
    """Fused outcome of the classifier stages."""

    primary_intent: IntentType
    confidence: float
    hybrid: bool
    is_mixed_query: bool
    fused_scores: dict[IntentType, float]
    rule_result: ClassificationResult
    semantic_result: ClassificationResult
    llm_result: ClassificationResult | None = None


# ---------------------------------------------------------------------------
# Execution specs
# ---------------------------------------------------------------------------


@dataclass
class CalculationSpecs:
    operations: list[CalculationOperation] = field(default_factory=list)
    aggregations: list[AggregationType] = field(default_factory=list)
    filters: dict[str, Any] = field(default_factory=dict)
    time_range: TimeRange | None = None
    group_by: list[str] = field(default_factory=list)


@dataclass
class RetrievalSpecs:
    search_terms: list[str] = field(default_factory=list)
    context_needs: ContextNeeds = ContextNeeds.MODERATE
    generation_type: GenerationType = GenerationType.FACTUAL
    domain_focus: list[str] = field(default_factory=list)
    time_range: TimeRange | None = None
    semantic_weight: float = 0.7
    keyword_weight: float = 0.3


@dataclass
class Routing:
    """What the processor should run for one query."""

    query: str
    processing_path: ProcessingPath
    confidence: float
    calculation_specs: CalculationSpecs | None = None
    retrieval_specs: RetrievalSpecs | None = None
    decision: RoutingDecision | None = None
    context: QueryContext | None = None

    def __post_init__(self) -> None:
        needs_calc = self.processing_path in (ProcessingPath.CALCULATION, ProcessingPath.HYBRID)
        needs_retrieval = self.processing_path in (ProcessingPath.RETRIEVAL, ProcessingPath.HYBRID)
        if needs_calc and self.calculation_specs is None:
            raise ValueError(f"{self.processing_path} routing requires calculation specs")
        if needs_retrieval and self.retrieval_specs is None:
            raise ValueError(f"{self.processing_path} routing requires retrieval specs")

    @property
    def hybrid(self) -> bool:
        return self.processing_path == ProcessingPath.HYBRID
