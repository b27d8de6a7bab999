"""Turn a query and its planned context into executable specs."""

from __future__ import annotations

from butler.query.schemas import QueryContext, QueryIntent
from butler.routing.schemas import (
    AggregationType,
    CalculationOperation,
    CalculationSpecs,
    ContextNeeds,
    GenerationType,
    RetrievalSpecs,
)

# (triggers, operation, aggregation): evaluated in order, all matches kept
OPERATION_TRIGGERS: list[tuple[tuple[str, ...], CalculationOperation, AggregationType | None]] = [
    (
        ("total", "sum", "how much", "spend", "spent", "cost", "expense", "paid", "总计", "多少", "花"),
        CalculationOperation.SUM,
        AggregationType.SUM,
    ),
    (("average", "mean", "平均"), CalculationOperation.AVERAGE, AggregationType.AVERAGE),
    (("count", "number", "how many", "数量", "几"), CalculationOperation.COUNT, AggregationType.COUNT),
    (("highest", "maximum", "最高"), CalculationOperation.MAX, AggregationType.MAX),
    (("lowest", "minimum", "最低"), CalculationOperation.MIN, AggregationType.MIN),
    (("trend", "pattern", "over time", "趋势"), CalculationOperation.TREND, AggregationType.TIME_SERIES_SUM),
    (("by category", "breakdown", "分类"), CalculationOperation.GROUPING, AggregationType.GROUP_BY),
]

GROUP_BY_KEYS = ("category", "day", "week", "month")

EXPLANATORY_PATTERNS = (
    "why am i", "why do i", "why is", "how am i", "how do i",
    "what is causing", "what makes", "explain why", "tell me why", "为什么我",
)


def build_calculation_specs(query: str, context: QueryContext | None = None) -> CalculationSpecs:
    """Pick operations from trigger words; sum when nothing matches."""
    lowered = query.lower()
    operations: list[CalculationOperation] = []
    aggregations: list[AggregationType] = []

    for triggers, operation, aggregation in OPERATION_TRIGGERS:
        if any(t in lowered for t in triggers):
            operations.append(operation)
            if aggregation is not None:
                aggregations.append(aggregation)

    if not operations:
        operations.append(CalculationOperation.SUM)
        aggregations.append(AggregationType.SUM)

    group_by = [key for key in GROUP_BY_KEYS if f"by {key}" in lowered]

    return CalculationSpecs(
        operations=operations,
        aggregations=aggregations,
        filters=dict(context.filters) if context else {},
        time_range=context.time_range if context else None,
        group_by=group_by,
    )


def generation_type_for(query: str, context: QueryContext | None = None) -> GenerationType:
    lowered = query.lower()
    if context is not None and context.intent == QueryIntent.ADVICE:
        return GenerationType.ADVISORY
    if any(p in lowered for p in EXPLANATORY_PATTERNS):
        return GenerationType.NARRATIVE
    if "analyze" in lowered or "pattern" in lowered:
        return GenerationType.ANALYTICAL
    if "summary" in lowered or "overview" in lowered:
        return GenerationType.SUMMARY
    return GenerationType.FACTUAL


def context_needs_for(query: str) -> ContextNeeds:
    lowered = query.lower()
    if any(w in lowered for w in ("advice", "detail", "comprehensive")):
        return ContextNeeds.EXTENSIVE
    if "compare" in lowered or "vs" in lowered.split():
        return ContextNeeds.COMPARATIVE
    if "history" in lowered or "over time" in lowered:
        return ContextNeeds.HISTORICAL
    if "summary" in lowered or "brief" in lowered:
        return ContextNeeds.MINIMAL
    return ContextNeeds.MODERATE


def build_retrieval_specs(query: str, context: QueryContext | None = None) -> RetrievalSpecs:
    keywords = list(context.keywords) if context and context.keywords else [query]
    domains = sorted(str(d) for d in context.target_domains) if context else []
    return RetrievalSpecs(
        search_terms=keywords,
        context_needs=context_needs_for(query),
        generation_type=generation_type_for(query, context),
        domain_focus=domains,
        time_range=context.time_range if context else None,
    )
