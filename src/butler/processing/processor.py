"""Request processor — executes a ``Routing`` and returns a result.

Three paths: calculation (aggregator), retrieval (RAG search + answer), and
hybrid (both concurrently, then a synthesis). ``process_request`` never
raises; any failure becomes an apologetic retrieval result.
"""

from __future__ import annotations

import logging
import time
from concurrent.futures import ThreadPoolExecutor
from datetime import datetime
from typing import Any

from butler.aggregation.aggregator import DataAggregator
from butler.aggregation.schemas import DataPoint
from butler.config import Settings
from butler.domain.schemas import Domain
from butler.pipeline.rag_pipeline import RAGPipeline
from butler.processing.formatting import format_value
from butler.processing.results import (
    CalculationResult,
    HybridResult,
    ProcessingResult,
    RetrievalResult,
    SourceCitation,
)
from butler.routing.schemas import (
    CalculationOperation,
    CalculationSpecs,
    GenerationType,
    ProcessingPath,
    RetrievalSpecs,
    Routing,
)
from butler.vectorstore.schemas import SearchResult

logger = logging.getLogger(__name__)

CITATION_TITLE_CHARS = 50
EXPLANATION_CONTEXT_LIMIT = 5

_EXTREMES = {
    CalculationOperation.MAX: "Maximum",
    CalculationOperation.MIN: "Minimum",
}


def format_date_range(points: list[DataPoint]) -> str:
    if not points:
        return "No data"
    stamps = sorted(p.timestamp for p in points)
    first, last = stamps[0].date(), stamps[-1].date()
    if first == last:
        return first.isoformat()
    return f"{first.isoformat()} to {last.isoformat()}"


def _summary_lines(title: str, values: dict[str, Any], bold_keys: bool) -> list[str]:
    lines = [title]
    for key, value in values.items():
        label = f"**{key}**" if bold_keys else key
        lines.append(f"• {label}: {format_value(value)}")
    return lines


def rule_based_calculation_summary(calculations: dict[str, Any], aggregations: dict[str, Any]) -> str:
    """Deterministic explanation used when generation is unavailable."""
    lines: list[str] = []
    if calculations:
        lines += _summary_lines("**Calculation Results:**", calculations, bold_keys=True)
        lines.append("")
    if aggregations:
        lines += _summary_lines("**Data Summary:**", aggregations, bold_keys=False)
    return "\n".join(lines).strip()


def rule_based_synthesis(calculation: CalculationResult, retrieval: RetrievalResult) -> str:
    """Lead with the primary figure, then the retrieved context, then advice."""
    lines: list[str] = []
    if calculation.calculations:
        key, value = next(iter(calculation.calculations.items()))
        lines += ["Based on your data analysis:", f"• **{key}**: {format_value(value)}", ""]
    lines += [f"**Analysis**: {retrieval.response}", ""]
    if retrieval.advice:
        lines.append(f"**Key Insights**: {retrieval.advice}")
    return "\n".join(lines).strip()


def error_result(query: str, exc: Exception, elapsed: float = 0.0) -> RetrievalResult:
    """The apologetic reply returned instead of raising."""
    return RetrievalResult(
        query=query,
        confidence=0.0,
        processing_time=elapsed,
        response=f"Sorry, I encountered an error while processing your request: {exc}",
    )


class RequestProcessor:
    """Executes routed requests against the aggregator and the RAG pipeline."""

    def __init__(
        self,
        aggregator: DataAggregator,
        rag: RAGPipeline,
        settings: Settings | None = None,
        prompt_templates: dict[str, str] | None = None,
    ):
        self.aggregator = aggregator
        self.rag = rag
        self.settings = settings or Settings()
        self.prompt_templates = prompt_templates

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def process_request(self, routing: Routing) -> ProcessingResult:
        start = time.perf_counter()
        try:
            match routing.processing_path:
                case ProcessingPath.CALCULATION:
                    return self.execute_calculation(routing.calculation_specs, routing.query)
                case ProcessingPath.RETRIEVAL:
                    return self.execute_retrieval(routing.retrieval_specs, routing.query)
                case ProcessingPath.HYBRID:
                    return self.execute_hybrid(
                        routing.calculation_specs, routing.retrieval_specs, routing.query
                    )
                case _:
                    raise ValueError(f"Unknown processing path: {routing.processing_path}")
        except Exception as exc:
            logger.exception("Processing failed for %r", routing.query)
            return error_result(routing.query, exc, time.perf_counter() - start)

    def execute_calculation(self, specs: CalculationSpecs, query: str) -> CalculationResult:
        start = time.perf_counter()
        calculations: dict[str, Any] = {}
        aggregations: dict[str, Any] = {}
        points: list[DataPoint] = []
        seen: set[str] = set()

        def merge(new_points: list[DataPoint]) -> None:
            for point in new_points:
                if point.id not in seen:
                    seen.add(point.id)
                    points.append(point)

        for operation in specs.operations:
            match operation:
                case CalculationOperation.SUM:
                    result = self.aggregator.calculate_sum(specs.filters, specs.time_range)
                    calculations["Total"] = result.value
                    merge(result.data_points)
                case CalculationOperation.AVERAGE:
                    result = self.aggregator.calculate_average(specs.filters, specs.time_range)
                    calculations["Average"] = result.value
                    merge(result.data_points)
                case CalculationOperation.COUNT:
                    result = self.aggregator.calculate_count(specs.filters, specs.time_range)
                    calculations["Count"] = int(result.value)
                    merge(result.data_points)
                case CalculationOperation.MAX | CalculationOperation.MIN:
                    if operation == CalculationOperation.MAX:
                        result = self.aggregator.calculate_max(specs.filters, specs.time_range)
                    else:
                        result = self.aggregator.calculate_min(specs.filters, specs.time_range)
                    calculations[_EXTREMES[operation]] = result.value
                    merge(result.data_points)
                case CalculationOperation.TREND:
                    granularity = self._trend_granularity(specs)
                    trend = self.aggregator.calculate_trends(specs.filters, specs.time_range, granularity)
                    for bucket in trend.buckets:
                        aggregations[f"Trend {bucket.key}"] = bucket.total
                    if trend.buckets:
                        calculations["Trend"] = trend.direction
                case CalculationOperation.GROUPING:
                    breakdown = self.aggregator.calculate_spending_by_category(specs.time_range)
                    for category, amount in sorted(breakdown.items(), key=lambda kv: kv[1], reverse=True):
                        calculations[f"Category: {category}"] = amount
                case _:
                    logger.debug("Operation %s not supported; skipped", operation)

        if points:
            aggregations["Data Points"] = len(points)
            aggregations["Date Range"] = format_date_range(points)

        explanation = self._explain_calculation(query, calculations, aggregations)

        return CalculationResult(
            query=query,
            confidence=self.settings.routing.calculation_confidence,
            processing_time=time.perf_counter() - start,
            calculations=calculations,
            aggregations=aggregations,
            data_points=points,
            explanation=explanation,
        )

    def execute_retrieval(self, specs: RetrievalSpecs, query: str) -> RetrievalResult:
        start = time.perf_counter()
        object_types = specs.domain_focus or None
        results = self.rag.search(query, object_types=object_types, limit=specs.context_needs.result_budget)
        response = self.rag.answer(
            query,
            prompt_templates=self.prompt_templates,
            generation_type=specs.generation_type,
            results=results,
        )

        advice = None
        if specs.generation_type == GenerationType.ADVISORY:
            advice = self._spending_advice(specs)

        return RetrievalResult(
            query=query,
            confidence=self._retrieval_confidence(results),
            processing_time=time.perf_counter() - start,
            response=response,
            sources=[self._citation(r) for r in results],
            generation_type=specs.generation_type,
            advice=advice,
        )

    def execute_hybrid(
        self,
        calculation_specs: CalculationSpecs,
        retrieval_specs: RetrievalSpecs,
        query: str,
    ) -> HybridResult:
        start = time.perf_counter()
        with ThreadPoolExecutor(max_workers=2, thread_name_prefix="hybrid") as pool:
            calc_future = pool.submit(self.execute_calculation, calculation_specs, query)
            retrieval_future = pool.submit(self.execute_retrieval, retrieval_specs, query)
            calculation = calc_future.result()
            retrieval = retrieval_future.result()

        synthesis = self._synthesize(query, calculation, retrieval, retrieval_specs)

        return HybridResult(
            query=query,
            confidence=(calculation.confidence + retrieval.confidence) / 2,
            processing_time=time.perf_counter() - start,
            calculation=calculation,
            retrieval=retrieval,
            synthesis=synthesis,
        )

    # ------------------------------------------------------------------
    # Private
    # ------------------------------------------------------------------

    def _explain_calculation(
        self,
        query: str,
        calculations: dict[str, Any],
        aggregations: dict[str, Any],
    ) -> str:
        fallback = rule_based_calculation_summary(calculations, aggregations)
        if self.rag.llm_provider is None:
            return fallback

        results = self.rag.search(query, limit=EXPLANATION_CONTEXT_LIMIT)
        if not results:
            return fallback
        try:
            return self.rag.answer(
                query,
                prompt_templates=self.prompt_templates,
                calculation_summary=fallback,
                generation_type=GenerationType.ANALYTICAL,
                results=results,
            )
        except Exception as exc:
            logger.info("Calculation explanation failed, using rule-based summary: %s", exc)
            return fallback

    def _synthesize(
        self,
        query: str,
        calculation: CalculationResult,
        retrieval: RetrievalResult,
        specs: RetrievalSpecs,
    ) -> str:
        if self.rag.llm_provider is None or not retrieval.sources:
            return rule_based_synthesis(calculation, retrieval)

        summary = rule_based_calculation_summary(calculation.calculations, calculation.aggregations)
        results = self.rag.search(
            query,
            object_types=specs.domain_focus or None,
            limit=specs.context_needs.result_budget,
        )
        if not results:
            return rule_based_synthesis(calculation, retrieval)
        try:
            return self.rag.answer(
                query,
                prompt_templates=self.prompt_templates,
                calculation_summary=summary,
                generation_type=specs.generation_type,
                results=results,
            )
        except Exception as exc:
            logger.info("Hybrid synthesis failed, using rule-based synthesis: %s", exc)
            return rule_based_synthesis(calculation, retrieval)

    def _spending_advice(self, specs: RetrievalSpecs) -> str | None:
        if specs.domain_focus and Domain.FINANCE not in specs.domain_focus:
            return None
        analysis = self.aggregator.analyze_spending(specs.time_range)
        if not analysis.category_breakdown or analysis.total_spent <= 0:
            return None
        category, amount = max(analysis.category_breakdown.items(), key=lambda kv: kv[1])
        share = amount / analysis.total_spent * 100
        return (
            f"Your largest spending category is {category} at {amount:.2f} "
            f"({share:.0f}% of {analysis.total_spent:.2f}). "
            "Setting a budget for it is the most direct way to reduce spending."
        )

    @staticmethod
    def _trend_granularity(specs: CalculationSpecs) -> str:
        for key in ("month", "week", "day"):
            if key in specs.group_by:
                return key
        return "day"

    @staticmethod
    def _citation(result: SearchResult) -> SourceCitation:
        text = result.text
        title = text if len(text) <= CITATION_TITLE_CHARS else text[:CITATION_TITLE_CHARS] + "..."
        return SourceCitation(
            id=result.embedding_id,
            title=title,
            type=result.object_type,
            timestamp=datetime.now(),
            relevance_score=result.similarity,
            snippet=text,
        )

    @staticmethod
    def _retrieval_confidence(results: list[SearchResult]) -> float:
        if not results:
            return 0.0
        mean = sum(r.similarity for r in results) / len(results)
        return max(0.0, min(1.0, mean))
