"""Render processing results as markdown-flavoured chat replies."""

from __future__ import annotations

from typing import Any

from butler.processing.results import (
    CalculationResult,
    HybridResult,
    ProcessingResult,
    RetrievalResult,
)

KEY_DATA_POINTS = 5


def format_value(value: Any) -> str:
    if isinstance(value, float):
        return f"{value:.2f}"
    return str(value)


def to_response_text(result: ProcessingResult) -> str:
    match result:
        case CalculationResult():
            return _calculation_text(result)
        case RetrievalResult():
            return _retrieval_text(result)
        case HybridResult():
            return _hybrid_text(result)
        case _:
            raise TypeError(f"Unknown result type: {type(result).__name__}")


def _calculation_text(result: CalculationResult) -> str:
    lines: list[str] = []
    if result.explanation:
        lines += ["🤖 **AI Analysis**", "", result.explanation, "", "---", ""]
        lines += ["📊 **Detailed Results**", ""]
    else:
        lines += ["📊 **Calculation Results**", ""]

    for key, value in result.calculations.items():
        lines.append(f"• **{key}**: {format_value(value)}")

    if result.aggregations:
        lines += ["", "📈 **Summary Statistics**"]
        for key, value in result.aggregations.items():
            lines.append(f"• {key}: {format_value(value)}")

    if result.data_points:
        lines += ["", f"🔍 **Key Data Points** ({len(result.data_points)} records analyzed)"]
        for point in result.data_points[:KEY_DATA_POINTS]:
            lines.append(f"• {point.description}")

    return "\n".join(lines)


def _retrieval_text(result: RetrievalResult) -> str:
    lines = [result.response]

    if result.advice:
        lines += ["", "💡 **Recommendations**", result.advice]

    if result.sources:
        lines += ["", "📚 **Sources**"]
        for i, source in enumerate(result.sources, 1):
            lines.append(f"{i}. {source.title} ({source.type})")

    return "\n".join(lines)


def _hybrid_text(result: HybridResult) -> str:
    lines = ["🔬 **Comprehensive Analysis**", ""]

    if result.synthesis:
        lines += [result.synthesis, ""]

    lines.append("📊 **Quantitative Analysis**")
    for key, value in result.calculation.calculations.items():
        lines.append(f"• **{key}**: {format_value(value)}")
    lines.append("")

    lines += ["🧠 **Contextual Insights**", result.retrieval.response]

    if result.retrieval.advice:
        lines += ["", "💡 **Actionable Recommendations**", result.retrieval.advice]

    return "\n".join(lines)
