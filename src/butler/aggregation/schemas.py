"""Data models for aggregation results."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import StrEnum
from typing import Any

from butler.query.schemas import TimeRange


@dataclass(frozen=True)
class DataPoint:
    """One record's contribution to an aggregate. Built per call, never stored."""

    id: str
    value: float
    description: str
    timestamp: datetime
    category: str | None = None
    metadata: dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class AggregationResult:
    """Scalar outcome plus the records that produced it."""

    value: float
    data_points: list[DataPoint] = field(default_factory=list)
    metadata: dict[str, Any] = field(default_factory=dict)


class TrendGranularity(StrEnum):
    DAY = "day"
    WEEK = "week"
    MONTH = "month"


@dataclass(frozen=True)
class TrendBucket:
    key: str
    total: float
    count: int


@dataclass(frozen=True)
class TrendResult:
    """Totals grouped by truncated date, oldest bucket first."""

    granularity: TrendGranularity
    buckets: list[TrendBucket] = field(default_factory=list)
    metadata: dict[str, Any] = field(default_factory=dict)

    @property
    def change(self) -> float:
        """Last bucket total minus first; 0 with fewer than two buckets."""
        if len(self.buckets) < 2:
            return 0.0
        return self.buckets[-1].total - self.buckets[0].total

    @property
    def direction(self) -> str:
        if self.change > 0:
            return "increasing"
        if self.change < 0:
            return "decreasing"
        return "stable"


@dataclass(frozen=True)
class SpendingAnalysis:
    """Headline spending figures for a period."""

    total_spent: float
    average_per_transaction: float
    daily_average: float
    category_breakdown: dict[str, float]
    transaction_count: int
    time_range: TimeRange | None = None

    def to_summary_text(self) -> str:
        period = self.time_range.describe() if self.time_range else "all time"
        lines = [
            f"Spending summary ({period}):",
            f"- Total spent: {self.total_spent:.2f}",
            f"- Transactions: {self.transaction_count}",
            f"- Average per transaction: {self.average_per_transaction:.2f}",
            f"- Daily average: {self.daily_average:.2f}",
        ]
        if self.category_breakdown:
            lines.append("- By category:")
            ranked = sorted(self.category_breakdown.items(), key=lambda kv: kv[1], reverse=True)
            for category, amount in ranked:
                lines.append(f"  - {category}: {amount:.2f}")
        return "\n".join(lines)
