"""Data aggregator — sums, averages, counts and trends over domain records.

Records are pulled from the domain data source for the requested time
window and filtered in memory. Every operation is a pure function of that
filtered set.
"""

from __future__ import annotations

import logging
from collections import defaultdict
from collections.abc import Iterable
from datetime import datetime, timedelta
from typing import Any

from butler.aggregation.schemas import (
    AggregationResult,
    DataPoint,
    SpendingAnalysis,
    TrendBucket,
    TrendGranularity,
    TrendResult,
)
from butler.domain.access import DomainDataAccess
from butler.domain.schemas import Domain, IndexableRecord
from butler.query.schemas import TimeRange

logger = logging.getLogger(__name__)

DEFAULT_COUNT_DOMAINS: tuple[str, ...] = (
    Domain.FINANCE,
    Domain.MEALS,
    Domain.EVENTS,
    Domain.JOURNALS,
    Domain.HEALTH,
)

UNCATEGORIZED = "Uncategorized"


def _as_float(value: Any) -> float:
    try:
        return float(value)
    except (TypeError, ValueError):
        return 0.0


def _bucket_key(ts: datetime, granularity: TrendGranularity) -> str:
    if granularity == TrendGranularity.MONTH:
        return ts.strftime("%Y-%m")
    if granularity == TrendGranularity.WEEK:
        monday = ts.date() - timedelta(days=ts.weekday())
        return monday.isoformat()
    return ts.date().isoformat()


def _category_matches(record: IndexableRecord, wanted: Any) -> bool:
    if not wanted:
        return True
    category = str(record.get("category", "")).lower()
    if isinstance(wanted, str):
        return category == wanted.lower()
    return category in {str(w).lower() for w in wanted}


def _label(record: IndexableRecord) -> str:
    for key in ("title", "name", "notes", "metric_type", "category", "content"):
        value = record.get(key)
        if value:
            text = str(value)
            return text if len(text) <= 60 else text[:57] + "..."
    return "Unnamed"


class DataAggregator:
    """Numeric aggregation over the user's domain records."""

    def __init__(self, data_access: DomainDataAccess):
        self.data_access = data_access

    # ------------------------------------------------------------------
    # Core operations
    # ------------------------------------------------------------------

    def calculate_sum(
        self,
        filters: dict[str, Any] | None = None,
        time_range: TimeRange | None = None,
    ) -> AggregationResult:
        """Sum finance amounts (expenses unless ``type`` is ``income``).

        Args:
            filters: Optional ``type``, ``category`` (str or list) and
                ``include_meals`` (adds meal calories as extra points).
            time_range: Optional window on record timestamps.

        Returns:
            Total with one ``DataPoint`` per contributing record.
        """
        filters = filters or {}
        points = self._finance_points(filters, time_range)
        if filters.get("include_meals"):
            points.extend(self._meal_points(time_range))

        total = sum(p.value for p in points)
        return AggregationResult(
            value=total,
            data_points=points,
            metadata=self._metadata("sum", points, time_range, filters),
        )

    def calculate_average(
        self,
        filters: dict[str, Any] | None = None,
        time_range: TimeRange | None = None,
    ) -> AggregationResult:
        summed = self.calculate_sum(filters, time_range)
        points = summed.data_points
        average = summed.value / len(points) if points else 0.0
        return AggregationResult(
            value=average,
            data_points=points,
            metadata=self._metadata("average", points, time_range, filters or {}),
        )

    def calculate_count(
        self,
        filters: dict[str, Any] | None = None,
        time_range: TimeRange | None = None,
    ) -> AggregationResult:
        """Count records across one or more domains (``filters["domains"]``)."""
        filters = filters or {}
        domains: Iterable[str] = filters.get("domains") or DEFAULT_COUNT_DOMAINS

        points: list[DataPoint] = []
        for domain in domains:
            for record in self._records(domain, time_range):
                points.append(DataPoint(
                    id=record.id,
                    value=1.0,
                    description=f"{domain}: {_label(record)}",
                    timestamp=record.timestamp,
                    category=str(domain),
                ))

        return AggregationResult(
            value=float(len(points)),
            data_points=points,
            metadata=self._metadata("count", points, time_range, filters),
        )

    def calculate_max(
        self,
        filters: dict[str, Any] | None = None,
        time_range: TimeRange | None = None,
    ) -> AggregationResult:
        return self._extreme("max", filters, time_range)

    def calculate_min(
        self,
        filters: dict[str, Any] | None = None,
        time_range: TimeRange | None = None,
    ) -> AggregationResult:
        return self._extreme("min", filters, time_range)

    # ------------------------------------------------------------------
    # Extensions
    # ------------------------------------------------------------------

    def calculate_trends(
        self,
        filters: dict[str, Any] | None = None,
        time_range: TimeRange | None = None,
        granularity: TrendGranularity | str = TrendGranularity.DAY,
    ) -> TrendResult:
        """Group summed values into day, week (ISO Monday) or month buckets."""
        granularity = TrendGranularity(granularity)
        summed = self.calculate_sum(filters, time_range)

        totals: dict[str, float] = defaultdict(float)
        counts: dict[str, int] = defaultdict(int)
        for point in summed.data_points:
            key = _bucket_key(point.timestamp, granularity)
            totals[key] += point.value
            counts[key] += 1

        buckets = [TrendBucket(key=k, total=totals[k], count=counts[k]) for k in sorted(totals)]
        return TrendResult(
            granularity=granularity,
            buckets=buckets,
            metadata=self._metadata("trend", summed.data_points, time_range, filters or {}),
        )

    def calculate_spending_by_category(
        self,
        time_range: TimeRange | None = None,
    ) -> dict[str, float]:
        breakdown: dict[str, float] = defaultdict(float)
        for point in self._finance_points({"type": "expense"}, time_range):
            breakdown[point.category or UNCATEGORIZED] += point.value
        return dict(breakdown)

    def calculate_daily_averages(
        self,
        time_range: TimeRange | None = None,
    ) -> dict[str, float]:
        """Average spending per day and calories per logged meal day."""
        spending = self._finance_points({"type": "expense"}, time_range)
        total_spent = sum(p.value for p in spending)

        if time_range is not None:
            days = time_range.days
        elif spending:
            stamps = [p.timestamp for p in spending]
            days = (max(stamps).date() - min(stamps).date()).days
        else:
            days = 0

        meals = self._meal_points(time_range)
        meal_days = {p.timestamp.date() for p in meals}
        total_calories = sum(p.value for p in meals)

        return {
            "daily_spending": total_spent / (days + 1),
            "daily_calories": total_calories / len(meal_days) if meal_days else 0.0,
        }

    def analyze_spending(self, time_range: TimeRange | None = None) -> SpendingAnalysis:
        expenses = self._finance_points({"type": "expense"}, time_range)
        total = sum(p.value for p in expenses)
        count = len(expenses)
        return SpendingAnalysis(
            total_spent=total,
            average_per_transaction=total / count if count else 0.0,
            daily_average=self.calculate_daily_averages(time_range)["daily_spending"],
            category_breakdown=self.calculate_spending_by_category(time_range),
            transaction_count=count,
            time_range=time_range,
        )

    # ------------------------------------------------------------------
    # Private
    # ------------------------------------------------------------------

    def _records(self, domain: str, time_range: TimeRange | None) -> list[IndexableRecord]:
        start = time_range.start if time_range else None
        end = time_range.end if time_range else None
        return self.data_access.get_records(domain, start, end)

    def _finance_points(
        self,
        filters: dict[str, Any],
        time_range: TimeRange | None,
    ) -> list[DataPoint]:
        wanted_type = "income" if filters.get("type") == "income" else "expense"
        points: list[DataPoint] = []
        for record in self._records(Domain.FINANCE, time_range):
            if str(record.get("type", "expense")).lower() != wanted_type:
                continue
            if not _category_matches(record, filters.get("category")):
                continue
            amount = _as_float(record.get("amount", 0.0))
            notes = record.get("notes") or "Unnamed"
            points.append(DataPoint(
                id=record.id,
                value=amount,
                description=f"{wanted_type.capitalize()}: {notes} - {amount:.2f}",
                timestamp=record.timestamp,
                category=record.get("category"),
                metadata={"currency": record.get("currency", "USD")},
            ))
        return points

    def _meal_points(self, time_range: TimeRange | None) -> list[DataPoint]:
        points = []
        for record in self._records(Domain.MEALS, time_range):
            calories = _as_float(record.get("calories", 0))
            points.append(DataPoint(
                id=record.id,
                value=calories,
                description=f"Meal: {record.get('name', 'Unnamed')} - {calories:.0f} kcal",
                timestamp=record.timestamp,
                category="meals",
            ))
        return points

    def _extreme(
        self,
        kind: str,
        filters: dict[str, Any] | None,
        time_range: TimeRange | None,
    ) -> AggregationResult:
        points = self.calculate_sum(filters, time_range).data_points
        if not points:
            return AggregationResult(
                value=0.0,
                metadata=self._metadata(kind, [], time_range, filters or {}),
            )
        pick = max if kind == "max" else min
        best = pick(points, key=lambda p: p.value)
        return AggregationResult(
            value=best.value,
            data_points=[best],
            metadata=self._metadata(kind, points, time_range, filters or {}),
        )

    @staticmethod
    def _metadata(
        kind: str,
        points: list[DataPoint],
        time_range: TimeRange | None,
        filters: dict[str, Any],
    ) -> dict[str, Any]:
        return {
            "aggregation_type": kind,
            "record_count": len(points),
            "time_range": time_range.describe() if time_range else "all time",
            "filters_applied": dict(filters),
        }
