"""Data models for planned queries."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timedelta
from enum import StrEnum
from typing import Any


class QueryIntent(StrEnum):
    """Coarse intent hint produced by the query planner."""

    SEARCH = "search"
    ANALYSIS = "analysis"
    ADVICE = "advice"
    SUMMARY = "summary"
    COMPARISON = "comparison"


class TimePeriod(StrEnum):
    TODAY = "today"
    THIS_WEEK = "this_week"
    LAST_WEEK = "last_week"
    THIS_MONTH = "this_month"
    LAST_MONTH = "last_month"
    THIS_YEAR = "this_year"
    LAST_YEAR = "last_year"
    CUSTOM = "custom"


_TICK = timedelta(microseconds=1)


def _month_start(year: int, month: int) -> datetime:
    # month may overflow by one in either direction
    if month == 0:
        return datetime(year - 1, 12, 1)
    if month == 13:
        return datetime(year + 1, 1, 1)
    return datetime(year, month, 1)


@dataclass(frozen=True)
class TimeRange:
    """Closed interval ``[start, end]`` over record timestamps."""

    start: datetime
    end: datetime
    period: TimePeriod = TimePeriod.CUSTOM

    @classmethod
    def for_period(cls, period: TimePeriod, now: datetime) -> TimeRange:
        """Build the calendar range for ``period`` relative to ``now``."""
        today = datetime(now.year, now.month, now.day)
        if period == TimePeriod.TODAY:
            start, stop = today, today + timedelta(days=1)
        elif period == TimePeriod.THIS_WEEK:
            start = today - timedelta(days=today.weekday())
            stop = start + timedelta(days=7)
        elif period == TimePeriod.LAST_WEEK:
            stop = today - timedelta(days=today.weekday())
            start = stop - timedelta(days=7)
        elif period == TimePeriod.THIS_MONTH:
            start = _month_start(now.year, now.month)
            stop = _month_start(now.year, now.month + 1)
        elif period == TimePeriod.LAST_MONTH:
            start = _month_start(now.year, now.month - 1)
            stop = _month_start(now.year, now.month)
        elif period == TimePeriod.THIS_YEAR:
            start, stop = datetime(now.year, 1, 1), datetime(now.year + 1, 1, 1)
        elif period == TimePeriod.LAST_YEAR:
            start, stop = datetime(now.year - 1, 1, 1), datetime(now.year, 1, 1)
        else:
            raise ValueError(f"Cannot derive a range for period '{period}'")
        return cls(start=start, end=stop - _TICK, period=period)

    def contains(self, ts: datetime) -> bool:
        return self.start <= ts <= self.end

    @property
    def days(self) -> int:
        """Whole days spanned by the range."""
        return (self.end.date() - self.start.date()).days

    def describe(self) -> str:
        first, last = self.start.date(), self.end.date()
        if first == last:
            return first.isoformat()
        return f"{first.isoformat()} to {last.isoformat()}"


@dataclass(frozen=True)
class QueryContext:
    """Everything the planner could extract from the raw query text.

    Attributes:
        query: The original query string.
        intent: Coarse intent hint.
        keywords: Content words, in query order.
        time_range: Optional time window mentioned in the query.
        filters: Equality filters (meal_type, category, metric_type, ...).
        target_domains: Domains the query appears to be about.
    """

    query: str
    intent: QueryIntent = QueryIntent.SEARCH
    keywords: tuple[str, ...] = ()
    time_range: TimeRange | None = None
    filters: dict[str, Any] = field(default_factory=dict)
    target_domains: frozenset[str] = frozenset()
