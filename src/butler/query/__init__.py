"""Query planning — intent hints, keywords, time ranges, target domains."""

from butler.query.planner import KeywordQueryPlanner, QueryPlanner
from butler.query.schemas import QueryContext, QueryIntent, TimePeriod, TimeRange

__all__ = [
    "KeywordQueryPlanner",
    "QueryContext",
    "QueryIntent",
    "QueryPlanner",
    "TimePeriod",
    "TimeRange",
]
