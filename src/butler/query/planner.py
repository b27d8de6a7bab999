"""Query planner — raw text → ``QueryContext``.

The router and spec builders treat the planner as an injected collaborator.
``KeywordQueryPlanner`` is the default: substring rules for intent, domains,
time windows and filters, in English and Chinese.
"""

from __future__ import annotations

import re
from abc import ABC, abstractmethod
from collections.abc import Callable
from datetime import datetime, timedelta

from butler.chunking.keywords import extract_keywords
from butler.domain.schemas import Domain
from butler.query.schemas import QueryContext, QueryIntent, TimePeriod, TimeRange

# ---------------------------------------------------------------------------
# Keyword tables
# ---------------------------------------------------------------------------

ADVICE_KEYWORDS = (
    "how should", "what should", "recommend", "suggest", "advice",
    "help me", "plan", "improve", "optimize", "better", "strategy",
    "建议", "怎么办", "如何", "改进",
)

ANALYSIS_KEYWORDS = (
    "analyze", "pattern", "trend", "correlation", "relationship",
    "compare", "difference", "change", "over time", "statistics",
    "分析", "趋势", "规律",
)

COMPARISON_KEYWORDS = (
    "vs", "versus", "compared to", "difference between",
    "better than", "worse than", "more than", "less than", "对比", "比较",
)

SUMMARY_KEYWORDS = (
    "summarize", "summary", "overview", "total", "average",
    "most", "least", "top", "bottom", "总结", "概括",
)

DOMAIN_KEYWORDS: dict[str, tuple[str, ...]] = {
    Domain.EVENTS: ("event", "happened", "occurred", "celebration", "meeting", "活动", "事件"),
    Domain.EDUCATION: (
        "school", "university", "degree", "course", "study", "learn", "education",
        "学习", "学校", "课程",
    ),
    Domain.CAREER: ("work", "job", "career", "company", "project", "achievement", "工作", "职业"),
    Domain.MEALS: (
        "eat", "food", "meal", "breakfast", "lunch", "dinner", "restaurant", "cooking",
        "吃", "饭", "餐", "食物",
    ),
    Domain.JOURNALS: (
        "journal", "diary", "thought", "reflection", "mood", "feeling",
        "日记", "心情", "情绪",
    ),
    Domain.HEALTH: (
        "health", "weight", "exercise", "sleep", "fitness", "wellness",
        "健康", "体重", "锻炼", "睡",
    ),
    Domain.FINANCE: (
        "money", "spend", "cost", "expense", "income", "budget", "financial",
        "钱", "花", "消费", "支出", "收入",
    ),
    Domain.TASKS: ("task", "habit", "routine", "goal", "todo", "productivity", "任务", "习惯"),
    Domain.RELATIONS: (
        "friend", "family", "relationship", "social", "people", "contact",
        "朋友", "家人",
    ),
    Domain.MEDIA: (
        "read", "watch", "movie", "book", "music", "podcast", "media",
        "电影", "书", "音乐",
    ),
    Domain.TRAVEL: (
        "travel", "trip", "vacation", "visit", "journey", "destination",
        "旅行", "旅游",
    ),
}

# (phrases, period): first match wins
_PERIOD_PHRASES: list[tuple[tuple[str, ...], TimePeriod]] = [
    (("today", "今天"), TimePeriod.TODAY),
    (("this week", "本周", "这周"), TimePeriod.THIS_WEEK),
    (("last week", "上周"), TimePeriod.LAST_WEEK),
    (("this month", "本月", "这个月", "这月"), TimePeriod.THIS_MONTH),
    (("last month", "上个月", "上月"), TimePeriod.LAST_MONTH),
    (("this year", "今年"), TimePeriod.THIS_YEAR),
    (("last year", "去年"), TimePeriod.LAST_YEAR),
]

_YEAR_RE = re.compile(r"(?:in |during |year )?\b((?:19|20)\d{2})\b")
_DAYS_RE = re.compile(r"(?:past|last) (\d+) days?")
_WEEKS_RE = re.compile(r"(?:past|last) (\d+) weeks?")


class QueryPlanner(ABC):
    """Interface for turning query text into a ``QueryContext``."""

    @abstractmethod
    def plan(self, text: str) -> QueryContext:
        """Plan a query.

        Args:
            text: Raw user query.

        Returns:
            An immutable ``QueryContext``.
        """


class KeywordQueryPlanner(QueryPlanner):
    """Rule-based planner driven by bilingual keyword tables."""

    def __init__(self, clock: Callable[[], datetime] = datetime.now):
        self._clock = clock

    def plan(self, text: str) -> QueryContext:
        return QueryContext(
            query=text,
            intent=self.identify_intent(text),
            keywords=tuple(extract_keywords(text)),
            time_range=self.extract_time_range(text),
            filters=self.extract_filters(text),
            target_domains=frozenset(self.identify_target_domains(text)),
        )

    # ------------------------------------------------------------------
    # Extraction steps
    # ------------------------------------------------------------------

    def identify_intent(self, text: str) -> QueryIntent:
        lowered = text.lower()
        if any(k in lowered for k in ADVICE_KEYWORDS):
            return QueryIntent.ADVICE
        if any(k in lowered for k in ANALYSIS_KEYWORDS):
            return QueryIntent.ANALYSIS
        if any(k in lowered for k in COMPARISON_KEYWORDS):
            return QueryIntent.COMPARISON
        if any(k in lowered for k in SUMMARY_KEYWORDS):
            return QueryIntent.SUMMARY
        return QueryIntent.SEARCH

    def identify_target_domains(self, text: str) -> list[str]:
        """Return matching domains, or every domain when nothing matches."""
        lowered = text.lower()
        domains = [
            str(domain)
            for domain, words in DOMAIN_KEYWORDS.items()
            if any(w in lowered for w in words)
        ]
        return domains or [str(d) for d in DOMAIN_KEYWORDS]

    def extract_time_range(self, text: str) -> TimeRange | None:
        lowered = text.lower()
        now = self._clock()

        for phrases, period in _PERIOD_PHRASES:
            if any(p in lowered for p in phrases):
                return TimeRange.for_period(period, now)

        match = _YEAR_RE.search(lowered)
        if match:
            year = int(match.group(1))
            return TimeRange(
                start=datetime(year, 1, 1),
                end=datetime(year + 1, 1, 1) - timedelta(microseconds=1),
            )

        if "recent" in lowered or "lately" in lowered or "最近" in lowered:
            return TimeRange.for_period(TimePeriod.THIS_MONTH, now)

        match = _DAYS_RE.search(lowered)
        if match:
            return TimeRange(start=now - timedelta(days=int(match.group(1))), end=now)

        match = _WEEKS_RE.search(lowered)
        if match:
            return TimeRange(start=now - timedelta(weeks=int(match.group(1))), end=now)

        return None

    def extract_filters(self, text: str) -> dict[str, str]:
        lowered = text.lower()
        filters: dict[str, str] = {}

        for meal in ("breakfast", "lunch", "dinner"):
            if meal in lowered:
                filters["meal_type"] = meal

        if any(k in lowered for k in ("外卖", "takeout", "delivery")):
            filters["category"] = "takeout"

        if "weight" in lowered or "体重" in lowered:
            filters["metric_type"] = "weight"
        if "sleep" in lowered or "睡眠" in lowered:
            filters["metric_type"] = "sleep"

        return filters
