"""Render domain records as searchable text for embedding.

Each domain gets a compact ``FIELD: value`` layout followed by a KEYWORDS
line with bilingual hints, so English and Chinese queries can both land on
the same record.
"""

from __future__ import annotations

from collections.abc import Callable
from typing import Any

from butler.domain.schemas import Domain, IndexableRecord

# ---------------------------------------------------------------------------
# Keyword hints per domain
# ---------------------------------------------------------------------------

EXPENSE_HINTS = "spending cost expense payment 支出 花费 消费"
INCOME_HINTS = "income revenue earning 收入 收益"

DOMAIN_HINTS: dict[str, str] = {
    Domain.MEALS: "food, meal, eating, 餐, 食物, 吃, 卡路里",
    Domain.JOURNALS: "journal, diary, thoughts, mood, 日记, 心情, 情绪, 感想",
    Domain.HEALTH: "health, fitness, metric, 健康, 身体, 指标",
    Domain.EVENTS: "event, activity, 事件, 活动",
    Domain.EDUCATION: "education, school, study, learning, 教育, 学习, 学校",
    Domain.CAREER: "work, career, job, employment, 工作, 职业, 事业",
    Domain.TASKS: "task, habit, routine, productivity, 任务, 习惯, 例行",
    Domain.RELATIONS: "relationship, social, people, contact, 关系, 社交, 人际",
    Domain.MEDIA: "media, entertainment, 媒体, 娱乐",
    Domain.TRAVEL: "travel, trip, journey, 旅行, 出行",
}


def _join(value: Any) -> str:
    if isinstance(value, (list, tuple, set)):
        return ", ".join(str(v) for v in value)
    return str(value)


def _optional(lines: list[str], label: str, value: Any) -> None:
    """Append ``LABEL: value`` when value is non-empty."""
    if value is None or value == "" or value == [] or value == 0:
        return
    lines.append(f"{label}: {_join(value)}")


# ---------------------------------------------------------------------------
# Per-domain serializers
# ---------------------------------------------------------------------------


def _finance(record: IndexableRecord) -> list[str]:
    kind = str(record.get("type", "unknown"))
    category = str(record.get("category", "uncategorized"))
    notes = str(record.get("notes", ""))

    lines = [
        f"TYPE: {kind.upper()}",
        f"AMOUNT: {record.get('amount', 0.0)} {record.get('currency', 'USD')}",
        f"CATEGORY: {category}",
    ]
    _optional(lines, "DESCRIPTION", notes)

    keywords = [EXPENSE_HINTS if kind == "expense" else INCOME_HINTS, category.lower()]
    if notes:
        keywords.append(notes.lower())
    lines.append(f"KEYWORDS: {' '.join(keywords)}")
    return lines


def _meal(record: IndexableRecord) -> list[str]:
    lines = [f"MEAL: {record.get('name', 'Unknown meal')}"]
    _optional(lines, "ITEMS", record.get("items"))
    _optional(lines, "CALORIES", record.get("calories"))
    _optional(lines, "LOCATION", record.get("location"))
    _optional(lines, "NOTES", record.get("notes"))
    return lines


def _journal(record: IndexableRecord) -> list[str]:
    lines: list[str] = []
    _optional(lines, "CONTENT", record.get("content"))
    _optional(lines, "MOOD_SCORE", record.get("mood"))
    _optional(lines, "TOPICS", record.get("topics"))
    return lines


def _health(record: IndexableRecord) -> list[str]:
    lines = [
        f"METRIC: {record.get('metric_type', 'unknown')}",
        f"VALUE: {record.get('value', 0.0)} {record.get('unit', '')}".rstrip(),
    ]
    _optional(lines, "NOTES", record.get("notes"))
    return lines


def _event(record: IndexableRecord) -> list[str]:
    lines = [f"TITLE: {record.get('title', 'Untitled event')}"]
    _optional(lines, "DESCRIPTION", record.get("description"))
    _optional(lines, "LOCATION", record.get("location"))
    _optional(lines, "TAGS", record.get("tags"))
    return lines


def _education(record: IndexableRecord) -> list[str]:
    lines: list[str] = []
    _optional(lines, "SCHOOL", record.get("school_name"))
    _optional(lines, "DEGREE", record.get("degree"))
    _optional(lines, "MAJOR", record.get("major"))
    _optional(lines, "NOTES", record.get("notes"))
    return lines


def _career(record: IndexableRecord) -> list[str]:
    lines: list[str] = []
    _optional(lines, "COMPANY", record.get("company"))
    _optional(lines, "ROLE", record.get("role"))
    _optional(lines, "ACHIEVEMENTS", record.get("achievements"))
    _optional(lines, "NOTES", record.get("notes"))
    return lines


def _task(record: IndexableRecord) -> list[str]:
    lines = [
        f"TITLE: {record.get('title', 'Untitled task')}",
        f"TYPE: {record.get('type', 'task')}",
        f"STATUS: {record.get('status', 'pending')}",
    ]
    _optional(lines, "NOTES", record.get("notes"))
    return lines


def _relation(record: IndexableRecord) -> list[str]:
    lines: list[str] = []
    _optional(lines, "PERSON", record.get("person_name"))
    _optional(lines, "RELATION", record.get("relation_type"))
    _optional(lines, "NOTES", record.get("notes"))
    return lines


def _media(record: IndexableRecord) -> list[str]:
    lines = [f"TITLE: {record.get('title', 'Untitled')}"]
    _optional(lines, "TYPE", record.get("media_type"))
    _optional(lines, "PROGRESS", record.get("progress"))
    _optional(lines, "RATING", record.get("rating"))
    _optional(lines, "NOTES", record.get("notes"))
    return lines


def _travel(record: IndexableRecord) -> list[str]:
    lines: list[str] = []
    _optional(lines, "PLACE", record.get("place"))
    _optional(lines, "COST", record.get("cost"))
    _optional(lines, "NOTES", record.get("notes"))
    return lines


def _generic(record: IndexableRecord) -> list[str]:
    return [
        f"{key}: {_join(value)}"
        for key, value in record.data.items()
        if value not in (None, "")
    ]


_SERIALIZERS: dict[str, Callable[[IndexableRecord], list[str]]] = {
    Domain.FINANCE: _finance,
    Domain.MEALS: _meal,
    Domain.JOURNALS: _journal,
    Domain.HEALTH: _health,
    Domain.EVENTS: _event,
    Domain.EDUCATION: _education,
    Domain.CAREER: _career,
    Domain.TASKS: _task,
    Domain.RELATIONS: _relation,
    Domain.MEDIA: _media,
    Domain.TRAVEL: _travel,
}


def to_searchable_text(record: IndexableRecord) -> str:
    """Convert a structured record to the text that gets chunked and embedded.

    Args:
        record: Any domain record.

    Returns:
        Multi-line text with DOMAIN and DATE headers, domain fields, and a
        keyword hint line. Empty string when the record has nothing to say.
    """
    domain = record.domain.lower()
    serializer = _SERIALIZERS.get(domain, _generic)
    body = serializer(record)
    if not body:
        return ""

    lines = [
        f"DOMAIN: {domain.upper()}",
        f"DATE: {record.timestamp.date().isoformat()}",
        *body,
    ]
    hints = DOMAIN_HINTS.get(domain)
    if hints:
        lines.append(f"KEYWORDS: {hints}")
    return "\n".join(lines).strip()
