"""Data models for personal domain records."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import StrEnum
from typing import Any


class Domain(StrEnum):
    """Life domains that hold indexable records."""

    FINANCE = "finance_records"
    MEALS = "meals"
    JOURNALS = "journals"
    HEALTH = "health_metrics"
    EVENTS = "events"
    EDUCATION = "education"
    CAREER = "career"
    TASKS = "tasks_habits"
    RELATIONS = "relations"
    MEDIA = "media_logs"
    TRAVEL = "travel_logs"


ALL_DOMAINS: tuple[str, ...] = tuple(d.value for d in Domain)


@dataclass(frozen=True)
class IndexableRecord:
    """A structured record from one domain that can be embedded and aggregated.

    Attributes:
        id: Stable record identifier.
        domain: Domain name (see ``Domain``).
        object_type: Type tag stored with each embedding; defaults to the domain.
        timestamp: When the record happened.
        data: Domain-specific structured fields.
        user_id: Optional owner.
    """

    id: str
    domain: str
    timestamp: datetime
    data: dict[str, Any] = field(default_factory=dict)
    object_type: str = ""
    user_id: str | None = None

    def __post_init__(self) -> None:
        if not self.object_type:
            object.__setattr__(self, "object_type", self.domain)

    def get(self, key: str, default: Any = None) -> Any:
        value = self.data.get(key)
        return default if value is None else value
