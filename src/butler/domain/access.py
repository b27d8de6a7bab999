"""Domain data access — read-only record accessors.

``DomainDataAccess`` is the seam to whatever actually stores the user's
records. ``InMemoryDomainData`` backs tests, the CLI, and small datasets
loaded from a YAML/JSON file.
"""

from __future__ import annotations

import json
import logging
import threading
from abc import ABC, abstractmethod
from collections.abc import Iterable
from datetime import date, datetime, time
from pathlib import Path
from typing import Any

import yaml

from butler.domain.schemas import ALL_DOMAINS, IndexableRecord

logger = logging.getLogger(__name__)


class DomainDataAccess(ABC):
    """Interface for reading domain records."""

    @abstractmethod
    def get_records(
        self,
        domain: str,
        start: datetime | None = None,
        end: datetime | None = None,
    ) -> list[IndexableRecord]:
        """Return records for one domain, optionally bounded in time.

        Args:
            domain: Domain name, e.g. ``finance_records``.
            start: Inclusive lower bound on ``timestamp``.
            end: Inclusive upper bound on ``timestamp``.

        Returns:
            Records sorted by timestamp (oldest first).
        """

    def domains(self) -> list[str]:
        """Return the domains this source knows about."""
        return list(ALL_DOMAINS)

    def all_indexable_records(
        self,
        start: datetime | None = None,
        end: datetime | None = None,
        domains: Iterable[str] | None = None,
    ) -> list[IndexableRecord]:
        """Return every record that should be embedded for retrieval."""
        records: list[IndexableRecord] = []
        for domain in domains or self.domains():
            records.extend(self.get_records(domain, start, end))
        return records

    def domain_counts(self) -> dict[str, int]:
        """Return the number of records held per domain."""
        return {domain: len(self.get_records(domain)) for domain in self.domains()}


class InMemoryDomainData(DomainDataAccess):
    """Domain records held in a dict keyed by domain."""

    def __init__(self, records: Iterable[IndexableRecord] = ()):
        self._lock = threading.Lock()
        self._records: dict[str, list[IndexableRecord]] = {}
        for record in records:
            self.add(record)

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def add(self, record: IndexableRecord) -> None:
        with self._lock:
            self._records.setdefault(record.domain, []).append(record)

    def remove(self, domain: str, record_id: str) -> bool:
        with self._lock:
            bucket = self._records.get(domain, [])
            kept = [r for r in bucket if r.id != record_id]
            self._records[domain] = kept
            return len(kept) != len(bucket)

    def get_records(
        self,
        domain: str,
        start: datetime | None = None,
        end: datetime | None = None,
    ) -> list[IndexableRecord]:
        with self._lock:
            bucket = list(self._records.get(domain, []))
        selected = [
            r for r in bucket
            if (start is None or r.timestamp >= start)
            and (end is None or r.timestamp <= end)
        ]
        return sorted(selected, key=lambda r: r.timestamp)

    def domains(self) -> list[str]:
        extra = [d for d in self._records if d not in ALL_DOMAINS]
        return [*ALL_DOMAINS, *extra]

    @classmethod
    def from_file(cls, path: str | Path) -> InMemoryDomainData:
        """Load records from a YAML or JSON file.

        The file maps domain names to lists of records. Each record needs
        an ``id`` and a ``timestamp``; every other key becomes structured data.
        """
        path = Path(path)
        with open(path, encoding="utf-8") as fh:
            if path.suffix.lower() == ".json":
                raw = json.load(fh)
            else:
                raw = yaml.safe_load(fh) or {}

        records = []
        for domain, items in raw.items():
            for item in items or []:
                records.append(_record_from_mapping(domain, item))

        logger.info("Loaded %d domain records from %s", len(records), path)
        return cls(records)


def _parse_timestamp(value: Any) -> datetime:
    if isinstance(value, datetime):
        return value
    if isinstance(value, date):
        return datetime.combine(value, time())
    return datetime.fromisoformat(str(value))


def _record_from_mapping(domain: str, item: dict[str, Any]) -> IndexableRecord:
    data = dict(item)
    record_id = str(data.pop("id"))
    timestamp = _parse_timestamp(data.pop("timestamp"))
    object_type = data.pop("object_type", "")
    user_id = data.pop("user_id", None)
    return IndexableRecord(
        id=record_id,
        domain=domain,
        timestamp=timestamp,
        data=data,
        object_type=object_type,
        user_id=user_id,
    )
