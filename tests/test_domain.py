"""Tests for domain records — searchable text and data access."""

from __future__ import annotations

import json
from datetime import date, datetime

import pytest

from butler.domain.access import InMemoryDomainData
from butler.domain.schemas import ALL_DOMAINS, Domain, IndexableRecord
from butler.domain.serializers import to_searchable_text

# ---------------------------------------------------------------------------
# Records
# ---------------------------------------------------------------------------


class TestIndexableRecord:
    def test_object_type_defaults_to_domain(self):
        record = IndexableRecord(id="m1", domain=Domain.MEALS, timestamp=datetime(2026, 3, 1))
        assert record.object_type == "meals"

    def test_explicit_object_type(self):
        record = IndexableRecord(
            id="m1", domain=Domain.MEALS, timestamp=datetime(2026, 3, 1), object_type="meal_log",
        )
        assert record.object_type == "meal_log"

    def test_get_treats_none_as_missing(self):
        record = IndexableRecord(
            id="x", domain="events", timestamp=datetime(2026, 3, 1), data={"title": None},
        )
        assert record.get("title", "Untitled") == "Untitled"

    def test_all_domains(self):
        assert len(ALL_DOMAINS) == 11
        assert "finance_records" in ALL_DOMAINS


# ---------------------------------------------------------------------------
# Searchable text
# ---------------------------------------------------------------------------


class TestSearchableText:
    def test_expense(self, sample_records: list[IndexableRecord]):
        text = to_searchable_text(sample_records[1])
        lines = text.splitlines()
        assert lines[0] == "DOMAIN: FINANCE_RECORDS"
        assert lines[1] == "DATE: 2026-03-05"
        assert "TYPE: EXPENSE" in lines
        assert "AMOUNT: 75.25 USD" in lines
        assert "CATEGORY: groceries" in lines
        assert "DESCRIPTION: Weekly groceries" in lines
        assert lines[-1].startswith("KEYWORDS: spending cost expense")
        assert "支出" in lines[-1]
        assert lines[-1].endswith("groceries weekly groceries")

    def test_income_hints(self, sample_records: list[IndexableRecord]):
        text = to_searchable_text(sample_records[3])
        assert "KEYWORDS: income revenue earning 收入 收益 salary march salary" in text

    def test_meal_lists_are_joined(self, sample_records: list[IndexableRecord]):
        text = to_searchable_text(sample_records[4])
        assert "MEAL: Pizza" in text
        assert "ITEMS: pepperoni pizza, cola" in text
        assert "CALORIES: 900" in text
        assert "LOCATION" not in text
        assert text.endswith("KEYWORDS: food, meal, eating, 餐, 食物, 吃, 卡路里")

    def test_journal(self, sample_records: list[IndexableRecord]):
        text = to_searchable_text(sample_records[6])
        assert "CONTENT: Felt tired all week." in text
        assert "MOOD_SCORE: 2" in text
        assert "TOPICS: sleep, work" in text
        assert "日记" in text

    def test_health(self, sample_records: list[IndexableRecord]):
        text = to_searchable_text(sample_records[7])
        assert "METRIC: sleep" in text
        assert "VALUE: 5.0 hours" in text

    def test_empty_journal_is_empty_text(self):
        record = IndexableRecord(id="j", domain=Domain.JOURNALS, timestamp=datetime(2026, 3, 1))
        assert to_searchable_text(record) == ""

    def test_unknown_domain_uses_generic_layout(self):
        record = IndexableRecord(
            id="p1", domain="pets", timestamp=datetime(2026, 3, 1),
            data={"name": "Mochi", "species": "cat", "notes": ""},
        )
        text = to_searchable_text(record)
        assert text.splitlines() == [
            "DOMAIN: PETS",
            "DATE: 2026-03-01",
            "name: Mochi",
            "species: cat",
        ]

    def test_task_defaults(self):
        record = IndexableRecord(
            id="t1", domain=Domain.TASKS, timestamp=datetime(2026, 3, 1), data={"title": "Run"},
        )
        text = to_searchable_text(record)
        assert "TYPE: task" in text
        assert "STATUS: pending" in text


# ---------------------------------------------------------------------------
# Data access
# ---------------------------------------------------------------------------


class TestInMemoryDomainData:
    def test_get_records_sorted(self, domain_data: InMemoryDomainData):
        finance = domain_data.get_records(Domain.FINANCE)
        assert [r.id for r in finance] == ["fin-3", "fin-4", "fin-1", "fin-2"]

    def test_time_bounds_inclusive(self, domain_data: InMemoryDomainData):
        records = domain_data.get_records(
            Domain.FINANCE, start=datetime(2026, 3, 1, 8, 0), end=datetime(2026, 3, 2, 9, 0),
        )
        assert [r.id for r in records] == ["fin-4", "fin-1"]

    def test_unknown_domain_is_empty(self, domain_data: InMemoryDomainData):
        assert domain_data.get_records("pets") == []

    def test_domain_counts(self, domain_data: InMemoryDomainData):
        counts = domain_data.domain_counts()
        assert counts["finance_records"] == 4
        assert counts["meals"] == 2
        assert counts["travel_logs"] == 0
        assert sum(counts.values()) == 8

    def test_all_indexable_records(self, domain_data: InMemoryDomainData):
        assert len(domain_data.all_indexable_records()) == 8
        meals = domain_data.all_indexable_records(domains=["meals"])
        assert {r.id for r in meals} == {"meal-1", "meal-2"}

    def test_add_and_remove(self, domain_data: InMemoryDomainData):
        domain_data.add(IndexableRecord(id="pet-1", domain="pets", timestamp=datetime(2026, 3, 1)))
        assert "pets" in domain_data.domains()
        assert domain_data.remove("pets", "pet-1") is True
        assert domain_data.remove("pets", "pet-1") is False

    def test_from_yaml(self, tmp_path):
        path = tmp_path / "records.yaml"
        path.write_text(
            "finance_records:\n"
            "  - id: f1\n"
            "    timestamp: 2026-03-02T09:00:00\n"
            "    type: expense\n"
            "    amount: 12.5\n"
            "    category: coffee\n"
            "journals:\n"
            "  - id: j1\n"
            "    timestamp: 2026-03-03\n"
            "    content: Slept badly\n"
            "    user_id: u-7\n"
            "meals:\n",
            encoding="utf-8",
        )
        data = InMemoryDomainData.from_file(path)

        [expense] = data.get_records("finance_records")
        assert expense.timestamp == datetime(2026, 3, 2, 9, 0)
        assert expense.data == {"type": "expense", "amount": 12.5, "category": "coffee"}

        [journal] = data.get_records("journals")
        assert journal.timestamp == datetime.combine(date(2026, 3, 3), datetime.min.time())
        assert journal.user_id == "u-7"
        assert "user_id" not in journal.data
        assert data.get_records("meals") == []

    def test_from_json(self, tmp_path):
        path = tmp_path / "records.json"
        path.write_text(
            json.dumps({"health_metrics": [
                {"id": 7, "timestamp": "2026-03-08T07:00:00", "metric_type": "sleep", "value": 6},
            ]}),
            encoding="utf-8",
        )
        [record] = InMemoryDomainData.from_file(path).get_records("health_metrics")
        assert record.id == "7"
        assert record.get("value") == 6

    def test_missing_id_raises(self, tmp_path):
        path = tmp_path / "bad.json"
        path.write_text(json.dumps({"meals": [{"timestamp": "2026-03-01"}]}), encoding="utf-8")
        with pytest.raises(KeyError):
            InMemoryDomainData.from_file(path)
