"""Data models for embedding storage."""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass, field
from datetime import datetime


@dataclass(frozen=True)
class Embedding:
    """One embedded chunk of a domain record.

    ``object_type``/``object_id`` point back at the owning record; deleting
    that record removes every embedding carrying the pair.
    """

    id: str
    object_type: str
    object_id: str
    chunk_text: str
    vector: list[float]
    created_at: datetime = field(default_factory=datetime.now)


@dataclass(frozen=True)
class SearchResult:
    """A single scored chunk returned by semantic search."""

    embedding_id: str
    text: str
    object_type: str
    object_id: str
    similarity: float


@dataclass
class EmbeddingFilter:
    """Restrict candidate embeddings by type and creation time.

    All specified fields must match (AND logic).
    """

    object_types: frozenset[str] | None = None
    start: datetime | None = None
    end: datetime | None = None

    @classmethod
    def build(
        cls,
        object_types: Iterable[str] | None = None,
        start: datetime | None = None,
        end: datetime | None = None,
    ) -> EmbeddingFilter:
        types = frozenset(object_types) if object_types else None
        return cls(object_types=types, start=start, end=end)

    def matches(self, embedding: Embedding) -> bool:
        if self.object_types and embedding.object_type not in self.object_types:
            return False
        if self.start and embedding.created_at < self.start:
            return False
        return not (self.end and embedding.created_at > self.end)
