"""In-memory embedding store — zero infrastructure, process lifetime only."""

from __future__ import annotations

import logging
import threading

from butler.vectorstore.base import EmbeddingStore
from butler.vectorstore.schemas import Embedding, EmbeddingFilter

logger = logging.getLogger(__name__)


class InMemoryEmbeddingStore(EmbeddingStore):
    """Dict-backed store keyed by embedding id."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._embeddings: dict[str, Embedding] = {}

    def upsert(self, embeddings: list[Embedding]) -> int:
        if not embeddings:
            return 0
        with self._lock:
            for emb in embeddings:
                self._embeddings[emb.id] = emb
        logger.debug("InMemoryEmbeddingStore upserted %d (total: %d)", len(embeddings), self.count())
        return len(embeddings)

    def all(self, embedding_filter: EmbeddingFilter | None = None) -> list[Embedding]:
        with self._lock:
            items = list(self._embeddings.values())
        if embedding_filter is None:
            return items
        return [e for e in items if embedding_filter.matches(e)]

    def delete_by_object(self, object_type: str, object_id: str) -> int:
        with self._lock:
            doomed = [
                key for key, e in self._embeddings.items()
                if e.object_type == object_type and e.object_id == object_id
            ]
            for key in doomed:
                del self._embeddings[key]
        return len(doomed)

    def count(self) -> int:
        with self._lock:
            return len(self._embeddings)

    def clear(self) -> None:
        with self._lock:
            self._embeddings.clear()
