"""Abstract base class for embedding stores."""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from collections.abc import Sequence

import numpy as np

from butler.vectorstore.schemas import Embedding, EmbeddingFilter
from butler.vectorstore.similarity import cosine_scores

logger = logging.getLogger(__name__)


class EmbeddingStore(ABC):
    """Interface for embedding persistence and candidate lookup."""

    @abstractmethod
    def upsert(self, embeddings: list[Embedding]) -> int:
        """Insert embeddings, replacing any with the same id.

        Returns:
            Number of embeddings written.
        """

    @abstractmethod
    def all(self, embedding_filter: EmbeddingFilter | None = None) -> list[Embedding]:
        """Return every stored embedding matching the filter."""

    @abstractmethod
    def delete_by_object(self, object_type: str, object_id: str) -> int:
        """Delete all embeddings owned by one record.

        Returns:
            Number of embeddings deleted.
        """

    @abstractmethod
    def count(self) -> int:
        """Return the number of stored embeddings."""

    @abstractmethod
    def clear(self) -> None:
        """Delete all embeddings."""

    def find_similar(
        self,
        query_vector: Sequence[float],
        embedding_filter: EmbeddingFilter | None = None,
        limit: int = 10,
        threshold: float = 0.0,
    ) -> list[Embedding]:
        """Return up to ``limit`` candidates ranked by cosine similarity.

        Vectors whose length differs from the query are skipped.
        """
        candidates = self.all(embedding_filter)
        if not candidates:
            return []

        dim = len(query_vector)
        sized = [e for e in candidates if len(e.vector) == dim]
        skipped = len(candidates) - len(sized)
        if skipped:
            logger.warning(
                "Skipped %d embeddings with dimension != %d; consider rebuilding",
                skipped,
                dim,
            )
        if not sized:
            return []

        matrix = np.asarray([e.vector for e in sized], dtype=np.float64)
        scores = cosine_scores(query_vector, matrix)
        order = np.argsort(-scores, kind="stable")
        return [sized[i] for i in order if scores[i] >= threshold][:limit]

    def count_by_type(self) -> dict[str, int]:
        counts: dict[str, int] = {}
        for emb in self.all():
            counts[emb.object_type] = counts.get(emb.object_type, 0) + 1
        return counts

    def indexed_objects(self) -> set[tuple[str, str]]:
        """Return the distinct ``(object_type, object_id)`` pairs stored."""
        return {(e.object_type, e.object_id) for e in self.all()}

    @classmethod
    def store_name(cls) -> str:
        """Return human-readable store name."""
        return cls.__name__
