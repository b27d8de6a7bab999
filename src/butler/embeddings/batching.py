"""Batched embedding with zero-vector fallback.

Local model servers choke on large bursts, so texts go out in small
batches with a short pause in between. A batch that fails is replaced by
zero vectors of the provider's dimension; cosine similarity treats those as
unrelated to everything, so the ingest keeps going.
"""

from __future__ import annotations

import logging
import time
from collections.abc import Callable

from butler.embeddings.base import EmbeddingProvider

logger = logging.getLogger(__name__)

DEFAULT_BATCH_SIZE = 5
DEFAULT_BATCH_DELAY = 0.1

OLLAMA_FALLBACK_DIM = 768
DEFAULT_FALLBACK_DIM = 1536


def expected_dimension(provider: EmbeddingProvider) -> int:
    """Dimension to use for placeholder vectors from ``provider``."""
    try:
        dim = int(provider.dimension)
    except Exception:  # provider may not know its own size
        dim = 0
    if dim > 0:
        return dim
    if "ollama" in provider.provider_name().lower():
        return OLLAMA_FALLBACK_DIM
    return DEFAULT_FALLBACK_DIM


class BatchedEmbedder(EmbeddingProvider):
    """Wrap a provider with batching, pacing, and failed-batch fallback."""

    def __init__(
        self,
        provider: EmbeddingProvider,
        batch_size: int = DEFAULT_BATCH_SIZE,
        batch_delay: float = DEFAULT_BATCH_DELAY,
        sleep: Callable[[float], None] = time.sleep,
    ):
        self.provider = provider
        self.batch_size = max(1, batch_size)
        self.batch_delay = batch_delay
        self._sleep = sleep
        self.failed_batches = 0

    def embed_texts(self, texts: list[str]) -> list[list[float]]:
        vectors: list[list[float]] = []
        for i in range(0, len(texts), self.batch_size):
            if i and self.batch_delay > 0:
                self._sleep(self.batch_delay)
            batch = texts[i : i + self.batch_size]
            vectors.extend(self._embed_batch(batch))
        return vectors

    def embed_query(self, query: str) -> list[float]:
        # Failures propagate; search decides how to degrade.
        return self.provider.embed_query(query)

    @property
    def dimension(self) -> int:
        return expected_dimension(self.provider)

    def _embed_batch(self, batch: list[str]) -> list[list[float]]:
        try:
            vectors = self.provider.embed_texts(batch)
            if len(vectors) != len(batch):
                raise ValueError(
                    f"provider returned {len(vectors)} vectors for {len(batch)} texts"
                )
            return vectors
        except Exception as exc:
            self.failed_batches += 1
            dim = expected_dimension(self.provider)
            logger.warning(
                "Embedding batch of %d failed (%s); substituting %d-dim zero vectors",
                len(batch),
                exc,
                dim,
            )
            return [[0.0] * dim for _ in batch]
