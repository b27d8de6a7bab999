"""Embedding providers — Ollama, OpenAI, plus batched fallback wrapper."""

from butler.embeddings.base import EmbeddingProvider
from butler.embeddings.batching import BatchedEmbedder, expected_dimension
from butler.embeddings.factory import (
    available_providers,
    embedding_provider_from_settings,
    get_embedding_provider,
)

__all__ = [
    "BatchedEmbedder",
    "EmbeddingProvider",
    "available_providers",
    "embedding_provider_from_settings",
    "expected_dimension",
    "get_embedding_provider",
]
