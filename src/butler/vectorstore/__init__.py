"""Embedding storage — in-memory and SQLite backends, cosine similarity."""

from butler.vectorstore.base import EmbeddingStore
from butler.vectorstore.factory import available_stores, get_embedding_store, store_from_settings
from butler.vectorstore.memory_store import InMemoryEmbeddingStore
from butler.vectorstore.schemas import Embedding, EmbeddingFilter, SearchResult
from butler.vectorstore.similarity import bytes_to_vector, cosine_similarity, vector_to_bytes

__all__ = [
    "Embedding",
    "EmbeddingFilter",
    "EmbeddingStore",
    "InMemoryEmbeddingStore",
    "SearchResult",
    "available_stores",
    "bytes_to_vector",
    "cosine_similarity",
    "get_embedding_store",
    "store_from_settings",
    "vector_to_bytes",
]
