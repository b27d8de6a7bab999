"""Embedding store factory."""

from __future__ import annotations

from butler.config import StorageSettings
from butler.registry import Registry
from butler.vectorstore.base import EmbeddingStore

_STORES: Registry[EmbeddingStore] = Registry("embedding store", {
    "memory": ("butler.vectorstore.memory_store", "InMemoryEmbeddingStore"),
    "sqlite": ("butler.vectorstore.sqlite_store", "SQLiteEmbeddingStore"),
})

# Backends that persist to ``StorageSettings.path``
FILE_BACKED = frozenset({"sqlite"})


def get_embedding_store(backend: str = "memory", **kwargs) -> EmbeddingStore:
    """Get an embedding store by name.

    Args:
        backend: One of ``memory``, ``sqlite``.
        **kwargs: Passed to the store constructor. Without kwargs the
            instance is shared.
    """
    return _STORES.create(backend, **kwargs)


def store_from_settings(settings: StorageSettings) -> EmbeddingStore:
    if settings.backend.lower() in FILE_BACKED:
        return get_embedding_store(settings.backend, path=settings.path)
    return get_embedding_store(settings.backend)


def available_stores() -> list[str]:
    return _STORES.names()


def clear_cache() -> None:
    """Clear shared instances (for testing)."""
    _STORES.clear()
