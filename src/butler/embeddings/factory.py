"""Embedding provider factory."""

from __future__ import annotations

from typing import Any

from butler.config import EmbeddingSettings
from butler.embeddings.base import EmbeddingProvider
from butler.registry import Registry

_PROVIDERS: Registry[EmbeddingProvider] = Registry("embedding provider", {
    "ollama": ("butler.embeddings.ollama_provider", "OllamaEmbeddingProvider"),
    "openai": ("butler.embeddings.openai_provider", "OpenAIEmbeddingProvider"),
})


def get_embedding_provider(provider: str = "ollama", **kwargs) -> EmbeddingProvider:
    """Get an embedding provider by name.

    Args:
        provider: One of ``ollama``, ``openai``.
        **kwargs: Passed to the provider constructor. Without kwargs the
            instance is shared.
    """
    return _PROVIDERS.create(provider, **kwargs)


def _settings_kwargs(settings: EmbeddingSettings) -> dict[str, Any]:
    # Ollama cannot report its size before the first call; OpenAI can.
    if settings.provider.lower() == "ollama":
        return {"model": settings.model, "dimension": settings.dimension}
    return {"model": settings.model}


def embedding_provider_from_settings(settings: EmbeddingSettings) -> EmbeddingProvider:
    return get_embedding_provider(settings.provider, **_settings_kwargs(settings))


def available_providers() -> list[str]:
    return _PROVIDERS.names()


def clear_cache() -> None:
    """Clear shared instances (for testing)."""
    _PROVIDERS.clear()
