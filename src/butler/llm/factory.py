"""LLM provider factory.

``llm_from_settings`` is what the service uses: it builds the configured
provider, or returns ``None`` when ``llm.provider`` is ``none``, in which
case every generation step takes its rule-based path.
"""

from __future__ import annotations

import logging

from butler.config import LLMSettings
from butler.llm.base import LLMProvider
from butler.registry import Registry

logger = logging.getLogger(__name__)

DISABLED = frozenset({"none", "off", "disabled", ""})

_PROVIDERS: Registry[LLMProvider] = Registry("LLM provider", {
    "ollama": ("butler.llm.ollama_provider", "OllamaLLMProvider"),
    "anthropic": ("butler.llm.anthropic_provider", "AnthropicLLMProvider"),
    "openai": ("butler.llm.openai_provider", "OpenAILLMProvider"),
})


def get_llm_provider(provider: str = "ollama", **kwargs) -> LLMProvider:
    """Get an LLM provider by name.

    Args:
        provider: One of ``ollama``, ``anthropic``, ``openai``.
        **kwargs: Passed to the provider constructor. Without kwargs the
            instance is shared.
    """
    return _PROVIDERS.create(provider, **kwargs)


def llm_from_settings(settings: LLMSettings) -> LLMProvider | None:
    """Build the configured provider with its model and sampling options."""
    if settings.provider.lower() in DISABLED:
        logger.info("LLM disabled by configuration; using rule-based answers")
        return None
    return get_llm_provider(
        settings.provider,
        model=settings.model,
        temperature=settings.temperature,
        max_tokens=settings.max_tokens,
    )


def available_providers() -> list[str]:
    return _PROVIDERS.names()


def clear_cache() -> None:
    """Clear shared instances (for testing)."""
    _PROVIDERS.clear()
