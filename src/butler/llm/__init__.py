"""LLM providers — Ollama, Anthropic, OpenAI."""

from butler.llm.base import LLMProvider, Message
from butler.llm.factory import available_providers, get_llm_provider, llm_from_settings

__all__ = [
    "LLMProvider",
    "Message",
    "available_providers",
    "get_llm_provider",
    "llm_from_settings",
]
