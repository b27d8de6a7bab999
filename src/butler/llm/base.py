"""Abstract base class for LLM providers."""

from __future__ import annotations

from abc import ABC, abstractmethod

Message = dict[str, str]


class LLMProvider(ABC):
    """Capability interface for chat/completion models."""

    @abstractmethod
    def generate(self, prompt: str, system: str | None = None) -> str:
        """Generate a response from the LLM.

        Args:
            prompt: The user prompt.
            system: Optional system prompt.

        Returns:
            Generated text response.
        """

    def chat(self, messages: list[Message], temperature: float | None = None) -> str:
        """Run a chat exchange and return the assistant reply.

        The default folds the conversation into a single ``generate`` call;
        providers with a native chat endpoint override it.

        Args:
            messages: ``{"role": ..., "content": ...}`` dicts, oldest first.
            temperature: Sampling temperature; provider default when None.

        Returns:
            The assistant's reply text.
        """
        system, prompt = split_system(messages)
        return self.generate(prompt, system=system)

    @classmethod
    def provider_name(cls) -> str:
        """Return human-readable provider name."""
        return cls.__name__


def split_system(messages: list[Message]) -> tuple[str | None, str]:
    """Separate system messages from the rest of a conversation."""
    system_parts = [m["content"] for m in messages if m.get("role") == "system"]
    other = [m for m in messages if m.get("role") != "system"]
    if len(other) == 1:
        prompt = other[0]["content"]
    else:
        prompt = "\n\n".join(f"{m['role']}: {m['content']}" for m in other)
    return ("\n\n".join(system_parts) or None), prompt
