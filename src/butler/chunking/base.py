"""Abstract base class for chunkers."""

from __future__ import annotations

from abc import ABC, abstractmethod

from butler.chunking.schemas import Chunk


class BaseChunker(ABC):
    """Interface for text chunking strategies."""

    @abstractmethod
    def chunk(self, text: str) -> list[Chunk]:
        """Split text into chunks.

        Args:
            text: Full text to split.

        Returns:
            List of ``Chunk`` objects in text order.
        """

    @classmethod
    def strategy_name(cls) -> str:
        """Return human-readable strategy name."""
        return cls.__name__
