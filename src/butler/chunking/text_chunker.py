"""Sliding-window text chunker with sentence-boundary preference.

Tokens are approximated as a fixed number of characters, so the chunker
never needs a tokenizer. A window prefers to end at the last period or
newline it contains, as long as that boundary sits past the window's
midpoint; otherwise it cuts hard.
"""

from __future__ import annotations

import logging
from collections.abc import Iterator

from butler.chunking.base import BaseChunker
from butler.chunking.schemas import Chunk

logger = logging.getLogger(__name__)

DEFAULT_MAX_TOKENS = 512
DEFAULT_OVERLAP_TOKENS = 50
CHARS_PER_TOKEN = 4

_BOUNDARIES = (".", "\n")


class TextChunker(BaseChunker):
    """Overlapping character-window chunker."""

    def __init__(
        self,
        max_tokens: int = DEFAULT_MAX_TOKENS,
        overlap_tokens: int = DEFAULT_OVERLAP_TOKENS,
        chars_per_token: int = CHARS_PER_TOKEN,
    ):
        if max_tokens <= 0:
            raise ValueError("max_tokens must be positive")
        self.max_tokens = max_tokens
        self.overlap_tokens = max(0, overlap_tokens)
        self.chars_per_token = chars_per_token

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def chunk(self, text: str) -> list[Chunk]:
        pieces = self.chunk_text(text)
        total = len(pieces)
        return [
            Chunk(
                text=piece,
                chunk_index=i,
                total_chunks=total,
                token_count=max(1, len(piece) // self.chars_per_token),
            )
            for i, piece in enumerate(pieces)
        ]

    def chunk_text(
        self,
        text: str,
        max_tokens: int | None = None,
        overlap_tokens: int | None = None,
    ) -> list[str]:
        """Split ``text`` into overlapping segments.

        Args:
            text: Text to split.
            max_tokens: Window size in approximate tokens.
            overlap_tokens: Overlap between successive windows.

        Returns:
            Stripped, non-empty chunks. ``[text]`` when it fits in one window.
        """
        return list(self.iter_chunks(text, max_tokens, overlap_tokens))

    def iter_chunks(
        self,
        text: str,
        max_tokens: int | None = None,
        overlap_tokens: int | None = None,
    ) -> Iterator[str]:
        if not text:
            return

        max_tokens = max_tokens or self.max_tokens
        overlap_tokens = self.overlap_tokens if overlap_tokens is None else overlap_tokens
        max_chars = max_tokens * self.chars_per_token
        overlap_chars = max(0, overlap_tokens) * self.chars_per_token

        length = len(text)
        if length <= max_chars:
            yield text
            return

        start = 0
        while start < length:
            end = min(start + max_chars, length)

            if end < length:
                boundary = max(text.rfind(b, start, end + 1) for b in _BOUNDARIES)
                if boundary > start + max_chars * 0.5:
                    end = boundary + 1

            piece = text[start:end].strip()
            if piece:
                yield piece

            if end >= length:
                break
            start = max(start + 1, end - overlap_chars)
