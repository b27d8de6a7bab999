"""Data models for chunks."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class Chunk:
    """A bounded slice of a larger text, ready for embedding."""

    text: str
    chunk_index: int = 0
    total_chunks: int = 0
    token_count: int = 0
