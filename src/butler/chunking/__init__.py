"""Text chunking — sliding windows with sentence-boundary preference."""

from butler.chunking.base import BaseChunker
from butler.chunking.keywords import detect_language, extract_keywords, normalize_text
from butler.chunking.schemas import Chunk
from butler.chunking.text_chunker import TextChunker

__all__ = [
    "BaseChunker",
    "Chunk",
    "TextChunker",
    "detect_language",
    "extract_keywords",
    "normalize_text",
]
