"""Keyword extraction and text normalization helpers."""

from __future__ import annotations

import re

STOP_WORDS = frozenset({
    "the", "and", "or", "but", "in", "on", "at", "to", "for", "of", "with",
    "by", "is", "are", "was", "were", "be", "been", "have", "has", "had",
    "do", "does", "did", "will", "would", "could", "should", "may", "might",
    "can", "this", "that", "these", "those", "what", "how", "when", "where",
    "why", "who", "which", "i", "you", "he", "she", "it", "we", "they",
    "me", "him", "her", "us", "them", "my", "your", "his", "its", "our",
    "their", "most", "about", "am", "any", "all",
})

_PUNCT_RE = re.compile(r"[^\w\s]")
_SPACE_RE = re.compile(r"\s+")
_NORMALIZE_STRIP_RE = re.compile(r"[^\w\s.,!?-]")
_CJK_RE = re.compile(r"[\u4e00-\u9fff]")


def extract_keywords(text: str) -> list[str]:
    """Return content words (longer than 2 chars, not stop words) in order.

    Duplicates are dropped, first occurrence wins.
    """
    words = _SPACE_RE.split(_PUNCT_RE.sub(" ", text.lower()))
    seen: dict[str, None] = {}
    for word in words:
        if len(word) > 2 and word not in STOP_WORDS:
            seen.setdefault(word, None)
    return list(seen)


def normalize_text(text: str) -> str:
    """Collapse whitespace and strip symbols other than basic punctuation."""
    return _NORMALIZE_STRIP_RE.sub("", _SPACE_RE.sub(" ", text)).strip()


def detect_language(text: str) -> str:
    """Return ``zh`` when the text contains CJK ideographs, else ``en``."""
    return "zh" if _CJK_RE.search(text) else "en"
