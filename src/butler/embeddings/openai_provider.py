"""OpenAI embedding provider — text-embedding-3-small/large.

Requires the ``openai`` extra and an API key via ``OPENAI_API_KEY``.
"""

from __future__ import annotations

import logging
from typing import Any

from butler.embeddings.base import EmbeddingProvider

logger = logging.getLogger(__name__)

DEFAULT_MODEL = "text-embedding-3-small"

_DIMENSION_MAP = {
    "text-embedding-3-small": 1536,
    "text-embedding-3-large": 3072,
    "text-embedding-ada-002": 1536,
}


class OpenAIEmbeddingProvider(EmbeddingProvider):
    """Embed text via the OpenAI Embeddings API."""

    def __init__(
        self,
        model: str = DEFAULT_MODEL,
        api_key: str | None = None,
        dimensions: int | None = None,
    ):
        try:
            import openai
        except ImportError as exc:
            raise ImportError(
                "openai package required: pip install life-butler-rag[openai]"
            ) from exc

        self.model = model
        self._dimensions = dimensions or _DIMENSION_MAP.get(model, 1536)
        self._client: Any = openai.OpenAI(api_key=api_key)

    def embed_texts(self, texts: list[str]) -> list[list[float]]:
        if not texts:
            return []

        resp = self._client.embeddings.create(model=self.model, input=texts)
        # Sort by index to guarantee order
        return [d.embedding for d in sorted(resp.data, key=lambda x: x.index)]

    @property
    def dimension(self) -> int:
        return self._dimensions
