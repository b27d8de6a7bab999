"""Mock embedding and LLM providers shared by the test modules."""

from __future__ import annotations

import hashlib
import re
from datetime import datetime

import numpy as np

from butler.embeddings.base import EmbeddingProvider
from butler.llm.base import LLMProvider

NOW = datetime(2026, 3, 15, 12, 0)

DIM = 64

_TOKEN_RE = re.compile(r"\w+")


class BagOfWordsEmbedder(EmbeddingProvider):
    """Hashes each token into a bucket, so shared words mean higher cosine."""

    def __init__(self, dim: int = DIM):
        self._dim = dim
        self.calls = 0

    def embed_texts(self, texts: list[str]) -> list[list[float]]:
        self.calls += 1
        return [self._embed(t) for t in texts]

    @property
    def dimension(self) -> int:
        return self._dim

    def _embed(self, text: str) -> list[float]:
        vec = np.zeros(self._dim)
        for token in _TOKEN_RE.findall(text.lower()):
            bucket = int(hashlib.md5(token.encode()).hexdigest(), 16) % self._dim
            vec[bucket] += 1.0
        norm = np.linalg.norm(vec)
        if norm > 0:
            vec /= norm
        return vec.tolist()


class FailingEmbedder(EmbeddingProvider):
    """Every call raises, as if the model server were down."""

    def embed_texts(self, texts: list[str]) -> list[list[float]]:
        raise ConnectionError("embedding server unreachable")

    @property
    def dimension(self) -> int:
        return DIM


class MockLLM(LLMProvider):
    """Returns a canned reply and records every prompt it was given."""

    def __init__(self, reply: str = "You spent most of it on groceries."):
        self.reply = reply
        self.prompts: list[str] = []

    def generate(self, prompt: str, system: str | None = None) -> str:
        self.prompts.append(prompt)
        return self.reply


class FailingLLM(LLMProvider):
    def generate(self, prompt: str, system: str | None = None) -> str:
        raise TimeoutError("model timed out")

