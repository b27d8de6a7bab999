"""Vector math and the on-disk vector encoding."""

from __future__ import annotations

import logging
from collections.abc import Sequence

import numpy as np

logger = logging.getLogger(__name__)

# Stored vectors are raw little-endian float64 arrays.
VECTOR_DTYPE = np.dtype("<f8")


def cosine_similarity(a: Sequence[float], b: Sequence[float]) -> float:
    """Cosine similarity in [-1, 1].

    Returns 0.0 for mismatched lengths (usually an embedding-model swap)
    and for zero vectors.
    """
    if len(a) != len(b):
        logger.warning(
            "Vector length mismatch (%d vs %d); embedding model may have changed",
            len(a),
            len(b),
        )
        return 0.0
    if len(a) == 0:
        return 0.0

    va = np.asarray(a, dtype=np.float64)
    vb = np.asarray(b, dtype=np.float64)
    norm = float(np.linalg.norm(va) * np.linalg.norm(vb))
    if norm == 0.0:
        return 0.0
    return float(np.clip(np.dot(va, vb) / norm, -1.0, 1.0))


def cosine_scores(query: Sequence[float], matrix: np.ndarray) -> np.ndarray:
    """Cosine of ``query`` against every row of ``matrix``; zero rows score 0."""
    q = np.asarray(query, dtype=np.float64)
    if matrix.size == 0 or matrix.shape[1] != q.shape[0]:
        return np.zeros(matrix.shape[0])
    q_norm = np.linalg.norm(q)
    row_norms = np.linalg.norm(matrix, axis=1)
    denom = row_norms * q_norm
    with np.errstate(divide="ignore", invalid="ignore"):
        scores = np.where(denom > 0, matrix @ q / denom, 0.0)
    return np.clip(scores, -1.0, 1.0)


def vector_to_bytes(vector: Sequence[float]) -> bytes:
    return np.asarray(vector, dtype=VECTOR_DTYPE).tobytes()


def bytes_to_vector(blob: bytes) -> list[float]:
    return np.frombuffer(blob, dtype=VECTOR_DTYPE).tolist()
