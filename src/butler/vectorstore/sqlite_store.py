"""SQLite embedding store — single-file persistence for the embedding table.

Vectors are kept as BLOBs of little-endian float64 values so the file is
readable by other tooling without a pickle step.
"""

from __future__ import annotations

import logging
import sqlite3
import threading
from datetime import datetime
from pathlib import Path

from butler.vectorstore.base import EmbeddingStore
from butler.vectorstore.schemas import Embedding, EmbeddingFilter
from butler.vectorstore.similarity import bytes_to_vector, vector_to_bytes

logger = logging.getLogger(__name__)

_SCHEMA = """
CREATE TABLE IF NOT EXISTS embeddings (
    id TEXT PRIMARY KEY,
    object_type TEXT NOT NULL,
    object_id TEXT NOT NULL,
    chunk_text TEXT NOT NULL,
    vector BLOB NOT NULL,
    created_at TEXT NOT NULL
);
CREATE INDEX IF NOT EXISTS idx_embeddings_object
    ON embeddings (object_type, object_id);
"""


class SQLiteEmbeddingStore(EmbeddingStore):
    """Embedding table in a SQLite database file (or ``:memory:``)."""

    def __init__(self, path: str = "local_data/embeddings.db"):
        if path != ":memory:":
            Path(path).parent.mkdir(parents=True, exist_ok=True)
        self.path = path
        self._lock = threading.Lock()
        self._conn = sqlite3.connect(path, check_same_thread=False)
        with self._conn:
            self._conn.executescript(_SCHEMA)

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def upsert(self, embeddings: list[Embedding]) -> int:
        if not embeddings:
            return 0
        rows = [
            (
                e.id,
                e.object_type,
                e.object_id,
                e.chunk_text,
                vector_to_bytes(e.vector),
                e.created_at.isoformat(),
            )
            for e in embeddings
        ]
        with self._lock, self._conn:
            self._conn.executemany(
                "INSERT INTO embeddings "
                "(id, object_type, object_id, chunk_text, vector, created_at) "
                "VALUES (?, ?, ?, ?, ?, ?) "
                "ON CONFLICT(id) DO UPDATE SET "
                "object_type=excluded.object_type, object_id=excluded.object_id, "
                "chunk_text=excluded.chunk_text, vector=excluded.vector, "
                "created_at=excluded.created_at",
                rows,
            )
        return len(rows)

    def all(self, embedding_filter: EmbeddingFilter | None = None) -> list[Embedding]:
        sql = (
            "SELECT id, object_type, object_id, chunk_text, vector, created_at "
            "FROM embeddings"
        )
        clauses: list[str] = []
        params: list[str] = []
        if embedding_filter is not None:
            if embedding_filter.object_types:
                types = sorted(embedding_filter.object_types)
                clauses.append(f"object_type IN ({', '.join('?' for _ in types)})")
                params.extend(types)
            if embedding_filter.start:
                clauses.append("created_at >= ?")
                params.append(embedding_filter.start.isoformat())
            if embedding_filter.end:
                clauses.append("created_at <= ?")
                params.append(embedding_filter.end.isoformat())
        if clauses:
            sql += " WHERE " + " AND ".join(clauses)

        with self._lock:
            rows = self._conn.execute(sql, params).fetchall()
        return [
            Embedding(
                id=row[0],
                object_type=row[1],
                object_id=row[2],
                chunk_text=row[3],
                vector=bytes_to_vector(row[4]),
                created_at=datetime.fromisoformat(row[5]),
            )
            for row in rows
        ]

    def delete_by_object(self, object_type: str, object_id: str) -> int:
        with self._lock, self._conn:
            cur = self._conn.execute(
                "DELETE FROM embeddings WHERE object_type = ? AND object_id = ?",
                (object_type, object_id),
            )
        return cur.rowcount

    def count(self) -> int:
        with self._lock:
            return self._conn.execute("SELECT COUNT(*) FROM embeddings").fetchone()[0]

    def count_by_type(self) -> dict[str, int]:
        with self._lock:
            rows = self._conn.execute(
                "SELECT object_type, COUNT(*) FROM embeddings GROUP BY object_type"
            ).fetchall()
        return {row[0]: row[1] for row in rows}

    def indexed_objects(self) -> set[tuple[str, str]]:
        with self._lock:
            rows = self._conn.execute(
                "SELECT DISTINCT object_type, object_id FROM embeddings"
            ).fetchall()
        return {(row[0], row[1]) for row in rows}

    def clear(self) -> None:
        with self._lock, self._conn:
            self._conn.execute("DELETE FROM embeddings")

    def close(self) -> None:
        self._conn.close()
