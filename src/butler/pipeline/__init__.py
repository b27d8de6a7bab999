"""RAG pipeline — ingest, search, answer, rebuild, indexing status."""

from butler.pipeline.indexing import IndexingOrchestrator
from butler.pipeline.rag_pipeline import RAGPipeline, no_data_message, simple_response
from butler.pipeline.status import EmbeddingStatus, IndexingState

__all__ = [
    "EmbeddingStatus",
    "IndexingOrchestrator",
    "IndexingState",
    "RAGPipeline",
    "no_data_message",
    "simple_response",
]
