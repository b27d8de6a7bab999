"""Application settings loaded from YAML with environment variable overrides."""

from __future__ import annotations

import os
from pathlib import Path

import yaml
from pydantic import BaseModel, Field

# ---------------------------------------------------------------------------
# Settings sections
# ---------------------------------------------------------------------------


class EmbeddingSettings(BaseModel):
    provider: str = "ollama"
    model: str = "nomic-embed-text"
    dimension: int = 768


class LLMSettings(BaseModel):
    provider: str = "ollama"
    model: str = "llama3.1:8b"
    temperature: float = 0.7
    max_tokens: int = 2048


class ChunkingSettings(BaseModel):
    max_tokens: int = 512
    overlap_tokens: int = 50
    chars_per_token: int = 4


class RetrievalSettings(BaseModel):
    limit: int = 10
    min_score: float = 0.1
    max_context_chars: int = 4000
    temperature: float = 0.7


class IngestionSettings(BaseModel):
    batch_size: int = 5
    batch_delay: float = 0.1
    coverage_target: float = 0.8


class StorageSettings(BaseModel):
    backend: str = "memory"
    path: str = "local_data/embeddings.db"


class RoutingSettings(BaseModel):
    """Fusion weights and classifier thresholds.

    The thresholds are empirical; keep them tunable from settings.yaml.
    """

    rule_weight: float = 0.4
    semantic_weight: float = 0.3
    llm_weight: float = 0.3
    data_missing_weight: float = 0.2
    data_missing_penalty: float = 0.1
    high_confidence_threshold: float = 0.8
    semantic_base_threshold: float = 0.53
    semantic_length_step: float = 0.02
    semantic_min_threshold: float = 0.4
    semantic_max_threshold: float = 0.7
    hybrid_threshold: float = 0.5
    # Compared per intent against the weight of ``general`` cue words only,
    # not the full keyword score; topic words alone never make a query mixed.
    mixed_raw_threshold: float = 1.0
    fallback_confidence: float = 0.3
    calculation_confidence: float = 0.9


# ---------------------------------------------------------------------------
# Root settings
# ---------------------------------------------------------------------------


class Settings(BaseModel):
    embedding: EmbeddingSettings = Field(default_factory=EmbeddingSettings)
    llm: LLMSettings = Field(default_factory=LLMSettings)
    chunking: ChunkingSettings = Field(default_factory=ChunkingSettings)
    retrieval: RetrievalSettings = Field(default_factory=RetrievalSettings)
    ingestion: IngestionSettings = Field(default_factory=IngestionSettings)
    storage: StorageSettings = Field(default_factory=StorageSettings)
    routing: RoutingSettings = Field(default_factory=RoutingSettings)


def _find_settings_file() -> Path | None:
    """Walk up from cwd looking for settings.yaml."""
    profile = os.getenv("BUTLER_PROFILE", "")
    names = [f"settings-{profile}.yaml", "settings.yaml"] if profile else ["settings.yaml"]

    cwd = Path.cwd()
    for parent in [cwd, *cwd.parents]:
        for name in names:
            candidate = parent / name
            if candidate.exists():
                return candidate
    return None


def load_settings(path: str | Path | None = None) -> Settings:
    """Load settings from YAML file, falling back to defaults."""
    path = Path(path) if path is not None else _find_settings_file()
    if path is None:
        return Settings()

    with open(path, encoding="utf-8") as fh:
        raw = yaml.safe_load(fh) or {}

    return Settings(**raw)
