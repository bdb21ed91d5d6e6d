# memrag/config/schema.py
"""
Configuration schema for memrag.

Every section forbids unknown keys so typos in user YAML fail loudly
instead of being silently ignored.
"""

from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator

# =============================================================================
# Sections
# =============================================================================


class OllamaConfig(BaseModel):
    """Local model runtime endpoints and timeouts."""

    base_url: str = Field(default="http://localhost:11434", description="Ollama base URL")
    embedding_model: str = Field(default="mxbai-embed-large", description="Embedding model")
    chat_model: str = Field(default="qwen2.5:1.5b", description="Chat model")
    embedding_timeout: float = Field(default=60.0, gt=0, description="Embedding timeout (s)")
    chat_timeout: float = Field(default=120.0, gt=0, description="Chat timeout (s)")
    stream_timeout: float = Field(default=300.0, gt=0, description="Streaming chat timeout (s)")

    model_config = ConfigDict(extra="forbid")


class ChunkingConfig(BaseModel):
    """Paragraph/sentence chunker settings."""

    chunk_size: int = Field(default=1000, gt=0, description="Target chunk size in characters")
    chunk_overlap: int = Field(default=200, ge=0, description="Overlap carried between chunks")

    model_config = ConfigDict(extra="forbid")


class RetrievalConfig(BaseModel):
    """
    Retrieval settings.

    relevance_floor is exclusive: a candidate must score strictly above it.
    fetch_size is the superset size cached per query; requests for more
    than fetch_size bypass the cache.
    """

    relevance_floor: float = Field(default=0.5, ge=-1.0, le=1.0)
    diversity_threshold: float = Field(default=0.7, ge=-1.0, le=1.0)
    fetch_size: int = Field(default=10, ge=1)
    context_limit: int = Field(default=5, ge=1, description="Chunks placed in the prompt")

    model_config = ConfigDict(extra="forbid")


class CacheConfig(BaseModel):
    """Query cache settings."""

    enabled: bool = Field(default=True)
    max_size: int = Field(default=100, ge=1)
    ttl_seconds: float = Field(default=300.0, gt=0)

    model_config = ConfigDict(extra="forbid")


class RuntimeConfig(BaseModel):
    """Shared worker pool settings. pool_size None means max(2, cpu count)."""

    pool_size: Optional[int] = Field(default=None, ge=1)
    shutdown_timeout: float = Field(default=5.0, ge=0)

    model_config = ConfigDict(extra="forbid")


class LoggingConfig(BaseModel):
    level: str = Field(default="INFO")

    model_config = ConfigDict(extra="forbid")


# =============================================================================
# Root
# =============================================================================


class MemragConfig(BaseModel):
    """
    Root configuration consumed by RagService and the CLI.

    Example YAML:
        ollama:
          chat_model: llama3.2
        chunking:
          chunk_size: 800
    """

    ollama: OllamaConfig = Field(default_factory=OllamaConfig)
    chunking: ChunkingConfig = Field(default_factory=ChunkingConfig)
    retrieval: RetrievalConfig = Field(default_factory=RetrievalConfig)
    cache: CacheConfig = Field(default_factory=CacheConfig)
    runtime: RuntimeConfig = Field(default_factory=RuntimeConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)

    model_config = ConfigDict(extra="forbid")

    @model_validator(mode="after")
    def _overlap_below_size(self) -> "MemragConfig":
        # Overlap >= size is tolerated by the chunker but almost always a typo
        if self.chunking.chunk_overlap >= self.chunking.chunk_size:
            raise ValueError("chunking.chunk_overlap must be smaller than chunking.chunk_size")
        return self
