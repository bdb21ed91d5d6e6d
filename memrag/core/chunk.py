# memrag/core/chunk.py
"""
Chunk - core data model for memrag.

A chunk is the unit of embedding and retrieval. Once a chunk is published
into the corpus it is never mutated; embedding assignment during ingestion
produces a new instance via with_embedding().

This module provides:
- Chunk: the canonical Pydantic model
- FileSummary: per-file record derived from the corpus
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field

# Metadata key used by callers that tag chunks without the typed fields
LEGACY_FILE_ID_KEY = "fileId"


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Chunk(BaseModel):
    """
    Canonical chunk model.

    A chunk carries:
    - Unique identifier and text content
    - Source file identity (id, name, size), absent for ungrouped input
    - Position within its source
    - Optional embedding, absent until computed
    - Insertion sequence number, assigned by the DocumentStore
    """

    model_config = ConfigDict(frozen=True)

    id: str = Field(..., description="Chunk ID")
    content: str = Field(..., description="Chunk text content")
    file_id: Optional[str] = Field(default=None, description="Source file ID")
    file_name: Optional[str] = Field(default=None, description="Source file name")
    file_size: Optional[int] = Field(default=None, description="Source file size in bytes")
    chunk_index: int = Field(default=0, description="Index of this chunk within its source")
    metadata: Dict[str, Any] = Field(default_factory=dict, description="Chunk metadata")
    embedding: Optional[List[float]] = Field(default=None, description="Embedding vector")
    seq: int = Field(default=-1, description="Insertion order within the corpus")
    added_at: datetime = Field(default_factory=_utcnow, description="Creation time")

    @property
    def source_file_id(self) -> Optional[str]:
        """File ID from the typed field, falling back to legacy metadata."""
        if self.file_id:
            return self.file_id
        legacy = self.metadata.get(LEGACY_FILE_ID_KEY)
        return str(legacy) if legacy else None

    @property
    def source_file_name(self) -> Optional[str]:
        return self.file_name or self.metadata.get("fileName")

    @property
    def has_embedding(self) -> bool:
        return bool(self.embedding)

    def with_embedding(self, embedding: List[float]) -> "Chunk":
        return self.model_copy(update={"embedding": list(embedding)}, deep=True)

    def with_seq(self, seq: int) -> "Chunk":
        return self.model_copy(update={"seq": seq}, deep=True)


class FileSummary(BaseModel):
    """One record per distinct file ID, derived by scanning the corpus."""

    model_config = ConfigDict(frozen=True)

    file_id: str
    file_name: Optional[str] = None
    file_size: Optional[int] = None
    first_seen: datetime


__all__ = ["Chunk", "FileSummary", "LEGACY_FILE_ID_KEY"]
