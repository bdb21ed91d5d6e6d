# memrag/ingestion/chunking/paragraph.py
"""
Paragraph-first text splitter with overlap.

Splitting hierarchy:
1. Paragraphs (blank-line boundaries) are packed into chunks up to chunk_size
2. A paragraph longer than chunk_size is split into sentences, packed the same way
3. A sentence longer than chunk_size is hard-split into fixed windows stepped
   by chunk_size - chunk_overlap (at least 1)

When a new chunk starts after a flush, the tail of the previous chunk is
prepended so context carries across the boundary. The carried tail is
shortened when needed so that no chunk ever exceeds chunk_size.
"""

from __future__ import annotations

import re
import uuid
from dataclasses import dataclass
from typing import List, Optional

from memrag.core.chunk import Chunk
from memrag.logging.logger import get_logger
from memrag.logging.tags import CHUNKING

logger = get_logger(__name__)

PARAGRAPH_BOUNDARY = re.compile(r"\n\s*\n")
SENTENCE_BOUNDARY = re.compile(r"(?<=[.!?])\s+")

PARAGRAPH_JOINER = "\n\n"
SENTENCE_JOINER = " "


class _ChunkBuilder:
    """Accumulates pieces into bounded chunks."""

    def __init__(self, size: int, overlap: int) -> None:
        self.size = size
        self.overlap = overlap
        self.chunks: List[str] = []
        self.buffer = ""

    def flush(self) -> None:
        if self.buffer.strip():
            self.chunks.append(self.buffer)
        self.buffer = ""

    def _start(self, piece: str) -> None:
        self.buffer = self._overlap_prefix(piece) + piece

    def _overlap_prefix(self, piece: str) -> str:
        if self.overlap <= 0 or not self.chunks:
            return ""
        # Leave room for the piece and the joining space
        n = min(self.overlap, self.size - len(piece) - 1)
        if n <= 0:
            return ""
        return self.chunks[-1][-n:] + " "

    def append(self, piece: str, joiner: str) -> None:
        if not self.buffer:
            self._start(piece)
        elif len(self.buffer) + len(joiner) + len(piece) <= self.size:
            self.buffer += joiner + piece
        else:
            self.flush()
            self._start(piece)

    def hard_split(self, text: str) -> None:
        self.flush()
        step = max(1, self.size - self.overlap)
        for start in range(0, len(text), step):
            end = min(start + self.size, len(text))
            window = text[start:end]
            if window.strip():
                self.chunks.append(window)
            if end >= len(text):
                break


def chunk_text(text: str, target_size: int, overlap_size: int) -> List[str]:
    """
    Split text into bounded, overlapping segments.

    Pure function of its input: the same text and settings always produce
    the same chunks.

    Args:
        text: Raw extracted text
        target_size: Maximum chunk length in characters
        overlap_size: Characters of the previous chunk carried into the next

    Returns:
        Ordered list of chunk strings (empty for blank input)

    Raises:
        ValueError: If target_size <= 0 or overlap_size < 0
    """
    if target_size <= 0:
        raise ValueError(f"target_size must be positive, got {target_size}")
    if overlap_size < 0:
        raise ValueError(f"overlap_size must be non-negative, got {overlap_size}")

    builder = _ChunkBuilder(target_size, overlap_size)

    for raw_paragraph in PARAGRAPH_BOUNDARY.split(text or ""):
        paragraph = raw_paragraph.strip()
        if not paragraph:
            continue

        if len(paragraph) <= target_size:
            builder.append(paragraph, PARAGRAPH_JOINER)
            continue

        # Oversized paragraph gets its own run of chunks
        builder.flush()
        for raw_sentence in SENTENCE_BOUNDARY.split(paragraph):
            sentence = raw_sentence.strip()
            if not sentence:
                continue
            if len(sentence) > target_size:
                builder.hard_split(sentence)
            else:
                builder.append(sentence, SENTENCE_JOINER)
        builder.flush()

    builder.flush()
    return builder.chunks


@dataclass
class ParagraphChunker:
    """
    Paragraph/sentence chunker producing Chunk models.

    Args:
        chunk_size: Target chunk size in characters (default: 1000)
        chunk_overlap: Overlap between chunks in characters (default: 200)
    """

    plugin_name: str = "paragraph"
    chunk_size: int = 1000
    chunk_overlap: int = 200

    def __post_init__(self) -> None:
        if self.chunk_size <= 0:
            raise ValueError(f"chunk_size must be positive, got {self.chunk_size}")
        if self.chunk_overlap < 0:
            raise ValueError(f"chunk_overlap must be non-negative, got {self.chunk_overlap}")

    @property
    def chunker_id(self) -> str:
        """
        Unique identifier including parameters that affect chunk output.

        Format: "paragraph:{chunk_size}:{chunk_overlap}"
        """
        return f"{self.plugin_name}:{self.chunk_size}:{self.chunk_overlap}"

    def chunk_text(self, text: str) -> List[str]:
        return chunk_text(text, self.chunk_size, self.chunk_overlap)

    def chunk(
        self,
        text: str,
        file_id: Optional[str] = None,
        file_name: Optional[str] = None,
        file_size: Optional[int] = None,
    ) -> List[Chunk]:
        """Split text and wrap each piece as a Chunk tagged with its source file."""
        pieces = self.chunk_text(text)

        metadata = {"chunker_id": self.chunker_id}
        if file_id:
            metadata["fileId"] = file_id
        if file_name:
            metadata["fileName"] = file_name
        if file_size is not None:
            metadata["fileSize"] = file_size

        chunks = [
            Chunk(
                id=f"{file_id}:{i}" if file_id else uuid.uuid4().hex,
                content=piece,
                file_id=file_id,
                file_name=file_name,
                file_size=file_size,
                chunk_index=i,
                metadata=dict(metadata),
            )
            for i, piece in enumerate(pieces)
        ]

        logger.debug(f"{CHUNKING} {file_name or 'text'}: {len(chunks)} chunks ({self.chunker_id})")
        return chunks
