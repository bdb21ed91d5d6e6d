# memrag/generation/prompt.py
"""
Prompt assembly for grounded answers.

Each retrieved chunk becomes a block headed by its source file name:

    [SOURCE: report.pdf]
    <chunk text>

The blocks are joined into one context string and wrapped in a fixed
instruction asking the model to answer from that context only.
"""

from __future__ import annotations

from typing import Iterable, List, Sequence

from memrag.core.chunk import Chunk
from memrag.llm.protocols import Message
from memrag.logging.logger import get_logger
from memrag.logging.tags import PROMPT

logger = get_logger(__name__)

UNKNOWN_SOURCE = "Unknown source"

SYSTEM_PROMPT = "You are a helpful assistant that must answer based on the provided context."

USER_TEMPLATE = "Answer the question based on the following context.\n\nContext:\n{context}\n\nQuestion: {question}"


def select_context_chunks(chunks: Iterable[Chunk], limit: int) -> List[Chunk]:
    """Keep embedded, non-blank chunks in ranked order, up to limit."""
    usable = [c for c in chunks if c.has_embedding and c.content and c.content.strip()]
    return usable[:limit]


def build_context(chunks: Sequence[Chunk]) -> str:
    parts = []
    for chunk in chunks:
        name = chunk.source_file_name or UNKNOWN_SOURCE
        parts.append(f"[SOURCE: {name}]\n{chunk.content}\n\n")
    return "".join(parts).strip()


def build_messages(question: str, chunks: Sequence[Chunk]) -> List[Message]:
    context = build_context(chunks)
    logger.debug(f"{PROMPT} {len(chunks)} context blocks, {len(context)} chars")
    return [
        {"role": "system", "content": SYSTEM_PROMPT},
        {"role": "user", "content": USER_TEMPLATE.format(context=context, question=question)},
    ]
