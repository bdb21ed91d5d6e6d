# memrag/generation/__init__.py
from memrag.generation.prompt import (
    SYSTEM_PROMPT,
    UNKNOWN_SOURCE,
    build_context,
    build_messages,
    select_context_chunks,
)

__all__ = [
    "SYSTEM_PROMPT",
    "UNKNOWN_SOURCE",
    "build_context",
    "build_messages",
    "select_context_chunks",
]
