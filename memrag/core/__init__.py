# memrag/core/__init__.py
"""
Core building blocks shared by every memrag subsystem.
"""

from memrag.core.chunk import Chunk, FileSummary
from memrag.core.exceptions import (
    ConfigurationError,
    EngineError,
    GenerationError,
    KnowledgeError,
    QueryError,
)

__all__ = [
    "Chunk",
    "FileSummary",
    "EngineError",
    "QueryError",
    "KnowledgeError",
    "GenerationError",
    "ConfigurationError",
]
