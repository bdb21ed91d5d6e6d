# memrag/retrieval/exceptions.py
"""
Retrieval exceptions.

Hierarchy:
    EngineError (from memrag.core)
    └── RetrieverError - Retrieval failures
        └── EmbeddingError - Embedding model failures
"""

from memrag.core.exceptions import EngineError


class RetrieverError(EngineError):
    """General retrieval failure."""

    pass


class EmbeddingError(RetrieverError):
    """Embedding model failed (API failure, invalid input, etc.)."""

    pass
