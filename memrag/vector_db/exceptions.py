# memrag/vector_db/exceptions.py
"""
Vector store exceptions.

Hierarchy:
    KnowledgeError (from memrag.core)
    └── VectorStoreError - corpus failures
        └── CacheLoadError - query cache loader failed
"""

from memrag.core.exceptions import KnowledgeError


class VectorStoreError(KnowledgeError):
    """General vector store failure."""

    pass


class CacheLoadError(VectorStoreError):
    """
    The cache loader raised; the original error is the __cause__.

    joined is True for callers that waited on another caller's load rather
    than running the loader themselves.
    """

    def __init__(self, message: str, joined: bool = False):
        super().__init__(message)
        self.joined = joined
