# memrag/retrieval/__init__.py
"""
Retrieval: query embedding, parallel cosine scoring, diversity-aware selection.
"""

from memrag.retrieval.engine import RetrievalEngine
from memrag.retrieval.exceptions import EmbeddingError, RetrieverError
from memrag.retrieval.selection import ScoredChunk, select_diverse
from memrag.retrieval.similarity import cosine_similarity

__all__ = [
    "RetrievalEngine",
    "ScoredChunk",
    "select_diverse",
    "cosine_similarity",
    "RetrieverError",
    "EmbeddingError",
]
