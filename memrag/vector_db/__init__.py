# memrag/vector_db/__init__.py
"""
In-memory vector storage: corpus, query cache and the store facade.
"""

from memrag.vector_db.cache import QueryCache, normalize_query
from memrag.vector_db.exceptions import CacheLoadError, VectorStoreError
from memrag.vector_db.memory import InMemoryVectorStore, SearchResult
from memrag.vector_db.store import AddReport, CorpusSnapshot, DocumentStore

__all__ = [
    "InMemoryVectorStore",
    "SearchResult",
    "DocumentStore",
    "CorpusSnapshot",
    "AddReport",
    "QueryCache",
    "normalize_query",
    "VectorStoreError",
    "CacheLoadError",
]
