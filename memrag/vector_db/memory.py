# memrag/vector_db/memory.py
"""
In-memory vector store facade.

Wires the DocumentStore, QueryCache and RetrievalEngine together over one
shared WorkerPool and exposes the operations callers use:

    store = InMemoryVectorStore(embedder, model="mxbai-embed-large")
    store.add(chunks)
    result = store.search("what changed in Q3?", top_k=5)
    if result.failed:
        ...  # query could not be embedded; distinct from "no matches"
    store.delete_by_file_id("file-...")
    store.close()

Queries always fetch a superset of fetch_size results through the cache so
different top_k values share one entry; results are truncated per call.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, List, Optional, Tuple

from memrag.core.chunk import Chunk, FileSummary
from memrag.core.exceptions import QueryError
from memrag.llm.protocols import EmbeddingGateway
from memrag.logging.logger import get_logger
from memrag.logging.tags import VECTOR_DB
from memrag.retrieval.engine import DEFAULT_RELEVANCE_FLOOR, RetrievalEngine
from memrag.retrieval.exceptions import RetrieverError
from memrag.retrieval.selection import DEFAULT_DIVERSITY_THRESHOLD, ScoredChunk
from memrag.runtime.pool import WorkerPool
from memrag.vector_db.cache import QueryCache, normalize_query
from memrag.vector_db.exceptions import CacheLoadError
from memrag.vector_db.store import AddReport, DocumentStore

logger = get_logger(__name__)

DEFAULT_FETCH_SIZE = 10


@dataclass(frozen=True)
class SearchResult:
    """
    Ranked hits plus the error that prevented a search, if any.

    An empty result with error=None means nothing was relevant; an empty
    result with error set means the search itself failed.
    """

    hits: Tuple[ScoredChunk, ...] = ()
    error: Optional[Exception] = None

    @property
    def chunks(self) -> List[Chunk]:
        return [h.chunk for h in self.hits]

    @property
    def failed(self) -> bool:
        return self.error is not None

    def __len__(self) -> int:
        return len(self.hits)

    def __iter__(self):
        return iter(self.hits)


class InMemoryVectorStore:
    def __init__(
        self,
        embedder: EmbeddingGateway,
        model: str,
        pool: Optional[WorkerPool] = None,
        cache: Optional[QueryCache] = None,
        fetch_size: int = DEFAULT_FETCH_SIZE,
        relevance_floor: float = DEFAULT_RELEVANCE_FLOOR,
        diversity_threshold: float = DEFAULT_DIVERSITY_THRESHOLD,
        cache_enabled: bool = True,
        shutdown_timeout: float = 5.0,
    ):
        self._owns_pool = pool is None
        self.pool = pool or WorkerPool()
        self.fetch_size = fetch_size
        self.shutdown_timeout = shutdown_timeout
        if not cache_enabled:
            self.cache: Optional[QueryCache] = None
        else:
            self.cache = cache if cache is not None else QueryCache()

        self.documents = DocumentStore(
            embedder=embedder,
            model=model,
            pool=self.pool,
            on_change=self.cache.invalidate_all if self.cache is not None else None,
        )
        self.engine = RetrievalEngine(
            embedder=embedder,
            model=model,
            pool=self.pool,
            relevance_floor=relevance_floor,
            diversity_threshold=diversity_threshold,
        )

    # -------------------------------------------------------------------------
    # Mutations
    # -------------------------------------------------------------------------

    def add(self, chunks: Iterable[Chunk]) -> AddReport:
        return self.documents.add(chunks)

    def delete_by_file_id(self, file_id: str) -> bool:
        return self.documents.delete_by_file_id(file_id)

    def delete_all(self) -> None:
        self.documents.delete_all()

    # -------------------------------------------------------------------------
    # Queries
    # -------------------------------------------------------------------------

    def _compute(self, query: str, top_k: int) -> Tuple[ScoredChunk, ...]:
        # Snapshot is taken inside the loader so it is never older than the
        # cache generation the load was registered under
        corpus = self.documents.snapshot().chunks
        return tuple(self.engine.search(query, top_k, corpus))

    def search(self, query: str, top_k: int = 5) -> SearchResult:
        """
        Ranked, diversity-aware search.

        Raises:
            QueryError: For empty query text or non-positive top_k
        """
        if top_k <= 0:
            raise QueryError(f"top_k must be positive, got {top_k}")
        normalized = normalize_query(query)
        if not normalized:
            raise QueryError("Query text is empty")

        try:
            hits = self._cached_search(normalized, top_k)
        except RetrieverError as e:
            return SearchResult(error=e)

        return SearchResult(hits=hits[:top_k])

    def _cached_search(self, query: str, top_k: int) -> Tuple[ScoredChunk, ...]:
        if self.cache is None or top_k > self.fetch_size:
            return self._compute(query, top_k)

        key = (query, self.fetch_size)
        try:
            return self.cache.get_or_load(key, lambda: self._compute(query, self.fetch_size))
        except CacheLoadError as e:
            cause = e.__cause__
            if e.joined:
                # Only the caller that ran the failed load retries directly
                if isinstance(cause, RetrieverError):
                    raise cause
                raise RetrieverError(f"Search failed: {cause}") from cause
            logger.debug(f"{VECTOR_DB} Cache load failed, searching directly: {cause}")
            return self._compute(query, self.fetch_size)

    # -------------------------------------------------------------------------
    # Introspection / lifecycle
    # -------------------------------------------------------------------------

    def list_file_summaries(self) -> List[FileSummary]:
        return self.documents.list_file_summaries()

    def count(self) -> int:
        return self.documents.count()

    def close(self) -> None:
        if self._owns_pool:
            self.pool.shutdown(timeout=self.shutdown_timeout)

    def __enter__(self) -> "InMemoryVectorStore":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()
