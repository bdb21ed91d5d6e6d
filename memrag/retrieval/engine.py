# memrag/retrieval/engine.py
"""
RetrievalEngine - brute-force cosine search over the in-memory corpus.

Flow:
    1. Embed the query (failure aborts with EmbeddingError)
    2. Score every embedded chunk in parallel on the shared pool
    3. Drop candidates at or below the relevance floor
    4. Rank by descending score, ties by insertion order
    5. Diversity-aware top-K selection

Scoring fans out one task per scoreable chunk, so per-query work is
O(corpus size). There is no index; that is intentional for small corpora.
"""

from __future__ import annotations

from typing import List, Optional, Sequence

from memrag.core.chunk import Chunk
from memrag.core.exceptions import QueryError
from memrag.llm.protocols import EmbeddingGateway
from memrag.logging.logger import get_logger
from memrag.logging.tags import RETRIEVER
from memrag.retrieval.exceptions import EmbeddingError
from memrag.retrieval.selection import (
    DEFAULT_DIVERSITY_THRESHOLD,
    ScoredChunk,
    rank,
    select_diverse,
)
from memrag.retrieval.similarity import cosine_similarity
from memrag.runtime.pool import WorkerPool

logger = get_logger(__name__)

DEFAULT_RELEVANCE_FLOOR = 0.5


class RetrievalEngine:
    def __init__(
        self,
        embedder: EmbeddingGateway,
        model: str,
        pool: WorkerPool,
        relevance_floor: float = DEFAULT_RELEVANCE_FLOOR,
        diversity_threshold: float = DEFAULT_DIVERSITY_THRESHOLD,
    ):
        self.embedder = embedder
        self.model = model
        self.pool = pool
        self.relevance_floor = relevance_floor
        self.diversity_threshold = diversity_threshold

    def embed_query(self, query: str) -> List[float]:
        try:
            vector = self.embedder.embed(self.model, query)
        except Exception as e:
            logger.error(f"{RETRIEVER} Query embedding failed: {e}")
            raise EmbeddingError(f"Failed to embed query: {e}") from e

        if not vector:
            raise EmbeddingError("Embedding model returned an empty vector for the query")
        return list(vector)

    def score(self, query_vector: Sequence[float], corpus: Sequence[Chunk]) -> List[ScoredChunk]:
        """Score every embedded chunk in parallel; keep those above the floor."""
        scoreable = [c for c in corpus if c.has_embedding]
        if not scoreable:
            return []

        def _score(chunk: Chunk) -> ScoredChunk:
            return ScoredChunk(chunk=chunk, score=cosine_similarity(query_vector, chunk.embedding))

        futures = self.pool.map_all(_score, scoreable)
        results = [f.result() for f in futures]
        return [r for r in results if r.score > self.relevance_floor]

    def search(
        self,
        query: str,
        top_k: int,
        corpus: Sequence[Chunk],
        query_vector: Optional[Sequence[float]] = None,
    ) -> List[ScoredChunk]:
        """
        Rank `corpus` against `query`.

        Raises:
            QueryError: If top_k is not positive
            EmbeddingError: If the query cannot be embedded
        """
        if top_k <= 0:
            raise QueryError(f"top_k must be positive, got {top_k}")

        if query_vector is None:
            query_vector = self.embed_query(query)

        candidates = rank(self.score(query_vector, corpus))
        selected = select_diverse(candidates, top_k, self.diversity_threshold)

        logger.debug(
            f"{RETRIEVER} {len(corpus)} chunks, {len(candidates)} above floor, "
            f"{len(selected)} selected"
        )
        return selected
