# memrag/vector_db/store.py
"""
DocumentStore - concurrency-safe in-memory corpus with a per-file index.

The corpus is copy-on-write: readers grab an immutable snapshot (a tuple of
chunks plus a file index) without locking, writers build a new snapshot and
swap it under the write lock. A chunk is therefore visible with its content,
metadata and embedding together or not at all. The first published
embedding fixes the corpus dimension until delete_all(); chunks whose vector
has another length are dropped like failed embeddings.

Every mutation runs the invalidation hook while still holding the write
lock, so no reader can observe the new corpus before stale cached results
are gone.
"""

from __future__ import annotations

import threading
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Callable, Dict, Iterable, List, Mapping, Optional, Tuple

from memrag.core.chunk import Chunk, FileSummary
from memrag.llm.protocols import EmbeddingGateway
from memrag.logging.logger import get_logger
from memrag.logging.tags import VECTOR_DB
from memrag.runtime.pool import WorkerPool

logger = get_logger(__name__)


@dataclass(frozen=True)
class CorpusSnapshot:
    chunks: Tuple[Chunk, ...] = ()
    by_file: Mapping[str, Tuple[Chunk, ...]] = field(
        default_factory=lambda: MappingProxyType({})
    )

    def __len__(self) -> int:
        return len(self.chunks)


@dataclass(frozen=True)
class AddReport:
    """Outcome of a best-effort batch add."""

    added: int
    failed: int
    file_ids: Tuple[str, ...] = ()

    @property
    def partial(self) -> bool:
        return self.failed > 0


def _index(chunks: Iterable[Chunk]) -> Mapping[str, Tuple[Chunk, ...]]:
    grouped: Dict[str, List[Chunk]] = {}
    for chunk in chunks:
        # Only typed file ids are indexed; legacy metadata ids are found by scan
        if chunk.file_id:
            grouped.setdefault(chunk.file_id, []).append(chunk)
    return MappingProxyType({k: tuple(v) for k, v in grouped.items()})


class DocumentStore:
    def __init__(
        self,
        embedder: EmbeddingGateway,
        model: str,
        pool: WorkerPool,
        on_change: Optional[Callable[[], None]] = None,
    ):
        self.embedder = embedder
        self.model = model
        self.pool = pool
        self._on_change = on_change
        self._write_lock = threading.Lock()
        self._snapshot = CorpusSnapshot()
        self._next_seq = 0
        # Vector length shared by every published embedding; None while empty
        self._dimension: Optional[int] = None

    def snapshot(self) -> CorpusSnapshot:
        return self._snapshot

    def count(self) -> int:
        return len(self._snapshot)

    @property
    def dimension(self) -> Optional[int]:
        return self._dimension

    def _publish(self, chunks: Tuple[Chunk, ...]) -> None:
        # Caller holds the write lock
        self._snapshot = CorpusSnapshot(chunks=chunks, by_file=_index(chunks))
        if self._on_change is not None:
            self._on_change()

    # -------------------------------------------------------------------------
    # Ingestion
    # -------------------------------------------------------------------------

    def _embed(self, chunk: Chunk) -> Chunk:
        vector = self.embedder.embed(self.model, chunk.content)
        if not vector:
            raise ValueError("empty embedding")
        return chunk.with_embedding(vector)

    def add(self, chunks: Iterable[Chunk]) -> AddReport:
        """
        Embed chunks in parallel and append the successful ones as one unit.

        Chunks whose embedding fails are logged and dropped; the rest of the
        batch proceeds.
        """
        batch = list(chunks)
        if not batch:
            return AddReport(added=0, failed=0)

        futures = self.pool.map_all(self._embed, batch)

        embedded: List[Chunk] = []
        failed = 0
        for chunk, future in zip(batch, futures):
            try:
                embedded.append(future.result())
            except Exception as e:
                failed += 1
                logger.warning(f"{VECTOR_DB} Dropping chunk {chunk.id}: embedding failed: {e}")

        if not embedded:
            logger.warning(f"{VECTOR_DB} No chunks embedded out of {len(batch)}")
            return AddReport(added=0, failed=failed)

        with self._write_lock:
            dimension = self._dimension or len(embedded[0].embedding)
            accepted = []
            for chunk in embedded:
                if len(chunk.embedding) != dimension:
                    failed += 1
                    logger.warning(
                        f"{VECTOR_DB} Dropping chunk {chunk.id}: embedding has "
                        f"{len(chunk.embedding)} dimensions, corpus has {dimension}"
                    )
                    continue
                accepted.append(chunk)

            if not accepted:
                return AddReport(added=0, failed=failed)

            start = self._next_seq
            sequenced = tuple(c.with_seq(start + i) for i, c in enumerate(accepted))
            self._next_seq = start + len(sequenced)
            self._dimension = dimension
            self._publish(self._snapshot.chunks + sequenced)

        file_ids = tuple(dict.fromkeys(c.source_file_id for c in sequenced if c.source_file_id))
        logger.info(f"{VECTOR_DB} Added {len(sequenced)} chunks ({failed} failed)")
        return AddReport(added=len(sequenced), failed=failed, file_ids=file_ids)

    # -------------------------------------------------------------------------
    # Removal
    # -------------------------------------------------------------------------

    def delete_by_file_id(self, file_id: str) -> bool:
        """
        Remove every chunk belonging to file_id as one step.

        Returns:
            True if anything was removed; False for an unknown id
        """
        if not file_id:
            return False

        with self._write_lock:
            current = self._snapshot
            indexed = file_id in current.by_file
            # source_file_id also matches legacy entries that carry the id
            # only in metadata
            remaining = tuple(c for c in current.chunks if c.source_file_id != file_id)

            removed = len(current.chunks) - len(remaining)
            if removed == 0:
                return False
            self._publish(remaining)

        if not indexed:
            logger.debug(f"{VECTOR_DB} {file_id} not indexed; removed via metadata scan")
        logger.info(f"{VECTOR_DB} Removed {removed} chunks for {file_id}")
        return True

    def delete_all(self) -> None:
        with self._write_lock:
            self._dimension = None
            self._publish(())
        logger.info(f"{VECTOR_DB} Cleared corpus")

    # -------------------------------------------------------------------------
    # Listing
    # -------------------------------------------------------------------------

    def list_file_summaries(self) -> List[FileSummary]:
        summaries: Dict[str, FileSummary] = {}
        for chunk in self._snapshot.chunks:
            file_id = chunk.source_file_id
            if not file_id or file_id in summaries:
                continue
            size = chunk.file_size
            if size is None:
                raw = chunk.metadata.get("fileSize")
                size = int(raw) if raw is not None else None
            summaries[file_id] = FileSummary(
                file_id=file_id,
                file_name=chunk.source_file_name,
                file_size=size,
                first_seen=chunk.added_at,
            )
        return list(summaries.values())
