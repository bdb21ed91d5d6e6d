# memrag/retrieval/selection.py
"""
Diversity-aware top-K selection.

Phase A walks the ranked candidates and admits one that either scores above
the diversity threshold, comes from a file not yet represented, or has no
file at all. Phase B fills any remaining slots from the same ranking.

Results are returned in admission order. Phase B picks are appended after
Phase A picks and are not re-sorted, so a lower-scoring chunk from a new file
can precede a higher-scoring one from an already represented file.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import List, Sequence

from memrag.core.chunk import Chunk

DEFAULT_DIVERSITY_THRESHOLD = 0.7


@dataclass(frozen=True)
class ScoredChunk:
    """A chunk paired with its similarity to the query."""

    chunk: Chunk
    score: float

    @property
    def file_id(self):
        return self.chunk.source_file_id

    @property
    def sort_key(self):
        # Descending score, ties by insertion order
        return (-self.score, self.chunk.seq)


def rank(candidates: Sequence[ScoredChunk]) -> List[ScoredChunk]:
    return sorted(candidates, key=lambda c: c.sort_key)


def select_diverse(
    ranked: Sequence[ScoredChunk],
    top_k: int,
    diversity_threshold: float = DEFAULT_DIVERSITY_THRESHOLD,
) -> List[ScoredChunk]:
    """
    Two-phase selection over an already ranked candidate list.

    Args:
        ranked: Candidates sorted by descending score
        top_k: Maximum number of results
        diversity_threshold: Score above which a chunk is admitted in
            Phase A even if its file is already represented

    Returns:
        Up to top_k candidates in admission order
    """
    if top_k <= 0:
        return []

    selected: List[ScoredChunk] = []
    admitted: set[int] = set()
    seen_files: set[str] = set()

    # Phase A
    for i, candidate in enumerate(ranked):
        if len(selected) >= top_k:
            break
        file_id = candidate.file_id
        if candidate.score > diversity_threshold or file_id is None or file_id not in seen_files:
            selected.append(candidate)
            admitted.add(i)
            if file_id is not None:
                seen_files.add(file_id)

    # Phase B
    for i, candidate in enumerate(ranked):
        if len(selected) >= top_k:
            break
        if i not in admitted:
            selected.append(candidate)
            admitted.add(i)

    return selected
