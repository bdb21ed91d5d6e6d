# memrag/retrieval/similarity.py
from __future__ import annotations

from typing import Sequence

import numpy as np


def cosine_similarity(a: Sequence[float], b: Sequence[float]) -> float:
    """
    dot(a, b) / (|a| * |b|).

    Returns 0.0 when either vector is empty or has zero norm. Vectors of
    different length are compared over the shorter prefix.
    """
    n = min(len(a), len(b))
    if n == 0:
        return 0.0

    va = np.asarray(a[:n], dtype=np.float64)
    vb = np.asarray(b[:n], dtype=np.float64)

    norm = float(np.linalg.norm(va)) * float(np.linalg.norm(vb))
    if norm == 0.0:
        return 0.0

    return float(np.dot(va, vb) / norm)
