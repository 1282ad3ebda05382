from __future__ import annotations

from typing import List, Optional, Sequence, Tuple

import numpy as np

from .models import Chunk

EPSILON = np.float32(1e-8)


def cosine_similarity(a: Sequence[float], b: Sequence[float]) -> Optional[float]:
    """Cosine similarity in float32, or None when the vectors differ in length."""
    if len(a) != len(b):
        return None
    va = np.asarray(a, dtype=np.float32)
    vb = np.asarray(b, dtype=np.float32)
    dot = np.dot(va, vb)
    norms = np.linalg.norm(va) * np.linalg.norm(vb)
    return float(dot / (norms + EPSILON))


def rank(corpus: Sequence[Chunk], query: Sequence[float]) -> List[Tuple[float, Chunk]]:
    """Score every comparable chunk against `query`, best first.

    Chunks whose embedding length differs from the query are left out. Equal
    scores keep their corpus order.
    """
    scored: List[Tuple[float, Chunk]] = []
    for chunk in corpus:
        score = cosine_similarity(chunk.embedding, query)
        if score is not None:
            scored.append((score, chunk))
    scored.sort(key=lambda pair: pair[0], reverse=True)
    return scored


def find_top(corpus: Sequence[Chunk], query: Sequence[float], n: int) -> List[Chunk]:
    if n < 0:
        raise ValueError(f"n must be non-negative, got {n}")
    return [chunk for _, chunk in rank(corpus, query)[:n]]


__all__ = ["EPSILON", "cosine_similarity", "find_top", "rank"]
