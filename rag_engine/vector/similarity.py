"""
Exact cosine similarity and re-ranking of vector store candidates.
"""

from typing import List, Sequence
import numpy as np

from .types import DocumentRecord, ScoredMatch, VectorLike
from ..util.logging import logger


def cosine_similarity(a: VectorLike, b: VectorLike) -> float:
    """
    Cosine similarity of two vectors in [-1, 1].

    Vectors of different length are compared over their common prefix and a
    warning is logged. Empty or zero-norm input scores 0.0.
    """
    a = np.asarray(a, dtype=np.float64).reshape(-1)
    b = np.asarray(b, dtype=np.float64).reshape(-1)

    if a.size == 0 or b.size == 0:
        return 0.0

    if a.size != b.size:
        logger.log_operation("similarity.length_mismatch", "degraded", {"left": int(a.size), "right": int(b.size)})
        length = min(a.size, b.size)
        a, b = a[:length], b[:length]

    norm_a = np.linalg.norm(a)
    norm_b = np.linalg.norm(b)
    if norm_a == 0 or norm_b == 0:
        return 0.0

    return float(np.dot(a, b) / (norm_a * norm_b))


def rank(query: VectorLike, candidates: Sequence[DocumentRecord]) -> List[ScoredMatch]:
    """Score every candidate against the query and sort by descending similarity.

    The sort is stable, so equal scores keep the candidates' input order.
    No score threshold is applied here.
    """
    scored = []
    for record in candidates:
        embedding = record.embedding if record.embedding is not None else []
        scored.append(ScoredMatch(text=record.text or "", score=cosine_similarity(query, embedding)))

    return sorted(scored, key=lambda match: match.score, reverse=True)
