"""
Record and result types shared by the vector store, ranker and retrieval service.
"""

from dataclasses import dataclass, field
from typing import List, Optional, Sequence, Union
import numpy as np

# Fixed-length float32 sentence vector produced by the embedding pipeline
EmbeddingVector = np.ndarray

VectorLike = Union[np.ndarray, Sequence[float]]


def as_vector(values: VectorLike) -> EmbeddingVector:
    """Coerce a list or array into a flat float32 vector."""
    return np.asarray(values, dtype=np.float32).reshape(-1)


@dataclass(frozen=True, eq=False)
class DocumentRecord:
    """A stored document with its embedding. Immutable once loaded."""

    id: int
    """Identifier assigned by the seed data"""

    text: Optional[str]
    """Document text returned to callers"""

    embedding: Optional[EmbeddingVector]
    """Precomputed sentence embedding"""

    index: Optional[int] = None
    """Position of the chunk in its source document, when known"""

    def __eq__(self, other):
        if not isinstance(other, DocumentRecord):
            return NotImplemented
        if self.id != other.id or self.text != other.text or self.index != other.index:
            return False
        if self.embedding is None or other.embedding is None:
            return self.embedding is None and other.embedding is None
        return np.array_equal(self.embedding, other.embedding)

    def __hash__(self):
        return hash((self.id, self.text, self.index))


@dataclass
class ScoredMatch:
    """A document text paired with its cosine similarity to a query."""

    text: str
    """Text of the matched document"""

    score: float
    """Cosine similarity in [-1, 1]"""


@dataclass
class RetrievalResult:
    """Result of a single retrieval request."""

    query: str
    """Original query text"""

    matches: List[ScoredMatch] = field(default_factory=list)
    """Matches ordered by descending score"""
