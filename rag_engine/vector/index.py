"""
Vector store contract and a simple in-memory implementation.
Stores are read-mostly: bulk-loaded once, then only queried.
"""

from abc import ABC, abstractmethod
from typing import List, Optional, Sequence
import numpy as np

from .types import DocumentRecord, VectorLike, as_vector
from ..core.errors import DataIntegrityError
from ..util.logging import logger


class IVectorStore(ABC):
    """Abstract interface for vector storage operations."""

    @abstractmethod
    def bulk_load(self, records: Sequence[DocumentRecord]) -> None:
        """Load records into an empty store. No-op if already populated."""
        pass

    @abstractmethod
    def nearest_neighbors(self, query_vector: VectorLike, k: int = 3) -> List[DocumentRecord]:
        """Return up to k candidate records close to the query vector."""
        pass

    @abstractmethod
    def all_records(self) -> List[DocumentRecord]:
        """Return every stored record in load order."""
        pass

    @abstractmethod
    def count(self) -> int:
        """Number of stored records."""
        pass

    @abstractmethod
    def clear(self) -> None:
        """Clear all records from the store."""
        pass

    def is_populated(self) -> bool:
        return self.count() > 0


def check_dimension(record: DocumentRecord, dimension: Optional[int]) -> None:
    """Raise DataIntegrityError when a record's embedding has the wrong length."""
    if dimension is None or record.embedding is None:
        return
    if len(record.embedding) != dimension:
        raise DataIntegrityError(
            f"Record {record.id} has embedding dimension {len(record.embedding)}, expected {dimension}",
            expected=dimension,
            actual=len(record.embedding),
        )


class SimpleInMemoryVectorStore(IVectorStore):
    """Simple in-memory implementation of IVectorStore using exact cosine similarity."""

    def __init__(self, dimension: Optional[int] = None):
        self.dimension = dimension
        self._records: List[DocumentRecord] = []
        self._index: List[np.ndarray] = []  # normalized vectors, parallel to searchable records
        self._searchable: List[DocumentRecord] = []

    def bulk_load(self, records: Sequence[DocumentRecord]) -> None:
        if self._records:
            logger.log_vector_operation("bulk_load", len(self._records), {"skipped": "already populated"})
            return

        # Validate everything before storing anything
        for record in records:
            check_dimension(record, self.dimension)

        for record in records:
            self._records.append(record)

            # Records without a usable vector stay listable but are never returned by search
            if record.embedding is None or len(record.embedding) == 0:
                continue
            vector = as_vector(record.embedding)
            norm = np.linalg.norm(vector)
            if norm == 0:
                continue
            self._index.append(vector / norm)
            self._searchable.append(record)

        logger.log_vector_operation("bulk_load", len(self._records), {"searchable": len(self._searchable)})

    def nearest_neighbors(self, query_vector: VectorLike, k: int = 3) -> List[DocumentRecord]:
        if not self._index or k <= 0:
            return []

        query = as_vector(query_vector)
        norm = np.linalg.norm(query)
        if norm == 0:
            return []

        matrix = np.vstack(self._index)
        if matrix.shape[1] != query.shape[0]:
            raise DataIntegrityError(
                f"Query dimension {query.shape[0]} does not match store dimension {matrix.shape[1]}",
                expected=matrix.shape[1],
                actual=query.shape[0],
            )

        similarities = matrix @ (query / norm)
        # Stable sort keeps load order among equal scores
        order = np.argsort(-similarities, kind="stable")[:k]
        return [self._searchable[i] for i in order]

    def all_records(self) -> List[DocumentRecord]:
        return list(self._records)

    def count(self) -> int:
        return len(self._records)

    def clear(self) -> None:
        self._records.clear()
        self._index.clear()
        self._searchable.clear()
