"""
FAISS-backed vector store for the document corpus.
"""

from typing import Dict, List, Sequence
import numpy as np

from .index import IVectorStore, check_dimension
from .types import DocumentRecord, VectorLike, as_vector
from ..core.errors import DataIntegrityError
from ..util.logging import logger


class FaissVectorStore(IVectorStore):
    """FAISS-backed implementation of IVectorStore."""

    def __init__(self, dimension: int = 384):
        """
        Initialize FAISS vector store.

        Args:
            dimension: Dimension of the vectors (default: 384 for MiniLM embeddings)
        """
        try:
            import faiss
            self.faiss = faiss
        except ImportError:
            raise ImportError("FAISS not installed. Please install faiss-cpu package.")

        self.dimension = dimension

        # Flat inner-product index over normalized vectors = exact cosine
        self.index = faiss.IndexFlatIP(dimension)

        self._records: List[DocumentRecord] = []
        self.vector_record_map: Dict[int, DocumentRecord] = {}  # FAISS row -> record

    def bulk_load(self, records: Sequence[DocumentRecord]) -> None:
        if self._records:
            logger.log_vector_operation("bulk_load", len(self._records), {"skipped": "already populated"})
            return

        for record in records:
            check_dimension(record, self.dimension)

        vectors_to_add = []
        for record in records:
            self._records.append(record)

            if record.embedding is None or len(record.embedding) == 0:
                continue
            vector = as_vector(record.embedding)
            norm = np.linalg.norm(vector)
            if norm == 0:  # Handle zero vectors to prevent division by zero
                continue

            self.vector_record_map[len(vectors_to_add)] = record
            vectors_to_add.append(vector / norm)

        if vectors_to_add:
            self.index.add(np.vstack(vectors_to_add).astype(np.float32))

        logger.log_vector_operation("bulk_load", len(self._records), {
            "searchable": int(self.index.ntotal),
            "backend": "faiss",
        })

    def nearest_neighbors(self, query_vector: VectorLike, k: int = 3) -> List[DocumentRecord]:
        if not self.index.ntotal or k <= 0:
            return []

        query = as_vector(query_vector)
        if query.shape[0] != self.dimension:
            raise DataIntegrityError(
                f"Query dimension {query.shape[0]} does not match store dimension {self.dimension}",
                expected=self.dimension,
                actual=query.shape[0],
            )

        norm = np.linalg.norm(query)
        if norm == 0:
            return []

        query_array = (query / norm).astype(np.float32).reshape(1, -1)
        _, indices = self.index.search(query_array, min(k, self.index.ntotal))

        # FAISS pads missing results with -1
        return [self.vector_record_map[int(i)] for i in indices[0] if int(i) in self.vector_record_map]

    def all_records(self) -> List[DocumentRecord]:
        return list(self._records)

    def count(self) -> int:
        return len(self._records)

    def clear(self) -> None:
        """Clear all records from the FAISS store."""
        # Create a new index with same parameters
        self.index = self.faiss.IndexFlatIP(self.dimension)
        self._records.clear()
        self.vector_record_map.clear()
