"""
Retrieval service: embed a query, fetch candidates from the vector store and re-rank them.
"""

from pathlib import Path
from typing import List, Optional, Sequence, Tuple, Union

from .errors import NotInitializedError
from ..vector.embeddings import EmbeddingPipeline
from ..vector.index import IVectorStore
from ..vector.seed import load_seed_file
from ..vector.similarity import cosine_similarity, rank
from ..vector.types import DocumentRecord, EmbeddingVector, RetrievalResult
from ..util.logging import logger

DEFAULT_TOP_K = 3


def format_answer(result: RetrievalResult) -> str:
    """
    Render a retrieval result for display.

    Matches are listed as "<rank>. <score>\\n<text>" separated by blank lines,
    under the original query. Scores use 4 decimal places.
    """
    if not result.matches:
        return f"I don't have enough information to answer your question about \"{result.query}\""

    formatted = "\n\n".join(
        f"{position}. {match.score:.4f}\n{match.text}"
        for position, match in enumerate(result.matches, start=1)
    )
    return f"{result.query}\n\n{formatted}"


class RetrievalService:
    """
    Orchestrates encode -> nearest neighbors -> exact re-rank.

    The vector store's own ordering is treated as a candidate set only.
    Errors from the pipeline or the store propagate unchanged.
    """

    def __init__(self, pipeline: EmbeddingPipeline, vector_store: IVectorStore, top_k: int = DEFAULT_TOP_K):
        self.pipeline = pipeline
        self.vector_store = vector_store
        self.top_k = top_k
        self._initialized = False

    @property
    def is_initialized(self) -> bool:
        return self._initialized

    def initialize(self, seed_path: Optional[Union[str, Path]] = None,
                   records: Optional[Sequence[DocumentRecord]] = None) -> None:
        """
        Load the model and populate the store. Blocking; call from a worker thread.

        The store is only seeded when empty. The service is marked ready only
        after both steps succeed, so a failed start leaves it unusable.
        """
        if self._initialized:
            return

        self.pipeline.initialize()

        if not self.vector_store.is_populated():
            if records is None and seed_path is not None:
                records = load_seed_file(seed_path, dimension=self.pipeline.dimension, pipeline=self.pipeline)
            if records is not None:
                self.vector_store.bulk_load(records)

        self._initialized = True
        logger.log_operation("retrieval.initialize", "success", {"records": self.vector_store.count()})

    def require_initialized(self) -> None:
        if not self._initialized:
            raise NotInitializedError("Retrieval service is not initialized")

    def encode(self, text: str) -> EmbeddingVector:
        """Embed a text with the service's pipeline."""
        self.require_initialized()
        return self.pipeline.encode(text)

    def retrieve_with_embedding(self, query: str, embedding: EmbeddingVector) -> RetrievalResult:
        """Retrieve using an already computed query embedding."""
        self.require_initialized()

        candidates = self.vector_store.nearest_neighbors(embedding, k=self.top_k)
        matches = rank(embedding, candidates)

        logger.log_retrieval(query, len(matches), matches[0].score if matches else None)
        return RetrievalResult(query=query, matches=matches)

    def retrieve(self, query: str) -> RetrievalResult:
        """Process a user query and retrieve relevant context from the vector store."""
        embedding = self.encode(query)
        return self.retrieve_with_embedding(query, embedding)

    def format_answer(self, result: RetrievalResult) -> str:
        return format_answer(result)

    def process_query(self, query: str) -> Tuple[str, EmbeddingVector]:
        """Embed, retrieve and format in one step. Returns (answer, query embedding)."""
        embedding = self.encode(query)
        result = self.retrieve_with_embedding(query, embedding)
        return format_answer(result), embedding

    def similarity(self, text1: str, text2: str) -> float:
        """Embed both texts and return their cosine similarity."""
        return cosine_similarity(self.encode(text1), self.encode(text2))

    def all_texts(self) -> List[Optional[str]]:
        """Text of every stored document."""
        return [record.text for record in self.vector_store.all_records()]


def similarity_label(score: float) -> str:
    """Human-readable description of a similarity score."""
    if score > 0.9:
        return "Very similar meaning (near identical)"
    if score > 0.75:
        return "Similar meaning"
    if score > 0.5:
        return "Somewhat related"
    if score > 0.25:
        return "Slightly related"
    return "Different meaning"
