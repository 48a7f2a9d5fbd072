"""
Explicitly constructed engine that owns the pipeline, store, retrieval service and cache.
This is the caller-facing API; UI and HTTP layers hold a reference to one instance.
"""

from pathlib import Path
from typing import Optional, Sequence, Union

from . import config
from .chat_service import MessageResult, RagChatService
from .llm import ILanguageModel
from .retrieval_service import RetrievalService, format_answer
from .semantic_cache import CacheResult, SemanticCache
from ..vector.adapters import IModelAdapter
from ..vector.embeddings import EmbeddingPipeline
from ..vector.index import IVectorStore
from ..vector.model_config import ModelConfig
from ..vector.types import DocumentRecord, EmbeddingVector, RetrievalResult, VectorLike


class RagEngine:
    """Retrieval and caching engine bound to one model adapter and one vector store."""

    def __init__(self, adapter: IModelAdapter, model_config: ModelConfig, vector_store: IVectorStore,
                 model_path: Optional[Union[str, Path]] = None, top_k: int = 3,
                 cache_capacity: int = 5, high_threshold: float = 0.95, medium_threshold: float = 0.60,
                 language_model: Optional[ILanguageModel] = None):
        self.pipeline = EmbeddingPipeline(adapter, model_config, model_path=model_path)
        self.vector_store = vector_store
        self.retrieval = RetrievalService(self.pipeline, vector_store, top_k=top_k)
        self.cache = SemanticCache(self.pipeline, capacity=cache_capacity,
                                   high_threshold=high_threshold, medium_threshold=medium_threshold)
        self.chat = RagChatService(self.retrieval, self.cache, language_model)

    @property
    def is_initialized(self) -> bool:
        return self.retrieval.is_initialized

    def initialize(self, seed_path: Optional[Union[str, Path]] = None,
                   records: Optional[Sequence[DocumentRecord]] = None) -> None:
        self.retrieval.initialize(seed_path=seed_path, records=records)

    def encode(self, text: str) -> EmbeddingVector:
        return self.retrieval.encode(text)

    def retrieve(self, query: str) -> RetrievalResult:
        return self.retrieval.retrieve(query)

    def format_answer(self, result: RetrievalResult) -> str:
        return format_answer(result)

    def similarity(self, text1: str, text2: str) -> float:
        return self.retrieval.similarity(text1, text2)

    def cache_search(self, query: str) -> CacheResult:
        self.retrieval.require_initialized()
        return self.cache.search(query)

    def cache_add(self, query: str, embedding: VectorLike, response: str) -> None:
        self.retrieval.require_initialized()
        self.cache.add_to_cache(query, embedding, response)

    def send_message(self, message: str, context_enabled: bool = True) -> MessageResult:
        return self.chat.send_message(message, context_enabled=context_enabled)

    def close(self) -> None:
        self.pipeline.close()


def build_engine() -> RagEngine:
    """Create an engine from environment configuration (not yet initialized)."""
    model_config = config.get_model_config()
    return RagEngine(
        adapter=config.get_model_adapter(),
        model_config=model_config,
        vector_store=config.get_vector_store(),
        model_path=config.get_model_path(model_config),
        top_k=config.RETRIEVAL_TOP_K,
        cache_capacity=config.CACHE_CAPACITY,
        high_threshold=config.CACHE_HIGH_THRESHOLD,
        medium_threshold=config.CACHE_MEDIUM_THRESHOLD,
        language_model=config.get_language_model(),
    )
