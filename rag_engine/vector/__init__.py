"""
Vector layer: embedding pipeline, similarity ranking and document stores.
"""

# Package initialization for vector module
from .types import DocumentRecord, ScoredMatch, RetrievalResult, EmbeddingVector
from .model_config import ModelConfig, Model, get_model_config
from .adapters import IModelAdapter, TokenizedInput, DeterministicHashAdapter, SentenceTransformerAdapter
from .embeddings import EmbeddingPipeline, mean_pooling, l2_normalize
from .similarity import cosine_similarity, rank
from .index import IVectorStore, SimpleInMemoryVectorStore
from .faiss_store import FaissVectorStore
from .seed import load_seed_file, parse_seed_records

__all__ = [
    'DocumentRecord',
    'ScoredMatch',
    'RetrievalResult',
    'EmbeddingVector',
    'ModelConfig',
    'Model',
    'get_model_config',
    'IModelAdapter',
    'TokenizedInput',
    'DeterministicHashAdapter',
    'SentenceTransformerAdapter',
    'EmbeddingPipeline',
    'mean_pooling',
    'l2_normalize',
    'cosine_similarity',
    'rank',
    'IVectorStore',
    'SimpleInMemoryVectorStore',
    'FaissVectorStore',
    'load_seed_file',
    'parse_seed_records',
]
