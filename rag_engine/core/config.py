"""
Engine configuration from environment variables.
"""

import os
from dataclasses import replace
from pathlib import Path
from dotenv import load_dotenv

load_dotenv()

# Debug flag
DEBUG = os.getenv("DEBUG", "false").lower() == "true"

# Embedding model configuration
EMBED_MODEL = os.getenv("EMBED_MODEL", "paraphrase-multilingual-MiniLM-L12-v2")
EMBED_PROVIDER = os.getenv("EMBED_PROVIDER", "hash")  # hash|sentence_transformers
EMBED_DIM = int(os.getenv("EMBED_DIM", "384"))
MODEL_DIR = os.getenv("MODEL_DIR", "./models")

# Vector store configuration
VECTOR_PROVIDER = os.getenv("VECTOR_PROVIDER", "memory")  # memory|faiss
SEED_DATA_PATH = os.getenv("SEED_DATA_PATH", "./data/embeds_rag.json")
RETRIEVAL_TOP_K = int(os.getenv("RETRIEVAL_TOP_K", "3"))

# Semantic cache configuration
CACHE_CAPACITY = int(os.getenv("CACHE_CAPACITY", "5"))
CACHE_HIGH_THRESHOLD = float(os.getenv("CACHE_HIGH_THRESHOLD", "0.95"))
CACHE_MEDIUM_THRESHOLD = float(os.getenv("CACHE_MEDIUM_THRESHOLD", "0.60"))

# Local LLM configuration (default disabled)
LLM_ENABLED = os.getenv("LLM_ENABLED", "false").lower() == "true"
OLLAMA_MODEL = os.getenv("OLLAMA_MODEL", "gemma3:1b")
LLM_MAX_TOKENS = int(os.getenv("LLM_MAX_TOKENS", "512"))

VALID_EMBED_PROVIDERS = ["hash", "sentence_transformers"]
VALID_VECTOR_PROVIDERS = ["memory", "faiss"]


def debug_enabled():
    """Check if debug mode is enabled."""
    return os.getenv("DEBUG", "false").lower() == "true"


def get_model_config():
    """Get the ModelConfig for EMBED_MODEL, applying NORMALIZE_EMBEDDINGS when set."""
    from ..vector.model_config import get_model_config as lookup, model_from_name

    config = lookup(model_from_name(EMBED_MODEL))
    if config.dimension != EMBED_DIM:
        config = replace(config, dimension=EMBED_DIM)

    normalize = os.getenv("NORMALIZE_EMBEDDINGS")
    if normalize is not None:
        config = config.with_normalization(normalize.lower() == "true")
    return config


def get_model_path(model_config=None):
    """Local model directory when downloaded, otherwise the hub repo name."""
    model_config = model_config or get_model_config()
    local = model_config.parent_path(MODEL_DIR)
    if Path(local).exists():
        return str(local)
    return model_config.repo


def get_model_adapter():
    """Get configured model adapter implementation."""
    if EMBED_PROVIDER == "sentence_transformers":
        from ..vector.adapters import SentenceTransformerAdapter
        return SentenceTransformerAdapter()

    # Default to the deterministic adapter for unknown providers
    from ..vector.adapters import DeterministicHashAdapter
    return DeterministicHashAdapter(dimension=EMBED_DIM)


def get_vector_store():
    """Get configured vector store implementation."""
    if VECTOR_PROVIDER == "faiss":
        try:
            from ..vector.faiss_store import FaissVectorStore
            return FaissVectorStore(dimension=EMBED_DIM)
        except ImportError:
            # Gracefully degrade to memory store if FAISS not available
            from ..vector.index import SimpleInMemoryVectorStore
            return SimpleInMemoryVectorStore(dimension=EMBED_DIM)

    from ..vector.index import SimpleInMemoryVectorStore
    return SimpleInMemoryVectorStore(dimension=EMBED_DIM)


def get_language_model():
    """Get the local LLM client. Returns None if LLM features are disabled."""
    if not LLM_ENABLED:
        return None

    from .llm import OllamaLanguageModel
    return OllamaLanguageModel(model_name=OLLAMA_MODEL, max_tokens=LLM_MAX_TOKENS)


def validate_config():
    """Validate engine configuration and return any issues."""
    issues = []

    if EMBED_PROVIDER not in VALID_EMBED_PROVIDERS:
        issues.append(f"Invalid EMBED_PROVIDER: {EMBED_PROVIDER}")

    if VECTOR_PROVIDER not in VALID_VECTOR_PROVIDERS:
        issues.append(f"Invalid VECTOR_PROVIDER: {VECTOR_PROVIDER}")

    if EMBED_DIM < 1:
        issues.append("EMBED_DIM must be >= 1")

    if RETRIEVAL_TOP_K < 1:
        issues.append("RETRIEVAL_TOP_K must be >= 1")

    if CACHE_CAPACITY < 1:
        issues.append("CACHE_CAPACITY must be >= 1")

    for name, value in (("CACHE_HIGH_THRESHOLD", CACHE_HIGH_THRESHOLD),
                        ("CACHE_MEDIUM_THRESHOLD", CACHE_MEDIUM_THRESHOLD)):
        if not -1.0 <= value <= 1.0:
            issues.append(f"{name} must be within [-1, 1]")

    if CACHE_MEDIUM_THRESHOLD >= CACHE_HIGH_THRESHOLD:
        issues.append("CACHE_MEDIUM_THRESHOLD must be lower than CACHE_HIGH_THRESHOLD")

    try:
        get_model_config()
    except ValueError as e:
        issues.append(str(e))

    return issues
