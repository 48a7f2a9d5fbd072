"""
Shared fixtures for engine tests.
"""

from unittest.mock import MagicMock

import numpy as np
import pytest

from rag_engine.vector.adapters import DeterministicHashAdapter
from rag_engine.vector.embeddings import EmbeddingPipeline
from rag_engine.vector.model_config import ModelConfig


@pytest.fixture
def model_config():
    """Small test model configuration without normalization."""
    return ModelConfig(
        repo="test/mini-model",
        model_file="onnx/model.onnx",
        tokenizer="tokenizer.json",
        use_token_type_ids=False,
        output_tensor_name="last_hidden_state",
        normalize_embeddings=False,
        dimension=384,
    )


@pytest.fixture
def hash_pipeline(model_config):
    """Initialized pipeline over the deterministic hash adapter."""
    pipeline = EmbeddingPipeline(DeterministicHashAdapter(dimension=384), model_config)
    pipeline.initialize()
    return pipeline


@pytest.fixture
def fake_pipeline():
    """Factory for pipeline doubles that map known texts to fixed vectors."""
    def _make(vectors, dimension=3):
        pipeline = MagicMock(spec=EmbeddingPipeline)
        pipeline.dimension = dimension
        pipeline.is_initialized = True
        pipeline.encode.side_effect = lambda text: np.asarray(vectors[text], dtype=np.float32)
        return pipeline
    return _make
