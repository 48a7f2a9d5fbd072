"""
Sentence embedding pipeline: tokenize, run the model, mean-pool, optionally normalize.
"""

import threading
from pathlib import Path
from typing import List, Optional, Union
import numpy as np

from .adapters import IModelAdapter
from .model_config import ModelConfig
from .types import EmbeddingVector
from ..core.errors import InferenceError, InitializationError, NotInitializedError, TokenizationError
from ..util.logging import logger

# Floor for the attention mask sum so an all-padding input cannot divide by zero
MASK_SUM_FLOOR = 1e-9


def mean_pooling(token_embeddings: np.ndarray, attention_mask: np.ndarray) -> EmbeddingVector:
    """
    Average token embeddings over the real (unmasked) tokens.

    Args:
        token_embeddings: Array of shape (seq, dim)
        attention_mask: Array of shape (seq,), 1 for real tokens and 0 for padding

    Returns:
        float32 vector of shape (dim,)
    """
    token_embeddings = np.asarray(token_embeddings, dtype=np.float32)
    mask = np.asarray(attention_mask, dtype=np.float32).reshape(-1, 1)

    summed = (token_embeddings * mask).sum(axis=0)
    mask_sum = max(float(mask.sum()), MASK_SUM_FLOOR)
    return (summed / mask_sum).astype(np.float32)


def l2_normalize(vector: EmbeddingVector) -> EmbeddingVector:
    """Scale a vector to unit length. Zero vectors are returned unchanged."""
    vector = np.asarray(vector, dtype=np.float32)
    norm = np.linalg.norm(vector)
    if norm == 0:
        return vector
    return (vector / norm).astype(np.float32)


class EmbeddingPipeline:
    """
    Turns text into one fixed-size sentence vector using a model adapter.

    The adapter is not assumed thread-safe, so every tokenize/infer pair runs
    under a lock: at most one inference is in flight per pipeline.
    """

    def __init__(self, adapter: IModelAdapter, model_config: ModelConfig,
                 model_path: Optional[Union[str, Path]] = None, tokenizer: Optional[bytes] = None):
        self.adapter = adapter
        self.model_config = model_config
        self.model_path = model_path
        self.tokenizer = tokenizer
        self._lock = threading.Lock()

    @property
    def dimension(self) -> int:
        return self.model_config.dimension

    @property
    def is_initialized(self) -> bool:
        return self.adapter.is_initialized

    def initialize(self) -> None:
        """Load the tokenizer and model. Blocking; call from a worker thread."""
        if self.adapter.is_initialized:
            return

        with self._lock:
            try:
                self.adapter.initialize(
                    model_path=str(self.model_path) if self.model_path is not None else self.model_config.repo,
                    tokenizer=self.tokenizer,
                    use_token_type_ids=self.model_config.use_token_type_ids,
                    output_tensor_name=self.model_config.output_tensor_name,
                )
            except Exception as e:
                logger.log_embedding_operation("initialize", "failed", {"error": str(e)})
                raise InitializationError(f"Failed to initialize sentence embedding: {e}") from e

        logger.log_embedding_operation("initialize", "success", {
            "model": self.model_config.repo,
            "use_token_type_ids": self.model_config.use_token_type_ids,
            "normalize": self.model_config.normalize_embeddings,
        })

    def encode(self, text: str) -> EmbeddingVector:
        """Embed a single text."""
        if not self.adapter.is_initialized:
            raise NotInitializedError("Embedding model is not initialized")

        with self._lock:
            try:
                tokens = self.adapter.tokenize(text)
            except Exception as e:
                raise TokenizationError(f"Failed to tokenize input: {e}") from e

            # Token type ids are only fed to models that declare them
            token_type_ids = tokens.token_type_ids if self.model_config.use_token_type_ids else None

            try:
                output = self.adapter.infer(tokens.input_ids, tokens.attention_mask, token_type_ids)
            except Exception as e:
                raise InferenceError(f"Model inference failed: {e}") from e

        output = np.asarray(output, dtype=np.float32)
        if output.ndim != 3 or output.shape[0] != 1:
            raise InferenceError(f"Expected model output of shape (1, seq, dim), got {output.shape}")
        if output.shape[1] != len(tokens.attention_mask):
            raise InferenceError(
                f"Model returned {output.shape[1]} token vectors for {len(tokens.attention_mask)} tokens"
            )

        embedding = mean_pooling(output[0], tokens.attention_mask)
        if self.model_config.normalize_embeddings:
            embedding = l2_normalize(embedding)

        logger.debug(f"Encoded text into {embedding.shape[0]}-dim vector ({len(tokens.input_ids)} tokens)")
        return embedding

    def encode_batch(self, texts: List[str]) -> np.ndarray:
        """
        Embed multiple texts into vectors.

        Returns:
            Numpy array of shape (len(texts), dimension)
        """
        if not texts:
            return np.zeros((0, self.dimension), dtype=np.float32)
        return np.vstack([self.encode(text) for text in texts])

    def close(self) -> None:
        with self._lock:
            self.adapter.close()
