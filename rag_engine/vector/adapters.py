"""
Tokenizer/model adapters consumed by the embedding pipeline.
The pipeline only relies on the IModelAdapter contract; pooling happens in the engine.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
import hashlib
from typing import Optional
import numpy as np
import torch
from sentence_transformers import SentenceTransformer


@dataclass
class TokenizedInput:
    """Tokenizer output for a single sentence."""

    input_ids: np.ndarray
    """Token ids, shape (seq,)"""

    attention_mask: np.ndarray
    """1 for real tokens, 0 for padding, shape (seq,)"""

    token_type_ids: Optional[np.ndarray] = None
    """Segment ids, shape (seq,), when the tokenizer produces them"""


class IModelAdapter(ABC):
    """Abstract interface for a tokenizer plus inference session."""

    @abstractmethod
    def initialize(self, model_path: str, tokenizer: Optional[bytes] = None,
                   use_token_type_ids: bool = False,
                   output_tensor_name: str = "last_hidden_state") -> None:
        """Load the tokenizer and the inference session."""
        pass

    @property
    @abstractmethod
    def is_initialized(self) -> bool:
        pass

    @abstractmethod
    def tokenize(self, text: str) -> TokenizedInput:
        """Tokenize a single sentence."""
        pass

    @abstractmethod
    def infer(self, input_ids: np.ndarray, attention_mask: np.ndarray,
              token_type_ids: Optional[np.ndarray] = None) -> np.ndarray:
        """Run the model and return raw token embeddings of shape (1, seq, dim)."""
        pass

    def close(self) -> None:
        """Release the inference session."""
        pass


class DeterministicHashAdapter(IModelAdapter):
    """Deterministic hash-based adapter for testing purposes.

    Tokens are lower-cased whitespace splits wrapped in [CLS]/[SEP] markers.
    Each token id maps to a reproducible pseudo-random vector, so repeated
    words pull sentences together without requiring a real model.
    """

    CLS_ID = 101
    SEP_ID = 102
    PAD_ID = 0
    VOCAB_SIZE = 30000

    def __init__(self, dimension: int = 384, pad_to: Optional[int] = None):
        self.dimension = dimension
        self.pad_to = pad_to
        self.use_token_type_ids = False
        self.output_tensor_name = "last_hidden_state"
        self._initialized = False

    def initialize(self, model_path: str = None, tokenizer: Optional[bytes] = None,
                   use_token_type_ids: bool = False,
                   output_tensor_name: str = "last_hidden_state") -> None:
        self.use_token_type_ids = use_token_type_ids
        self.output_tensor_name = output_tensor_name
        self._initialized = True

    @property
    def is_initialized(self) -> bool:
        return self._initialized

    def _token_id(self, token: str) -> int:
        digest = hashlib.md5(token.encode()).hexdigest()
        # Keep clear of the reserved special ids
        return 1000 + int(digest[:8], 16) % (self.VOCAB_SIZE - 1000)

    def tokenize(self, text: str) -> TokenizedInput:
        ids = [self.CLS_ID] + [self._token_id(t) for t in text.lower().split()] + [self.SEP_ID]
        mask = [1] * len(ids)

        if self.pad_to is not None and len(ids) < self.pad_to:
            padding = self.pad_to - len(ids)
            ids += [self.PAD_ID] * padding
            mask += [0] * padding

        return TokenizedInput(
            input_ids=np.array(ids, dtype=np.int64),
            attention_mask=np.array(mask, dtype=np.int64),
            token_type_ids=np.zeros(len(ids), dtype=np.int64),
        )

    def _token_vector(self, token_id: int) -> np.ndarray:
        rng = np.random.default_rng(int(token_id))
        return rng.standard_normal(self.dimension).astype(np.float32)

    def infer(self, input_ids: np.ndarray, attention_mask: np.ndarray,
              token_type_ids: Optional[np.ndarray] = None) -> np.ndarray:
        # Padding ids still produce (non-zero) vectors, like a real encoder does
        token_embeddings = np.stack([self._token_vector(i) for i in np.asarray(input_ids).reshape(-1)])
        return token_embeddings.reshape(1, len(token_embeddings), self.dimension)


class SentenceTransformerAdapter(IModelAdapter):
    """Adapter over a sentence-transformers model.

    Only the first (transformer) module is run so the engine receives raw
    per-token embeddings and applies its own mean pooling.
    """

    # sentence-transformers names the ONNX "last_hidden_state" output differently
    _OUTPUT_ALIASES = {"last_hidden_state": "token_embeddings"}

    def __init__(self, device: str = "cpu"):
        self.device = device
        self.use_token_type_ids = False
        self.output_tensor_name = "token_embeddings"
        self._model = None

    def initialize(self, model_path: str, tokenizer: Optional[bytes] = None,
                   use_token_type_ids: bool = False,
                   output_tensor_name: str = "last_hidden_state") -> None:
        # The tokenizer ships inside the model directory for this runtime
        self._model = SentenceTransformer(str(model_path), device=self.device)
        self.use_token_type_ids = use_token_type_ids
        self.output_tensor_name = self._OUTPUT_ALIASES.get(output_tensor_name, output_tensor_name)

    @property
    def is_initialized(self) -> bool:
        return self._model is not None

    @property
    def model(self) -> SentenceTransformer:
        return self._model

    def tokenize(self, text: str) -> TokenizedInput:
        features = self._model.tokenize([text])
        token_type_ids = features.get("token_type_ids")
        return TokenizedInput(
            input_ids=features["input_ids"][0].cpu().numpy().astype(np.int64),
            attention_mask=features["attention_mask"][0].cpu().numpy().astype(np.int64),
            token_type_ids=token_type_ids[0].cpu().numpy().astype(np.int64) if token_type_ids is not None else None,
        )

    def infer(self, input_ids: np.ndarray, attention_mask: np.ndarray,
              token_type_ids: Optional[np.ndarray] = None) -> np.ndarray:
        device = self._model.device
        features = {
            "input_ids": torch.from_numpy(np.asarray(input_ids, dtype=np.int64).reshape(1, -1)).to(device),
            "attention_mask": torch.from_numpy(np.asarray(attention_mask, dtype=np.int64).reshape(1, -1)).to(device),
        }
        if token_type_ids is not None:
            features["token_type_ids"] = torch.from_numpy(
                np.asarray(token_type_ids, dtype=np.int64).reshape(1, -1)).to(device)

        with torch.no_grad():
            outputs = self._model[0](features)

        return outputs[self.output_tensor_name].cpu().numpy().astype(np.float32)

    def close(self) -> None:
        self._model = None
