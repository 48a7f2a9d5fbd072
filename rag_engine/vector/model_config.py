"""
Static description of the on-disk sentence embedding models the engine can load.
"""

from dataclasses import dataclass, replace
from enum import Enum
from pathlib import Path
from typing import Union


@dataclass(frozen=True)
class ModelConfig:
    """Which model/tokenizer files to load and how to post-process the output."""

    repo: str
    model_file: str
    tokenizer: str
    use_token_type_ids: bool
    output_tensor_name: str
    normalize_embeddings: bool
    dimension: int = 384

    def with_normalization(self, normalize: bool) -> "ModelConfig":
        """Return a copy with the normalization flag changed."""
        return replace(self, normalize_embeddings=normalize)

    def parent_path(self, model_dir: Union[str, Path]) -> Path:
        """Directory the model repo is downloaded into."""
        return Path(model_dir) / self.repo

    def model_path(self, model_dir: Union[str, Path]) -> Path:
        return self.parent_path(model_dir) / self.model_file

    def tokenizer_path(self, model_dir: Union[str, Path]) -> Path:
        return self.parent_path(model_dir) / self.tokenizer

    def is_downloaded(self, model_dir: Union[str, Path]) -> bool:
        """Check that both the model file and the tokenizer are present."""
        return self.model_path(model_dir).exists() and self.tokenizer_path(model_dir).exists()

    def delete_files(self, model_dir: Union[str, Path]) -> None:
        """Remove downloaded model and tokenizer files, ignoring missing ones."""
        for path in (self.model_path(model_dir), self.tokenizer_path(model_dir)):
            if path.exists():
                path.unlink()


class Model(Enum):
    PARAPHRASE_MULTILINGUAL_MINILM_L12_V2 = "paraphrase-multilingual-MiniLM-L12-v2"


def get_model_config(model: Model) -> ModelConfig:
    """Look up the static configuration for a known model."""
    if model == Model.PARAPHRASE_MULTILINGUAL_MINILM_L12_V2:
        return ModelConfig(
            repo="sentence-transformers/paraphrase-multilingual-MiniLM-L12-v2",
            model_file="onnx/model.onnx",
            tokenizer="tokenizer.json",
            use_token_type_ids=True,
            output_tensor_name="last_hidden_state",
            normalize_embeddings=False,
            dimension=384,
        )
    raise ValueError(f"Unknown model: {model}")


def model_from_name(name: str) -> Model:
    """Resolve a model by its enum value (e.g. from an environment variable)."""
    for model in Model:
        if model.value == name or model.name == name:
            return model
    raise ValueError(f"Unknown model name: {name}")
