"""
Local language model clients used to turn retrieved context into an answer.
"""

from abc import ABC, abstractmethod
from datetime import datetime

import ollama

from .errors import InferenceError
from ..util.logging import logger


class ILanguageModel(ABC):
    """Abstract interface for a text generator."""

    @abstractmethod
    def generate(self, prompt: str) -> str:
        """Generate a completion for the prompt."""
        pass


class NoOpLanguageModel(ILanguageModel):
    """Returns a fixed answer. Useful when no local model is available."""

    def __init__(self, answer: str = "Answer"):
        self.answer = answer

    def generate(self, prompt: str) -> str:
        return self.answer


class OllamaLanguageModel(ILanguageModel):
    """
    Generator backed by a local Ollama instance.
    """

    def __init__(self, model_name: str, max_tokens: int = 512, temperature: float = 0.7):
        self.model_name = model_name
        self.max_tokens = max_tokens
        self.temperature = temperature

    def generate(self, prompt: str) -> str:
        start_time = datetime.now()
        try:
            response = ollama.chat(
                model=self.model_name,
                messages=[{'role': 'user', 'content': prompt}],
                options={
                    'temperature': self.temperature,
                    'num_predict': self.max_tokens,
                }
            )
        except ollama.ResponseError as e:
            raise InferenceError(f"Ollama model error: {e}") from e

        processing_time = int((datetime.now() - start_time).total_seconds() * 1000)
        content = response.get('message', {}).get('content', '')

        logger.log_operation("llm.generate", "success", {
            "model": self.model_name,
            "processing_time_ms": processing_time,
            "response_length": len(content),
        })
        return content

    def is_available(self) -> bool:
        """Check if Ollama is reachable and the model is pulled."""
        try:
            models = ollama.list()
        except (ollama.ResponseError, ConnectionError) as e:
            logger.warning(f"Ollama health check failed: {e}")
            return False
        names = [model.get('model') or model.get('name') for model in models.get('models', [])]
        return self.model_name in names
