"""
Tests for the Ollama-backed language model client.
"""

from unittest.mock import patch

import ollama
import pytest

from rag_engine.core.errors import InferenceError
from rag_engine.core.llm import OllamaLanguageModel


def test_generate_returns_message_content():
    llm = OllamaLanguageModel(model_name="gemma3:1b", max_tokens=128)

    with patch("rag_engine.core.llm.ollama.chat", return_value={"message": {"content": "Paris"}}) as chat:
        assert llm.generate("capital of france?") == "Paris"

    kwargs = chat.call_args.kwargs
    assert kwargs["model"] == "gemma3:1b"
    assert kwargs["messages"] == [{"role": "user", "content": "capital of france?"}]
    assert kwargs["options"]["num_predict"] == 128


def test_generate_wraps_ollama_errors():
    llm = OllamaLanguageModel(model_name="missing-model")

    with patch("rag_engine.core.llm.ollama.chat", side_effect=ollama.ResponseError("model not found")):
        with pytest.raises(InferenceError, match="model not found"):
            llm.generate("hello")


def test_is_available():
    llm = OllamaLanguageModel(model_name="gemma3:1b")

    with patch("rag_engine.core.llm.ollama.list", return_value={"models": [{"model": "gemma3:1b"}]}):
        assert llm.is_available()

    with patch("rag_engine.core.llm.ollama.list", side_effect=ConnectionError("refused")):
        assert not llm.is_available()
