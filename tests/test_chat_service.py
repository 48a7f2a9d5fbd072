"""
Tests for chat orchestration over the cache, retrieval and language model.
"""

from unittest.mock import MagicMock

import numpy as np
import pytest

from rag_engine.core.chat_service import RagChatService, build_prompt
from rag_engine.core.llm import ILanguageModel, NoOpLanguageModel
from rag_engine.core.retrieval_service import RetrievalService
from rag_engine.core.semantic_cache import SemanticCache
from rag_engine.vector.index import SimpleInMemoryVectorStore
from rag_engine.vector.types import DocumentRecord


@pytest.fixture
def pipeline(fake_pipeline):
    return fake_pipeline({
        "capital of france": [1.0, 0.0, 0.0],
        "capital city of france": [0.8, 0.6, 0.0],   # 0.8 to the first query
        "volcanoes": [0.0, 0.0, 1.0],
    })


@pytest.fixture
def retrieval(pipeline):
    service = RetrievalService(pipeline, SimpleInMemoryVectorStore(dimension=3))
    service.initialize(records=[
        DocumentRecord(id=1, text="Paris is the capital of France.", embedding=np.array([1.0, 0.0, 0.0])),
        DocumentRecord(id=2, text="Volcanoes form where magma rises.", embedding=np.array([0.0, 0.0, 1.0])),
    ])
    return service


def _llm(answer="generated"):
    llm = MagicMock(spec=ILanguageModel)
    llm.generate.return_value = answer
    return llm


def test_miss_generates_with_knowledge_context_and_caches(retrieval, pipeline):
    cache = SemanticCache(pipeline)
    llm = _llm("Paris")
    chat = RagChatService(retrieval, cache, llm)

    result = chat.send_message("capital of france")

    assert result.message == "Paris"
    assert result.cache_status == "miss"
    assert result.is_completed
    assert "Paris is the capital of France." in result.context

    prompt = llm.generate.call_args[0][0]
    assert prompt.startswith("Context from knowledge base: ")
    assert prompt.endswith("\n=========\ncapital of france")

    entries = cache.get_debug_cache()
    assert [(e.query, e.response) for e in entries] == [("capital of france", "Paris")]


def test_repeated_message_is_served_from_cache(retrieval, pipeline):
    llm = _llm("Paris")
    chat = RagChatService(retrieval, SemanticCache(pipeline), llm)

    chat.send_message("capital of france")
    second = chat.send_message("capital of france")

    assert second.cache_status == "hit"
    assert second.message == "Paris"
    assert llm.generate.call_count == 1


def test_related_message_gets_cache_context(retrieval, pipeline):
    llm = _llm("Paris")
    chat = RagChatService(retrieval, SemanticCache(pipeline), llm)

    chat.send_message("capital of france")
    result = chat.send_message("capital city of france")

    assert result.cache_status == "assist"
    prompt = llm.generate.call_args[0][0]
    assert prompt.startswith('Previously, a similar question was asked: "capital of france"')
    assert "Context from knowledge base: " in prompt


def test_without_language_model_the_context_is_the_answer(retrieval, pipeline):
    chat = RagChatService(retrieval, SemanticCache(pipeline))

    result = chat.send_message("volcanoes")

    assert result.message == result.context
    assert "Volcanoes form where magma rises." in result.message


def test_context_disabled_skips_retrieval(retrieval, pipeline):
    llm = _llm("plain answer")
    chat = RagChatService(retrieval, SemanticCache(pipeline), llm)

    result = chat.send_message("volcanoes", context_enabled=False)

    assert result.context is None
    llm.generate.assert_called_once_with("volcanoes")


def test_noop_language_model():
    assert NoOpLanguageModel("Answer to rickroll").generate("anything") == "Answer to rickroll"


def test_build_prompt_without_context():
    assert build_prompt("hello") == "hello"
