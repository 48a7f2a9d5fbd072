"""
Tests for the engine HTTP API.
"""

import json
from unittest.mock import MagicMock

import pytest
from fastapi.testclient import TestClient

from rag_engine.api import main
from rag_engine.core import config
from rag_engine.core.engine import RagEngine
from rag_engine.vector.adapters import DeterministicHashAdapter, IModelAdapter
from rag_engine.vector.index import SimpleInMemoryVectorStore

DOCUMENTS = [
    "paris is the capital of france",
    "volcanoes form where magma rises to the surface",
    "the mitochondria is the powerhouse of the cell",
    "photosynthesis converts light into chemical energy",
]


@pytest.fixture
def seed_file(tmp_path, monkeypatch):
    path = tmp_path / "seed.json"
    # Text-only seeds are embedded at load time
    path.write_text(json.dumps([{"id": i + 1, "text": t} for i, t in enumerate(DOCUMENTS)]), encoding="utf-8")
    monkeypatch.setattr(config, "SEED_DATA_PATH", str(path))
    return path


@pytest.fixture
def client(seed_file, model_config):
    engine = RagEngine(
        adapter=DeterministicHashAdapter(dimension=384),
        model_config=model_config,
        vector_store=SimpleInMemoryVectorStore(dimension=384),
    )
    main.set_engine(engine)
    with TestClient(main.app) as test_client:
        yield test_client
    main.set_engine(None)


@pytest.fixture
def broken_client(seed_file, model_config):
    adapter = MagicMock(spec=IModelAdapter)
    adapter.is_initialized = False
    adapter.initialize.side_effect = RuntimeError("model file missing")
    engine = RagEngine(adapter=adapter, model_config=model_config,
                       vector_store=SimpleInMemoryVectorStore(dimension=384))
    main.set_engine(engine)
    with TestClient(main.app) as test_client:
        yield test_client
    main.set_engine(None)


class TestEngineAPI:
    def test_health(self, client):
        response = client.get("/health")

        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "healthy"
        assert data["initialized"] is True
        assert data["record_count"] == len(DOCUMENTS)
        assert data["cache_size"] == 0

    def test_embed(self, client):
        response = client.post("/embed", json={"text": "hello world"})

        assert response.status_code == 200
        assert response.json()["dimension"] == 384
        assert len(response.json()["embedding"]) == 384

    def test_embed_rejects_empty_text(self, client):
        assert client.post("/embed", json={"text": "   "}).status_code == 422

    def test_retrieve(self, client):
        response = client.post("/retrieve", json={"query": DOCUMENTS[1]})

        assert response.status_code == 200
        data = response.json()
        assert len(data["matches"]) == 3
        assert data["matches"][0]["text"] == DOCUMENTS[1]
        assert data["matches"][0]["score"] == pytest.approx(1.0, abs=1e-5)
        scores = [m["score"] for m in data["matches"]]
        assert scores == sorted(scores, reverse=True)
        assert data["answer"].startswith(DOCUMENTS[1])
        assert "1. 1.0000" in data["answer"]

    def test_similarity(self, client):
        response = client.post("/similarity", json={"text1": "same words", "text2": "same words"})

        assert response.status_code == 200
        assert response.json()["score"] == pytest.approx(1.0, abs=1e-5)
        assert response.json()["label"] == "Very similar meaning (near identical)"

    def test_cache_add_and_search(self, client):
        assert client.post("/cache/search", json={"query": "capital of france"}).json()["status"] == "miss"

        added = client.post("/cache", json={"query": "capital of france", "response": "Paris"})
        assert added.status_code == 200
        assert added.json()["entries"] == [{"query": "capital of france", "response": "Paris"}]

        found = client.post("/cache/search", json={"query": "capital of france"}).json()
        assert found["status"] == "hit"
        assert found["response"] == "Paris"

    def test_cache_add_rejects_wrong_dimension(self, client):
        response = client.post("/cache", json={"query": "q", "response": "r", "embedding": [1.0, 0.0]})

        assert response.status_code == 422
        assert response.json()["error_type"] == "DATA_INTEGRITY_ERROR"

    def test_cache_debug(self, client):
        client.post("/cache", json={"query": "q", "response": "r"})

        data = client.get("/cache").json()
        assert data["capacity"] == 5
        assert any(m.startswith("storedMem") for m in data["log_messages"])

    def test_chat_second_message_hits_cache(self, client):
        first = client.post("/chat", json={"message": DOCUMENTS[0]}).json()
        second = client.post("/chat", json={"message": DOCUMENTS[0]}).json()

        assert first["cache_status"] == "miss"
        assert DOCUMENTS[0] in first["context"]
        assert second["cache_status"] == "hit"
        assert second["message"] == first["message"]


class TestUninitializedEngine:
    def test_health_reports_failure(self, broken_client):
        data = broken_client.get("/health").json()

        assert data["status"] == "failed"
        assert data["initialized"] is False

    def test_operations_return_503(self, broken_client):
        response = broken_client.post("/embed", json={"text": "hello"})

        assert response.status_code == 503
        body = response.json()
        assert body["error_type"] == "NOT_INITIALIZED"
        assert "model file missing" in body["details"]["init_error"]
