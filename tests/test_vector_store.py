"""
Tests for the vector store contract using the in-memory implementation.
"""

import numpy as np
import pytest

from rag_engine.core.errors import DataIntegrityError
from rag_engine.vector.index import IVectorStore, SimpleInMemoryVectorStore
from rag_engine.vector.types import DocumentRecord


def _records():
    return [
        DocumentRecord(id=1, text="doc one", embedding=np.array([1.0, 0.0, 0.0], dtype=np.float32)),
        DocumentRecord(id=2, text="doc two", embedding=np.array([0.0, 1.0, 0.0], dtype=np.float32)),
        DocumentRecord(id=3, text="doc three", embedding=np.array([0.0, 0.0, 1.0], dtype=np.float32)),
    ]


def test_vector_store_interface():
    """Test that SimpleInMemoryVectorStore implements IVectorStore interface."""
    store = SimpleInMemoryVectorStore()
    assert isinstance(store, IVectorStore)
    assert not store.is_populated()


def test_bulk_load_and_all_records():
    store = SimpleInMemoryVectorStore(dimension=3)
    store.bulk_load(_records())

    assert store.count() == 3
    assert [r.id for r in store.all_records()] == [1, 2, 3]


def test_bulk_load_is_noop_when_populated():
    store = SimpleInMemoryVectorStore(dimension=3)
    store.bulk_load(_records())
    store.bulk_load([DocumentRecord(id=9, text="late", embedding=np.array([1.0, 1.0, 1.0]))])

    assert store.count() == 3
    assert 9 not in [r.id for r in store.all_records()]


def test_nearest_neighbors_orders_by_similarity():
    store = SimpleInMemoryVectorStore(dimension=3)
    store.bulk_load(_records())

    results = store.nearest_neighbors(np.array([0.9, 0.1, 0.0]), k=3)

    assert [r.id for r in results] == [1, 2, 3]


def test_nearest_neighbors_respects_k():
    store = SimpleInMemoryVectorStore(dimension=3)
    store.bulk_load(_records())

    assert len(store.nearest_neighbors(np.array([1.0, 1.0, 1.0]), k=2)) == 2
    assert store.nearest_neighbors(np.array([1.0, 1.0, 1.0]), k=0) == []


def test_empty_store_and_zero_query_return_nothing():
    store = SimpleInMemoryVectorStore()
    assert store.nearest_neighbors(np.array([1.0, 0.0, 0.0])) == []

    store.bulk_load(_records())
    assert store.nearest_neighbors(np.zeros(3)) == []


def test_bulk_load_rejects_wrong_dimension():
    store = SimpleInMemoryVectorStore(dimension=384)

    with pytest.raises(DataIntegrityError) as exc_info:
        store.bulk_load(_records())

    assert exc_info.value.expected == 384
    assert exc_info.value.actual == 3
    # Nothing is stored on a failed load
    assert store.count() == 0


def test_query_dimension_mismatch():
    store = SimpleInMemoryVectorStore()
    store.bulk_load(_records())

    with pytest.raises(DataIntegrityError):
        store.nearest_neighbors(np.array([1.0, 0.0]))


def test_records_without_embedding_are_listed_but_not_searched():
    store = SimpleInMemoryVectorStore(dimension=3)
    store.bulk_load(_records() + [DocumentRecord(id=4, text="text only", embedding=None)])

    assert store.count() == 4
    ids = [r.id for r in store.nearest_neighbors(np.array([1.0, 1.0, 1.0]), k=10)]
    assert 4 not in ids
    assert len(ids) == 3


def test_clear():
    store = SimpleInMemoryVectorStore(dimension=3)
    store.bulk_load(_records())
    store.clear()

    assert store.count() == 0
    assert store.nearest_neighbors(np.array([1.0, 0.0, 0.0])) == []


def test_document_record_equality_compares_embedding_content():
    a = DocumentRecord(id=1, text="t", embedding=np.array([1.0, 2.0]))
    b = DocumentRecord(id=1, text="t", embedding=np.array([1.0, 2.0]))
    c = DocumentRecord(id=1, text="t", embedding=np.array([1.0, 2.5]))

    assert a == b
    assert hash(a) == hash(b)
    assert a != c
