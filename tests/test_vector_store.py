"""
Tests for Vector Store Module

Pinecone is mocked; FAISS runs in-process.
"""

import pytest
from unittest.mock import Mock

from config.settings import VectorStoreConfig
from slack_assistant.models import SlackMessage, VectorMatch
from slack_assistant.vector_store import (
    FAISSVectorStore,
    PineconeVectorStore,
    VectorStore,
    build_metadata,
)


def make_message(ts="1.0", text="hello", thread_ts=None):
    return SlackMessage(ts=ts, channel="C1", user="U1", text=text, thread_ts=thread_ts)


class TestBuildMetadata:
    def test_without_thread(self):
        assert build_metadata(make_message()) == {"channel": "C1", "text": "hello"}

    def test_with_thread(self):
        metadata = build_metadata(make_message(thread_ts="0.5"))
        assert metadata["thread_ts"] == "0.5"


class TestFAISSVectorStore:
    """Tests for the in-process FAISS backend."""

    @pytest.fixture
    def store(self):
        return FAISSVectorStore()

    def test_empty_query(self, store):
        assert store.query([1.0, 0.0, 0.0]) == []
        assert store.count() == 0

    def test_nearest_first(self, store):
        store.upsert("a", [1.0, 0.0, 0.0], {"channel": "C1", "text": "alpha"})
        store.upsert("b", [0.0, 1.0, 0.0], {"channel": "C1", "text": "beta", "thread_ts": "0.5"})

        matches = store.query([0.9, 0.1, 0.0], top_k=2)

        assert [m.id for m in matches] == ["a", "b"]
        assert matches[0].text == "alpha"
        assert matches[0].thread_ts is None
        assert matches[1].thread_ts == "0.5"
        assert matches[0].score > matches[1].score

    def test_upsert_overwrites_same_id(self, store):
        store.upsert("a", [1.0, 0.0, 0.0], {"channel": "C1", "text": "old"})
        store.upsert("a", [0.0, 1.0, 0.0], {"channel": "C1", "text": "new"})

        matches = store.query([0.0, 1.0, 0.0], top_k=5)

        assert store.count() == 1
        assert len(matches) == 1
        assert matches[0].text == "new"


class TestPineconeVectorStore:
    """Tests for the Pinecone backend with a mocked index."""

    def test_upsert_shape(self):
        index = Mock()
        store = PineconeVectorStore(api_key="key", index_name="idx", index=index)

        store.upsert("1.0", [0.1, 0.2], {"channel": "C1", "text": "hi"})

        index.upsert.assert_called_once_with(
            vectors=[{"id": "1.0", "values": [0.1, 0.2], "metadata": {"channel": "C1", "text": "hi"}}]
        )

    def test_query_maps_matches(self):
        index = Mock()
        index.query.return_value = Mock(matches=[
            Mock(id="1.0", score=0.9, metadata={"channel": "C1", "text": "hi", "thread_ts": "0.5"}),
            Mock(id="2.0", score=0.5, metadata={"channel": "C2", "text": "yo"}),
        ])
        store = PineconeVectorStore(api_key="key", index_name="idx", index=index)

        matches = store.query([0.1, 0.2], top_k=5)

        index.query.assert_called_once_with(vector=[0.1, 0.2], top_k=5, include_metadata=True)
        assert matches == [
            VectorMatch(id="1.0", text="hi", channel="C1", thread_ts="0.5", score=0.9),
            VectorMatch(id="2.0", text="yo", channel="C2", thread_ts=None, score=0.5),
        ]

    def test_missing_configuration(self):
        store = PineconeVectorStore(api_key=None, index_name=None)
        store.api_key = None
        store.index_name = None

        with pytest.raises(ValueError):
            store.query([0.1])


class TestVectorStore:
    """Tests for the VectorStore facade."""

    @pytest.fixture
    def embedding_service(self):
        service = Mock()
        service.embed_text.return_value = [0.1, 0.2, 0.3]
        return service

    @pytest.fixture
    def backend(self):
        backend = Mock()
        backend.query.return_value = [VectorMatch(id="1.0", text="hi", channel="C1")]
        return backend

    def make_store(self, embedding_service, backend):
        return VectorStore(
            embedding_service=embedding_service,
            config=VectorStoreConfig(provider="faiss"),
            backend=backend,
        )

    def test_add_message_uses_ts_as_id(self, embedding_service, backend):
        store = self.make_store(embedding_service, backend)

        assert store.add_message(make_message(ts="42.0", thread_ts="41.0")) is True

        backend.upsert.assert_called_once_with(
            "42.0", [0.1, 0.2, 0.3], {"channel": "C1", "text": "hello", "thread_ts": "41.0"}
        )

    def test_add_message_embedding_failure(self, embedding_service, backend):
        embedding_service.embed_text.side_effect = RuntimeError("API down")
        store = self.make_store(embedding_service, backend)

        assert store.add_message(make_message()) is False
        backend.upsert.assert_not_called()

    def test_search(self, embedding_service, backend):
        store = self.make_store(embedding_service, backend)

        matches = store.search("question", top_k=3)

        assert matches[0].text == "hi"
        backend.query.assert_called_once_with([0.1, 0.2, 0.3], top_k=3)

    def test_search_embedding_failure_returns_empty(self, embedding_service, backend):
        embedding_service.embed_text.side_effect = RuntimeError("API down")
        store = self.make_store(embedding_service, backend)

        assert store.search("question") == []
        backend.query.assert_not_called()

    def test_search_query_failure_returns_empty(self, embedding_service, backend):
        backend.query.side_effect = RuntimeError("index unavailable")
        store = self.make_store(embedding_service, backend)

        assert store.search("question") == []

    def test_faiss_provider(self, embedding_service):
        store = VectorStore(
            embedding_service=embedding_service,
            config=VectorStoreConfig(provider="faiss"),
        )
        assert store.provider == "faiss"

        store.add_message(make_message())
        assert store.count() == 1
        assert store.search("hello")[0].text == "hello"

    def test_unknown_provider(self, embedding_service):
        with pytest.raises(ValueError):
            VectorStore(embedding_service=embedding_service, provider="unknown")
