"""
Vector Store Module

Stores one embedding per Slack message and finds the messages most
similar to a new question. Supports two backends:
- Pinecone: managed index, used in production
- FAISS: in-process index for local development and tests

Entry schema:
- id: Slack message ts (unique per message, so re-sending upserts)
- values: embedding vector
- metadata: {channel, text, thread_ts?}
"""

import logging
from abc import ABC, abstractmethod
from typing import List, Optional, Dict, Any

import numpy as np

from config.settings import get_settings, VectorStoreConfig
from slack_assistant.embeddings import EmbeddingService
from slack_assistant.models import SlackMessage, VectorMatch

# Configure logging
logger = logging.getLogger(__name__)


def build_metadata(message: SlackMessage) -> Dict[str, Any]:
    """Build the metadata stored alongside a message vector."""
    metadata = {"channel": message.channel, "text": message.text}
    # Pinecone rejects null metadata values
    if message.thread_ts:
        metadata["thread_ts"] = message.thread_ts
    return metadata


def match_from_metadata(entry_id: str, metadata: Optional[Dict[str, Any]], score: float) -> VectorMatch:
    metadata = metadata or {}
    return VectorMatch(
        id=entry_id,
        text=metadata.get("text", ""),
        channel=metadata.get("channel"),
        thread_ts=metadata.get("thread_ts") or None,
        score=float(score or 0.0),
    )


class BaseVectorStore(ABC):
    """
    Abstract base class for vector backends.

    All implementations must provide:
    - upsert: Insert or overwrite an entry by id
    - query: Find nearest neighbours of a vector
    - count: Number of stored entries
    """

    @abstractmethod
    def upsert(self, entry_id: str, values: List[float], metadata: Dict[str, Any]) -> None:
        pass

    @abstractmethod
    def query(self, vector: List[float], top_k: int = 5) -> List[VectorMatch]:
        """
        Search for the nearest entries.

        Returns:
            List of VectorMatch objects, sorted by score descending
        """
        pass

    @abstractmethod
    def count(self) -> int:
        pass


class PineconeVectorStore(BaseVectorStore):
    """
    Pinecone managed index.

    Requires:
    - PINECONE_API_KEY
    - PINECONE_INDEX naming an index created with the embedding dimension
    """

    def __init__(
        self,
        api_key: Optional[str] = None,
        index_name: Optional[str] = None,
        index: Any = None,
    ):
        """
        Initialize the Pinecone store.

        Args:
            api_key: Pinecone API key (or from config)
            index_name: Index name (or from config)
            index: Pre-built index handle, skips client creation
        """
        config = get_settings().vector_store
        self.api_key = api_key or config.pinecone_api_key
        self.index_name = index_name or config.pinecone_index
        self._index = index

        logger.info(f"PineconeVectorStore initialized: index={self.index_name}")

    def _get_index(self):
        """Connect to the index on first use."""
        if self._index is None:
            if not self.api_key or not self.index_name:
                raise ValueError(
                    "Pinecone not configured. Set PINECONE_API_KEY and PINECONE_INDEX."
                )

            from pinecone import Pinecone

            client = Pinecone(api_key=self.api_key)
            self._index = client.Index(self.index_name)
            logger.info(f"Connected to Pinecone index '{self.index_name}'")

        return self._index

    def upsert(self, entry_id: str, values: List[float], metadata: Dict[str, Any]) -> None:
        index = self._get_index()
        index.upsert(vectors=[{"id": entry_id, "values": values, "metadata": metadata}])

    def query(self, vector: List[float], top_k: int = 5) -> List[VectorMatch]:
        index = self._get_index()
        results = index.query(vector=vector, top_k=top_k, include_metadata=True)

        return [
            match_from_metadata(match.id, match.metadata, match.score)
            for match in results.matches
        ]

    def count(self) -> int:
        stats = self._get_index().describe_index_stats()
        return stats.total_vector_count


class FAISSVectorStore(BaseVectorStore):
    """
    In-process FAISS index for development.

    Uses IndexFlatIP over L2-normalized vectors, i.e. cosine similarity.
    FAISS only stores vectors, so ids and metadata live alongside it;
    overwriting an existing id rebuilds the index.
    """

    def __init__(self):
        self._ids: List[str] = []
        self._vectors: Dict[str, np.ndarray] = {}
        self._metadata: Dict[str, Dict[str, Any]] = {}
        self._index = None

        logger.info("FAISSVectorStore initialized")

    @staticmethod
    def _normalize(vectors: np.ndarray) -> np.ndarray:
        norms = np.linalg.norm(vectors, axis=1, keepdims=True)
        norms[norms == 0] = 1.0
        return vectors / norms

    def _rebuild_index(self, dimension: int):
        import faiss

        self._index = faiss.IndexFlatIP(dimension)
        if self._ids:
            matrix = np.stack([self._vectors[i] for i in self._ids])
            self._index.add(matrix)

    def upsert(self, entry_id: str, values: List[float], metadata: Dict[str, Any]) -> None:
        vector = self._normalize(np.asarray([values], dtype=np.float32))[0]

        if self._index is None:
            self._rebuild_index(len(values))

        self._metadata[entry_id] = dict(metadata)
        if entry_id in self._vectors:
            self._vectors[entry_id] = vector
            self._rebuild_index(len(values))
        else:
            self._ids.append(entry_id)
            self._vectors[entry_id] = vector
            self._index.add(vector.reshape(1, -1))

    def query(self, vector: List[float], top_k: int = 5) -> List[VectorMatch]:
        if self._index is None or not self._ids:
            return []

        query = self._normalize(np.asarray([vector], dtype=np.float32))
        k = min(top_k, len(self._ids))
        scores, indices = self._index.search(query, k)

        matches = []
        for score, idx in zip(scores[0], indices[0]):
            if idx < 0:
                continue
            entry_id = self._ids[idx]
            matches.append(match_from_metadata(entry_id, self._metadata[entry_id], score))
        return matches

    def count(self) -> int:
        return len(self._ids)


class VectorStore:
    """
    Main Vector Store class with unified interface.

    This is the class that other components should use. It embeds text
    before talking to the backend and turns provider failures into
    empty results, so retrieval never fails a request.

    Example:
        store = VectorStore(embedding_service=EmbeddingService())
        store.add_message(message)
        matches = store.search("How do I request a laptop?")
    """

    def __init__(
        self,
        embedding_service: Optional[EmbeddingService] = None,
        provider: Optional[str] = None,
        config: Optional[VectorStoreConfig] = None,
        backend: Optional[BaseVectorStore] = None,
    ):
        """
        Initialize the vector store.

        Args:
            embedding_service: EmbeddingService for embedding generation
            provider: "pinecone" or "faiss" (default from config)
            config: Optional VectorStoreConfig
            backend: Pre-built backend, overrides provider selection
        """
        settings = get_settings()
        self.config = config or settings.vector_store
        self.top_k = settings.retrieval.top_k
        self.embedding_service = embedding_service or EmbeddingService()

        provider = provider or self.config.provider

        if backend is not None:
            self._store = backend
        elif provider == "pinecone":
            self._store = PineconeVectorStore(
                api_key=self.config.pinecone_api_key,
                index_name=self.config.pinecone_index,
            )
        elif provider == "faiss":
            self._store = FAISSVectorStore()
        else:
            raise ValueError(f"Unknown vector store provider: {provider}")

        self._provider_name = provider
        logger.info(f"VectorStore initialized with {provider} backend")

    def add_message(self, message: SlackMessage) -> bool:
        """
        Embed a Slack message and upsert it keyed by its ts.

        Returns:
            True if stored, False if embedding or upsert failed
        """
        try:
            vector = self.embedding_service.embed_text(message.text)
        except Exception as e:
            logger.error(f"Embedding error for message {message.ts}: {e}")
            return False

        try:
            self._store.upsert(message.ts, vector, build_metadata(message))
        except Exception as e:
            logger.error(f"Vector store upsert error for message {message.ts}: {e}")
            return False

        logger.info(f"Stored message {message.ts} in vector index")
        return True

    def search(self, text: str, top_k: Optional[int] = None) -> List[VectorMatch]:
        """
        Find stored messages similar to the given text.

        Args:
            text: Question to search with
            top_k: Number of results (default from config)

        Returns:
            List of VectorMatch objects, empty on any failure
        """
        try:
            vector = self.embedding_service.embed_text(text)
        except Exception as e:
            logger.error(f"Embedding error during search: {e}")
            return []

        try:
            matches = self._store.query(vector, top_k=top_k or self.top_k)
        except Exception as e:
            logger.error(f"Vector store query error: {e}")
            return []

        logger.debug(f"Vector search returned {len(matches)} matches")
        return matches

    def count(self) -> int:
        return self._store.count()

    @property
    def provider(self) -> str:
        return self._provider_name
