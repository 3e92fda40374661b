"""
Embedding Service Module

Converts text into fixed-length vectors for similarity search:
- Cloud: OpenAI embeddings API (text-embedding-ada-002) - default
- Local: Sentence Transformers (all-MiniLM-L6-v2) - no API key needed

The vector index must be created with the dimension of the chosen model:
- text-embedding-ada-002: 1536 dimensions
- all-MiniLM-L6-v2: 384 dimensions
"""

import logging
import os
from abc import ABC, abstractmethod
from typing import List, Optional

from config.settings import get_settings, EmbeddingConfig

# Configure logging
logger = logging.getLogger(__name__)


class BaseEmbeddingProvider(ABC):
    """
    Abstract base class for embedding providers.

    All embedding providers must implement:
    - embed_text: Embed a single text string
    - dimension: Return the embedding dimension
    """

    @abstractmethod
    def embed_text(self, text: str) -> List[float]:
        """
        Generate embedding for a single text.

        Args:
            text: Input text to embed

        Returns:
            List of floats representing the embedding vector
        """
        pass

    @property
    @abstractmethod
    def dimension(self) -> int:
        """Return the dimension of embeddings produced."""
        pass

    @property
    @abstractmethod
    def model_name(self) -> str:
        """Return the name of the embedding model."""
        pass


class OpenAIEmbeddingProvider(BaseEmbeddingProvider):
    """
    OpenAI embedding provider using the embeddings API.

    Models:
    - text-embedding-ada-002: 1536 dims (default)
    - text-embedding-3-small: 1536 dims
    - text-embedding-3-large: 3072 dims
    """

    MODEL_DIMENSIONS = {
        "text-embedding-ada-002": 1536,
        "text-embedding-3-small": 1536,
        "text-embedding-3-large": 3072,
    }

    def __init__(
        self,
        model_name: str = "text-embedding-ada-002",
        api_key: Optional[str] = None,
    ):
        self._model_name = model_name
        self._api_key = api_key
        self._client = None

        if model_name not in self.MODEL_DIMENSIONS:
            logger.warning(
                f"Unknown model {model_name}, assuming 1536 dimensions. "
                f"Known models: {list(self.MODEL_DIMENSIONS.keys())}"
            )

        logger.info(f"Initializing OpenAIEmbeddingProvider with model: {model_name}")

    def _get_client(self):
        """Get or create the OpenAI client."""
        if self._client is None:
            from openai import OpenAI

            api_key = self._api_key or os.getenv("OPENAI_API_KEY")
            if not api_key:
                raise ValueError(
                    "OpenAI API key not found. Set OPENAI_API_KEY environment "
                    "variable or pass api_key parameter."
                )

            self._client = OpenAI(api_key=api_key)
            logger.info("OpenAI embeddings client initialized")

        return self._client

    def embed_text(self, text: str) -> List[float]:
        client = self._get_client()

        try:
            response = client.embeddings.create(
                input=text,
                model=self._model_name,
            )
        except Exception as e:
            logger.error(f"OpenAI embedding error: {e}")
            raise

        return response.data[0].embedding

    @property
    def dimension(self) -> int:
        return self.MODEL_DIMENSIONS.get(self._model_name, 1536)

    @property
    def model_name(self) -> str:
        return self._model_name


class LocalEmbeddingProvider(BaseEmbeddingProvider):
    """
    Local embedding provider using Sentence Transformers.

    Useful for development without an OpenAI key. The vector index
    must be created with the matching dimension (384 for MiniLM).
    """

    def __init__(self, model_name: str = "all-MiniLM-L6-v2", hf_token: Optional[str] = None):
        self._model_name = model_name
        self._hf_token = hf_token
        self._model = None
        self._dimension = None

        logger.info(f"Initializing LocalEmbeddingProvider with model: {model_name}")

    def _load_model(self):
        """Lazy load the model (only when first needed)."""
        if self._model is None:
            from sentence_transformers import SentenceTransformer

            if self._hf_token:
                from huggingface_hub import login
                login(token=self._hf_token)

            logger.info(f"Loading sentence-transformers model: {self._model_name}")
            self._model = SentenceTransformer(self._model_name)
            self._dimension = self._model.get_sentence_embedding_dimension()
            logger.info(f"Model loaded. Embedding dimension: {self._dimension}")

    def embed_text(self, text: str) -> List[float]:
        self._load_model()

        # Sentence transformers returns numpy array
        embedding = self._model.encode(text, convert_to_numpy=True)
        return embedding.tolist()

    @property
    def dimension(self) -> int:
        self._load_model()
        return self._dimension

    @property
    def model_name(self) -> str:
        return self._model_name


class EmbeddingService:
    """
    Main embedding service that provides a unified interface.

    This is the class that other components should use.
    It handles provider selection based on configuration.

    Example:
        service = EmbeddingService()  # Uses config
        vector = service.embed_text("How do I reset my VPN password?")
    """

    def __init__(
        self,
        provider: Optional[str] = None,
        config: Optional[EmbeddingConfig] = None,
    ):
        """
        Initialize the embedding service.

        Args:
            provider: "openai" or "local" (default from config)
            config: Optional EmbeddingConfig instance
        """
        self.config = config or get_settings().embedding
        provider = provider or self.config.provider

        if provider == "openai":
            self._provider = OpenAIEmbeddingProvider(
                model_name=self.config.openai_model,
                api_key=self.config.openai_api_key,
            )
        elif provider == "local":
            self._provider = LocalEmbeddingProvider(
                model_name=self.config.local_model,
                hf_token=self.config.hf_token,
            )
        else:
            raise ValueError(f"Unknown embedding provider: {provider}")

        self._provider_name = provider
        logger.info(f"EmbeddingService initialized with {provider} provider")

    def embed_text(self, text: str) -> List[float]:
        """
        Generate embedding for a single text.

        Args:
            text: Input text to embed

        Returns:
            Embedding vector as list of floats

        Raises:
            ValueError: If the text is empty
        """
        if not text or not text.strip():
            raise ValueError("Cannot embed empty text")

        return self._provider.embed_text(text)

    @property
    def dimension(self) -> int:
        return self._provider.dimension

    @property
    def model_name(self) -> str:
        return self._provider.model_name

    @property
    def provider_name(self) -> str:
        return self._provider_name
