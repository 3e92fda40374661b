"""
Configuration settings for the Slack Knowledge Assistant.

This module handles all configuration management using environment variables.
No hardcoded credentials - everything is configurable via .env file.
"""

import os
from dataclasses import dataclass, field
from typing import Literal, Optional
from pathlib import Path
from dotenv import load_dotenv

# Load environment variables from .env file
load_dotenv()


@dataclass
class SlackConfig:
    """Credentials for the Slack app."""

    bot_token: Optional[str] = None
    signing_secret: Optional[str] = None


@dataclass
class EmbeddingConfig:
    """Configuration for embedding models."""

    provider: Literal["openai", "local"] = "openai"
    openai_model: str = "text-embedding-ada-002"
    openai_api_key: Optional[str] = None
    local_model: str = "all-MiniLM-L6-v2"
    hf_token: Optional[str] = None

    # text-embedding-ada-002: 1536
    # all-MiniLM-L6-v2: 384
    @property
    def dimension(self) -> int:
        """Return embedding dimension based on selected model."""
        if self.provider == "local":
            model_dimensions = {
                "all-MiniLM-L6-v2": 384,
                "all-mpnet-base-v2": 768,
            }
            return model_dimensions.get(self.local_model, 384)
        model_dimensions = {
            "text-embedding-3-small": 1536,
            "text-embedding-3-large": 3072,
            "text-embedding-ada-002": 1536,
        }
        return model_dimensions.get(self.openai_model, 1536)


@dataclass
class LLMConfig:
    """Configuration for LLM providers and the reply prompt."""

    provider: Literal["openai", "ollama", "mistral", "gemini"] = "openai"
    temperature: float = 0.7
    system_prompt: str = "You are a helpful Slack assistant."
    fallback_response: str = "I'm sorry, but I couldn't process your request."

    # OpenAI settings
    openai_api_key: Optional[str] = None
    openai_model: str = "gpt-4o"

    # Ollama settings
    ollama_base_url: str = "http://localhost:11434"
    ollama_model: str = "llama3"

    # Mistral settings
    mistral_api_key: Optional[str] = None
    mistral_model: str = "mistral-small-latest"

    # Gemini settings
    gemini_api_key: Optional[str] = None
    gemini_model: str = "gemini-2.0-flash"


@dataclass
class VectorStoreConfig:
    """Configuration for the vector index."""

    provider: Literal["pinecone", "faiss"] = "pinecone"
    pinecone_api_key: Optional[str] = None
    pinecone_index: Optional[str] = None


@dataclass
class DatabaseConfig:
    """Relational store settings."""

    url: str = "sqlite:///./data/slack_assistant.db"
    echo: bool = False


@dataclass
class RetrievalConfig:
    """Configuration for context retrieval."""

    top_k: int = 5  # Nearest neighbours pulled from the vector index
    thread_history_limit: int = 5  # Messages fetched per Slack thread


@dataclass
class ServerConfig:
    """HTTP server settings."""

    host: str = "0.0.0.0"
    port: int = 3000
    upload_dir: Path = field(default_factory=lambda: Path("./uploads"))


@dataclass
class Settings:
    """
    Main settings class that aggregates all configurations.

    Usage:
        settings = get_settings()
        print(settings.llm.openai_model)
        print(settings.retrieval.top_k)
    """

    slack: SlackConfig = field(default_factory=SlackConfig)
    embedding: EmbeddingConfig = field(default_factory=EmbeddingConfig)
    llm: LLMConfig = field(default_factory=LLMConfig)
    vector_store: VectorStoreConfig = field(default_factory=VectorStoreConfig)
    database: DatabaseConfig = field(default_factory=DatabaseConfig)
    retrieval: RetrievalConfig = field(default_factory=RetrievalConfig)
    server: ServerConfig = field(default_factory=ServerConfig)

    # Logging
    log_level: str = "INFO"

    @classmethod
    def from_env(cls) -> "Settings":
        """
        Create Settings instance from environment variables.

        This is the primary way to instantiate Settings.
        """
        slack = SlackConfig(
            bot_token=os.getenv("SLACK_BOT_TOKEN"),
            signing_secret=os.getenv("SLACK_SIGNING_SECRET"),
        )

        embedding = EmbeddingConfig(
            provider=os.getenv("EMBEDDING_PROVIDER", "openai"),  # type: ignore
            openai_model=os.getenv("OPENAI_EMBEDDING_MODEL", "text-embedding-ada-002"),
            openai_api_key=os.getenv("OPENAI_API_KEY"),
            local_model=os.getenv("LOCAL_EMBEDDING_MODEL", "all-MiniLM-L6-v2"),
            hf_token=os.getenv("HF_TOKEN"),
        )

        llm = LLMConfig(
            provider=os.getenv("LLM_PROVIDER", "openai"),  # type: ignore
            temperature=float(os.getenv("LLM_TEMPERATURE", "0.7")),
            openai_api_key=os.getenv("OPENAI_API_KEY"),
            openai_model=os.getenv("OPENAI_LLM_MODEL", "gpt-4o"),
            ollama_base_url=os.getenv("OLLAMA_BASE_URL", "http://localhost:11434"),
            ollama_model=os.getenv("OLLAMA_MODEL", "llama3"),
            mistral_api_key=os.getenv("MISTRAL_API_KEY"),
            mistral_model=os.getenv("MISTRAL_MODEL", "mistral-small-latest"),
            gemini_api_key=os.getenv("GEMINI_API_KEY"),
            gemini_model=os.getenv("GEMINI_MODEL", "gemini-2.0-flash"),
        )

        vector_store = VectorStoreConfig(
            provider=os.getenv("VECTOR_STORE_PROVIDER", "pinecone"),  # type: ignore
            pinecone_api_key=os.getenv("PINECONE_API_KEY"),
            pinecone_index=os.getenv("PINECONE_INDEX"),
        )

        database = DatabaseConfig(
            url=os.getenv("DATABASE_URL", "sqlite:///./data/slack_assistant.db"),
            echo=os.getenv("DATABASE_ECHO", "false").lower() == "true",
        )

        retrieval = RetrievalConfig(
            top_k=int(os.getenv("TOP_K_RESULTS", "5")),
            thread_history_limit=int(os.getenv("THREAD_HISTORY_LIMIT", "5")),
        )

        server = ServerConfig(
            host=os.getenv("HOST", "0.0.0.0"),
            port=int(os.getenv("PORT", "3000")),
            upload_dir=Path(os.getenv("UPLOAD_DIR", "./uploads")),
        )

        return cls(
            slack=slack,
            embedding=embedding,
            llm=llm,
            vector_store=vector_store,
            database=database,
            retrieval=retrieval,
            server=server,
            log_level=os.getenv("LOG_LEVEL", "INFO"),
        )


# Singleton pattern for settings
_settings: Optional[Settings] = None


def get_settings() -> Settings:
    """
    Get the singleton Settings instance.

    Returns:
        Settings: The application settings loaded from environment.
    """
    global _settings
    if _settings is None:
        _settings = Settings.from_env()
    return _settings


def reload_settings() -> Settings:
    """
    Reload settings from environment (useful for testing).

    Returns:
        Settings: Fresh settings instance.
    """
    global _settings
    load_dotenv(override=True)
    _settings = Settings.from_env()
    return _settings
