"""
Slack Knowledge Assistant - Core Source Module

Answers questions asked in Slack or on the dashboard, grounded in:
- Slack thread history
- Similar past messages from a vector index
- Text of files the user uploaded

Components:
- Database: Relational store for messages, queries and uploads
- EmbeddingService: Text to vector (OpenAI / local)
- VectorStore: Pinecone / FAISS message index
- LLMService: Chat completion provider abstraction
- DocumentExtractor: PDF / text / CSV to plain text
- ContextAssembler: Thread-first, semantic-fallback context gathering
- ResponseGenerator: Prompt building, completion and query logging
- SlackAssistant: Facade used by the Slack bot and the HTTP API
"""

from .models import (
    SlackMessage,
    QueryRecord,
    UploadedFileRecord,
    VectorMatch,
    ContextBundle,
    SOURCE_SLACK,
    SOURCE_DASHBOARD,
)
from .database import Database
from .embeddings import EmbeddingService
from .vector_store import VectorStore
from .llm_service import LLMService, LLMResponse
from .extractor import DocumentExtractor, UnsupportedFileTypeError
from .context import ContextAssembler
from .responder import ResponseGenerator
from .assistant import SlackAssistant, create_assistant

__all__ = [
    # Data model
    "SlackMessage",
    "QueryRecord",
    "UploadedFileRecord",
    "VectorMatch",
    "ContextBundle",
    "SOURCE_SLACK",
    "SOURCE_DASHBOARD",
    # Clients
    "Database",
    "EmbeddingService",
    "VectorStore",
    "LLMService",
    "LLMResponse",
    "DocumentExtractor",
    "UnsupportedFileTypeError",
    # Pipeline
    "ContextAssembler",
    "ResponseGenerator",
    "SlackAssistant",
    # Factory functions
    "create_assistant",
]
