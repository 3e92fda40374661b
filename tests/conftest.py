"""
Shared fixtures for the test suite.

External services (Slack, OpenAI, Pinecone) are always mocked; the
relational store is an in-memory SQLite database.
"""

import sys
from pathlib import Path
from unittest.mock import Mock

import pytest

# Add project root to path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from slack_assistant.database import Database
from slack_assistant.llm_service import LLMResponse


@pytest.fixture
def database():
    """Fresh in-memory database with the schema created."""
    db = Database(url="sqlite://", echo=False)
    db.init_schema()
    return db


@pytest.fixture
def mock_vector_store():
    """Vector store that finds nothing."""
    store = Mock()
    store.search.return_value = []
    store.add_message.return_value = True
    store.provider = "faiss"
    return store


@pytest.fixture
def mock_llm_service():
    """LLM service that always answers the same thing."""
    llm = Mock()
    llm.chat.return_value = LLMResponse(content="Generated response", model="test-model")
    llm.provider_name = "openai"
    llm.model_name = "test-model"
    return llm


@pytest.fixture
def mock_slack_client():
    """Slack WebClient with an empty thread."""
    client = Mock()
    client.conversations_replies.return_value = {"messages": []}
    return client
