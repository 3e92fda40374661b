"""
Slack Assistant Module

The single entry point shared by the Slack event handlers and the
dashboard HTTP API. It owns every component and exposes the few
operations those surfaces need:

    class SlackAssistant:
        def ingest_message(self, message) -> None
        def answer(self, text, user_id, channel=None, thread_ts=None, source="slack") -> str
        def ingest_file(self, path, user_id, file_name, mime_type) -> str
        def conversations(self, user_id) -> list
"""

import logging
from pathlib import Path
from typing import List, Optional, Union

from config.settings import Settings, get_settings
from slack_assistant.context import ContextAssembler
from slack_assistant.database import Database
from slack_assistant.embeddings import EmbeddingService
from slack_assistant.extractor import DocumentExtractor
from slack_assistant.llm_service import LLMService
from slack_assistant.models import SOURCE_SLACK, QueryRecord, SlackMessage
from slack_assistant.responder import ResponseGenerator
from slack_assistant.vector_store import VectorStore

logger = logging.getLogger(__name__)


class SlackAssistant:
    """
    Main assistant: stores history, assembles context, answers questions.

    Example:
        assistant = create_assistant()

        # Slack traffic builds the searchable history
        assistant.ingest_message(message)

        # Answer a question
        reply = assistant.answer("Where is the style guide?", "U123", channel="C42")

        # Dashboard history
        for record in assistant.conversations("U123"):
            print(record.user_message, "->", record.bot_response)
    """

    def __init__(
        self,
        database: Database,
        vector_store: VectorStore,
        llm_service: LLMService,
        slack_client=None,
        extractor: Optional[DocumentExtractor] = None,
    ):
        """
        Initialize the assistant.

        Args:
            database: Persistence client
            vector_store: Vector store over past Slack messages
            llm_service: LLM used for replies
            slack_client: slack_sdk WebClient for thread lookups
            extractor: Document extractor for uploads
        """
        self.database = database
        self.vector_store = vector_store
        self.llm_service = llm_service
        self.slack_client = slack_client
        self.extractor = extractor or DocumentExtractor()

        self.context_assembler = ContextAssembler(
            vector_store=vector_store,
            database=database,
            slack_client=slack_client,
        )
        self.response_generator = ResponseGenerator(
            llm_service=llm_service,
            database=database,
        )

        logger.info(
            f"SlackAssistant initialized: "
            f"llm={llm_service.provider_name}, vector_store={vector_store.provider}"
        )

    def ingest_message(self, message: SlackMessage) -> None:
        """Persist a Slack message and index its embedding."""
        try:
            self.database.store_message(message)
        except Exception as e:
            logger.error(f"Failed to store message {message.ts}: {e}")

        self.vector_store.add_message(message)

    def answer(
        self,
        text: str,
        user_id: str,
        channel: Optional[str] = None,
        thread_ts: Optional[str] = None,
        source: str = SOURCE_SLACK,
    ) -> str:
        """
        Answer a question using thread, semantic and file context.

        Args:
            text: The question
            user_id: Who asked
            channel: Slack channel (None for dashboard questions)
            thread_ts: Slack thread (None outside threads and for the dashboard)
            source: "slack" or "dashboard", recorded with the answer

        Returns:
            Reply text
        """
        bundle = self.context_assembler.assemble(text, user_id, channel, thread_ts)
        logger.info(
            f"Answering {source} question from {user_id}: "
            f"{len(bundle.past_context)} past messages, "
            f"{len(bundle.file_context)} chars of file context"
        )

        return self.response_generator.generate(
            user_text=text,
            author_id=user_id,
            past_context=bundle.past_context,
            file_context=bundle.file_context,
            source=source,
        )

    def ingest_file(
        self,
        path: Union[str, Path],
        user_id: str,
        file_name: str,
        mime_type: str,
    ) -> str:
        """
        Extract an uploaded file's text and store it for the user.

        Returns:
            The extracted text

        Raises:
            UnsupportedFileTypeError: Nothing is stored for unsupported types
        """
        text = self.extractor.extract(path, mime_type)
        self.database.store_uploaded_file(user_id, file_name, mime_type, text)
        return text

    def conversations(self, user_id: str) -> List[QueryRecord]:
        """Return the user's question/answer history, oldest first."""
        return self.database.get_conversations(user_id)


def create_assistant(
    settings: Optional[Settings] = None,
    slack_client=None,
) -> SlackAssistant:
    """
    Factory function to build an assistant from configuration.

    Args:
        settings: Settings to use (default: environment)
        slack_client: slack_sdk WebClient for thread lookups

    Returns:
        Configured SlackAssistant instance
    """
    settings = settings or get_settings()

    embedding_service = EmbeddingService(config=settings.embedding)
    vector_store = VectorStore(
        embedding_service=embedding_service,
        config=settings.vector_store,
    )
    database = Database(url=settings.database.url, echo=settings.database.echo)
    llm_service = LLMService(config=settings.llm)

    return SlackAssistant(
        database=database,
        vector_store=vector_store,
        llm_service=llm_service,
        slack_client=slack_client,
    )
