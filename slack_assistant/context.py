"""
Context Assembly Module

Gathers what the LLM should see besides the user's question:

1. Thread history: the last few messages of the Slack thread the
   question was asked in.
2. Semantic history: only when (1) is empty, the nearest past messages
   from the vector index, expanded to their whole thread when they
   belong to one.
3. File context: text of every file the user uploaded, newest first.

Every lookup degrades to an empty result on failure, so a broken
dependency costs context, never the answer.
"""

import logging
from typing import List, Optional

from config.settings import get_settings
from slack_assistant.database import Database
from slack_assistant.models import ContextBundle
from slack_assistant.vector_store import VectorStore

logger = logging.getLogger(__name__)


class ContextAssembler:
    """
    Builds a ContextBundle for a user question.

    Example:
        assembler = ContextAssembler(vector_store, database, slack_client)
        bundle = assembler.assemble("Where is the onboarding doc?", "U123", "C42", "1700000000.0001")
    """

    def __init__(
        self,
        vector_store: VectorStore,
        database: Database,
        slack_client=None,
        thread_history_limit: Optional[int] = None,
    ):
        """
        Initialize the assembler.

        Args:
            vector_store: Vector store used for semantic retrieval
            database: Persistence client for uploaded file text
            slack_client: slack_sdk WebClient for thread lookups (None disables them)
            thread_history_limit: Messages fetched per thread (default from config)
        """
        settings = get_settings()

        self.vector_store = vector_store
        self.database = database
        self.slack_client = slack_client
        self.thread_history_limit = thread_history_limit or settings.retrieval.thread_history_limit

    def assemble(
        self,
        user_text: str,
        author_id: str,
        channel: Optional[str] = None,
        thread_ts: Optional[str] = None,
    ) -> ContextBundle:
        """
        Gather past messages and uploaded file text for a question.

        Args:
            user_text: The question being answered
            author_id: Slack (or dashboard) user ID of the asker
            channel: Channel the question was asked in
            thread_ts: Thread the question belongs to, if any

        Returns:
            ContextBundle with past context and file context
        """
        past_context = self.thread_history(channel, thread_ts)
        logger.debug(f"Thread history: {len(past_context)} messages")

        if not past_context:
            past_context = self.similar_history(user_text)
            logger.debug(f"Semantic history: {len(past_context)} messages")

        return ContextBundle(
            past_context=past_context,
            file_context=self.file_context(author_id),
        )

    def thread_history(self, channel: Optional[str], thread_ts: Optional[str]) -> List[str]:
        """
        Fetch recent messages of a Slack thread in chronological order.

        Messages with a subtype (joins, bot posts, ...) are skipped.
        """
        if not thread_ts or not channel or self.slack_client is None:
            return []

        try:
            response = self.slack_client.conversations_replies(
                channel=channel,
                ts=thread_ts,
                limit=self.thread_history_limit,
            )
        except Exception as e:
            logger.error(f"Slack thread retrieval error ({channel}/{thread_ts}): {e}")
            return []

        messages = response.get("messages") or []
        texts = [msg.get("text", "") for msg in messages if not msg.get("subtype")]
        texts.reverse()
        return texts

    def similar_history(self, user_text: str) -> List[str]:
        """Collect texts of past messages similar to the question."""
        past_context: List[str] = []

        for match in self.vector_store.search(user_text):
            if match.thread_ts:
                past_context.extend(self.thread_history(match.channel, match.thread_ts))
            else:
                past_context.append(match.text)

        return past_context

    def file_context(self, author_id: str) -> str:
        """Concatenate the user's uploaded file text, newest first."""
        try:
            contents = self.database.get_file_contents(author_id)
        except Exception as e:
            logger.error(f"Uploaded file lookup error for user {author_id}: {e}")
            return ""

        return "\n".join(contents)
