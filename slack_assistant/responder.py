"""
Response Generation Module

Builds the chat prompt from the question and its context, asks the LLM
for a reply, and logs the question/answer pair.

Prompt layout:
    system:  fixed instruction
    user:    one entry per past context message
    user:    the current question
    user:    "Relevant File Data: ..." (only when file context exists)
"""

import logging
from typing import List, Optional, Dict

from config.settings import get_settings
from slack_assistant.database import Database
from slack_assistant.llm_service import LLMService
from slack_assistant.models import SOURCE_SLACK

logger = logging.getLogger(__name__)


class ResponseGenerator:
    """
    Generates replies and records them.

    Example:
        generator = ResponseGenerator(llm_service, database)
        reply = generator.generate("What is the VPN address?", "U123", ["earlier message"], "")
    """

    def __init__(
        self,
        llm_service: LLMService,
        database: Database,
        system_prompt: Optional[str] = None,
        temperature: Optional[float] = None,
        fallback_response: Optional[str] = None,
    ):
        """
        Initialize the generator.

        Args:
            llm_service: LLM used for completions
            database: Persistence client for the query log
            system_prompt: Fixed system instruction (default from config)
            temperature: Sampling temperature (default from config)
            fallback_response: Reply used when the LLM fails (default from config)
        """
        config = get_settings().llm

        self.llm_service = llm_service
        self.database = database
        self.system_prompt = system_prompt or config.system_prompt
        self.temperature = config.temperature if temperature is None else temperature
        self.fallback_response = fallback_response or config.fallback_response

    def build_messages(
        self,
        user_text: str,
        past_context: List[str],
        file_context: str = "",
    ) -> List[Dict[str, str]]:
        messages = [{"role": "system", "content": self.system_prompt}]
        messages.extend({"role": "user", "content": text} for text in past_context)
        messages.append({"role": "user", "content": user_text})

        if file_context:
            messages.append({"role": "user", "content": f"Relevant File Data: {file_context}"})

        return messages

    def generate(
        self,
        user_text: str,
        author_id: str,
        past_context: Optional[List[str]] = None,
        file_context: str = "",
        source: str = SOURCE_SLACK,
    ) -> str:
        """
        Produce a reply and log it as a query record.

        Args:
            user_text: The user's question
            author_id: Who asked
            past_context: Prior message texts, oldest first
            file_context: Uploaded file text ("" for none)
            source: "slack" or "dashboard"

        Returns:
            The LLM's reply, or the fallback apology if generation failed
        """
        messages = self.build_messages(user_text, past_context or [], file_context)

        try:
            response = self.llm_service.chat(messages, temperature=self.temperature)
            reply = response.content or self.fallback_response
        except Exception as e:
            logger.error(f"LLM error while answering user {author_id}: {e}")
            reply = self.fallback_response

        try:
            self.database.store_query(author_id, user_text, reply, source)
        except Exception as e:
            logger.error(f"Failed to log {source} query for user {author_id}: {e}")

        return reply
