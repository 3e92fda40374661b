"""
Tests for the Response Generator.
"""

import pytest

from slack_assistant.models import SOURCE_DASHBOARD, SOURCE_SLACK
from slack_assistant.responder import ResponseGenerator


@pytest.fixture
def generator(mock_llm_service, database):
    return ResponseGenerator(
        llm_service=mock_llm_service,
        database=database,
        system_prompt="You are a helpful Slack assistant.",
        temperature=0.7,
        fallback_response="I'm sorry, but I couldn't process your request.",
    )


class TestBuildMessages:
    def test_layout(self, generator):
        messages = generator.build_messages("What now?", ["first", "second"], "file text")

        assert messages == [
            {"role": "system", "content": "You are a helpful Slack assistant."},
            {"role": "user", "content": "first"},
            {"role": "user", "content": "second"},
            {"role": "user", "content": "What now?"},
            {"role": "user", "content": "Relevant File Data: file text"},
        ]

    def test_no_file_context(self, generator):
        messages = generator.build_messages("hello", [])

        assert len(messages) == 2
        assert messages[-1] == {"role": "user", "content": "hello"}


class TestGenerate:
    def test_reply_and_record(self, generator, mock_llm_service, database):
        reply = generator.generate("hello", "U1", [], "", source=SOURCE_DASHBOARD)

        assert reply == "Generated response"
        mock_llm_service.chat.assert_called_once()
        assert mock_llm_service.chat.call_args.kwargs["temperature"] == 0.7

        records = database.get_conversations("U1")
        assert len(records) == 1
        assert records[0].user_message == "hello"
        assert records[0].bot_response == "Generated response"
        assert records[0].source == SOURCE_DASHBOARD

    def test_llm_failure_returns_apology(self, generator, mock_llm_service, database):
        mock_llm_service.chat.side_effect = RuntimeError("rate limited")

        reply = generator.generate("hello", "U1")

        assert reply == "I'm sorry, but I couldn't process your request."
        records = database.get_conversations("U1")
        assert len(records) == 1
        assert records[0].source == SOURCE_SLACK

    def test_store_failure_still_replies(self, mock_llm_service):
        from unittest.mock import Mock

        database = Mock()
        database.store_query.side_effect = RuntimeError("db down")
        generator = ResponseGenerator(mock_llm_service, database)

        assert generator.generate("hello", "U1") == "Generated response"
