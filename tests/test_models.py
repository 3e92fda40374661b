"""
Tests for the data model.
"""

from datetime import datetime

import pytest

from slack_assistant.models import SlackMessage, QueryRecord, ContextBundle


class TestSlackMessage:
    """Tests for SlackMessage."""

    def test_from_event(self):
        event = {
            "type": "message",
            "channel": "D1",
            "user": "U1",
            "text": "hi",
            "ts": "1.0",
            "thread_ts": "0.5",
            "channel_type": "im",
        }

        message = SlackMessage.from_event(event)

        assert message.ts == "1.0"
        assert message.thread_ts == "0.5"
        assert message.is_direct_message is True

    def test_channel_message_is_not_dm(self):
        message = SlackMessage.from_event(
            {"channel": "C1", "user": "U1", "text": "hi", "ts": "1.0", "channel_type": "channel"}
        )
        assert message.is_direct_message is False
        assert message.thread_ts is None


class TestQueryRecord:
    """Tests for QueryRecord."""

    def test_to_dict(self):
        record = QueryRecord(
            user_id="U1",
            user_message="Hello",
            bot_response="Hi there!",
            source="dashboard",
            timestamp=datetime(2024, 3, 14, 10, 0, 0),
        )

        assert record.to_dict() == {
            "user_message": "Hello",
            "bot_response": "Hi there!",
            "source": "dashboard",
            "timestamp": "2024-03-14T10:00:00",
        }

    def test_invalid_source(self):
        with pytest.raises(ValueError):
            QueryRecord(user_id="U1", user_message="q", bot_response="a", source="email")


class TestContextBundle:
    def test_empty_by_default(self):
        bundle = ContextBundle()
        assert bundle.past_context == []
        assert bundle.file_context == ""
        assert bundle.is_empty
