"""
Data Model

Plain dataclasses shared by the persistence layer, the vector store,
the Slack handlers and the HTTP API.
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import List, Optional, Dict, Any

SOURCE_SLACK = "slack"
SOURCE_DASHBOARD = "dashboard"
QUERY_SOURCES = (SOURCE_SLACK, SOURCE_DASHBOARD)


@dataclass(frozen=True)
class SlackMessage:
    """
    A message received from Slack.

    Attributes:
        ts: Slack message timestamp, unique per channel
        channel: Channel the message was posted in
        user: Author's user ID
        text: Message text
        thread_ts: Parent message timestamp when part of a thread
        subtype: Slack message subtype (bot_message, channel_join, ...)
        channel_type: "im" for direct messages, "channel" otherwise
    """

    ts: str
    channel: str
    user: Optional[str]
    text: str
    thread_ts: Optional[str] = None
    subtype: Optional[str] = None
    channel_type: Optional[str] = None

    @classmethod
    def from_event(cls, event: Dict[str, Any]) -> "SlackMessage":
        """Create a SlackMessage from a Slack `message` event payload."""
        return cls(
            ts=event["ts"],
            channel=event["channel"],
            user=event.get("user"),
            text=event.get("text") or "",
            thread_ts=event.get("thread_ts"),
            subtype=event.get("subtype"),
            channel_type=event.get("channel_type"),
        )

    @property
    def is_direct_message(self) -> bool:
        return self.channel_type == "im"


@dataclass
class QueryRecord:
    """One question/answer pair, tagged with where it came from."""

    user_id: str
    user_message: str
    bot_response: str
    source: str
    timestamp: Optional[datetime] = None

    def __post_init__(self):
        if self.source not in QUERY_SOURCES:
            raise ValueError(f"Unknown query source: {self.source}")

    def to_dict(self) -> Dict[str, Any]:
        """Convert to the shape returned by the conversations API."""
        return {
            "user_message": self.user_message,
            "bot_response": self.bot_response,
            "source": self.source,
            "timestamp": self.timestamp.isoformat() if self.timestamp else None,
        }


@dataclass
class UploadedFileRecord:
    """Text extracted from a file a user uploaded."""

    user_id: str
    file_name: str
    file_type: str
    file_content: str
    uploaded_at: Optional[datetime] = None


@dataclass
class VectorMatch:
    """A nearest-neighbour hit returned by the vector index."""

    id: str
    text: str
    channel: Optional[str] = None
    thread_ts: Optional[str] = None
    score: float = 0.0


@dataclass
class ContextBundle:
    """Past message texts plus uploaded-file text handed to the LLM."""

    past_context: List[str] = field(default_factory=list)
    file_context: str = ""

    @property
    def is_empty(self) -> bool:
        return not self.past_context and not self.file_context
