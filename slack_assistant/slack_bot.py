"""
Slack Bot Module

Connects the assistant to Slack through slack_bolt.

Features:
- Stores every channel message and its embedding (searchable history)
- Replies to direct messages and to messages mentioning the bot
- Replies in-thread when the question was asked in a thread
- Extracts text from shared PDF / text / CSV files for later answers

The bot's own identity is resolved once at startup and handed to the
handlers, so mention detection never depends on startup timing.

Usage:
    app = App(token=..., signing_secret=...)
    identity = resolve_bot_identity(app.client)
    SlackBot(assistant, identity, bot_token=...).register(app)
"""

import logging
import uuid
from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Dict, Any, Callable

import httpx

from config.settings import get_settings
from slack_assistant.assistant import SlackAssistant
from slack_assistant.extractor import UnsupportedFileTypeError
from slack_assistant.models import SlackMessage

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class BotIdentity:
    """The bot's Slack user and bot IDs, as reported by auth.test."""

    user_id: Optional[str] = None
    bot_id: Optional[str] = None

    @property
    def mention_token(self) -> Optional[str]:
        if not self.user_id:
            return None
        return f"<@{self.user_id}>"

    def is_mentioned_in(self, text: str) -> bool:
        token = self.mention_token
        return bool(token and token in text)


def resolve_bot_identity(client) -> BotIdentity:
    """
    Ask Slack who the bot is.

    On failure the identity is empty: mention detection is disabled and
    only direct messages get replies.
    """
    try:
        response = client.auth_test()
    except Exception as e:
        logger.error(f"Error fetching bot user ID: {e}")
        return BotIdentity()

    identity = BotIdentity(user_id=response.get("user_id"), bot_id=response.get("bot_id"))
    logger.info(f"Bot user ID: {identity.user_id}")
    return identity


class SlackBot:
    """
    Slack event handlers backed by a SlackAssistant.

    Handlers:
    - message: store, then answer DMs and mentions
    - file_shared: download, extract and store file text
    """

    def __init__(
        self,
        assistant: SlackAssistant,
        identity: BotIdentity,
        bot_token: Optional[str] = None,
        upload_dir: Optional[Path] = None,
    ):
        """
        Initialize the handlers.

        Args:
            assistant: Assistant that stores and answers
            identity: The bot's resolved identity
            bot_token: Token used to download private files (default from config)
            upload_dir: Directory for temporary downloads (default from config)
        """
        settings = get_settings()

        self.assistant = assistant
        self.identity = identity
        self.bot_token = bot_token or settings.slack.bot_token
        self.upload_dir = Path(upload_dir or settings.server.upload_dir)

        logger.info("SlackBot initialized")

    def register(self, app) -> None:
        """Attach the handlers to a slack_bolt App."""

        @app.event("message")
        def on_message(event, say):
            self.handle_message(event, say)

        @app.event("file_shared")
        def on_file_shared(event, client):
            self.handle_file_shared(event, client)

        logger.info("Slack event handlers registered")

    def _is_own_echo(self, event: Dict[str, Any]) -> bool:
        if event.get("subtype") == "bot_message":
            return True
        if self.identity.user_id and event.get("user") == self.identity.user_id:
            return True
        return bool(self.identity.bot_id and event.get("bot_id") == self.identity.bot_id)

    def should_respond(self, message: SlackMessage) -> bool:
        return message.is_direct_message or self.identity.is_mentioned_in(message.text)

    def handle_message(self, event: Dict[str, Any], say: Callable) -> None:
        """Handle an inbound `message` event."""
        if not event.get("text"):
            return
        if self._is_own_echo(event):
            return

        message = SlackMessage.from_event(event)
        logger.info(f"New message in {message.channel} from {message.user}")

        self.assistant.ingest_message(message)

        if not self.should_respond(message):
            return

        reply = self.assistant.answer(
            message.text,
            message.user,
            channel=message.channel,
            thread_ts=message.thread_ts,
        )

        try:
            if message.thread_ts:
                say(text=reply, thread_ts=message.thread_ts)
            else:
                say(text=reply)
        except Exception as e:
            logger.error(f"Failed to send reply in {message.channel}: {e}")

    def handle_file_shared(self, event: Dict[str, Any], client) -> None:
        """Handle a `file_shared` event."""
        file_id = event.get("file_id")
        logger.info(f"File shared: {file_id}")

        try:
            info = client.files_info(file=file_id)
        except Exception as e:
            logger.error(f"Failed to retrieve file info for {file_id}: {e}")
            return

        file = (info.get("file") if info else None) or {}
        if not file:
            logger.error(f"No file info returned for {file_id}")
            return

        file_name = file.get("name") or f"file_{file_id}"
        mime_type = file.get("mimetype")
        user_id = file.get("user")
        url = file.get("url_private_download")

        if not self.assistant.extractor.is_supported(mime_type):
            logger.info(f"Skipping unsupported file type {mime_type} ({file_name})")
            return

        path = self.temp_path(file_name)
        try:
            self.download(url, path)
            self.assistant.ingest_file(path, user_id, file_name, mime_type)
            logger.info(f"File {file_name} processed and stored for user {user_id}")
        except UnsupportedFileTypeError:
            logger.info(f"Skipping unsupported file type {mime_type} ({file_name})")
        except Exception as e:
            logger.error(f"Error processing file {file_name}: {e}")
        finally:
            path.unlink(missing_ok=True)

    def temp_path(self, file_name: str) -> Path:
        """Per-event download path, so concurrent uploads never collide."""
        self.upload_dir.mkdir(parents=True, exist_ok=True)
        return self.upload_dir / f"{uuid.uuid4().hex}_{Path(file_name).name}"

    def download(self, url: str, path: Path) -> None:
        """Stream a private Slack file to disk."""
        headers = {"Authorization": f"Bearer {self.bot_token}"}
        with httpx.stream("GET", url, headers=headers, follow_redirects=True) as response:
            response.raise_for_status()
            with open(path, "wb") as f:
                for chunk in response.iter_bytes():
                    f.write(chunk)
