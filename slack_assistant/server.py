"""
Server Module

Wires Slack, the dashboard API and the assistant into one process.

Usage:
    python -m slack_assistant.server
"""

import logging
import sys
from typing import Optional

import uvicorn
from fastapi import FastAPI
from slack_bolt import App
from slack_bolt.adapter.fastapi import SlackRequestHandler

from config.settings import Settings, get_settings
from slack_assistant.api import create_app
from slack_assistant.assistant import create_assistant
from slack_assistant.slack_bot import SlackBot, resolve_bot_identity

logger = logging.getLogger(__name__)


def configure_logging(level: str = "INFO") -> None:
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        handlers=[
            logging.StreamHandler(sys.stdout),
        ]
    )


def create_server(settings: Optional[Settings] = None) -> FastAPI:
    """
    Build the full application: bolt app, handlers and HTTP routes.

    Args:
        settings: Settings to use (default: environment)

    Returns:
        FastAPI app serving /slack/events and /api/*
    """
    settings = settings or get_settings()

    if not settings.slack.bot_token or not settings.slack.signing_secret:
        raise ValueError(
            "Slack credentials not provided. "
            "Set SLACK_BOT_TOKEN and SLACK_SIGNING_SECRET environment variables."
        )

    slack_app = App(
        token=settings.slack.bot_token,
        signing_secret=settings.slack.signing_secret,
    )

    assistant = create_assistant(settings, slack_client=slack_app.client)
    assistant.database.init_schema()
    settings.server.upload_dir.mkdir(parents=True, exist_ok=True)

    identity = resolve_bot_identity(slack_app.client)
    SlackBot(
        assistant,
        identity,
        bot_token=settings.slack.bot_token,
        upload_dir=settings.server.upload_dir,
    ).register(slack_app)

    return create_app(
        assistant,
        slack_handler=SlackRequestHandler(slack_app),
        upload_dir=settings.server.upload_dir,
    )


def main() -> None:
    settings = get_settings()
    configure_logging(settings.log_level)

    app = create_server(settings)

    logger.info(f"Slack bot & API starting on port {settings.server.port}")
    uvicorn.run(app, host=settings.server.host, port=settings.server.port)


if __name__ == "__main__":
    main()
