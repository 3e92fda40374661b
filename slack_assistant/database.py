"""
Persistence Module

Relational storage for Slack messages, question/answer pairs and uploaded
file text, using SQLAlchemy so any supported database URL works
(SQLite for development, MySQL/PostgreSQL in production).

Tables:
- messages: every Slack message the bot has seen (upsert on slack_message_id)
- queries: append-only log of questions and answers
- uploaded_files: append-only text extracted from user uploads

All read operations return lists, empty when nothing matches.
"""

import logging
from datetime import datetime, timezone
from pathlib import Path
from typing import List, Optional

from sqlalchemy import Column, DateTime, Integer, String, Text, create_engine, select
from sqlalchemy.orm import declarative_base, sessionmaker
from sqlalchemy.pool import StaticPool

from config.settings import get_settings
from slack_assistant.models import (
    QUERY_SOURCES,
    QueryRecord,
    SlackMessage,
    UploadedFileRecord,
)

logger = logging.getLogger(__name__)

Base = declarative_base()


def utcnow() -> datetime:
    """Naive UTC timestamp, as stored in DateTime columns."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


class MessageRow(Base):
    __tablename__ = "messages"

    id = Column(Integer, primary_key=True, autoincrement=True)
    slack_message_id = Column(String(64), unique=True, nullable=False)
    channel = Column(String(64), nullable=False)
    user_id = Column(String(64))
    text = Column(Text, nullable=False)


class QueryRow(Base):
    __tablename__ = "queries"

    id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(String(64), nullable=False, index=True)
    user_message = Column(Text, nullable=False)
    bot_response = Column(Text, nullable=False)
    source = Column(String(16), nullable=False)
    timestamp = Column(DateTime, default=utcnow, nullable=False)


class UploadedFileRow(Base):
    __tablename__ = "uploaded_files"

    id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(String(64), nullable=False, index=True)
    file_name = Column(String(255), nullable=False)
    file_type = Column(String(128), nullable=False)
    file_content = Column(Text, nullable=False)
    uploaded_at = Column(DateTime, default=utcnow, nullable=False)


class Database:
    """
    Thin persistence client: parameterized inserts and selects, no business logic.

    Example:
        db = Database("sqlite:///./data/slack_assistant.db")
        db.init_schema()
        db.store_query("U123", "hi", "hello!", "dashboard")
        db.get_conversations("U123")
    """

    def __init__(self, url: Optional[str] = None, echo: Optional[bool] = None):
        """
        Initialize the database client.

        Args:
            url: SQLAlchemy database URL (default from config)
            echo: Log emitted SQL (default from config)
        """
        config = get_settings().database
        self.url = url or config.url
        echo = config.echo if echo is None else echo

        engine_kwargs = {"echo": echo}
        if self.url.startswith("sqlite"):
            # Sync FastAPI endpoints run in a worker thread pool
            engine_kwargs["connect_args"] = {"check_same_thread": False}
            if self.url in ("sqlite://", "sqlite:///:memory:"):
                engine_kwargs["poolclass"] = StaticPool

        self.engine = create_engine(self.url, **engine_kwargs)
        database_file = self.engine.url.database
        if self.url.startswith("sqlite") and database_file and database_file != ":memory:":
            Path(database_file).parent.mkdir(parents=True, exist_ok=True)

        self._session_factory = sessionmaker(
            bind=self.engine, autoflush=False, expire_on_commit=False
        )

        logger.info(f"Database initialized: {self.engine.url.render_as_string(hide_password=True)}")

    def init_schema(self) -> None:
        """Create missing tables."""
        Base.metadata.create_all(bind=self.engine)
        logger.info("Database schema ready")

    def store_message(self, message: SlackMessage) -> None:
        """Insert a Slack message, or update its text if already stored."""
        with self._session_factory() as session:
            row = session.execute(
                select(MessageRow).where(MessageRow.slack_message_id == message.ts)
            ).scalar_one_or_none()

            if row is None:
                session.add(MessageRow(
                    slack_message_id=message.ts,
                    channel=message.channel,
                    user_id=message.user,
                    text=message.text,
                ))
            else:
                row.text = message.text

            session.commit()

        logger.debug(f"Stored message {message.ts} from channel {message.channel}")

    def store_query(
        self,
        user_id: str,
        user_message: str,
        bot_response: str,
        source: str,
    ) -> None:
        """Append a question/answer pair."""
        if source not in QUERY_SOURCES:
            raise ValueError(f"Unknown query source: {source}")

        with self._session_factory() as session:
            session.add(QueryRow(
                user_id=user_id,
                user_message=user_message,
                bot_response=bot_response,
                source=source,
            ))
            session.commit()

        logger.debug(f"Logged {source} query for user {user_id}")

    def store_uploaded_file(
        self,
        user_id: str,
        file_name: str,
        file_type: str,
        file_content: str,
    ) -> None:
        """Append the extracted text of an uploaded file."""
        with self._session_factory() as session:
            session.add(UploadedFileRow(
                user_id=user_id,
                file_name=file_name,
                file_type=file_type,
                file_content=file_content,
            ))
            session.commit()

        logger.info(f"Stored uploaded file '{file_name}' for user {user_id}")

    def get_file_contents(self, user_id: str) -> List[str]:
        """Return the extracted text of every file the user uploaded, newest first."""
        with self._session_factory() as session:
            rows = session.execute(
                select(UploadedFileRow.file_content)
                .where(UploadedFileRow.user_id == user_id)
                .order_by(UploadedFileRow.uploaded_at.desc(), UploadedFileRow.id.desc())
            ).scalars().all()

        return list(rows)

    def get_uploaded_files(self, user_id: str) -> List[UploadedFileRecord]:
        """Return the user's uploaded file records, newest first."""
        with self._session_factory() as session:
            rows = session.execute(
                select(UploadedFileRow)
                .where(UploadedFileRow.user_id == user_id)
                .order_by(UploadedFileRow.uploaded_at.desc(), UploadedFileRow.id.desc())
            ).scalars().all()

            return [
                UploadedFileRecord(
                    user_id=row.user_id,
                    file_name=row.file_name,
                    file_type=row.file_type,
                    file_content=row.file_content,
                    uploaded_at=row.uploaded_at,
                )
                for row in rows
            ]

    def get_conversations(self, user_id: str) -> List[QueryRecord]:
        """Return the user's question/answer history, oldest first."""
        with self._session_factory() as session:
            rows = session.execute(
                select(QueryRow)
                .where(QueryRow.user_id == user_id)
                .order_by(QueryRow.timestamp.asc(), QueryRow.id.asc())
            ).scalars().all()

            return [
                QueryRecord(
                    user_id=row.user_id,
                    user_message=row.user_message,
                    bot_response=row.bot_response,
                    source=row.source,
                    timestamp=row.timestamp,
                )
                for row in rows
            ]
