"""
Dashboard HTTP API

FastAPI routes that let a web dashboard talk to the same assistant as
Slack does:

- POST /api/chat           {userId, message} -> {response}
- GET  /api/conversations  ?userId=          -> {conversations: [...]}
- POST /api/upload         multipart file + userId -> {message, extractedText}
- POST /slack/events       Slack Events API (when a bolt handler is given)

Errors are returned as {"error": "<message>"} with 400 for bad input and
500 for anything unexpected.
"""

import logging
import shutil
import uuid
from pathlib import Path
from typing import Optional, Union

from fastapi import FastAPI, File, Form, Request, UploadFile
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from config.settings import get_settings
from slack_assistant.assistant import SlackAssistant
from slack_assistant.extractor import UnsupportedFileTypeError
from slack_assistant.models import SOURCE_DASHBOARD

logger = logging.getLogger(__name__)


class ChatRequest(BaseModel):
    userId: Optional[Union[str, int]] = None
    message: Optional[str] = None


def error_response(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"error": message})


def create_app(
    assistant: SlackAssistant,
    slack_handler=None,
    upload_dir: Optional[Path] = None,
) -> FastAPI:
    """
    Build the FastAPI application.

    Args:
        assistant: Assistant shared with the Slack handlers
        slack_handler: slack_bolt SlackRequestHandler for /slack/events
        upload_dir: Directory for temporary uploads (default from config)

    Returns:
        FastAPI app
    """
    upload_dir = Path(upload_dir or get_settings().server.upload_dir)

    app = FastAPI(
        title="Slack Knowledge Assistant",
        version="0.1.0",
        description="Answers questions from Slack and the dashboard using past messages and uploaded files",
    )

    @app.exception_handler(RequestValidationError)
    async def validation_error(request: Request, exc: RequestValidationError):
        logger.warning(f"Rejected request to {request.url.path}: {exc.errors()}")
        if request.url.path == "/api/chat":
            return error_response(400, "User ID and message are required.")
        return error_response(400, "Invalid request.")

    @app.post("/api/chat")
    def chat(payload: Optional[ChatRequest] = None):
        user_id = "" if payload is None or payload.userId is None else str(payload.userId)
        if not user_id or not payload.message:
            return error_response(400, "User ID and message are required.")

        logger.info(f"API message from user {user_id}")

        try:
            reply = assistant.answer(
                payload.message,
                user_id,
                source=SOURCE_DASHBOARD,
            )
        except Exception as e:
            logger.error(f"API chat error: {e}")
            return error_response(500, "Failed to process message.")

        return {"response": reply}

    @app.get("/api/conversations")
    def conversations(userId: Optional[str] = None):
        if not userId:
            return error_response(400, "User ID is required.")

        logger.info(f"Fetching conversations for user {userId}")

        try:
            records = assistant.conversations(userId)
        except Exception as e:
            logger.error(f"API conversations error: {e}")
            return error_response(500, "Failed to fetch conversations.")

        return {"conversations": [record.to_dict() for record in records]}

    @app.post("/api/upload")
    def upload(
        file: Optional[UploadFile] = File(None),
        userId: Optional[str] = Form(None),
    ):
        if file is None or not file.filename:
            return error_response(400, "No file uploaded.")
        if not userId:
            return error_response(400, "User ID is required.")

        mime_type = file.content_type
        if not assistant.extractor.is_supported(mime_type):
            return error_response(400, "Unsupported file type.")

        logger.info(f"Processing file upload: {file.filename}")

        upload_dir.mkdir(parents=True, exist_ok=True)
        path = upload_dir / f"{uuid.uuid4().hex}_{Path(file.filename).name}"

        try:
            with open(path, "wb") as out:
                shutil.copyfileobj(file.file, out)

            text = assistant.ingest_file(path, userId, file.filename, mime_type)
        except UnsupportedFileTypeError:
            return error_response(400, "Unsupported file type.")
        except Exception as e:
            logger.error(f"File upload error: {e}")
            return error_response(500, "Failed to process file.")
        finally:
            path.unlink(missing_ok=True)

        return {"message": "File uploaded successfully!", "extractedText": text}

    if slack_handler is not None:
        @app.post("/slack/events")
        async def slack_events(request: Request):
            return await slack_handler.handle(request)

    return app
