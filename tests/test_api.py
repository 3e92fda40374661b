"""
Tests for the dashboard HTTP API.
"""

import pytest
from unittest.mock import Mock
from fastapi.testclient import TestClient

from slack_assistant.api import create_app
from slack_assistant.assistant import SlackAssistant
from slack_assistant.extractor import DocumentExtractor


@pytest.fixture
def assistant(database, mock_vector_store, mock_llm_service):
    return SlackAssistant(
        database=database,
        vector_store=mock_vector_store,
        llm_service=mock_llm_service,
    )


@pytest.fixture
def upload_dir(tmp_path):
    return tmp_path / "uploads"


@pytest.fixture
def client(assistant, upload_dir):
    return TestClient(create_app(assistant, upload_dir=upload_dir))


@pytest.fixture
def broken_client(upload_dir):
    assistant = Mock()
    assistant.answer.side_effect = RuntimeError("boom")
    assistant.conversations.side_effect = RuntimeError("boom")
    assistant.ingest_file.side_effect = RuntimeError("boom")
    assistant.extractor = DocumentExtractor()
    return TestClient(create_app(assistant, upload_dir=upload_dir))


class TestChat:
    """Tests for POST /api/chat."""

    def test_reply_and_single_dashboard_record(self, client, database, mock_vector_store):
        response = client.post("/api/chat", json={"userId": "U1", "message": "hello"})

        assert response.status_code == 200
        assert response.json() == {"response": "Generated response"}

        records = database.get_conversations("U1")
        assert len(records) == 1
        assert records[0].source == "dashboard"
        mock_vector_store.add_message.assert_not_called()

    @pytest.mark.parametrize("body", [{"userId": "U1"}, {"message": "hello"}, {"userId": "", "message": "hi"}])
    def test_missing_fields(self, client, body):
        response = client.post("/api/chat", json=body)

        assert response.status_code == 400
        assert response.json() == {"error": "User ID and message are required."}

    def test_numeric_user_id(self, client, database):
        response = client.post("/api/chat", json={"userId": 42, "message": "hi"})

        assert response.status_code == 200
        assert response.json() == {"response": "Generated response"}
        assert len(database.get_conversations("42")) == 1

    def test_malformed_json(self, client):
        response = client.post(
            "/api/chat",
            content=b"{not json",
            headers={"Content-Type": "application/json"},
        )

        assert response.status_code == 400
        assert response.json() == {"error": "User ID and message are required."}

    def test_non_string_message(self, client):
        response = client.post("/api/chat", json={"userId": "U1", "message": {"text": "hi"}})

        assert response.status_code == 400
        assert response.json() == {"error": "User ID and message are required."}

    def test_missing_body(self, client):
        response = client.post("/api/chat")

        assert response.status_code == 400
        assert response.json() == {"error": "User ID and message are required."}

    def test_internal_error(self, broken_client):
        response = broken_client.post("/api/chat", json={"userId": "U1", "message": "hello"})

        assert response.status_code == 500
        assert response.json() == {"error": "Failed to process message."}


class TestConversations:
    """Tests for GET /api/conversations."""

    def test_history_oldest_first(self, client, database):
        database.store_query("U1", "first", "one", "slack")
        database.store_query("U1", "second", "two", "dashboard")
        database.store_query("U2", "other", "three", "slack")

        response = client.get("/api/conversations", params={"userId": "U1"})

        assert response.status_code == 200
        conversations = response.json()["conversations"]
        assert [c["user_message"] for c in conversations] == ["first", "second"]
        assert set(conversations[0]) == {"user_message", "bot_response", "source", "timestamp"}
        assert conversations[1]["source"] == "dashboard"

    def test_unknown_user_empty(self, client):
        response = client.get("/api/conversations", params={"userId": "nobody"})

        assert response.status_code == 200
        assert response.json() == {"conversations": []}

    def test_missing_user(self, client):
        response = client.get("/api/conversations")

        assert response.status_code == 400
        assert response.json() == {"error": "User ID is required."}

    def test_internal_error(self, broken_client):
        response = broken_client.get("/api/conversations", params={"userId": "U1"})

        assert response.status_code == 500
        assert response.json() == {"error": "Failed to fetch conversations."}


class TestUpload:
    """Tests for POST /api/upload."""

    def test_text_file(self, client, database, upload_dir):
        response = client.post(
            "/api/upload",
            files={"file": ("notes.txt", b"remember the milk", "text/plain")},
            data={"userId": "U1"},
        )

        assert response.status_code == 200
        assert response.json() == {
            "message": "File uploaded successfully!",
            "extractedText": "remember the milk",
        }
        assert database.get_file_contents("U1") == ["remember the milk"]
        assert list(upload_dir.iterdir()) == []

    def test_csv_file(self, client, database):
        response = client.post(
            "/api/upload",
            files={"file": ("data.csv", b"a,b\nc,d\n", "text/csv")},
            data={"userId": "U1"},
        )

        assert response.status_code == 200
        assert response.json()["extractedText"] == "a b\nc d\n"

    def test_latin1_text_file(self, client):
        body = "Le caf\u00e9 est ouvert. Menu du jour: cr\u00eape et g\u00e2teau.\n".encode("latin-1")

        response = client.post(
            "/api/upload",
            files={"file": ("menu.txt", body, "text/plain")},
            data={"userId": "U1"},
        )

        assert response.status_code == 200
        assert "Menu du jour" in response.json()["extractedText"]

    def test_no_file(self, client):
        response = client.post("/api/upload", data={"userId": "U1"})

        assert response.status_code == 400
        assert response.json() == {"error": "No file uploaded."}

    def test_missing_user(self, client, database):
        response = client.post(
            "/api/upload",
            files={"file": ("notes.txt", b"text", "text/plain")},
        )

        assert response.status_code == 400
        assert response.json() == {"error": "User ID is required."}

    def test_unsupported_type(self, client, database):
        response = client.post(
            "/api/upload",
            files={"file": ("image.png", b"\x89PNG", "image/png")},
            data={"userId": "U1"},
        )

        assert response.status_code == 400
        assert response.json() == {"error": "Unsupported file type."}
        assert database.get_uploaded_files("U1") == []

    def test_internal_error(self, broken_client, upload_dir):
        response = broken_client.post(
            "/api/upload",
            files={"file": ("notes.txt", b"text", "text/plain")},
            data={"userId": "U1"},
        )

        assert response.status_code == 500
        assert response.json() == {"error": "Failed to process file."}
        assert list(upload_dir.iterdir()) == []


class TestSlackEvents:
    def test_not_mounted_without_handler(self, client):
        assert client.post("/slack/events", json={}).status_code in (404, 405)
