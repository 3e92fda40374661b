"""
Tests for the Document Extractor.
"""

import pytest
from unittest.mock import Mock, patch

from slack_assistant.extractor import DocumentExtractor, UnsupportedFileTypeError


@pytest.fixture
def extractor():
    return DocumentExtractor()


class TestSupportedTypes:
    def test_supported(self, extractor):
        assert extractor.is_supported("application/pdf")
        assert extractor.is_supported("text/plain")
        assert extractor.is_supported("text/csv")

    def test_unsupported(self, extractor):
        assert not extractor.is_supported("image/png")
        assert not extractor.is_supported(None)


class TestCSV:
    """CSV rows become space-joined lines."""

    def test_rows_space_joined(self, extractor, tmp_path):
        path = tmp_path / "data.csv"
        path.write_text("a,b\nc,d\n")

        assert extractor.extract(path, "text/csv") == "a b\n" + "c d\n"

    def test_quoted_fields(self, extractor, tmp_path):
        path = tmp_path / "data.csv"
        path.write_text('name,notes\n"Smith, J","likes tea"\n')

        assert extractor.extract(path, "text/csv") == "name notes\nSmith, J likes tea\n"

    def test_blank_lines_skipped(self, extractor, tmp_path):
        path = tmp_path / "data.csv"
        path.write_text("a,b\n\nc,d\n")

        assert extractor.extract(path, "text/csv") == "a b\nc d\n"

    def test_non_utf8_bytes_replaced(self, extractor, tmp_path):
        path = tmp_path / "export.csv"
        path.write_bytes("caf\u00e9,menu\n".encode("latin-1"))

        assert extractor.extract(path, "text/csv") == "caf\ufffd menu\n"

    def test_empty_file(self, extractor, tmp_path):
        path = tmp_path / "empty.csv"
        path.write_text("")

        assert extractor.extract(path, "text/csv") == ""


class TestPlainText:
    def test_raw_contents(self, extractor, tmp_path):
        path = tmp_path / "notes.txt"
        path.write_text("line one\nline two\n", encoding="utf-8")

        assert extractor.extract(path, "text/plain") == "line one\nline two\n"

    def test_latin1_detected(self, extractor, tmp_path):
        path = tmp_path / "menu.txt"
        path.write_bytes("Le caf\u00e9 est ouvert. Menu du jour: cr\u00eape et g\u00e2teau.\n".encode("latin-1"))

        text = extractor.extract(path, "text/plain")

        assert "Menu du jour" in text
        assert text.startswith("Le caf")

    @patch("slack_assistant.extractor.TextLoader")
    def test_undetectable_encoding_replaced(self, mock_loader_class, extractor, tmp_path):
        mock_loader_class.return_value.load.side_effect = RuntimeError("Error loading file")
        path = tmp_path / "notes.txt"
        path.write_bytes(b"caf\xe9 menu")

        assert extractor.extract(path, "text/plain") == "caf\ufffd menu"


class TestPDF:
    @patch("slack_assistant.extractor.PyPDFLoader")
    def test_pages_joined(self, mock_loader_class, extractor, tmp_path):
        mock_loader_class.return_value.load.return_value = [
            Mock(page_content="Page one"),
            Mock(page_content="Page two"),
        ]
        path = tmp_path / "doc.pdf"

        text = extractor.extract(path, "application/pdf")

        assert text == "Page one\nPage two"
        mock_loader_class.assert_called_once_with(str(path))


class TestUnsupported:
    def test_raises(self, extractor, tmp_path):
        path = tmp_path / "image.png"
        path.write_bytes(b"\x89PNG")

        with pytest.raises(UnsupportedFileTypeError) as exc_info:
            extractor.extract(path, "image/png")

        assert exc_info.value.mime_type == "image/png"
        assert isinstance(exc_info.value, ValueError)
