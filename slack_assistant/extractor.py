"""
Document Extractor Module

Turns an uploaded file into plain text, dispatching on its declared
MIME type:
- application/pdf: page text via PyPDFLoader (pypdf), one page per line block
- text/plain: raw contents, UTF-8 with encoding detection as fallback
- text/csv: one line per row, field values joined by a single space;
  bytes that are not UTF-8 become U+FFFD

Anything else raises UnsupportedFileTypeError; callers must not store
a record for such files.
"""

import csv
import logging
from pathlib import Path
from typing import Union

from langchain_community.document_loaders import PyPDFLoader, TextLoader

logger = logging.getLogger(__name__)

PathLike = Union[str, Path]


class UnsupportedFileTypeError(ValueError):
    """Raised when a file's MIME type has no extractor."""

    def __init__(self, mime_type: str):
        self.mime_type = mime_type
        super().__init__(f"Unsupported file type: {mime_type}")


class DocumentExtractor:
    """
    Extracts plain text from uploaded files.

    Example:
        extractor = DocumentExtractor()
        if extractor.is_supported("text/csv"):
            text = extractor.extract("uploads/report.csv", "text/csv")
    """

    SUPPORTED_TYPES = {
        "application/pdf": "_extract_pdf",
        "text/plain": "_extract_text",
        "text/csv": "_extract_csv",
    }

    def is_supported(self, mime_type: str) -> bool:
        return mime_type in self.SUPPORTED_TYPES

    def extract(self, file_path: PathLike, mime_type: str) -> str:
        """
        Extract text from a file.

        Args:
            file_path: Path to the file on disk
            mime_type: Declared MIME type of the file

        Returns:
            Extracted plain text

        Raises:
            UnsupportedFileTypeError: If the MIME type is not supported
        """
        if not self.is_supported(mime_type):
            raise UnsupportedFileTypeError(mime_type)

        handler = getattr(self, self.SUPPORTED_TYPES[mime_type])
        text = handler(Path(file_path))

        logger.info(f"Extracted {len(text)} characters from {Path(file_path).name} ({mime_type})")
        return text

    def _extract_pdf(self, file_path: Path) -> str:
        pages = PyPDFLoader(str(file_path)).load()
        return "\n".join(page.page_content for page in pages)

    def _extract_text(self, file_path: Path) -> str:
        loader = TextLoader(str(file_path), encoding="utf-8", autodetect_encoding=True)
        try:
            documents = loader.load()
        except RuntimeError as e:
            # No detected encoding decodes cleanly
            logger.warning(f"{e}; decoding {file_path.name} with replacement characters")
            return file_path.read_text(encoding="utf-8", errors="replace")
        return "".join(doc.page_content for doc in documents)

    def _extract_csv(self, file_path: Path) -> str:
        lines = []
        with open(file_path, newline="", encoding="utf-8", errors="replace") as f:
            for row in csv.reader(f):
                if not row:
                    continue
                lines.append(" ".join(row) + "\n")
        return "".join(lines)
