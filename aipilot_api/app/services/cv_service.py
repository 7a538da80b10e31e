"""
Plain text extraction from uploaded CVs.
"""

import io
import logging

import docx
import PyPDF2

from .exceptions import FileProcessingError, UnsupportedFileTypeError

logger = logging.getLogger(__name__)

DOCX_MIME = "application/vnd.openxmlformats-officedocument.wordprocessingml.document"
MSWORD_MIME = "application/msword"
PDF_MIME = "application/pdf"
TEXT_MIME = "text/plain"

SUPPORTED_MIME_TYPES = [DOCX_MIME, MSWORD_MIME, PDF_MIME, TEXT_MIME]

MAX_FILE_SIZE = 5 * 1024 * 1024  # 5MB


class CVService:
    """Turns PDF, Word and text files into plain text."""

    @staticmethod
    def _extract_pdf(data: bytes) -> str:
        reader = PyPDF2.PdfReader(io.BytesIO(data))
        return "\n".join((page.extract_text() or "") for page in reader.pages)

    @staticmethod
    def _extract_word(data: bytes) -> str:
        # python-docx reads the OOXML container only; legacy binary .doc
        # files sent as application/msword fail here.
        document = docx.Document(io.BytesIO(data))
        return "\n".join(paragraph.text for paragraph in document.paragraphs)

    @classmethod
    def extract_text(cls, data: bytes, mime_type: str) -> str:
        """Return the text content of ``data``.

        Raises ``UnsupportedFileTypeError`` for other MIME types and
        ``FileProcessingError`` if the document cannot be parsed.
        """
        if mime_type == PDF_MIME:
            try:
                return cls._extract_pdf(data)
            except Exception as e:
                logger.error("Error processing PDF: %s", e)
                raise FileProcessingError(f"PDF processing failed: {e}") from e
        if mime_type in (DOCX_MIME, MSWORD_MIME):
            try:
                return cls._extract_word(data)
            except Exception as e:
                logger.error("Error processing Word document: %s", e)
                raise FileProcessingError(f"Word document processing failed: {e}") from e
        if mime_type == TEXT_MIME:
            return data.decode("utf-8", errors="replace")
        raise UnsupportedFileTypeError(mime_type)
