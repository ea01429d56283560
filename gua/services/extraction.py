"""Plain text extraction for uploaded documents.

PDFs are read with pypdf, one page after another. Plain text is decoded as UTF-8.
"""

import io
import logging

from pypdf import PdfReader
from pypdf.errors import PdfReadError

from gua.core.errors import IngestionError, UnsupportedDocumentType

logger = logging.getLogger(__name__)

PDF = "application/pdf"
PLAIN_TEXT = "text/plain"
SUPPORTED_TYPES = (PDF, PLAIN_TEXT)


def normalize_content_type(header: str | None) -> str:
    """Drop parameters such as ``; charset=utf-8`` from a Content-Type header."""
    return (header or "").split(";")[0].strip().lower()


def extract_pdf_text(data: bytes) -> str:
    try:
        reader = PdfReader(io.BytesIO(data))
        pages = list(reader.pages)
    except PdfReadError as e:
        raise IngestionError(f"Corrupt or invalid PDF: {e}") from e
    except Exception as e:
        raise IngestionError(f"Failed to read PDF: {e}") from e

    text_parts: list[str] = []
    for i, page in enumerate(pages):
        try:
            page_text = page.extract_text()
        except Exception as e:
            logger.warning(f"Failed to extract text from page {i + 1}: {e}")
            continue
        if page_text:
            text_parts.append(page_text)

    text = "\n\n".join(text_parts)
    if not text.strip():
        logger.warning("PDF contains no extractable text (may be scanned/image-based)")
    return text


def extract_text(data: bytes, content_type: str) -> str:
    content_type = normalize_content_type(content_type)
    if content_type == PDF:
        return extract_pdf_text(data)
    if content_type == PLAIN_TEXT:
        try:
            return data.decode("utf-8")
        except UnicodeDecodeError as e:
            raise IngestionError("File is not valid UTF-8 text") from e
    raise UnsupportedDocumentType("Unsupported file type.")
