"""Document ingestion - send an uploaded file to the backend and get its text back."""

import logging
from pathlib import PurePath

import httpx

from gua.core.config import settings
from gua.core.errors import IngestionError, UnsupportedDocumentType

logger = logging.getLogger(__name__)

CONTENT_TYPES = {
    ".pdf": "application/pdf",
    ".txt": "text/plain",
}


def content_type_for(filename: str) -> str | None:
    """Map a file name to the content type the extraction service accepts."""
    return CONTENT_TYPES.get(PurePath(filename).suffix.lower())


def size_in_mb(size_bytes: int) -> str:
    return f"{size_bytes / 1024 / 1024:.2f}"


def format_document_message(filename: str, size_bytes: int, extracted_text: str) -> str:
    return f"Document: {filename} ({size_in_mb(size_bytes)} MB). Content: {extracted_text}"


class DocumentIngestion:
    def __init__(self, backend_url: str | None = None, timeout: float | None = None):
        self.backend_url = (backend_url or settings.backend_url).rstrip("/")
        self.timeout = timeout or settings.request_timeout

    async def ingest(self, file_bytes: bytes, filename: str) -> str:
        """Return the extracted text of a .pdf or .txt upload.

        Raises UnsupportedDocumentType without touching the network for other
        extensions, and IngestionError when extraction fails.
        """
        content_type = content_type_for(filename)
        if content_type is None:
            suffix = PurePath(filename).suffix or "(none)"
            raise UnsupportedDocumentType(
                f"Unsupported type: {filename} ({suffix}). Only .pdf and .txt documents can be read."
            )

        logger.debug(f"Uploading {filename} ({len(file_bytes)} bytes) as {content_type}")
        try:
            async with httpx.AsyncClient(timeout=self.timeout) as client:
                resp = await client.post(
                    f"{self.backend_url}/upload-document",
                    content=file_bytes,
                    headers={"Content-Type": content_type},
                )
        except httpx.HTTPError as e:
            raise IngestionError(f"Failed to process document {filename}: {e}") from e

        try:
            data = resp.json()
        except ValueError as e:
            raise IngestionError(f"Failed to process document {filename}: unreadable response") from e

        if resp.status_code >= 400:
            error = data.get("error") if isinstance(data, dict) else None
            raise IngestionError(f"Failed to process document {filename}: {error or resp.status_code}")

        text = data.get("extractedText") if isinstance(data, dict) else None
        if not isinstance(text, str):
            raise IngestionError(f"Failed to process document {filename}: no text returned")
        return text
