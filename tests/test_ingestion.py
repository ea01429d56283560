"""Tests for document ingestion on the client side."""

from unittest.mock import AsyncMock, MagicMock, patch

import httpx
import pytest

from gua.core.errors import IngestionError, UnsupportedDocumentType
from gua.services.ingestion import DocumentIngestion, content_type_for, format_document_message


def _mock_async_client(mock_client_cls, response=None, error=None):
    mock_client = AsyncMock()
    if error:
        mock_client.post.side_effect = error
    else:
        mock_client.post.return_value = response
    mock_client.__aenter__ = AsyncMock(return_value=mock_client)
    mock_client.__aexit__ = AsyncMock(return_value=False)
    mock_client_cls.return_value = mock_client
    return mock_client


def _response(status_code, payload):
    resp = MagicMock()
    resp.status_code = status_code
    resp.json.return_value = payload
    return resp


def test_content_type_dispatch():
    assert content_type_for("report.pdf") == "application/pdf"
    assert content_type_for("REPORT.PDF") == "application/pdf"
    assert content_type_for("notes.txt") == "text/plain"
    assert content_type_for("image.png") is None
    assert content_type_for("README") is None


def test_format_document_message():
    message = format_document_message("notes.txt", 1024 * 1024, "hello world")
    assert message == "Document: notes.txt (1.00 MB). Content: hello world"


@pytest.mark.asyncio
async def test_unsupported_type_makes_no_network_call():
    ingestion = DocumentIngestion(backend_url="http://fake:3001")
    with patch("gua.services.ingestion.httpx.AsyncClient") as mock_client_cls:
        with pytest.raises(UnsupportedDocumentType, match="Unsupported type"):
            await ingestion.ingest(b"\x89PNG", "image.png")
        mock_client_cls.assert_not_called()


@pytest.mark.asyncio
async def test_ingest_sends_raw_bytes_with_content_type():
    ingestion = DocumentIngestion(backend_url="http://fake:3001/")
    with patch("gua.services.ingestion.httpx.AsyncClient") as mock_client_cls:
        mock_client = _mock_async_client(
            mock_client_cls,
            _response(200, {"message": "File processed successfully!", "extractedText": "plain words"}),
        )
        text = await ingestion.ingest(b"plain words", "notes.txt")

    assert text == "plain words"
    args, kwargs = mock_client.post.call_args
    assert args[0] == "http://fake:3001/upload-document"
    assert kwargs["content"] == b"plain words"
    assert kwargs["headers"] == {"Content-Type": "text/plain"}


@pytest.mark.asyncio
async def test_ingest_reports_service_error():
    ingestion = DocumentIngestion(backend_url="http://fake:3001")
    with patch("gua.services.ingestion.httpx.AsyncClient") as mock_client_cls:
        _mock_async_client(mock_client_cls, _response(500, {"error": "Failed to process document: bad xref"}))
        with pytest.raises(IngestionError, match="bad xref"):
            await ingestion.ingest(b"%PDF-1.4", "broken.pdf")


@pytest.mark.asyncio
async def test_ingest_reports_transport_error():
    ingestion = DocumentIngestion(backend_url="http://fake:3001")
    with patch("gua.services.ingestion.httpx.AsyncClient") as mock_client_cls:
        _mock_async_client(mock_client_cls, error=httpx.ConnectError("refused"))
        with pytest.raises(IngestionError, match="refused"):
            await ingestion.ingest(b"text", "notes.txt")
