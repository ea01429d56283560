import logging

from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse

from gua.core.config import settings
from gua.core.errors import IngestionError, UnsupportedDocumentType
from gua.services.extraction import SUPPORTED_TYPES, extract_text, normalize_content_type

router = APIRouter()
logger = logging.getLogger(__name__)


@router.post("/upload-document")
async def upload_document(request: Request):
    """Raw PDF or plain text body in, ``{message, extractedText}`` out."""
    content_type = normalize_content_type(request.headers.get("content-type"))
    if content_type not in SUPPORTED_TYPES:
        return JSONResponse({"error": "Unsupported file type."}, status_code=400)

    body = await request.body()
    if len(body) > settings.max_upload_bytes:
        size_mb = len(body) / (1024 * 1024)
        return JSONResponse(
            {"error": f"File size ({size_mb:.1f}MB) exceeds maximum allowed"},
            status_code=413,
        )

    try:
        extracted_text = extract_text(body, content_type)
    except UnsupportedDocumentType as e:
        return JSONResponse({"error": str(e)}, status_code=400)
    except IngestionError as e:
        logger.error(f"Error processing document: {e}")
        return JSONResponse({"error": f"Failed to process document: {e}"}, status_code=500)

    logger.info(f"Extracted text length: {len(extracted_text)}")
    return {
        "message": "File processed successfully!",
        "extractedText": extracted_text,
    }
