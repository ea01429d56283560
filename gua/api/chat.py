"""Completion proxy - relays a message list upstream with the server's secret key."""

import logging
from typing import Literal

from fastapi import APIRouter
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from gua.core.errors import CompletionError, ConfigurationError
from gua.services.llm import get_llm_provider
from gua.services.llm.base import Message

router = APIRouter()
logger = logging.getLogger(__name__)


class ChatTurn(BaseModel):
    role: Literal["system", "user", "assistant"]
    content: str


class ChatRequest(BaseModel):
    messages: list[ChatTurn]


@router.post("/chat")
async def chat(body: ChatRequest):
    """Return the upstream completion payload verbatim, or ``{"error": ...}``."""
    messages = [Message(role=m.role, content=m.content) for m in body.messages]
    try:
        provider = get_llm_provider()
        return await provider.chat_completion(messages)
    except ConfigurationError as e:
        logger.error(f"Completion proxy misconfigured: {e}")
        return JSONResponse({"error": str(e)}, status_code=500)
    except CompletionError as e:
        logger.error(f"Error proxying message upstream: {e}")
        return JSONResponse({"error": str(e)}, status_code=502)
