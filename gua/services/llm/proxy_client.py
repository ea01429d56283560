"""Client side of the completion proxy: talks to our own backend's POST /chat."""

import logging

import httpx

from gua.core.config import settings
from gua.core.errors import CompletionError
from gua.services.llm.base import BaseLLMProvider, Message, extract_reply

logger = logging.getLogger(__name__)


class ProxyCompletionClient(BaseLLMProvider):
    """Sends the conversation to the backend relay. Holds no credentials."""

    def __init__(self, backend_url: str | None = None, timeout: float | None = None):
        self.backend_url = (backend_url or settings.backend_url).rstrip("/")
        self.timeout = timeout or settings.request_timeout

    async def complete(self, messages: list[Message]) -> Message:
        try:
            async with httpx.AsyncClient(timeout=self.timeout) as client:
                resp = await client.post(
                    f"{self.backend_url}/chat",
                    json={"messages": [m.to_dict() for m in messages]},
                )
        except httpx.HTTPError as e:
            raise CompletionError(f"Completion proxy unreachable: {e}") from e

        try:
            data = resp.json()
        except ValueError as e:
            raise CompletionError(f"Completion proxy returned {resp.status_code} with a non-JSON body") from e

        if resp.status_code >= 400:
            error = data.get("error") if isinstance(data, dict) else None
            raise CompletionError(error or f"Completion proxy returned {resp.status_code}")

        return Message(role="assistant", content=extract_reply(data))
