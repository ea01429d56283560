"""DeepSeek chat completion provider. Runs server side only: it holds the API key."""

import logging
from typing import Any

import httpx

from gua.core.config import settings
from gua.core.errors import CompletionError, ConfigurationError
from gua.services.llm.base import BaseUpstreamProvider, Message

logger = logging.getLogger(__name__)


class DeepSeekProvider(BaseUpstreamProvider):
    def __init__(
        self,
        api_key: str | None = None,
        url: str | None = None,
        model: str | None = None,
        timeout: float | None = None,
    ):
        self._api_key = settings.deepseek_api_key if api_key is None else api_key
        self.url = url or settings.deepseek_url
        self.model = model or settings.deepseek_model
        self.timeout = timeout or settings.request_timeout

    def _headers(self) -> dict[str, str]:
        if not self._api_key:
            raise ConfigurationError("DeepSeek API key not configured on backend.")
        return {
            "Content-Type": "application/json",
            "Authorization": f"Bearer {self._api_key}",
        }

    async def chat_completion(self, messages: list[Message]) -> dict[str, Any]:
        """Forward the messages upstream and return the raw completion payload."""
        headers = self._headers()
        body = {
            "model": self.model,
            "messages": [m.to_dict() for m in messages],
            "stream": False,
        }
        logger.debug(f"Forwarding {len(messages)} messages to {self.model}")

        try:
            async with httpx.AsyncClient(timeout=self.timeout) as client:
                resp = await client.post(self.url, headers=headers, json=body)
        except httpx.HTTPError as e:
            raise CompletionError(f"DeepSeek request failed: {e}") from e

        if resp.status_code >= 400:
            raise CompletionError(
                f"DeepSeek API error: {resp.status_code} {resp.reason_phrase} - {_error_detail(resp)}"
            )

        try:
            return resp.json()
        except ValueError as e:
            raise CompletionError("DeepSeek returned a non-JSON response") from e


def _error_detail(resp: httpx.Response) -> str:
    try:
        data = resp.json()
    except ValueError:
        return "Unknown error"
    if isinstance(data, dict):
        error = data.get("error")
        if isinstance(error, dict):
            return error.get("message") or "Unknown error"
        return data.get("message") or error or "Unknown error"
    return "Unknown error"
