"""Abstract completion provider interface. All providers must implement this."""

from abc import ABC, abstractmethod
from dataclasses import asdict, dataclass
from typing import Any

from gua.core.errors import CompletionError


@dataclass
class Message:
    role: str  # "user" | "assistant" | "system"
    content: str

    def to_dict(self) -> dict[str, str]:
        return asdict(self)


def extract_reply(payload: Any) -> str:
    """Pull ``choices[0].message.content`` out of a chat completion payload."""
    try:
        content = payload["choices"][0]["message"]["content"]
    except (KeyError, IndexError, TypeError) as e:
        raise CompletionError(f"Malformed completion response: missing {e}") from e
    if not isinstance(content, str):
        raise CompletionError("Malformed completion response: content is not text")
    return content


class BaseLLMProvider(ABC):
    @abstractmethod
    async def complete(self, messages: list[Message]) -> Message:
        """Send an ordered message history and get the next assistant message.

        Raises CompletionError on any transport, HTTP or payload failure.
        """
        ...


class BaseUpstreamProvider(BaseLLMProvider):
    """A provider that talks to the completion vendor directly and can relay its raw payload."""

    @abstractmethod
    async def chat_completion(self, messages: list[Message]) -> dict[str, Any]:
        """Return the upstream response body unchanged."""
        ...

    async def complete(self, messages: list[Message]) -> Message:
        payload = await self.chat_completion(messages)
        return Message(role="assistant", content=extract_reply(payload))
