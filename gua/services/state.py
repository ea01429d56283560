"""Explicit client-side application state shared by the session, conversation and pipeline services."""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from uuid import uuid4

from gua.models.conversation import Conversation
from gua.services.identity.base import User


class TurnKind(str, Enum):
    CHAT = "chat"
    UPLOAD_FILE = "upload_file"
    GENERATE_IMAGE = "generate_image"
    DOCUMENT = "document"
    NOTICE = "notice"


@dataclass
class TimelineEntry:
    text: str
    sender: str  # "user" | "assistant"
    kind: TurnKind = TurnKind.CHAT
    is_error: bool = False  # local only, never persisted
    id: str = field(default_factory=lambda: uuid4().hex)
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))


@dataclass
class ChatState:
    user: User | None = None
    conversations: list[Conversation] = field(default_factory=list)
    current_conversation_id: int | None = None
    timeline: list[TimelineEntry] = field(default_factory=list)
    is_loading: bool = False

    def current_conversation(self) -> Conversation | None:
        for conv in self.conversations:
            if conv.id == self.current_conversation_id:
                return conv
        return None

    def append(self, entry: TimelineEntry) -> TimelineEntry:
        self.timeline.append(entry)
        return entry

    def clear(self) -> None:
        """Forget everything local. Durable data is untouched."""
        self.user = None
        self.conversations = []
        self.current_conversation_id = None
        self.timeline = []
        self.is_loading = False
