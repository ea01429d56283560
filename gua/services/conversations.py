"""Conversation list and selection management for the signed-in user."""

import logging

from gua.core.errors import StoreError
from gua.models.conversation import Conversation
from gua.services.state import ChatState, TimelineEntry
from gua.services.store import ConversationStore

logger = logging.getLogger(__name__)


class ConversationService:
    """Keeps ChatState's conversation list, selection and timeline in step with the store.

    Store failures are logged and leave the local state as it was (stale but usable).
    """

    def __init__(self, state: ChatState, store: ConversationStore):
        self.state = state
        self.store = store
        self._pending_selection: int | None = None

    async def refresh(self) -> list[Conversation]:
        """Reload the conversation list without changing the selection."""
        if not self.state.user:
            return []
        try:
            self.state.conversations = await self.store.list_conversations(self.state.user.id)
        except StoreError as e:
            logger.error(f"Error loading conversations: {e}")
        return self.state.conversations

    async def load_conversations(self) -> list[Conversation]:
        """List then select: pick the most recent conversation, or create the first one."""
        if not self.state.user:
            return []
        try:
            conversations = await self.store.list_conversations(self.state.user.id)
        except StoreError as e:
            logger.error(f"Error loading conversations: {e}")
            return self.state.conversations

        self.state.conversations = conversations
        if self.state.current_conversation_id is None:
            if not conversations:
                await self.create_new_conversation()
            else:
                await self.select_conversation(conversations[0].id)  # type: ignore[arg-type]
        return self.state.conversations

    async def create_new_conversation(self) -> Conversation | None:
        if not self.state.user:
            logger.debug("Cannot create a conversation without a signed-in user")
            return None
        try:
            conv = await self.store.create_conversation(self.state.user.id)
        except StoreError as e:
            logger.error(f"Error creating conversation: {e}")
            return None

        self._pending_selection = conv.id
        self.state.current_conversation_id = conv.id
        self.state.timeline = []
        self.state.conversations = [conv] + [c for c in self.state.conversations if c.id != conv.id]
        await self.refresh()
        return conv

    async def select_conversation(self, conversation_id: int) -> list[TimelineEntry]:
        """Make a conversation current and rebuild the timeline from the store.

        The selection only changes once its messages have loaded.
        """
        self._pending_selection = conversation_id
        user = self.state.user
        try:
            messages = await self.store.list_messages(conversation_id)
        except StoreError as e:
            logger.error(f"Error loading messages: {e}")
            return self.state.timeline

        # A newer selection or a sign-out may have happened while we were waiting on the store
        if self._pending_selection != conversation_id or self.state.user is not user:
            return self.state.timeline

        self.state.current_conversation_id = conversation_id
        self.state.timeline = [
            TimelineEntry(
                id=str(m.id),
                text=m.content,
                sender=m.sender,
                timestamp=m.created_at,
            )
            for m in messages
        ]
        return self.state.timeline

    async def delete_conversation(self, conversation_id: int) -> None:
        try:
            await self.store.delete_conversation(conversation_id)
        except StoreError as e:
            logger.error(f"Error deleting conversation: {e}")
            return

        if conversation_id == self.state.current_conversation_id:
            self._pending_selection = None
            self.state.current_conversation_id = None
            self.state.timeline = []

        await self.load_conversations()
