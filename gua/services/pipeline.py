"""Message pipeline - one outbound turn from optimistic append to settled reply.

States of a turn:

    COMPOSING -> OPTIMISTIC_APPENDED -> PERSISTING_USER_TURN -> AWAITING_COMPLETION
              -> PERSISTING_ASSISTANT_TURN -> SETTLED

A turn whose completion call fails, or whose writes did not all reach the
store, ends in ERRORED instead of SETTLED. The local timeline keeps every
optimistic entry either way, so ERRORED is also the signal that local and
durable state may have diverged. Nothing is retried automatically.
"""

import logging
from dataclasses import dataclass, field
from enum import Enum

from gua.core.errors import CompletionError, ConfigurationError, StoreError
from gua.models.conversation import PLACEHOLDER_TITLE
from gua.services.conversations import ConversationService
from gua.services.llm.base import BaseLLMProvider, Message
from gua.services.state import ChatState, TimelineEntry, TurnKind
from gua.services.store import ConversationStore

logger = logging.getLogger(__name__)

TITLE_MAX_CHARS = 30
ELLIPSIS = "..."
FALLBACK_REPLY = "Sorry, I'm having trouble connecting right now. Please try again."


class TurnState(str, Enum):
    COMPOSING = "composing"
    OPTIMISTIC_APPENDED = "optimistic_appended"
    PERSISTING_USER_TURN = "persisting_user_turn"
    AWAITING_COMPLETION = "awaiting_completion"
    PERSISTING_ASSISTANT_TURN = "persisting_assistant_turn"
    SETTLED = "settled"
    ERRORED = "errored"


@dataclass
class TurnResult:
    user_entry: TimelineEntry
    reply: TimelineEntry | None = None
    state: TurnState = TurnState.COMPOSING
    history: list[TurnState] = field(default_factory=lambda: [TurnState.COMPOSING])
    errors: list[str] = field(default_factory=list)

    def advance(self, state: TurnState) -> None:
        logger.debug(f"Turn {self.user_entry.id}: {self.state.value} -> {state.value}")
        self.state = state
        self.history.append(state)


def derive_title(text: str) -> str:
    """First 30 characters of the message, with an ellipsis when truncated."""
    if len(text) > TITLE_MAX_CHARS:
        return text[:TITLE_MAX_CHARS] + ELLIPSIS
    return text


def to_outbound_role(sender: str) -> str:
    return "user" if sender == "user" else "assistant"


class MessagePipeline:
    def __init__(
        self,
        state: ChatState,
        store: ConversationStore,
        completion: BaseLLMProvider,
        conversations: ConversationService,
    ):
        self.state = state
        self.store = store
        self.completion = completion
        self.conversations = conversations

    async def send_message(self, text: str, kind: TurnKind = TurnKind.CHAT) -> TurnResult | None:
        """Run one turn. Returns None when the turn is rejected before anything happens."""
        if kind == TurnKind.CHAT and not text.strip():
            return None
        if not self.state.user:
            logger.debug("Ignoring message: no signed-in user")
            return None
        if self.state.is_loading:
            logger.info("Ignoring message: another turn is still in flight")
            return None

        self.state.is_loading = True
        try:
            return await self._run_turn(text, kind)
        finally:
            self.state.is_loading = False

    async def post_notice(self, text: str, is_error: bool = True) -> TimelineEntry:
        """Show a synthetic assistant message that did not come from the completion service."""
        entry = self.state.append(
            TimelineEntry(text=text, sender="assistant", kind=TurnKind.NOTICE, is_error=is_error)
        )
        if self.state.current_conversation_id is not None:
            try:
                await self.store.append_message(self.state.current_conversation_id, text, "assistant")
            except StoreError as e:
                logger.error(f"Error saving notice: {e}")
        return entry

    async def _run_turn(self, text: str, kind: TurnKind) -> TurnResult:
        if self.state.current_conversation_id is None:
            await self.conversations.create_new_conversation()
        conversation_id = self.state.current_conversation_id
        user = self.state.user

        prior = list(self.state.timeline)
        user_entry = self.state.append(TimelineEntry(text=text, sender="user", kind=kind))
        result = TurnResult(user_entry=user_entry)
        result.advance(TurnState.OPTIMISTIC_APPENDED)

        result.advance(TurnState.PERSISTING_USER_TURN)
        await self._persist(result, conversation_id, text, "user")
        await self._derive_title_if_placeholder(result, conversation_id, text)

        outbound = [Message(role=to_outbound_role(e.sender), content=e.text) for e in prior]
        outbound.append(Message(role="user", content=text))

        result.advance(TurnState.AWAITING_COMPLETION)
        try:
            reply = await self.completion.complete(outbound)
        except (CompletionError, ConfigurationError) as e:
            logger.error(f"Error sending message: {e}")
            result.errors.append(str(e))
            result.reply = self._append_if_current(
                TimelineEntry(text=FALLBACK_REPLY, sender="assistant", is_error=True),
                conversation_id,
                user,
            )
            await self._persist(result, conversation_id, FALLBACK_REPLY, "assistant")
            result.advance(TurnState.ERRORED)
            return result

        result.reply = self._append_if_current(
            TimelineEntry(text=reply.content, sender="assistant"), conversation_id, user
        )
        result.advance(TurnState.PERSISTING_ASSISTANT_TURN)
        await self._persist(result, conversation_id, reply.content, "assistant")

        result.advance(TurnState.ERRORED if result.errors else TurnState.SETTLED)
        return result

    def _append_if_current(self, entry: TimelineEntry, conversation_id: int | None, user) -> TimelineEntry:
        """Append to the timeline only if it still shows the turn's conversation and user.

        The reply is persisted to its own conversation either way and shows up
        when that conversation is selected again.
        """
        if self.state.user is not user or self.state.current_conversation_id != conversation_id:
            logger.debug(f"Conversation {conversation_id} no longer selected, reply kept in store only")
            return entry
        return self.state.append(entry)

    async def _persist(self, result: TurnResult, conversation_id: int | None, content: str, sender: str) -> None:
        # Best effort: the optimistic timeline entry stays whatever happens here
        if conversation_id is None:
            result.errors.append(f"No conversation to save the {sender} message to")
            logger.error(f"Error saving message: no conversation selected for {sender} turn")
            return
        try:
            await self.store.append_message(conversation_id, content, sender)
        except StoreError as e:
            logger.error(f"Error saving message: {e}")
            result.errors.append(str(e))

    async def _derive_title_if_placeholder(self, result: TurnResult, conversation_id: int | None, text: str) -> None:
        if not text.strip():
            return
        conv = self.state.current_conversation()
        if conv is None or conv.id != conversation_id or conv.title != PLACEHOLDER_TITLE:
            return

        title = derive_title(text)
        try:
            await self.store.update_title(conv.id, title)  # type: ignore[arg-type]
        except StoreError as e:
            # Placeholder stays, so the next turn tries again
            logger.error(f"Error updating conversation title: {e}")
            result.errors.append(str(e))
            return

        conv.title = title
        await self.conversations.refresh()
