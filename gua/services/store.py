"""Durable per-user conversation store backed by SQLModel.

Every method is a coroutine so callers treat each read and write as a
suspension point. Any database failure is re-raised as StoreError.
"""

import logging
from datetime import datetime, timezone

from sqlalchemy import Engine
from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import Session, select

from gua.core.errors import StoreError
from gua.models.conversation import PLACEHOLDER_TITLE, ChatMessage, Conversation
from gua.models.profile import UserProfile
from gua.services.identity.base import User

logger = logging.getLogger(__name__)


class ConversationStore:
    def __init__(self, engine: Engine | None = None):
        if engine is None:
            from gua.core.database import engine as default_engine
            engine = default_engine
        self._engine = engine

    async def list_conversations(self, user_id: str) -> list[Conversation]:
        """Conversations owned by the user, most recently updated first."""
        try:
            with Session(self._engine) as session:
                return list(session.exec(
                    select(Conversation)
                    .where(Conversation.user_id == user_id)
                    .order_by(Conversation.updated_at.desc(), Conversation.id.desc())  # type: ignore
                ).all())
        except SQLAlchemyError as e:
            raise StoreError(f"Could not load conversations: {e}") from e

    async def create_conversation(self, user_id: str, title: str = PLACEHOLDER_TITLE) -> Conversation:
        """Insert a new row. Not idempotent: every call creates a conversation."""
        try:
            with Session(self._engine) as session:
                conv = Conversation(user_id=user_id, title=title)
                session.add(conv)
                session.commit()
                session.refresh(conv)
                logger.debug(f"Created conversation {conv.id} for user {user_id}")
                return conv
        except SQLAlchemyError as e:
            raise StoreError(f"Could not create conversation: {e}") from e

    async def update_title(self, conversation_id: int, new_title: str) -> None:
        try:
            with Session(self._engine) as session:
                conv = session.get(Conversation, conversation_id)
                if not conv:
                    raise StoreError(f"Conversation {conversation_id} not found")
                conv.title = new_title
                session.add(conv)
                session.commit()
        except SQLAlchemyError as e:
            raise StoreError(f"Could not update conversation title: {e}") from e

    async def delete_conversation(self, conversation_id: int) -> None:
        try:
            with Session(self._engine) as session:
                conv = session.get(Conversation, conversation_id)
                if not conv:
                    logger.debug(f"Delete: conversation {conversation_id} not found")
                    return

                # Delete messages first
                messages = session.exec(
                    select(ChatMessage).where(ChatMessage.conversation_id == conversation_id)
                ).all()
                for msg in messages:
                    session.delete(msg)

                session.delete(conv)
                session.commit()
                logger.debug(f"Deleted conversation {conversation_id}")
        except SQLAlchemyError as e:
            raise StoreError(f"Could not delete conversation: {e}") from e

    async def list_messages(self, conversation_id: int) -> list[ChatMessage]:
        """Messages of a conversation in ascending creation order."""
        try:
            with Session(self._engine) as session:
                return list(session.exec(
                    select(ChatMessage)
                    .where(ChatMessage.conversation_id == conversation_id)
                    .order_by(ChatMessage.created_at, ChatMessage.id)  # type: ignore
                ).all())
        except SQLAlchemyError as e:
            raise StoreError(f"Could not load messages: {e}") from e

    async def append_message(self, conversation_id: int, content: str, sender: str) -> None:
        """Insert a message, then touch the parent's updated_at.

        The message insert is what matters. A failed timestamp touch is logged
        and the message is kept.
        """
        try:
            with Session(self._engine) as session:
                session.add(ChatMessage(conversation_id=conversation_id, content=content, sender=sender))
                session.commit()
        except SQLAlchemyError as e:
            raise StoreError(f"Could not save message: {e}") from e

        try:
            self._touch_conversation(conversation_id)
        except SQLAlchemyError as e:
            logger.error(f"Saved message but could not touch conversation {conversation_id}: {e}")

    def _touch_conversation(self, conversation_id: int) -> None:
        with Session(self._engine) as session:
            conv = session.get(Conversation, conversation_id)
            if conv:
                conv.updated_at = datetime.now(timezone.utc)
                session.add(conv)
                session.commit()

    async def upsert_profile(self, user: User) -> None:
        """Create or refresh the profile row for a user. Safe to repeat."""
        try:
            with Session(self._engine) as session:
                profile = session.get(UserProfile, user.id)
                if profile is None:
                    profile = UserProfile(id=user.id, email=user.email, name=user.name)
                else:
                    profile.email = user.email
                    profile.name = user.name
                    profile.updated_at = datetime.now(timezone.utc)
                session.add(profile)
                session.commit()
        except SQLAlchemyError as e:
            raise StoreError(f"Could not save user profile: {e}") from e
