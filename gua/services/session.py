"""Session manager - owns the signed-in identity in ChatState."""

import logging
from dataclasses import dataclass

from gua.core.errors import AuthError, StoreError
from gua.services.identity.base import BaseIdentityProvider, Credentials, User
from gua.services.state import ChatState
from gua.services.store import ConversationStore

logger = logging.getLogger(__name__)

CONFIRMATION_MESSAGE = "Check your email for the confirmation link!"


@dataclass
class SignUpResult:
    confirmation_pending: bool
    message: str


class SessionManager:
    def __init__(self, identity: BaseIdentityProvider, store: ConversationStore, state: ChatState):
        self.identity = identity
        self.store = store
        self.state = state

    async def check_session(self) -> User | None:
        user = await self.identity.get_session()
        if user:
            await self._activate(user)
        return user

    async def sign_in(self, credentials: Credentials) -> User:
        """Raises AuthError on invalid credentials; local state is left alone then."""
        user = await self.identity.sign_in_with_password(credentials.email, credentials.password)
        await self._activate(user)
        logger.info(f"Signed in as {user.email}")
        return user

    async def sign_up(self, credentials: Credentials) -> SignUpResult:
        user = await self.identity.sign_up(credentials.email, credentials.password, credentials.name)
        if user:
            return SignUpResult(confirmation_pending=True, message=CONFIRMATION_MESSAGE)
        return SignUpResult(confirmation_pending=False, message="Sign-up request sent.")

    async def sign_out(self) -> None:
        try:
            await self.identity.sign_out()
        except AuthError as e:
            logger.warning(f"Identity service sign-out failed, clearing local session anyway: {e}")
        self.state.clear()

    async def _activate(self, user: User) -> None:
        self.state.user = user
        try:
            await self.store.upsert_profile(user)
        except StoreError as e:
            logger.error(f"Error creating user profile: {e}")
