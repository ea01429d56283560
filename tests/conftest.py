"""Shared test fixtures for backend and client-core tests."""

from unittest.mock import patch

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.pool import StaticPool
from sqlmodel import SQLModel, create_engine

from gua.core.errors import AuthError, CompletionError
from gua.services.conversations import ConversationService
from gua.services.identity.base import BaseIdentityProvider, User
from gua.services.llm.base import BaseLLMProvider, Message
from gua.services.pipeline import MessagePipeline
from gua.services.state import ChatState
from gua.services.store import ConversationStore

# In-memory SQLite with StaticPool so all connections (including threads) share one DB
test_engine = create_engine(
    "sqlite://",
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)


@pytest.fixture(autouse=True)
def setup_test_db():
    """Create all tables before each test, drop after."""
    import gua.models  # noqa: F401 - register models
    SQLModel.metadata.create_all(test_engine)
    yield
    SQLModel.metadata.drop_all(test_engine)


@pytest.fixture
def engine():
    return test_engine


class FakeIdentityProvider(BaseIdentityProvider):
    """In-memory identity service with one registered account."""

    def __init__(self, user: User, password: str = "secret", signed_in: bool = False):
        self.user = user
        self.password = password
        self.signed_in = signed_in
        self.sign_out_calls = 0

    async def get_session(self) -> User | None:
        return self.user if self.signed_in else None

    async def sign_in_with_password(self, email: str, password: str) -> User:
        if email != self.user.email or password != self.password:
            raise AuthError("Invalid login credentials")
        self.signed_in = True
        return self.user

    async def sign_up(self, email: str, password: str, name: str = "") -> User | None:
        if email == self.user.email:
            raise AuthError("User already registered")
        return User(id="pending-user", email=email, metadata={"name": name})

    async def sign_out(self) -> None:
        self.sign_out_calls += 1
        self.signed_in = False


class FakeCompletion(BaseLLMProvider):
    """Records every outbound request and answers with a canned reply or failure."""

    def __init__(self, reply: str = "Hello from assistant", error: Exception | None = None):
        self.reply = reply
        self.error = error
        self.calls: list[list[Message]] = []
        self.on_call = None

    async def complete(self, messages: list[Message]) -> Message:
        self.calls.append(list(messages))
        if self.on_call:
            await self.on_call()
        if self.error:
            raise self.error
        return Message(role="assistant", content=self.reply)


@pytest.fixture
def user():
    return User(id="user-1", email="ada@example.com", metadata={"name": "Ada"})


@pytest.fixture
def identity(user):
    return FakeIdentityProvider(user)


@pytest.fixture
def store():
    return ConversationStore(test_engine)


@pytest.fixture
def state(user):
    return ChatState(user=user)


@pytest.fixture
def completion():
    return FakeCompletion()


@pytest.fixture
def failing_completion():
    return FakeCompletion(error=CompletionError("upstream down"))


@pytest.fixture
def conversations(state, store):
    return ConversationService(state, store)


@pytest.fixture
def pipeline(state, store, completion, conversations):
    return MessagePipeline(state, store, completion, conversations)


@pytest.fixture
def client():
    """FastAPI TestClient against the in-memory database."""
    with patch("gua.core.database.engine", test_engine):
        from gua.main import app

        with TestClient(app) as c:
            yield c
