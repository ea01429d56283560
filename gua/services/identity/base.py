"""Abstract identity provider interface. The core never handles tokens itself."""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any


@dataclass
class User:
    id: str
    email: str
    metadata: dict[str, Any] = field(default_factory=dict)

    @property
    def name(self) -> str:
        return self.metadata.get("name") or self.email.split("@")[0]


@dataclass
class Credentials:
    email: str
    password: str
    name: str = ""


class BaseIdentityProvider(ABC):
    @abstractmethod
    async def get_session(self) -> User | None:
        """Return the user of the current valid session, or None."""
        ...

    @abstractmethod
    async def sign_in_with_password(self, email: str, password: str) -> User:
        """Start a session. Raises AuthError on invalid credentials or an unusable identity service."""
        ...

    @abstractmethod
    async def sign_up(self, email: str, password: str, name: str = "") -> User | None:
        """Register a user. Returns the pending user, if the service reports one."""
        ...

    @abstractmethod
    async def sign_out(self) -> None:
        ...
