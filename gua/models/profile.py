"""User profile mirror of the identity service's user record."""

from datetime import datetime, timezone

from sqlmodel import Field, SQLModel


class UserProfile(SQLModel, table=True):
    __tablename__ = "user_profiles"

    id: str = Field(primary_key=True)  # identity provider's user id
    email: str
    name: str
    updated_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
