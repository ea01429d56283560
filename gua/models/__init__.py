from gua.models.conversation import ChatMessage, Conversation
from gua.models.profile import UserProfile

__all__ = ["ChatMessage", "Conversation", "UserProfile"]
