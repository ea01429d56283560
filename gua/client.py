"""Chat client - the user-facing actions of one signed-in session.

All components share a single ChatState owned here. A UI layer reads
``client.state`` and calls the coroutines below; nothing else mutates state.
"""

import logging

from gua.core.errors import IngestionError
from gua.models.conversation import Conversation
from gua.services.conversations import ConversationService
from gua.services.identity import get_identity_provider
from gua.services.identity.base import BaseIdentityProvider, Credentials, User
from gua.services.ingestion import DocumentIngestion, format_document_message, size_in_mb
from gua.services.llm.base import BaseLLMProvider
from gua.services.llm.proxy_client import ProxyCompletionClient
from gua.services.pipeline import MessagePipeline, TurnResult
from gua.services.session import SessionManager, SignUpResult
from gua.services.state import ChatState, TimelineEntry, TurnKind
from gua.services.store import ConversationStore

logger = logging.getLogger(__name__)

DEFAULT_IMAGE_PROMPT = "Generate a creative image"


class ChatClient:
    def __init__(
        self,
        identity: BaseIdentityProvider | None = None,
        store: ConversationStore | None = None,
        completion: BaseLLMProvider | None = None,
        ingestion: DocumentIngestion | None = None,
        state: ChatState | None = None,
    ):
        self.state = state or ChatState()
        self.store = store or ConversationStore()
        self.identity = identity or get_identity_provider()
        self.ingestion = ingestion or DocumentIngestion()

        self.session = SessionManager(self.identity, self.store, self.state)
        self.conversations = ConversationService(self.state, self.store)
        self.pipeline = MessagePipeline(
            self.state,
            self.store,
            completion or ProxyCompletionClient(),
            self.conversations,
        )

    # --- Session ---

    async def start(self) -> User | None:
        """Pick up an existing session and load its conversations."""
        user = await self.session.check_session()
        if user:
            await self.conversations.load_conversations()
        return user

    async def sign_in(self, email: str, password: str) -> User:
        user = await self.session.sign_in(Credentials(email=email, password=password))
        await self.conversations.load_conversations()
        return user

    async def sign_up(self, email: str, password: str, name: str = "") -> SignUpResult:
        return await self.session.sign_up(Credentials(email=email, password=password, name=name))

    async def sign_out(self) -> None:
        await self.session.sign_out()

    # --- Conversations ---

    async def new_conversation(self) -> Conversation | None:
        return await self.conversations.create_new_conversation()

    async def select_conversation(self, conversation_id: int) -> list[TimelineEntry]:
        return await self.conversations.select_conversation(conversation_id)

    async def delete_conversation(self, conversation_id: int) -> None:
        await self.conversations.delete_conversation(conversation_id)

    # --- Turns ---

    async def send_message(self, text: str) -> TurnResult | None:
        return await self.pipeline.send_message(text, TurnKind.CHAT)

    async def upload_file(self, filename: str, size_bytes: int) -> TurnResult | None:
        """Announce an uploaded file without reading it."""
        return await self.pipeline.send_message(
            f"Uploaded file: {filename} ({size_in_mb(size_bytes)} MB)", TurnKind.UPLOAD_FILE
        )

    async def request_image(self, prompt: str = "") -> TurnResult | None:
        prompt = prompt.strip() or DEFAULT_IMAGE_PROMPT
        return await self.pipeline.send_message(f"Generate image: {prompt}", TurnKind.GENERATE_IMAGE)

    async def upload_document(self, file_bytes: bytes, filename: str) -> TurnResult | TimelineEntry | None:
        """Extract a document's text and send it as a turn.

        Unsupported types and extraction failures come back as a single
        error notice in the timeline instead of an exception.
        """
        try:
            text = await self.ingestion.ingest(file_bytes, filename)
        except IngestionError as e:
            logger.warning(f"Document ingestion failed: {e}")
            return await self.pipeline.post_notice(str(e), is_error=True)

        message = format_document_message(filename, len(file_bytes), text)
        return await self.pipeline.send_message(message, TurnKind.DOCUMENT)
