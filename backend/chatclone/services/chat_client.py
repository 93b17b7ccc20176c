"""
Assembly of the conversation core for one session.
"""

from __future__ import annotations

from typing import Optional

import httpx

from chatclone.core.config import Settings, get_settings
from chatclone.core.logger import setup_logger
from chatclone.infrastructure.local.local_backend import LocalBackend
from chatclone.infrastructure.remote.api_client import ChatApiClient
from chatclone.infrastructure.remote.remote_backend import RemoteBackend
from chatclone.interfaces.persistence_backend import IPersistenceBackend
from chatclone.services.background import BackgroundTasks
from chatclone.services.conversation_store import ConversationStore
from chatclone.services.pending_submission import PendingSubmissionQueue
from chatclone.services.submission_orchestrator import SubmissionOrchestrator

logger = setup_logger(__name__)


class ChatClient:
    """Conversation store, orchestrator and API client for one session."""

    def __init__(
        self,
        api: ChatApiClient,
        backend: IPersistenceBackend,
        settings: Settings,
        user_id: Optional[str] = None,
    ):
        self.api = api
        self.backend = backend
        self.user_id = user_id
        self.tasks = BackgroundTasks()
        self.store = ConversationStore(backend, self.tasks)
        self.pending = PendingSubmissionQueue(self.store, self.tasks)
        self.orchestrator = SubmissionOrchestrator(
            store=self.store,
            pending=self.pending,
            completion=api,
            titles=api,
            files=api,
            memory=api,
            tasks=self.tasks,
            settings=settings,
            user_id=user_id,
            code_review=api,
        )

    async def load(self) -> None:
        await self.store.load()

    async def aclose(self) -> None:
        """Finish background work and close the HTTP client."""
        await self.tasks.drain()
        self.pending.close()
        await self.api.aclose()

    async def __aenter__(self) -> "ChatClient":
        await self.load()
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()


def create_chat_client(
    user_id: Optional[str] = None,
    token: Optional[str] = None,
    settings: Optional[Settings] = None,
    transport: Optional[httpx.AsyncBaseTransport] = None,
) -> ChatClient:
    """
    Build a chat client session.

    The persistence backend is picked once here: the server's chat records
    when a user is signed in, a local JSON file otherwise.

    Args:
        user_id: Signed-in user, or None for an anonymous session
        token: Bearer token (defaults to user_id, as accepted by mock auth)
        settings: Settings override
        transport: httpx transport override (used by tests)
    """
    settings = settings or get_settings()
    api = ChatApiClient(
        base_url=settings.API_BASE_URL,
        token=token or user_id,
        timeout=settings.CLIENT_TIMEOUT_SECONDS,
        transport=transport,
    )
    if user_id:
        backend: IPersistenceBackend = RemoteBackend(api)
        logger.info(f"Using remote chat persistence for user {user_id}")
    else:
        backend = LocalBackend(settings.LOCAL_STORE_PATH)
        logger.info(f"Using local chat persistence at {settings.LOCAL_STORE_PATH}")
    return ChatClient(api, backend, settings, user_id=user_id)
