"""
Remote persistence backend for authenticated sessions.

Threads are stored as chat records on the server; the record id becomes
the thread's remote_id.
"""

from __future__ import annotations

from typing import Optional

from chatclone.core.logger import setup_logger
from chatclone.infrastructure.remote.api_client import ChatApiClient
from chatclone.interfaces.persistence_backend import IPersistenceBackend
from chatclone.models.chat import Thread
from chatclone.models.chat_record import ChatRecord, ChatRecordCreate, ChatRecordUpdate

logger = setup_logger(__name__)


def record_to_thread(record: ChatRecord) -> Thread:
    return Thread(
        id=record.client_id,
        remote_id=record.id,
        title=record.title,
        messages=record.messages,
        created_at=record.created_at,
        updated_at=record.updated_at,
    )


class RemoteBackend(IPersistenceBackend):
    """Chat record CRUD through the server API."""

    def __init__(self, api: ChatApiClient):
        self._api = api

    async def load(self) -> list[Thread]:
        records = await self._api.list_chats()
        return [record_to_thread(r) for r in records]

    async def create(self, thread: Thread) -> Optional[str]:
        record = await self._api.create_chat(
            ChatRecordCreate(client_id=thread.id, title=thread.title, messages=thread.messages)
        )
        return record.id

    async def update(self, thread: Thread) -> None:
        if not thread.remote_id:
            logger.debug(f"Skipping save of thread {thread.id}: remote record not created yet")
            return
        await self._api.update_chat(
            thread.remote_id, ChatRecordUpdate(title=thread.title, messages=thread.messages)
        )

    async def delete(self, thread: Thread) -> None:
        if not thread.remote_id:
            return
        await self._api.delete_chat(thread.remote_id)
