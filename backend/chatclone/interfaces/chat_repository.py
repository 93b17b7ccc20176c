"""
Chat record repository interface.

Defines the contract for server-side thread persistence.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Optional

from chatclone.models.chat_record import ChatRecord, ChatRecordCreate, ChatRecordUpdate


class IChatRepository(ABC):
    """Abstract interface for chat record persistence."""

    @abstractmethod
    async def create(self, user_id: str, record: ChatRecordCreate) -> ChatRecord:
        """
        Create a chat record.

        Args:
            user_id: Owner user ID
            record: Record creation data

        Returns:
            Created record with its backend-issued id
        """
        pass

    @abstractmethod
    async def get(self, user_id: str, record_id: str) -> Optional[ChatRecord]:
        """Get a chat record by ID."""
        pass

    @abstractmethod
    async def list(self, user_id: str, limit: int = 100, offset: int = 0) -> list[ChatRecord]:
        """
        List chat records, most recently created first.

        Args:
            user_id: Owner user ID
            limit: Max records
            offset: Pagination offset
        """
        pass

    @abstractmethod
    async def update(self, user_id: str, record_id: str, update: ChatRecordUpdate) -> ChatRecord:
        """
        Replace a record's title and messages.

        Raises:
            NotFoundError: If the record does not exist
        """
        pass

    @abstractmethod
    async def delete(self, user_id: str, record_id: str) -> bool:
        """
        Delete a chat record.

        Returns:
            True if deleted, False if not found
        """
        pass
