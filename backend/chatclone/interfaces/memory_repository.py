"""
Memory repository interface.

Memories are short facts about a user, kept per user and searched by
free text when a chat message is sent.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from uuid import UUID

from chatclone.models.memory import Memory, MemoryCreate, MemorySearchResult


class IMemoryRepository(ABC):
    """Per-user memory persistence."""

    @abstractmethod
    async def create(self, user_id: str, memory: MemoryCreate) -> Memory:
        pass

    @abstractmethod
    async def list(self, user_id: str, limit: int = 100, offset: int = 0) -> list[Memory]:
        """Newest first."""
        pass

    @abstractmethod
    async def search(self, user_id: str, query: str, limit: int = 5) -> list[MemorySearchResult]:
        """
        Find the user's memories relevant to a chat message.

        Results below the repository's relevance threshold are dropped;
        the rest are ordered by score, highest first.
        """
        pass

    @abstractmethod
    async def delete(self, user_id: str, memory_id: UUID) -> bool:
        """Returns False when the memory does not exist for this user."""
        pass
