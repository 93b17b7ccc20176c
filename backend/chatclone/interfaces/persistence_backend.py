"""
Thread persistence backend interface.

The conversation store depends only on this capability; the concrete
backend (remote API or local file) is picked once per session.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Optional

from chatclone.models.chat import Thread


class IPersistenceBackend(ABC):
    """Abstract interface for thread persistence."""

    @abstractmethod
    async def load(self) -> list[Thread]:
        """
        Load persisted threads, most recently created first.
        """
        pass

    @abstractmethod
    async def create(self, thread: Thread) -> Optional[str]:
        """
        Persist a new thread.

        Returns:
            Backend-issued identifier, or None when the backend keys
            threads by their local id
        """
        pass

    @abstractmethod
    async def update(self, thread: Thread) -> None:
        """Save the current state of a thread."""
        pass

    @abstractmethod
    async def delete(self, thread: Thread) -> None:
        """Remove a thread."""
        pass
