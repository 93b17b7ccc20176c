"""
Storage provider interface.

Defines the contract for uploaded file storage.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Optional


class IStorageProvider(ABC):
    """Abstract interface for file storage."""

    @abstractmethod
    async def upload(
        self,
        path: str,
        data: bytes,
        content_type: Optional[str] = None,
    ) -> str:
        """
        Store a file.

        Returns:
            Storage location of the file

        Raises:
            InfrastructureError: If the write fails
        """
        pass

    @abstractmethod
    async def download(self, path: str) -> bytes:
        """
        Read a file.

        Raises:
            NotFoundError: If the file does not exist
        """
        pass

    @abstractmethod
    async def delete(self, path: str) -> bool:
        """
        Delete a file.

        Returns:
            True if deleted, False if not found
        """
        pass

    @abstractmethod
    async def exists(self, path: str) -> bool:
        """Check if a file exists."""
        pass

    @abstractmethod
    def get_public_url(self, path: str) -> str:
        """Get a URL clients can fetch the file from."""
        pass
