"""
Client-side collaborator interfaces.

These are the request/response contracts the conversation core consumes.
Streaming services return an async iterator of raw response bytes. The
request is already sent, and HTTP failures raised, when open_*_stream returns.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import AsyncIterator, Optional

from chatclone.models.chat import ChatTurn, CompletionRequest, Upload
from chatclone.models.memory import MemorySnippet


class ICompletionService(ABC):
    """Streaming chat completion."""

    @abstractmethod
    async def open_completion_stream(self, request: CompletionRequest) -> AsyncIterator[bytes]:
        pass


class ITitleService(ABC):
    """Streaming title generation for a thread's first message."""

    @abstractmethod
    async def open_title_stream(self, turns: list[ChatTurn]) -> AsyncIterator[bytes]:
        pass


class ICodeReviewService(ABC):
    """Streaming review of a code snippet."""

    @abstractmethod
    async def open_code_review_stream(self, code: str, language: str) -> AsyncIterator[bytes]:
        pass


class IFileDescriptionService(ABC):
    """Text description of an uploaded attachment."""

    @abstractmethod
    async def describe(self, url: str, mime_type: str) -> str:
        """
        Describe an attachment.

        Args:
            url: Attachment URL
            mime_type: Attachment MIME type

        Returns:
            Caption, extracted text or a "not supported" notice
        """
        pass


class IMemoryService(ABC):
    """Per-user memory recall and write."""

    @abstractmethod
    async def recall(self, query: str, user_id: str) -> list[MemorySnippet]:
        """Return memory snippets relevant to query (empty on bad responses)."""
        pass

    @abstractmethod
    async def remember(self, turns: list[ChatTurn], user_id: str) -> None:
        """Store memories extracted from a (user, assistant) pair."""
        pass


class ITranscriptionService(ABC):
    """Speech-to-text."""

    @abstractmethod
    async def transcribe(self, audio: bytes, mime_type: str = "audio/webm", language: Optional[str] = None) -> str:
        pass


class IUploadService(ABC):
    """File upload storage."""

    @abstractmethod
    async def upload(self, data: bytes, name: str, mime_type: Optional[str] = None) -> Upload:
        pass

    @abstractmethod
    async def delete(self, uuid: str) -> None:
        pass
