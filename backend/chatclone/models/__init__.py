"""Pydantic models (schemas) for the application."""

from chatclone.models.enums import FileKind, MessageRole, MessageType, SubmissionState
from chatclone.models.chat import (
    DEFAULT_THREAD_TITLE,
    ChatTurn,
    CompletionRequest,
    Message,
    PendingSubmission,
    SubmissionResult,
    Thread,
    Upload,
)
from chatclone.models.chat_record import ChatRecord, ChatRecordCreate, ChatRecordUpdate
from chatclone.models.file import FileDescription, FileDescriptionRequest
from chatclone.models.memory import Memory, MemoryCreate, MemorySearchResult, MemorySnippet

__all__ = [
    # Enums
    "FileKind",
    "MessageRole",
    "MessageType",
    "SubmissionState",
    # Chat
    "DEFAULT_THREAD_TITLE",
    "ChatTurn",
    "CompletionRequest",
    "Message",
    "PendingSubmission",
    "SubmissionResult",
    "Thread",
    "Upload",
    # Chat records
    "ChatRecord",
    "ChatRecordCreate",
    "ChatRecordUpdate",
    # Files
    "FileDescription",
    "FileDescriptionRequest",
    # Memory
    "Memory",
    "MemoryCreate",
    "MemorySearchResult",
    "MemorySnippet",
]
