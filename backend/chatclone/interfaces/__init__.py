"""Abstract interfaces for infrastructure abstraction."""

from chatclone.interfaces.auth_provider import IAuthProvider
from chatclone.interfaces.chat_repository import IChatRepository
from chatclone.interfaces.chat_services import (
    ICodeReviewService,
    ICompletionService,
    IFileDescriptionService,
    IMemoryService,
    ITitleService,
    ITranscriptionService,
    IUploadService,
)
from chatclone.interfaces.llm_provider import ILLMProvider
from chatclone.interfaces.memory_repository import IMemoryRepository
from chatclone.interfaces.persistence_backend import IPersistenceBackend
from chatclone.interfaces.speech_provider import ISpeechToTextProvider
from chatclone.interfaces.storage_provider import IStorageProvider

__all__ = [
    "IChatRepository",
    "IMemoryRepository",
    "IPersistenceBackend",
    "ILLMProvider",
    "ISpeechToTextProvider",
    "IStorageProvider",
    "IAuthProvider",
    "ICompletionService",
    "ITitleService",
    "ICodeReviewService",
    "IFileDescriptionService",
    "IMemoryService",
    "ITranscriptionService",
    "IUploadService",
]
