"""
Dependency injection for API endpoints.

This module provides FastAPI dependencies that inject the correct
infrastructure implementations based on environment configuration.
"""

from functools import lru_cache
from typing import Annotated

from fastapi import Depends, Header, HTTPException, status

from chatclone.core.config import Settings, get_settings
from chatclone.core.exceptions import AuthenticationError
from chatclone.interfaces.auth_provider import IAuthProvider, User
from chatclone.interfaces.chat_repository import IChatRepository
from chatclone.interfaces.llm_provider import ILLMProvider
from chatclone.interfaces.memory_repository import IMemoryRepository
from chatclone.interfaces.speech_provider import ISpeechToTextProvider
from chatclone.interfaces.storage_provider import IStorageProvider
from chatclone.services.chat_service import ChatService
from chatclone.services.file_service import FileService
from chatclone.services.memory_service import MemoryService

DEV_USER = User(id="dev_user", email="dev@example.com", display_name="Developer")


# ===========================================
# Repository Dependencies
# ===========================================


@lru_cache()
def get_chat_repository() -> IChatRepository:
    """Get chat record repository instance."""
    from chatclone.infrastructure.local.chat_repository import SqliteChatRepository
    return SqliteChatRepository()


@lru_cache()
def get_memory_repository() -> IMemoryRepository:
    """Get memory repository instance."""
    from chatclone.infrastructure.local.memory_repository import SqliteMemoryRepository
    return SqliteMemoryRepository()


# ===========================================
# Provider Dependencies
# ===========================================


@lru_cache()
def get_llm_provider() -> ILLMProvider:
    """
    Get LLM provider instance based on LLM_PROVIDER setting.

    Supports:
    - gemini-api: Gemini API (API Key)
    - litellm: LiteLLM (Groq, OpenAI, Bedrock, etc. with optional custom endpoint)
    """
    settings = get_settings()

    if settings.LLM_PROVIDER == "gemini-api":
        from chatclone.infrastructure.local.gemini_api_provider import GeminiAPIProvider
        return GeminiAPIProvider(settings.GEMINI_MODEL)

    from chatclone.infrastructure.local.litellm_provider import LiteLLMProvider
    return LiteLLMProvider(
        model_name=settings.LITELLM_MODEL,
        api_base=settings.LITELLM_API_BASE or None,
        api_key=settings.LITELLM_API_KEY or None,
    )


@lru_cache()
def get_auth_provider() -> IAuthProvider:
    """Get auth provider instance."""
    settings = get_settings()
    if settings.AUTH_PROVIDER == "oidc":
        from chatclone.infrastructure.auth.oidc_auth import OidcAuthProvider
        return OidcAuthProvider(settings)

    from chatclone.infrastructure.local.mock_auth import MockAuthProvider
    return MockAuthProvider(enabled=settings.AUTH_REQUIRED)


@lru_cache()
def get_storage_provider() -> IStorageProvider:
    """Get storage provider instance."""
    settings = get_settings()
    from chatclone.infrastructure.local.storage_provider import LocalStorageProvider
    return LocalStorageProvider(settings.STORAGE_BASE_PATH, f"{settings.BASE_URL}/storage")


@lru_cache()
def get_speech_provider() -> ISpeechToTextProvider:
    """Get speech-to-text provider instance based on SPEECH_PROVIDER."""
    settings = get_settings()
    if settings.SPEECH_PROVIDER == "whisper":
        from chatclone.infrastructure.local.whisper_provider import WhisperProvider
        return WhisperProvider(settings.WHISPER_MODEL_SIZE)

    from chatclone.infrastructure.local.litellm_speech_provider import LiteLLMSpeechProvider
    return LiteLLMSpeechProvider(
        model_name=settings.LITELLM_TRANSCRIPTION_MODEL,
        api_base=settings.LITELLM_API_BASE or None,
        api_key=settings.LITELLM_API_KEY or None,
    )


# ===========================================
# Service Dependencies
# ===========================================


def get_chat_service(
    llm_provider: Annotated[ILLMProvider, Depends(get_llm_provider)],
) -> ChatService:
    return ChatService(llm_provider)


def get_file_service(
    storage: Annotated[IStorageProvider, Depends(get_storage_provider)],
    llm_provider: Annotated[ILLMProvider, Depends(get_llm_provider)],
) -> FileService:
    return FileService(storage, llm_provider)


def get_memory_service(
    repo: Annotated[IMemoryRepository, Depends(get_memory_repository)],
    llm_provider: Annotated[ILLMProvider, Depends(get_llm_provider)],
) -> MemoryService:
    return MemoryService(repo, llm_provider)


# ===========================================
# User Authentication
# ===========================================


def _unauthorized(detail: str) -> HTTPException:
    return HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail=detail)


def bearer_token(authorization: str | None) -> str | None:
    """Token from an "Authorization: Bearer <token>" header, None when absent."""
    if not authorization:
        return None
    scheme, _, token = authorization.strip().partition(" ")
    token = token.strip()
    if scheme.lower() != "bearer" or not token or " " in token:
        raise _unauthorized("Invalid authorization header format")
    return token


async def get_current_user(
    authorization: Annotated[str | None, Header()] = None,
    auth_provider: IAuthProvider = Depends(get_auth_provider),
) -> User:
    """
    Resolve the calling user.

    With authentication disabled, requests without a token act as the
    development user; a token, when sent, still selects the user.
    """
    token = bearer_token(authorization)
    if token is None:
        if auth_provider.is_enabled():
            raise _unauthorized("Authorization header required")
        return DEV_USER
    try:
        return await auth_provider.verify_token(token)
    except AuthenticationError as e:
        raise _unauthorized(e.message)


# ===========================================
# Type Aliases for Dependency Injection
# ===========================================

AppSettings = Annotated[Settings, Depends(get_settings)]
ChatRepo = Annotated[IChatRepository, Depends(get_chat_repository)]
MemoryRepo = Annotated[IMemoryRepository, Depends(get_memory_repository)]
LLMProvider = Annotated[ILLMProvider, Depends(get_llm_provider)]
StorageProvider = Annotated[IStorageProvider, Depends(get_storage_provider)]
SpeechProvider = Annotated[ISpeechToTextProvider, Depends(get_speech_provider)]
ChatSvc = Annotated[ChatService, Depends(get_chat_service)]
FileSvc = Annotated[FileService, Depends(get_file_service)]
MemorySvc = Annotated[MemoryService, Depends(get_memory_service)]
CurrentUser = Annotated[User, Depends(get_current_user)]
