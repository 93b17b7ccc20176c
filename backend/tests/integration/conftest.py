"""
Integration fixtures: the FastAPI app with in-memory SQLite repositories,
temporary storage and a scripted LLM.
"""

import shutil
import tempfile
from typing import Optional

import httpx
import pytest
from sqlalchemy.ext.asyncio import async_sessionmaker, create_async_engine

from chatclone.api import deps
from chatclone.core.exceptions import LLMError
from chatclone.infrastructure.local.chat_repository import SqliteChatRepository
from chatclone.infrastructure.local.database import Base
from chatclone.infrastructure.local.memory_repository import SqliteMemoryRepository
from chatclone.infrastructure.local.mock_auth import MockAuthProvider
from chatclone.infrastructure.local.storage_provider import LocalStorageProvider
from chatclone.interfaces.llm_provider import ILLMProvider
from chatclone.interfaces.speech_provider import ISpeechToTextProvider
from chatclone.services.prompts import TITLE_SYSTEM_PROMPT
from main import create_app


class ScriptedLLM(ILLMProvider):
    """Streams fixed replies; title requests get their own reply."""

    def __init__(self):
        self.reply_chunks = ["Hello", " there", "!"]
        self.title_chunks = ['"Friendly', ' greeting"']
        self.extraction = "- Enjoys friendly greetings"
        self.caption = "A diagram of a sailing boat"
        self.fail_stream = False
        self.stream_calls: list[dict] = []

    def get_model_name(self) -> str:
        return "scripted"

    def supports_vision(self) -> bool:
        return True

    async def stream_completion(
        self,
        messages,
        system: Optional[str] = None,
        temperature: float = 0.7,
        max_tokens: int = 1000,
    ):
        self.stream_calls.append({"messages": messages, "system": system, "temperature": temperature})
        if self.fail_stream:
            raise LLMError("upstream unavailable")
        chunks = self.title_chunks if system == TITLE_SYSTEM_PROMPT else self.reply_chunks
        for chunk in chunks:
            yield chunk

    async def complete(self, messages, system=None, temperature=0.2, max_tokens=600) -> str:
        return self.extraction

    async def describe_image(self, image_bytes, mime_type, prompt, max_tokens=500) -> str:
        return self.caption


class ScriptedSpeech(ISpeechToTextProvider):
    def __init__(self):
        self.text = " hello world "
        self.error: Optional[Exception] = None
        self.calls: list[dict] = []

    async def transcribe_bytes(self, audio_bytes, content_type="audio/webm", language="en-US") -> str:
        self.calls.append({"audio": audio_bytes, "content_type": content_type, "language": language})
        if self.error:
            raise self.error
        return self.text

    def get_supported_formats(self) -> list[str]:
        return ["audio/webm", "audio/wav"]


@pytest.fixture
async def session_factory():
    engine = create_async_engine("sqlite+aiosqlite:///:memory:")
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield async_sessionmaker(engine, expire_on_commit=False)

    await engine.dispose()


@pytest.fixture
def storage():
    temp_dir = tempfile.mkdtemp()
    yield LocalStorageProvider(base_path=temp_dir)
    shutil.rmtree(temp_dir, ignore_errors=True)


@pytest.fixture
def llm():
    return ScriptedLLM()


@pytest.fixture
def speech():
    return ScriptedSpeech()


@pytest.fixture
def auth():
    return MockAuthProvider(enabled=False)


@pytest.fixture
def app(session_factory, storage, llm, speech, auth):
    application = create_app()
    chat_repo = SqliteChatRepository(session_factory)
    memory_repo = SqliteMemoryRepository(session_factory)
    application.dependency_overrides[deps.get_chat_repository] = lambda: chat_repo
    application.dependency_overrides[deps.get_memory_repository] = lambda: memory_repo
    application.dependency_overrides[deps.get_llm_provider] = lambda: llm
    application.dependency_overrides[deps.get_storage_provider] = lambda: storage
    application.dependency_overrides[deps.get_speech_provider] = lambda: speech
    application.dependency_overrides[deps.get_auth_provider] = lambda: auth
    return application


@pytest.fixture
async def client(app):
    async with httpx.AsyncClient(transport=httpx.ASGITransport(app=app), base_url="http://testserver") as http:
        yield http
