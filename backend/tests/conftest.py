"""
Shared fixtures: in-memory fakes for the conversation core collaborators.
"""

from types import SimpleNamespace
from typing import AsyncIterator, Optional

import pytest

from chatclone.core.config import Settings
from chatclone.interfaces.chat_services import (
    ICodeReviewService,
    ICompletionService,
    IFileDescriptionService,
    IMemoryService,
    ITitleService,
)
from chatclone.interfaces.persistence_backend import IPersistenceBackend
from chatclone.models.chat import ChatTurn, CompletionRequest, Thread
from chatclone.models.memory import MemorySnippet
from chatclone.services.background import BackgroundTasks
from chatclone.services.conversation_store import ConversationStore
from chatclone.services.pending_submission import PendingSubmissionQueue
from chatclone.services.submission_orchestrator import SubmissionOrchestrator


async def byte_stream(*chunks) -> AsyncIterator[bytes]:
    for chunk in chunks:
        yield chunk.encode("utf-8") if isinstance(chunk, str) else chunk


class FakeCompletion(ICompletionService):
    def __init__(self, chunks=("Hello", " there")):
        self.chunks = list(chunks)
        self.error: Optional[Exception] = None
        self.requests: list[CompletionRequest] = []

    async def open_completion_stream(self, request):
        self.requests.append(request)
        if self.error:
            raise self.error
        return byte_stream(*self.chunks)


class FakeTitles(ITitleService):
    def __init__(self, chunks=('"Greeting', ' chat"')):
        self.chunks = list(chunks)
        self.error: Optional[Exception] = None
        self.calls: list[list[ChatTurn]] = []

    async def open_title_stream(self, turns):
        self.calls.append(turns)
        if self.error:
            raise self.error
        return byte_stream(*self.chunks)


class FakeCodeReview(ICodeReviewService):
    def __init__(self, chunks=("## Output\n", "42")):
        self.chunks = list(chunks)
        self.calls: list[tuple[str, str]] = []

    async def open_code_review_stream(self, code, language):
        self.calls.append((code, language))
        return byte_stream(*self.chunks)


class FakeFiles(IFileDescriptionService):
    """Describes by URL; values that are exceptions are raised."""

    def __init__(self):
        self.descriptions: dict = {}
        self.calls: list[tuple[str, str]] = []

    async def describe(self, url, mime_type):
        self.calls.append((url, mime_type))
        result = self.descriptions.get(url, f"description of {url}")
        if isinstance(result, Exception):
            raise result
        return result


class FakeMemory(IMemoryService):
    def __init__(self):
        self.snippets: list[MemorySnippet] = []
        self.recall_error: Optional[Exception] = None
        self.recall_calls: list[tuple[str, str]] = []
        self.remember_calls: list[tuple[list[ChatTurn], str]] = []

    async def recall(self, query, user_id):
        self.recall_calls.append((query, user_id))
        if self.recall_error:
            raise self.recall_error
        return self.snippets

    async def remember(self, turns, user_id):
        self.remember_calls.append((turns, user_id))


class InMemoryBackend(IPersistenceBackend):
    """Persistence backend that records calls and issues remote ids."""

    def __init__(self, issue_ids: bool = True):
        self.issue_ids = issue_ids
        self.threads: dict[str, Thread] = {}
        self.created: list[str] = []
        self.updates: list[Thread] = []
        self.deleted: list[str] = []
        self.fail = False
        self._counter = 0

    async def load(self):
        return sorted(self.threads.values(), key=lambda t: t.created_at, reverse=True)

    async def create(self, thread):
        if self.fail:
            raise RuntimeError("backend down")
        self._counter += 1
        self.created.append(thread.id)
        self.threads[thread.id] = thread
        return f"remote-{self._counter}" if self.issue_ids else None

    async def update(self, thread):
        if self.fail:
            raise RuntimeError("backend down")
        self.updates.append(thread)
        self.threads[thread.id] = thread

    async def delete(self, thread):
        if self.fail:
            raise RuntimeError("backend down")
        self.deleted.append(thread.id)
        self.threads.pop(thread.id, None)


@pytest.fixture
def settings():
    return Settings(_env_file=None, MAX_CONTEXT_TOKENS=6000, RESERVE_TOKENS=1000)


@pytest.fixture
def backend():
    return InMemoryBackend()


@pytest.fixture
def tasks():
    return BackgroundTasks()


@pytest.fixture
def store(backend, tasks):
    return ConversationStore(backend, tasks)


@pytest.fixture
def fakes():
    return SimpleNamespace(
        completion=FakeCompletion(),
        titles=FakeTitles(),
        files=FakeFiles(),
        memory=FakeMemory(),
        code_review=FakeCodeReview(),
    )


@pytest.fixture
def make_orchestrator(store, tasks, fakes, settings):
    """Build an orchestrator over the shared store, optionally for a signed-in user."""

    def factory(user_id: Optional[str] = None) -> SubmissionOrchestrator:
        pending = PendingSubmissionQueue(store, tasks)
        return SubmissionOrchestrator(
            store=store,
            pending=pending,
            completion=fakes.completion,
            titles=fakes.titles,
            files=fakes.files,
            memory=fakes.memory,
            tasks=tasks,
            settings=settings,
            user_id=user_id,
            code_review=fakes.code_review,
        )

    return factory
