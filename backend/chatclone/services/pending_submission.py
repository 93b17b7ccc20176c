"""
Single-slot queue for a submission made before any thread exists.
"""

from __future__ import annotations

from typing import Awaitable, Callable, Optional

from chatclone.core.logger import setup_logger
from chatclone.models.chat import PendingSubmission
from chatclone.services.background import BackgroundTasks
from chatclone.services.conversation_store import ConversationStore

logger = setup_logger(__name__)

Replay = Callable[[PendingSubmission], Awaitable[object]]


class PendingSubmissionQueue:
    """
    Holds at most one deferred submission.

    A second hold() before the slot flushes overwrites the first
    (last-write-wins). The slot is flushed once a thread is active, and is
    cleared before the replay is scheduled so it can run only once.
    """

    def __init__(self, store: ConversationStore, tasks: BackgroundTasks):
        self._store = store
        self._tasks = tasks
        self._slot: Optional[PendingSubmission] = None
        self._replay: Optional[Replay] = None
        self._unsubscribe = store.subscribe(self._on_store_change)

    def bind(self, replay: Replay) -> None:
        """Set the coroutine that re-runs a flushed submission."""
        self._replay = replay
        self._on_store_change()

    @property
    def pending(self) -> Optional[PendingSubmission]:
        return self._slot

    def hold(self, submission: PendingSubmission) -> None:
        if self._slot is not None:
            logger.info("Replacing pending submission that has not been sent yet")
        self._slot = submission

    def take(self) -> Optional[PendingSubmission]:
        submission, self._slot = self._slot, None
        return submission

    def close(self) -> None:
        self._unsubscribe()

    def _on_store_change(self) -> None:
        if self._slot is None or self._replay is None or self._store.active_id is None:
            return
        submission = self.take()
        self._tasks.spawn(self._replay(submission), name="pending-submission")
