"""
Conversation store.

In-memory collection of chat threads plus the active thread id. Every
change replaces whole Thread values (copy-on-write) and schedules a
background save through the session's persistence backend. Saves never
block or roll back a mutation.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Callable, Optional, Sequence

from chatclone.core.logger import setup_logger
from chatclone.interfaces.persistence_backend import IPersistenceBackend
from chatclone.models.chat import DEFAULT_THREAD_TITLE, Message, Thread, Upload
from chatclone.models.enums import MessageRole, MessageType
from chatclone.services.attachments import strip_attachment_block
from chatclone.services.background import BackgroundTasks

logger = setup_logger(__name__)

TITLE_MAX_CHARS = 30

Listener = Callable[[], None]


def derive_title(content: str) -> str:
    """Fallback title from a first user message."""
    text = " ".join(strip_attachment_block(content).split())
    if len(text) > TITLE_MAX_CHARS:
        return text[:TITLE_MAX_CHARS] + "..."
    return text


class ConversationStore:
    """Chat threads and the active selection for one session."""

    def __init__(self, backend: IPersistenceBackend, tasks: Optional[BackgroundTasks] = None):
        self._backend = backend
        self._tasks = tasks or BackgroundTasks()
        self._threads: tuple[Thread, ...] = ()
        self._active_id: Optional[str] = None
        self._listeners: list[Listener] = []
        self._saving: set[str] = set()
        self._dirty: set[str] = set()

    # ===========================================
    # Read access
    # ===========================================

    @property
    def threads(self) -> tuple[Thread, ...]:
        """Threads, most recently created first."""
        return self._threads

    @property
    def active_id(self) -> Optional[str]:
        return self._active_id

    @property
    def active_thread(self) -> Optional[Thread]:
        if self._active_id is None:
            return None
        return self.get_thread(self._active_id)

    def get_thread(self, thread_id: str) -> Optional[Thread]:
        for thread in self._threads:
            if thread.id == thread_id:
                return thread
        return None

    def find_message(self, message_id: str) -> Optional[tuple[Thread, int]]:
        """Locate a message in any thread; returns (thread, index)."""
        for thread in self._threads:
            for index, message in enumerate(thread.messages):
                if message.id == message_id:
                    return thread, index
        return None

    def search(self, query: str) -> list[Thread]:
        """Case-insensitive match on thread title or any message content."""
        needle = query.strip().lower()
        if not needle:
            return list(self._threads)
        return [
            thread
            for thread in self._threads
            if needle in thread.title.lower()
            or any(needle in m.content.lower() for m in thread.messages)
        ]

    # ===========================================
    # Change notification
    # ===========================================

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Register a listener called after every change; returns an unsubscribe callable."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _notify(self) -> None:
        for listener in list(self._listeners):
            try:
                listener()
            except Exception as e:
                logger.error(f"Store listener failed: {e}", exc_info=True)

    # ===========================================
    # Thread lifecycle
    # ===========================================

    async def load(self) -> None:
        """Rehydrate threads from the backend; the newest becomes active."""
        try:
            threads = await self._backend.load()
        except Exception as e:
            logger.warning(f"Failed to load threads: {e}")
            threads = []
        self._threads = tuple(threads)
        self._active_id = self._threads[0].id if self._threads else None
        logger.info(f"Loaded {len(self._threads)} threads")
        self._notify()

    def create_thread(self, reuse_empty: bool = False) -> str:
        """
        Create an empty thread at the front and make it active.

        The backend create runs in the background; when it resolves, the
        issued remote_id is attached without changing the local id.

        Args:
            reuse_empty: Select an existing thread with no messages instead
                of creating another one

        Returns:
            Local thread id
        """
        if reuse_empty:
            for thread in self._threads:
                if not thread.messages:
                    self.select_thread(thread.id)
                    return thread.id

        thread = Thread()
        self._threads = (thread, *self._threads)
        self._active_id = thread.id
        self._tasks.spawn(self._persist_new(thread.id), name=f"create-thread-{thread.id}")
        self._notify()
        return thread.id

    async def _persist_new(self, thread_id: str) -> None:
        thread = self.get_thread(thread_id)
        if thread is None:
            return
        try:
            remote_id = await self._backend.create(thread)
        except Exception as e:
            logger.warning(f"Failed to create thread {thread_id} in backend: {e}")
            return

        current = self.get_thread(thread_id)
        if current is None:
            # Deleted while the create was in flight.
            if remote_id:
                await self._delete_remote(thread.model_copy(update={"remote_id": remote_id}))
            return

        if remote_id:
            self._replace(thread_id, {"remote_id": remote_id}, touch=False)
        else:
            self._schedule_save(thread_id)

    def select_thread(self, thread_id: str) -> None:
        if self.get_thread(thread_id) is None:
            return
        self._active_id = thread_id
        self._notify()

    def delete_thread(self, thread_id: str) -> None:
        thread = self.get_thread(thread_id)
        if thread is None:
            return
        self._threads = tuple(t for t in self._threads if t.id != thread_id)
        if self._active_id == thread_id:
            self._active_id = self._threads[0].id if self._threads else None
        self._dirty.discard(thread_id)
        self._tasks.spawn(self._delete_remote(thread), name=f"delete-thread-{thread_id}")
        self._notify()

    async def _delete_remote(self, thread: Thread) -> None:
        try:
            await self._backend.delete(thread)
        except Exception as e:
            logger.warning(f"Failed to delete thread {thread.id} in backend: {e}")

    # ===========================================
    # Messages and titles
    # ===========================================

    def append_message(
        self,
        content: str,
        role: MessageRole,
        uploads: Sequence[Upload] = (),
        message_type: MessageType = MessageType.CHAT,
    ) -> str:
        """
        Append a message to the active thread.

        The first user message also sets the fallback title while the
        thread still has the default one.

        Returns:
            New message id, or "" when no thread is active
        """
        thread = self.active_thread
        if thread is None:
            return ""

        message = Message(role=role, content=content, uploads=list(uploads), message_type=message_type)
        update: dict[str, Any] = {"messages": [*thread.messages, message]}
        if (
            role == MessageRole.USER
            and thread.title == DEFAULT_THREAD_TITLE
            and not any(m.role == MessageRole.USER for m in thread.messages)
        ):
            title = derive_title(content)
            if title:
                update["title"] = title
        self._replace(thread.id, update)
        return message.id

    def update_message_content(self, message_id: str, content: str) -> bool:
        """Replace a message's content, searching every thread."""
        located = self.find_message(message_id)
        if located is None:
            logger.debug(f"Message {message_id} not found for content update")
            return False
        thread, index = located
        messages = list(thread.messages)
        messages[index] = messages[index].model_copy(update={"content": content})
        self._replace(thread.id, {"messages": messages})
        return True

    def update_thread_title(self, thread_id: str, title: str) -> None:
        if self.get_thread(thread_id) is None:
            return
        self._replace(thread_id, {"title": title})

    def truncate_messages(self, thread_id: str, index: int) -> None:
        """Keep only messages[:index] of a thread."""
        thread = self.get_thread(thread_id)
        if thread is None:
            return
        self._replace(thread_id, {"messages": list(thread.messages[: max(index, 0)])})

    # ===========================================
    # Persistence
    # ===========================================

    def _replace(self, thread_id: str, update: dict[str, Any], touch: bool = True) -> None:
        if touch:
            update = {**update, "updated_at": datetime.now(timezone.utc)}
        self._threads = tuple(
            t.model_copy(update=update) if t.id == thread_id else t for t in self._threads
        )
        self._schedule_save(thread_id)
        self._notify()

    def _schedule_save(self, thread_id: str) -> None:
        # One save loop per thread; changes made while it runs are picked up
        # by its next iteration.
        if thread_id in self._saving:
            self._dirty.add(thread_id)
            return
        self._saving.add(thread_id)
        self._tasks.spawn(self._save_loop(thread_id), name=f"save-thread-{thread_id}")

    async def _save_loop(self, thread_id: str) -> None:
        try:
            while True:
                self._dirty.discard(thread_id)
                thread = self.get_thread(thread_id)
                if thread is None:
                    return
                try:
                    await self._backend.update(thread)
                except Exception as e:
                    logger.warning(f"Failed to save thread {thread_id}: {e}")
                if thread_id not in self._dirty:
                    return
        finally:
            self._saving.discard(thread_id)

    async def drain(self) -> None:
        """Wait for outstanding background persistence."""
        await self._tasks.drain()
