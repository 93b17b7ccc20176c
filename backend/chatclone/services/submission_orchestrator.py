"""
Submission orchestrator.

Runs the send / edit / regenerate workflows against the conversation
store: describe attachments, append the user message and an empty
assistant placeholder, recall memory, stream the reply into the
placeholder and launch post-processing (memory write, title) in the
background.
"""

from __future__ import annotations

import asyncio
from typing import Optional, Sequence

from chatclone.core.config import Settings, get_settings
from chatclone.core.logger import setup_logger
from chatclone.interfaces.chat_services import (
    ICodeReviewService,
    ICompletionService,
    IFileDescriptionService,
    IMemoryService,
    ITitleService,
)
from chatclone.models.chat import (
    ChatTurn,
    CompletionRequest,
    Message,
    PendingSubmission,
    SubmissionResult,
    Upload,
)
from chatclone.models.enums import MessageRole, MessageType, SubmissionState
from chatclone.services.attachments import build_attachment_block
from chatclone.services.background import BackgroundTasks
from chatclone.services.context_window import context_budget, select_context
from chatclone.services.conversation_store import ConversationStore
from chatclone.services.pending_submission import PendingSubmissionQueue
from chatclone.services.stream_relay import relay_stream

logger = setup_logger(__name__)

EMPTY_RESPONSE_MESSAGE = "I apologize, but I encountered an error processing your request."
ERROR_RESPONSE_MESSAGE = (
    "I apologize, but I encountered an error processing your request. Please try again."
)

_QUOTES = str.maketrans("", "", "\"'")


def clean_title(text: str) -> str:
    """Strip quote characters from streamed title text."""
    return text.translate(_QUOTES).strip()


def to_turns(messages: Sequence[Message]) -> list[ChatTurn]:
    """Completion turns for messages that have content."""
    return [ChatTurn(role=m.role, content=m.content) for m in messages if m.content]


def displayed(reply: Optional[str]) -> str:
    """Text left in the assistant message for a relayed reply (None: request failed)."""
    if reply is None:
        return ERROR_RESPONSE_MESSAGE
    return reply or EMPTY_RESPONSE_MESSAGE


class SubmissionOrchestrator:
    """Top-level chat workflow for one session."""

    def __init__(
        self,
        store: ConversationStore,
        pending: PendingSubmissionQueue,
        completion: ICompletionService,
        titles: ITitleService,
        files: IFileDescriptionService,
        memory: IMemoryService,
        tasks: BackgroundTasks,
        settings: Optional[Settings] = None,
        user_id: Optional[str] = None,
        code_review: Optional[ICodeReviewService] = None,
    ):
        self._store = store
        self._pending = pending
        self._completion = completion
        self._titles = titles
        self._files = files
        self._memory = memory
        self._code_review = code_review
        self._tasks = tasks
        self._settings = settings or get_settings()
        self._user_id = user_id
        self._state = SubmissionState.IDLE
        self._active_runs = 0
        pending.bind(self._replay_pending)

    @property
    def state(self) -> SubmissionState:
        return self._state

    @property
    def busy(self) -> bool:
        """True while any submission is between validation and its reply."""
        return self._active_runs > 0

    def _enter(self) -> None:
        self._active_runs += 1

    def _leave(self) -> None:
        self._active_runs -= 1
        if self._active_runs == 0:
            self._state = SubmissionState.IDLE

    # ===========================================
    # Send
    # ===========================================

    async def submit(self, text: str, uploads: Sequence[Upload] = ()) -> Optional[SubmissionResult]:
        """
        Send a user message and stream the assistant reply.

        Args:
            text: Typed message text
            uploads: Attachments, in the order they were added

        Returns:
            The submission result, or None when the submission was empty or
            deferred until a thread exists
        """
        uploads = list(uploads)
        if not text.strip() and not uploads:
            return None

        if self._store.active_id is None:
            self._pending.hold(PendingSubmission(text=text, uploads=uploads))
            self._store.create_thread()
            return None

        self._enter()
        try:
            return await self._run_submission(text, uploads)
        finally:
            self._leave()

    async def _replay_pending(self, submission: PendingSubmission) -> Optional[SubmissionResult]:
        logger.info("Sending submission held until a thread was available")
        return await self.submit(submission.text, submission.uploads)

    async def _run_submission(self, text: str, uploads: list[Upload]) -> Optional[SubmissionResult]:
        self._state = SubmissionState.ATTACHMENT_PROCESSING
        block = await self._describe_attachments(uploads)
        user_content = block + text

        thread = self._store.active_thread
        if thread is None:
            logger.warning("Active thread disappeared before the message was appended")
            return None
        history = list(thread.messages)

        user_message_id = self._store.append_message(user_content, MessageRole.USER, uploads)
        assistant_id = self._store.append_message("", MessageRole.ASSISTANT)

        turns = to_turns(history) + [ChatTurn(role=MessageRole.USER, content=user_content)]
        reply = await self._respond(assistant_id, user_content, turns, temperature=None)

        if reply is not None:
            self._state = SubmissionState.POST_PROCESSING
            self._post_process(thread.id, len(history), user_content, reply)

        return SubmissionResult(
            thread_id=thread.id,
            user_message_id=user_message_id,
            assistant_message_id=assistant_id,
            content=displayed(reply),
        )

    async def _describe_attachments(self, uploads: list[Upload]) -> str:
        if not uploads:
            return ""
        results = await asyncio.gather(
            *(self._files.describe(u.url, u.mime_type) for u in uploads),
            return_exceptions=True,
        )
        return build_attachment_block(uploads, results)

    # ===========================================
    # Edit and regenerate
    # ===========================================

    async def edit(self, message_id: str, text: str) -> Optional[SubmissionResult]:
        """
        Replace a user message and everything after it with a new exchange.

        The active thread is truncated to the messages before the edited one,
        then the edited text is resubmitted with the original attachments.
        """
        thread = self._store.active_thread
        if thread is None:
            return None
        index = next((i for i, m in enumerate(thread.messages) if m.id == message_id), None)
        if index is None or thread.messages[index].role != MessageRole.USER:
            logger.warning(f"Cannot edit message {message_id}: not a user message in the active thread")
            return None

        uploads = list(thread.messages[index].uploads)
        if not text.strip() and not uploads:
            return None

        self._store.truncate_messages(thread.id, index)
        return await self.submit(text, uploads)

    async def regenerate(
        self,
        assistant_message_id: str,
        temperature: Optional[float] = None,
    ) -> Optional[SubmissionResult]:
        """
        Re-stream an assistant reply in place.

        Context is everything strictly before the assistant message; the
        message keeps its id. Post-processing is not repeated.
        """
        located = self._store.find_message(assistant_message_id)
        if located is None:
            logger.warning(f"Cannot regenerate unknown message {assistant_message_id}")
            return None
        thread, index = located
        if thread.messages[index].role != MessageRole.ASSISTANT:
            logger.warning(f"Cannot regenerate message {assistant_message_id}: not an assistant reply")
            return None

        history = list(thread.messages[:index])
        user_message = next((m for m in reversed(history) if m.role == MessageRole.USER), None)
        if user_message is None:
            logger.warning(f"No user message precedes {assistant_message_id}")
            return None

        if temperature is None:
            temperature = self._settings.REGENERATE_TEMPERATURE

        self._enter()
        try:
            self._store.update_message_content(assistant_message_id, "")
            reply = await self._respond(
                assistant_message_id, user_message.content, to_turns(history), temperature
            )
        finally:
            self._leave()

        return SubmissionResult(
            thread_id=thread.id,
            user_message_id=user_message.id,
            assistant_message_id=assistant_message_id,
            content=displayed(reply),
        )

    # ===========================================
    # Code review
    # ===========================================

    async def submit_code(self, code: str, language: str = "plaintext") -> Optional[SubmissionResult]:
        """
        Post a code snippet from the editor and stream a review of it.
        """
        if not code.strip() or self._code_review is None:
            return None
        if self._store.active_id is None:
            self._store.create_thread()
        thread = self._store.active_thread

        self._enter()
        try:
            user_message_id = self._store.append_message(
                f"```{language}\n{code}\n```", MessageRole.USER, message_type=MessageType.CODE
            )
            assistant_id = self._store.append_message("", MessageRole.ASSISTANT)

            self._state = SubmissionState.STREAMING
            try:
                stream = await self._code_review.open_code_review_stream(code, language)
                reply = await self._relay_into(assistant_id, stream)
            except Exception as e:
                logger.error(f"Code review failed: {e}", exc_info=True)
                self._store.update_message_content(assistant_id, ERROR_RESPONSE_MESSAGE)
                reply = None
        finally:
            self._leave()

        return SubmissionResult(
            thread_id=thread.id,
            user_message_id=user_message_id,
            assistant_message_id=assistant_id,
            content=displayed(reply),
        )

    # ===========================================
    # Shared steps
    # ===========================================

    async def _respond(
        self,
        assistant_id: str,
        query: str,
        turns: list[ChatTurn],
        temperature: Optional[float],
    ) -> Optional[str]:
        """
        Recall memory, stream a completion into the placeholder.

        Returns:
            The relayed reply ("" when the stream produced no text), or None
            when the completion request failed
        """
        try:
            self._state = SubmissionState.MEMORY_RECALL
            memory = await self._recall(query)

            self._state = SubmissionState.STREAMING
            context = select_context(turns, context_budget(self._settings), self._settings.CHARS_PER_TOKEN)
            request = CompletionRequest(messages=context, memory=memory, temperature=temperature)
            stream = await self._completion.open_completion_stream(request)
            return await self._relay_into(assistant_id, stream)
        except Exception as e:
            logger.error(f"Completion failed for message {assistant_id}: {e}", exc_info=True)
            self._store.update_message_content(assistant_id, ERROR_RESPONSE_MESSAGE)
            return None

    async def _relay_into(self, message_id: str, stream) -> str:
        content = await relay_stream(
            stream, lambda text: self._store.update_message_content(message_id, text)
        )
        if not content.strip():
            self._store.update_message_content(message_id, EMPTY_RESPONSE_MESSAGE)
            return ""
        return content

    async def _recall(self, query: str) -> str:
        if not self._user_id:
            return ""
        try:
            snippets = await self._memory.recall(query, self._user_id)
        except Exception as e:
            logger.warning(f"Memory recall failed: {e}")
            return ""
        return "\n".join(s.memory for s in snippets if s.memory)

    def _post_process(self, thread_id: str, prior_count: int, user_content: str, reply: str) -> None:
        if self._user_id and user_content.strip() and reply.strip():
            turns = [
                ChatTurn(role=MessageRole.USER, content=user_content),
                ChatTurn(role=MessageRole.ASSISTANT, content=reply),
            ]
            self._tasks.spawn(self._remember(turns), name=f"memory-{thread_id}")
        if prior_count <= 1:
            self._tasks.spawn(self._generate_title(thread_id, user_content), name=f"title-{thread_id}")

    async def _remember(self, turns: list[ChatTurn]) -> None:
        try:
            await self._memory.remember(turns, self._user_id)
        except Exception as e:
            logger.warning(f"Memory write failed: {e}")

    async def _generate_title(self, thread_id: str, first_message: str) -> None:
        try:
            stream = await self._titles.open_title_stream(
                [ChatTurn(role=MessageRole.USER, content=first_message)]
            )
        except Exception as e:
            logger.warning(f"Title generation failed for thread {thread_id}: {e}")
            return

        def apply(text: str) -> None:
            title = clean_title(text)
            if title:
                self._store.update_thread_title(thread_id, title)

        await relay_stream(stream, apply)
