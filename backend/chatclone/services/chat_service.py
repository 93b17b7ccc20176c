"""
Server-side chat streaming: completions, titles and code review.
"""

from __future__ import annotations

from typing import AsyncIterator, Optional

from chatclone.core.config import Settings, get_settings
from chatclone.interfaces.llm_provider import ILLMProvider
from chatclone.models.chat import ChatTurn, CodeReviewRequest, CompletionRequest
from chatclone.services.prompts import (
    CHAT_SYSTEM_PROMPT,
    CODE_REVIEW_PROMPT,
    CODE_REVIEW_SYSTEM_PROMPT,
    TITLE_SYSTEM_PROMPT,
)


def _to_messages(turns: list[ChatTurn]) -> list[dict[str, str]]:
    return [{"role": t.role.value, "content": t.content} for t in turns]


class ChatService:
    """Builds prompts and delegates streaming to the LLM provider."""

    def __init__(self, llm_provider: ILLMProvider, settings: Optional[Settings] = None):
        self._llm = llm_provider
        self._settings = settings or get_settings()

    def stream_chat(self, request: CompletionRequest) -> AsyncIterator[str]:
        temperature = request.temperature
        if temperature is None:
            temperature = self._settings.CHAT_TEMPERATURE
        return self._llm.stream_completion(
            _to_messages(request.messages),
            system=CHAT_SYSTEM_PROMPT.format(memory=request.memory),
            temperature=temperature,
            max_tokens=self._settings.MAX_COMPLETION_TOKENS,
        )

    def stream_title(self, turns: list[ChatTurn]) -> AsyncIterator[str]:
        return self._llm.stream_completion(
            _to_messages(turns),
            system=TITLE_SYSTEM_PROMPT,
            temperature=self._settings.TITLE_TEMPERATURE,
            max_tokens=self._settings.MAX_COMPLETION_TOKENS,
        )

    def stream_code_review(self, request: CodeReviewRequest) -> AsyncIterator[str]:
        prompt = CODE_REVIEW_PROMPT.format(language=request.language, code=request.code)
        return self._llm.stream_completion(
            [{"role": "user", "content": prompt}],
            system=CODE_REVIEW_SYSTEM_PROMPT,
            temperature=self._settings.CHAT_TEMPERATURE,
            max_tokens=self._settings.MAX_COMPLETION_TOKENS,
        )
