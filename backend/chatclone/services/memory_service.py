"""
Server-side memory recall and extraction.
"""

from __future__ import annotations

import asyncio
from typing import Awaitable, Callable, Optional, TypeVar

from chatclone.core.config import Settings, get_settings
from chatclone.core.exceptions import InfrastructureError
from chatclone.core.logger import setup_logger
from chatclone.interfaces.llm_provider import ILLMProvider
from chatclone.interfaces.memory_repository import IMemoryRepository
from chatclone.models.chat import ChatTurn
from chatclone.models.memory import Memory, MemoryCreate, MemorySnippet
from chatclone.services.prompts import MEMORY_EXTRACTION_PROMPT

logger = setup_logger(__name__)

T = TypeVar("T")

MAX_FACTS_PER_INTERACTION = 5


def parse_facts(text: str) -> list[str]:
    """Split an extraction reply into facts; "NONE" means no facts."""
    facts = []
    for line in text.splitlines():
        fact = line.strip().lstrip("-*•").strip()
        if not fact or fact.upper().rstrip(".") == "NONE":
            continue
        facts.append(fact[:5000])
    return facts[:MAX_FACTS_PER_INTERACTION]


class MemoryService:
    """Memory search and write with retries."""

    def __init__(
        self,
        repository: IMemoryRepository,
        llm_provider: ILLMProvider,
        settings: Optional[Settings] = None,
    ):
        self._repo = repository
        self._llm = llm_provider
        self._settings = settings or get_settings()

    async def _retry(self, operation: str, fn: Callable[[], Awaitable[T]]) -> T:
        attempts = max(self._settings.MEMORY_RETRY_ATTEMPTS, 1)
        last_error: Optional[Exception] = None
        for attempt in range(1, attempts + 1):
            try:
                return await fn()
            except Exception as e:
                last_error = e
                logger.warning(f"Memory {operation} attempt {attempt}/{attempts} failed: {e}")
                if attempt < attempts:
                    await asyncio.sleep(self._settings.MEMORY_RETRY_DELAY_SECONDS)
        raise InfrastructureError(f"Memory service unavailable after retries: {last_error}")

    async def search(self, user_id: str, query: str) -> list[MemorySnippet]:
        results = await self._retry(
            "search",
            lambda: self._repo.search(user_id, query, limit=self._settings.MEMORY_SEARCH_LIMIT),
        )
        return [
            MemorySnippet(id=str(r.memory.id), memory=r.memory.content, score=r.relevance_score)
            for r in results
        ]

    async def add(self, user_id: str, interaction: list[ChatTurn]) -> list[Memory]:
        """Extract facts from an interaction with the LLM and store them."""
        transcript = "\n".join(f"{turn.role.value}: {turn.content}" for turn in interaction)
        reply = await self._retry(
            "extraction",
            lambda: self._llm.complete(
                [{"role": "user", "content": transcript}],
                system=MEMORY_EXTRACTION_PROMPT,
                temperature=0.0,
                max_tokens=300,
            ),
        )

        stored = []
        for fact in parse_facts(reply):
            stored.append(
                await self._retry(
                    "write",
                    lambda fact=fact: self._repo.create(user_id, MemoryCreate(content=fact)),
                )
            )
        logger.info(f"Stored {len(stored)} memories for user {user_id}")
        return stored
