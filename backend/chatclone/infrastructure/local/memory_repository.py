"""
SQLite memory repository.

Search is lexical: a memory scores high when it contains the whole query,
otherwise by fuzzy similarity or by how many query words it shares.
"""

from __future__ import annotations

from difflib import SequenceMatcher
from typing import Iterable
from uuid import UUID, uuid4

from sqlalchemy import delete, select

from chatclone.infrastructure.local.database import MemoryORM, get_session_factory
from chatclone.interfaces.memory_repository import IMemoryRepository
from chatclone.models.memory import Memory, MemoryCreate, MemorySearchResult

MIN_RELEVANCE = 0.3
SEARCH_WINDOW = 1000


def relevance(query: str, content: str) -> float:
    """Score in [0, 1] for how well content answers query."""
    query = query.lower()
    content = content.lower()
    similarity = SequenceMatcher(None, query, content).ratio()
    if query in content:
        return min(0.8 + 0.2 * similarity, 1.0)

    words = {w for w in query.split() if len(w) > 2}
    if not words:
        return similarity
    shared = len(words & set(content.split())) / len(words)
    return min(max(similarity, 0.5 * shared + 0.3 * similarity), 1.0)


def rank(query: str, memories: Iterable[Memory], limit: int) -> list[MemorySearchResult]:
    scored = [(relevance(query, m.content), m) for m in memories]
    hits = [
        MemorySearchResult(memory=m, relevance_score=score)
        for score, m in scored
        if score > MIN_RELEVANCE
    ]
    hits.sort(key=lambda hit: hit.relevance_score, reverse=True)
    return hits[:limit]


def _to_model(row: MemoryORM) -> Memory:
    return Memory(
        id=UUID(row.id),
        user_id=row.user_id,
        content=row.content,
        source=row.source or "interaction",
        created_at=row.created_at,
        updated_at=row.updated_at,
    )


class SqliteMemoryRepository(IMemoryRepository):
    def __init__(self, session_factory=None):
        self._session_factory = session_factory or get_session_factory()

    async def create(self, user_id: str, memory: MemoryCreate) -> Memory:
        row = MemoryORM(id=str(uuid4()), user_id=user_id, content=memory.content, source=memory.source)
        async with self._session_factory() as session:
            session.add(row)
            await session.commit()
            await session.refresh(row)
        return _to_model(row)

    async def list(self, user_id: str, limit: int = 100, offset: int = 0) -> list[Memory]:
        """Newest first."""
        stmt = (
            select(MemoryORM)
            .where(MemoryORM.user_id == user_id)
            .order_by(MemoryORM.created_at.desc())
            .offset(offset)
            .limit(limit)
        )
        async with self._session_factory() as session:
            rows = (await session.scalars(stmt)).all()
        return [_to_model(row) for row in rows]

    async def search(self, user_id: str, query: str, limit: int = 5) -> list[MemorySearchResult]:
        return rank(query, await self.list(user_id, limit=SEARCH_WINDOW), limit)

    async def delete(self, user_id: str, memory_id: UUID) -> bool:
        stmt = delete(MemoryORM).where(MemoryORM.id == str(memory_id), MemoryORM.user_id == user_id)
        async with self._session_factory() as session:
            result = await session.execute(stmt)
            await session.commit()
        return result.rowcount > 0
