"""
SQLite implementation of the chat record repository.
"""

from __future__ import annotations

from typing import Optional
from uuid import uuid4

from sqlalchemy import and_, select

from chatclone.core.exceptions import NotFoundError
from chatclone.infrastructure.local.database import ChatORM, get_session_factory, utcnow
from chatclone.interfaces.chat_repository import IChatRepository
from chatclone.models.chat import Message
from chatclone.models.chat_record import ChatRecord, ChatRecordCreate, ChatRecordUpdate


def _dump_messages(messages: list[Message]) -> list[dict]:
    return [m.model_dump(mode="json") for m in messages]


class SqliteChatRepository(IChatRepository):
    """SQLite implementation of chat record repository."""

    def __init__(self, session_factory=None):
        self._session_factory = session_factory or get_session_factory()

    def _orm_to_model(self, orm: ChatORM) -> ChatRecord:
        """Convert ORM object to Pydantic model."""
        return ChatRecord(
            id=orm.id,
            user_id=orm.user_id,
            client_id=orm.client_id,
            title=orm.title,
            messages=[Message.model_validate(m) for m in (orm.messages or [])],
            created_at=orm.created_at,
            updated_at=orm.updated_at,
        )

    async def _get_orm(self, session, user_id: str, record_id: str) -> Optional[ChatORM]:
        result = await session.execute(
            select(ChatORM).where(and_(ChatORM.id == record_id, ChatORM.user_id == user_id))
        )
        return result.scalar_one_or_none()

    async def create(self, user_id: str, record: ChatRecordCreate) -> ChatRecord:
        async with self._session_factory() as session:
            orm = ChatORM(
                id=str(uuid4()),
                user_id=user_id,
                client_id=record.client_id,
                title=record.title,
                messages=_dump_messages(record.messages),
            )
            session.add(orm)
            await session.commit()
            await session.refresh(orm)
            return self._orm_to_model(orm)

    async def get(self, user_id: str, record_id: str) -> Optional[ChatRecord]:
        async with self._session_factory() as session:
            orm = await self._get_orm(session, user_id, record_id)
            return self._orm_to_model(orm) if orm else None

    async def list(self, user_id: str, limit: int = 100, offset: int = 0) -> list[ChatRecord]:
        async with self._session_factory() as session:
            query = (
                select(ChatORM)
                .where(ChatORM.user_id == user_id)
                .order_by(ChatORM.created_at.desc())
                .limit(limit)
                .offset(offset)
            )
            result = await session.execute(query)
            return [self._orm_to_model(orm) for orm in result.scalars().all()]

    async def update(self, user_id: str, record_id: str, update: ChatRecordUpdate) -> ChatRecord:
        async with self._session_factory() as session:
            orm = await self._get_orm(session, user_id, record_id)
            if not orm:
                raise NotFoundError(f"Chat {record_id} not found")

            orm.title = update.title
            orm.messages = _dump_messages(update.messages)
            orm.updated_at = utcnow()

            await session.commit()
            await session.refresh(orm)
            return self._orm_to_model(orm)

    async def delete(self, user_id: str, record_id: str) -> bool:
        async with self._session_factory() as session:
            orm = await self._get_orm(session, user_id, record_id)
            if not orm:
                return False

            await session.delete(orm)
            await session.commit()
            return True
