"""
Persisted chat record models.

Server-side representation of a thread owned by an authenticated user.
"""

from datetime import datetime

from pydantic import BaseModel, Field

from chatclone.models.chat import DEFAULT_THREAD_TITLE, Message


class ChatRecordBase(BaseModel):
    """Base chat record fields."""

    client_id: str = Field(..., max_length=100, description="Client-side thread ID")
    title: str = Field(DEFAULT_THREAD_TITLE, max_length=200, description="Thread title")
    messages: list[Message] = Field(default_factory=list)


class ChatRecordCreate(ChatRecordBase):
    """Schema for creating a chat record."""

    pass


class ChatRecordUpdate(BaseModel):
    """Schema for updating a chat record."""

    title: str = Field(..., max_length=200)
    messages: list[Message] = Field(default_factory=list)


class ChatRecord(ChatRecordBase):
    """Chat record model."""

    id: str = Field(..., description="Backend-issued identifier")
    user_id: str = Field(..., description="Owner user ID")
    created_at: datetime
    updated_at: datetime
