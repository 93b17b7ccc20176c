"""
Memory model definitions.

Memories are short facts about a user extracted from past interactions.
"""

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, Field

from chatclone.models.chat import ChatTurn


class MemoryBase(BaseModel):
    """Base memory fields."""

    content: str = Field(..., min_length=1, max_length=5000, description="Memory content")


class MemoryCreate(MemoryBase):
    """Schema for creating a new memory."""

    source: str = Field("interaction", description="Where the memory came from")


class Memory(MemoryBase):
    """Complete memory model."""

    id: UUID
    user_id: str = Field(..., description="Owner user ID")
    source: str = Field("interaction")
    created_at: datetime
    updated_at: datetime


class MemorySearchResult(BaseModel):
    """Search result for memory queries."""

    memory: Memory
    relevance_score: float = Field(..., ge=0.0, le=1.0)


class MemorySnippet(BaseModel):
    """Memory snippet returned to clients."""

    id: str
    memory: str
    score: float = 0.0


class MemorySearchRequest(BaseModel):
    """Search memories relevant to a query."""

    query: str = Field(..., min_length=1)


class MemoryAddRequest(BaseModel):
    """Store memories extracted from a (user, assistant) interaction."""

    interaction: list[ChatTurn] = Field(..., min_length=1)
