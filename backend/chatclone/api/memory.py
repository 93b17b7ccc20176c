"""
Memory API endpoints.

Search and store per-user memories used as chat context.
"""

from fastapi import APIRouter, HTTPException, status

from chatclone.api.deps import CurrentUser, MemorySvc
from chatclone.core.exceptions import ChatCloneError
from chatclone.models.memory import Memory, MemoryAddRequest, MemorySearchRequest, MemorySnippet

router = APIRouter()


@router.post("/search", response_model=list[MemorySnippet])
async def search_memories(request: MemorySearchRequest, user: CurrentUser, memory_service: MemorySvc):
    """Search memories relevant to a query."""
    try:
        return await memory_service.search(user.id, request.query)
    except ChatCloneError as e:
        raise HTTPException(status_code=status.HTTP_502_BAD_GATEWAY, detail=e.message)


@router.post("", response_model=list[Memory], status_code=status.HTTP_201_CREATED)
async def add_memories(request: MemoryAddRequest, user: CurrentUser, memory_service: MemorySvc):
    """Extract and store memories from a (user, assistant) interaction."""
    try:
        return await memory_service.add(user.id, request.interaction)
    except ChatCloneError as e:
        raise HTTPException(status_code=status.HTTP_502_BAD_GATEWAY, detail=e.message)
