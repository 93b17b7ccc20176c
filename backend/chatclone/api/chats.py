"""
Chat record API endpoints.

CRUD over the threads of the authenticated user.
"""

from fastapi import APIRouter, HTTPException, Query, status

from chatclone.api.deps import ChatRepo, CurrentUser
from chatclone.core.exceptions import NotFoundError
from chatclone.models.chat_record import ChatRecord, ChatRecordCreate, ChatRecordUpdate

router = APIRouter()


@router.get("", response_model=list[ChatRecord])
async def list_chats(
    user: CurrentUser,
    repo: ChatRepo,
    limit: int = Query(100, ge=1, le=1000),
    offset: int = Query(0, ge=0),
):
    """List chats, most recently created first."""
    return await repo.list(user.id, limit=limit, offset=offset)


@router.post("", response_model=ChatRecord, status_code=status.HTTP_201_CREATED)
async def create_chat(record: ChatRecordCreate, user: CurrentUser, repo: ChatRepo):
    return await repo.create(user.id, record)


@router.get("/{chat_id}", response_model=ChatRecord)
async def get_chat(chat_id: str, user: CurrentUser, repo: ChatRepo):
    record = await repo.get(user.id, chat_id)
    if not record:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Chat {chat_id} not found",
        )
    return record


@router.put("/{chat_id}", response_model=ChatRecord)
async def update_chat(chat_id: str, update: ChatRecordUpdate, user: CurrentUser, repo: ChatRepo):
    try:
        return await repo.update(user.id, chat_id, update)
    except NotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=e.message)


@router.delete("/{chat_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_chat(chat_id: str, user: CurrentUser, repo: ChatRepo):
    if not await repo.delete(user.id, chat_id):
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Chat {chat_id} not found",
        )
