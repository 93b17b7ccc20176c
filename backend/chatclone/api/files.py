"""
File API endpoints: upload, delete and describe attachments.
"""

from fastapi import APIRouter, HTTPException, status

from chatclone.api.deps import CurrentUser, FileSvc
from chatclone.core.exceptions import ChatCloneError, NotFoundError, ValidationError
from chatclone.core.logger import setup_logger
from chatclone.models.chat import Upload
from chatclone.models.file import FileDescription, FileDescriptionRequest, FileUploadRequest
from chatclone.services.file_service import decode_data_url

logger = setup_logger(__name__)

router = APIRouter()


@router.post("", response_model=Upload, status_code=status.HTTP_201_CREATED)
async def upload_file(request: FileUploadRequest, _user: CurrentUser, file_service: FileSvc):
    """Store a base64 upload and return its descriptor."""
    data, mime_type = decode_data_url(request.data_base64, request.mime_type or "")
    if not data:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Invalid or empty file payload",
        )
    try:
        return await file_service.store_upload(data, request.name, mime_type or None)
    except ValidationError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=e.message)


@router.delete("/{upload_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_file(upload_id: str, _user: CurrentUser, file_service: FileSvc):
    try:
        deleted = await file_service.delete_upload(upload_id)
    except ValidationError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=e.message)
    if not deleted:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"File {upload_id} not found",
        )


@router.post("/describe", response_model=FileDescription)
async def describe_file(request: FileDescriptionRequest, _user: CurrentUser, file_service: FileSvc):
    """Describe an uploaded file for inclusion in a chat message."""
    try:
        return await file_service.describe(request.url, request.mime_type)
    except NotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=e.message)
    except ValidationError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=e.message)
    except ChatCloneError as e:
        logger.error(f"Failed to describe {request.url}: {e.message}")
        raise HTTPException(status_code=status.HTTP_502_BAD_GATEWAY, detail=e.message)
