"""
File upload and description models.
"""

from typing import Optional

from pydantic import BaseModel, Field

from chatclone.models.enums import FileKind


class FileDescriptionRequest(BaseModel):
    """Request a text description of an uploaded file."""

    url: str = Field(..., min_length=1)
    mime_type: str = Field(..., min_length=1)


class FileDescription(BaseModel):
    """Text description of an uploaded file."""

    type: FileKind
    content: str = ""


class FileUploadRequest(BaseModel):
    """Upload a file as base64 (optionally a data URL)."""

    data_base64: str = Field(..., min_length=1)
    name: str = Field("upload", max_length=255)
    mime_type: Optional[str] = Field(None, description="MIME type, inferred from the data URL or name when absent")
