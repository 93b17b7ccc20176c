"""
Chat model definitions.

Message and Thread are immutable: the conversation store replaces them with
updated copies instead of mutating fields in place.
"""

from datetime import datetime, timezone
from typing import Optional
from uuid import uuid4

from pydantic import BaseModel, ConfigDict, Field

from chatclone.models.enums import MessageRole, MessageType

DEFAULT_THREAD_TITLE = "New Chat"


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def new_id() -> str:
    """Generate a local identifier."""
    return str(uuid4())


class Upload(BaseModel):
    """Attachment descriptor for an uploaded file."""

    model_config = ConfigDict(frozen=True)

    url: str = Field(..., description="Public URL of the uploaded file")
    mime_type: str = Field(..., description="MIME type")
    uuid: str = Field(..., description="Storage identifier")
    name: str = Field("", description="Original file name")

    @property
    def is_image(self) -> bool:
        return self.mime_type.startswith("image/")


class Message(BaseModel):
    """A single chat message."""

    model_config = ConfigDict(frozen=True)

    id: str = Field(default_factory=new_id)
    role: MessageRole
    content: str = ""
    uploads: list[Upload] = Field(default_factory=list)
    message_type: MessageType = MessageType.CHAT
    timestamp: datetime = Field(default_factory=_utcnow)


class Thread(BaseModel):
    """A conversation thread (chat)."""

    model_config = ConfigDict(frozen=True)

    id: str = Field(default_factory=new_id)
    remote_id: Optional[str] = Field(None, description="Identifier issued by the persistence backend")
    title: str = DEFAULT_THREAD_TITLE
    messages: list[Message] = Field(default_factory=list)
    created_at: datetime = Field(default_factory=_utcnow)
    updated_at: datetime = Field(default_factory=_utcnow)


class ChatTurn(BaseModel):
    """A {role, content} turn sent to the completion service."""

    role: MessageRole
    content: str


class CompletionRequest(BaseModel):
    """Request body for streamed chat completions."""

    messages: list[ChatTurn] = Field(..., min_length=1)
    memory: str = Field("", description="Recalled memory injected as system context")
    temperature: Optional[float] = Field(None, ge=0.0, le=2.0)


class TitleRequest(BaseModel):
    """Request body for title generation."""

    messages: list[ChatTurn] = Field(..., min_length=1, max_length=1)


class CodeReviewRequest(BaseModel):
    """Request body for code review streaming."""

    code: str = Field(..., min_length=1)
    language: str = Field("plaintext", max_length=50)


class AudioTranscriptionRequest(BaseModel):
    """Audio transcription request."""

    audio_base64: str = Field(..., description="Base64 audio, optionally as a data URL")
    audio_mime_type: Optional[str] = Field("audio/webm", description="MIME type hint")
    audio_language: Optional[str] = Field(None, description="Language hint (e.g. en, ja-JP)")


class AudioTranscriptionResponse(BaseModel):
    """Audio transcription response."""

    text: str = ""


class PendingSubmission(BaseModel):
    """A submission deferred until a thread exists."""

    model_config = ConfigDict(frozen=True)

    text: str = ""
    uploads: list[Upload] = Field(default_factory=list)


class SubmissionResult(BaseModel):
    """Outcome of one pass through the submission pipeline."""

    thread_id: str
    user_message_id: Optional[str] = None
    assistant_message_id: str
    content: str
