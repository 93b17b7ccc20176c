"""
Chat API endpoints.

Streamed completions, title generation, code review and audio transcription.
Streams are plain UTF-8 text with no framing.
"""

from typing import AsyncIterator

from fastapi import APIRouter, HTTPException, status
from fastapi.responses import StreamingResponse

from chatclone.api.deps import AppSettings, ChatSvc, CurrentUser, SpeechProvider
from chatclone.core.exceptions import LLMError
from chatclone.core.logger import setup_logger
from chatclone.models.chat import (
    AudioTranscriptionRequest,
    AudioTranscriptionResponse,
    CodeReviewRequest,
    CompletionRequest,
    TitleRequest,
)
from chatclone.services.file_service import decode_data_url

logger = setup_logger(__name__)

router = APIRouter()


async def _text_stream(chunks: AsyncIterator[str]) -> StreamingResponse:
    """
    Wrap provider chunks in a streaming response.

    The first chunk is awaited before responding so that a failed request
    becomes an HTTP error; later failures end the stream early.
    """
    iterator = chunks.__aiter__()
    try:
        first = await iterator.__anext__()
    except StopAsyncIteration:
        first = ""
    except LLMError as e:
        raise HTTPException(
            status_code=status.HTTP_502_BAD_GATEWAY,
            detail=e.message,
        ) from e

    async def body() -> AsyncIterator[str]:
        if first:
            yield first
        try:
            async for chunk in iterator:
                yield chunk
        except LLMError as e:
            logger.error(f"Stream ended early: {e.message}")

    return StreamingResponse(
        body(),
        media_type="text/plain; charset=utf-8",
        headers={
            "Cache-Control": "no-cache",
            "X-Accel-Buffering": "no",  # Disable buffering for nginx
        },
    )


@router.post("")
async def chat(request: CompletionRequest, _user: CurrentUser, chat_service: ChatSvc):
    """Stream an assistant reply."""
    return await _text_stream(chat_service.stream_chat(request))


@router.post("/title")
async def generate_title(request: TitleRequest, _user: CurrentUser, chat_service: ChatSvc):
    """Stream a short title for a chat's first message."""
    return await _text_stream(chat_service.stream_title(request.messages))


@router.post("/code")
async def review_code(request: CodeReviewRequest, _user: CurrentUser, chat_service: ChatSvc):
    """Stream a markdown review of a code snippet."""
    return await _text_stream(chat_service.stream_code_review(request))


# Region used when a client sends a bare language code.
DEFAULT_REGIONS = {
    "en": "US",
    "es": "ES",
    "pt": "BR",
    "fr": "FR",
    "de": "DE",
    "it": "IT",
    "zh": "CN",
    "ja": "JP",
    "ko": "KR",
}


def normalize_speech_language(language_hint: str | None, default: str) -> str:
    """BCP-47 tag for the speech provider, e.g. "en" -> "en-US", "pt_pt" -> "pt-PT"."""
    tag = (language_hint or "").strip().replace("_", "-")
    if not tag:
        return default

    language, _, region = tag.partition("-")
    language = language.lower()
    if not region:
        region = DEFAULT_REGIONS.get(language, "")
    elif len(region) == 2:
        region = region.upper()
    return f"{language}-{region}" if region else language


def is_empty_transcription_error(error: Exception) -> bool:
    message = str(error).strip().lower()
    return "empty transcript" in message or "transcription returned empty text" in message



@router.post("/transcribe", response_model=AudioTranscriptionResponse)
async def transcribe_audio(
    request: AudioTranscriptionRequest,
    _user: CurrentUser,
    speech_provider: SpeechProvider,
    settings: AppSettings,
):
    mime_hint = (request.audio_mime_type or "audio/webm").strip().lower()
    audio_bytes, mime_type = decode_data_url(request.audio_base64, mime_hint)
    if not audio_bytes:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Invalid or empty audio payload",
        )

    language = normalize_speech_language(request.audio_language, settings.SPEECH_LANGUAGE)
    try:
        transcription = await speech_provider.transcribe_bytes(
            audio_bytes=audio_bytes,
            content_type=mime_type,
            language=language,
        )
    except Exception as e:
        if is_empty_transcription_error(e):
            return AudioTranscriptionResponse(text="")
        raise HTTPException(
            status_code=status.HTTP_502_BAD_GATEWAY,
            detail=f"Transcription failed: {e}",
        ) from e

    return AudioTranscriptionResponse(text=(transcription or "").strip())
