"""
Hosted Whisper speech-to-text via LiteLLM (e.g. groq/whisper-large-v3).
"""

from io import BytesIO
from typing import Optional

import litellm

from chatclone.core.config import get_settings
from chatclone.core.exceptions import InfrastructureError
from chatclone.core.logger import logger
from chatclone.interfaces.speech_provider import ISpeechToTextProvider

_EXTENSIONS = {
    "audio/wav": "wav",
    "audio/mp3": "mp3",
    "audio/mpeg": "mp3",
    "audio/m4a": "m4a",
    "audio/mp4": "mp4",
    "audio/ogg": "ogg",
    "audio/webm": "webm",
    "audio/flac": "flac",
}


class LiteLLMSpeechProvider(ISpeechToTextProvider):
    """Speech-to-text through LiteLLM's transcription endpoint."""

    def __init__(
        self,
        model_name: str,
        api_base: Optional[str] = None,
        api_key: Optional[str] = None,
    ):
        settings = get_settings()
        self._model_name = model_name
        self._api_base = api_base or settings.LITELLM_API_BASE or None
        self._api_key = api_key or settings.LITELLM_API_KEY or None

    async def transcribe_bytes(
        self,
        audio_bytes: bytes,
        content_type: str = "audio/webm",
        language: str = "en-US",
    ) -> str:
        base_type = content_type.split(";")[0].strip().lower()
        audio_file = BytesIO(audio_bytes)
        audio_file.name = f"audio.{_EXTENSIONS.get(base_type, 'webm')}"

        kwargs: dict = {
            "model": self._model_name,
            "file": audio_file,
            "language": language.split("-")[0],
        }
        if self._api_base:
            kwargs["api_base"] = self._api_base
        if self._api_key:
            kwargs["api_key"] = self._api_key

        try:
            response = await litellm.atranscription(**kwargs)
        except Exception as e:
            logger.warning(f"LiteLLM transcription failed: {e}")
            raise InfrastructureError(f"Transcription failed: {e}")

        text = getattr(response, "text", None) or ""
        return text.strip()

    def get_supported_formats(self) -> list[str]:
        return list(_EXTENSIONS)
