"""
Local speech-to-text with openai-whisper.

Install the optional extra with: pip install "chatclone[whisper]"
"""

import asyncio
import tempfile
from pathlib import Path

from chatclone.core.exceptions import InfrastructureError
from chatclone.core.logger import setup_logger
from chatclone.interfaces.speech_provider import ISpeechToTextProvider

logger = setup_logger(__name__)

SUFFIX_BY_MIME = {
    "audio/webm": ".webm",
    "audio/ogg": ".ogg",
    "audio/wav": ".wav",
    "audio/mpeg": ".mp3",
    "audio/mp3": ".mp3",
    "audio/mp4": ".mp4",
    "audio/m4a": ".m4a",
    "audio/flac": ".flac",
}


def audio_suffix(content_type: str) -> str:
    """File suffix for an audio MIME type; parameters such as codecs are ignored."""
    base = content_type.partition(";")[0].strip().lower()
    return SUFFIX_BY_MIME.get(base, ".wav")


class WhisperProvider(ISpeechToTextProvider):
    """Runs a Whisper model in a worker thread; the model loads on first use."""

    def __init__(self, model_size: str = "base"):
        self.model_size = model_size
        self._model = None
        self._load_lock = asyncio.Lock()

    async def _get_model(self):
        async with self._load_lock:
            if self._model is None:
                try:
                    import whisper
                except ImportError as e:
                    raise InfrastructureError(
                        'openai-whisper is not installed; pip install "chatclone[whisper]"'
                    ) from e
                logger.info(f"Loading Whisper model '{self.model_size}'")
                self._model = await asyncio.to_thread(whisper.load_model, self.model_size)
        return self._model

    async def transcribe_bytes(
        self,
        audio_bytes: bytes,
        content_type: str = "audio/webm",
        language: str = "en-US",
    ) -> str:
        model = await self._get_model()
        # Whisper takes a bare language code ("ja", not "ja-JP").
        lang = language.split("-")[0]

        with tempfile.TemporaryDirectory() as tmp:
            path = Path(tmp) / f"audio{audio_suffix(content_type)}"
            path.write_bytes(audio_bytes)
            try:
                result = await asyncio.to_thread(model.transcribe, str(path), language=lang, fp16=False)
            except Exception as e:
                raise InfrastructureError(f"Whisper transcription failed: {e}") from e
        return result["text"].strip()

    def get_supported_formats(self) -> list[str]:
        return list(SUFFIX_BY_MIME)
