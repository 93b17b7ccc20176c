"""
Speech-to-text provider interface.

Backs the voice input of the chat composer. Implementations: LiteLLM
(hosted Whisper) and local openai-whisper.
"""

from __future__ import annotations

from abc import ABC, abstractmethod


class ISpeechToTextProvider(ABC):
    """Turns a recorded voice message into text."""

    @abstractmethod
    async def transcribe_bytes(
        self,
        audio_bytes: bytes,
        content_type: str = "audio/webm",
        language: str = "en-US",
    ) -> str:
        """
        Transcribe one recording.

        Args:
            audio_bytes: Encoded recording as uploaded by the browser
            content_type: Recording MIME type; codec parameters are ignored
            language: BCP-47 language hint

        Raises:
            InfrastructureError: If the backend cannot transcribe the audio
        """
        pass

    @abstractmethod
    def get_supported_formats(self) -> list[str]:
        """MIME types this provider can decode."""
        pass
