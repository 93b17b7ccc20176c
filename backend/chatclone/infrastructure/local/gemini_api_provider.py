"""
Gemini API provider.

Uses Gemini API with API Key (no GCP project required).
"""

from typing import AsyncIterator, Optional

from google import genai
from google.genai.types import Content, GenerateContentConfig, Part

from chatclone.core.config import get_settings
from chatclone.core.exceptions import LLMError
from chatclone.core.logger import logger
from chatclone.interfaces.llm_provider import ILLMProvider


def _to_contents(messages: list[dict[str, str]]) -> list[Content]:
    # Gemini names the assistant role "model".
    return [
        Content(
            role="model" if m["role"] == "assistant" else "user",
            parts=[Part(text=m["content"])],
        )
        for m in messages
    ]


class GeminiAPIProvider(ILLMProvider):
    """Gemini API provider using API Key."""

    def __init__(self, model_name: str):
        """
        Initialize Gemini API provider.

        Args:
            model_name: Gemini model name (e.g., "gemini-2.0-flash")
        """
        self._model_name = model_name
        self._settings = get_settings()

        if not self._settings.GOOGLE_API_KEY:
            raise ValueError(
                "GOOGLE_API_KEY is required for Gemini API provider. "
                "Get your API key from https://aistudio.google.com/apikey"
            )
        self._client = genai.Client(api_key=self._settings.GOOGLE_API_KEY)

    def get_model_name(self) -> str:
        """Get human-readable model name."""
        return f"Gemini API ({self._model_name})"

    def supports_vision(self) -> bool:
        """Gemini models support vision."""
        return True

    def with_model(self, model_id: str) -> "GeminiAPIProvider":
        """Create a new provider with a different model name."""
        if model_id == self._model_name:
            return self
        return GeminiAPIProvider(model_name=model_id)

    @staticmethod
    def _config(system: Optional[str], temperature: float, max_tokens: int) -> GenerateContentConfig:
        config_kwargs: dict = {
            "temperature": temperature,
            "max_output_tokens": max_tokens,
        }
        if system:
            config_kwargs["system_instruction"] = system
        return GenerateContentConfig(**config_kwargs)

    async def stream_completion(
        self,
        messages: list[dict[str, str]],
        system: Optional[str] = None,
        temperature: float = 0.7,
        max_tokens: int = 1000,
    ) -> AsyncIterator[str]:
        try:
            stream = await self._client.aio.models.generate_content_stream(
                model=self._model_name,
                contents=_to_contents(messages),
                config=self._config(system, temperature, max_tokens),
            )
            async for chunk in stream:
                if chunk.text:
                    yield chunk.text
        except Exception as e:
            logger.error(f"GenAI stream failed: {e}")
            raise LLMError(f"Completion stream failed: {e}") from e

    async def complete(
        self,
        messages: list[dict[str, str]],
        system: Optional[str] = None,
        temperature: float = 0.2,
        max_tokens: int = 600,
    ) -> str:
        try:
            response = await self._client.aio.models.generate_content(
                model=self._model_name,
                contents=_to_contents(messages),
                config=self._config(system, temperature, max_tokens),
            )
        except Exception as e:
            logger.warning(f"GenAI request failed: {e}")
            raise LLMError(f"Completion request failed: {e}") from e
        return (response.text or "").strip()

    async def describe_image(
        self,
        image_bytes: bytes,
        mime_type: str,
        prompt: str,
        max_tokens: int = 500,
    ) -> str:
        try:
            result = await self._client.aio.models.generate_content(
                model=self._model_name,
                contents=[
                    Content(
                        role="user",
                        parts=[
                            Part.from_bytes(data=image_bytes, mime_type=mime_type),
                            Part(text=prompt),
                        ],
                    )
                ],
                config=self._config(None, 0.5, max_tokens),
            )
        except Exception as e:
            logger.error(f"GenAI image description failed: {e}")
            raise LLMError(f"Image description failed: {e}") from e
        return result.text or ""
