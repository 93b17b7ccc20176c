"""
LiteLLM provider implementation.

Supports Groq, OpenAI, Bedrock, and other providers via LiteLLM.
Includes support for custom endpoints (api_base) for proxy servers.
Supports separate vision model for image description.
"""

import base64
import os
from typing import Any, AsyncIterator, Optional

import litellm

from chatclone.core.config import get_settings
from chatclone.core.exceptions import LLMError
from chatclone.core.logger import logger
from chatclone.interfaces.llm_provider import ILLMProvider


class LiteLLMProvider(ILLMProvider):
    """LiteLLM provider with custom endpoint support."""

    def __init__(
        self,
        model_name: str,
        api_base: Optional[str] = None,
        api_key: Optional[str] = None,
    ):
        """
        Initialize LiteLLM provider.

        Args:
            model_name: LiteLLM model identifier (e.g., "groq/llama-3.3-70b-versatile")
            api_base: Custom API endpoint URL (optional, for proxy servers)
                     Note: Do NOT include /v1 suffix - LiteLLM adds it automatically
            api_key: Custom API key (optional, overrides default)
        """
        self._model_name = model_name
        self._settings = get_settings()
        self._api_base = api_base or self._settings.LITELLM_API_BASE or None
        self._api_key = api_key or self._settings.LITELLM_API_KEY or None
        self._vision_model = self._settings.LITELLM_VISION_MODEL or model_name

        if self._settings.DEBUG:
            os.environ["LITELLM_LOG"] = "DEBUG"

    def get_model_id(self) -> str:
        """Get the raw LiteLLM model identifier."""
        return self._model_name

    def get_model_name(self) -> str:
        """Get human-readable model name."""
        if self._api_base:
            return f"LiteLLM ({self._model_name} @ {self._api_base})"
        return f"LiteLLM ({self._model_name})"

    def supports_vision(self) -> bool:
        return bool(self._vision_model)

    def with_model(self, model_id: str) -> "LiteLLMProvider":
        """Create a new provider with a different model name."""
        if model_id == self._model_name:
            return self
        return LiteLLMProvider(model_name=model_id, api_base=self._api_base, api_key=self._api_key)

    def _build_kwargs(
        self,
        model: str,
        messages: list[dict[str, Any]],
        temperature: float,
        max_tokens: int,
    ) -> dict[str, Any]:
        kwargs: dict[str, Any] = {
            "model": model,
            "messages": messages,
            "temperature": temperature,
            "max_tokens": max_tokens,
        }
        if self._api_base:
            kwargs["api_base"] = self._api_base
        if self._api_key:
            kwargs["api_key"] = self._api_key
        return kwargs

    @staticmethod
    def _with_system(messages: list[dict[str, str]], system: Optional[str]) -> list[dict[str, Any]]:
        full: list[dict[str, Any]] = []
        if system:
            full.append({"role": "system", "content": system})
        full.extend({"role": m["role"], "content": m["content"]} for m in messages)
        return full

    async def stream_completion(
        self,
        messages: list[dict[str, str]],
        system: Optional[str] = None,
        temperature: float = 0.7,
        max_tokens: int = 1000,
    ) -> AsyncIterator[str]:
        kwargs = self._build_kwargs(
            self._model_name, self._with_system(messages, system), temperature, max_tokens
        )
        kwargs["stream"] = True

        try:
            response = await litellm.acompletion(**kwargs)
        except Exception as e:
            logger.error(f"LiteLLM completion failed to start: {e}")
            raise LLMError(f"Completion request failed: {e}") from e

        try:
            async for chunk in response:
                if not chunk.choices:
                    continue
                delta = chunk.choices[0].delta
                text = getattr(delta, "content", None)
                if text:
                    yield text
        except Exception as e:
            logger.error(f"LiteLLM stream interrupted: {e}")
            raise LLMError(f"Completion stream failed: {e}") from e

    async def complete(
        self,
        messages: list[dict[str, str]],
        system: Optional[str] = None,
        temperature: float = 0.2,
        max_tokens: int = 600,
    ) -> str:
        kwargs = self._build_kwargs(
            self._model_name, self._with_system(messages, system), temperature, max_tokens
        )
        try:
            response = await litellm.acompletion(**kwargs)
        except Exception as e:
            logger.warning(f"LiteLLM request failed: {e}")
            raise LLMError(f"Completion request failed: {e}") from e

        content = response.choices[0].message.content if response.choices else None
        return (content or "").strip()

    async def describe_image(
        self,
        image_bytes: bytes,
        mime_type: str,
        prompt: str,
        max_tokens: int = 500,
    ) -> str:
        """
        Describe an image using the vision model.

        Args:
            image_bytes: Raw image bytes
            mime_type: MIME type of the image (e.g., "image/png")
            prompt: Text prompt describing what to analyze
            max_tokens: Completion token limit

        Returns:
            Text description of the image from the vision model
        """
        base64_data = base64.b64encode(image_bytes).decode("utf-8")
        image_url = f"data:{mime_type};base64,{base64_data}"
        messages = [
            {
                "role": "user",
                "content": [
                    {"type": "text", "text": prompt},
                    {"type": "image_url", "image_url": {"url": image_url}},
                ],
            }
        ]
        kwargs = self._build_kwargs(self._vision_model, messages, 0.5, max_tokens)

        logger.info(f"Calling vision model: {self._vision_model}")
        try:
            response = await litellm.acompletion(**kwargs)
        except Exception as e:
            logger.error(f"Vision model analysis failed: {e}")
            raise LLMError(f"Image description failed: {e}") from e

        result = response.choices[0].message.content if response.choices else None
        return result or ""
