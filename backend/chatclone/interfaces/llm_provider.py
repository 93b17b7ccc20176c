"""
LLM provider interface.

Defines the contract for LLM (Large Language Model) access.
Implementations: LiteLLM (Groq, OpenAI, Bedrock, etc.), Gemini API
"""

from abc import ABC, abstractmethod
from typing import AsyncIterator, Optional


class ILLMProvider(ABC):
    """Abstract interface for LLM providers."""

    @abstractmethod
    def get_model_name(self) -> str:
        """
        Get the human-readable model name.

        Returns:
            Model name string for logging/display
        """
        pass

    @abstractmethod
    def supports_vision(self) -> bool:
        """
        Check if the provider can describe images.

        Returns:
            True if vision is supported
        """
        pass

    @abstractmethod
    def stream_completion(
        self,
        messages: list[dict[str, str]],
        system: Optional[str] = None,
        temperature: float = 0.7,
        max_tokens: int = 1000,
    ) -> AsyncIterator[str]:
        """
        Stream a chat completion as text deltas.

        Args:
            messages: Ordered {"role", "content"} turns
            system: Optional system instruction
            temperature: Sampling temperature
            max_tokens: Completion token limit

        Yields:
            Text deltas in generation order

        Raises:
            LLMError: If the request fails
        """
        pass

    @abstractmethod
    async def complete(
        self,
        messages: list[dict[str, str]],
        system: Optional[str] = None,
        temperature: float = 0.2,
        max_tokens: int = 600,
    ) -> str:
        """
        Run a non-streaming chat completion.

        Returns:
            Completion text (stripped)

        Raises:
            LLMError: If the request fails
        """
        pass

    @abstractmethod
    async def describe_image(
        self,
        image_bytes: bytes,
        mime_type: str,
        prompt: str,
        max_tokens: int = 500,
    ) -> str:
        """
        Describe an image.

        Raises:
            LLMError: If the request fails or vision is unsupported
        """
        pass

    def with_model(self, model_id: str) -> "ILLMProvider":
        """
        Create a new provider instance using a different model.

        Default implementation returns self (no override).
        """
        return self
