from types import SimpleNamespace
from unittest.mock import patch

from chatclone.api import deps


def _base_settings() -> SimpleNamespace:
    return SimpleNamespace(
        LLM_PROVIDER="litellm",
        LITELLM_MODEL="groq/llama-3.3-70b-versatile",
        LITELLM_API_BASE="",
        LITELLM_API_KEY="",
        GEMINI_MODEL="gemini-2.0-flash",
        SPEECH_PROVIDER="litellm",
        LITELLM_TRANSCRIPTION_MODEL="groq/whisper-large-v3",
        WHISPER_MODEL_SIZE="base",
    )


def test_get_speech_provider_selects_whisper() -> None:
    settings = _base_settings()
    settings.SPEECH_PROVIDER = "whisper"
    provider = object()

    deps.get_speech_provider.cache_clear()
    with patch("chatclone.api.deps.get_settings", return_value=settings):
        with patch("chatclone.infrastructure.local.whisper_provider.WhisperProvider") as provider_cls:
            provider_cls.return_value = provider
            resolved = deps.get_speech_provider()
    deps.get_speech_provider.cache_clear()

    assert resolved is provider
    provider_cls.assert_called_once_with("base")


def test_get_speech_provider_selects_litellm() -> None:
    settings = _base_settings()
    settings.LITELLM_API_BASE = "http://proxy:4000"
    provider = object()

    deps.get_speech_provider.cache_clear()
    with patch("chatclone.api.deps.get_settings", return_value=settings):
        with patch(
            "chatclone.infrastructure.local.litellm_speech_provider.LiteLLMSpeechProvider"
        ) as provider_cls:
            provider_cls.return_value = provider
            resolved = deps.get_speech_provider()
    deps.get_speech_provider.cache_clear()

    assert resolved is provider
    provider_cls.assert_called_once_with(
        model_name="groq/whisper-large-v3",
        api_base="http://proxy:4000",
        api_key=None,
    )


def test_get_llm_provider_selects_litellm() -> None:
    settings = _base_settings()
    settings.LITELLM_API_KEY = "sk-test"
    provider = object()

    deps.get_llm_provider.cache_clear()
    with patch("chatclone.api.deps.get_settings", return_value=settings):
        with patch("chatclone.infrastructure.local.litellm_provider.LiteLLMProvider") as provider_cls:
            provider_cls.return_value = provider
            resolved = deps.get_llm_provider()
    deps.get_llm_provider.cache_clear()

    assert resolved is provider
    provider_cls.assert_called_once_with(
        model_name="groq/llama-3.3-70b-versatile",
        api_base=None,
        api_key="sk-test",
    )


def test_get_llm_provider_selects_gemini_api() -> None:
    settings = _base_settings()
    settings.LLM_PROVIDER = "gemini-api"
    provider = object()

    deps.get_llm_provider.cache_clear()
    with patch("chatclone.api.deps.get_settings", return_value=settings):
        with patch(
            "chatclone.infrastructure.local.gemini_api_provider.GeminiAPIProvider"
        ) as provider_cls:
            provider_cls.return_value = provider
            resolved = deps.get_llm_provider()
    deps.get_llm_provider.cache_clear()

    assert resolved is provider
    provider_cls.assert_called_once_with("gemini-2.0-flash")
